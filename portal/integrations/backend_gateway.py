"""
Hosted backend gateway (auth provider + object storage).

All outbound HTTP calls to the managed backend go through this class.
Direct `requests` calls in services or blueprints are FORBIDDEN.

  - Every call carries the public API key (``apikey`` header) and, where a
    user acts, that user's bearer access token so storage policies apply.
  - No retry: a failed call is reported once and the route answers 500.
  - Timeout: BACKEND_TIMEOUT seconds (default 30).
  - BACKEND_URL / BACKEND_ANON_KEY are read from app config at call time and
    are not validated at startup; a missing value fails the first call.

Testability: pass a mock `session` to BackendGateway() in tests, or
patch.object the module-level `backend_gateway` singleton.
"""

from __future__ import annotations

import logging
import time
from typing import Any
from urllib.parse import quote

import requests
from flask import current_app, has_app_context

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT = 30


class GatewayResult:
    """Structured return value from BackendGateway calls.

    Attributes:
        ok:             True if the call succeeded (HTTP 2xx + no exception).
        status_code:    HTTP status code (None if network-level failure).
        data:           Parsed JSON response body (dict or list), else None.
        error:          Human-readable error message or None.
        duration_ms:    Round-trip latency in milliseconds.
    """

    def __init__(
        self,
        ok: bool,
        status_code: int | None,
        data: dict | list | None,
        error: str | None,
        duration_ms: int,
    ) -> None:
        self.ok = ok
        self.status_code = status_code
        self.data = data
        self.error = error
        self.duration_ms = duration_ms

    def __repr__(self) -> str:
        return f"<GatewayResult ok={self.ok} status={self.status_code} error={self.error!r}>"


class BackendGateway:
    """Hosted backend REST gateway.

    Instantiate once at module level (module-level singleton pattern).

    Usage:
        from portal.integrations.backend_gateway import backend_gateway
        result = backend_gateway.get_user(access_token)
        if result.ok:
            user = result.data
    """

    def __init__(
        self,
        session: requests.Session | None = None,
        *,
        base_url: str | None = None,
        anon_key: str | None = None,
        timeout: int | None = None,
    ) -> None:
        self._session: requests.Session | None = session
        self._base_url = base_url
        self._anon_key = anon_key
        self._timeout = timeout

    # ── HTTP session / settings ──────────────────────────────────────────────

    @property
    def session(self) -> requests.Session:
        """Return (or lazily create) the requests.Session."""
        if self._session is None:
            self._session = requests.Session()
        return self._session

    def _setting(self, explicit: Any, key: str, default: Any = None) -> Any:
        if explicit is not None:
            return explicit
        if has_app_context():
            return current_app.config.get(key, default)
        return default

    @property
    def base_url(self) -> str:
        url = self._setting(self._base_url, "BACKEND_URL")
        if not url:
            raise RuntimeError("BACKEND_URL is not configured")
        return url.rstrip("/")

    @property
    def anon_key(self) -> str:
        key = self._setting(self._anon_key, "BACKEND_ANON_KEY")
        if not key:
            raise RuntimeError("BACKEND_ANON_KEY is not configured")
        return key

    @property
    def timeout(self) -> int:
        return int(self._setting(self._timeout, "BACKEND_TIMEOUT", _DEFAULT_TIMEOUT))

    def _headers(self, access_token: str | None = None, extra: dict | None = None) -> dict:
        headers = {
            "apikey": self.anon_key,
            "Authorization": f"Bearer {access_token or self.anon_key}",
            "Accept": "application/json",
        }
        if extra:
            headers.update(extra)
        return headers

    # ── Core request dispatcher ──────────────────────────────────────────────

    def _do_request(
        self,
        method: str,
        url: str,
        headers: dict,
        *,
        json_body: dict | list | None = None,
        data: bytes | None = None,
        params: dict | None = None,
    ) -> requests.Response:
        """Execute a single HTTP request, no retry logic here."""
        kwargs: dict[str, Any] = {"headers": headers, "timeout": self.timeout}
        if json_body is not None:
            kwargs["json"] = json_body
        if data is not None:
            kwargs["data"] = data
        if params:
            kwargs["params"] = params
        return self.session.request(method, url, **kwargs)

    def request(
        self,
        method: str,
        path: str,
        *,
        access_token: str | None = None,
        json_body: dict | list | None = None,
        data: bytes | None = None,
        params: dict | None = None,
        headers: dict | None = None,
    ) -> GatewayResult:
        """Execute one request against ``BACKEND_URL + path``.

        Returns:
            GatewayResult; never raises for HTTP or network failures.
            Callers check .ok. Missing configuration raises RuntimeError.
        """
        url = f"{self.base_url}{path}"
        all_headers = self._headers(access_token, headers)
        t0 = time.perf_counter()
        try:
            resp = self._do_request(
                method, url, all_headers,
                json_body=json_body, data=data, params=params,
            )
        except requests.Timeout:
            logger.warning("Backend request timed out: %s %s", method, path,
                           extra={"operation": path})
            return GatewayResult(
                ok=False, status_code=None, data=None,
                error=f"Request timed out after {self.timeout}s",
                duration_ms=int(self.timeout * 1000),
            )
        except requests.RequestException as exc:
            logger.warning("Backend network error: %s %s error=%s", method, path, exc,
                           extra={"operation": path})
            return GatewayResult(
                ok=False, status_code=None, data=None,
                error=str(exc)[:500], duration_ms=int((time.perf_counter() - t0) * 1000),
            )

        duration_ms = int((time.perf_counter() - t0) * 1000)
        try:
            body = resp.json() if resp.content else {}
        except ValueError:
            body = {}

        if resp.ok:
            return GatewayResult(
                ok=True, status_code=resp.status_code, data=body,
                error=None, duration_ms=duration_ms,
            )

        message = _error_message(body) or f"HTTP {resp.status_code}"
        logger.warning(
            "Backend request failed status=%d %s %s: %s",
            resp.status_code, method, path, message,
            extra={"operation": path, "status": resp.status_code},
        )
        return GatewayResult(
            ok=False, status_code=resp.status_code, data=body if isinstance(body, (dict, list)) else None,
            error=message, duration_ms=duration_ms,
        )

    # ── Auth provider ─────────────────────────────────────────────────────────

    def exchange_code_for_session(self, code: str, code_verifier: str | None = None) -> GatewayResult:
        """Trade an OAuth / email-link authorization code for a session.

        Returns:
            GatewayResult.data = {"access_token", "refresh_token", "user": {...}}
        """
        body: dict = {"auth_code": code}
        if code_verifier:
            body["code_verifier"] = code_verifier
        return self.request(
            "POST", "/auth/v1/token",
            params={"grant_type": "pkce"},
            json_body=body,
        )

    def get_user(self, access_token: str) -> GatewayResult:
        """Resolve an access token to the auth provider's user record."""
        return self.request("GET", "/auth/v1/user", access_token=access_token)

    # ── Object storage ────────────────────────────────────────────────────────

    def upload(
        self,
        bucket: str,
        path: str,
        content: bytes,
        *,
        content_type: str,
        access_token: str | None = None,
        upsert: bool = True,
    ) -> GatewayResult:
        """PUT-or-create an object at ``bucket/path``."""
        return self.request(
            "POST", f"/storage/v1/object/{bucket}/{_quote_path(path)}",
            access_token=access_token,
            data=content,
            headers={
                "Content-Type": content_type,
                "x-upsert": "true" if upsert else "false",
            },
        )

    def remove(self, bucket: str, paths: list[str], *, access_token: str | None = None) -> GatewayResult:
        """Delete objects from a bucket."""
        return self.request(
            "DELETE", f"/storage/v1/object/{bucket}",
            access_token=access_token,
            json_body={"prefixes": paths},
        )

    def create_signed_url(
        self,
        bucket: str,
        path: str,
        expires_in: int,
        *,
        access_token: str | None = None,
    ) -> GatewayResult:
        """Ask storage for a time-limited download URL.

        Returns:
            GatewayResult.data = {"signedURL": "/object/sign/<bucket>/<path>?token=..."}
        """
        return self.request(
            "POST", f"/storage/v1/object/sign/{bucket}/{_quote_path(path)}",
            access_token=access_token,
            json_body={"expiresIn": expires_in},
        )

    def absolute_storage_url(self, relative: str) -> str:
        """Turn the storage API's relative ``/object/...`` URL into an absolute one."""
        if relative.startswith("http://") or relative.startswith("https://"):
            return relative
        return f"{self.base_url}/storage/v1/{relative.lstrip('/')}"

    def public_url(self, bucket: str, path: str) -> str:
        """Public (unsigned) URL of an object. No network call."""
        return f"{self.base_url}/storage/v1/object/public/{bucket}/{_quote_path(path)}"


def _quote_path(path: str) -> str:
    return quote(path.lstrip("/"), safe="/")


def _error_message(body: Any) -> str | None:
    if not isinstance(body, dict):
        return None
    for key in ("error_description", "msg", "message", "error"):
        value = body.get(key)
        if value:
            return str(value)
    return None


# Module-level singleton. Import this instance in services.
# In tests, patch.object(backend_gateway, "get_user", ...) or replace it via
#   from portal.integrations import backend_gateway as gw_module
#   gw_module.backend_gateway = BackendGateway(session=mock_session)
backend_gateway = BackendGateway()
