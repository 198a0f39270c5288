"""portal.integrations: outbound gateway modules.

All outbound HTTP calls to the hosted backend (auth provider, object
storage) go through a gateway in this package, never via bare `requests`
calls in services or blueprints.

Current gateways:
  backend_gateway.BackendGateway: hosted auth + storage REST API
"""
