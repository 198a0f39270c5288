"""
User profile model.

Identity is owned by the hosted auth provider; ``id`` is the provider's user
id. The auth callback creates or refreshes this row on every sign-in.
"""

from portal.models import db
from portal.models.base import RecordModel


class UserProfile(RecordModel):
    __tablename__ = "users"

    email = db.Column(db.String(255), nullable=True, unique=True)
    first_name = db.Column(db.String(120), nullable=True)
    last_name = db.Column(db.String(120), nullable=True)
    avatar_url = db.Column(db.String(500), nullable=True)
    email_verified = db.Column(db.Boolean, nullable=False, default=False)
    last_login = db.Column(db.DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<UserProfile {self.id} {self.email}>"
