"""
Pledge Portal
Contact domain model.

One ``contacts`` table holds every person the portal tracks; ``type`` selects
the subtype (lead, client, member, freelance, ...). Subtype-specific columns
are nullable and only meaningful for their subtype; free-form subtype data
lives in ``metadata`` and is validated per type in contact_service.
"""

from portal.models import db
from portal.models.base import RecordModel

CONTACT_TYPES = (
    "board-member",
    "external",
    "freelance",
    "member",
    "network",
    "partner",
    "waitlist",
    "blacklist",
    "lead",
    "client",
    "investor",
)


class Contact(RecordModel):
    """A person in the CRM, discriminated by ``type``."""

    __tablename__ = "contacts"

    first_name = db.Column(db.String(120), nullable=False)
    last_name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(255), nullable=True, index=True)
    phone = db.Column(db.String(50), nullable=True)
    type = db.Column(db.String(30), nullable=False, index=True, comment=" | ".join(CONTACT_TYPES))
    status = db.Column(db.String(30), nullable=False, default="active", comment="free text per type")
    notes = db.Column(db.Text, nullable=True)
    company = db.Column(db.String(200), nullable=True)
    position = db.Column(db.String(200), nullable=True)
    tags = db.Column(db.JSON, nullable=True)
    meta = db.Column("metadata", db.JSON, nullable=True)

    # board-member / waitlist / member
    joined_at = db.Column(db.Date, nullable=True)
    # waitlist
    service = db.Column(db.String(200), nullable=True)
    waitlist_position = db.Column(db.Integer, nullable=True)
    # blacklist
    reason = db.Column(db.Text, nullable=True)
    added_by = db.Column(db.String(36), nullable=True)
    expires_at = db.Column(db.DateTime(timezone=True), nullable=True)

    # lead
    lead_source = db.Column(db.String(100), nullable=True)
    lead_score = db.Column(db.Integer, nullable=True)
    source = db.Column(db.String(100), nullable=True)
    probability = db.Column(db.Float, nullable=True, comment="0..100")
    estimated_value = db.Column(db.Float, nullable=True)
    last_contacted_at = db.Column(db.DateTime(timezone=True), nullable=True)
    next_follow_up = db.Column(db.DateTime(timezone=True), nullable=True)

    # client
    client_since = db.Column(db.Date, nullable=True)
    first_contact_date = db.Column(db.Date, nullable=True)
    last_purchase_date = db.Column(db.Date, nullable=True)
    total_spent = db.Column(db.Float, nullable=True)
    industry = db.Column(db.String(100), nullable=True)

    # investor
    investment_stage = db.Column(
        db.String(30), nullable=True,
        comment="seed | series-a | series-b | series-c | growth | private-equity",
    )
    minimum_check_size = db.Column(db.Float, nullable=True)
    maximum_check_size = db.Column(db.Float, nullable=True)
    last_contact_date = db.Column(db.Date, nullable=True)
    investment_status = db.Column(
        db.String(30), nullable=True,
        comment="active | inactive | following | not-interested",
    )

    __table_args__ = (
        db.Index("ix_contacts_type_status", "type", "status"),
    )

    def __repr__(self):
        return f"<Contact {self.id} {self.type} {self.first_name} {self.last_name}>"
