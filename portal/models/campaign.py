"""Marketing campaign model."""

from portal.models import db
from portal.models.base import RecordModel

CAMPAIGN_STATUSES = ("draft", "planned", "active", "paused", "completed", "cancelled")
CAMPAIGN_OBJECTIVES = ("awareness", "consideration", "conversion", "acquisition", "loyalty", "advocacy")
CAMPAIGN_TYPES = ("ambassador", "referral", "influencer", "social", "email", "content", "event", "other")


class Campaign(RecordModel):
    __tablename__ = "campaigns"

    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    campaign_type = db.Column(db.String(30), nullable=False, default="other",
                              comment=" | ".join(CAMPAIGN_TYPES))
    status = db.Column(db.String(20), nullable=False, default="draft",
                       comment=" | ".join(CAMPAIGN_STATUSES))
    objective = db.Column(db.String(30), nullable=False, default="awareness",
                          comment=" | ".join(CAMPAIGN_OBJECTIVES))
    start_date = db.Column(db.Date, nullable=True)
    end_date = db.Column(db.Date, nullable=True)
    budget = db.Column(db.Float, nullable=True)
    spent = db.Column(db.Float, nullable=True)
    target_audience = db.Column(db.Text, nullable=True)
    kpis = db.Column(db.JSON, nullable=True, comment="impressions, engagement, conversions, ...")
    ambassadeurs = db.Column(db.JSON, nullable=True, comment="ambassador contact ids")
    rewards = db.Column(db.JSON, nullable=True, comment="[{type, description, value}]")
    created_by = db.Column(db.String(36), nullable=True)
    updated_by = db.Column(db.String(36), nullable=True)
    meta = db.Column("metadata", db.JSON, nullable=True)

    def __repr__(self):
        return f"<Campaign {self.id} {self.name}>"
