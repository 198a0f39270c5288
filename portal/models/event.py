"""Calendar event model. No overlap or recurrence model."""

from portal.models import db
from portal.models.base import RecordModel

EVENT_STATUSES = ("scheduled", "cancelled", "completed")
EVENT_PRIORITIES = (-1, 0, 1)


class Event(RecordModel):
    __tablename__ = "events"

    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    event_type = db.Column(db.String(50), nullable=True, index=True)
    start_datetime = db.Column(db.DateTime(timezone=True), nullable=False, index=True)
    end_datetime = db.Column(db.DateTime(timezone=True), nullable=False)
    is_all_day = db.Column(db.Boolean, nullable=False, default=False)
    location = db.Column(db.String(255), nullable=True)
    priority = db.Column(db.Integer, nullable=False, default=0, comment="-1 low | 0 normal | 1 high")
    status = db.Column(db.String(20), nullable=False, default="scheduled", comment=" | ".join(EVENT_STATUSES))
    color = db.Column(db.String(20), nullable=True)
    project_id = db.Column(db.String(36), nullable=True)
    created_by = db.Column(db.String(36), nullable=True)
    meta = db.Column("metadata", db.JSON, nullable=True)

    def __repr__(self):
        return f"<Event {self.id} {self.title}>"
