"""Project domain model."""

from portal.models import db
from portal.models.base import RecordModel

PROJECT_TYPES = ("Client", "Internal", "Partner", "Lead")
PROJECT_STATUSES = ("Active", "Completed", "On Hold", "Cancelled")
PROJECT_PRIORITIES = ("Low", "Medium", "High", "Urgent")


class Project(RecordModel):
    """Tracked engagement. ``progress`` is independent of ``status``."""

    __tablename__ = "projects"

    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    project_type = db.Column(db.String(20), nullable=False, default="Internal",
                             comment=" | ".join(PROJECT_TYPES))
    status = db.Column(db.String(20), nullable=False, default="Active",
                       comment=" | ".join(PROJECT_STATUSES))
    priority = db.Column(db.String(20), nullable=True, default="Medium",
                         comment=" | ".join(PROJECT_PRIORITIES))
    start_date = db.Column(db.Date, nullable=True)
    end_date = db.Column(db.Date, nullable=True)
    budget = db.Column(db.Float, nullable=True)
    progress = db.Column(db.Integer, nullable=True, default=0, comment="0..100")
    primary_contact_id = db.Column(db.String(36), nullable=True, comment="opaque contacts.id")
    team_contacts = db.Column(db.JSON, nullable=True, comment="[{id, role}]")
    contact_roles = db.Column(db.JSON, nullable=True, comment="{contact_id: {role, permissions, notes}}")
    tags = db.Column(db.JSON, nullable=True)
    meta = db.Column("metadata", db.JSON, nullable=True)

    def __repr__(self):
        return f"<Project {self.id} {self.name}>"
