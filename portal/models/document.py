"""
Pledge Portal
Document model.

The row is a pointer plus metadata; the binary payload lives in hosted
object storage under ``file_path``. Expense records (comptabilité) are
documents too, and the expense PDF endpoints attach files to them.
"""

from portal.models import db
from portal.models.base import RecordModel

DOCUMENT_STATUSES = ("Draft", "Active", "Archived", "Deleted")


class Document(RecordModel):
    __tablename__ = "documents"

    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    document_type_id = db.Column(db.String(36), nullable=True)
    custom_type = db.Column(db.String(100), nullable=True)
    file_path = db.Column(db.String(500), nullable=True)
    file_name = db.Column(db.String(255), nullable=True)
    file_size = db.Column(db.Integer, nullable=True)
    file_type = db.Column(db.String(100), nullable=True)
    version = db.Column(db.String(20), nullable=True, default="1.0")
    status = db.Column(db.String(20), nullable=False, default="Draft", comment=" | ".join(DOCUMENT_STATUSES))
    project_id = db.Column(db.String(36), nullable=True, index=True, comment="opaque projects.id")
    contact_id = db.Column(db.String(36), nullable=True, index=True, comment="opaque contacts.id")
    created_by = db.Column(db.String(36), nullable=True)
    last_modified_by = db.Column(db.String(36), nullable=True)
    is_template = db.Column(db.Boolean, nullable=False, default=False)
    tags = db.Column(db.JSON, nullable=True)
    meta = db.Column("metadata", db.JSON, nullable=True)

    def clear_file(self, modified_by=None):
        """Detach the stored file from this row."""
        self.file_path = None
        self.file_name = None
        self.file_size = None
        self.file_type = None
        self.last_modified_by = modified_by

    def __repr__(self):
        return f"<Document {self.id} {self.title}>"
