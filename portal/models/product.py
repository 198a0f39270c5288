"""Product catalogue model (services, packages, memberships, ...)."""

from portal.models import db
from portal.models.base import RecordModel

PRODUCT_TYPES = ("service", "package", "membership", "software", "tool", "hardware")
PRODUCT_STATUSES = ("active", "discontinued", "draft", "archived")


class Product(RecordModel):
    __tablename__ = "products"

    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    type = db.Column(db.String(20), nullable=False, default="service", comment=" | ".join(PRODUCT_TYPES))
    status = db.Column(db.String(20), nullable=False, default="draft", comment=" | ".join(PRODUCT_STATUSES))
    sku = db.Column(db.String(64), nullable=True)
    price = db.Column(db.Float, nullable=True)
    cost = db.Column(db.Float, nullable=True)
    currency = db.Column(db.String(3), nullable=True, default="EUR")
    supplier_name = db.Column(db.String(200), nullable=True)
    tags = db.Column(db.JSON, nullable=True)
    meta = db.Column("metadata", db.JSON, nullable=True)

    def __repr__(self):
        return f"<Product {self.id} {self.name}>"
