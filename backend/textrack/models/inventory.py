from __future__ import annotations

from ..extensions import db
from textrack.time_utils import to_utc_z, to_iso_date


PRODUCT_STATUSES = ("pending", "priority", "completed")

STATUS_LABELS = {
    "pending": "Pending",
    "priority": "Priority",
    "completed": "Completed",
}

# Shop-floor labels; search matches these as well as STATUS_LABELS
STATUS_LABELS_ES = {
    "pending": "Pendiente",
    "priority": "Prioritario",
    "completed": "Completado",
}


class Product(db.Model):
    """
    Live production order.

    QUANTITY INVARIANT:
    0 <= quantity_completed <= quantity. quantity_completed only moves
    through progress additions; edits never write it directly.

    STATUS:
    - pending <-> priority: manual, via edit
    - completed: set automatically once quantity_completed reaches quantity
    A product leaves this table only through archival into sales_history.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.CheckConstraint("quantity > 0", name="ck_products_quantity_positive"),
        db.CheckConstraint(
            "quantity_completed >= 0 AND quantity_completed <= quantity",
            name="ck_products_quantity_completed_range",
        ),
        db.CheckConstraint("price_cents >= 0", name="ck_products_price_non_negative"),
        db.Index("ix_products_client_name", "client_name"),
        db.Index("ix_products_status_due", "status", "due_date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    client_name = db.Column(db.String(255), nullable=False)
    product_type = db.Column(db.String(128), nullable=False)
    size = db.Column(db.String(64), nullable=False, default="")
    color = db.Column(db.String(64), nullable=False, default="")
    notes = db.Column(db.Text, nullable=True)

    quantity = db.Column(db.Integer, nullable=False)
    quantity_completed = db.Column(db.Integer, nullable=False, default=0)

    status = db.Column(db.String(16), nullable=False, default="pending", index=True)
    due_date = db.Column(db.Date, nullable=False)

    # Authoritative storage in cents (frontend may only format for display)
    price_cents = db.Column(db.Integer, nullable=False, default=0)

    version_id = db.Column(db.Integer, nullable=False, default=1)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), index=True)
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    __mapper_args__ = {"version_id_col": version_id}

    @property
    def remaining(self) -> int:
        return self.quantity - (self.quantity_completed or 0)

    def __repr__(self) -> str:
        return f"<Product id={self.id} client={self.client_name!r} type={self.product_type!r} {self.quantity_completed}/{self.quantity}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "client_name": self.client_name,
            "product_type": self.product_type,
            "size": self.size,
            "color": self.color,
            "notes": self.notes or "",
            "quantity": self.quantity,
            "quantity_completed": self.quantity_completed,
            "remaining": self.remaining,
            "status": self.status,
            "due_date": to_iso_date(self.due_date),
            "price_cents": self.price_cents,
            "version_id": self.version_id,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class ProgressEvent(db.Model):
    """
    Append-only audit row, one per progress addition.

    product_id is a plain column, not a foreign key: the audit trail
    outlives the live product once it is archived.
    """
    __tablename__ = "progress_history"
    __table_args__ = (
        db.Index("ix_progress_history_product_created", "product_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(db.Integer, nullable=False)

    quantity_added = db.Column(db.Integer, nullable=False)
    quantity_before = db.Column(db.Integer, nullable=False)
    quantity_after = db.Column(db.Integer, nullable=False)
    notes = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "product_id": self.product_id,
            "quantity_added": self.quantity_added,
            "quantity_before": self.quantity_before,
            "quantity_after": self.quantity_after,
            "notes": self.notes or "",
            "created_at": to_utc_z(self.created_at),
        }
