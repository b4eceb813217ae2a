from __future__ import annotations

from ..extensions import db
from textrack.time_utils import to_utc_z, to_iso_date


ARCHIVE_ACTIONS = ("completed", "deleted")


class ArchivedSale(db.Model):
    """
    Immutable snapshot of a product taken when it left the live table.

    total_value_cents is price_cents * quantity_completed at archival time,
    so a deleted order only carries the value of what was actually made.

    original_product_id is unique: a product id is archived at most once,
    which keeps the live set and the history disjoint.
    """
    __tablename__ = "sales_history"
    __table_args__ = (
        db.UniqueConstraint("original_product_id", name="uq_sales_history_original_product"),
        db.Index("ix_sales_history_archived_at", "archived_at"),
        db.Index("ix_sales_history_action", "action"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    original_product_id = db.Column(db.Integer, nullable=False)

    client_name = db.Column(db.String(255), nullable=False)
    product_type = db.Column(db.String(128), nullable=False)
    size = db.Column(db.String(64), nullable=True)
    color = db.Column(db.String(64), nullable=True)
    notes = db.Column(db.Text, nullable=True)
    status = db.Column(db.String(16), nullable=True)

    quantity = db.Column(db.Integer, nullable=False)
    quantity_completed = db.Column(db.Integer, nullable=False)
    price_cents = db.Column(db.Integer, nullable=False)
    total_value_cents = db.Column(db.Integer, nullable=False)

    due_date = db.Column(db.Date, nullable=True)
    completed_date = db.Column(db.Date, nullable=True)

    action = db.Column(db.String(16), nullable=False)
    archived_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def __repr__(self) -> str:
        return f"<ArchivedSale id={self.id} product={self.original_product_id} action={self.action}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "original_product_id": self.original_product_id,
            "client_name": self.client_name,
            "product_type": self.product_type,
            "size": self.size,
            "color": self.color,
            "notes": self.notes or "",
            "status": self.status,
            "quantity": self.quantity,
            "quantity_completed": self.quantity_completed,
            "price_cents": self.price_cents,
            "total_value_cents": self.total_value_cents,
            "due_date": to_iso_date(self.due_date),
            "completed_date": to_iso_date(self.completed_date),
            "action": self.action,
            "archived_at": to_utc_z(self.archived_at),
        }
