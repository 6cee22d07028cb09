from datetime import datetime
from ..extensions import db


class StoredValue(db.Model):
    """One JSON value per (operator, key); the server-side local storage."""

    __tablename__ = "stored_value"

    id = db.Column(db.Integer, primary_key=True)
    owner_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False, index=True)
    key = db.Column(db.String(64), nullable=False)
    value_json = db.Column(db.Text, nullable=False, default="null")
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (db.UniqueConstraint("owner_id", "key", name="uq_stored_value_key"),)
