from datetime import datetime
from models.db import db


class AdminEmail(db.Model):
    """One allowlist entry. The table as a whole is a flat key -> email map."""

    __tablename__ = "admin_emails"

    id = db.Column(db.Integer, primary_key=True)
    key = db.Column(db.String(32), nullable=False, index=True)
    email = db.Column(db.String(255), nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
