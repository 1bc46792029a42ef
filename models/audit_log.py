import json
from datetime import datetime
from models.db import db


class AuditLog(db.Model):
    """Who did what to which record. Written by utils.audit.log_event."""

    __tablename__ = "audit_logs"

    id = db.Column(db.Integer, primary_key=True)
    actor_email = db.Column(db.String(255), nullable=True)  # empty for public submissions and the secret hook
    action = db.Column(db.String(80), nullable=False)  # LOGIN_FAILURE, EVENT_CREATE, ...
    entity = db.Column(db.String(80), nullable=True)  # event, menu, user, booking_request
    entity_id = db.Column(db.String(255), nullable=True)

    ip = db.Column(db.String(64), nullable=True)
    user_agent = db.Column(db.String(255), nullable=True)
    metadata_json = db.Column(db.Text, nullable=True)

    timestamp = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "actor_email": self.actor_email,
            "action": self.action,
            "entity": self.entity,
            "entity_id": self.entity_id,
            "ip": self.ip,
            "metadata": json.loads(self.metadata_json) if self.metadata_json else None,
        }
