from datetime import datetime
from models.db import db

class LoginFailure(db.Model):
    __tablename__ = "login_failures"

    id = db.Column(db.Integer, primary_key=True)

    # lower-cased, trimmed email; one row per identity
    email = db.Column(db.String(255), nullable=False, unique=True, index=True)

    attempts = db.Column(db.Integer, default=0, nullable=False)
    disabled = db.Column(db.Boolean, default=False, nullable=False)
    last_attempt_at = db.Column(db.DateTime, nullable=True)

    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def to_dict(self):
        return {
            "attempts": self.attempts,
            "disabled": self.disabled,
            "last_attempt": self.last_attempt_at.isoformat() if self.last_attempt_at else None,
        }
