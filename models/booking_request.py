from datetime import datetime
from models.db import db


class BookingRequest(db.Model):
    __tablename__ = "booking_requests"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    business = db.Column(db.String(160), nullable=True)
    town = db.Column(db.String(120), nullable=False)
    date = db.Column(db.String(10), nullable=False)  # requested day, YYYY-MM-DD
    description = db.Column(db.Text, nullable=True)
    phone = db.Column(db.String(30), nullable=True)
    email = db.Column(db.String(255), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "business": self.business or "",
            "town": self.town,
            "date": self.date,
            "description": self.description or "",
            "phone": self.phone or "",
            "email": self.email or "",
            "created_at": self.created_at.isoformat(),
        }
