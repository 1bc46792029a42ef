from datetime import datetime
from models.db import db

class Event(db.Model):
    __tablename__ = "events"

    id = db.Column(db.Integer, primary_key=True)

    date_str = db.Column(db.String(10), nullable=False, index=True)  # YYYY-MM-DD
    title = db.Column(db.String(160), nullable=False)
    location = db.Column(db.String(255), nullable=True)

    # canonical "h:mm AM/PM" strings (or whatever the normalizer gave back)
    start_time = db.Column(db.String(20), nullable=True)
    end_time = db.Column(db.String(20), nullable=True)

    menu_id = db.Column(db.Integer, db.ForeignKey("menus.id"), nullable=True)

    maps_url = db.Column(db.String(512), nullable=True)
    maps_label = db.Column(db.String(255), nullable=True)
    maps_provider = db.Column(db.String(20), nullable=True)  # openstreetmap | google
    lat = db.Column(db.Float, nullable=True)
    lng = db.Column(db.Float, nullable=True)

    is_published = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "date": self.date_str,
            "title": self.title,
            "location": self.location or "",
            "start_time": self.start_time or "",
            "end_time": self.end_time or "",
            "menu_id": self.menu_id,
            "maps_url": self.maps_url or "",
            "maps_label": self.maps_label or "",
            "maps_provider": self.maps_provider,
            "maps_coords": {"lat": self.lat, "lng": self.lng} if self.lat is not None and self.lng is not None else None,
            "is_published": self.is_published,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
