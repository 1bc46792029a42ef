from datetime import datetime
from models.db import db

DEFAULT_MENU_NAME = "Default Menu"

class Menu(db.Model):
    __tablename__ = "menus"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)

    # [{id, title, items: [{id, name, desc, price, photo_url, photo_path, photo_updated_at}]}]
    sections = db.Column(db.JSON, nullable=False, default=list)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "sections": self.sections or [],
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
