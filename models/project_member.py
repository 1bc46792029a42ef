from datetime import datetime
from models.db import db


class ProjectMember(db.Model):
    __tablename__ = "project_members"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), nullable=False, unique=True)
    synced_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
