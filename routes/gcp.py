from datetime import datetime

from flask import Blueprint, jsonify

from models import db
from models.project_member import ProjectMember
from security.rbac import require_admin
from services import get_iam
from utils.audit import log_event

gcp_bp = Blueprint("gcp", __name__, url_prefix="/api/gcp")


@gcp_bp.get("/list-project-members")
@require_admin
def list_project_members():
    members = get_iam().get_members(force_refresh=True)
    return jsonify(members=members), 200


@gcp_bp.post("/sync-project-members")
@require_admin
def sync_project_members():
    """Snapshots the live member list into the project_members table."""
    members = get_iam().get_members(force_refresh=True)
    now = datetime.utcnow()

    ProjectMember.query.delete()
    for email in members:
        db.session.add(ProjectMember(email=email, synced_at=now))
    db.session.commit()

    log_event("PROJECT_MEMBERS_SYNC", entity="project_member", metadata={"count": len(members)})
    return jsonify(synced=len(members), members=members), 200
