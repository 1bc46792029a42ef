from flask import Blueprint, jsonify, request

from models.audit_log import AuditLog
from security.bruteforce import SECRET_HEADER, list_failures, reenable, register_failure, secret_matches
from security.rbac import require_admin, require_project_member
from services import UserNotFound, get_identity
from utils.allowlist import (
    add_admin_email,
    admin_emails,
    is_valid_email,
    normalize_email,
    remove_admin_email,
)
from utils.audit import log_event

admin_bp = Blueprint("admin", __name__, url_prefix="/api/admin")


def _body_email():
    data = request.get_json(silent=True) or {}
    return normalize_email(str(data.get("email") or "")), data


# ---------- login-failure hook (shared secret) ----------
@admin_bp.post("/register-login-failure")
def register_login_failure():
    email, _ = _body_email()
    if not is_valid_email(email):
        return jsonify(error="email required"), 400

    if not secret_matches(request.headers.get(SECRET_HEADER, "")):
        return jsonify(error="missing or invalid secret"), 401

    attempts, disabled = register_failure(email)
    log_event(
        "LOGIN_FAILURE",
        entity="user",
        entity_id=email,
        metadata={"attempts": attempts, "disabled": disabled},
    )
    return jsonify(attempts=attempts, disabled=disabled), 200


@admin_bp.get("/login-failures")
@require_admin
def login_failures():
    return jsonify(failures=list_failures()), 200


# ---------- account disable / enable (live IAM tier) ----------
@admin_bp.post("/disable-user")
@require_project_member
def disable_user():
    email, _ = _body_email()
    if not email:
        return jsonify(error="email required"), 400

    identity = get_identity()
    try:
        user = identity.get_user_by_email(email)
        identity.set_disabled(user.uid, True)
    except UserNotFound:
        return jsonify(error="User not found"), 404

    log_event("USER_DISABLE", entity="user", entity_id=email)
    return jsonify(success=True), 200


@admin_bp.post("/enable-user")
@require_project_member
def enable_user():
    email, _ = _body_email()
    if not email:
        return jsonify(error="email required"), 400

    try:
        reenable(email)
    except UserNotFound:
        return jsonify(error="User not found"), 404

    log_event("USER_ENABLE", entity="user", entity_id=email)
    return jsonify(success=True), 200


# ---------- admin allowlist (live IAM tier) ----------
@admin_bp.get("/admin-emails")
@require_project_member
def list_admin_emails():
    return jsonify(members=admin_emails(), gcp_admin=True), 200


@admin_bp.post("/admin-emails")
@require_project_member
def add_admin():
    email, _ = _body_email()
    if not is_valid_email(email):
        return jsonify(error="Valid email required"), 400

    added = add_admin_email(email)
    if not added:
        return jsonify(success=True, message=f"{email} is already on the admin allowlist"), 200

    log_event("ADMIN_EMAIL_ADD", entity="admin_email", entity_id=email)
    return jsonify(success=True, message=f"Added {email} to admin allowlist"), 200


@admin_bp.delete("/admin-emails")
@require_project_member
def remove_admin():
    email, _ = _body_email()
    if not is_valid_email(email):
        return jsonify(error="Valid email required"), 400

    if not admin_emails():
        return jsonify(error="No admin allowlist found"), 404

    removed = remove_admin_email(email)
    log_event("ADMIN_EMAIL_REMOVE", entity="admin_email", entity_id=email, metadata={"removed": removed})
    return jsonify(success=True, message=f"Removed {email} from admin allowlist"), 200


# ---------- identity-provider users (allowlist tier) ----------
@admin_bp.get("/users")
@require_admin
def list_users():
    users = get_identity().list_users(limit=1000)
    return jsonify(users=[u.to_dict() for u in users]), 200


@admin_bp.post("/users")
@require_admin
def create_user():
    data = request.get_json(silent=True) or {}
    email = normalize_email(str(data.get("email") or ""))
    password = data.get("password") or ""
    display_name = (data.get("displayName") or "").strip() or None

    if not email or not password:
        return jsonify(error="email and password required"), 400
    if not is_valid_email(email):
        return jsonify(error="Valid email required"), 400

    user = get_identity().create_user(email, password, display_name=display_name)

    if data.get("makeAdmin"):
        add_admin_email(email)

    log_event("USER_CREATE", entity="user", entity_id=user.uid, metadata={"email": email, "make_admin": bool(data.get("makeAdmin"))})
    return jsonify(uid=user.uid, email=user.email), 200


@admin_bp.delete("/users")
@require_admin
def delete_user():
    data = request.get_json(silent=True) or {}
    uid = (data.get("uid") or "").strip()
    email = normalize_email(str(data.get("email") or ""))
    if not uid and not email:
        return jsonify(error="uid or email required"), 400

    identity = get_identity()
    try:
        if not uid:
            uid = identity.get_user_by_email(email).uid
        identity.delete_user(uid)
    except UserNotFound:
        return jsonify(error="User not found"), 404

    if data.get("removeFromAllowlist") and email:
        remove_admin_email(email)

    log_event("USER_DELETE", entity="user", entity_id=uid, metadata={"email": email or None})
    return jsonify(success=True), 200


# ---------- custom admin claim (live IAM tier) ----------
@admin_bp.post("/set-admin-claim")
@require_project_member
def set_admin_claim():
    email, data = _body_email()
    if not email:
        return jsonify(error="email required"), 400
    admin = data.get("admin") is not False

    identity = get_identity()
    try:
        user = identity.get_user_by_email(email)
        identity.set_admin_claim(user.uid, admin)
    except UserNotFound:
        return jsonify(error="User not found"), 404

    log_event("ADMIN_CLAIM_SET", entity="user", entity_id=user.uid, metadata={"admin": admin})
    return jsonify(uid=user.uid, email=user.email, admin=admin), 200


# ---------- audit trail (live IAM tier) ----------
@admin_bp.get("/audit-logs")
@require_project_member
def list_audit_logs():
    limit = request.args.get("limit", type=int) or 200
    limit = max(1, min(limit, 500))

    q = AuditLog.query
    action = request.args.get("action")
    if action:
        q = q.filter(AuditLog.action == action)
    actor = normalize_email(request.args.get("actor") or "")
    if actor:
        q = q.filter(AuditLog.actor_email == actor)

    rows = q.order_by(AuditLog.timestamp.desc(), AuditLog.id.desc()).limit(limit).all()
    return jsonify(logs=[r.to_dict() for r in rows]), 200
