import logging
from functools import wraps
from flask import g, jsonify

from services import InvalidToken, ServiceError, get_iam, get_identity
from utils.allowlist import admin_emails, normalize_email
from utils.auth_context import verify_caller

logger = logging.getLogger(__name__)


def _allowlist_permits(email: str) -> bool:
    emails = admin_emails()
    # An empty allowlist means every verified identity is an admin.
    return not emails or normalize_email(email) in emails


def _project_member(email: str) -> bool:
    try:
        members = get_iam().get_members()
    except ServiceError as exc:
        logger.warning("live IAM membership check failed: %s", exc)
        return False
    return normalize_email(email) in members


def _verified_email(id_token: str):
    try:
        return get_identity().verify_id_token(id_token).email
    except ServiceError as exc:
        # unconfigured provider or upstream failure counts as not verified
        if not isinstance(exc, InvalidToken):
            logger.warning("token verification failed: %s", exc)
        return None


def is_authorized(id_token: str) -> bool:
    """Allowlist tier: allowlisted, or any verified identity when the list is empty."""
    email = _verified_email(id_token)
    if email is None:
        return False
    return _allowlist_permits(email)


def is_gcp_authorized(id_token: str) -> bool:
    """Live IAM tier: ignores the allowlist, fails closed on any fetch error."""
    email = _verified_email(id_token)
    if email is None:
        return False
    return _project_member(email)


def _gate(check, denied_message):
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            if not g.get("id_token"):
                return jsonify(error="Missing ID token"), 401

            identity = verify_caller()
            if identity is None or not check(identity.email):
                return jsonify(error=denied_message), 403

            return fn(*args, **kwargs)
        return wrapper
    return decorator


# Usage: @require_admin
require_admin = _gate(_allowlist_permits, "Not authorized")

# Usage: @require_project_member
require_project_member = _gate(_project_member, "Not authorized - requires GCP-synced admin")
