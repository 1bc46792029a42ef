import hmac
import logging
from datetime import datetime
from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from models import db
from models.login_failure import LoginFailure
from services import ServiceError, get_identity
from utils.allowlist import normalize_email

logger = logging.getLogger(__name__)

SECRET_HEADER = "X-Admin-Secret"


def secret_matches(presented: str) -> bool:
    """An unset server secret rejects every caller."""
    expected = current_app.config.get("ADMIN_ACTION_SECRET") or ""
    if not expected or not presented:
        return False
    return hmac.compare_digest(presented.encode("utf-8"), expected.encode("utf-8"))


def _disable_upstream(email: str) -> bool:
    identity = get_identity()
    try:
        user = identity.get_user_by_email(email)
        identity.set_disabled(user.uid, True)
    except ServiceError as exc:
        logger.warning("could not disable %s after repeated failures: %s", email, exc)
        return False
    logger.info("disabled %s after repeated login failures", email)
    return True


def register_failure(email: str) -> tuple[int, bool]:
    """
    Counts one failed login. Returns (attempts, disabled).
    Crossing MAX_LOGIN_ATTEMPTS asks the identity provider to disable the
    account; if that fails the count still sticks and disabled stays False.
    """
    email = normalize_email(email)
    now = datetime.utcnow()

    # no lock around the read-modify-write; concurrent failures may under-count
    row = LoginFailure.query.filter_by(email=email).first()
    if not row:
        row = LoginFailure(email=email, attempts=0, disabled=False)
        db.session.add(row)

    row.attempts = (row.attempts or 0) + 1
    row.last_attempt_at = now

    max_attempts = current_app.config.get("MAX_LOGIN_ATTEMPTS", 3)
    if row.attempts >= max_attempts and not row.disabled:
        row.disabled = _disable_upstream(email)

    db.session.commit()
    return row.attempts, row.disabled


def reenable(email: str) -> None:
    """
    Enables the account upstream, then clears the failure record so the next
    failure starts again at 1. Upstream errors propagate; record cleanup
    errors are only logged.
    """
    email = normalize_email(email)
    identity = get_identity()
    user = identity.get_user_by_email(email)
    identity.set_disabled(user.uid, False)

    try:
        LoginFailure.query.filter_by(email=email).delete()
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.warning("failed to clear login failures for %s: %s", email, exc)


def list_failures() -> dict:
    rows = LoginFailure.query.order_by(LoginFailure.email.asc()).all()
    return {r.email: r.to_dict() for r in rows}
