import time

from models import db
from models.admin_email import AdminEmail
from utils.payloads import EMAIL_RE


def normalize_email(value: str) -> str:
    return (value or "").strip().lower()


def is_valid_email(value: str) -> bool:
    return isinstance(value, str) and len(value) <= 255 and bool(EMAIL_RE.match(value))


def admin_emails() -> list:
    """Distinct normalized allowlist emails, oldest entry first."""
    out = []
    for row in AdminEmail.query.order_by(AdminEmail.id.asc()).all():
        email = normalize_email(row.email)
        if email and email not in out:
            out.append(email)
    return out


def is_email_allowlisted(email: str) -> bool:
    return normalize_email(email) in admin_emails()


def add_admin_email(email: str) -> bool:
    """Returns False when the email was already on the list."""
    email = normalize_email(email)
    if is_email_allowlisted(email):
        return False
    # keys are millisecond timestamps
    db.session.add(AdminEmail(key=str(int(time.time() * 1000)), email=email))
    db.session.commit()
    return True


def remove_admin_email(email: str) -> int:
    email = normalize_email(email)
    rows = [r for r in AdminEmail.query.all() if normalize_email(r.email) == email]
    for r in rows:
        db.session.delete(r)
    db.session.commit()
    return len(rows)
