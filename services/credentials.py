import base64
import binascii
import json

from services.errors import NotConfigured


def parse_service_account(raw: str, label: str = "FIREBASE_SERVICE_ACCOUNT") -> dict:
    """
    Accepts service-account JSON as a raw string or base64-encoded string.
    Hosted env vars often store private_key with escaped newlines; those are
    turned back into real ones.
    """
    if not raw:
        raise NotConfigured(f"{label} env var not set")

    text = raw.strip()
    if not text.startswith("{"):
        try:
            text = base64.b64decode(text).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError):
            raise NotConfigured(f"{label} does not appear to be JSON or base64-encoded JSON")

    try:
        svc = json.loads(text)
    except ValueError:
        raise NotConfigured(f"{label} must be valid JSON (or base64-encoded JSON)")

    key = svc.get("private_key")
    if isinstance(key, str):
        svc["private_key"] = key.replace("\\n", "\n")
    return svc
