import logging

import httpx
from flask import current_app

logger = logging.getLogger(__name__)


def captcha_enabled() -> bool:
    return bool(current_app.config.get("TURNSTILE_SECRET_KEY"))


def verify_captcha(token: str, remote_ip: str = None, client: httpx.Client = None):
    """
    Returns (ok, error_message). Only called when a secret is configured.
    """
    if not token:
        return False, "Captcha verification required"

    form = {"secret": current_app.config["TURNSTILE_SECRET_KEY"], "response": token}
    if remote_ip:
        form["remoteip"] = remote_ip

    http = client or httpx.Client()
    try:
        resp = http.post(current_app.config["TURNSTILE_VERIFY_URL"], data=form)
        payload = resp.json()
    except (httpx.HTTPError, ValueError) as exc:
        logger.warning("turnstile verify error: %s", exc)
        return False, "Captcha verification error. Try again."
    finally:
        if client is None:
            http.close()

    if not payload.get("success"):
        return False, "Captcha failed. Please retry."
    return True, None
