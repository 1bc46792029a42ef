import logging
from functools import wraps
from flask import g, jsonify, request

from services import InvalidToken, ServiceError, get_identity

logger = logging.getLogger(__name__)


def bearer_token_from_request():
    header = request.headers.get("Authorization") or ""
    if not header.startswith("Bearer "):
        return None
    token = header[len("Bearer "):].strip()
    return token or None


def load_current_identity():
    g.id_token = bearer_token_from_request()
    g.identity = None


def verify_caller():
    """
    Verifies the request's bearer token once per request.
    Returns the VerifiedIdentity or None when the token is missing/invalid.
    """
    if g.get("identity") is not None:
        return g.identity
    token = g.get("id_token")
    if not token:
        return None
    try:
        g.identity = get_identity().verify_id_token(token)
    except InvalidToken:
        return None
    except ServiceError as exc:
        logger.warning("token verification failed: %s", exc)
        return None
    return g.identity


def token_required(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if not g.get("id_token"):
            return jsonify(error="Unauthorized"), 401
        if verify_caller() is None:
            return jsonify(error="Invalid token"), 401
        return fn(*args, **kwargs)
    return wrapper
