import logging

import firebase_admin
from firebase_admin import credentials

from services.credentials import parse_service_account

logger = logging.getLogger(__name__)

APP_NAME = "foodtruck"


def build_firebase_app(service_account_raw, storage_bucket=None):
    """
    Returns an initialized firebase_admin App, or None when no service account
    is configured. Re-uses an already initialized app of the same name.
    """
    if not service_account_raw:
        logger.warning("FIREBASE_SERVICE_ACCOUNT not set; identity and storage calls will fail")
        return None

    try:
        return firebase_admin.get_app(APP_NAME)
    except ValueError:
        pass

    svc = parse_service_account(service_account_raw)
    options = {}
    if storage_bucket:
        options["storageBucket"] = storage_bucket
    return firebase_admin.initialize_app(credentials.Certificate(svc), options, name=APP_NAME)
