from flask import current_app

from services.errors import InvalidToken, NotConfigured, ServiceError, UserNotFound

IDENTITY_KEY = "foodtruck.identity"
IAM_KEY = "foodtruck.iam"
IMAGES_KEY = "foodtruck.images"


def init_services(app, identity=None, iam=None, images=None):
    """
    Builds the long-lived collaborator clients once per app. Anything passed
    in (fakes in tests) wins over the configured defaults.
    """
    firebase_app = None
    if identity is None or images is None:
        from services.firebase import build_firebase_app
        firebase_app = build_firebase_app(
            app.config.get("FIREBASE_SERVICE_ACCOUNT"),
            app.config.get("FIREBASE_STORAGE_BUCKET"),
        )

    if identity is None:
        from services.identity import IdentityProvider
        identity = IdentityProvider(firebase_app)

    if images is None:
        from services.storage import ImageStore
        images = ImageStore(firebase_app, app.config.get("FIREBASE_STORAGE_BUCKET"))

    if iam is None:
        from services.iam import ProjectIamClient
        iam = ProjectIamClient(
            app.config.get("GOOGLE_SERVICE_ACCOUNT") or app.config.get("FIREBASE_SERVICE_ACCOUNT"),
            app.config.get("GCP_PROJECT_ID"),
            cache_ttl=app.config.get("IAM_CACHE_TTL_SECONDS", 60),
        )

    app.extensions[IDENTITY_KEY] = identity
    app.extensions[IAM_KEY] = iam
    app.extensions[IMAGES_KEY] = images


def get_identity():
    return current_app.extensions[IDENTITY_KEY]


def get_iam():
    return current_app.extensions[IAM_KEY]


def get_images():
    return current_app.extensions[IMAGES_KEY]
