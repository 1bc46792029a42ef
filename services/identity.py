import logging
from dataclasses import dataclass, field

from firebase_admin import auth
from firebase_admin.exceptions import FirebaseError

from services.errors import InvalidToken, NotConfigured, ServiceError, UserNotFound

logger = logging.getLogger(__name__)


@dataclass
class VerifiedIdentity:
    uid: str
    email: str


@dataclass
class IdentityUser:
    uid: str
    email: str
    display_name: str = None
    disabled: bool = False
    provider_ids: list = field(default_factory=list)

    def to_dict(self):
        return {
            "uid": self.uid,
            "email": self.email,
            "displayName": self.display_name,
            "disabled": self.disabled,
            "providerIds": list(self.provider_ids),
        }


def _to_user(record) -> IdentityUser:
    return IdentityUser(
        uid=record.uid,
        email=(record.email or "").lower(),
        display_name=record.display_name,
        disabled=bool(record.disabled),
        provider_ids=[p.provider_id for p in (record.provider_data or [])],
    )


class IdentityProvider:
    """Thin wrapper over firebase_admin.auth bound to one App."""

    def __init__(self, app):
        self._app = app

    def _require_app(self):
        if self._app is None:
            raise NotConfigured("Identity provider not configured (FIREBASE_SERVICE_ACCOUNT missing)")
        return self._app

    def verify_id_token(self, id_token: str) -> VerifiedIdentity:
        app = self._require_app()
        try:
            decoded = auth.verify_id_token(id_token, app=app)
        except (ValueError, auth.InvalidIdTokenError, auth.CertificateFetchError) as exc:
            raise InvalidToken(str(exc))
        return VerifiedIdentity(uid=decoded.get("uid", ""), email=(decoded.get("email") or "").lower())

    def get_user_by_email(self, email: str) -> IdentityUser:
        app = self._require_app()
        try:
            return _to_user(auth.get_user_by_email(email, app=app))
        except auth.UserNotFoundError:
            raise UserNotFound(f"No user record for {email}")
        except (ValueError, FirebaseError) as exc:
            raise ServiceError(str(exc))

    def set_disabled(self, uid: str, disabled: bool) -> None:
        app = self._require_app()
        try:
            auth.update_user(uid, disabled=disabled, app=app)
        except auth.UserNotFoundError:
            raise UserNotFound(f"No user record for uid {uid}")
        except (ValueError, FirebaseError) as exc:
            raise ServiceError(str(exc))

    def create_user(self, email: str, password: str, display_name=None) -> IdentityUser:
        app = self._require_app()
        try:
            record = auth.create_user(
                email=email,
                password=password,
                display_name=display_name,
                email_verified=False,
                app=app,
            )
        except (ValueError, FirebaseError) as exc:
            raise ServiceError(str(exc))
        return _to_user(record)

    def delete_user(self, uid: str) -> None:
        app = self._require_app()
        try:
            auth.delete_user(uid, app=app)
        except auth.UserNotFoundError:
            raise UserNotFound(f"No user record for uid {uid}")
        except (ValueError, FirebaseError) as exc:
            raise ServiceError(str(exc))

    def list_users(self, limit: int = 1000) -> list:
        app = self._require_app()
        try:
            page = auth.list_users(max_results=limit, app=app)
        except (ValueError, FirebaseError) as exc:
            raise ServiceError(str(exc))
        return [_to_user(u) for u in page.users]

    def set_admin_claim(self, uid: str, admin: bool) -> None:
        app = self._require_app()
        try:
            auth.set_custom_user_claims(uid, {"admin": admin}, app=app)
        except auth.UserNotFoundError:
            raise UserNotFound(f"No user record for uid {uid}")
        except (ValueError, FirebaseError) as exc:
            raise ServiceError(str(exc))
