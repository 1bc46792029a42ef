"""Pytest configuration and shared fixtures."""

import sys
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from app import create_app  # noqa: E402
from config import TestConfig  # noqa: E402
from services.errors import InvalidToken, ServiceError, UserNotFound  # noqa: E402
from services.identity import IdentityUser, VerifiedIdentity  # noqa: E402


class FakeIdentity:
    """In-memory identity provider. Tokens are "token-<email>"."""

    def __init__(self):
        self.users = {}
        self.claims = {}
        self.disable_error = None
        self.verify_error = None
        self._next_uid = 1

    def add_user(self, email, disabled=False):
        uid = f"uid-{self._next_uid}"
        self._next_uid += 1
        self.users[email] = IdentityUser(uid=uid, email=email, disabled=disabled, provider_ids=["password"])
        return self.users[email]

    def _by_uid(self, uid):
        for u in self.users.values():
            if u.uid == uid:
                return u
        raise UserNotFound(f"No user record for uid {uid}")

    def verify_id_token(self, id_token):
        if self.verify_error is not None:
            raise self.verify_error
        if not id_token or not id_token.startswith("token-"):
            raise InvalidToken("bad token")
        email = id_token[len("token-"):]
        return VerifiedIdentity(uid=f"uid-{email}", email=email.lower())

    def get_user_by_email(self, email):
        if email not in self.users:
            raise UserNotFound(f"No user record for {email}")
        return self.users[email]

    def set_disabled(self, uid, disabled):
        if self.disable_error is not None:
            raise self.disable_error
        self._by_uid(uid).disabled = disabled

    def create_user(self, email, password, display_name=None):
        user = self.add_user(email)
        user.display_name = display_name
        return user

    def delete_user(self, uid):
        user = self._by_uid(uid)
        del self.users[user.email]

    def list_users(self, limit=1000):
        return list(self.users.values())[:limit]

    def set_admin_claim(self, uid, admin):
        self.claims[self._by_uid(uid).uid] = {"admin": admin}


class FakeIam:
    def __init__(self, members=None, error=None):
        self.members = list(members or [])
        self.error = error
        self.calls = 0

    def get_members(self, force_refresh=False):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.members)


class FakeImages:
    def __init__(self):
        self.objects = {}
        self.deleted = []
        self.delete_error = None

    def upload(self, object_path, data, content_type):
        self.objects[object_path] = (data, content_type)
        return f"https://storage.googleapis.com/test-bucket/{object_path}"

    def delete(self, object_path):
        if self.delete_error is not None:
            raise self.delete_error
        self.deleted.append(object_path)
        self.objects.pop(object_path, None)


class FakeSMTP:
    sent = []

    def __init__(self, host, port, timeout=None):
        self.host = host
        self.port = port

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def starttls(self):
        pass

    def login(self, username, password):
        pass

    def send_message(self, msg):
        FakeSMTP.sent.append(msg)


@pytest.fixture
def identity():
    return FakeIdentity()


@pytest.fixture
def iam():
    return FakeIam(members=["owner@example.com"])


@pytest.fixture
def images():
    return FakeImages()


@pytest.fixture
def app(identity, iam, images):
    app = create_app(TestConfig, identity=identity, iam=iam, images=images)
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def smtp(monkeypatch):
    FakeSMTP.sent = []
    monkeypatch.setattr("utils.emailer.smtplib.SMTP", FakeSMTP)
    return FakeSMTP


def bearer(email):
    return {"Authorization": f"Bearer token-{email}"}

