from conftest import bearer
from models.audit_log import AuditLog
from models.login_failure import LoginFailure
from security.bruteforce import register_failure
from services.errors import ServiceError
from utils.allowlist import add_admin_email, admin_emails

OWNER = bearer("owner@example.com")


# ---------- gates ----------
def test_missing_token_is_401(client) -> None:
    resp = client.post("/api/admin/disable-user", json={"email": "user@example.com"})
    assert resp.status_code == 401


def test_non_member_is_403(client, identity) -> None:
    identity.add_user("user@example.com")
    resp = client.post(
        "/api/admin/disable-user",
        json={"email": "user@example.com"},
        headers=bearer("stranger@example.com"),
    )
    assert resp.status_code == 403
    assert "GCP" in resp.get_json()["error"]
    assert identity.users["user@example.com"].disabled is False


def test_invalid_token_under_gate_is_403(client) -> None:
    resp = client.get("/api/admin/users", headers={"Authorization": "Bearer nonsense"})
    assert resp.status_code == 403


def test_iam_outage_denies(client, iam) -> None:
    iam.error = ServiceError("boom")
    resp = client.get("/api/admin/admin-emails", headers=OWNER)
    assert resp.status_code == 403


def test_allowlist_gate_rejects_unlisted(client) -> None:
    add_admin_email("owner@example.com")
    resp = client.get("/api/admin/users", headers=bearer("stranger@example.com"))
    assert resp.status_code == 403
    resp = client.get("/api/admin/users", headers=OWNER)
    assert resp.status_code == 200


# ---------- disable / enable ----------
def test_disable_user(client, identity) -> None:
    user = identity.add_user("user@example.com")
    resp = client.post("/api/admin/disable-user", json={"email": "User@Example.com"}, headers=OWNER)
    assert resp.status_code == 200
    assert resp.get_json() == {"success": True}
    assert user.disabled is True
    assert AuditLog.query.filter_by(action="USER_DISABLE").count() == 1


def test_disable_unknown_user_is_404(client) -> None:
    resp = client.post("/api/admin/disable-user", json={"email": "ghost@example.com"}, headers=OWNER)
    assert resp.status_code == 404


def test_disable_requires_email(client) -> None:
    resp = client.post("/api/admin/disable-user", json={}, headers=OWNER)
    assert resp.status_code == 400


def test_enable_user_clears_failures(client, identity) -> None:
    user = identity.add_user("user@example.com")
    for _ in range(3):
        register_failure("user@example.com")
    assert user.disabled is True

    resp = client.post("/api/admin/enable-user", json={"email": "user@example.com"}, headers=OWNER)
    assert resp.status_code == 200
    assert user.disabled is False
    assert LoginFailure.query.count() == 0


def test_enable_unknown_user_is_404(client) -> None:
    resp = client.post("/api/admin/enable-user", json={"email": "ghost@example.com"}, headers=OWNER)
    assert resp.status_code == 404


def test_upstream_error_surfaces_as_500(client, identity) -> None:
    identity.add_user("user@example.com")
    identity.disable_error = ServiceError("provider unavailable")
    resp = client.post("/api/admin/disable-user", json={"email": "user@example.com"}, headers=OWNER)
    assert resp.status_code == 500
    assert resp.get_json()["error"] == "provider unavailable"


# ---------- allowlist ----------
def test_allowlist_crud(client) -> None:
    resp = client.get("/api/admin/admin-emails", headers=OWNER)
    assert resp.status_code == 200
    assert resp.get_json() == {"members": [], "gcp_admin": True}

    resp = client.post("/api/admin/admin-emails", json={"email": "Chef@Example.com"}, headers=OWNER)
    assert resp.status_code == 200
    assert admin_emails() == ["chef@example.com"]

    # adding twice is a no-op
    resp = client.post("/api/admin/admin-emails", json={"email": "chef@example.com"}, headers=OWNER)
    assert resp.status_code == 200
    assert "already" in resp.get_json()["message"]
    assert admin_emails() == ["chef@example.com"]

    resp = client.delete("/api/admin/admin-emails", json={"email": "chef@example.com"}, headers=OWNER)
    assert resp.status_code == 200
    assert admin_emails() == []


def test_allowlist_rejects_invalid_email(client) -> None:
    resp = client.post("/api/admin/admin-emails", json={"email": "nope"}, headers=OWNER)
    assert resp.status_code == 400


def test_remove_from_empty_allowlist_is_404(client) -> None:
    resp = client.delete("/api/admin/admin-emails", json={"email": "chef@example.com"}, headers=OWNER)
    assert resp.status_code == 404


# ---------- users ----------
def test_create_list_delete_user(client, identity) -> None:
    resp = client.post(
        "/api/admin/users",
        json={"email": "cook@example.com", "password": "s3cret-pass", "displayName": "Cook", "makeAdmin": True},
        headers=OWNER,
    )
    assert resp.status_code == 200
    uid = resp.get_json()["uid"]
    assert admin_emails() == ["cook@example.com"]

    # allowlist now populated, so only listed emails pass the allowlist gate
    resp = client.get("/api/admin/users", headers=bearer("cook@example.com"))
    assert resp.status_code == 200
    users = resp.get_json()["users"]
    assert [u["email"] for u in users] == ["cook@example.com"]
    assert users[0]["displayName"] == "Cook"

    resp = client.delete(
        "/api/admin/users",
        json={"uid": uid, "email": "cook@example.com", "removeFromAllowlist": True},
        headers=bearer("cook@example.com"),
    )
    assert resp.status_code == 200
    assert identity.users == {}
    assert admin_emails() == []


def test_create_user_requires_password(client) -> None:
    resp = client.post("/api/admin/users", json={"email": "cook@example.com"}, headers=OWNER)
    assert resp.status_code == 400


def test_delete_unknown_user_is_404(client) -> None:
    resp = client.delete("/api/admin/users", json={"email": "ghost@example.com"}, headers=OWNER)
    assert resp.status_code == 404


# ---------- admin claim ----------
def test_set_admin_claim(client, identity) -> None:
    user = identity.add_user("cook@example.com")
    resp = client.post("/api/admin/set-admin-claim", json={"email": "cook@example.com"}, headers=OWNER)
    assert resp.status_code == 200
    assert resp.get_json()["admin"] is True
    assert identity.claims[user.uid] == {"admin": True}

    resp = client.post(
        "/api/admin/set-admin-claim",
        json={"email": "cook@example.com", "admin": False},
        headers=OWNER,
    )
    assert resp.get_json()["admin"] is False
    assert identity.claims[user.uid] == {"admin": False}


# ---------- audit trail ----------
def test_audit_logs_record_actor(client, identity) -> None:
    identity.add_user("user@example.com")
    client.post("/api/admin/disable-user", json={"email": "user@example.com"}, headers=OWNER)
    client.post("/api/admin/admin-emails", json={"email": "chef@example.com"}, headers=OWNER)

    resp = client.get("/api/admin/audit-logs", headers=OWNER)
    assert resp.status_code == 200
    logs = resp.get_json()["logs"]
    assert [log["action"] for log in logs] == ["ADMIN_EMAIL_ADD", "USER_DISABLE"]
    assert {log["actor_email"] for log in logs} == {"owner@example.com"}

    resp = client.get("/api/admin/audit-logs?action=USER_DISABLE", headers=OWNER)
    assert [log["entity_id"] for log in resp.get_json()["logs"]] == ["user@example.com"]


def test_audit_logs_require_project_member(client) -> None:
    resp = client.get("/api/admin/audit-logs", headers=bearer("stranger@example.com"))
    assert resp.status_code == 403


def test_allowlist_uses_booking_email_format(client) -> None:
    for bad in ("a@", "@example.com", "chef@example", "chef @example.com"):
        resp = client.post("/api/admin/admin-emails", json={"email": bad}, headers=OWNER)
        assert resp.status_code == 400, bad
    assert admin_emails() == []
