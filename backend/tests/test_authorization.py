"""
Authorization tests.

Verifies:
- Unauthenticated requests return 401
- Capability flags gate mutations (403 with the missing capability)
- Technical Team passes every capability gate
- User administration is limited to Technical Team and Owner
"""

import pytest

from conftest import PASSWORD, auth_headers, get_auth_token


# =============================================================================
# UNAUTHENTICATED ACCESS (401)
# =============================================================================


class TestUnauthenticatedAccess:
    """All protected endpoints return 401 without a token."""

    @pytest.mark.parametrize(
        "method,path",
        [
            ("GET", "/api/auth/me"),
            ("GET", "/api/users"),
            ("POST", "/api/users"),
            ("GET", "/api/transactions"),
            ("POST", "/api/transactions"),
            ("DELETE", "/api/transactions/1"),
            ("GET", "/api/traders"),
            ("GET", "/api/catalog"),
            ("POST", "/api/catalog"),
            ("GET", "/api/stock"),
            ("GET", "/api/stock/ledger"),
            ("GET", "/api/dashboard"),
            ("GET", "/api/reports/sales"),
            ("GET", "/api/backup"),
            ("POST", "/api/backup"),
            ("GET", "/api/activity"),
            ("GET", "/api/auth/signup-requests"),
        ],
    )
    def test_requires_auth(self, client, db_session, method, path):
        resp = getattr(client, method.lower())(path)
        assert resp.status_code == 401, f"{method} {path} returned {resp.status_code}"

    def test_garbage_token(self, client, db_session):
        resp = client.get("/api/transactions", headers=auth_headers("not-a-token"))
        assert resp.status_code == 401
        assert resp.json["error"] == "Invalid or expired token"

    def test_logged_out_token_is_rejected(self, client, worker_user):
        token = get_auth_token(client, "worker", PASSWORD)
        headers = auth_headers(token)
        assert client.post("/api/auth/logout", headers=headers).status_code == 200
        assert client.get("/api/auth/me", headers=headers).status_code == 401

    def test_inactive_user_cannot_login(self, client, db_session, worker_user):
        worker_user.is_active = False
        db_session.commit()
        assert get_auth_token(client, "worker", PASSWORD) is None


# =============================================================================
# CAPABILITY GATES (403)
# =============================================================================


class TestWorkerDenied:
    """Worker defaults are add + print only."""

    def test_cannot_delete_transaction(self, client, worker_headers):
        resp = client.delete("/api/transactions/1", headers=worker_headers)
        assert resp.status_code == 403
        assert resp.json["required_permission"] == "delete"

    def test_cannot_edit_transaction(self, client, worker_headers):
        resp = client.put("/api/transactions/1", json={"qty": 2}, headers=worker_headers)
        assert resp.status_code == 403
        assert resp.json["required_permission"] == "edit"

    def test_cannot_change_catalog(self, client, worker_headers):
        resp = client.post(
            "/api/catalog",
            json={"type": "sales", "product": "Cement", "size": "50kg", "price": 10},
            headers=worker_headers,
        )
        assert resp.status_code == 403
        assert resp.json["required_permission"] == "limits"

    def test_cannot_export_reports(self, client, worker_headers):
        resp = client.get("/api/reports/sales", headers=worker_headers)
        assert resp.status_code == 403

    def test_cannot_backup(self, client, worker_headers):
        assert client.get("/api/backup", headers=worker_headers).status_code == 403
        assert client.post("/api/backup", json={}, headers=worker_headers).status_code == 403

    def test_cannot_list_users(self, client, worker_headers):
        assert client.get("/api/users", headers=worker_headers).status_code == 403

    def test_cannot_create_user_without_add_new(self, client, worker_headers):
        resp = client.post(
            "/api/users",
            json={"username": "x", "password": "secret123"},
            headers=worker_headers,
        )
        assert resp.status_code == 403

    def test_cannot_read_activity(self, client, owner_headers):
        assert client.get("/api/activity", headers=owner_headers).status_code == 403


class TestGrantedFlags:

    def test_explicit_flag_grants_access(self, client, db_session, worker_user, catalog):
        worker_user.permissions = {"add": True, "limits": True}
        db_session.commit()
        headers = auth_headers(get_auth_token(client, "worker", PASSWORD))

        resp = client.put(f"/api/catalog/{catalog[0].id}", json={"limit": 5}, headers=headers)
        assert resp.status_code == 200
        assert resp.json["item"]["limit"] == 5

    def test_technical_team_ignores_flags(self, client, db_session, tech_user):
        tech_user.permissions = {}
        db_session.commit()
        headers = auth_headers(get_auth_token(client, "tech", PASSWORD))

        assert client.get("/api/backup", headers=headers).status_code == 200
        assert client.get("/api/reports/customers", headers=headers).status_code == 200
        assert client.get("/api/activity", headers=headers).status_code == 200


# =============================================================================
# USER ADMINISTRATION
# =============================================================================


class TestUserAdministration:

    def test_owner_creates_staff_with_default_flags(self, client, owner_headers):
        resp = client.post(
            "/api/users",
            json={"username": "meena", "password": "secret123"},
            headers=owner_headers,
        )
        assert resp.status_code == 201
        user = resp.json["user"]
        assert user["role"] == "Staff"
        assert user["permissions"]["reports"] is True
        assert user["permissions"]["delete"] is False
        assert "password_hash" not in user

    def test_owner_cannot_create_technical_team(self, client, owner_headers):
        resp = client.post(
            "/api/users",
            json={"username": "root", "password": "secret123", "role": "Technical Team"},
            headers=owner_headers,
        )
        assert resp.status_code == 403

    def test_owner_cannot_delete_technical_team(self, client, owner_headers, tech_user):
        resp = client.delete(f"/api/users/{tech_user.id}", headers=owner_headers)
        assert resp.status_code == 403

    def test_add_new_holder_limited_to_staff_and_worker(self, client, db_session, staff_user):
        staff_user.permissions = {"addNew": True}
        db_session.commit()
        headers = auth_headers(get_auth_token(client, "staff", PASSWORD))

        ok = client.post(
            "/api/users",
            json={"username": "helper", "password": "secret123", "role": "Worker"},
            headers=headers,
        )
        assert ok.status_code == 201

        denied = client.post(
            "/api/users",
            json={"username": "boss", "password": "secret123", "role": "Owner"},
            headers=headers,
        )
        assert denied.status_code == 403

    def test_duplicate_username_conflicts(self, client, owner_headers, worker_user):
        resp = client.post(
            "/api/users",
            json={"username": "Worker", "password": "secret123"},
            headers=owner_headers,
        )
        assert resp.status_code == 409

    def test_short_password_rejected(self, client, owner_headers):
        resp = client.post(
            "/api/users",
            json={"username": "short", "password": "abc"},
            headers=owner_headers,
        )
        assert resp.status_code == 400

    def test_update_permissions(self, client, owner_headers, worker_user):
        resp = client.put(
            f"/api/users/{worker_user.id}",
            json={"permissions": {"add": True, "delete": True}},
            headers=owner_headers,
        )
        assert resp.status_code == 200
        assert resp.json["user"]["permissions"]["delete"] is True
        assert resp.json["user"]["permissions"]["print"] is False

    @pytest.mark.parametrize("permissions", [["add"], "add", 5])
    def test_create_rejects_non_object_permissions(self, client, db_session, owner_headers, permissions):
        resp = client.post(
            "/api/users",
            json={"username": "meena", "password": "secret123", "permissions": permissions},
            headers=owner_headers,
        )
        assert resp.status_code == 400
        assert resp.json["error"] == "permissions must be an object"

    @pytest.mark.parametrize("permissions", [["add"], "add", 5])
    def test_update_rejects_non_object_permissions(self, client, owner_headers, worker_user, permissions):
        resp = client.put(
            f"/api/users/{worker_user.id}",
            json={"permissions": permissions},
            headers=owner_headers,
        )
        assert resp.status_code == 400
        assert resp.json["error"] == "permissions must be an object"

    def test_password_change_revokes_sessions(self, client, owner_headers, worker_user):
        worker_headers = auth_headers(get_auth_token(client, "worker", PASSWORD))
        resp = client.put(
            f"/api/users/{worker_user.id}",
            json={"password": "another1"},
            headers=owner_headers,
        )
        assert resp.status_code == 200
        assert client.get("/api/auth/me", headers=worker_headers).status_code == 401
        assert get_auth_token(client, "worker", "another1")

    def test_cannot_delete_self(self, client, owner_headers, owner_user):
        resp = client.delete(f"/api/users/{owner_user.id}", headers=owner_headers)
        assert resp.status_code == 400

    def test_delete_user(self, client, owner_headers, worker_user):
        resp = client.delete(f"/api/users/{worker_user.id}", headers=owner_headers)
        assert resp.status_code == 200
        usernames = [u["username"] for u in client.get("/api/users", headers=owner_headers).json["users"]]
        assert "worker" not in usernames
