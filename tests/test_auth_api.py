"""
Integration tests for the auth blueprint through the Flask test client.

Coverage:
  - register -> login round trip, token subject matches the new user
  - registration is always reader, duplicate email -> 409, reuse after soft delete
  - login failures are indistinguishable (unknown email vs wrong password)
  - logout revokes exactly the presented token; repeat logout -> 401
  - deleted users and tokens without a usable header are rejected
"""
from __future__ import annotations

from datetime import timedelta

import pytest

from models import storage
from models.blacklisted_token import BlacklistedToken
from models.user import User
from tests.conftest import API, READER_EMAIL, bearer, login, make_user
from utils.exceptions import DuplicateEmail
from utils.permissions import PermissionCode


def register(client, name="A", email="a@x.com", password="abcdef"):
    return client.post(f"{API}/auth/register", json={"name": name, "email": email, "password": password})


class TestRegister:
    def test_register_returns_token_and_reader(self, client):
        resp = register(client)
        assert resp.status_code == 201
        body = resp.get_json()
        assert body["token_type"] == "bearer"
        assert body["access_token"]
        assert body["expires_in"] > 0
        assert body["user"]["email"] == "a@x.com"
        assert body["user"]["permission_id"] == 1
        assert body["user"]["permission_name"] == "reader"
        assert "password" not in body["user"]
        assert "password_hash" not in body["user"]

    def test_registration_token_is_usable(self, client):
        token = register(client).get_json()["access_token"]
        resp = client.get(f"{API}/me", headers=bearer(token))
        assert resp.status_code == 200
        assert resp.get_json()["data"]["email"] == "a@x.com"

    def test_then_login_subject_matches(self, app, client):
        user_id = register(client).get_json()["user"]["id"]
        token = login(client, "a@x.com", "abcdef")
        claims = app.extensions["token_codec"].decode(token)
        assert claims.subject == user_id
        assert claims.permission == 1

    def test_cannot_choose_permission(self, client):
        resp = client.post(
            f"{API}/auth/register",
            json={"name": "A", "email": "a@x.com", "password": "abcdef", "permission_id": 3},
        )
        assert resp.status_code == 422
        # and nothing was created
        assert login_status(client, "a@x.com", "abcdef") == 401

    def test_duplicate_email(self, client):
        assert register(client).status_code == 201
        resp = register(client, name="Other")
        assert resp.status_code == 409
        assert resp.get_json()["error"] == "CONFLICT"

    def test_unique_index_race_reports_duplicate(self, app, client, monkeypatch):
        # both requests pass the lookup; the partial unique index settles it
        monkeypatch.setattr(storage, "find_user_by_email", lambda *args, **kwargs: None)
        with app.app_context():
            service = app.extensions["auth_service"]
            service.create_user("First", "race@x.com", "abcdef")
            with pytest.raises(DuplicateEmail):
                service.create_user("Second", "race@x.com", "abcdef")

        resp = register(client, email="race@x.com")
        assert resp.status_code == 409
        assert resp.get_json()["message"] == "Email already exists"
        with app.app_context():
            assert storage.get_session().query(User).filter(User.email == "race@x.com").count() == 1

    def test_email_is_case_sensitive(self, client):
        assert register(client, email="a@x.com").status_code == 201
        assert register(client, email="A@x.com").status_code == 201

    def test_email_reusable_after_soft_delete(self, app, client):
        first_id = register(client).get_json()["user"]["id"]
        with app.app_context():
            storage.find_user_by_id(first_id).soft_delete()

        resp = register(client, name="Second")
        assert resp.status_code == 201
        assert resp.get_json()["user"]["id"] != first_id

    def test_validation(self, client):
        resp = client.post(f"{API}/auth/register", json={"name": "Test User"})
        assert resp.status_code == 422
        details = resp.get_json()["details"]
        assert "email" in details
        assert "password" in details

    def test_short_password(self, client):
        assert register(client, password="abc").status_code == 422


def login_status(client, email, password):
    return client.post(f"{API}/auth/login", json={"email": email, "password": password}).status_code


class TestLogin:
    def test_login(self, client, users):
        resp = client.post(f"{API}/auth/login", json={"email": READER_EMAIL, "password": "password123"})
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["user"]["id"] == users["reader"]
        assert body["user"]["permission_name"] == "reader"

    def test_wrong_password_and_unknown_email_look_the_same(self, client, users):
        wrong = client.post(f"{API}/auth/login", json={"email": READER_EMAIL, "password": "nope-nope"})
        unknown = client.post(f"{API}/auth/login", json={"email": "ghost@test.com", "password": "nope-nope"})
        assert wrong.status_code == unknown.status_code == 401
        assert wrong.get_json() == unknown.get_json()
        assert wrong.get_json()["message"] == "Invalid credentials"

    def test_deleted_user_cannot_login(self, app, client, users):
        with app.app_context():
            storage.find_user_by_id(users["reader"]).soft_delete()
        assert login_status(client, READER_EMAIL, "password123") == 401

    def test_user_without_permission_cannot_login(self, app, client):
        with app.app_context():
            verifier = app.extensions["password_verifier"]
            storage.save_user(User(name="Orphan", email="orphan@test.com", password_hash=verifier.hash("password123")))
        resp = client.post(f"{API}/auth/login", json={"email": "orphan@test.com", "password": "password123"})
        assert resp.status_code == 401
        assert resp.get_json()["message"] == "Invalid credentials"

    def test_missing_fields(self, client):
        assert client.post(f"{API}/auth/login", json={}).status_code == 422

    def test_empty_password_rejected_before_lookup(self, client, users):
        known = client.post(f"{API}/auth/login", json={"email": READER_EMAIL, "password": ""})
        unknown = client.post(f"{API}/auth/login", json={"email": "ghost@test.com", "password": ""})
        assert known.status_code == unknown.status_code == 422
        assert known.get_json() == unknown.get_json()
        assert "password" in known.get_json()["details"]


class TestLogout:
    def test_logout_revokes_token(self, app, client, users):
        token = login(client, READER_EMAIL)
        assert client.get(f"{API}/me", headers=bearer(token)).status_code == 200

        resp = client.post(f"{API}/auth/logout", headers=bearer(token))
        assert resp.status_code == 200
        assert resp.get_json()["message"] == "Logged out successfully"

        # signature and expiry are still fine, but the token is dead
        app.extensions["token_codec"].decode(token)
        for path in ("/me", "/articles", "/permissions"):
            resp = client.get(f"{API}{path}", headers=bearer(token))
            assert resp.status_code == 401
            assert resp.get_json()["message"] == "Not authenticated"

        assert client.post(f"{API}/auth/logout", headers=bearer(token)).status_code == 401

    def test_logout_keeps_other_sessions(self, client, users):
        first = login(client, READER_EMAIL)
        second = login(client, READER_EMAIL)
        client.post(f"{API}/auth/logout", headers=bearer(first))
        assert client.get(f"{API}/me", headers=bearer(second)).status_code == 200

    def test_blacklist_row_records_expiry(self, app, client, users):
        token = login(client, READER_EMAIL)
        client.post(f"{API}/auth/logout", headers=bearer(token))
        with app.app_context():
            row = storage.get_session().query(BlacklistedToken).filter_by(token=token).one()
            assert row.expires_at is not None
            assert row.revoked_at is not None

    def test_logout_requires_token(self, client):
        resp = client.post(f"{API}/auth/logout")
        assert resp.status_code == 401


class TestAuthenticationGate:
    def test_missing_and_malformed_headers(self, client, tokens):
        assert client.get(f"{API}/me").status_code == 401
        assert client.get(f"{API}/me", headers={"Authorization": tokens["reader"]}).status_code == 401
        assert client.get(f"{API}/me", headers={"Authorization": "Basic abc"}).status_code == 401
        assert client.get(f"{API}/me", headers=bearer("garbage")).status_code == 401

    def test_expired_token(self, app, client, users):
        codec = app.extensions["token_codec"]
        token = codec.encode(users["reader"], READER_EMAIL, 1, ttl=timedelta(seconds=-10))
        resp = client.get(f"{API}/me", headers=bearer(token))
        assert resp.status_code == 401
        assert resp.get_json()["message"] == "Not authenticated"

    def test_deleted_user_token_rejected(self, app, client, tokens, users):
        with app.app_context():
            storage.find_user_by_id(users["reader"]).soft_delete()
        assert client.get(f"{API}/me", headers=bearer(tokens["reader"])).status_code == 401

    def test_token_for_user_without_permission_is_forbidden(self, app, client):
        with app.app_context():
            verifier = app.extensions["password_verifier"]
            user = storage.save_user(User(name="Orphan", email="orphan@test.com", password_hash=verifier.hash("x" * 8)))
            token = app.extensions["token_codec"].encode(user.id, user.email, 1)
        # empty allowed set: authenticated is enough
        me = client.get(f"{API}/me", headers=bearer(token))
        assert me.status_code == 200
        assert me.get_json()["data"]["permission_id"] is None
        assert me.get_json()["data"]["permission_name"] is None
        resp = client.get(f"{API}/articles", headers=bearer(token))
        assert resp.status_code == 403
        assert resp.get_json()["message"] == "User has no permission"

    def test_public_endpoints(self, client):
        assert client.get(f"{API}/health").status_code == 200
        assert client.get("/").status_code == 200

    def test_seeded_users_have_expected_permissions(self, app, users):
        with app.app_context():
            assert storage.find_user_by_id(users["editor"]).permission_code == PermissionCode.EDITOR
            assert storage.find_user_by_id(users["admin"]).permission_code == PermissionCode.ADMIN

    def test_make_user_rejects_duplicate(self, app, users):
        with pytest.raises(DuplicateEmail):
            make_user(app, READER_EMAIL)
