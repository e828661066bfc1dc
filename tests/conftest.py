"""
tests/conftest.py -- Shared fixtures for the Content API tests.

Every test gets a fresh app built with the `testing` config: an in-memory
SQLite database (one shared connection via StaticPool), seeded permission
rows, and cheap Argon2 parameters. Three users are created up front, one
per permission level, all with PASSWORD.
"""
from __future__ import annotations

import os

os.environ.setdefault("APP_ENV", "testing")

from datetime import datetime, timedelta, timezone

import pytest

from api import create_app
from models import storage
from models.article import Article
from utils.permissions import PermissionCode

PASSWORD = "password123"
API = "/api/v1"

READER_EMAIL = "reader@test.com"
EDITOR_EMAIL = "editor@test.com"
ADMIN_EMAIL = "admin@test.com"


def make_user(app, email: str, code=PermissionCode.READER, name: str = "Test User", password: str = PASSWORD) -> str:
    """Create an active user through the service layer; returns its id."""
    with app.app_context():
        user = app.extensions["auth_service"].create_user(name, email, password, code)
        return user.id


def make_article(app, author_id: str, created_at: datetime, title: str = "Article", article_id: str | None = None) -> str:
    """Insert an article with an explicit creation time; returns its id."""
    with app.app_context():
        kwargs = {"id": article_id} if article_id else {}
        article = Article(
            title=title,
            content="Some article content.",
            author_id=author_id,
            created_at=created_at,
            updated_at=created_at,
            **kwargs,
        )
        storage.new(article)
        storage.save()
        return article.id


def make_articles(app, author_id: str, count: int, start: datetime | None = None) -> list[str]:
    """Create `count` articles one second apart; returns ids oldest first."""
    start = start or datetime(2024, 1, 1, tzinfo=timezone.utc)
    return [
        make_article(app, author_id, start + timedelta(seconds=i), title=f"Article {i}")
        for i in range(count)
    ]


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def login(client, email: str, password: str = PASSWORD) -> str:
    resp = client.post(f"{API}/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.get_json()
    return resp.get_json()["access_token"]


@pytest.fixture
def app():
    app = create_app("testing")
    yield app
    storage.close()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def users(app) -> dict:
    """ids of one reader, one editor and one admin"""
    return {
        "reader": make_user(app, READER_EMAIL, PermissionCode.READER, name="Reader User"),
        "editor": make_user(app, EDITOR_EMAIL, PermissionCode.EDITOR, name="Editor User"),
        "admin": make_user(app, ADMIN_EMAIL, PermissionCode.ADMIN, name="Admin User"),
    }


@pytest.fixture
def tokens(client, users) -> dict:
    return {
        "reader": login(client, READER_EMAIL),
        "editor": login(client, EDITOR_EMAIL),
        "admin": login(client, ADMIN_EMAIL),
    }
