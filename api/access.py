"""
Which permission codes may call which endpoint.

Keys are Flask endpoint names (blueprint.view). An empty set means any
authenticated user. Only the endpoints and blueprints listed under PUBLIC_*
skip authentication; anything in neither place is refused.
"""
from utils.permissions import PermissionCode

READER = PermissionCode.READER
EDITOR = PermissionCode.EDITOR
ADMIN = PermissionCode.ADMIN

ANY_AUTHENTICATED = frozenset()
ALL_ROLES = frozenset({READER, EDITOR, ADMIN})
ARTICLE_WRITERS = frozenset({EDITOR, ADMIN})
ADMINS = frozenset({ADMIN})

PUBLIC_ENDPOINTS = frozenset({"root", "static", "health.health", "auth.login", "auth.register"})
# swagger UI, its static files and the generated spec
PUBLIC_BLUEPRINTS = frozenset({"flasgger"})

OPERATION_PERMISSIONS = {
    "auth.logout": ANY_AUTHENTICATED,
    "auth.me": ANY_AUTHENTICATED,
    "permissions.list_permissions": ANY_AUTHENTICATED,

    "articles.list_articles": ALL_ROLES,
    "articles.get_article": ALL_ROLES,
    "articles.create_article": ARTICLE_WRITERS,
    "articles.update_article": ARTICLE_WRITERS,
    "articles.delete_article": ARTICLE_WRITERS,

    "users.create_user": ADMINS,
    "users.list_users": ADMINS,
    "users.get_user": ADMINS,
    "users.update_user": ADMINS,
    "users.delete_user": ADMINS,
}
