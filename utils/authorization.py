"""
Per-request authentication and permission gate.

Runs as a Flask before_request hook. For every endpoint that is not on the
public allow-list it:

  1. takes the bearer token from the Authorization header
  2. decodes it (signature + expiry)
  3. rejects it if it has been revoked (logout)
  4. loads the acting user by the token subject (active users only)
  5. stores user, token and claims on flask.g
  6. checks the user's permission code against the endpoint's allowed set

Steps 1-5 raise Unauthenticated, step 6 raises Forbidden. Only endpoints on
the public allow-list (login, register, health, docs) pass straight through;
an endpoint in neither table is authenticated and then refused.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Mapping, Optional

from flask import g, request

from utils.exceptions import Forbidden, Unauthenticated
from utils.revocation import RevocationStore
from utils.security import ExpiredToken, TokenClaims, TokenCodec, TokenDecodeError

logger = logging.getLogger("contentapi.auth")


@dataclass
class AuthContext:
    principal: object
    token: str
    claims: TokenClaims


def extract_bearer_token(header_value: Optional[str]) -> Optional[str]:
    """Return the token from 'Bearer <token>', or None if the header is unusable."""
    if not header_value:
        return None
    parts = header_value.strip().split(None, 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    token = parts[1].strip()
    return token or None


class AuthorizationMiddleware:
    def __init__(
        self,
        codec: TokenCodec,
        revocations: RevocationStore,
        load_principal: Callable[[str], Optional[object]],
        operation_permissions: Mapping[str, frozenset],
        public_endpoints: Iterable[str] = (),
        public_blueprints: Iterable[str] = (),
    ):
        self.codec = codec
        self.revocations = revocations
        self.load_principal = load_principal
        self.operation_permissions = operation_permissions
        self.public_endpoints = frozenset(public_endpoints)
        self.public_blueprints = frozenset(public_blueprints)

    def init_app(self, app):
        app.extensions["authorization"] = self
        app.before_request(self.before_request)

    def is_public(self, endpoint: Optional[str], blueprint: Optional[str] = None) -> bool:
        # no endpoint means no route matched; let routing answer 404/405
        if endpoint is None:
            return True
        return endpoint in self.public_endpoints or blueprint in self.public_blueprints

    def required_for(self, endpoint: Optional[str]) -> Optional[frozenset]:
        """Allowed permission codes for an endpoint; None if it is not declared."""
        if endpoint is None:
            return None
        return self.operation_permissions.get(endpoint)

    def authenticate(self, header_value: Optional[str]) -> AuthContext:
        token = extract_bearer_token(header_value)
        if token is None:
            raise Unauthenticated("missing or malformed Authorization header")

        try:
            claims = self.codec.decode(token)
        except ExpiredToken:
            raise Unauthenticated("token expired")
        except TokenDecodeError as exc:
            raise Unauthenticated(str(exc))

        if self.revocations.is_revoked(token):
            raise Unauthenticated("token has been invalidated")

        principal = self.load_principal(claims.subject)
        if principal is None or getattr(principal, "deleted_at", None) is not None:
            raise Unauthenticated("user not found")

        return AuthContext(principal=principal, token=token, claims=claims)

    def authorize(self, principal, allowed: frozenset) -> None:
        if not allowed:
            return
        if principal is None:
            raise Forbidden("User not authenticated")
        permission = getattr(principal, "permission", None)
        if permission is None:
            raise Forbidden("User has no permission")
        code = getattr(permission, "code", None)
        if not code:
            raise Forbidden("User permission has no code")
        if code not in allowed:
            raise Forbidden("Insufficient permissions")

    def before_request(self):
        if request.method == "OPTIONS":
            return None
        if self.is_public(request.endpoint, request.blueprint):
            return None
        allowed = self.required_for(request.endpoint)

        try:
            ctx = self.authenticate(request.headers.get("Authorization"))
        except Unauthenticated as exc:
            logger.info("rejected %s %s: %s", request.method, request.path, exc.reason)
            raise

        g.current_user = ctx.principal
        g.current_token = ctx.token
        g.token_claims = ctx.claims

        if allowed is None:
            logger.warning("refused %s %s: endpoint %s has no declared permissions",
                           request.method, request.path, request.endpoint)
            raise Forbidden("Operation not permitted")

        try:
            self.authorize(ctx.principal, allowed)
        except Forbidden as exc:
            logger.info(
                "forbidden %s %s for user %s: %s",
                request.method, request.path, getattr(ctx.principal, "id", None), exc.message,
            )
            raise
        return None
