"""
Credential lifecycle: register, login, logout.

Unauthenticated --(register | login)--> Authenticated(token) --(logout)--> Unauthenticated
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError

from models.user import User
from utils.exceptions import DuplicateEmail, NotFound, Unauthenticated
from utils.permissions import PermissionCode
from utils.revocation import RevocationStore
from utils.security import PasswordVerifier, TokenCodec

logger = logging.getLogger("contentapi.auth")

INVALID_CREDENTIALS = "Invalid credentials"


@dataclass
class AuthResult:
    token: str
    user: User


class AuthService:
    def __init__(
        self,
        storage,
        verifier: PasswordVerifier,
        codec: TokenCodec,
        revocations: RevocationStore,
    ):
        self.storage = storage
        self.verifier = verifier
        self.codec = codec
        self.revocations = revocations

    def issue_token(self, user: User) -> str:
        return self.codec.encode(user.id, user.email, user.permission_code)

    def create_user(self, name: str, email: str, password: str, code=PermissionCode.READER) -> User:
        """
        Persist a new active user with the given permission.

        Raises DuplicateEmail when an active user already owns the email,
        including when a concurrent insert wins the unique index race.
        """
        if self.storage.find_user_by_email(email) is not None:
            raise DuplicateEmail()

        permission = self.storage.find_permission_by_code(code)
        if permission is None:
            raise NotFound("Permission not found")

        user = User(
            name=name,
            email=email,
            password_hash=self.verifier.hash(password),
            permission_id=permission.id,
        )
        user.permission = permission
        try:
            self.storage.save_user(user)
        except IntegrityError:
            raise DuplicateEmail()
        return user

    def register(self, name: str, email: str, password: str) -> AuthResult:
        # self-registration is always READER; promotion is an admin action
        user = self.create_user(name, email, password, PermissionCode.READER)
        logger.info("registered user %s", user.id)
        return AuthResult(token=self.issue_token(user), user=user)

    def login(self, email: str, password: str) -> AuthResult:
        user = self.storage.find_user_by_email(email)
        if user is None:
            self.verifier.verify_dummy(password)
            logger.info("login failed: unknown email")
            raise Unauthenticated("unknown email", message=INVALID_CREDENTIALS)

        if not self.verifier.verify(password, user.password_hash):
            logger.info("login failed for user %s: bad password", user.id)
            raise Unauthenticated("bad password", message=INVALID_CREDENTIALS)

        if user.permission is None or not user.permission.code:
            logger.warning("login refused for user %s: permission reference missing", user.id)
            raise Unauthenticated("permission missing", message=INVALID_CREDENTIALS)

        return AuthResult(token=self.issue_token(user), user=user)

    def logout(self, token: Optional[str], expires_at: Optional[datetime] = None) -> None:
        if not token:
            raise Unauthenticated("token not found")
        self.revocations.revoke(token, expires_at)
