"""
security helpers:
- Argon2 password hashing via argon2-cffi
- JWT creation/verification via PyJWT
- JTI generation for token identifiers
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError


class TokenDecodeError(Exception):
    """A presented token cannot be trusted."""


class MalformedToken(TokenDecodeError):
    """Not a JWT, bad signature, wrong issuer or missing claims."""


class ExpiredToken(TokenDecodeError):
    """Signature is fine but `exp` is in the past."""


def generate_jti() -> str:
    """Generate a unique JTI (JWT ID).
    """
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


class PasswordVerifier:
    """One-way password hashing with Argon2id."""

    def __init__(self, time_cost: int = 3, memory_cost: int = 65536, parallelism: int = 4):
        self._ph = PasswordHasher(
            time_cost=time_cost, memory_cost=memory_cost, parallelism=parallelism
        )
        # verified against when the account does not exist
        self._dummy_hash = self._ph.hash(generate_jti())

    def hash(self, password: str) -> str:
        """Hash a plaintext password using Argon2
        """
        if not password:
            raise ValueError("Password must not be empty")
        return self._ph.hash(password)

    def verify(self, password: str, password_hash: str) -> bool:
        """ Verify a plaintext password using argon2; False on any failure
        """
        if not isinstance(password, str) or not isinstance(password_hash, str) or not password_hash:
            return False
        # empty passwords are checked at full cost too
        try:
            return self._ph.verify(password_hash, password)
        except (VerificationError, InvalidHashError):
            return False

    def verify_dummy(self, password: str) -> bool:
        """Spend the same work as a real verify, always failing."""
        self.verify(password or "-", self._dummy_hash)
        return False


@dataclass(frozen=True)
class TokenClaims:
    subject: str
    email: str
    permission: int
    issued_at: datetime
    expires_at: datetime
    jti: str


class TokenCodec:
    """
    Encode and decode signed access tokens.

    The secret is fixed for the codec's lifetime; changing it (a new app)
    invalidates every outstanding token.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        ttl: timedelta = timedelta(days=14),
        issuer: str = "content-api",
    ):
        self.secret = secret
        self.algorithm = algorithm
        self.ttl = ttl
        self.issuer = issuer

    def encode(self, subject: str, email: str, permission: int, ttl: Optional[timedelta] = None) -> str:
        issued = _now()
        exp = issued + (ttl if ttl is not None else self.ttl)
        payload = {
            "iss": self.issuer,
            "sub": str(subject),
            "email": email,
            "permission": int(permission),
            "iat": int(issued.timestamp()),
            "exp": int(exp.timestamp()),
            "jti": generate_jti(),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def decode(self, token: str) -> TokenClaims:
        """
        Decode and validate a JWT.
        Raises ExpiredToken when past `exp`, MalformedToken for everything else.
        """
        if not isinstance(token, str) or not token:
            raise MalformedToken("Empty token")
        try:
            decoded = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                issuer=self.issuer,
                options={"require": ["sub", "exp", "iat", "jti"]},
            )
        except jwt.ExpiredSignatureError:
            raise ExpiredToken("Token expired")
        except jwt.InvalidTokenError as exc:
            raise MalformedToken(f"Invalid token: {exc}")

        try:
            return TokenClaims(
                subject=str(decoded["sub"]),
                email=decoded.get("email") or "",
                permission=int(decoded["permission"]),
                issued_at=datetime.fromtimestamp(decoded["iat"], tz=timezone.utc),
                expires_at=datetime.fromtimestamp(decoded["exp"], tz=timezone.utc),
                jti=str(decoded["jti"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise MalformedToken(f"Invalid token claims: {exc}")
