"""
Identity Context

Turns an inbound bearer credential into a typed, immutable ``Principal``.
Token issuance lives in the external auth service; this module only verifies.
"""
# ruff: noqa: B008 - FastAPI Depends in function defaults is standard pattern

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any, Protocol
from uuid import UUID

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from alphaclass.config import settings
from alphaclass.core.enums import Role
from alphaclass.core.errors import InvalidCredential

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Principal:
    """The authenticated identity making a request."""

    id: UUID
    role: Role
    tenant_id: UUID
    email: str | None = None

    @property
    def is_student(self) -> bool:
        return self.role is Role.STUDENT

    @property
    def is_teacher(self) -> bool:
        return self.role is Role.TEACHER

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN


class CredentialVerifier(Protocol):
    """Anything that can turn a raw token into a Principal."""

    def verify(self, token: str) -> Principal: ...


class JWTCredentialVerifier:
    """Verifies HMAC-signed JWTs issued by the external token service.

    Expected claims:
        sub: user UUID
        role: student | teacher | admin
        institution_id: tenant UUID
        exp: expiry (required)
        email: optional
    """

    def __init__(
        self,
        secret_key: str,
        *,
        algorithm: str = "HS256",
        issuer: str | None = None,
        leeway_seconds: int = 30,
    ):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.issuer = issuer
        self.leeway_seconds = leeway_seconds

    def verify(self, token: str) -> Principal:
        """Decode and validate ``token``.

        Raises:
            InvalidCredential: bad signature, expired, or missing/invalid claims
        """
        if not token:
            raise InvalidCredential("Missing bearer token")

        try:
            claims = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                issuer=self.issuer,
                leeway=self.leeway_seconds,
                options={"require": ["exp", "sub"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise InvalidCredential("Token has expired") from e
        except jwt.InvalidTokenError as e:
            logger.info(f"Rejected bearer token: {e}")
            raise InvalidCredential("Invalid token") from e

        return self._principal_from_claims(claims)

    @staticmethod
    def _principal_from_claims(claims: dict[str, Any]) -> Principal:
        try:
            user_id = UUID(str(claims["sub"]))
            tenant_id = UUID(str(claims["institution_id"]))
        except (KeyError, ValueError) as e:
            raise InvalidCredential("Token is missing a valid subject or institution") from e

        try:
            role = Role(claims.get("role"))
        except ValueError as e:
            raise InvalidCredential(f"Unknown role in token: {claims.get('role')!r}") from e

        return Principal(id=user_id, role=role, tenant_id=tenant_id, email=claims.get("email"))


def issue_token(
    *,
    user_id: UUID,
    role: Role,
    tenant_id: UUID,
    email: str | None = None,
    ttl: timedelta | None = None,
    secret_key: str | None = None,
) -> str:
    """Mint a token the verifier accepts.

    Used by tests and the local dev-token script; production tokens come from
    the external auth service.
    """
    now = datetime.now(UTC)
    claims: dict[str, Any] = {
        "sub": str(user_id),
        "role": role.value,
        "institution_id": str(tenant_id),
        "iat": now,
        "exp": now + (ttl or timedelta(minutes=settings.DEV_TOKEN_TTL_MINUTES)),
    }
    if email:
        claims["email"] = email
    if settings.JWT_ISSUER:
        claims["iss"] = settings.JWT_ISSUER
    return jwt.encode(
        claims, secret_key or settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM
    )


def get_credential_verifier() -> CredentialVerifier:
    """Get the configured credential verifier."""
    return JWTCredentialVerifier(
        settings.JWT_SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM,
        issuer=settings.JWT_ISSUER,
        leeway_seconds=settings.JWT_LEEWAY_SECONDS,
    )


bearer_scheme = HTTPBearer(auto_error=False)


async def get_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    verifier: CredentialVerifier = Depends(get_credential_verifier),
) -> Principal:
    """FastAPI dependency resolving the request's principal."""
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise InvalidCredential("Missing bearer token")
    return verifier.verify(credentials.credentials)
