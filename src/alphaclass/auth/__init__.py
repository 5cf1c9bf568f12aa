"""Identity and credential verification."""

from .identity import (
    CredentialVerifier,
    JWTCredentialVerifier,
    Principal,
    get_principal,
    issue_token,
)

__all__ = [
    "CredentialVerifier",
    "JWTCredentialVerifier",
    "Principal",
    "get_principal",
    "issue_token",
]
