"""Authentication utilities for Postgate."""

from postgate.auth.gate import AuthContext, AuthorizationGate, extract_bearer_token
from postgate.auth.password import CredentialHasher
from postgate.auth.tokens import Clock, SystemClock, TokenClaims, TokenService

__all__ = [
    "CredentialHasher",
    "TokenService",
    "TokenClaims",
    "Clock",
    "SystemClock",
    "AuthorizationGate",
    "AuthContext",
    "extract_bearer_token",
]
