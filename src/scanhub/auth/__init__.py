"""Authorization gate and collaborators."""

from .gate import AuthorizationGate
from .service import AuthorizationService, HttpAuthorizationService, StaticAuthorizationService

__all__ = [
    "AuthorizationGate",
    "AuthorizationService",
    "HttpAuthorizationService",
    "StaticAuthorizationService",
]
