"""
API Module - Black Box Interface

Purpose: HTTP routing
Interface: create_auth_router(), create_discovery_router(), create_account_router()
Hidden: Request/response models, status code mapping

The API module only orchestrates - it contains no business logic.
All logic is delegated to the gate, auth and keys modules.
"""

from .account_routes import create_account_router
from .auth_routes import create_auth_router
from .discovery import create_discovery_router
from .models import (
    CsrfTokenResponse,
    IdentityResponse,
    KeyInfo,
    KeySetInfo,
    LoginRequest,
    RotationResponse,
)

__all__ = [
    "CsrfTokenResponse",
    "IdentityResponse",
    "KeyInfo",
    "KeySetInfo",
    "LoginRequest",
    "RotationResponse",
    "create_account_router",
    "create_auth_router",
    "create_discovery_router",
]
