"""
Protected endpoints: the caller's identity and signing key administration.

Everything here sits behind the gate, so request.state.identity is set by
the time a handler runs.
"""

import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from ..auth.interfaces import Identity
from ..keys.manager import SigningKeyManager
from .models import IdentityResponse, KeySetInfo, RotationResponse

logger = logging.getLogger(__name__)

ADMIN_AUTHORITY = "ADMIN"


def current_identity(request: Request) -> Identity:
    """Return the identity the gate attached to this request."""
    identity = getattr(request.state, "identity", None)
    if identity is None:
        raise HTTPException(status_code=401, detail="Authentication required")
    return identity


def require_admin(identity: Identity = Depends(current_identity)) -> Identity:
    """Allow only identities holding the ADMIN authority."""
    if not identity.has_authority(ADMIN_AUTHORITY):
        logger.warning(f"{identity.principal} attempted an admin operation")
        raise HTTPException(status_code=403, detail="Forbidden")
    return identity


def create_account_router(key_manager: SigningKeyManager) -> APIRouter:
    """
    Create router for identity and key administration endpoints.

    Args:
        key_manager: Signing key manager

    Returns:
        FastAPI router
    """
    router = APIRouter()

    @router.get("/account", response_model=IdentityResponse, tags=["account"])
    async def account(identity: Identity = Depends(current_identity)) -> IdentityResponse:
        """Return the authenticated caller's identity."""
        return IdentityResponse.from_identity(identity)

    @router.get("/admin/keys", response_model=KeySetInfo, tags=["admin"])
    async def list_keys(identity: Identity = Depends(require_admin)) -> KeySetInfo:
        """List signing key ids and timestamps (no key material)."""
        return KeySetInfo.from_key_set(key_manager.snapshot())

    @router.post("/admin/keys/rotate", response_model=RotationResponse, tags=["admin"])
    async def rotate_keys(identity: Identity = Depends(require_admin)) -> RotationResponse:
        """
        Rotate the signing key now.

        Returns:
            200: New and previous key ids
            503: Key generation failed; the previous key stays current
        """
        previous = key_manager.current()
        new_pair = await asyncio.to_thread(key_manager.rotate)
        logger.info(f"Manual key rotation by {identity.principal}")
        return RotationResponse(key_id=new_pair.key_id, previous_key_id=previous.key_id)

    return router
