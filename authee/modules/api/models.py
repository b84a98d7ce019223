"""
Authee API data models.

These models define the request and response bodies of the HTTP API.
"""

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field, SecretStr

from ..auth.interfaces import Identity
from ..keys.manager import KeySet


# Request Models (API Input)


class LoginRequest(BaseModel):
    """Username/secret pair submitted for authentication."""

    username: str = Field(..., description="Username", min_length=1, max_length=256)
    password: SecretStr = Field(..., description="Secret, never echoed or logged")


# Response Models (API Output)


class IdentityResponse(BaseModel):
    """A proven identity."""

    principal: str = Field(..., description="Authenticated username")
    authorities: List[str] = Field(default_factory=list, description="Granted authorities")

    @classmethod
    def from_identity(cls, identity: Identity) -> "IdentityResponse":
        return cls(principal=identity.principal, authorities=sorted(identity.authorities))


class CsrfTokenResponse(BaseModel):
    """Issued CSRF token."""

    token: str
    header_name: str
    cookie_name: str


class KeyInfo(BaseModel):
    """Key metadata; never carries key material."""

    key_id: str
    algorithm: str
    created_at: datetime
    status: str = Field(..., description="current or retained")
    retired_at: Optional[datetime] = None


class KeySetInfo(BaseModel):
    """Metadata for the current and retained signing keys."""

    keys: List[KeyInfo]

    @classmethod
    def from_key_set(cls, key_set: KeySet) -> "KeySetInfo":
        def ts(value: float) -> datetime:
            return datetime.fromtimestamp(value, tz=timezone.utc)

        current = key_set.current
        keys = [
            KeyInfo(
                key_id=current.key_id,
                algorithm=current.algorithm,
                created_at=ts(current.created_at),
                status="current",
            )
        ]
        keys.extend(
            KeyInfo(
                key_id=retained.key_pair.key_id,
                algorithm=retained.key_pair.algorithm,
                created_at=ts(retained.key_pair.created_at),
                status="retained",
                retired_at=ts(retained.retired_at),
            )
            for retained in key_set.retained
        )
        return cls(keys=keys)


class RotationResponse(BaseModel):
    """Result of a manual key rotation."""

    key_id: str
    previous_key_id: str
