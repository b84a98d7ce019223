"""Authentication interfaces following Black Box Design principles."""
from dataclasses import dataclass, field
from typing import FrozenSet, Optional, Protocol


@dataclass(frozen=True)
class CredentialRecord:
    """Stored credentials for one user, owned by the identity source."""
    username: str
    secret_hash: str = field(repr=False)
    authorities: FrozenSet[str] = frozenset()
    enabled: bool = True


@dataclass(frozen=True)
class Identity:
    """
    A proven identity.

    Only the credential authenticator creates these, and only after the
    secret verifier accepted the presented secret. Lives for one request.
    """
    principal: str
    authorities: FrozenSet[str] = frozenset()

    def has_authority(self, authority: str) -> bool:
        return authority in self.authorities


class IdentitySource(Protocol):
    """Protocol for user lookup - allows swappable backends."""

    def find(self, username: str) -> Optional[CredentialRecord]:
        """
        Look up a user's stored credentials.

        Args:
            username: Username as submitted

        Returns:
            CredentialRecord, or None if no such user exists
        """
        ...
