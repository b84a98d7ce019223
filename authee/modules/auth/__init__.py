"""
Authentication Module - Black Box Interface

Purpose: Verify submitted credentials and produce a proven Identity
Interface: CredentialAuthenticator.authenticate(), SecretVerifier.verify()
Hidden: Hash algorithm, work factor, timing equalization, worker pool

The identity source is injected; any backend implementing
IdentitySource.find() can be plugged in without affecting other modules.
"""

from .authenticator import CredentialAuthenticator
from .factory import AuthFactory
from .interfaces import CredentialRecord, Identity, IdentitySource
from .sources import InMemoryIdentitySource
from .verifier import SecretVerifier

__all__ = [
    "AuthFactory",
    "CredentialAuthenticator",
    "CredentialRecord",
    "Identity",
    "IdentitySource",
    "InMemoryIdentitySource",
    "SecretVerifier",
]
