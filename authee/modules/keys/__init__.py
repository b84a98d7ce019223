"""
Signing Keys Module - Black Box Interface

Purpose: Generate, rotate and retain token signing keys; publish public keys
Interface: SigningKeyManager.current()/public_set()/rotate(), JWKPublisher.publish()
Hidden: Key generation, snapshot replacement, retention bookkeeping

Private key material never leaves SigningKeyManager except through current(),
which token issuers use for signing.
"""

from .jwks import JWKPublisher, PublicKeySource, public_key_to_jwk
from .manager import (
    KeyPair,
    KeySet,
    PublicKeyEntry,
    RetainedKey,
    SigningKeyManager,
    generate_private_key,
)
from .scheduler import KeyRotationScheduler

__all__ = [
    "JWKPublisher",
    "KeyPair",
    "KeyRotationScheduler",
    "KeySet",
    "PublicKeyEntry",
    "PublicKeySource",
    "RetainedKey",
    "SigningKeyManager",
    "generate_private_key",
    "public_key_to_jwk",
]
