"""
JWK Set publication (RFC 7517).

The publisher reads public keys through PublicKeySource, which exposes only
PublicKeyEntry values, and copies a fixed whitelist of public parameters into
each JWK. There is no path from here to private key material.
"""

import logging
from typing import Any, Dict, List, Protocol, Tuple

from cryptography.hazmat.primitives.asymmetric.ec import EllipticCurvePublicKey
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPublicKey
from jwt.algorithms import ECAlgorithm, RSAAlgorithm

from .manager import PublicKeyEntry

logger = logging.getLogger(__name__)

# public JWK members per key type
_PUBLIC_PARAMS = {
    "RSA": ("n", "e"),
    "EC": ("crv", "x", "y"),
}


class PublicKeySource(Protocol):
    """Anything that can list the currently valid public keys."""

    def public_set(self) -> Tuple[PublicKeyEntry, ...]:
        ...


def public_key_to_jwk(entry: PublicKeyEntry) -> Dict[str, Any]:
    """
    Serialize one public key entry as a JWK.

    Raises:
        TypeError: If the entry does not hold an RSA or EC public key
    """
    key = entry.public_key
    if isinstance(key, RSAPublicKey):
        raw = RSAAlgorithm.to_jwk(key, as_dict=True)
    elif isinstance(key, EllipticCurvePublicKey):
        raw = ECAlgorithm.to_jwk(key, as_dict=True)
    else:
        raise TypeError(f"Key {entry.key_id} is not an RSA or EC public key")

    kty = raw["kty"]
    jwk = {
        "kty": kty,
        "kid": entry.key_id,
        "use": "sig",
        "alg": entry.algorithm,
    }
    for name in _PUBLIC_PARAMS[kty]:
        jwk[name] = raw[name]
    return jwk


class JWKPublisher:
    """Serializes the valid public keys as a JWK Set."""

    def __init__(self, source: PublicKeySource):
        self._source = source

    def publish(self) -> Dict[str, List[Dict[str, Any]]]:
        """Return ``{"keys": [...]}`` for the current and retained keys."""
        entries = self._source.public_set()
        return {"keys": [public_key_to_jwk(entry) for entry in entries]}
