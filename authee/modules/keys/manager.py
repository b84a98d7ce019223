"""
Signing key lifecycle manager.

Holds one immutable KeySet. Rotation and purging build a new KeySet and
replace the reference in a single assignment, so a reader always sees either
the old or the new set, never a mix. Writers serialize on a lock; readers
never take it.
"""

import logging
import secrets
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, List, Set, Tuple

from cryptography.hazmat.primitives.asymmetric import ec, rsa

from ...errors import ConfigurationError, KeyGenerationFailure

logger = logging.getLogger(__name__)

SUPPORTED_ALGORITHMS = ("RS256", "ES256")
MIN_RSA_KEY_SIZE = 2048


@dataclass(frozen=True)
class KeyPair:
    """An asymmetric signing key pair with its identifier."""
    key_id: str
    private_key: Any = field(repr=False)
    public_key: Any = field(repr=False)
    algorithm: str
    created_at: float


@dataclass(frozen=True)
class RetainedKey:
    """A superseded key kept for verification until the retention window ends."""
    key_pair: KeyPair
    retired_at: float


@dataclass(frozen=True)
class PublicKeyEntry:
    """The public half of a key pair, safe to hand to publishers."""
    key_id: str
    public_key: Any = field(repr=False)
    algorithm: str
    created_at: float


@dataclass(frozen=True)
class KeySet:
    """Current signing key plus retained keys, most recently retired first."""
    current: KeyPair
    retained: Tuple[RetainedKey, ...] = ()


def generate_private_key(algorithm: str, key_size: int = MIN_RSA_KEY_SIZE):
    """Generate a private key for the given JWS algorithm."""
    if algorithm == "RS256":
        return rsa.generate_private_key(public_exponent=65537, key_size=key_size)
    if algorithm == "ES256":
        return ec.generate_private_key(ec.SECP256R1())
    raise ConfigurationError(f"Unsupported signing algorithm '{algorithm}'")


class SigningKeyManager:
    """
    Generates, rotates and retains signing key pairs.

    Example:
        >>> manager = SigningKeyManager(retention_window=3600)
        >>> old = manager.current()
        >>> new = manager.rotate()
        >>> [e.key_id for e in manager.public_set()] == [new.key_id, old.key_id]
        True
    """

    def __init__(
        self,
        algorithm: str = "RS256",
        key_size: int = MIN_RSA_KEY_SIZE,
        retention_window: float = 86400,
        clock: Callable[[], float] = time.time,
        key_factory: Callable[[str, int], Any] = generate_private_key,
    ):
        """
        Initialize and generate the first key pair.

        Args:
            algorithm: RS256 or ES256
            key_size: RSA modulus size in bits (ignored for ES256)
            retention_window: Seconds a retired key stays published
            clock: Time source
            key_factory: Callable producing a private key from (algorithm, key_size)

        Raises:
            ConfigurationError: Unsupported algorithm or key size below 2048 bits
            KeyGenerationFailure: The initial key could not be generated
        """
        if algorithm not in SUPPORTED_ALGORITHMS:
            raise ConfigurationError(
                f"Unsupported signing algorithm '{algorithm}' "
                f"(supported: {', '.join(SUPPORTED_ALGORITHMS)})"
            )
        if algorithm == "RS256" and key_size < MIN_RSA_KEY_SIZE:
            raise ConfigurationError(
                f"RSA key size must be at least {MIN_RSA_KEY_SIZE} bits, got {key_size}"
            )
        if retention_window < 0:
            raise ConfigurationError("Key retention window must not be negative")

        self.algorithm = algorithm
        self.key_size = key_size
        self.retention_window = retention_window
        self._clock = clock
        self._key_factory = key_factory

        self._write_lock = threading.Lock()
        self._id_lock = threading.Lock()
        self._issued_ids: Set[str] = set()

        self._key_set = KeySet(current=self._generate())
        logger.info(f"Initial signing key {self._key_set.current.key_id} ({algorithm}) ready")

    @classmethod
    def from_config(cls, config, **kwargs) -> "SigningKeyManager":
        """Build from a SigningKeyConfig."""
        return cls(
            algorithm=config.algorithm,
            key_size=config.key_size,
            retention_window=config.retention_window,
            **kwargs,
        )

    def _new_key_id(self) -> str:
        # 128 random bits, unrelated to the key material
        with self._id_lock:
            key_id = secrets.token_urlsafe(16)
            while key_id in self._issued_ids:
                key_id = secrets.token_urlsafe(16)
            self._issued_ids.add(key_id)
        return key_id

    def _generate(self) -> KeyPair:
        try:
            private_key = self._key_factory(self.algorithm, self.key_size)
            public_key = private_key.public_key()
        except Exception as e:
            raise KeyGenerationFailure(f"Failed to generate {self.algorithm} key pair: {e}") from e

        return KeyPair(
            key_id=self._new_key_id(),
            private_key=private_key,
            public_key=public_key,
            algorithm=self.algorithm,
            created_at=self._clock(),
        )

    def snapshot(self) -> KeySet:
        """Return the current KeySet."""
        return self._key_set

    def current(self) -> KeyPair:
        """Return the key pair new tokens should be signed with."""
        return self._key_set.current

    def public_set(self) -> Tuple[PublicKeyEntry, ...]:
        """
        Return the public keys valid for verification.

        The current key comes first, followed by retained keys whose
        retention window has not yet elapsed.
        """
        key_set = self._key_set
        now = self._clock()

        pairs = [key_set.current] + [
            retained.key_pair
            for retained in key_set.retained
            if now - retained.retired_at < self.retention_window
        ]
        return tuple(
            PublicKeyEntry(
                key_id=pair.key_id,
                public_key=pair.public_key,
                algorithm=pair.algorithm,
                created_at=pair.created_at,
            )
            for pair in pairs
        )

    def rotate(self) -> KeyPair:
        """
        Replace the current key with a freshly generated one.

        Returns:
            The new current KeyPair

        Raises:
            KeyGenerationFailure: Generation failed; the current key is unchanged
        """
        # generate outside the lock so readers and other writers are not held up
        try:
            new_pair = self._generate()
        except KeyGenerationFailure as e:
            logger.error(f"Key rotation failed, keeping key {self._key_set.current.key_id}: {e}")
            raise

        with self._write_lock:
            previous = self._key_set
            retired = RetainedKey(key_pair=previous.current, retired_at=self._clock())
            self._key_set = KeySet(current=new_pair, retained=(retired,) + previous.retained)

        logger.info(
            f"Rotated signing key {previous.current.key_id} -> {new_pair.key_id}"
        )
        return new_pair

    def purge_expired(self) -> List[str]:
        """
        Drop retained keys whose retention window has elapsed.

        Returns:
            Key ids that were purged
        """
        with self._write_lock:
            previous = self._key_set
            now = self._clock()
            kept = tuple(
                r for r in previous.retained if now - r.retired_at < self.retention_window
            )
            purged = [
                r.key_pair.key_id
                for r in previous.retained
                if now - r.retired_at >= self.retention_window
            ]
            if purged:
                self._key_set = KeySet(current=previous.current, retained=kept)

        for key_id in purged:
            logger.info(f"Purged retired signing key {key_id}")
        return purged
