"""
Secret verifier backed by Argon2id.

Salt and cost parameters are embedded in each encoded hash, so hashes made
with older parameters keep verifying after the configuration changes.
"""

import logging

from argon2 import PasswordHasher, Type
from argon2.exceptions import InvalidHash, VerificationError, VerifyMismatchError

from ...errors import ConfigurationError

logger = logging.getLogger(__name__)

# recommended Argon2id floor; weaker settings are allowed but logged
MIN_TIME_COST = 2
MIN_MEMORY_COST = 19456


class SecretVerifier:
    """One-way salted hashing and constant-time verification of secrets."""

    def __init__(self, time_cost: int = 2, memory_cost: int = 19456, parallelism: int = 1):
        """
        Initialize the verifier.

        Args:
            time_cost: Argon2 iterations
            memory_cost: Argon2 memory in KiB
            parallelism: Argon2 lanes

        Raises:
            ConfigurationError: If the parameters are rejected by Argon2
        """
        if time_cost < 1 or parallelism < 1 or memory_cost < 8 * parallelism:
            raise ConfigurationError(
                "Invalid Argon2 parameters: time_cost >= 1, parallelism >= 1 "
                "and memory_cost >= 8 * parallelism are required"
            )
        self._hasher = PasswordHasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
            type=Type.ID,
        )
        if time_cost < MIN_TIME_COST or memory_cost < MIN_MEMORY_COST:
            logger.warning(
                f"Argon2 parameters t={time_cost}, m={memory_cost} KiB are below the "
                f"recommended floor t={MIN_TIME_COST}, m={MIN_MEMORY_COST} KiB"
            )

    @classmethod
    def from_config(cls, config) -> "SecretVerifier":
        """Build from a PasswordConfig."""
        return cls(
            time_cost=config.time_cost,
            memory_cost=config.memory_cost,
            parallelism=config.parallelism,
        )

    def hash(self, plain: str) -> str:
        """Hash a secret with a fresh salt and the configured work factor."""
        return self._hasher.hash(plain)

    def verify(self, plain: str, stored_hash: str) -> bool:
        """
        Check a presented secret against a stored hash.

        Returns:
            True on match, False on mismatch

        Raises:
            ConfigurationError: If stored_hash is not a valid Argon2 hash
        """
        try:
            return self._hasher.verify(stored_hash, plain)
        except VerifyMismatchError:
            return False
        except (InvalidHash, UnicodeError):
            raise ConfigurationError("Stored secret hash is malformed")
        except VerificationError as e:
            # parameters decoded but Argon2 refused them
            logger.error(f"Stored secret hash could not be verified: {e}")
            raise ConfigurationError("Stored secret hash is unusable")

    def needs_rehash(self, stored_hash: str) -> bool:
        """Check whether a hash was made with different parameters than current."""
        try:
            return self._hasher.check_needs_rehash(stored_hash)
        except (InvalidHash, ValueError):
            raise ConfigurationError("Stored secret hash is malformed")
