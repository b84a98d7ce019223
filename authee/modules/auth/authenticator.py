"""
Credential authenticator.

This module is a black box that:
- Resolves a username through an injected IdentitySource
- Delegates the secret check to the SecretVerifier
- Returns an Identity, or raises one uniform InvalidCredentials

Unknown users are verified against a dummy hash before failing, so the
response time does not reveal whether the username exists.
"""

import asyncio
import logging
import secrets
import threading
from concurrent.futures import ThreadPoolExecutor

from ...errors import AuthenticationBusy, ConfigurationError, InvalidCredentials
from .interfaces import Identity, IdentitySource
from .verifier import SecretVerifier

logger = logging.getLogger(__name__)


class CredentialAuthenticator:
    """
    Username/secret authentication against an identity source.

    The expensive hash runs on a bounded worker pool when called through
    authenticate_async(); at most max_pending attempts may be queued or
    running at once, further attempts are refused with AuthenticationBusy.
    """

    def __init__(
        self,
        identity_source: IdentitySource,
        verifier: SecretVerifier,
        max_workers: int = 4,
        max_pending: int = 64,
    ):
        """
        Initialize with injected dependencies.

        Args:
            identity_source: Backend used to look up credential records
            verifier: Secret verifier for stored hashes
            max_workers: Threads available for hashing
            max_pending: Admission limit for queued and running attempts

        Raises:
            ConfigurationError: If max_workers or max_pending is below 1
        """
        if max_workers < 1 or max_pending < 1:
            raise ConfigurationError(
                f"max_workers and max_pending must be at least 1, got {max_workers} and {max_pending}"
            )

        self.identity_source = identity_source
        self.verifier = verifier

        # same parameters as real hashes, so a miss costs the same as a mismatch
        self._dummy_hash = verifier.hash(secrets.token_urlsafe(32))

        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="authee-auth"
        )
        self._admission = threading.BoundedSemaphore(max_pending)

    def authenticate(self, username: str, presented_secret: str) -> Identity:
        """
        Verify credentials and build an Identity.

        Args:
            username: Submitted username
            presented_secret: Submitted secret, never logged

        Returns:
            Identity carrying the record's authorities

        Raises:
            InvalidCredentials: Unknown user, wrong secret or disabled account
            ConfigurationError: Stored hash is malformed
        """
        record = self.identity_source.find(username) if username else None

        if record is None:
            self.verifier.verify(presented_secret or "", self._dummy_hash)
            logger.info("Authentication failed")
            logger.debug(f"No credential record for '{username}'")
            raise InvalidCredentials()

        try:
            matched = self.verifier.verify(presented_secret or "", record.secret_hash)
        except ConfigurationError as e:
            logger.error(f"Credential record for '{username}' is unusable: {e}")
            raise

        if not matched or not record.enabled:
            logger.info("Authentication failed")
            logger.debug(f"Rejected credentials for '{username}'")
            raise InvalidCredentials()

        if self.verifier.needs_rehash(record.secret_hash):
            logger.info(f"Secret hash for '{username}' uses outdated parameters; rehash recommended")

        logger.info(f"Authenticated '{record.username}'")
        return Identity(principal=record.username, authorities=frozenset(record.authorities))

    async def authenticate_async(self, username: str, presented_secret: str) -> Identity:
        """
        Run authenticate() on the worker pool.

        Raises:
            AuthenticationBusy: When the admission limit is reached
            InvalidCredentials: See authenticate()
        """
        if not self._admission.acquire(blocking=False):
            logger.warning("Authentication admission limit reached")
            raise AuthenticationBusy("Too many pending authentication attempts")

        try:
            future = self._executor.submit(self.authenticate, username, presented_secret)
        except BaseException:
            self._admission.release()
            raise

        # the slot is held until the hash finishes, even if the caller gives up
        future.add_done_callback(lambda _: self._admission.release())
        return await asyncio.wrap_future(future)

    def shutdown(self) -> None:
        """Stop the worker pool."""
        self._executor.shutdown(wait=False)
