"""
Authentication Factory following Black Box Design principles.

This factory:
- Constructs the authentication stack based on configuration
- Wires dependencies together
- Returns only the authenticator facade
"""

import logging
from typing import Optional

from ...config.provider import ConfigProvider
from .authenticator import CredentialAuthenticator
from .interfaces import IdentitySource
from .sources import InMemoryIdentitySource
from .verifier import SecretVerifier

logger = logging.getLogger(__name__)


class AuthFactory:
    """
    Factory for building the authentication stack.

    This is the composition root that:
    - Creates the verifier and identity source
    - Wires them into a CredentialAuthenticator
    """

    @staticmethod
    def build(
        config_provider: ConfigProvider,
        identity_source: Optional[IdentitySource] = None
    ) -> CredentialAuthenticator:
        """
        Build the complete authentication stack.

        Args:
            config_provider: Configuration provider
            identity_source: Optional identity backend; loaded from the
                configured users file when omitted

        Returns:
            CredentialAuthenticator
        """
        password_config = config_provider.get_password_config()
        verifier = SecretVerifier.from_config(password_config)

        if identity_source is None:
            identity_config = config_provider.get_identity_config()
            if identity_config.users_file:
                identity_source = InMemoryIdentitySource.from_file(identity_config.users_file)
            else:
                logger.warning("No USERS_FILE configured - every login attempt will be rejected")
                identity_source = InMemoryIdentitySource()

        logger.info(
            f"Building authentication stack (workers={password_config.max_workers}, "
            f"max_pending={password_config.max_pending})"
        )
        return CredentialAuthenticator(
            identity_source=identity_source,
            verifier=verifier,
            max_workers=password_config.max_workers,
            max_pending=password_config.max_pending,
        )
