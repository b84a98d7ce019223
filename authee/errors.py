"""Error taxonomy shared by all Authee modules."""


class AutheeError(Exception):
    """Base class for Authee errors."""


class InvalidCredentials(AutheeError):
    """
    Credentials were rejected.

    Raised for an unknown user, a wrong secret and a disabled account alike,
    always with the same message, so callers cannot tell them apart.
    """

    MESSAGE = "Invalid credentials"

    def __init__(self):
        super().__init__(self.MESSAGE)


class ConfigurationError(AutheeError):
    """Malformed stored hash or missing/invalid configuration."""


class KeyGenerationFailure(AutheeError):
    """Signing key material could not be generated."""


class AuthenticationBusy(AutheeError):
    """Too many authentication attempts are already queued."""
