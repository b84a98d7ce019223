"""Configuration provider following Black Box Design principles."""
import os
from dataclasses import dataclass, field
from typing import List, Optional, Protocol, Tuple

from ..errors import ConfigurationError


DEFAULT_ACCESS_RULES = "/auth/**=public,/oauth2/**=public,/.well-known/**=public,/health=public"


@dataclass
class AccessRuleConfig:
    """One configured access rule, before compilation by the gate."""
    pattern: str
    disposition: str
    methods: Tuple[str, ...] = ()


@dataclass
class APIConfig:
    """API configuration."""
    port: int
    host: str
    debug: bool
    log_level: str


@dataclass
class GateConfig:
    """Authorization gate configuration."""
    rules: List[AccessRuleConfig]
    challenge: str = "basic"
    realm: str = "authee"
    login_url: str = "/auth/login"


@dataclass
class PasswordConfig:
    """Secret hashing and authenticator pool configuration."""
    time_cost: int = 2
    memory_cost: int = 19456
    parallelism: int = 1
    max_workers: int = 4
    max_pending: int = 64


@dataclass
class SigningKeyConfig:
    """Signing key lifecycle configuration."""
    algorithm: str = "RS256"
    key_size: int = 2048
    rotation_interval: int = 0
    retention_window: int = 86400
    purge_interval: int = 300


@dataclass
class CsrfConfig:
    """Cross-site request forgery protection configuration."""
    enabled: bool = True
    exempt_paths: List[str] = field(default_factory=list)
    cookie_name: str = "XSRF-TOKEN"
    header_name: str = "X-XSRF-TOKEN"


@dataclass
class IdentityConfig:
    """Identity source configuration."""
    users_file: Optional[str] = None


class ConfigProvider(Protocol):
    """Protocol for configuration providers."""

    def get_api_config(self) -> APIConfig:
        """Get API configuration."""
        ...

    def get_gate_config(self) -> GateConfig:
        """Get authorization gate configuration."""
        ...

    def get_password_config(self) -> PasswordConfig:
        """Get secret hashing configuration."""
        ...

    def get_signing_key_config(self) -> SigningKeyConfig:
        """Get signing key configuration."""
        ...

    def get_csrf_config(self) -> CsrfConfig:
        """Get CSRF configuration."""
        ...

    def get_identity_config(self) -> IdentityConfig:
        """Get identity source configuration."""
        ...


def parse_access_rules(value: str) -> List[AccessRuleConfig]:
    """
    Parse an ACCESS_RULES value into ordered rule configs.

    Format: comma-separated ``[METHODS ]pattern=disposition`` entries, where
    METHODS is an optional ``|``-separated list.

    Example:
        >>> parse_access_rules("/auth/**=public,GET|HEAD /docs/**=public")
        [AccessRuleConfig(pattern='/auth/**', disposition='public', methods=()),
         AccessRuleConfig(pattern='/docs/**', disposition='public', methods=('GET', 'HEAD'))]
    """
    rules = []
    for entry in value.split(","):
        entry = entry.strip()
        if not entry:
            continue

        if "=" not in entry:
            raise ConfigurationError(
                f"Invalid access rule '{entry}': expected '[METHODS ]pattern=disposition'"
            )
        target, disposition = entry.rsplit("=", 1)

        methods: Tuple[str, ...] = ()
        target = target.strip()
        if " " in target:
            method_part, target = target.split(None, 1)
            methods = tuple(m.strip().upper() for m in method_part.split("|") if m.strip())

        rules.append(
            AccessRuleConfig(
                pattern=target.strip(),
                disposition=disposition.strip().lower(),
                methods=methods,
            )
        )
    return rules


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got '{raw}'")


_TRUE_VALUES = ("true", "1", "yes", "on")
_FALSE_VALUES = ("false", "0", "no", "off")


def _get_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{name} must be true or false, got '{raw}'")


def _get_positive_int(name: str, default: int) -> int:
    value = _get_int(name, default)
    if value < 1:
        raise ConfigurationError(f"{name} must be at least 1, got {value}")
    return value


class EnvConfigProvider:
    """Environment-based configuration provider."""

    def get_api_config(self) -> APIConfig:
        """Get API configuration from environment variables."""
        return APIConfig(
            port=_get_int("API_PORT", 8080),
            host=os.getenv("API_HOST", "0.0.0.0"),
            debug=_get_bool("API_DEBUG", False),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    def get_gate_config(self) -> GateConfig:
        """Get authorization gate configuration from environment variables."""
        challenge = os.getenv("AUTH_CHALLENGE", "basic").lower()
        if challenge not in ("basic", "redirect"):
            raise ConfigurationError(
                f"AUTH_CHALLENGE must be 'basic' or 'redirect', got '{challenge}'"
            )

        return GateConfig(
            rules=parse_access_rules(os.getenv("ACCESS_RULES", DEFAULT_ACCESS_RULES)),
            challenge=challenge,
            realm=os.getenv("AUTH_REALM", "authee"),
            login_url=os.getenv("LOGIN_URL", "/auth/login"),
        )

    def get_password_config(self) -> PasswordConfig:
        """Get secret hashing configuration from environment variables."""
        defaults = PasswordConfig()
        return PasswordConfig(
            time_cost=_get_int("PASSWORD_TIME_COST", defaults.time_cost),
            memory_cost=_get_int("PASSWORD_MEMORY_COST", defaults.memory_cost),
            parallelism=_get_int("PASSWORD_PARALLELISM", defaults.parallelism),
            max_workers=_get_positive_int("AUTH_MAX_WORKERS", defaults.max_workers),
            max_pending=_get_positive_int("AUTH_MAX_PENDING", defaults.max_pending),
        )

    def get_signing_key_config(self) -> SigningKeyConfig:
        """Get signing key configuration from environment variables."""
        defaults = SigningKeyConfig()
        return SigningKeyConfig(
            algorithm=os.getenv("SIGNING_ALGORITHM", defaults.algorithm).upper(),
            key_size=_get_int("SIGNING_KEY_SIZE", defaults.key_size),
            rotation_interval=_get_int("KEY_ROTATION_INTERVAL", defaults.rotation_interval),
            retention_window=_get_int("KEY_RETENTION_WINDOW", defaults.retention_window),
            purge_interval=_get_int("KEY_PURGE_INTERVAL", defaults.purge_interval),
        )

    def get_csrf_config(self) -> CsrfConfig:
        """Get CSRF configuration from environment variables."""
        exempt = os.getenv("CSRF_EXEMPT_PATHS", "")
        return CsrfConfig(
            enabled=_get_bool("CSRF_ENABLED", True),
            exempt_paths=[p.strip() for p in exempt.split(",") if p.strip()],
            cookie_name=os.getenv("CSRF_COOKIE_NAME", "XSRF-TOKEN"),
            header_name=os.getenv("CSRF_HEADER_NAME", "X-XSRF-TOKEN"),
        )

    def get_identity_config(self) -> IdentityConfig:
        """Get identity source configuration from environment variables."""
        return IdentityConfig(users_file=os.getenv("USERS_FILE") or None)


class StaticConfigProvider:
    """Configuration provider holding fixed config objects (tests, embedding)."""

    def __init__(
        self,
        api: Optional[APIConfig] = None,
        gate: Optional[GateConfig] = None,
        password: Optional[PasswordConfig] = None,
        signing_key: Optional[SigningKeyConfig] = None,
        csrf: Optional[CsrfConfig] = None,
        identity: Optional[IdentityConfig] = None,
    ):
        self._api = api or APIConfig(port=8080, host="127.0.0.1", debug=False, log_level="INFO")
        self._gate = gate or GateConfig(rules=parse_access_rules(DEFAULT_ACCESS_RULES))
        self._password = password or PasswordConfig()
        self._signing_key = signing_key or SigningKeyConfig()
        self._csrf = csrf or CsrfConfig()
        self._identity = identity or IdentityConfig()

    def get_api_config(self) -> APIConfig:
        return self._api

    def get_gate_config(self) -> GateConfig:
        return self._gate

    def get_password_config(self) -> PasswordConfig:
        return self._password

    def get_signing_key_config(self) -> SigningKeyConfig:
        return self._signing_key

    def get_csrf_config(self) -> CsrfConfig:
        return self._csrf

    def get_identity_config(self) -> IdentityConfig:
        return self._identity
