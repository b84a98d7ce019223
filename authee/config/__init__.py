"""
Config Module - Black Box Interface

Purpose: Application configuration management
Interface: ConfigProvider, EnvConfigProvider, StaticConfigProvider
Hidden: Environment parsing, defaults, validation

Can be replaced with a different config source without affecting the
modules that consume the config dataclasses.
"""

from .provider import (
    AccessRuleConfig,
    APIConfig,
    ConfigProvider,
    CsrfConfig,
    EnvConfigProvider,
    GateConfig,
    IdentityConfig,
    PasswordConfig,
    SigningKeyConfig,
    StaticConfigProvider,
    parse_access_rules,
)

__all__ = [
    "AccessRuleConfig",
    "APIConfig",
    "ConfigProvider",
    "CsrfConfig",
    "EnvConfigProvider",
    "GateConfig",
    "IdentityConfig",
    "PasswordConfig",
    "SigningKeyConfig",
    "StaticConfigProvider",
    "parse_access_rules",
]
