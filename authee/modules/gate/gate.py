"""
Authorization gate: classify each request as public or protected.

Rules are evaluated in order and the first match wins. A request no rule
matches requires authentication. The gate holds only immutable state, so a
single instance can be shared by every request handler without locking.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Iterable, Pattern, Sequence, Tuple

from ...errors import ConfigurationError


class Disposition(str, Enum):
    """What a matching rule says about a request."""
    PUBLIC = "public"
    PROTECTED = "protected"


class Decision(str, Enum):
    """Gate outcome for one request."""
    ALLOW = "allow"
    REQUIRE_AUTH = "require_auth"


def compile_path_pattern(pattern: str) -> Pattern[str]:
    """
    Compile an Ant-style path pattern into a regular expression.

    - ``?`` matches one character other than ``/``
    - ``*`` matches any run of characters inside one path segment
    - ``**`` matches zero or more whole path segments

    A trailing ``/**`` also matches the bare prefix, so ``/auth/**`` matches
    ``/auth``, ``/auth/`` and ``/auth/login``.
    """
    if not pattern:
        raise ConfigurationError("Access rule pattern must not be empty")

    regex = []
    i = 0
    while i < len(pattern):
        if pattern.startswith("/**", i):
            # zero or more segments, including the slash
            regex.append("(?:/.*)?")
            i += 3
        elif pattern.startswith("**", i):
            regex.append(".*")
            i += 2
        elif pattern[i] == "*":
            regex.append("[^/]*")
            i += 1
        elif pattern[i] == "?":
            regex.append("[^/]")
            i += 1
        else:
            regex.append(re.escape(pattern[i]))
            i += 1

    return re.compile("".join(regex) + r"\Z")


@dataclass(frozen=True)
class AccessRule:
    """One ordered access rule."""
    pattern: str
    disposition: Disposition
    methods: FrozenSet[str] = frozenset()
    _regex: Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "_regex", compile_path_pattern(self.pattern))
        object.__setattr__(self, "methods", frozenset(m.upper() for m in self.methods))

    def matches(self, path: str, method: str) -> bool:
        """Check whether this rule applies to the request."""
        if self.methods and method.upper() not in self.methods:
            return False
        return self._regex.match(path) is not None


class AuthorizationGate:
    """
    Ordered-rule authorization gate.

    Example:
        >>> gate = AuthorizationGate([
        ...     AccessRule("/auth/**", Disposition.PUBLIC),
        ...     AccessRule("/oauth2/**", Disposition.PUBLIC),
        ... ])
        >>> gate.decide("/auth/login", "POST")
        <Decision.ALLOW: 'allow'>
        >>> gate.decide("/account", "GET")
        <Decision.REQUIRE_AUTH: 'require_auth'>
    """

    def __init__(self, rules: Iterable[AccessRule]):
        self._rules: Tuple[AccessRule, ...] = tuple(rules)

    @property
    def rules(self) -> Tuple[AccessRule, ...]:
        return self._rules

    @classmethod
    def from_config(cls, rule_configs: Sequence) -> "AuthorizationGate":
        """
        Build a gate from AccessRuleConfig entries.

        Raises:
            ConfigurationError: On an empty pattern or unknown disposition
        """
        rules = []
        for cfg in rule_configs:
            try:
                disposition = Disposition(cfg.disposition)
            except ValueError:
                raise ConfigurationError(
                    f"Unknown disposition '{cfg.disposition}' for pattern '{cfg.pattern}'"
                )
            rules.append(AccessRule(cfg.pattern, disposition, frozenset(cfg.methods)))
        return cls(rules)

    def decide(self, path: str, method: str = "GET") -> Decision:
        """Return ALLOW for public requests and REQUIRE_AUTH otherwise."""
        for rule in self._rules:
            if rule.matches(path or "", method or ""):
                if rule.disposition is Disposition.PUBLIC:
                    return Decision.ALLOW
                return Decision.REQUIRE_AUTH
        return Decision.REQUIRE_AUTH
