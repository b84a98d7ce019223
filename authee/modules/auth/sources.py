"""
Identity source backends.

Users file format (JSON)::

    {
      "users": [
        {"username": "alice", "secret_hash": "$argon2id$...",
         "authorities": ["USER", "ADMIN"], "enabled": true}
      ]
    }
"""

import json
import logging
from pathlib import Path
from typing import Dict, Iterable, Optional, Union

from ...errors import ConfigurationError
from .interfaces import CredentialRecord

logger = logging.getLogger(__name__)


class InMemoryIdentitySource:
    """Identity source holding credential records in a dict, read-only after load."""

    def __init__(self, records: Iterable[CredentialRecord] = ()):
        self._records: Dict[str, CredentialRecord] = {}
        for record in records:
            if record.username in self._records:
                raise ConfigurationError(f"Duplicate user '{record.username}' in identity source")
            self._records[record.username] = record

    def find(self, username: str) -> Optional[CredentialRecord]:
        return self._records.get(username)

    def __len__(self) -> int:
        return len(self._records)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "InMemoryIdentitySource":
        """
        Load users from a JSON users file.

        Raises:
            ConfigurationError: If the file is missing or malformed
        """
        path = Path(path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            raise ConfigurationError(f"Users file not found: {path}")
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Users file {path} is not valid JSON: {e}")
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigurationError(f"Users file {path} cannot be read: {e}")

        users = data.get("users") if isinstance(data, dict) else None
        if not isinstance(users, list):
            raise ConfigurationError(f"Users file {path} must contain a 'users' list")

        records = [_parse_user(path, entry) for entry in users]

        logger.info(f"Loaded {len(records)} users from {path}")
        return cls(records)


def _parse_user(path: Path, entry) -> CredentialRecord:
    if not isinstance(entry, dict):
        raise ConfigurationError(f"Users file {path}: every user must be an object")

    username = entry.get("username")
    secret_hash = entry.get("secret_hash")
    if not isinstance(username, str) or not isinstance(secret_hash, str):
        raise ConfigurationError(
            f"Users file {path}: every user needs string 'username' and 'secret_hash'"
        )

    authorities = entry.get("authorities", [])
    if not isinstance(authorities, list) or not all(isinstance(a, str) for a in authorities):
        raise ConfigurationError(
            f"Users file {path}: 'authorities' of '{username}' must be a list of strings"
        )

    enabled = entry.get("enabled", True)
    if not isinstance(enabled, bool):
        raise ConfigurationError(f"Users file {path}: 'enabled' of '{username}' must be true or false")

    return CredentialRecord(
        username=username,
        secret_hash=secret_hash,
        authorities=frozenset(authorities),
        enabled=enabled,
    )
