"""
Shared pytest fixtures for Authee integration tests.

This module provides:
- Cheap hashing and ES256 configuration so app startup stays fast
- An in-memory identity source with admin, user and disabled accounts
- FastAPI test clients with and without CSRF protection
"""

import base64
from typing import Dict

import pytest
from fastapi.testclient import TestClient

from authee.config import (
    CsrfConfig,
    GateConfig,
    PasswordConfig,
    SigningKeyConfig,
    StaticConfigProvider,
    parse_access_rules,
)
from authee.config.provider import DEFAULT_ACCESS_RULES
from authee.main import create_app
from authee.modules.auth import CredentialRecord, InMemoryIdentitySource, SecretVerifier


# =============================================================================
# Configuration
# =============================================================================

FAST_PASSWORDS = PasswordConfig(time_cost=1, memory_cost=8, parallelism=1)
FAST_KEYS = SigningKeyConfig(algorithm="ES256", retention_window=3600)


def make_provider(**overrides) -> StaticConfigProvider:
    """Static config with fast hashing and key generation."""
    settings = {
        "password": FAST_PASSWORDS,
        "signing_key": FAST_KEYS,
    }
    settings.update(overrides)
    return StaticConfigProvider(**settings)


# =============================================================================
# Identities
# =============================================================================

@pytest.fixture(scope="session")
def identity_source() -> InMemoryIdentitySource:
    verifier = SecretVerifier.from_config(FAST_PASSWORDS)
    return InMemoryIdentitySource([
        CredentialRecord("alice", verifier.hash("alice-secret"), frozenset({"USER", "ADMIN"})),
        CredentialRecord("carol", verifier.hash("carol-secret"), frozenset({"USER"})),
        CredentialRecord("bob", verifier.hash("bob-secret"), frozenset({"USER"}), enabled=False),
    ])


def make_basic_auth(username: str, secret: str) -> Dict[str, str]:
    """Authorization header for HTTP Basic."""
    token = base64.b64encode(f"{username}:{secret}".encode()).decode()
    return {"Authorization": f"Basic {token}"}


@pytest.fixture
def basic_auth():
    return make_basic_auth


@pytest.fixture
def alice():
    return make_basic_auth("alice", "alice-secret")


@pytest.fixture
def carol():
    return make_basic_auth("carol", "carol-secret")


# =============================================================================
# Clients
# =============================================================================

@pytest.fixture
def client(identity_source):
    """Client for the default app (Basic challenge, CSRF on)."""
    app = create_app(make_provider(), identity_source=identity_source)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def csrf_client(client):
    """Default client that already holds a CSRF cookie and sends the header."""
    token = client.get("/auth/csrf").json()["token"]
    client.headers["X-XSRF-TOKEN"] = token
    return client


@pytest.fixture
def no_csrf_client(identity_source):
    """Client for an app with CSRF protection turned off."""
    app = create_app(
        make_provider(csrf=CsrfConfig(enabled=False)),
        identity_source=identity_source,
    )
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def redirect_client(identity_source):
    """Client for an app that redirects unauthenticated callers to the login page."""
    gate = GateConfig(
        rules=parse_access_rules(DEFAULT_ACCESS_RULES),
        challenge="redirect",
        login_url="/auth/login",
    )
    app = create_app(make_provider(gate=gate), identity_source=identity_source)
    with TestClient(app, follow_redirects=False) as test_client:
        yield test_client
