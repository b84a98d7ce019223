"""
Unit tests for the credential authenticator.
"""

import asyncio
import threading
import time
from unittest.mock import MagicMock

import pytest
from argon2 import extract_parameters

from authee.errors import AuthenticationBusy, ConfigurationError, InvalidCredentials
from authee.modules.auth import (
    CredentialAuthenticator,
    CredentialRecord,
    Identity,
    InMemoryIdentitySource,
    SecretVerifier,
)


@pytest.fixture
def verifier():
    """Create a verifier with cheap parameters for fast tests."""
    return SecretVerifier(time_cost=1, memory_cost=8, parallelism=1)


@pytest.fixture
def identity_source(verifier):
    """Create an identity source with an active and a disabled user."""
    return InMemoryIdentitySource([
        CredentialRecord("alice", verifier.hash("s3cr3t"), frozenset({"USER", "ADMIN"})),
        CredentialRecord("bob", verifier.hash("hunter2"), frozenset({"USER"}), enabled=False),
        CredentialRecord("broken", "not-a-valid-hash", frozenset({"USER"})),
    ])


@pytest.fixture
def authenticator(identity_source, verifier):
    """Create an authenticator over the test identity source."""
    auth = CredentialAuthenticator(identity_source, verifier, max_workers=2, max_pending=4)
    yield auth
    auth.shutdown()


def test_authenticate_success(authenticator):
    """Test valid credentials produce an Identity with the record's authorities."""
    identity = authenticator.authenticate("alice", "s3cr3t")

    assert isinstance(identity, Identity)
    assert identity.principal == "alice"
    assert identity.authorities == frozenset({"USER", "ADMIN"})
    assert identity.has_authority("ADMIN")


def test_unknown_user_and_wrong_secret_are_indistinguishable(authenticator):
    """Test unknown user and wrong secret fail with the same class and message."""
    with pytest.raises(InvalidCredentials) as unknown:
        authenticator.authenticate("mallory", "anything")
    with pytest.raises(InvalidCredentials) as wrong:
        authenticator.authenticate("alice", "wrong")

    assert type(unknown.value) is type(wrong.value)
    assert str(unknown.value) == str(wrong.value)
    assert unknown.value.args == wrong.value.args


def test_disabled_account_fails_uniformly(authenticator):
    """Test a disabled account is rejected like a wrong secret."""
    with pytest.raises(InvalidCredentials) as exc:
        authenticator.authenticate("bob", "hunter2")
    assert str(exc.value) == InvalidCredentials.MESSAGE


def test_unknown_user_still_pays_for_verification(identity_source, verifier):
    """Test a lookup miss runs one verification against a same-cost dummy hash."""
    spy = MagicMock(wraps=verifier)
    auth = CredentialAuthenticator(identity_source, spy)

    with pytest.raises(InvalidCredentials):
        auth.authenticate("mallory", "anything")
    assert spy.verify.call_count == 1
    dummy_hash = spy.verify.call_args[0][1]

    spy.verify.reset_mock()
    with pytest.raises(InvalidCredentials):
        auth.authenticate("alice", "wrong")
    assert spy.verify.call_count == 1
    real_hash = spy.verify.call_args[0][1]

    # same algorithm and work factor on both paths
    assert extract_parameters(dummy_hash) == extract_parameters(real_hash)
    auth.shutdown()


def test_timing_of_unknown_user_and_wrong_secret_is_comparable():
    """Test both failure paths take the same order of time."""
    verifier = SecretVerifier(time_cost=2, memory_cost=4096, parallelism=1)
    source = InMemoryIdentitySource([CredentialRecord("alice", verifier.hash("s3cr3t"))])
    auth = CredentialAuthenticator(source, verifier)

    def median_duration(username):
        samples = []
        for _ in range(7):
            start = time.perf_counter()
            with pytest.raises(InvalidCredentials):
                auth.authenticate(username, "wrong")
            samples.append(time.perf_counter() - start)
        return sorted(samples)[len(samples) // 2]

    unknown = median_duration("mallory")
    wrong = median_duration("alice")
    auth.shutdown()

    assert 0.33 < unknown / wrong < 3.0


def test_empty_credentials_rejected(authenticator):
    """Test empty username and secret are treated as a normal miss."""
    with pytest.raises(InvalidCredentials):
        authenticator.authenticate("", "")
    with pytest.raises(InvalidCredentials):
        authenticator.authenticate("alice", "")


def test_malformed_stored_hash_is_configuration_error(authenticator):
    """Test a broken stored hash surfaces as ConfigurationError."""
    with pytest.raises(ConfigurationError):
        authenticator.authenticate("broken", "anything")


def test_secret_never_logged(authenticator, caplog):
    """Test the presented secret does not appear in any log record."""
    caplog.set_level("DEBUG", logger="authee")

    authenticator.authenticate("alice", "s3cr3t")
    with pytest.raises(InvalidCredentials):
        authenticator.authenticate("alice", "wrong-secret-value")
    with pytest.raises(InvalidCredentials):
        authenticator.authenticate("mallory", "another-secret-value")

    text = caplog.text
    assert "s3cr3t" not in text
    assert "wrong-secret-value" not in text
    assert "another-secret-value" not in text


def test_identity_is_immutable(authenticator):
    """Test an Identity cannot be modified after creation."""
    identity = authenticator.authenticate("alice", "s3cr3t")
    with pytest.raises(Exception):
        identity.principal = "mallory"


def test_record_repr_hides_hash(verifier):
    """Test the stored hash is not part of the record's repr."""
    record = CredentialRecord("alice", verifier.hash("s3cr3t"))
    assert "argon2" not in repr(record)


def test_rehash_hint_logged(identity_source, caplog):
    """Test an outdated hash is reported after a successful login."""
    stronger = SecretVerifier(time_cost=2, memory_cost=16, parallelism=1)
    auth = CredentialAuthenticator(identity_source, stronger)
    caplog.set_level("INFO", logger="authee")

    auth.authenticate("alice", "s3cr3t")

    assert "rehash recommended" in caplog.text
    auth.shutdown()


@pytest.mark.asyncio
async def test_authenticate_async_success(authenticator):
    """Test the async path returns the same Identity."""
    identity = await authenticator.authenticate_async("alice", "s3cr3t")
    assert identity.principal == "alice"


@pytest.mark.asyncio
async def test_authenticate_async_failure(authenticator):
    """Test the async path propagates InvalidCredentials."""
    with pytest.raises(InvalidCredentials):
        await authenticator.authenticate_async("alice", "wrong")


@pytest.mark.asyncio
async def test_authenticate_async_runs_off_loop_thread(identity_source, verifier):
    """Test hashing happens on a worker thread, not the event loop thread."""
    seen = []
    original = verifier.verify

    def recording_verify(plain, stored):
        seen.append(threading.current_thread().name)
        return original(plain, stored)

    verifier.verify = recording_verify
    auth = CredentialAuthenticator(identity_source, verifier)
    await auth.authenticate_async("alice", "s3cr3t")
    auth.shutdown()

    assert seen and all(name.startswith("authee-auth") for name in seen)


@pytest.mark.asyncio
async def test_admission_limit(identity_source, verifier):
    """Test attempts beyond max_pending are refused with AuthenticationBusy."""
    release = threading.Event()
    started = threading.Event()

    class BlockingSource:
        def find(self, username):
            started.set()
            release.wait(5)
            return identity_source.find(username)

    auth = CredentialAuthenticator(BlockingSource(), verifier, max_workers=1, max_pending=1)
    first = asyncio.ensure_future(auth.authenticate_async("alice", "s3cr3t"))
    await asyncio.get_running_loop().run_in_executor(None, started.wait, 5)

    with pytest.raises(AuthenticationBusy):
        await auth.authenticate_async("alice", "s3cr3t")

    release.set()
    identity = await first
    assert identity.principal == "alice"

    # slot is free again
    identity = await auth.authenticate_async("alice", "s3cr3t")
    assert identity.principal == "alice"
    auth.shutdown()


@pytest.mark.parametrize("kwargs", [{"max_workers": 0}, {"max_pending": 0}])
def test_worker_limits_must_be_positive(identity_source, verifier, kwargs):
    """Test limits that would break authentication are refused at construction."""
    with pytest.raises(ConfigurationError):
        CredentialAuthenticator(identity_source, verifier, **kwargs)
