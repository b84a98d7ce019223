"""
Tests for the authee command line.
"""

import io
import json

import pytest

from authee.cli import build_parser, main
from authee.modules.auth import SecretVerifier


@pytest.fixture
def cheap_hashing(monkeypatch):
    monkeypatch.setenv("PASSWORD_TIME_COST", "1")
    monkeypatch.setenv("PASSWORD_MEMORY_COST", "8")
    monkeypatch.setenv("PASSWORD_PARALLELISM", "1")


def test_hash_secret_from_stdin(cheap_hashing, monkeypatch, capsys):
    """Test hash-secret prints a verifiable Argon2id hash."""
    monkeypatch.setattr("sys.stdin", io.StringIO("s3cr3t\n"))

    assert main(["hash-secret", "--stdin"]) == 0

    stored = capsys.readouterr().out.strip()
    assert stored.startswith("$argon2id$v=19$m=8,t=1,p=1$")
    assert SecretVerifier(time_cost=1, memory_cost=8).verify("s3cr3t", stored)


def test_hash_secret_empty(cheap_hashing, monkeypatch, capsys):
    """Test an empty secret is refused."""
    monkeypatch.setattr("sys.stdin", io.StringIO("\n"))

    assert main(["hash-secret", "--stdin"]) == 1
    assert "must not be empty" in capsys.readouterr().err


def test_hash_secret_prompt_mismatch(cheap_hashing, monkeypatch, capsys):
    """Test differing prompt answers are refused."""
    answers = iter(["first", "second"])
    monkeypatch.setattr("getpass.getpass", lambda prompt="": next(answers))

    assert main(["hash-secret"]) == 1
    assert "do not match" in capsys.readouterr().err


def test_jwks(monkeypatch, capsys):
    """Test jwks prints a public-only JWK Set."""
    monkeypatch.delenv("SIGNING_ALGORITHM", raising=False)

    assert main(["jwks", "--algorithm", "ES256"]) == 0

    jwks = json.loads(capsys.readouterr().out)
    assert len(jwks["keys"]) == 1
    assert jwks["keys"][0]["kty"] == "EC"
    assert "d" not in jwks["keys"][0]


def test_configuration_error_exit_code(monkeypatch, capsys):
    """Test configuration errors exit with status 2."""
    monkeypatch.setenv("PASSWORD_TIME_COST", "lots")
    monkeypatch.setattr("sys.stdin", io.StringIO("s3cr3t\n"))

    assert main(["hash-secret", "--stdin"]) == 2
    assert "PASSWORD_TIME_COST" in capsys.readouterr().err


def test_command_required():
    """Test running without a subcommand is a usage error."""
    with pytest.raises(SystemExit):
        build_parser().parse_args([])
