"""
Authee command line.

    authee serve          Run the API server
    authee hash-secret    Hash a secret for the users file
    authee jwks           Print a freshly generated public key set
"""

import argparse
import getpass
import json
import sys
from typing import List, Optional

from authee.config.provider import EnvConfigProvider
from authee.errors import AutheeError
from authee.logging_config import configure_logging, get_logging_config
from authee.modules.auth import SecretVerifier
from authee.modules.keys import JWKPublisher, SigningKeyManager


def cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    from authee.main import create_app

    config_provider = EnvConfigProvider()
    api_config = config_provider.get_api_config()
    configure_logging(api_config.log_level)

    app = create_app(config_provider)
    uvicorn.run(
        app,
        host=args.host or api_config.host,
        port=args.port or api_config.port,
        log_level=api_config.log_level.lower(),
        log_config=get_logging_config(api_config.log_level),
    )
    return 0


def cmd_hash_secret(args: argparse.Namespace) -> int:
    if args.stdin:
        secret = sys.stdin.readline().rstrip("\n")
    else:
        secret = getpass.getpass("Secret: ")
        if secret != getpass.getpass("Repeat: "):
            print("Secrets do not match", file=sys.stderr)
            return 1

    if not secret:
        print("Secret must not be empty", file=sys.stderr)
        return 1

    verifier = SecretVerifier.from_config(EnvConfigProvider().get_password_config())
    print(verifier.hash(secret))
    return 0


def cmd_jwks(args: argparse.Namespace) -> int:
    key_config = EnvConfigProvider().get_signing_key_config()
    if args.algorithm:
        key_config.algorithm = args.algorithm
    manager = SigningKeyManager.from_config(key_config)
    print(json.dumps(JWKPublisher(manager).publish(), indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="authee",
        description="Authentication, authorization and signing key management"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the API server")
    serve.add_argument("--host", help="Bind address (default: API_HOST)")
    serve.add_argument("--port", type=int, help="Bind port (default: API_PORT)")
    serve.set_defaults(func=cmd_serve)

    hash_secret = subparsers.add_parser("hash-secret", help="Hash a secret for the users file")
    hash_secret.add_argument("--stdin", action="store_true", help="Read the secret from stdin")
    hash_secret.set_defaults(func=cmd_hash_secret)

    jwks = subparsers.add_parser("jwks", help="Print a freshly generated JWK Set")
    jwks.add_argument("--algorithm", choices=["RS256", "ES256"], help="Signing algorithm")
    jwks.set_defaults(func=cmd_jwks)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return args.func(args)
    except AutheeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
