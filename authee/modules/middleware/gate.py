"""
Gate Middleware

Runs every request through the AuthorizationGate and, for protected paths,
authenticates HTTP Basic credentials before the route handler is reached.
"""

import base64
import binascii
import logging
from typing import Any, Dict, Optional, Tuple

from fastapi import Request
from fastapi.responses import JSONResponse, RedirectResponse

from ...errors import AuthenticationBusy, ConfigurationError, InvalidCredentials
from ..auth.authenticator import CredentialAuthenticator
from ..gate import AuthorizationGate, Decision

logger = logging.getLogger(__name__)


class GateMiddleware:
    """
    Authorization middleware for FastAPI applications.

    Public requests pass straight through. Protected requests must carry
    valid Basic credentials; the resulting Identity is stored on
    ``request.state.identity`` for downstream handlers.
    """

    def __init__(
        self,
        gate: AuthorizationGate,
        authenticator: CredentialAuthenticator,
        challenge: str = "basic",
        realm: str = "authee",
        login_url: str = "/auth/login",
        log_attempts: bool = True
    ):
        """
        Initialize gate middleware.

        Args:
            gate: Authorization gate deciding public vs. protected
            authenticator: Credential authenticator for protected requests
            challenge: "basic" (401 + WWW-Authenticate) or "redirect" (302 to login_url)
            realm: Realm announced in the Basic challenge
            login_url: Login page used by the redirect challenge
            log_attempts: Whether to log authentication attempts
        """
        self.gate = gate
        self.authenticator = authenticator
        self.challenge = challenge
        self.realm = realm
        self.login_url = login_url
        self.log_attempts = log_attempts

    @staticmethod
    def extract_basic_credentials(request: Request) -> Optional[Tuple[str, str]]:
        """Extract (username, secret) from an Authorization: Basic header."""
        header = request.headers.get("authorization")
        if not header:
            return None

        scheme, _, encoded = header.partition(" ")
        if scheme.lower() != "basic" or not encoded:
            return None

        try:
            decoded = base64.b64decode(encoded.strip(), validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError):
            return None

        username, sep, secret = decoded.partition(":")
        if not sep:
            return None
        return username, secret

    def format_error(self, status_code: int, message: str) -> Dict[str, Any]:
        """Format error response body."""
        return {
            "error": message,
            "status": status_code
        }

    def challenge_response(self):
        """Build the response sent when proof of identity is missing or wrong."""
        if self.challenge == "redirect":
            return RedirectResponse(self.login_url, status_code=302)
        return JSONResponse(
            status_code=401,
            content=self.format_error(401, "Authentication required"),
            headers={"WWW-Authenticate": f'Basic realm="{self.realm}", charset="UTF-8"'}
        )

    async def __call__(self, request: Request, call_next):
        """Process the request through the gate."""
        path = str(request.url.path)
        method = request.method.upper()

        if self.gate.decide(path, method) is Decision.ALLOW:
            if self.log_attempts:
                logger.debug(f"Public request {method} {path}")
            return await call_next(request)

        credentials = self.extract_basic_credentials(request)
        if credentials is None:
            if self.log_attempts:
                logger.warning(f"Request to {path} without credentials")
            return self.challenge_response()

        username, secret = credentials
        try:
            identity = await self.authenticator.authenticate_async(username, secret)
        except InvalidCredentials:
            if self.log_attempts:
                logger.warning(f"Invalid credentials attempted for {path}")
            return self.challenge_response()
        except AuthenticationBusy:
            return JSONResponse(
                status_code=503,
                content=self.format_error(503, "Authentication temporarily unavailable"),
                headers={"Retry-After": "1"}
            )
        except ConfigurationError as e:
            logger.error(f"Authentication configuration error: {e}")
            return JSONResponse(
                status_code=500,
                content=self.format_error(500, "Internal error during authentication")
            )
        except Exception as e:
            logger.error(f"Error during authentication: {e}")
            return JSONResponse(
                status_code=500,
                content=self.format_error(500, "Internal error during authentication")
            )

        if self.log_attempts:
            logger.info(f"Request authenticated for {identity.principal}")

        request.state.identity = identity
        return await call_next(request)


def create_gate_middleware(gate: AuthorizationGate, authenticator: CredentialAuthenticator, gate_config) -> GateMiddleware:
    """
    Factory function to create gate middleware from a GateConfig.

    Args:
        gate: Authorization gate
        authenticator: Credential authenticator
        gate_config: GateConfig with challenge settings

    Returns:
        Configured GateMiddleware instance
    """
    return GateMiddleware(
        gate=gate,
        authenticator=authenticator,
        challenge=gate_config.challenge,
        realm=gate_config.realm,
        login_url=gate_config.login_url,
    )
