"""
Login and CSRF endpoints.

Both live under /auth/** and are public; the login endpoint is where
clients prove their identity.
"""

import logging
from typing import Dict

from fastapi import APIRouter, Response

from ..auth.authenticator import CredentialAuthenticator
from ..middleware.csrf import new_csrf_token
from .models import CsrfTokenResponse, IdentityResponse, LoginRequest

logger = logging.getLogger(__name__)


def create_auth_router(authenticator: CredentialAuthenticator, csrf_config) -> APIRouter:
    """
    Create authentication router with injected dependencies.

    Args:
        authenticator: Credential authenticator
        csrf_config: CsrfConfig naming the token cookie and header

    Returns:
        FastAPI router with login and CSRF endpoints
    """
    router = APIRouter(prefix="/auth", tags=["auth"])

    @router.get("/csrf", response_model=CsrfTokenResponse)
    async def issue_csrf_token(response: Response) -> CsrfTokenResponse:
        """
        Issue a CSRF token.

        The token is set as a cookie and returned in the body; clients echo
        it in the CSRF header on every state-changing request.
        """
        token = new_csrf_token()
        response.set_cookie(
            key=csrf_config.cookie_name,
            value=token,
            httponly=False,
            samesite="strict",
        )
        return CsrfTokenResponse(
            token=token,
            header_name=csrf_config.header_name,
            cookie_name=csrf_config.cookie_name,
        )

    @router.get("/login")
    async def login_info() -> Dict:
        """Describe how to log in (target of the redirect challenge)."""
        return {
            "login": "POST /auth/login",
            "body": {"username": "string", "password": "string"},
            "csrf": {
                "token_endpoint": "/auth/csrf",
                "header": csrf_config.header_name,
                "enabled": csrf_config.enabled,
            },
        }

    @router.post("/login", response_model=IdentityResponse)
    async def login(request: LoginRequest) -> IdentityResponse:
        """
        Authenticate a username/secret pair.

        Returns:
            200: The proven identity
            401: Invalid credentials (same response for every kind of failure)
            503: Too many pending authentication attempts
        """
        identity = await authenticator.authenticate_async(
            request.username, request.password.get_secret_value()
        )
        return IdentityResponse.from_identity(identity)

    return router
