"""
Key Discovery Endpoints for Authee API

This module serves the JWK Set that external parties use to verify tokens
signed by this service, plus a small description of the auth setup.
"""

from typing import Dict

from fastapi import APIRouter

from ..keys.jwks import JWKPublisher


def create_discovery_router(publisher: JWKPublisher, gate_config, csrf_config) -> APIRouter:
    """
    Create discovery router with injected publisher and config.

    Args:
        publisher: JWK publisher reading the key manager's public set
        gate_config: GateConfig (challenge type, realm)
        csrf_config: CsrfConfig

    Returns:
        FastAPI router with discovery endpoints
    """
    router = APIRouter(tags=["discovery"])

    @router.get("/oauth2/jwks")
    async def jwks() -> Dict:
        """JWK Set with the current and retained public signing keys."""
        return publisher.publish()

    @router.get("/.well-known/jwks.json")
    async def well_known_jwks() -> Dict:
        """
        Alternative JWKS location.

        Some verifiers look for this instead of /oauth2/jwks.
        """
        return publisher.publish()

    @router.get("/.well-known/authee-auth")
    async def get_auth_config() -> Dict:
        """
        Get authentication configuration for clients.

        Returns:
            Authentication configuration dictionary
        """
        return {
            "authentication_methods": ["basic"],
            "challenge": gate_config.challenge,
            "realm": gate_config.realm,
            "login_endpoint": "/auth/login",
            "jwks_uri": "/oauth2/jwks",
            "csrf": {
                "enabled": csrf_config.enabled,
                "token_endpoint": "/auth/csrf",
                "cookie": csrf_config.cookie_name,
                "header": csrf_config.header_name,
            },
        }

    return router
