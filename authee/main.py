#!/usr/bin/env python3
"""
Authee - Main Entry Point

This is the thin orchestration layer that:
1. Loads configuration
2. Initializes modules
3. Wires them into a FastAPI application

All business logic is in the modules, following black box principles.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from authee import __version__
from authee.config.provider import ConfigProvider, EnvConfigProvider
from authee.errors import (
    AuthenticationBusy,
    ConfigurationError,
    InvalidCredentials,
    KeyGenerationFailure,
)
from authee.modules.api import (
    create_account_router,
    create_auth_router,
    create_discovery_router,
)
from authee.modules.auth import AuthFactory, IdentitySource
from authee.modules.gate import AuthorizationGate
from authee.modules.keys import JWKPublisher, KeyRotationScheduler, SigningKeyManager
from authee.modules.middleware import create_csrf_middleware, create_gate_middleware

logger = logging.getLogger(__name__)


def create_app(
    config_provider: Optional[ConfigProvider] = None,
    identity_source: Optional[IdentitySource] = None,
    key_manager: Optional[SigningKeyManager] = None,
) -> FastAPI:
    """
    Build the application and all of its modules.

    Signing key material is generated here, so a KeyGenerationFailure stops
    the process before it starts serving.

    Args:
        config_provider: Configuration source (defaults to environment)
        identity_source: Identity backend (defaults to the configured users file)
        key_manager: Pre-built key manager (defaults to one built from config)

    Returns:
        Configured FastAPI application
    """
    config_provider = config_provider or EnvConfigProvider()

    gate_config = config_provider.get_gate_config()
    csrf_config = config_provider.get_csrf_config()
    key_config = config_provider.get_signing_key_config()

    gate = AuthorizationGate.from_config(gate_config.rules)
    authenticator = AuthFactory.build(config_provider, identity_source)

    if key_manager is None:
        key_manager = SigningKeyManager.from_config(key_config)
    publisher = JWKPublisher(key_manager)
    scheduler = KeyRotationScheduler(
        key_manager,
        rotation_interval=key_config.rotation_interval,
        purge_interval=key_config.purge_interval,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Manage application lifecycle - start and stop background work.
        """
        logger.info("Starting Authee API...")
        scheduler.start()

        yield

        logger.info("Shutting down Authee API...")
        await scheduler.stop()
        authenticator.shutdown()
        logger.info("Authee API shutdown complete")

    app = FastAPI(
        title="Authee API",
        description="Authentication, authorization and signing key management",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.gate = gate
    app.state.authenticator = authenticator
    app.state.key_manager = key_manager
    app.state.publisher = publisher
    app.state.scheduler = scheduler

    # Registered first so it runs inside the CSRF check
    gate_middleware = create_gate_middleware(gate, authenticator, gate_config)

    @app.middleware("http")
    async def authorize(request: Request, call_next):
        return await gate_middleware(request, call_next)

    csrf_middleware = create_csrf_middleware(csrf_config)

    @app.middleware("http")
    async def csrf(request: Request, call_next):
        return await csrf_middleware(request, call_next)

    app.include_router(create_auth_router(authenticator, csrf_config))
    app.include_router(create_discovery_router(publisher, gate_config, csrf_config))
    app.include_router(create_account_router(key_manager))

    @app.get("/health")
    async def health():
        """Liveness check including the current signing key id."""
        return {
            "status": "healthy",
            "version": __version__,
            "signing_key": key_manager.current().key_id,
        }

    # Error handlers

    @app.exception_handler(InvalidCredentials)
    async def invalid_credentials_handler(request, exc):
        """Uniform rejection for every credential failure."""
        return JSONResponse(
            status_code=401,
            content={"error": InvalidCredentials.MESSAGE, "status": 401},
        )

    @app.exception_handler(AuthenticationBusy)
    async def busy_handler(request, exc):
        """Handle admission limit rejections."""
        return JSONResponse(
            status_code=503,
            content={"error": "Authentication temporarily unavailable", "status": 503},
            headers={"Retry-After": "1"},
        )

    @app.exception_handler(ConfigurationError)
    async def configuration_error_handler(request, exc):
        """Handle configuration errors without exposing details."""
        logger.error(f"Configuration error: {exc}")
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "status": 500},
        )

    @app.exception_handler(KeyGenerationFailure)
    async def key_generation_handler(request, exc):
        """Rotation failed; the previous key stays current."""
        logger.error(f"Key generation failure: {exc}")
        return JSONResponse(
            status_code=503,
            content={"error": "Key rotation failed; current key unchanged", "status": 503},
        )

    return app
