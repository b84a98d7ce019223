"""
CSRF Middleware

Double-submit cookie protection: state-changing requests must echo the
value of the CSRF cookie in a request header. Enabled unless configuration
turns it off explicitly.
"""

import logging
import secrets
from typing import Iterable, Optional

from fastapi import Request
from fastapi.responses import JSONResponse

from ..gate import compile_path_pattern

logger = logging.getLogger(__name__)

SAFE_METHODS = frozenset({"GET", "HEAD", "OPTIONS", "TRACE"})


def new_csrf_token() -> str:
    """Generate a fresh CSRF token."""
    return secrets.token_urlsafe(32)


class CsrfMiddleware:
    """Reject unsafe requests whose CSRF header does not match the cookie."""

    def __init__(
        self,
        enabled: bool = True,
        cookie_name: str = "XSRF-TOKEN",
        header_name: str = "X-XSRF-TOKEN",
        exempt_paths: Optional[Iterable[str]] = None
    ):
        """
        Initialize CSRF middleware.

        Args:
            enabled: Whether to enforce the check
            cookie_name: Cookie holding the token
            header_name: Header the client must echo the token in
            exempt_paths: Ant-style patterns that skip the check
        """
        self.enabled = enabled
        self.cookie_name = cookie_name
        self.header_name = header_name
        self._exempt = [compile_path_pattern(p) for p in (exempt_paths or [])]

        if not enabled:
            logger.warning("CSRF protection is DISABLED")

    def is_exempt(self, request: Request) -> bool:
        if request.method.upper() in SAFE_METHODS:
            return True
        path = str(request.url.path)
        return any(pattern.match(path) for pattern in self._exempt)

    async def __call__(self, request: Request, call_next):
        """Process the request through CSRF validation."""
        if not self.enabled or self.is_exempt(request):
            return await call_next(request)

        cookie_token = request.cookies.get(self.cookie_name)
        header_token = request.headers.get(self.header_name)

        if (
            not cookie_token
            or not header_token
            or not secrets.compare_digest(cookie_token.encode(), header_token.encode())
        ):
            logger.warning(f"CSRF check failed for {request.method} {request.url.path}")
            return JSONResponse(
                status_code=403,
                content={"error": "Invalid or missing CSRF token", "status": 403}
            )

        return await call_next(request)


def create_csrf_middleware(csrf_config) -> CsrfMiddleware:
    """Factory function to create CSRF middleware from a CsrfConfig."""
    return CsrfMiddleware(
        enabled=csrf_config.enabled,
        cookie_name=csrf_config.cookie_name,
        header_name=csrf_config.header_name,
        exempt_paths=csrf_config.exempt_paths,
    )
