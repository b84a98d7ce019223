"""
Authentication Middleware Module - Black Box Interface

Purpose: Enforce the authorization gate and CSRF protection for FastAPI apps
Interface: GateMiddleware, CsrfMiddleware, create_gate_middleware()
Hidden: Header parsing, challenge formatting, error mapping

Failures are reported with a uniform body; no internal detail leaks to the
client.
"""

from .csrf import CsrfMiddleware, create_csrf_middleware
from .gate import GateMiddleware, create_gate_middleware

__all__ = [
    "CsrfMiddleware",
    "GateMiddleware",
    "create_csrf_middleware",
    "create_gate_middleware",
]
