"""
Authee - Authentication and Authorization Core

Decides which requests need a proven identity, verifies submitted
credentials and manages the signing keys used for issued tokens.

Architecture:
- Each module is self-contained with clear interfaces
- Modules are completely replaceable
- No module knows the internals of another
- All communication through defined interfaces

Modules:
- gate: Request authorization (public vs. protected paths)
- auth: Credential verification against an identity source
- keys: Signing key lifecycle and JWK publication
- middleware: FastAPI request boundary (gate, CSRF)
- api: HTTP routes
"""

__version__ = "1.0.0"
