"""daydev-utils - shared utilities for backend services.

Secure refresh tokens, HS256 JWT signing, a structlog logging façade and
clock helpers.
"""

__version__ = "0.1.0"

from daydev_utils.crypto import generate_refresh_token, hash_token

__all__ = ["generate_refresh_token", "hash_token", "__version__"]
