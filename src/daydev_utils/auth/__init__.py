"""JWT signing components.

This module provides HS256 token signing and the verifying decode used by
services that issue their own tokens.
"""

from daydev_utils.auth.jwt_service import (
    ALGORITHM,
    InvalidTokenError,
    JWTError,
    JWTService,
    RegisteredClaims,
    TokenExpiredError,
    generate_token,
    jwt_service,
)

__all__ = [
    "ALGORITHM",
    "InvalidTokenError",
    "JWTError",
    "JWTService",
    "RegisteredClaims",
    "TokenExpiredError",
    "generate_token",
    "jwt_service",
]
