"""Secure token utilities."""

from daydev_utils.crypto.token_service import (
    EntropyUnavailableError,
    TokenError,
    TokenService,
    default_token_service,
    generate_refresh_token,
    hash_token,
    verify_token_hash,
)

__all__ = [
    "EntropyUnavailableError",
    "TokenError",
    "TokenService",
    "default_token_service",
    "generate_refresh_token",
    "hash_token",
    "verify_token_hash",
]
