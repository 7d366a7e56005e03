"""Refresh token generation and fingerprinting.

Tokens are 64 random bytes from the OS CSPRNG, encoded as unpadded URL-safe
base64 (86 characters). Only the SHA-256 fingerprint of a token should be
stored, so a leaked table cannot be replayed.
"""

import base64
import hashlib
import hmac
import math
import secrets

from daydev_utils.core.config import (
    DEFAULT_TOKEN_BYTES,
    DEFAULT_TOKEN_DIGEST,
    Settings,
    check_digest,
    get_settings,
)
from daydev_utils.core.logging import get_logger

logger = get_logger(__name__)


class TokenError(Exception):
    """Base exception for token-related errors."""

    pass


class EntropyUnavailableError(TokenError):
    """Raised when the secure random source cannot supply bytes."""

    pass


class TokenService:
    """Service for generating opaque tokens and their fingerprints.

    Stateless and safe to share between threads. Token size and digest are
    fixed when the service is built (64 bytes and sha256 unless given), so
    generating and hashing never read configuration.
    """

    def __init__(
        self,
        token_bytes: int = DEFAULT_TOKEN_BYTES,
        digest: str = DEFAULT_TOKEN_DIGEST,
    ) -> None:
        """Initialize the token service.

        Args:
            token_bytes: Random bytes per token.
            digest: hashlib algorithm for fingerprints.

        Raises:
            ValueError: If token_bytes is not positive or the digest is unusable.
        """
        if token_bytes <= 0:
            raise ValueError("token_bytes must be a positive integer")
        self._token_bytes = token_bytes
        self._digest = check_digest(digest)

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "TokenService":
        """Build a service from ``DAYDEV_TOKEN_BYTES`` and ``DAYDEV_TOKEN_DIGEST``.

        Args:
            settings: Optional settings instance. If not provided, will load from environment.

        Raises:
            pydantic.ValidationError: If the environment holds invalid settings.
        """
        if settings is None:
            settings = get_settings()
        return cls(token_bytes=settings.token_bytes, digest=settings.token_digest)

    @property
    def token_bytes(self) -> int:
        """Get the number of random bytes per token."""
        return self._token_bytes

    @property
    def digest(self) -> str:
        """Get the fingerprint digest algorithm name."""
        return self._digest

    @property
    def token_length(self) -> int:
        """Length of an encoded token (unpadded base64)."""
        return math.ceil(self.token_bytes * 4 / 3)

    @staticmethod
    def _base64url_encode(data: bytes) -> str:
        """Encode bytes to a base64url string without padding."""
        return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")

    def generate_refresh_token(self) -> str:
        """Generate a new opaque token.

        Returns:
            URL-safe, unpadded base64 token string.

        Raises:
            EntropyUnavailableError: If the OS random source fails. The
                original error is chained as ``__cause__``.
        """
        size = self.token_bytes
        try:
            raw = secrets.token_bytes(size)
        except (OSError, NotImplementedError) as e:
            logger.error("Secure random source unavailable", token_bytes=size, error=str(e))
            raise EntropyUnavailableError("Secure random source unavailable") from e
        return self._base64url_encode(raw)

    def hash_token(self, token: str) -> str:
        """Compute the fingerprint of a token.

        Args:
            token: Any string; it does not have to be a generated token.

        Returns:
            Lowercase hex digest (64 characters for sha256).
        """
        return hashlib.new(self.digest, token.encode("utf-8")).hexdigest()

    def verify_token_hash(self, token: str, fingerprint: str) -> bool:
        """Check a token against a stored fingerprint in constant time.

        Args:
            token: Plaintext token presented by a client.
            fingerprint: Stored hex fingerprint.

        Returns:
            True if the token produces the fingerprint.
        """
        return hmac.compare_digest(
            self.hash_token(token).encode("ascii"), fingerprint.lower().encode("utf-8")
        )


# Default token service instance (64 bytes, sha256)
default_token_service = TokenService()


def generate_refresh_token() -> str:
    """Generate a token with the default service."""
    return default_token_service.generate_refresh_token()


def hash_token(token: str) -> str:
    """Fingerprint a token with the default service."""
    return default_token_service.hash_token(token)


def verify_token_hash(token: str, fingerprint: str) -> bool:
    """Verify a token against a fingerprint with the default service."""
    return default_token_service.verify_token_hash(token, fingerprint)
