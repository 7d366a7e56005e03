"""JWT signing service.

Signs claims with HS256 (always) through PyJWT. Signing performs no claim
validation; ``JWTService.decode_token`` is the verifying counterpart.
"""

import uuid
from collections.abc import Mapping
from datetime import datetime, timedelta
from typing import Any

import jwt
from pydantic import BaseModel, ConfigDict, Field

from daydev_utils.core.config import get_settings
from daydev_utils.core.logging import get_logger
from daydev_utils.date import add_time, utc_now

logger = get_logger(__name__)

ALGORITHM = "HS256"


class JWTError(Exception):
    """Base exception for JWT-related errors."""

    pass


class TokenExpiredError(JWTError):
    """Raised when a token has expired."""

    pass


class InvalidTokenError(JWTError):
    """Raised when a token is invalid."""

    pass


class RegisteredClaims(BaseModel):
    """Registered JWT claim names (RFC 7519, section 4.1).

    Unset claims are omitted from the signed payload. Extra fields are
    allowed and signed as private claims.
    """

    model_config = ConfigDict(extra="allow")

    iss: str | None = Field(None, description="Issuer")
    sub: str | None = Field(None, description="Subject")
    aud: str | list[str] | None = Field(None, description="Audience")
    exp: datetime | int | None = Field(None, description="Expiration time")
    nbf: datetime | int | None = Field(None, description="Not before")
    iat: datetime | int | None = Field(None, description="Issued at")
    jti: str | None = Field(None, description="Unique token identifier")


def _claims_payload(claims: Mapping[str, Any] | BaseModel) -> dict[str, Any]:
    if isinstance(claims, BaseModel):
        return claims.model_dump(exclude_none=True)
    return dict(claims)


def generate_token(secret: str | bytes, claims: Mapping[str, Any] | BaseModel) -> str:
    """Sign claims into a compact JWT using HS256.

    Args:
        secret: Signature key.
        claims: Claim mapping or a ``RegisteredClaims`` model.

    Returns:
        Encoded JWT.

    Raises:
        InvalidTokenError: If the secret is empty or the claims cannot be encoded.
    """
    if not secret:
        raise InvalidTokenError("Signing secret must not be empty")
    try:
        return jwt.encode(_claims_payload(claims), secret, algorithm=ALGORITHM)
    except (TypeError, ValueError) as e:
        logger.error("Failed to sign token", error=str(e))
        raise InvalidTokenError("Claims cannot be encoded") from e


class JWTService:
    """Service for signing and verifying HS256 tokens."""

    ALGORITHM = ALGORITHM

    def __init__(self, secret_key: str | bytes | None = None) -> None:
        """Initialize the JWT service.

        Args:
            secret_key: Secret key for signing tokens. If not provided,
                        uses the configured secret key from settings.
        """
        self._secret_key = secret_key

    @property
    def secret_key(self) -> str | bytes:
        """Get the secret key for signing tokens."""
        if self._secret_key:
            return self._secret_key
        return get_settings().jwt_secret

    def sign(self, claims: Mapping[str, Any] | BaseModel) -> str:
        """Sign arbitrary claims with the service key."""
        return generate_token(self.secret_key, claims)

    def create_token(
        self,
        subject: str,
        expires_delta: timedelta | None = None,
        issuer: str | None = None,
        **extra: Any,
    ) -> tuple[str, str]:
        """Create a token for a subject with iat, exp and jti set.

        Args:
            subject: The ``sub`` claim.
            expires_delta: Lifetime. Defaults to config value.
            issuer: Optional ``iss`` claim.
            **extra: Additional private claims.

        Returns:
            Tuple of (encoded token, token ID).
        """
        if expires_delta is None:
            expires_delta = timedelta(minutes=get_settings().jwt_expire_minutes)

        token_id = str(uuid.uuid4())
        claims = RegisteredClaims(
            iss=issuer,
            sub=subject,
            iat=utc_now(),
            exp=add_time(expires_delta),
            jti=token_id,
            **extra,
        )
        return self.sign(claims), token_id

    def decode_token(self, token: str, audience: str | None = None) -> dict[str, Any]:
        """Decode and validate a token.

        Args:
            token: The encoded JWT.
            audience: Expected ``aud``. Tokens carrying an audience are rejected
                when none is given.

        Returns:
            Decoded token payload.

        Raises:
            TokenExpiredError: If the token has expired.
            InvalidTokenError: If the token is invalid.
        """
        try:
            return jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.ALGORITHM],
                audience=audience,
            )
        except jwt.ExpiredSignatureError as e:
            raise TokenExpiredError("Token has expired") from e
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError("Invalid token") from e


# Default JWT service instance
jwt_service = JWTService()
