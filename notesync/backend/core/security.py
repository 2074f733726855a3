"""
Security Utilities.

Anonymous session tokens for the note store. A token is a signed JWT whose
subject is the anonymous user id (uid); every note route checks that the
uid in the path matches the token subject.
"""

from datetime import timedelta
from typing import Any

from jose import JWTError, jwt

from notesync.backend.core.config import get_app_config, get_settings
from notesync.backend.core.exceptions import AuthenticationError
from notesync.backend.core.logging import get_logger
from notesync.backend.core.utils import utc_now

logger = get_logger(__name__)


class StartupSecurityError(RuntimeError):
    """Raised when the configured secrets are unusable."""


def check_secret_strength() -> None:
    """
    Refuse to start with a JWT secret shorter than the configured minimum.

    Raises:
        StartupSecurityError: If the secret is too short
    """
    minimum = get_app_config().security.secrets_validation.jwt_secret_min_length
    if len(get_settings().jwt_secret) < minimum:
        logger.error("Startup security check failed", check="jwt_secret_length")
        raise StartupSecurityError(
            f"JWT_SECRET must be at least {minimum} characters long"
        )


def create_access_token(uid: str, expires_delta: timedelta | None = None) -> str:
    """
    Create a signed access token for an anonymous user.

    Args:
        uid: Anonymous user id, stored as the token subject
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token
    """
    settings = get_settings()
    jwt_config = get_app_config().security.jwt

    if expires_delta is None:
        expires_delta = timedelta(minutes=jwt_config.access_token_expire_minutes)

    claims: dict[str, Any] = {
        "sub": uid,
        "exp": utc_now() + expires_delta,
        "type": "access",
        "aud": jwt_config.audience,
    }
    return jwt.encode(claims, settings.jwt_secret, algorithm=jwt_config.algorithm)


def decode_token(token: str) -> dict[str, Any]:
    """
    Decode and validate a JWT token.

    Args:
        token: JWT token string

    Returns:
        Decoded token payload

    Raises:
        AuthenticationError: If token is invalid, expired, or has no subject
    """
    settings = get_settings()
    jwt_config = get_app_config().security.jwt
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[jwt_config.algorithm],
            audience=jwt_config.audience,
        )
    except JWTError as e:
        logger.warning("Token decode failed", error=str(e))
        raise AuthenticationError("Invalid or expired token")

    if not payload.get("sub"):
        raise AuthenticationError("Token has no subject")
    return payload
