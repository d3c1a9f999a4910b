from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt

from config import ApplicationConfig


def create_access_token(
    subject: str,
    expires_delta: timedelta = timedelta(minutes=15),
    secret: Optional[str] = None,
    algorithm: Optional[str] = None,
    **claims: Any,
) -> str:
    """
    Create JWT access token

    Args:
        subject: Auth provider subject (becomes the principal's external_id)
        expires_delta: Token expiration duration
        secret: Signing key, ApplicationConfig.JWT_SECRET by default
        algorithm: Signing algorithm, ApplicationConfig.JWT_ALGORITHM by default
        claims: Extra claims copied into the payload

    Returns:
        JWT token string
    """
    now = datetime.now(timezone.utc)
    payload = {
        **claims,
        ApplicationConfig.JWT_SUBJECT_CLAIM: subject,
        "exp": now + expires_delta,
        "iat": now,
    }
    return jwt.encode(
        payload,
        secret or ApplicationConfig.JWT_SECRET,
        algorithm=algorithm or ApplicationConfig.JWT_ALGORITHM,
    )


def verify_jwt(
    token: str, secret: Optional[str] = None, algorithm: Optional[str] = None
) -> Optional[Dict[str, Any]]:
    """
    Verify and decode JWT token

    Returns:
        Decoded payload dict or None if invalid or expired
    """
    try:
        return jwt.decode(
            token,
            secret or ApplicationConfig.JWT_SECRET,
            algorithms=[algorithm or ApplicationConfig.JWT_ALGORITHM],
        )
    except JWTError:
        return None
