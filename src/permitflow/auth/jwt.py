"""JWT bearer token handling.

Identity is resolved outside this service; the only claim consumed here is
`sub`, the acting user's id, which ends up on every activity log entry.

Token Claims:
- sub (Subject): User ID as UUID string
  Example: "550e8400-e29b-41d4-a716-446655440000"
- iat (Issued At): Unix timestamp when token was created
- exp (Expiration): Unix timestamp when token expires (iat + JWT_EXPIRY_MINUTES)

Security Properties:
- Algorithm: JWT_ALGORITHM (default HS256)
- Secret: JWT_SECRET setting
- Stateless validation (no database lookup)
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from uuid import UUID

import jwt

from ..config import Settings, get_settings


def create_access_token(
    user_id: UUID,
    settings: Optional[Settings] = None,
    expires_minutes: Optional[int] = None,
) -> str:
    """Create a signed access token for a user.

    Mainly used by tests and local tooling; production tokens are issued
    by the identity provider with the same secret.

    Args:
        user_id: Acting user's UUID
        settings: Settings to sign with (defaults to get_settings())
        expires_minutes: Override for JWT_EXPIRY_MINUTES

    Returns:
        str: Signed JWT token
    """
    settings = settings or get_settings()
    now = datetime.now(timezone.utc)
    expiry = expires_minutes if expires_minutes is not None else settings.JWT_EXPIRY_MINUTES

    payload = {
        'sub': str(user_id),  # Subject: user ID
        'iat': int(now.timestamp()),  # Issued at
        'exp': int((now + timedelta(minutes=expiry)).timestamp())  # Expiration
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str, settings: Optional[Settings] = None) -> Dict[str, Any]:
    """Decode and validate a JWT token.

    Args:
        token: JWT token string
        settings: Settings to verify with (defaults to get_settings())

    Returns:
        dict: Decoded token payload with claims

    Raises:
        jwt.ExpiredSignatureError: If token has expired
        jwt.InvalidTokenError: If token is invalid or tampered
    """
    settings = settings or get_settings()

    try:
        return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise jwt.ExpiredSignatureError("Token has expired")
    except jwt.InvalidTokenError as e:
        raise jwt.InvalidTokenError(f"Invalid token: {str(e)}")


def get_subject(payload: Dict[str, Any]) -> UUID:
    """Extract the acting user id from decoded claims.

    Raises:
        ValueError: If `sub` is missing or not a UUID
    """
    subject = payload.get("sub")
    if not subject:
        raise ValueError("missing user ID claim")
    return UUID(subject)
