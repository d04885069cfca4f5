"""FastAPI dependencies for resolving the acting user.

Usage:
    @router.post("/permits/{permit_id}/status")
    def set_status(actor_id: UUID = Depends(get_actor_id)):
        ...
"""

from uuid import UUID

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..observability.request_context import set_actor_id
from .jwt import decode_token, get_subject


# HTTP Bearer token security scheme
security = HTTPBearer()


async def get_actor_id(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> UUID:
    """Validate the bearer token and return the acting user's id.

    Declared async so the actor id is set in the request's own context and
    shows up on every log line the endpoint writes.

    Raises:
        HTTPException 401: If token is missing, invalid, expired, or has no
            usable `sub` claim
    """
    try:
        payload = decode_token(credentials.credentials)
        actor_id = get_subject(payload)
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except jwt.InvalidTokenError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid token claims: {str(e)}",
            headers={"WWW-Authenticate": "Bearer"},
        )

    set_actor_id(actor_id)
    return actor_id
