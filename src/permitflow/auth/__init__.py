"""Bearer token identity."""

from .dependencies import get_actor_id
from .jwt import create_access_token, decode_token

__all__ = ["get_actor_id", "create_access_token", "decode_token"]
