import time
from typing import Any, Dict

import jwt
from jwt import InvalidTokenError

from app.core.config import settings

ALG = "HS256"
ACCESS_TTL = 3600


def mint_access(user_id: str, ttl: int = ACCESS_TTL) -> str:
    now = int(time.time())
    return jwt.encode({"sub": user_id, "iat": now, "exp": now + ttl, "typ": "access"}, settings.SECRET_KEY, algorithm=ALG)


def decode_token(tok: str) -> Dict[str, Any]:
    return jwt.decode(tok, settings.SECRET_KEY, algorithms=[ALG])


__all__ = ["InvalidTokenError", "decode_token", "mint_access"]
