from typing import Any, Dict, Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.auth.jwt import decode_token, InvalidTokenError

bearer = HTTPBearer(auto_error=False)


def _access_claims(creds: Optional[HTTPAuthorizationCredentials]) -> Optional[Dict[str, Any]]:
    if not creds:
        return None
    try:
        data = decode_token(creds.credentials)
    except InvalidTokenError:
        return None
    if data.get("typ") != "access" or not data.get("sub"):
        return None
    return data


def get_current_user_id(creds: HTTPAuthorizationCredentials = Depends(bearer)) -> str:
    data = _access_claims(creds)
    if data is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="unauthorized")
    return data["sub"]
