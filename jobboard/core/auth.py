"""
Caller identity - resolves the applicant behind a request.

Tokens are issued by the external identity provider; this module only
verifies the signature and reads the applicant id from the `sub` claim.
"""

from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt

from jobboard.core.config import get_settings
from jobboard.core.errors import UnauthorizedError

# Bearer token extractor (auto_error off so missing tokens get our envelope)
bearer_scheme = HTTPBearer(auto_error=False)


def decode_token(token: str) -> Optional[dict]:
    """Decode and verify JWT token."""
    settings = get_settings()
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


async def get_current_applicant_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> str:
    """
    FastAPI dependency - id of the applicant making the request.

    Usage:
        @router.get("/me")
        async def route(applicant_id: str = Depends(get_current_applicant_id)):
            ...
    """
    if credentials is None:
        raise UnauthorizedError("Authentication required")

    payload = decode_token(credentials.credentials)
    if not payload or not payload.get("sub"):
        raise UnauthorizedError("Invalid or expired token")

    return str(payload["sub"])
