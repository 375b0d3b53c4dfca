from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from cinema_api.schemas import UserRole
from .jwt_handler import verify_access_token


class JWTBearer(HTTPBearer):
    """Resolves the bearer token to its claims.

    Purchases are owned by the token subject, so a token without `sub` is
    refused. A missing `role` claim means a regular user.
    """

    async def __call__(self, request: Request) -> dict:
        credentials: HTTPAuthorizationCredentials = await super().__call__(request)
        if not credentials:
            raise HTTPException(status_code=403, detail="Invalid authorization code.")
        if credentials.scheme.lower() != "bearer":
            raise HTTPException(status_code=403, detail="Invalid authentication scheme.")

        payload = verify_access_token(credentials.credentials)
        if payload is None:
            raise HTTPException(status_code=403, detail="Invalid or expired token.")
        if payload.get("type", "access") != "access":
            raise HTTPException(status_code=403, detail="Invalid token type.")
        if not payload.get("sub"):
            raise HTTPException(status_code=403, detail="Token has no subject.")

        payload.setdefault("role", UserRole.USER.value)
        return payload


def getcurrent_user(*roles: str):
    """Dependency that only lets through tokens carrying one of `roles`."""
    def dependency(payload: dict = Depends(JWTBearer())):
        if payload.get("role") not in roles:
            raise HTTPException(status_code=403, detail="Not authorized")
        return payload
    return dependency


def is_admin(payload: dict) -> bool:
    return payload.get("role") == UserRole.ADMIN.value
