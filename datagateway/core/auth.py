"""
Core dependencies - Authentication
"""
from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlmodel import Session

from datagateway.core.database import get_db
from datagateway.core.errors import AuthenticationError
from datagateway.core.security import read_access_token
from datagateway.models import User
from datagateway.schemas import AuthedUser

# JWT Security (missing header is answered with 401 below, not FastAPI's 403)
security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> AuthedUser:
    """
    JWT-based authentication dependency.
    Extracts user from JWT token in Authorization header.

    Usage:
        @router.get("/protected")
        def protected_route(user: AuthedUser = Depends(get_current_user)):
            ...
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Authentication required")

    user = User.get_by_id(db, read_access_token(credentials.credentials))
    if not user:
        raise AuthenticationError("User not found")

    if user.status != "active":
        raise AuthenticationError(f"User is {user.status} and cannot access the API")

    return AuthedUser(id=user.id, username=user.username)
