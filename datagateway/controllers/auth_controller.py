"""
Authentication endpoints (JWT-based)
"""
import uuid
import logging
from fastapi import APIRouter, Depends
from sqlmodel import Session

from datagateway.core.auth import get_current_user
from datagateway.core.database import get_db
from datagateway.core.errors import AuthenticationError, ValidationError
from datagateway.core.security import hash_password, verify_password, issue_access_token
from datagateway.models import User
from datagateway.schemas import AuthedUser, RegisterRequest, LoginRequest, TokenResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


@router.post("/register", response_model=TokenResponse, status_code=201)
def register(p: RegisterRequest, db: Session = Depends(get_db)):
    """
    Create a user account and return an access token.

    Organization membership is not created here; see POST /api/organizations.
    """
    if User.get_by_username(db, p.username):
        raise ValidationError("Username already exists")

    user = User.create(
        db,
        id=str(uuid.uuid4()),
        username=p.username,
        email=p.email,
        full_name=p.full_name,
        password_hash=hash_password(p.password),
        status="active",
    )
    logger.info(f"Registered user {user.id} ({user.username})")

    return TokenResponse(
        user_id=user.id,
        username=user.username,
        access_token=issue_access_token(user.id),
    )


@router.post("/login", response_model=TokenResponse)
def login(p: LoginRequest, db: Session = Depends(get_db)):
    """Exchange username + password for an access token"""
    user = User.get_by_username(db, p.username)
    if not user or not verify_password(p.password, user.password_hash):
        raise AuthenticationError("Invalid username or password")

    if user.status != "active":
        raise AuthenticationError(f"User is {user.status} and cannot access the API")

    return TokenResponse(
        user_id=user.id,
        username=user.username,
        access_token=issue_access_token(user.id),
    )


@router.get("/me", response_model=AuthedUser)
def me(user: AuthedUser = Depends(get_current_user)):
    return user
