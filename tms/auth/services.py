"""
Business logic for sign-in and sign-up
"""

import logging
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from tms.auth.schema import JwtResponse, SigninRequest, SignupRequest
from tms.auth_utils import create_access_token, verify_password
from tms.models import Role, User
from tms.repositories.user_repository import UserRepository
from tms.users.schema import UserCreateRequest
from tms.users.services import create_user

# Configure logger

logger = logging.getLogger(__name__)

# Service-specific constants

ACTION_SIGNIN = "USER_SIGNIN"
ACTION_SIGNUP = "USER_SIGNUP"


def authenticate_user(db: Session, data: SigninRequest, ip_address: Optional[str] = None) -> JwtResponse:
    """
    Authenticate a user and return a bearer token with the user's profile.

    Args:
        db: Database session
        data: Sign-in request with username, password and the role chosen on the login screen
        ip_address: Client IP, for the log only

    Returns:
        JwtResponse: access token plus id, username, email, full name and role

    Raises:
        HTTPException 400: unknown username or role mismatch
        HTTPException 401: wrong password
        HTTPException 403: account deactivated
    """
    logger.info(f"Sign-in attempt for '{data.username}' from {ip_address}", extra={"action": ACTION_SIGNIN})

    user: Optional[User] = UserRepository(db).find_by_username(data.username)
    if not user:
        logger.warning(f"Sign-in failed: user not found ({data.username})", extra={"action": ACTION_SIGNIN})
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Error: User not found!")

    if user.role != data.role:
        logger.warning(f"Sign-in failed: role mismatch for {data.username}", extra={"action": ACTION_SIGNIN})
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Error: Invalid role selected for this user!"
        )

    if not verify_password(data.password, user.hashed_password):
        logger.warning(f"Sign-in failed: bad password for {data.username}", extra={"action": ACTION_SIGNIN})
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid username or password")

    if not user.is_active:
        logger.warning(f"Sign-in refused: {data.username} is deactivated", extra={"action": ACTION_SIGNIN})
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User account is deactivated")

    access_token = create_access_token({"sub": user.username, "uid": user.id, "role": user.role.value})
    logger.info(f"User {user.id} signed in", extra={"action": ACTION_SIGNIN})

    return JwtResponse(
        access_token=access_token,
        id=user.id,
        username=user.username,
        email=user.email,
        full_name=user.full_name,
        role=user.role,
    )


def register_user(db: Session, data: SignupRequest) -> dict:
    """Create an account; the role defaults to STAFF when not given."""
    user = create_user(db, UserCreateRequest(
        username=data.username,
        email=data.email,
        full_name=data.full_name,
        mobile_number=data.mobile_number,
        password=data.password,
        role=data.role or Role.STAFF,
    ))
    logger.info(f"User {user.id} registered", extra={"action": ACTION_SIGNUP})
    return {"message": "User registered successfully!"}
