from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from tms.auth.schema import JwtResponse, SigninRequest, SignupRequest
from tms.auth.services import authenticate_user, register_user
from tms.database import get_db
from tms.dependencies import get_current_user, require_admin
from tms.models import User
from tms.schemas import MessageResponse
from tms.users.schema import UserResponse
from tms.utils.rate_limiter import RateLimits, get_client_ip, limiter

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"]
)


@router.post(
    "/signin",
    response_model=JwtResponse,
    status_code=status.HTTP_200_OK,
    summary="User sign-in",
    description="Authenticate with username, password and role; returns a bearer token."
)
@limiter.limit(RateLimits.LOGIN)
def signin(
    request: Request,
    data: SigninRequest,
    db: Session = Depends(get_db)
):
    """
    Handle sign-in request.

    Raises:
        HTTPException 400: Unknown user or role mismatch
        HTTPException 401: Incorrect password
        HTTPException 403: Deactivated account
        HTTPException 500: Unexpected error during sign-in
    """
    try:
        return authenticate_user(db, data, get_client_ip(request))
    except HTTPException:
        # Propagate HTTPExceptions raised by service
        raise
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Sign-in failed: {str(e)}"
        )


@router.post(
    "/signup",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Register a user",
    description="Administrators register new accounts. Role defaults to STAFF."
)
def signup(
    data: SignupRequest,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return register_user(db, data)


@router.get("/me", response_model=UserResponse, summary="Current user")
def me(current_user: User = Depends(get_current_user)):
    return current_user


@router.get("/test", response_model=MessageResponse, summary="Public connectivity check")
def auth_test():
    return {"message": "Authentication test successful!"}
