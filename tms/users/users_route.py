from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from tms.database import get_db
from tms.dependencies import ensure_admin_or_self, get_current_user, require_admin
from tms.models import Role, User
from tms.schemas import MessageResponse
from tms.users import services
from tms.users.schema import UserCreateRequest, UserResponse, UserStatsResponse, UserUpdateRequest

router = APIRouter(
    prefix="/users",
    tags=["Users"]
)


@router.get("", response_model=List[UserResponse], summary="List all users")
def get_all_users(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return services.list_users(db)


@router.post(
    "",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create User",
    description="Create a user account. Username, email and mobile number must be unique."
)
def create_user(data: UserCreateRequest, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return services.create_user(db, data)


@router.get("/role/{role}", response_model=List[UserResponse], summary="Users by role")
def get_users_by_role(role: Role, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return services.list_users_by_role(db, role)


@router.get("/staff/active", response_model=List[UserResponse], summary="Active staff members")
def get_active_staff(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return services.list_active_staff(db)


@router.get("/staff", response_model=List[UserResponse], summary="All staff members")
def get_all_staff(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return services.list_staff(db)


@router.get("/stats", response_model=UserStatsResponse, summary="User statistics")
def get_user_stats(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return services.user_stats(db)


@router.get("/{user_id}", response_model=UserResponse, summary="Get a user (admin or self)")
def get_user(user_id: int, current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    ensure_admin_or_self(current_user, user_id)
    return services.get_user_or_404(db, user_id)


@router.put("/{user_id}", response_model=UserResponse, summary="Update a user (admin or self)")
def update_user(
    user_id: int,
    data: UserUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    ensure_admin_or_self(current_user, user_id)
    return services.update_user(db, user_id, data, current_user)


@router.delete("/{user_id}", response_model=MessageResponse, summary="Delete a user")
def delete_user(user_id: int, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return services.delete_user(db, user_id)


@router.put("/{user_id}/deactivate", response_model=UserResponse, summary="Deactivate a user")
def deactivate_user(user_id: int, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return services.set_user_active(db, user_id, False)


@router.put("/{user_id}/activate", response_model=UserResponse, summary="Activate a user")
def activate_user(user_id: int, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return services.set_user_active(db, user_id, True)
