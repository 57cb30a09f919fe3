"""
Business logic for user management
"""

import logging
from typing import List

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from tms.auth_utils import get_password_hash
from tms.complaints.services import release_staff_complaints
from tms.dependencies import is_admin
from tms.models import Role, User
from tms.repositories.expense_repository import ExpenseRepository
from tms.repositories.staff_expense_repository import StaffExpenseRepository
from tms.repositories.user_repository import UserRepository
from tms.users.schema import UserCreateRequest, UserUpdateRequest, UserStatsResponse
from tms.utils.transaction import commit_or_500

logger = logging.getLogger(__name__)

USERNAME_TAKEN = "Error: Username is already taken!"
EMAIL_IN_USE = "Error: Email is already in use!"
MOBILE_IN_USE = "Error: Mobile number is already in use!"


def _bad_request(detail: str):
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


def get_user_or_404(db: Session, user_id: int) -> User:
    user = UserRepository(db).get(user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


def ensure_unique_identity(db: Session, username: str, email, mobile_number: str):
    """Reject a new account whose username, email or mobile number is already registered."""
    users = UserRepository(db)
    if users.exists_by_username(username):
        raise _bad_request(USERNAME_TAKEN)
    if email and users.exists_by_email(email):
        raise _bad_request(EMAIL_IN_USE)
    if users.exists_by_mobile_number(mobile_number):
        raise _bad_request(MOBILE_IN_USE)


def create_user(db: Session, data: UserCreateRequest) -> User:
    ensure_unique_identity(db, data.username, data.email, data.mobile_number)

    user = UserRepository(db).create({
        "username": data.username,
        "email": data.email,
        "full_name": data.full_name,
        "mobile_number": data.mobile_number,
        "hashed_password": get_password_hash(data.password),
        "role": data.role,
        "is_active": data.is_active,
    })
    commit_or_500(db, "User creation failed", user, username=data.username)
    logger.info("User created", extra={"action": "create_user", "user_id": user.id, "role": user.role.value})
    return user


def list_users(db: Session) -> List[User]:
    return list(UserRepository(db).get_multi())


def update_user(db: Session, user_id: int, data: UserUpdateRequest, current_user: User) -> User:
    """
    Update a user. Only provided fields are changed; uniqueness is re-checked
    for values that actually change, and the password is re-hashed only when supplied.
    """
    users = UserRepository(db)
    user = get_user_or_404(db, user_id)
    changes = data.model_dump(exclude_unset=True)

    if not is_admin(current_user) and ("role" in changes or "is_active" in changes):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only administrators can change role or account status"
        )

    username = changes.get("username")
    if username and username != user.username and users.exists_by_username(username):
        raise _bad_request(USERNAME_TAKEN)
    email = changes.get("email")
    if email and email != user.email and users.exists_by_email(email):
        raise _bad_request(EMAIL_IN_USE)
    mobile_number = changes.get("mobile_number")
    if mobile_number and mobile_number != user.mobile_number and users.exists_by_mobile_number(mobile_number):
        raise _bad_request(MOBILE_IN_USE)

    password = changes.pop("password", None)
    if password:
        changes["hashed_password"] = get_password_hash(password)

    # Required columns cannot be cleared
    for field in ("username", "full_name", "mobile_number", "role", "is_active"):
        if field in changes and changes[field] is None:
            changes.pop(field)

    users.update(user, changes)
    commit_or_500(db, "User update failed", user, user_id=user_id)
    logger.info("User updated", extra={"action": "update_user", "user_id": user_id, "by": current_user.id})
    return user


def delete_user(db: Session, user_id: int):
    user = get_user_or_404(db, user_id)

    if StaffExpenseRepository(db).count({"staff_user_id": user_id}):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User has staff expense records. Deactivate the account instead."
        )

    released = release_staff_complaints(db, user_id)
    ExpenseRepository(db).clear_added_by(user_id)

    UserRepository(db).delete(user)
    commit_or_500(db, "User deletion failed", user_id=user_id)
    logger.info("User deleted", extra={"action": "delete_user", "user_id": user_id, "released_complaints": released})
    return {"message": "User deleted successfully"}


def set_user_active(db: Session, user_id: int, active: bool) -> User:
    user = get_user_or_404(db, user_id)
    user.is_active = active
    commit_or_500(db, "User status update failed", user, user_id=user_id)
    logger.info(
        "User activated" if active else "User deactivated",
        extra={"action": "set_user_active", "user_id": user_id}
    )
    return user


def list_users_by_role(db: Session, role: Role) -> List[User]:
    return list(UserRepository(db).find_by_role(role))


def list_active_staff(db: Session) -> List[User]:
    return list(UserRepository(db).find_active_staff())


def list_staff(db: Session) -> List[User]:
    return list(UserRepository(db).find_by_role(Role.STAFF))


def user_stats(db: Session) -> UserStatsResponse:
    users = UserRepository(db)
    return UserStatsResponse(
        total_users=users.count(),
        total_admins=users.count_active_by_role(Role.ADMIN),
        total_staff=users.count_active_by_role(Role.STAFF),
    )
