from __future__ import annotations

from typing import Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from tms.models import Role, User
from tms.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    def __init__(self, session: Session):
        super().__init__(session, User)

    def find_by_username(self, username: str) -> Optional[User]:
        return self._first(select(User).where(User.username == username))

    def exists_by_username(self, username: str) -> bool:
        return self.exists({"username": username})

    def exists_by_email(self, email: str) -> bool:
        return self.exists({"email": email})

    def exists_by_mobile_number(self, mobile_number: str) -> bool:
        return self.exists({"mobile_number": mobile_number})

    def find_by_role(self, role: Role) -> Sequence[User]:
        return self.get_multi(filters={"role": role})

    def find_by_role_and_active(self, role: Role, is_active: bool) -> Sequence[User]:
        return self.get_multi(filters={"role": role, "is_active": is_active})

    def find_active_staff(self) -> Sequence[User]:
        return self.find_by_role_and_active(Role.STAFF, True)

    def count_active_by_role(self, role: Role) -> int:
        stmt = select(func.count(User.id)).where(User.role == role, User.is_active.is_(True))
        return self.session.execute(stmt).scalar_one()
