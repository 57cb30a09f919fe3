from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from tms.models import StaffExpense
from tms.repositories.base import BaseRepository


class StaffExpenseRepository(BaseRepository[StaffExpense]):
    def __init__(self, session: Session):
        super().__init__(session, StaffExpense)

    def _sum(self, *criteria) -> Decimal:
        stmt = select(func.coalesce(func.sum(StaffExpense.amount), 0)).where(*criteria)
        return Decimal(str(self.session.execute(stmt).scalar_one()))

    def _newest_first(self, *criteria) -> Sequence[StaffExpense]:
        stmt = select(StaffExpense).where(*criteria).order_by(
            StaffExpense.created_at.desc(), StaffExpense.id.desc()
        )
        return self._all(stmt)

    # Per staff member
    def find_by_user(self, user_id: int) -> Sequence[StaffExpense]:
        return self._newest_first(StaffExpense.staff_user_id == user_id)

    def find_unpaid_by_user(self, user_id: int) -> Sequence[StaffExpense]:
        return self._newest_first(
            StaffExpense.staff_user_id == user_id, StaffExpense.is_paid_by_company.is_(False)
        )

    def find_paid_by_user(self, user_id: int) -> Sequence[StaffExpense]:
        stmt = (
            select(StaffExpense)
            .where(StaffExpense.staff_user_id == user_id, StaffExpense.is_paid_by_company.is_(True))
            .order_by(StaffExpense.paid_date.desc(), StaffExpense.id.desc())
        )
        return self._all(stmt)

    def total_by_user(self, user_id: int) -> Decimal:
        return self._sum(StaffExpense.staff_user_id == user_id)

    def total_unpaid_by_user(self, user_id: int) -> Decimal:
        return self._sum(StaffExpense.staff_user_id == user_id, StaffExpense.is_paid_by_company.is_(False))

    def total_paid_by_user(self, user_id: int) -> Decimal:
        return self._sum(StaffExpense.staff_user_id == user_id, StaffExpense.is_paid_by_company.is_(True))

    def count_unpaid_by_user(self, user_id: int) -> int:
        return self.count({"staff_user_id": user_id, "is_paid_by_company": False})

    def count_paid_by_user(self, user_id: int) -> int:
        return self.count({"staff_user_id": user_id, "is_paid_by_company": True})

    # Company wide
    def find_all_unpaid(self) -> Sequence[StaffExpense]:
        return self._newest_first(StaffExpense.is_paid_by_company.is_(False))

    def find_by_date_between(
        self, start: datetime, end: datetime, user_id: Optional[int] = None
    ) -> Sequence[StaffExpense]:
        criteria = [StaffExpense.expense_date >= start, StaffExpense.expense_date <= end]
        if user_id is not None:
            criteria.append(StaffExpense.staff_user_id == user_id)
        stmt = select(StaffExpense).where(*criteria).order_by(StaffExpense.expense_date.desc())
        return self._all(stmt)

    def find_by_complaint_number(self, text: str, user_id: Optional[int] = None) -> Sequence[StaffExpense]:
        criteria = [StaffExpense.complaint_number.icontains(text, autoescape=True)]
        if user_id is not None:
            criteria.append(StaffExpense.staff_user_id == user_id)
        return self._newest_first(*criteria)
