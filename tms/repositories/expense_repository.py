from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal
from typing import Sequence

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from tms.models import Expense
from tms.repositories.base import BaseRepository

RECENT_DAYS = 30


class ExpenseRepository(BaseRepository[Expense]):
    def __init__(self, session: Session):
        super().__init__(session, Expense)

    def _sum(self, *criteria) -> Decimal:
        stmt = select(func.coalesce(func.sum(Expense.amount), 0)).where(*criteria)
        return Decimal(str(self.session.execute(stmt).scalar_one()))

    def find_by_complaint(self, complaint_id: int) -> Sequence[Expense]:
        return self.get_multi(filters={"complaint_id": complaint_id}, order_by=[Expense.expense_date.desc()])

    def find_by_added_by(self, user_id: int) -> Sequence[Expense]:
        return self.get_multi(filters={"added_by_user_id": user_id}, order_by=[Expense.expense_date.desc()])

    def find_by_date_between(self, start: datetime, end: datetime) -> Sequence[Expense]:
        stmt = (
            select(Expense)
            .where(Expense.expense_date >= start, Expense.expense_date <= end)
            .order_by(Expense.expense_date.desc())
        )
        return self._all(stmt)

    def find_by_amount_between(self, min_amount: Decimal, max_amount: Decimal) -> Sequence[Expense]:
        stmt = (
            select(Expense)
            .where(Expense.amount >= min_amount, Expense.amount <= max_amount)
            .order_by(Expense.amount.asc())
        )
        return self._all(stmt)

    def find_by_description(self, text: str) -> Sequence[Expense]:
        stmt = select(Expense).where(Expense.description.icontains(text, autoescape=True)).order_by(Expense.id)
        return self._all(stmt)

    def find_recent(self, days: int = RECENT_DAYS) -> Sequence[Expense]:
        since = datetime.now() - timedelta(days=days)
        stmt = select(Expense).where(Expense.expense_date >= since).order_by(Expense.expense_date.desc())
        return self._all(stmt)

    def total_by_complaint(self, complaint_id: int) -> Decimal:
        return self._sum(Expense.complaint_id == complaint_id)

    def total_by_user(self, user_id: int) -> Decimal:
        return self._sum(Expense.added_by_user_id == user_id)

    def total_amount(self) -> Decimal:
        return self._sum()

    def count_by_complaint(self, complaint_id: int) -> int:
        return self.count({"complaint_id": complaint_id})

    def clear_added_by(self, user_id: int) -> None:
        for expense in self.find_by_added_by(user_id):
            expense.added_by_user_id = None
        self.session.flush()
