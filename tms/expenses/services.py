"""
Business logic for expenses recorded against complaints
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import List

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from tms.complaints.services import ensure_can_access, get_complaint_or_404
from tms.dependencies import is_admin
from tms.expenses.schema import (
    ComplaintExpenseTotal, ExpenseRequest, ExpenseStatsResponse, UserExpenseTotal,
)
from tms.models import Expense, User
from tms.repositories.expense_repository import ExpenseRepository
from tms.users.services import get_user_or_404
from tms.utils.transaction import commit_or_500

logger = logging.getLogger(__name__)


def get_expense_or_404(db: Session, expense_id: int) -> Expense:
    expense = ExpenseRepository(db).get(expense_id)
    if not expense:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Expense not found")
    return expense


def get_owned_expense(db: Session, expense_id: int, current_user: User) -> Expense:
    """The expense, if the caller is an admin or the person who recorded it."""
    expense = get_expense_or_404(db, expense_id)
    if not is_admin(current_user) and expense.added_by_user_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")
    return expense


def create_expense(db: Session, complaint_id: int, data: ExpenseRequest, current_user: User) -> Expense:
    complaint = get_complaint_or_404(db, complaint_id)
    ensure_can_access(complaint, current_user)

    expense = ExpenseRepository(db).create({
        **data.model_dump(),
        "expense_date": datetime.now(),
        "complaint_id": complaint.id,
        "added_by_user_id": current_user.id,
    })
    commit_or_500(db, "Expense creation failed", expense, complaint_id=complaint_id)
    logger.info(
        f"Expense {expense.id} added to complaint {complaint_id}",
        extra={"action": "create_expense", "user_id": current_user.id, "amount": str(expense.amount)}
    )
    return expense


def list_expenses(db: Session) -> List[Expense]:
    return list(ExpenseRepository(db).get_multi(order_by=[Expense.expense_date.desc()]))


def update_expense(db: Session, expense_id: int, data: ExpenseRequest, current_user: User) -> Expense:
    expense = get_owned_expense(db, expense_id, current_user)
    ExpenseRepository(db).update(expense, data.model_dump())
    commit_or_500(db, "Expense update failed", expense, expense_id=expense_id)
    logger.info(f"Expense {expense_id} updated", extra={"action": "update_expense", "user_id": current_user.id})
    return expense


def delete_expense(db: Session, expense_id: int, current_user: User):
    expense = get_owned_expense(db, expense_id, current_user)
    ExpenseRepository(db).delete(expense)
    commit_or_500(db, "Expense deletion failed", expense_id=expense_id)
    logger.info(f"Expense {expense_id} deleted", extra={"action": "delete_expense", "user_id": current_user.id})
    return {"message": "Expense deleted successfully"}


def expenses_for_complaint(db: Session, complaint_id: int, current_user: User) -> List[Expense]:
    ensure_can_access(get_complaint_or_404(db, complaint_id), current_user)
    return list(ExpenseRepository(db).find_by_complaint(complaint_id))


def expenses_added_by(db: Session, user_id: int) -> List[Expense]:
    return list(ExpenseRepository(db).find_by_added_by(user_id))


def expenses_for_user(db: Session, user_id: int) -> List[Expense]:
    get_user_or_404(db, user_id)
    return expenses_added_by(db, user_id)


def complaint_total(db: Session, complaint_id: int, current_user: User) -> ComplaintExpenseTotal:
    ensure_can_access(get_complaint_or_404(db, complaint_id), current_user)
    expenses = ExpenseRepository(db)
    return ComplaintExpenseTotal(
        complaint_id=complaint_id,
        total=float(expenses.total_by_complaint(complaint_id)),
        expense_count=expenses.count_by_complaint(complaint_id),
    )


def user_total(db: Session, user_id: int) -> UserExpenseTotal:
    get_user_or_404(db, user_id)
    return UserExpenseTotal(user_id=user_id, total=float(ExpenseRepository(db).total_by_user(user_id)))


def recent_expenses(db: Session) -> List[Expense]:
    return list(ExpenseRepository(db).find_recent())


def search_expenses(db: Session, description: str) -> List[Expense]:
    return list(ExpenseRepository(db).find_by_description(description))


def expenses_between(db: Session, start: datetime, end: datetime) -> List[Expense]:
    if end < start:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="End date must not be before start date")
    return list(ExpenseRepository(db).find_by_date_between(start, end))


def expenses_by_amount(db: Session, min_amount: Decimal, max_amount: Decimal) -> List[Expense]:
    if max_amount < min_amount:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Maximum amount must not be below minimum amount"
        )
    return list(ExpenseRepository(db).find_by_amount_between(min_amount, max_amount))


def expense_stats(db: Session) -> ExpenseStatsResponse:
    expenses = ExpenseRepository(db)
    recent = expenses.find_recent()
    return ExpenseStatsResponse(
        total_expenses=expenses.count(),
        total_amount=float(expenses.total_amount()),
        recent_expenses_count=len(recent),
        recent_expenses_amount=float(sum((e.amount for e in recent), Decimal("0"))),
    )
