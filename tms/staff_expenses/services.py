"""
Business logic for staff reimbursement claims

Once the company has paid a claim it is frozen: no edits, no deletion,
and its status stays PAID.
"""

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from tms.dependencies import is_admin
from tms.models import ExpenseStatus, StaffExpense, User
from tms.repositories.staff_expense_repository import StaffExpenseRepository
from tms.staff_expenses.schema import StaffExpenseRequest, StaffExpenseStatsResponse
from tms.users.services import get_user_or_404
from tms.utils.date_utils import parse_lenient_datetime
from tms.utils.transaction import commit_or_500

logger = logging.getLogger(__name__)

CANNOT_EDIT_PAID = "Cannot edit expense that has already been paid by company"
CANNOT_DELETE_PAID = "Cannot delete expense that has already been paid by company"


def parse_status(value: str) -> ExpenseStatus:
    try:
        return ExpenseStatus(value.strip().upper())
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Invalid status: {value}")


def parse_expense_date(value: Optional[str]) -> Optional[datetime]:
    try:
        return parse_lenient_datetime(value)
    except (ValueError, OverflowError):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Invalid expense date: {value}")


def _mark_paid(expense: StaffExpense):
    expense.status = ExpenseStatus.PAID
    expense.is_paid_by_company = True
    if expense.paid_date is None:
        expense.paid_date = datetime.now()


def get_staff_expense_or_404(db: Session, expense_id: int) -> StaffExpense:
    expense = StaffExpenseRepository(db).get(expense_id)
    if not expense:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Staff expense not found")
    return expense


def get_owned_staff_expense(db: Session, expense_id: int, current_user: User) -> StaffExpense:
    expense = get_staff_expense_or_404(db, expense_id)
    if not is_admin(current_user) and expense.staff_user_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")
    return expense


def create_staff_expense(db: Session, data: StaffExpenseRequest, current_user: User) -> StaffExpense:
    new_status = parse_status(data.status) if data.status and data.status.strip() else ExpenseStatus.PENDING
    if new_status != ExpenseStatus.PENDING and not is_admin(current_user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only administrators can set the status of an expense"
        )

    expense = StaffExpense(
        amount=data.amount,
        expense_date=parse_expense_date(data.expense_date) or datetime.now(),
        reason=data.reason,
        complaint_number=data.complaint_number,
        status=new_status,
        is_paid_by_company=False,
        staff_user_id=current_user.id,
    )
    if new_status == ExpenseStatus.PAID:
        _mark_paid(expense)

    StaffExpenseRepository(db).create(expense)
    commit_or_500(db, "Staff expense creation failed", expense, user_id=current_user.id)
    logger.info(
        f"Staff expense {expense.id} created",
        extra={"action": "create_staff_expense", "user_id": current_user.id, "amount": str(expense.amount)}
    )
    return expense


def update_staff_expense(db: Session, expense_id: int, data: StaffExpenseRequest, current_user: User) -> StaffExpense:
    """Edit amount, date, reason and reference. Status changes go through the admin endpoints."""
    expense = get_owned_staff_expense(db, expense_id, current_user)
    if expense.is_paid_by_company:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=CANNOT_EDIT_PAID)

    changes = {
        "amount": data.amount,
        "reason": data.reason,
        "complaint_number": data.complaint_number,
    }
    expense_date = parse_expense_date(data.expense_date)
    if expense_date is not None:
        changes["expense_date"] = expense_date

    StaffExpenseRepository(db).update(expense, changes)
    commit_or_500(db, "Staff expense update failed", expense, expense_id=expense_id)
    logger.info(f"Staff expense {expense_id} updated", extra={"action": "update_staff_expense", "user_id": current_user.id})
    return expense


def delete_staff_expense(db: Session, expense_id: int, current_user: User):
    expense = get_owned_staff_expense(db, expense_id, current_user)
    if expense.is_paid_by_company:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=CANNOT_DELETE_PAID)

    StaffExpenseRepository(db).delete(expense)
    commit_or_500(db, "Staff expense deletion failed", expense_id=expense_id)
    logger.info(f"Staff expense {expense_id} deleted", extra={"action": "delete_staff_expense", "user_id": current_user.id})
    return {"message": "Staff expense deleted successfully"}


def mark_as_paid(db: Session, expense_id: int, admin: User) -> StaffExpense:
    expense = get_staff_expense_or_404(db, expense_id)
    _mark_paid(expense)
    commit_or_500(db, "Marking staff expense as paid failed", expense, expense_id=expense_id)
    logger.info(f"Staff expense {expense_id} marked paid", extra={"action": "mark_staff_expense_paid", "by": admin.id})
    return expense


def change_status(db: Session, expense_id: int, raw_status: str, admin: User) -> StaffExpense:
    new_status = parse_status(raw_status)
    expense = get_staff_expense_or_404(db, expense_id)

    if expense.is_paid_by_company and new_status != ExpenseStatus.PAID:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot change status of expense that has already been paid by company"
        )

    if new_status == ExpenseStatus.PAID:
        _mark_paid(expense)
    else:
        expense.status = new_status

    commit_or_500(db, "Staff expense status update failed", expense, expense_id=expense_id)
    logger.info(
        f"Staff expense {expense_id} moved to {new_status.value}",
        extra={"action": "change_staff_expense_status", "by": admin.id}
    )
    return expense


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

def expenses_for_user(db: Session, user_id: int) -> List[StaffExpense]:
    return list(StaffExpenseRepository(db).find_by_user(user_id))


def unpaid_for_user(db: Session, user_id: int) -> List[StaffExpense]:
    return list(StaffExpenseRepository(db).find_unpaid_by_user(user_id))


def paid_for_user(db: Session, user_id: int) -> List[StaffExpense]:
    return list(StaffExpenseRepository(db).find_paid_by_user(user_id))


def stats_for_user(db: Session, user_id: int) -> StaffExpenseStatsResponse:
    expenses = StaffExpenseRepository(db)
    unpaid_count = expenses.count_unpaid_by_user(user_id)
    paid_count = expenses.count_paid_by_user(user_id)
    return StaffExpenseStatsResponse(
        total_amount=float(expenses.total_by_user(user_id)),
        total_unpaid_amount=float(expenses.total_unpaid_by_user(user_id)),
        total_paid_amount=float(expenses.total_paid_by_user(user_id)),
        unpaid_count=unpaid_count,
        paid_count=paid_count,
        total_count=unpaid_count + paid_count,
    )


def existing_user_expenses(db: Session, user_id: int) -> List[StaffExpense]:
    get_user_or_404(db, user_id)
    return expenses_for_user(db, user_id)


def existing_user_stats(db: Session, user_id: int) -> StaffExpenseStatsResponse:
    get_user_or_404(db, user_id)
    return stats_for_user(db, user_id)


def all_unpaid(db: Session) -> List[StaffExpense]:
    return list(StaffExpenseRepository(db).find_all_unpaid())


def _visible_to(current_user: User) -> Optional[int]:
    # Admins search everyone, staff only their own claims
    return None if is_admin(current_user) else current_user.id


def search_by_complaint_number(db: Session, text: str, current_user: User) -> List[StaffExpense]:
    return list(StaffExpenseRepository(db).find_by_complaint_number(text, _visible_to(current_user)))


def expenses_between(db: Session, start: datetime, end: datetime, current_user: User) -> List[StaffExpense]:
    if end < start:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="End date must not be before start date")
    return list(StaffExpenseRepository(db).find_by_date_between(start, end, _visible_to(current_user)))
