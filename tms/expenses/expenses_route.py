from decimal import Decimal
from typing import List

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from tms.database import get_db
from tms.dependencies import get_current_user, require_admin, require_admin_or_staff
from tms.expenses import services
from tms.expenses.schema import (
    ComplaintExpenseTotal, ExpenseRequest, ExpenseResponse, ExpenseStatsResponse, UserExpenseTotal,
)
from tms.models import User
from tms.schemas import MessageResponse
from tms.utils.date_utils import parse_datetime_param

router = APIRouter(
    prefix="/expenses",
    tags=["Expenses"]
)


@router.post(
    "/complaint/{complaint_id}",
    response_model=ExpenseResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record an expense against a complaint"
)
def create_expense(
    complaint_id: int,
    data: ExpenseRequest,
    current_user: User = Depends(require_admin_or_staff),
    db: Session = Depends(get_db)
):
    return services.create_expense(db, complaint_id, data, current_user)


@router.get("", response_model=List[ExpenseResponse], summary="List all expenses")
def get_all_expenses(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return services.list_expenses(db)


@router.get("/complaint/{complaint_id}", response_model=List[ExpenseResponse], summary="Expenses of a complaint")
def get_complaint_expenses(
    complaint_id: int,
    current_user: User = Depends(require_admin_or_staff),
    db: Session = Depends(get_db)
):
    return services.expenses_for_complaint(db, complaint_id, current_user)


@router.get("/my-expenses", response_model=List[ExpenseResponse], summary="Expenses I recorded")
def get_my_expenses(current_user: User = Depends(require_admin_or_staff), db: Session = Depends(get_db)):
    return services.expenses_added_by(db, current_user.id)


@router.get("/user/{user_id}", response_model=List[ExpenseResponse], summary="Expenses recorded by a user")
def get_user_expenses(user_id: int, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return services.expenses_for_user(db, user_id)


@router.get("/total/complaint/{complaint_id}", response_model=ComplaintExpenseTotal, summary="Total for a complaint")
def get_complaint_total(
    complaint_id: int,
    current_user: User = Depends(require_admin_or_staff),
    db: Session = Depends(get_db)
):
    return services.complaint_total(db, complaint_id, current_user)


@router.get("/total/user/{user_id}", response_model=UserExpenseTotal, summary="Total recorded by a user")
def get_user_total(user_id: int, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return services.user_total(db, user_id)


@router.get("/recent", response_model=List[ExpenseResponse], summary="Expenses of the last 30 days")
def get_recent_expenses(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return services.recent_expenses(db)


@router.get("/search", response_model=List[ExpenseResponse], summary="Search by description")
def search_expenses(
    description: str = Query(..., min_length=1),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return services.search_expenses(db, description)


@router.get("/date-range", response_model=List[ExpenseResponse], summary="Expenses between two datetimes")
def get_expenses_by_date(
    start_date: str = Query(..., description="ISO datetime"),
    end_date: str = Query(..., description="ISO datetime"),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    start = parse_datetime_param(start_date, "start_date")
    end = parse_datetime_param(end_date, "end_date")
    return services.expenses_between(db, start, end)


@router.get("/amount-range", response_model=List[ExpenseResponse], summary="Expenses within an amount range")
def get_expenses_by_amount(
    min_amount: Decimal = Query(..., ge=0),
    max_amount: Decimal = Query(..., ge=0),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return services.expenses_by_amount(db, min_amount, max_amount)


@router.get("/stats", response_model=ExpenseStatsResponse, summary="Expense statistics")
def get_expense_stats(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return services.expense_stats(db)


@router.get("/{expense_id}", response_model=ExpenseResponse, summary="Get expense (admin or the recorder)")
def get_expense(expense_id: int, current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return services.get_owned_expense(db, expense_id, current_user)


@router.put("/{expense_id}", response_model=ExpenseResponse, summary="Update expense (admin or the recorder)")
def update_expense(
    expense_id: int,
    data: ExpenseRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return services.update_expense(db, expense_id, data, current_user)


@router.delete("/{expense_id}", response_model=MessageResponse, summary="Delete expense (admin or the recorder)")
def delete_expense(expense_id: int, current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return services.delete_expense(db, expense_id, current_user)
