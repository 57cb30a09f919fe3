from typing import List

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from tms.database import get_db
from tms.dependencies import get_current_user, require_admin, require_admin_or_staff
from tms.models import User
from tms.schemas import MessageResponse
from tms.staff_expenses import services
from tms.staff_expenses.schema import StaffExpenseRequest, StaffExpenseResponse, StaffExpenseStatsResponse
from tms.utils.date_utils import parse_datetime_param

router = APIRouter(
    prefix="/staff-expenses",
    tags=["Staff Expenses"]
)


@router.post("", response_model=StaffExpenseResponse, status_code=status.HTTP_201_CREATED, summary="Submit a claim")
def create_staff_expense(
    data: StaffExpenseRequest,
    current_user: User = Depends(require_admin_or_staff),
    db: Session = Depends(get_db)
):
    return services.create_staff_expense(db, data, current_user)


@router.get("/my-expenses", response_model=List[StaffExpenseResponse], summary="My claims, newest first")
def get_my_expenses(current_user: User = Depends(require_admin_or_staff), db: Session = Depends(get_db)):
    return services.expenses_for_user(db, current_user.id)


@router.get("/my-expenses/unpaid", response_model=List[StaffExpenseResponse], summary="My unpaid claims")
def get_my_unpaid(current_user: User = Depends(require_admin_or_staff), db: Session = Depends(get_db)):
    return services.unpaid_for_user(db, current_user.id)


@router.get("/my-expenses/paid", response_model=List[StaffExpenseResponse], summary="My paid claims")
def get_my_paid(current_user: User = Depends(require_admin_or_staff), db: Session = Depends(get_db)):
    return services.paid_for_user(db, current_user.id)


@router.get("/my-expenses/stats", response_model=StaffExpenseStatsResponse, summary="My claim totals")
def get_my_stats(current_user: User = Depends(require_admin_or_staff), db: Session = Depends(get_db)):
    return services.stats_for_user(db, current_user.id)


@router.get("/unpaid", response_model=List[StaffExpenseResponse], summary="All unpaid claims")
def get_all_unpaid(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return services.all_unpaid(db)


@router.get("/user/{user_id}/stats", response_model=StaffExpenseStatsResponse, summary="Claim totals of a user")
def get_user_stats(user_id: int, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return services.existing_user_stats(db, user_id)


@router.get("/user/{user_id}", response_model=List[StaffExpenseResponse], summary="Claims of a user")
def get_user_expenses(user_id: int, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return services.existing_user_expenses(db, user_id)


@router.get("/search", response_model=List[StaffExpenseResponse], summary="Search by complaint number")
def search_by_complaint_number(
    complaint_number: str = Query(..., min_length=1),
    current_user: User = Depends(require_admin_or_staff),
    db: Session = Depends(get_db)
):
    return services.search_by_complaint_number(db, complaint_number, current_user)


@router.get("/date-range", response_model=List[StaffExpenseResponse], summary="Claims between two dates")
def get_by_date_range(
    start_date: str = Query(..., description="ISO date or datetime"),
    end_date: str = Query(..., description="ISO date or datetime"),
    current_user: User = Depends(require_admin_or_staff),
    db: Session = Depends(get_db)
):
    start = parse_datetime_param(start_date, "start_date")
    end = parse_datetime_param(end_date, "end_date")
    return services.expenses_between(db, start, end, current_user)


@router.get("/{expense_id}", response_model=StaffExpenseResponse, summary="Get claim (admin or owner)")
def get_staff_expense(expense_id: int, current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return services.get_owned_staff_expense(db, expense_id, current_user)


@router.put("/{expense_id}", response_model=StaffExpenseResponse, summary="Edit an unpaid claim (admin or owner)")
def update_staff_expense(
    expense_id: int,
    data: StaffExpenseRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return services.update_staff_expense(db, expense_id, data, current_user)


@router.delete("/{expense_id}", response_model=MessageResponse, summary="Delete an unpaid claim (admin or owner)")
def delete_staff_expense(
    expense_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return services.delete_staff_expense(db, expense_id, current_user)


@router.put("/{expense_id}/mark-paid", response_model=StaffExpenseResponse, summary="Mark a claim as paid")
def mark_paid(expense_id: int, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return services.mark_as_paid(db, expense_id, admin)


@router.put("/{expense_id}/status", response_model=StaffExpenseResponse, summary="Change claim status")
def change_status(
    expense_id: int,
    new_status: str = Query(..., alias="status"),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return services.change_status(db, expense_id, new_status, admin)
