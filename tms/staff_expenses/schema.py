"""
Schema definitions for Staff Expenses (reimbursement claims)
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_serializer, field_validator

from tms.models import ExpenseStatus
from tms.users.schema import UserSummary


class StaffExpenseRequest(BaseModel):
    amount: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    expense_date: Optional[str] = Field(
        None,
        description="ISO date or datetime; a trailing Z and milliseconds are accepted. Blank means now."
    )
    reason: str = Field(..., max_length=500)
    complaint_number: Optional[str] = Field(None, max_length=50)
    status: Optional[str] = Field(None, description="PENDING, APPROVED, PAID or REJECTED (case-insensitive)")

    @field_validator("reason")
    @classmethod
    def reason_not_blank(cls, v: str):
        if not v.strip():
            raise ValueError("Reason is required")
        return v.strip()


class StaffExpenseResponse(BaseModel):
    id: int
    amount: Decimal
    expense_date: datetime
    reason: str
    complaint_number: Optional[str]
    status: ExpenseStatus
    is_paid_by_company: bool
    paid_date: Optional[datetime]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]
    staff_user_id: int
    staff_user: Optional[UserSummary]

    class Config:
        from_attributes = True

    @field_serializer("amount")
    def serialize_amount(self, amount: Decimal):
        return float(amount)


class StaffExpenseStatsResponse(BaseModel):
    total_amount: float
    total_unpaid_amount: float
    total_paid_amount: float
    unpaid_count: int
    paid_count: int
    total_count: int
