"""
Schema definitions for complaint Expenses
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_serializer, field_validator

from tms.users.schema import UserSummary


class ExpenseRequest(BaseModel):
    description: str = Field(..., max_length=255)
    amount: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    receipt_number: Optional[str] = Field(None, max_length=100)
    vendor_name: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None

    @field_validator("description")
    @classmethod
    def description_not_blank(cls, v: str):
        if not v.strip():
            raise ValueError("Description is required")
        return v.strip()


class ExpenseResponse(BaseModel):
    id: int
    description: str
    amount: Decimal
    expense_date: Optional[datetime]
    receipt_number: Optional[str]
    vendor_name: Optional[str]
    notes: Optional[str]
    complaint_id: int
    added_by_user_id: Optional[int]
    added_by: Optional[UserSummary]

    class Config:
        from_attributes = True

    @field_serializer("amount")
    def serialize_amount(self, amount: Decimal):
        return float(amount)


class ComplaintExpenseTotal(BaseModel):
    complaint_id: int
    total: float
    expense_count: int


class UserExpenseTotal(BaseModel):
    user_id: int
    total: float


class ExpenseStatsResponse(BaseModel):
    total_expenses: int
    total_amount: float
    recent_expenses_count: int
    recent_expenses_amount: float
