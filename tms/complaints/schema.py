"""
Schema definitions for Complaints
"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from tms.models import ComplaintType, Priority, Status
from tms.users.schema import UserSummary


class ComplaintPublicRequest(BaseModel):
    """Fields a customer fills in on the public complaint form"""
    customer_name: str = Field(..., max_length=100)
    mobile_number: str = Field(..., max_length=15)
    email: Optional[EmailStr] = None
    address: str = Field(..., min_length=1, max_length=500)
    city: str = Field(..., min_length=1, max_length=50)
    state: str = Field(..., min_length=1, max_length=50)
    machine_name_model: str = Field(..., min_length=1, max_length=100)
    problem_description: str = Field(..., min_length=1, max_length=1000)
    under_warranty: bool = False
    machine_purchase_date: Optional[date] = None
    complaint_type: Optional[ComplaintType] = None

    @field_validator("customer_name", "mobile_number")
    @classmethod
    def not_blank(cls, v: str):
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()

    @field_validator("email", mode="before")
    @classmethod
    def blank_email_means_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class ComplaintRequest(ComplaintPublicRequest):
    """Back-office create and full update"""
    status: Status = Status.OPEN
    priority: Priority = Priority.MEDIUM
    resolution_notes: Optional[str] = None


class ComplaintResponse(BaseModel):
    id: int
    customer_name: str
    mobile_number: str
    email: Optional[str]
    address: str
    city: str
    state: str
    machine_name_model: str
    problem_description: str
    under_warranty: bool
    machine_purchase_date: Optional[date]
    complaint_type: Optional[ComplaintType]
    status: Status
    priority: Priority
    resolution_notes: Optional[str]
    schedule_date: Optional[datetime]
    completion_date: Optional[datetime]
    created_date: Optional[datetime]
    updated_date: Optional[datetime]
    assigned_staff_id: Optional[int]
    assigned_staff: Optional[UserSummary]

    class Config:
        from_attributes = True


class ComplaintStatsResponse(BaseModel):
    total_complaints: int
    open_complaints: int
    assigned_complaints: int
    in_progress_complaints: int
    closed_complaints: int
    high_priority_complaints: int


class ScheduleCounts(BaseModel):
    total_scheduled: int
    pending: int
    in_progress: int
    completed: int


class StaffScheduleSummary(ScheduleCounts):
    staff_id: int
    staff_name: str


class WeeklyScheduleSummary(ScheduleCounts):
    start_date: date
    end_date: date
