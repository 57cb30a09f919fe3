from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from tms.complaints import services
from tms.complaints.schema import (
    ComplaintPublicRequest, ComplaintRequest, ComplaintResponse, ComplaintStatsResponse,
    StaffScheduleSummary, WeeklyScheduleSummary,
)
from tms.database import get_db
from tms.dependencies import (
    ensure_admin_or_self, get_current_user, require_admin, require_admin_or_staff, require_staff,
)
from tms.models import ComplaintType, Priority, Status, User
from tms.schemas import MessageResponse
from tms.utils.date_utils import (
    current_week_bounds, day_bounds, days_bounds, parse_date_param, parse_datetime_param,
)
from tms.utils.rate_limiter import RateLimits, limiter

router = APIRouter(
    prefix="/complaints",
    tags=["Complaints"]
)


# ---------------------------------------------------------------------------
# Public intake (no authentication)
# ---------------------------------------------------------------------------

@router.post(
    "/public",
    response_model=ComplaintResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit a complaint (public)",
    description="Customer complaint form. Rejected while the mobile number has an active complaint."
)
@limiter.limit(RateLimits.PUBLIC_COMPLAINT)
def submit_public_complaint(
    request: Request,
    data: ComplaintPublicRequest,
    db: Session = Depends(get_db)
):
    try:
        return services.create_public_complaint(db, data)
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Complaint submission failed: {str(e)}"
        )


@router.get(
    "/check-existing/{mobile_number}",
    response_model=ComplaintResponse,
    summary="Active complaint for a mobile number (public)"
)
def check_existing_complaint(mobile_number: str, db: Session = Depends(get_db)):
    return services.find_existing_active(db, mobile_number)


# ---------------------------------------------------------------------------
# Collection
# ---------------------------------------------------------------------------

@router.get("", response_model=List[ComplaintResponse], summary="List all complaints")
def get_all_complaints(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return services.list_complaints(db)


@router.post("", response_model=ComplaintResponse, status_code=status.HTTP_201_CREATED, summary="Create complaint")
def create_complaint(
    data: ComplaintRequest,
    current_user: User = Depends(require_admin_or_staff),
    db: Session = Depends(get_db)
):
    return services.create_complaint(db, data, current_user)


@router.get("/status/{complaint_status}", response_model=List[ComplaintResponse], summary="Complaints by status")
def get_by_status(complaint_status: Status, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return services.complaints_by_status(db, complaint_status)


@router.get("/priority/{priority}", response_model=List[ComplaintResponse], summary="Complaints by priority")
def get_by_priority(priority: Priority, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return services.complaints_by_priority(db, priority)


@router.get("/type/{complaint_type}", response_model=List[ComplaintResponse], summary="Complaints by type")
def get_by_type(complaint_type: ComplaintType, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return services.complaints_by_type(db, complaint_type)


@router.get("/my-assignments", response_model=List[ComplaintResponse], summary="Complaints assigned to me")
def get_my_assignments(current_user: User = Depends(require_staff), db: Session = Depends(get_db)):
    return services.complaints_for_staff(db, current_user.id)


@router.get("/mobile/{mobile_number}", response_model=List[ComplaintResponse], summary="Complaints by mobile number")
def get_by_mobile(mobile_number: str, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return services.complaints_by_mobile(db, mobile_number)


@router.get("/search", response_model=List[ComplaintResponse], summary="Multi-criteria search")
def search_complaints(
    customer_name: Optional[str] = Query(None, description="Case-insensitive substring"),
    mobile_number: Optional[str] = Query(None, description="Substring"),
    complaint_status: Optional[Status] = Query(None, alias="status"),
    priority: Optional[Priority] = None,
    complaint_type: Optional[ComplaintType] = None,
    assigned_staff_id: Optional[int] = None,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return services.search_complaints(
        db,
        customer_name=customer_name,
        mobile_number=mobile_number,
        status=complaint_status,
        priority=priority,
        complaint_type=complaint_type,
        assigned_staff_id=assigned_staff_id,
    )


@router.get("/recent", response_model=List[ComplaintResponse], summary="Created in the last 30 days")
def get_recent(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return services.recent_complaints(db)


@router.get("/high-priority", response_model=List[ComplaintResponse], summary="Open high priority complaints")
def get_high_priority(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return services.high_priority_complaints(db)


@router.get("/stats", response_model=ComplaintStatsResponse, summary="Complaint statistics")
def get_stats(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return services.complaint_stats(db)


# ---------------------------------------------------------------------------
# Schedules
# ---------------------------------------------------------------------------

@router.get("/staff/{staff_id}/schedule", response_model=List[ComplaintResponse], summary="Staff schedule for a day")
def get_staff_schedule(
    staff_id: int,
    day: str = Query(..., alias="date", description="YYYY-MM-DD"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    ensure_admin_or_self(current_user, staff_id)
    start, end = day_bounds(parse_date_param(day, "date"))
    return services.scheduled_between(db, start, end, staff_id)


@router.get("/staff/{staff_id}", response_model=List[ComplaintResponse], summary="Complaints assigned to a staff member")
def get_by_staff(staff_id: int, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return services.complaints_for_staff(db, staff_id)


@router.get("/schedules/weekly", response_model=WeeklyScheduleSummary, summary="Seven day schedule summary")
def get_weekly_schedule(
    start_date: str = Query(..., description="YYYY-MM-DD"),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return services.weekly_schedule_summary(db, parse_date_param(start_date, "start_date"))


@router.get("/schedules", response_model=List[ComplaintResponse], summary="Scheduled visits between two dates")
def get_schedules(
    start_date: str = Query(..., description="YYYY-MM-DD"),
    end_date: str = Query(..., description="YYYY-MM-DD"),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    start, end = days_bounds(parse_date_param(start_date, "start_date"), parse_date_param(end_date, "end_date"))
    return services.scheduled_between(db, start, end)


@router.get("/schedule/date-range", response_model=List[ComplaintResponse], summary="Scheduled visits in a datetime range")
def get_schedule_date_range(
    start_date: str = Query(..., description="ISO datetime"),
    end_date: str = Query(..., description="ISO datetime"),
    staff_id: Optional[int] = None,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    start = parse_datetime_param(start_date, "start_date")
    end = parse_datetime_param(end_date, "end_date")
    return services.scheduled_between(db, start, end, staff_id)


@router.get("/schedule/today", response_model=List[ComplaintResponse], summary="Visits scheduled today")
def get_today_schedule(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    start, end = day_bounds(date.today())
    return services.scheduled_between(db, start, end)


@router.get("/schedule/week", response_model=List[ComplaintResponse], summary="Visits scheduled this week")
def get_week_schedule(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    start, end = current_week_bounds()
    return services.scheduled_between(db, start, end)


@router.get("/schedule/staff-summary", response_model=List[StaffScheduleSummary], summary="Per staff schedule summary")
def get_staff_schedule_summary(
    start_date: str = Query(..., description="YYYY-MM-DD"),
    end_date: str = Query(..., description="YYYY-MM-DD"),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    start, end = days_bounds(parse_date_param(start_date, "start_date"), parse_date_param(end_date, "end_date"))
    return services.staff_schedule_summary(db, start, end)


# ---------------------------------------------------------------------------
# Single complaint
# ---------------------------------------------------------------------------

@router.get("/{complaint_id}", response_model=ComplaintResponse, summary="Get complaint (admin or assigned staff)")
def get_complaint(complaint_id: int, current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return services.get_accessible_complaint(db, complaint_id, current_user)


@router.put("/{complaint_id}", response_model=ComplaintResponse, summary="Update complaint (admin or assigned staff)")
def update_complaint(
    complaint_id: int,
    data: ComplaintRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return services.update_complaint(db, complaint_id, data, current_user)


@router.delete("/{complaint_id}", response_model=MessageResponse, summary="Delete complaint")
def delete_complaint(complaint_id: int, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return services.delete_complaint(db, complaint_id)


@router.put("/{complaint_id}/assign/{staff_id}", response_model=ComplaintResponse, summary="Assign to staff")
def assign_complaint(
    complaint_id: int,
    staff_id: int,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return services.assign_complaint(db, complaint_id, staff_id)


@router.put(
    "/{complaint_id}/assign/{staff_id}/schedule",
    response_model=ComplaintResponse,
    summary="Assign to staff and schedule the visit"
)
def assign_and_schedule(
    complaint_id: int,
    staff_id: int,
    schedule_date: str = Query(..., description="ISO datetime"),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    when = parse_datetime_param(schedule_date, "schedule_date")
    return services.assign_complaint(db, complaint_id, staff_id, when)


@router.put("/{complaint_id}/schedule", response_model=ComplaintResponse, summary="Reschedule the visit")
def reschedule(
    complaint_id: int,
    schedule_date: str = Query(..., description="ISO datetime"),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return services.schedule_complaint(db, complaint_id, parse_datetime_param(schedule_date, "schedule_date"))


@router.put("/{complaint_id}/status", response_model=ComplaintResponse, summary="Change status (admin or assigned staff)")
def update_status(
    complaint_id: int,
    new_status: Status = Query(..., alias="status"),
    resolution_notes: Optional[str] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return services.update_status(db, complaint_id, new_status, resolution_notes, current_user)
