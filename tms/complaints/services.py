"""
Business logic for complaint intake, assignment, lifecycle and scheduling
"""

import logging
from datetime import date, datetime, timedelta
from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from tms.complaints.schema import (
    ComplaintPublicRequest, ComplaintRequest, ComplaintStatsResponse,
    StaffScheduleSummary, WeeklyScheduleSummary,
)
from tms.dependencies import is_admin
from tms.models import Complaint, ComplaintType, Priority, Role, Status, User
from tms.repositories.complaint_repository import ComplaintRepository
from tms.repositories.user_repository import UserRepository
from tms.utils.date_utils import days_bounds
from tms.utils.transaction import commit_or_500

logger = logging.getLogger(__name__)

ACTIVE_COMPLAINT_EXISTS = (
    "You already have an active complaint. "
    "Please wait for it to be resolved before submitting a new one."
)


def get_complaint_or_404(db: Session, complaint_id: int) -> Complaint:
    complaint = ComplaintRepository(db).get(complaint_id)
    if not complaint:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Complaint not found")
    return complaint


def ensure_can_access(complaint: Complaint, current_user: User):
    """Admins see every complaint; staff only the ones assigned to them."""
    if is_admin(current_user):
        return
    if complaint.assigned_staff_id != current_user.id:
        logger.warning(
            "Complaint access denied",
            extra={"action": "complaint_access", "complaint_id": complaint.id, "user_id": current_user.id}
        )
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")


def get_accessible_complaint(db: Session, complaint_id: int, current_user: User) -> Complaint:
    complaint = get_complaint_or_404(db, complaint_id)
    ensure_can_access(complaint, current_user)
    return complaint


def _touch(complaint: Complaint):
    complaint.updated_date = datetime.now()


def _apply_status(complaint: Complaint, new_status: Status):
    if new_status != Status.CLOSED:
        complaint.completion_date = None
    elif complaint.status != Status.CLOSED or complaint.completion_date is None:
        complaint.completion_date = datetime.now()
    complaint.status = new_status


# ---------------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------------

def create_complaint(db: Session, data: ComplaintRequest, current_user: User) -> Complaint:
    now = datetime.now()
    values = data.model_dump()
    new_status = values.pop("status")
    complaint = Complaint(**values, created_date=now, updated_date=now)
    _apply_status(complaint, new_status)

    ComplaintRepository(db).create(complaint)
    commit_or_500(db, "Complaint creation failed", complaint, user_id=current_user.id)
    logger.info(
        f"Complaint {complaint.id} created",
        extra={"action": "create_complaint", "complaint_id": complaint.id, "user_id": current_user.id}
    )
    return complaint


def list_complaints(db: Session) -> List[Complaint]:
    return list(ComplaintRepository(db).get_multi())


def update_complaint(db: Session, complaint_id: int, data: ComplaintRequest, current_user: User) -> Complaint:
    """Replace every editable field. Assignment and schedule have their own endpoints."""
    complaint = get_accessible_complaint(db, complaint_id, current_user)

    values = data.model_dump()
    new_status = values.pop("status")
    ComplaintRepository(db).update(complaint, values)
    _apply_status(complaint, new_status)
    _touch(complaint)

    commit_or_500(db, "Complaint update failed", complaint, complaint_id=complaint_id)
    logger.info(f"Complaint {complaint_id} updated", extra={"action": "update_complaint", "user_id": current_user.id})
    return complaint


def delete_complaint(db: Session, complaint_id: int):
    complaint = get_complaint_or_404(db, complaint_id)
    ComplaintRepository(db).delete(complaint)
    commit_or_500(db, "Complaint deletion failed", complaint_id=complaint_id)
    logger.info(f"Complaint {complaint_id} deleted", extra={"action": "delete_complaint"})
    return {"message": "Complaint deleted successfully"}


# ---------------------------------------------------------------------------
# Assignment & lifecycle
# ---------------------------------------------------------------------------

def assign_complaint(
    db: Session, complaint_id: int, staff_id: int, schedule_date: Optional[datetime] = None
) -> Complaint:
    """Hand a complaint to a staff member, optionally booking the visit in the same step."""
    complaint = get_complaint_or_404(db, complaint_id)
    staff = UserRepository(db).get(staff_id)
    if not staff:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Staff member not found")
    if staff.role != Role.STAFF:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User is not a staff member")

    complaint.assigned_staff_id = staff.id
    _apply_status(complaint, Status.ASSIGNED)
    if schedule_date is not None:
        complaint.schedule_date = schedule_date
    _touch(complaint)

    commit_or_500(db, "Complaint assignment failed", complaint, complaint_id=complaint_id, staff_id=staff_id)
    logger.info(
        f"Complaint {complaint_id} assigned to staff {staff_id}",
        extra={"action": "assign_complaint", "schedule_date": str(schedule_date)}
    )
    return complaint


def schedule_complaint(db: Session, complaint_id: int, schedule_date: datetime) -> Complaint:
    complaint = get_complaint_or_404(db, complaint_id)
    complaint.schedule_date = schedule_date
    _touch(complaint)
    commit_or_500(db, "Complaint scheduling failed", complaint, complaint_id=complaint_id)
    logger.info(f"Complaint {complaint_id} scheduled for {schedule_date}", extra={"action": "schedule_complaint"})
    return complaint


def update_status(
    db: Session,
    complaint_id: int,
    new_status: Status,
    resolution_notes: Optional[str],
    current_user: User,
) -> Complaint:
    complaint = get_accessible_complaint(db, complaint_id, current_user)

    _apply_status(complaint, new_status)
    # Existing notes survive a status change without new notes
    if resolution_notes and resolution_notes.strip():
        complaint.resolution_notes = resolution_notes
    _touch(complaint)

    commit_or_500(db, "Complaint status update failed", complaint, complaint_id=complaint_id)
    logger.info(
        f"Complaint {complaint_id} moved to {new_status.value}",
        extra={"action": "update_complaint_status", "user_id": current_user.id}
    )
    return complaint


def release_staff_complaints(db: Session, staff_id: int) -> int:
    """Detach a departing staff member from their complaints.

    Work that was still with them goes back to the OPEN queue. Does not commit.
    """
    released = ComplaintRepository(db).find_by_assigned_staff(staff_id)
    for complaint in released:
        complaint.assigned_staff_id = None
        if complaint.status in (Status.ASSIGNED, Status.IN_PROGRESS):
            _apply_status(complaint, Status.OPEN)
        _touch(complaint)
    return len(released)


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

def complaints_by_status(db: Session, complaint_status: Status) -> List[Complaint]:
    return list(ComplaintRepository(db).find_by_status(complaint_status))


def complaints_by_priority(db: Session, priority: Priority) -> List[Complaint]:
    return list(ComplaintRepository(db).find_by_priority(priority))


def complaints_by_type(db: Session, complaint_type: ComplaintType) -> List[Complaint]:
    return list(ComplaintRepository(db).find_by_complaint_type(complaint_type))


def complaints_for_staff(db: Session, staff_id: int) -> List[Complaint]:
    return list(ComplaintRepository(db).find_by_assigned_staff(staff_id))


def complaints_by_mobile(db: Session, mobile_number: str) -> List[Complaint]:
    return list(ComplaintRepository(db).find_by_mobile_number(mobile_number))


def search_complaints(db: Session, **criteria) -> List[Complaint]:
    return list(ComplaintRepository(db).search(**criteria))


def recent_complaints(db: Session) -> List[Complaint]:
    return list(ComplaintRepository(db).find_recent())


def high_priority_complaints(db: Session) -> List[Complaint]:
    return list(ComplaintRepository(db).find_high_priority_open())


def complaint_stats(db: Session) -> ComplaintStatsResponse:
    complaints = ComplaintRepository(db)
    return ComplaintStatsResponse(
        total_complaints=complaints.count(),
        open_complaints=complaints.count_by_status(Status.OPEN),
        assigned_complaints=complaints.count_by_status(Status.ASSIGNED),
        in_progress_complaints=complaints.count_by_status(Status.IN_PROGRESS),
        closed_complaints=complaints.count_by_status(Status.CLOSED),
        high_priority_complaints=complaints.count_by_priority(Priority.HIGH),
    )


# ---------------------------------------------------------------------------
# Public intake
# ---------------------------------------------------------------------------

def create_public_complaint(db: Session, data: ComplaintPublicRequest) -> Complaint:
    """
    Customer-submitted complaint. A mobile number may only hold one active
    complaint at a time; status, priority and assignment are never taken from the caller.
    """
    complaints = ComplaintRepository(db)
    if complaints.find_active_by_mobile_number(data.mobile_number):
        logger.warning(
            "Public complaint rejected: active complaint exists",
            extra={"action": "create_public_complaint", "mobile_number": data.mobile_number}
        )
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=ACTIVE_COMPLAINT_EXISTS)

    now = datetime.now()
    complaint = Complaint(
        **data.model_dump(),
        status=Status.OPEN,
        priority=Priority.MEDIUM,
        assigned_staff_id=None,
        created_date=now,
        updated_date=now,
    )
    complaints.create(complaint)
    commit_or_500(db, "Complaint submission failed", complaint)
    logger.info(f"Public complaint {complaint.id} submitted", extra={"action": "create_public_complaint"})
    return complaint


def find_existing_active(db: Session, mobile_number: str) -> Complaint:
    active = ComplaintRepository(db).find_active_by_mobile_number(mobile_number)
    if not active:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No active complaint found")
    return active[0]


# ---------------------------------------------------------------------------
# Schedules
# ---------------------------------------------------------------------------

def scheduled_between(
    db: Session, start: datetime, end: datetime, staff_id: Optional[int] = None
) -> List[Complaint]:
    if end < start:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="End date must not be before start date")
    return list(ComplaintRepository(db).find_scheduled_between(start, end, staff_id))


def _count_by_schedule_status(complaints) -> dict:
    counts = {"total_scheduled": 0, "pending": 0, "in_progress": 0, "completed": 0}
    for complaint in complaints:
        counts["total_scheduled"] += 1
        if complaint.status == Status.ASSIGNED:
            counts["pending"] += 1
        elif complaint.status == Status.IN_PROGRESS:
            counts["in_progress"] += 1
        elif complaint.status == Status.CLOSED:
            counts["completed"] += 1
    return counts


def staff_schedule_summary(db: Session, start: datetime, end: datetime) -> List[StaffScheduleSummary]:
    """Per staff member workload for visits scheduled in the window."""
    by_staff = {}
    for complaint in scheduled_between(db, start, end):
        if complaint.assigned_staff is not None:
            by_staff.setdefault(complaint.assigned_staff, []).append(complaint)
    return [
        StaffScheduleSummary(staff_id=staff.id, staff_name=staff.full_name, **_count_by_schedule_status(own))
        for staff, own in sorted(by_staff.items(), key=lambda item: item[0].id)
    ]


def weekly_schedule_summary(db: Session, start_date: date) -> WeeklyScheduleSummary:
    end_date = start_date + timedelta(days=6)
    start, end = days_bounds(start_date, end_date)
    by_status = ComplaintRepository(db).count_scheduled_by_status(start, end)
    return WeeklyScheduleSummary(
        start_date=start_date,
        end_date=end_date,
        total_scheduled=sum(by_status.values()),
        pending=by_status.get(Status.ASSIGNED, 0),
        in_progress=by_status.get(Status.IN_PROGRESS, 0),
        completed=by_status.get(Status.CLOSED, 0),
    )
