from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from tms.models import ACTIVE_STATUSES, Complaint, ComplaintType, Priority, Status
from tms.repositories.base import BaseRepository

RECENT_DAYS = 30


class ComplaintRepository(BaseRepository[Complaint]):
    def __init__(self, session: Session):
        super().__init__(session, Complaint)

    # Equality lookups
    def find_by_mobile_number(self, mobile_number: str) -> Sequence[Complaint]:
        return self.get_multi(filters={"mobile_number": mobile_number})

    def find_by_status(self, status: Status) -> Sequence[Complaint]:
        return self.get_multi(filters={"status": status})

    def find_by_priority(self, priority: Priority) -> Sequence[Complaint]:
        return self.get_multi(filters={"priority": priority})

    def find_by_complaint_type(self, complaint_type: ComplaintType) -> Sequence[Complaint]:
        return self.get_multi(filters={"complaint_type": complaint_type})

    def find_by_assigned_staff(self, staff_id: int) -> Sequence[Complaint]:
        return self.get_multi(filters={"assigned_staff_id": staff_id})

    # Counts
    def count_by_status(self, status: Status) -> int:
        return self.count({"status": status})

    def count_by_priority(self, priority: Priority) -> int:
        return self.count({"priority": priority})

    # Dashboards
    def find_recent(self, days: int = RECENT_DAYS) -> Sequence[Complaint]:
        since = datetime.now() - timedelta(days=days)
        stmt = select(Complaint).where(Complaint.created_date >= since).order_by(Complaint.created_date.desc())
        return self._all(stmt)

    def find_high_priority_open(self) -> Sequence[Complaint]:
        stmt = (
            select(Complaint)
            .where(Complaint.priority == Priority.HIGH, Complaint.status.in_(ACTIVE_STATUSES))
            .order_by(Complaint.created_date.asc())
        )
        return self._all(stmt)

    def search(
        self,
        customer_name: Optional[str] = None,
        mobile_number: Optional[str] = None,
        status: Optional[Status] = None,
        priority: Optional[Priority] = None,
        complaint_type: Optional[ComplaintType] = None,
        assigned_staff_id: Optional[int] = None,
    ) -> Sequence[Complaint]:
        """Every supplied criterion must match; omitted criteria are ignored."""
        stmt = select(Complaint)
        if customer_name:
            stmt = stmt.where(Complaint.customer_name.icontains(customer_name, autoescape=True))
        if mobile_number:
            stmt = stmt.where(Complaint.mobile_number.contains(mobile_number, autoescape=True))
        stmt = self._apply_filters(stmt, {
            "status": status,
            "priority": priority,
            "complaint_type": complaint_type,
            "assigned_staff_id": assigned_staff_id,
        })
        return self._all(stmt.order_by(Complaint.id))

    # Public intake: anything not yet CLOSED blocks a new submission
    def find_active_by_mobile_number(self, mobile_number: str) -> Sequence[Complaint]:
        stmt = (
            select(Complaint)
            .where(Complaint.mobile_number == mobile_number, Complaint.status != Status.CLOSED)
            .order_by(Complaint.created_date.desc())
        )
        return self._all(stmt)

    # Schedules
    def find_scheduled_between(
        self, start: datetime, end: datetime, staff_id: Optional[int] = None
    ) -> Sequence[Complaint]:
        stmt = select(Complaint).where(
            Complaint.schedule_date.is_not(None),
            Complaint.schedule_date >= start,
            Complaint.schedule_date <= end,
        )
        if staff_id is not None:
            stmt = stmt.where(Complaint.assigned_staff_id == staff_id)
        return self._all(stmt.order_by(Complaint.schedule_date.asc()))

    def count_scheduled_by_status(self, start: datetime, end: datetime) -> dict:
        stmt = (
            select(Complaint.status, func.count(Complaint.id))
            .where(Complaint.schedule_date >= start, Complaint.schedule_date <= end)
            .group_by(Complaint.status)
        )
        return {row[0]: row[1] for row in self.session.execute(stmt).all()}
