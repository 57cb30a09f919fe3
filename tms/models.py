import enum
from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, Text, Boolean, ForeignKey, Date, Numeric, Enum
from sqlalchemy.orm import relationship

from tms.database import Base


class Role(str, enum.Enum):
    ADMIN = "ADMIN"
    STAFF = "STAFF"


class Status(str, enum.Enum):
    """Complaint lifecycle"""
    OPEN = "OPEN"
    ASSIGNED = "ASSIGNED"
    IN_PROGRESS = "IN_PROGRESS"
    CLOSED = "CLOSED"
    CANCELLED = "CANCELLED"


class Priority(str, enum.Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


class ComplaintType(str, enum.Enum):
    MACHINE_REPAIR = "MACHINE_REPAIR"
    DEMO = "DEMO"
    MACHINE_ENQUIRY = "MACHINE_ENQUIRY"
    TRAINING = "TRAINING"
    OTHERS = "OTHERS"


class ExpenseStatus(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    PAID = "PAID"
    REJECTED = "REJECTED"


# Statuses that still need work from the service team
ACTIVE_STATUSES = (Status.OPEN, Status.ASSIGNED, Status.IN_PROGRESS)


def _enum_column(enum_cls, **kwargs):
    # Stored by name as VARCHAR
    return Column(Enum(enum_cls, native_enum=False, length=20, validate_strings=True), **kwargs)


class User(Base):
    """Back-office login: administrators and field service staff"""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, nullable=False, index=True)
    email = Column(String(100), unique=True, nullable=True, index=True)
    full_name = Column(String(100), nullable=False)
    mobile_number = Column(String(15), unique=True, nullable=False, index=True)
    hashed_password = Column(String, nullable=False)
    role = _enum_column(Role, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_date = Column(DateTime, default=datetime.now)

    # Relationships
    assigned_complaints = relationship("Complaint", back_populates="assigned_staff")
    added_expenses = relationship("Expense", back_populates="added_by")
    staff_expenses = relationship("StaffExpense", back_populates="staff_user")


class Complaint(Base):
    """Customer service request for a sewing machine"""
    __tablename__ = "complaints"

    id = Column(Integer, primary_key=True, index=True)
    customer_name = Column(String(100), nullable=False)
    mobile_number = Column(String(15), nullable=False, index=True)
    email = Column(String(100), nullable=True)
    address = Column(String(500), nullable=False)
    city = Column(String(50), nullable=False)
    state = Column(String(50), nullable=False)
    machine_name_model = Column(String(100), nullable=False)
    problem_description = Column(String(1000), nullable=False)
    under_warranty = Column(Boolean, default=False, nullable=False)
    machine_purchase_date = Column(Date, nullable=True)
    complaint_type = _enum_column(ComplaintType, nullable=True)
    status = _enum_column(Status, nullable=False, default=Status.OPEN, index=True)
    priority = _enum_column(Priority, nullable=False, default=Priority.MEDIUM, index=True)
    resolution_notes = Column(Text, nullable=True)
    schedule_date = Column(DateTime, nullable=True, index=True)  # Planned visit
    completion_date = Column(DateTime, nullable=True)
    created_date = Column(DateTime, default=datetime.now)
    updated_date = Column(DateTime, default=datetime.now)

    assigned_staff_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    # Relationships
    assigned_staff = relationship("User", back_populates="assigned_complaints")
    expenses = relationship("Expense", back_populates="complaint", cascade="all, delete-orphan")


class Expense(Base):
    """Money spent against a complaint (parts, travel, etc.)"""
    __tablename__ = "expenses"

    id = Column(Integer, primary_key=True, index=True)
    description = Column(String(255), nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    expense_date = Column(DateTime, default=datetime.now)
    receipt_number = Column(String(100), nullable=True)
    vendor_name = Column(String(100), nullable=True)
    notes = Column(Text, nullable=True)

    complaint_id = Column(Integer, ForeignKey("complaints.id", ondelete="CASCADE"), nullable=False, index=True)
    added_by_user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    # Relationships
    complaint = relationship("Complaint", back_populates="expenses")
    added_by = relationship("User", back_populates="added_expenses")


class StaffExpense(Base):
    """Out-of-pocket spend by a staff member awaiting reimbursement"""
    __tablename__ = "staff_expenses"

    id = Column(Integer, primary_key=True, index=True)
    amount = Column(Numeric(10, 2), nullable=False)
    expense_date = Column(DateTime, nullable=False)
    reason = Column(String(500), nullable=False)
    complaint_number = Column(String(50), nullable=True)  # Free-text reference, not a FK
    status = _enum_column(ExpenseStatus, nullable=False, default=ExpenseStatus.PENDING)
    is_paid_by_company = Column(Boolean, default=False, nullable=False)
    paid_date = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    staff_user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # Relationships
    staff_user = relationship("User", back_populates="staff_expenses")
