# booking_engine/models/staff.py
"""
Staff Models
Staff members, the services they can perform, and their weekly schedule and
date-specific exception rules.
"""
from sqlalchemy import Column, String, Boolean, Integer, Date, Time, ForeignKey, Table, CheckConstraint, Uuid, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum
import uuid

from booking_engine.models.base import Base
from booking_engine.models.types import UTCDateTime


# Staff ─provides→ Service
staff_services = Table(
    "staff_services",
    Base.metadata,
    Column("staff_id", Uuid, ForeignKey("staff.id", ondelete="CASCADE"), primary_key=True),
    Column("service_id", Uuid, ForeignKey("services.id", ondelete="CASCADE"), primary_key=True),
)


class AvailabilityKind(str, enum.Enum):
    SCHEDULE = "SCHEDULE"  # recurring weekly, keyed by day_of_week
    EXCEPTION = "EXCEPTION"  # one calendar date, keyed by date


class Staff(Base):
    __tablename__ = "staff"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    business_id = Column(Uuid, ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    is_active = Column(Boolean, default=True)

    created_at = Column(UTCDateTime, server_default=func.now())

    business = relationship("Business", back_populates="staff")
    services = relationship("Service", secondary=staff_services, back_populates="providers")
    availability_rules = relationship(
        "StaffAvailability", back_populates="staff", cascade="all, delete-orphan"
    )

    def __repr__(self):
        return f"<Staff(id={self.id}, name={self.name}, business_id={self.business_id})>"


class StaffAvailability(Base):
    """
    A single availability rule.

    SCHEDULE rules carry day_of_week (ISO 1-7) and repeat weekly.
    EXCEPTION rules carry a calendar date; an exception spanning 00:00 to 23:59
    or later blocks the whole day, any other exception adds availability.
    """
    __tablename__ = "staff_availability"
    __table_args__ = (
        CheckConstraint(
            "(kind = 'SCHEDULE' AND day_of_week IS NOT NULL) OR (kind = 'EXCEPTION' AND date IS NOT NULL)",
            name="ck_staff_availability_key",
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    staff_id = Column(Uuid, ForeignKey("staff.id", ondelete="CASCADE"), nullable=False, index=True)
    kind = Column(
        SQLEnum(AvailabilityKind, name="availability_kind", native_enum=False, length=16),
        nullable=False,
    )
    day_of_week = Column(Integer, nullable=True)
    date = Column(Date, nullable=True, index=True)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)

    staff = relationship("Staff", back_populates="availability_rules")

    def __repr__(self):
        key = self.day_of_week if self.kind == AvailabilityKind.SCHEDULE else self.date
        return f"<StaffAvailability(staff_id={self.staff_id}, {self.kind.value}:{key}, {self.start_time}-{self.end_time})>"
