# booking_engine/models/business.py
"""
Business Model
A business is the tenant boundary: it owns its operating hours, services,
staff, resource types, customers and bookings.
"""
from sqlalchemy import Column, String, Boolean, Integer, Time, ForeignKey, CheckConstraint, Uuid, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum
import uuid

from booking_engine.models.base import Base
from booking_engine.models.types import UTCDateTime


class AllocationMode(str, enum.Enum):
    """Which shared resources must be validated when checking or reserving a slot."""
    TIME_ONLY = "TimeOnly"
    STAFF_ONLY = "StaffOnly"
    RESOURCE_ONLY = "ResourceOnly"
    STAFF_AND_RESOURCE = "StaffAndResource"

    @property
    def requires_staff(self) -> bool:
        return self in (AllocationMode.STAFF_ONLY, AllocationMode.STAFF_AND_RESOURCE)

    @property
    def requires_resource(self) -> bool:
        return self in (AllocationMode.RESOURCE_ONLY, AllocationMode.STAFF_AND_RESOURCE)


def allocation_mode_column_type() -> SQLEnum:
    return SQLEnum(
        AllocationMode,
        name="allocation_mode",
        native_enum=False,
        length=32,
        values_callable=lambda modes: [m.value for m in modes],
    )


class Business(Base):
    __tablename__ = "businesses"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(200), nullable=False)
    allocation_mode = Column(
        allocation_mode_column_type(),
        nullable=False,
        default=AllocationMode.TIME_ONLY,
    )
    timezone = Column(String(50), nullable=True)  # IANA name, falls back to UTC

    created_at = Column(UTCDateTime, server_default=func.now())
    updated_at = Column(UTCDateTime, server_default=func.now(), onupdate=func.now())
    is_active = Column(Boolean, default=True)

    hours = relationship("BusinessHours", back_populates="business", cascade="all, delete-orphan")
    services = relationship("Service", back_populates="business", cascade="all, delete-orphan")
    staff = relationship("Staff", back_populates="business", cascade="all, delete-orphan")
    resource_types = relationship("ResourceType", back_populates="business", cascade="all, delete-orphan")
    customers = relationship("Customer", back_populates="business", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Business(id={self.id}, name={self.name}, mode={self.allocation_mode})>"


class BusinessHours(Base):
    """One open period on one weekday, in the business's local wall-clock time."""
    __tablename__ = "business_hours"
    __table_args__ = (
        CheckConstraint("day_of_week BETWEEN 1 AND 7", name="ck_business_hours_day_of_week"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    business_id = Column(Uuid, ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False, index=True)
    day_of_week = Column(Integer, nullable=False)  # ISO: 1=Monday, 7=Sunday
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)  # end < start runs overnight, 00:00 means midnight

    business = relationship("Business", back_populates="hours")

    def __repr__(self):
        return f"<BusinessHours(business_id={self.business_id}, day={self.day_of_week}, {self.start_time}-{self.end_time})>"
