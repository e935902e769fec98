# booking_engine/models/booking.py
"""
Booking Models
A booking reserves one service start time for one customer, optionally with a
staff member and a quantity of one resource type.
"""
from sqlalchemy import Column, Text, Integer, ForeignKey, CheckConstraint, Index, Uuid, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum
import uuid

from booking_engine.models.base import Base
from booking_engine.models.types import UTCDateTime


class BookingStatus(str, enum.Enum):
    CONFIRMED = "Confirmed"
    CANCELLED = "Cancelled"
    COMPLETED = "Completed"

    @property
    def occupies_time(self) -> bool:
        """Cancelled bookings never conflict or consume capacity"""
        return self != BookingStatus.CANCELLED


class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        Index("ix_bookings_business_time", "business_id", "booking_time"),
        Index("ix_bookings_staff_time", "staff_id", "booking_time"),
        Index("ix_bookings_customer_time", "customer_id", "booking_time"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    business_id = Column(Uuid, ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False)
    customer_id = Column(Uuid, ForeignKey("customers.id", ondelete="CASCADE"), nullable=False)
    service_id = Column(Uuid, ForeignKey("services.id"), nullable=False)
    staff_id = Column(Uuid, ForeignKey("staff.id"), nullable=True)

    # Stored in UTC; the end is always booking_time + service duration
    booking_time = Column(UTCDateTime, nullable=False)
    status = Column(
        SQLEnum(
            BookingStatus,
            name="booking_status",
            native_enum=False,
            length=16,
            values_callable=lambda statuses: [s.value for s in statuses],
        ),
        nullable=False,
        default=BookingStatus.CONFIRMED,
    )
    notes = Column(Text, nullable=True)

    created_at = Column(UTCDateTime, server_default=func.now())
    updated_at = Column(UTCDateTime, server_default=func.now(), onupdate=func.now())

    # Relationships
    business = relationship("Business")
    customer = relationship("Customer", back_populates="bookings")
    service = relationship("Service")
    staff = relationship("Staff")
    resource_usages = relationship(
        "ResourceUsage", back_populates="booking", cascade="all, delete-orphan"
    )

    def __repr__(self):
        return f"<Booking(id={self.id}, time={self.booking_time}, status={self.status})>"


class ResourceUsage(Base):
    """Quantity of a resource type consumed by a booking for its whole duration."""
    __tablename__ = "resource_usages"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_resource_usages_quantity_positive"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    booking_id = Column(Uuid, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True)
    resource_type_id = Column(Uuid, ForeignKey("resource_types.id"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False, default=1)

    booking = relationship("Booking", back_populates="resource_usages")
    resource_type = relationship("ResourceType")
