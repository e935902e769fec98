# booking_engine/models/customer.py
from sqlalchemy import Column, String, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from booking_engine.models.base import Base
from booking_engine.models.types import UTCDateTime


class Customer(Base):
    __tablename__ = "customers"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    business_id = Column(Uuid, ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    phone = Column(String(20), nullable=True)
    email = Column(String(255), nullable=True)
    external_id = Column(String(100), nullable=True, index=True)  # id in the caller's own system

    created_at = Column(UTCDateTime, server_default=func.now())

    business = relationship("Business", back_populates="customers")
    bookings = relationship("Booking", back_populates="customer")

    def __repr__(self):
        return f"<Customer(id={self.id}, name={self.name})>"
