# booking_engine/models/service.py
"""
Service Model - bookable services
Each service belongs to one business. Its duration drives the end of every slot
and booking made for it.
"""
from sqlalchemy import Column, String, Integer, ForeignKey, Boolean, Text, Table, CheckConstraint, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from booking_engine.models.base import Base
from booking_engine.models.business import allocation_mode_column_type
from booking_engine.models.types import UTCDateTime


# Service ─requires→ ResourceType
service_resource_types = Table(
    "service_resource_types",
    Base.metadata,
    Column("service_id", Uuid, ForeignKey("services.id", ondelete="CASCADE"), primary_key=True),
    Column("resource_type_id", Uuid, ForeignKey("resource_types.id", ondelete="CASCADE"), primary_key=True),
)


class Service(Base):
    __tablename__ = "services"
    __table_args__ = (
        CheckConstraint("duration_minutes > 0", name="ck_services_duration_positive"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    business_id = Column(
        Uuid,
        ForeignKey("businesses.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    duration_minutes = Column(Integer, nullable=False)

    # Overrides the business allocation mode for this service when set
    booking_mode = Column(allocation_mode_column_type(), nullable=True)

    is_active = Column(Boolean, default=True, index=True)

    created_at = Column(UTCDateTime, server_default=func.now())
    updated_at = Column(UTCDateTime, server_default=func.now(), onupdate=func.now())

    # Relationships
    business = relationship("Business", back_populates="services")
    required_resource_types = relationship("ResourceType", secondary=service_resource_types)
    providers = relationship("Staff", secondary="staff_services", back_populates="services")

    def __repr__(self):
        return f"<Service(id={self.id}, name={self.name}, business_id={self.business_id})>"
