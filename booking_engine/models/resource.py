# booking_engine/models/resource.py
from sqlalchemy import Column, String, Boolean, Integer, ForeignKey, CheckConstraint, Uuid
from sqlalchemy.orm import relationship
import uuid

from booking_engine.models.base import Base


class ResourceType(Base):
    """A pool of interchangeable resources (rooms, chairs, machines) with a fixed total capacity."""
    __tablename__ = "resource_types"
    __table_args__ = (
        CheckConstraint("total_capacity >= 0", name="ck_resource_types_capacity"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    business_id = Column(Uuid, ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    total_capacity = Column(Integer, nullable=False, default=1)

    business = relationship("Business", back_populates="resource_types")
    resources = relationship("Resource", back_populates="resource_type", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<ResourceType(id={self.id}, name={self.name}, capacity={self.total_capacity})>"


class Resource(Base):
    __tablename__ = "resources"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    resource_type_id = Column(Uuid, ForeignKey("resource_types.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    is_active = Column(Boolean, default=True)

    resource_type = relationship("ResourceType", back_populates="resources")
