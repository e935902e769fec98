# booking_engine/models/__init__.py
from booking_engine.models.base import Base
from booking_engine.models.business import AllocationMode, Business, BusinessHours
from booking_engine.models.service import Service, service_resource_types
from booking_engine.models.staff import AvailabilityKind, Staff, StaffAvailability, staff_services
from booking_engine.models.resource import ResourceType, Resource
from booking_engine.models.customer import Customer
from booking_engine.models.booking import BookingStatus, Booking, ResourceUsage

__all__ = [
    "Base",
    "AllocationMode",
    "Business",
    "BusinessHours",
    "Service",
    "service_resource_types",
    "AvailabilityKind",
    "Staff",
    "StaffAvailability",
    "staff_services",
    "ResourceType",
    "Resource",
    "Customer",
    "BookingStatus",
    "Booking",
    "ResourceUsage",
]
