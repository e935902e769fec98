# booking_engine/services/business/business_setup_service.py
"""
Setup verification.

Reports whether a business (or one of its services) has everything the
availability resolver needs: hours, services with durations, staff with
services and rules, and resource types with capacity.
"""
import logging
from typing import List
from uuid import UUID

from sqlalchemy.orm import Session

from booking_engine.core.exceptions import EntityNotFound, ServiceNotFound
from booking_engine.models import AllocationMode, Service, Staff
from booking_engine.schemas.setup import SetupReport, SetupSection, StaffSetupSummary
from booking_engine.services.schedule.schedule_store import ScheduleStore, translate_store_errors

logger = logging.getLogger(__name__)

DAY_NAMES = {1: "Monday", 2: "Tuesday", 3: "Wednesday", 4: "Thursday", 5: "Friday", 6: "Saturday", 7: "Sunday"}


class BusinessSetupService:
    """Readiness checks for businesses and services"""

    @staticmethod
    def verify_business_setup(db: Session, business_id: UUID) -> SetupReport:
        with translate_store_errors("verify_business_setup"):
            store = ScheduleStore(db)
            business = store.get_business(business_id)
            if business is None:
                raise EntityNotFound("Business", business_id)

            mode = business.allocation_mode
            report = SetupReport(business_id=business.id, allocation_mode=mode.value)
            recommendations = report.recommendations

            # ========================================
            # Business hours
            # ========================================
            hours_section = SetupSection()
            periods = store.get_all_operating_hours(business.id)
            report.hours_by_day = {day: 0 for day in DAY_NAMES}
            for period in periods:
                report.hours_by_day[period.day_of_week] += 1

            if not periods:
                hours_section.flag("No business hours configured")
                recommendations.append("Add operating hours for at least one day")
            else:
                closed = [DAY_NAMES[day] for day, count in report.hours_by_day.items() if count == 0]
                if closed:
                    # Closed days are allowed, informational only
                    hours_section.issues.append(f"No hours on: {', '.join(closed)} (ignore if closed)")

            # ========================================
            # Services
            # ========================================
            services_section = SetupSection()
            services = [s for s in business.services if s.is_active]
            if not services:
                services_section.flag("No active services")
                recommendations.append("Create at least one service")
            for service in services:
                if not service.duration_minutes or service.duration_minutes <= 0:
                    services_section.flag(f'Service "{service.name}" has no duration')

            # ========================================
            # Staff
            # ========================================
            staff_section = SetupSection()
            active_staff = [s for s in business.staff if s.is_active]
            for member in active_staff:
                rule_count = store.count_staff_rules(member.id)
                report.staff.append(StaffSetupSummary(
                    staff_id=member.id,
                    name=member.name,
                    service_count=len(member.services),
                    rule_count=rule_count,
                ))
                if not member.services:
                    staff_section.flag(f'Staff "{member.name}" provides no services')
                if rule_count == 0:
                    staff_section.flag(f'Staff "{member.name}" has no availability rules')

            staff_modes = {AllocationMode.STAFF_ONLY, AllocationMode.STAFF_AND_RESOURCE}
            if not active_staff and (mode in staff_modes or any(s.booking_mode in staff_modes for s in services)):
                staff_section.flag(f"Allocation mode {mode.value} needs staff but none exist")
                recommendations.append("Create at least one staff member")

            # ========================================
            # Resources
            # ========================================
            resources_section = SetupSection()
            resource_modes = {AllocationMode.RESOURCE_ONLY, AllocationMode.STAFF_AND_RESOURCE}
            needs_resources = mode in resource_modes or any(s.booking_mode in resource_modes for s in services)
            if needs_resources and not business.resource_types:
                resources_section.flag("No resource types configured")
                recommendations.append("Create at least one resource type")
            for resource_type in business.resource_types:
                if resource_type.total_capacity <= 0:
                    resources_section.flag(f'Resource type "{resource_type.name}" has no capacity')
                if not resource_type.resources:
                    resources_section.issues.append(
                        f'Resource type "{resource_type.name}" has no resource instances'
                    )

            report.sections = {
                "business_hours": hours_section,
                "services": services_section,
                "staff": staff_section,
                "resources": resources_section,
            }
            BusinessSetupService._finalize(report)

        logger.info(f"Setup check for business {business_id}: {report.overall_status}")
        return report

    @staticmethod
    def verify_service_setup(db: Session, business_id: UUID, service_id: UUID) -> SetupReport:
        """Whether one service can be booked under its effective allocation mode"""
        with translate_store_errors("verify_service_setup"):
            store = ScheduleStore(db)
            business = store.get_business(business_id)
            if business is None:
                raise EntityNotFound("Business", business_id)
            service = store.get_service(business.id, service_id)
            if service is None:
                raise ServiceNotFound(service_id, business.id)

            mode = service.booking_mode or business.allocation_mode
            report = SetupReport(business_id=business.id, service_id=service.id, allocation_mode=mode.value)

            hours_section = SetupSection()
            if not store.get_all_operating_hours(business.id):
                hours_section.flag("No business hours configured")
                report.recommendations.append("Add operating hours for at least one day")

            staff_section = SetupSection()
            if mode.requires_staff:
                providers: List[Staff] = [s for s in service.providers if s.is_active and s.business_id == business.id]
                if not providers:
                    staff_section.flag(f'No staff can provide service "{service.name}"')
                    report.recommendations.append("Link at least one staff member to this service")
                for member in providers:
                    rule_count = store.count_staff_rules(member.id)
                    report.staff.append(StaffSetupSummary(
                        staff_id=member.id,
                        name=member.name,
                        service_count=len(member.services),
                        rule_count=rule_count,
                    ))
                    if rule_count == 0:
                        staff_section.flag(f'Staff "{member.name}" has no availability rules')

            resources_section = SetupSection()
            if mode.requires_resource:
                BusinessSetupService._check_service_resources(service, resources_section, report.recommendations)

            report.sections = {
                "business_hours": hours_section,
                "staff": staff_section,
                "resources": resources_section,
            }
            BusinessSetupService._finalize(report)

        logger.info(f"Setup check for service {service_id}: {report.overall_status}")
        return report

    @staticmethod
    def _check_service_resources(service: Service, section: SetupSection, recommendations: List[str]) -> None:
        if not service.required_resource_types:
            section.flag(f'Service "{service.name}" is not linked to any resource type')
            recommendations.append("Link the service to the resource type it consumes")
            return
        for resource_type in service.required_resource_types:
            if resource_type.total_capacity <= 0:
                section.flag(f'Resource type "{resource_type.name}" has no capacity')

    @staticmethod
    def _finalize(report: SetupReport) -> None:
        if all(section.is_complete for section in report.sections.values()):
            report.overall_status = "ready"
            report.recommendations.append("Setup complete, bookings can be accepted")
        else:
            report.overall_status = "incomplete"
