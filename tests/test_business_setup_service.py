import uuid

import pytest

from booking_engine.core.exceptions import EntityNotFound, ServiceNotFound
from booking_engine.models import AllocationMode
from booking_engine.services.business.business_setup_service import BusinessSetupService


def test_complete_business_is_ready(db, make_business, make_service, make_staff):
    business = make_business(mode=AllocationMode.STAFF_ONLY)
    service = make_service(business)
    make_staff(business, services=[service])

    report = BusinessSetupService.verify_business_setup(db, business.id)

    assert report.overall_status == "ready"
    assert report.hours_by_day == {1: 1, 2: 1, 3: 1, 4: 1, 5: 1, 6: 0, 7: 0}
    # Closed weekend is informational, not a failure
    assert report.sections["business_hours"].is_complete
    assert report.sections["business_hours"].issues
    assert report.staff[0].service_count == 1
    assert report.staff[0].rule_count == 5


def test_business_without_hours(db, make_business, make_service):
    business = make_business(hours=[])
    make_service(business)

    report = BusinessSetupService.verify_business_setup(db, business.id)

    assert report.overall_status == "incomplete"
    assert not report.sections["business_hours"].is_complete
    assert "Add operating hours for at least one day" in report.recommendations


def test_staff_mode_without_staff(db, make_business, make_service):
    business = make_business(mode=AllocationMode.STAFF_ONLY)
    make_service(business)

    report = BusinessSetupService.verify_business_setup(db, business.id)

    assert report.overall_status == "incomplete"
    assert not report.sections["staff"].is_complete


def test_staff_without_rules_or_services(db, make_business, make_service, make_staff):
    business = make_business()
    make_service(business)
    make_staff(business, schedule=[])

    report = BusinessSetupService.verify_business_setup(db, business.id)

    assert len(report.sections["staff"].issues) == 2
    assert report.overall_status == "incomplete"


def test_resource_mode_without_resource_types(db, make_business, make_service):
    business = make_business(mode=AllocationMode.RESOURCE_ONLY)
    make_service(business)

    report = BusinessSetupService.verify_business_setup(db, business.id)

    assert not report.sections["resources"].is_complete
    assert report.overall_status == "incomplete"


def test_service_without_linked_resource_type(db, make_business, make_service, make_resource_type):
    business = make_business(mode=AllocationMode.RESOURCE_ONLY)
    make_resource_type(business, capacity=4)
    service = make_service(business)

    report = BusinessSetupService.verify_service_setup(db, business.id, service.id)

    assert report.service_id == service.id
    assert report.overall_status == "incomplete"
    assert not report.sections["resources"].is_complete


def test_service_with_resource_and_provider(db, make_business, make_service, make_staff, make_resource_type):
    business = make_business(mode=AllocationMode.STAFF_AND_RESOURCE)
    chairs = make_resource_type(business, capacity=2, instances=2)
    service = make_service(business, resource_types=[chairs])
    make_staff(business, services=[service])

    report = BusinessSetupService.verify_service_setup(db, business.id, service.id)

    assert report.overall_status == "ready"
    assert report.allocation_mode == "StaffAndResource"


def test_service_mode_override_is_reported(db, make_business, make_service):
    business = make_business(mode=AllocationMode.TIME_ONLY)
    service = make_service(business, booking_mode=AllocationMode.STAFF_ONLY)

    report = BusinessSetupService.verify_service_setup(db, business.id, service.id)

    assert report.allocation_mode == "StaffOnly"
    assert not report.sections["staff"].is_complete


def test_unknown_references(db, make_business):
    business = make_business()

    with pytest.raises(EntityNotFound):
        BusinessSetupService.verify_business_setup(db, uuid.uuid4())
    with pytest.raises(ServiceNotFound):
        BusinessSetupService.verify_service_setup(db, business.id, uuid.uuid4())


def test_zero_capacity_resource_type_is_reported(db, make_business, make_service, make_resource_type):
    business = make_business(mode=AllocationMode.RESOURCE_ONLY)
    make_resource_type(business, capacity=0, name="Bay", instances=1)
    make_service(business)

    report = BusinessSetupService.verify_business_setup(db, business.id)

    assert 'Resource type "Bay" has no capacity' in report.sections["resources"].issues
    assert not report.sections["resources"].is_complete
    assert report.overall_status == "incomplete"


def test_inactive_service_is_not_verified(db, make_business, make_service):
    business = make_business()
    service = make_service(business)
    service.is_active = False
    db.commit()

    with pytest.raises(ServiceNotFound):
        BusinessSetupService.verify_service_setup(db, business.id, service.id)
