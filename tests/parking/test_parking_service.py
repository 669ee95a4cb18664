from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from src.parking_system.parking_system.core.enums import PaymentMethod, PaymentStatus, RecordStatus, Role
from src.parking_system.parking_system.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from src.parking_system.parking_system.parking.model import NewEntry
from src.parking_system.parking_system.parking.service import visible_to
from src.parking_system.parking_system.users.service import SessionUser


def _entry(plate="51a-12345", brand="toyota", attendants=("Alice",), images=()):
    return NewEntry(plate_number=plate, car_brand=brand, attendant_names=list(attendants), images=list(images))


def test_register_entry_normalizes_input(parking_service, records_repo, alice, fixed_now):
    record_id = parking_service.register_entry(
        alice, _entry(plate=" 51a-12345 ", attendants=("Alice", " Bob ", "Alice", "")), now=fixed_now
    )

    record = records_repo.get_by_id(record_id)
    assert record.plate_number == "51A-12345"
    assert record.car_brand == "TOYOTA"
    assert record.attendant_names == ("Alice", "Bob")
    assert record.entry_time == fixed_now
    assert record.created_by == alice.user_id
    assert record.status == RecordStatus.PARKED
    assert record.payment_status == PaymentStatus.UNPAID


@pytest.mark.parametrize(
    "entry, message",
    [
        (_entry(plate="  "), "Plate number is required"),
        (_entry(brand=""), "Car brand is required"),
        (_entry(attendants=()), "Select at least one attendant"),
    ],
)
def test_register_entry_requires_fields(parking_service, alice, entry, message):
    with pytest.raises(ValidationError, match=message):
        parking_service.register_entry(alice, entry)


def test_register_entry_rejects_plate_already_parked(parking_service, alice, fixed_now):
    parking_service.register_entry(alice, _entry(), now=fixed_now)

    with pytest.raises(ValidationError, match="already parked"):
        parking_service.register_entry(alice, _entry(plate="51A-12345"), now=fixed_now + timedelta(minutes=5))


def test_plate_can_return_after_exit(parking_service, alice, fixed_now):
    first = parking_service.register_entry(alice, _entry(), now=fixed_now)
    parking_service.confirm_exit(first, now=fixed_now + timedelta(hours=1))

    second = parking_service.register_entry(alice, _entry(), now=fixed_now + timedelta(hours=2))
    assert second != first


def test_register_entry_limits_photos(parking_service, alice, png_bytes):
    with pytest.raises(ValidationError, match="At most 2 photos"):
        parking_service.register_entry(alice, _entry(images=[png_bytes] * 3))


def test_register_entry_stores_photos_as_jpeg(parking_service, records_repo, alice, png_bytes, fixed_now):
    record_id = parking_service.register_entry(alice, _entry(images=[png_bytes, png_bytes]), now=fixed_now)

    images = parking_service.images(record_id)
    assert len(images) == 2
    assert images[0].data.startswith(b"\xff\xd8")
    assert records_repo.get_by_id(record_id).image_count == 2
    assert parking_service.get_image(record_id, 1).content_type == "image/jpeg"


def test_get_image_out_of_range(parking_service, alice, fixed_now):
    record_id = parking_service.register_entry(alice, _entry(), now=fixed_now)

    with pytest.raises(NotFoundError):
        parking_service.get_image(record_id, 0)


def test_exit_charges_started_hours(parking_service, records_repo, alice, fixed_now):
    record_id = parking_service.register_entry(alice, _entry(), now=fixed_now)

    preview = parking_service.preview_exit(record_id, now=fixed_now + timedelta(hours=2, minutes=10))
    assert preview.duration_hours == 3
    assert preview.fee == 3000
    assert records_repo.get_by_id(record_id).is_active

    quote = parking_service.confirm_exit(record_id, now=fixed_now + timedelta(hours=2, minutes=10))
    record = records_repo.get_by_id(record_id)
    assert quote.fee == 3000
    assert record.status == RecordStatus.COMPLETED
    assert record.exit_time == fixed_now + timedelta(hours=2, minutes=10)
    assert record.duration_hours == 3
    assert record.amount == 3000


def test_exit_twice_rejected(parking_service, alice, fixed_now):
    record_id = parking_service.register_entry(alice, _entry(), now=fixed_now)
    parking_service.confirm_exit(record_id, now=fixed_now + timedelta(minutes=30))

    with pytest.raises(ValidationError, match="already left"):
        parking_service.confirm_exit(record_id, now=fixed_now + timedelta(hours=1))


def test_exit_unknown_record(parking_service):
    with pytest.raises(ValidationError, match="not found"):
        parking_service.preview_exit(999)
    with pytest.raises(ValidationError):
        parking_service.confirm_exit(999)


def test_exit_by_ticket(parking_service, alice, fixed_now):
    record_id = parking_service.register_entry(alice, _entry(), now=fixed_now)

    record, quote = parking_service.exit_by_ticket(f" park-{record_id} ", now=fixed_now + timedelta(minutes=45))
    assert record.record_id == record_id
    assert record.is_completed
    assert quote.fee == 1000


def test_exit_by_bad_ticket(parking_service):
    with pytest.raises(ValidationError, match="Invalid ticket code"):
        parking_service.exit_by_ticket("TICKET-1")


def test_current_fee_running_then_stored(parking_service, records_repo, alice, fixed_now):
    record_id = parking_service.register_entry(alice, _entry(), now=fixed_now)

    running = parking_service.current_fee(records_repo.get_by_id(record_id), now=fixed_now + timedelta(hours=4))
    assert running == 4000

    parking_service.confirm_exit(record_id, now=fixed_now + timedelta(hours=1))
    done = parking_service.current_fee(records_repo.get_by_id(record_id), now=fixed_now + timedelta(hours=9))
    assert done == 1000


def test_visibility_by_role(manager, alice, bob, make_parked, fixed_now):
    record = make_parked(1, "51A-1", fixed_now, attendant_names=("Alice", "Carol"), created_by=99)
    other_driver = SessionUser(user_id=98, name="Eve", email="eve@mail.com", role=Role.DRIVER)

    assert visible_to(record, manager)
    assert visible_to(record, alice)
    assert not visible_to(record, bob)
    assert visible_to(record, other_driver)


def test_driver_sees_cars_registered_by_others(parking_service, fixed_now):
    dan = SessionUser(user_id=99, name="Dan", email="dan@mail.com", role=Role.DRIVER)
    eve = SessionUser(user_id=98, name="Eve", email="eve@mail.com", role=Role.DRIVER)
    record_id = parking_service.register_entry(dan, _entry(plate="51A-1", attendants=("Alice",)), now=fixed_now)

    assert [r.record_id for r in parking_service.list_active(eve)] == [record_id]


def test_employee_name_match_is_exact(make_parked, fixed_now):
    record = make_parked(1, "51A-1", fixed_now, attendant_names=("Alice Nguyen",))
    al = SessionUser(user_id=5, name="Al", email="al@mail.com", role=Role.EMPLOYEE)

    assert not visible_to(record, al)


def test_listings_scoped_to_employee(parking_service, records_repo, alice, bob, make_parked, make_completed):
    base = datetime(2025, 3, 1, 8, 0)
    records_repo.add(make_parked(1, "51A-11111", base, attendant_names=("Alice",)))
    records_repo.add(make_parked(2, "51A-22222", base + timedelta(hours=1), attendant_names=("Bob",)))
    records_repo.add(
        make_completed(3, "30B-33333", base - timedelta(days=40), base - timedelta(days=40, hours=-2),
                       amount=2000, hours=2, attendant_names=("Alice", "Bob"))
    )

    assert [r.record_id for r in parking_service.list_active(alice)] == [1]
    assert [r.record_id for r in parking_service.list_active(bob)] == [2]
    assert [r.record_id for r in parking_service.list_history(alice)] == [3]
    assert [r.record_id for r in parking_service.list_recent(bob)] == [2, 3]


def test_list_active_search_and_order(parking_service, records_repo, manager, make_parked):
    base = datetime(2025, 3, 1, 8, 0)
    records_repo.add(make_parked(1, "51A-11111", base))
    records_repo.add(make_parked(2, "51A-22222", base + timedelta(hours=2)))
    records_repo.add(make_parked(3, "30B-33333", base + timedelta(hours=1)))

    assert [r.record_id for r in parking_service.list_active(manager)] == [2, 3, 1]
    assert [r.record_id for r in parking_service.list_active(manager, search="51a")] == [2, 1]


def test_list_recent_limit(parking_service, records_repo, manager, make_parked):
    base = datetime(2025, 3, 1, 8, 0)
    for i in range(1, 6):
        records_repo.add(make_parked(i, f"PLATE-{i}", base + timedelta(minutes=i)))

    assert [r.record_id for r in parking_service.list_recent(manager)] == [5, 4, 3]


def test_history_filters(parking_service, records_repo, manager, make_completed, make_parked):
    records_repo.add(make_completed(1, "51A-1", datetime(2024, 12, 5, 9), datetime(2024, 12, 5, 10), amount=1, hours=1))
    records_repo.add(make_completed(2, "51A-2", datetime(2025, 1, 5, 9), datetime(2025, 1, 5, 10), amount=1, hours=1))
    records_repo.add(make_completed(3, "30B-3", datetime(2025, 2, 5, 9), datetime(2025, 2, 5, 10), amount=1, hours=1))
    records_repo.add(make_parked(4, "51A-4", datetime(2025, 2, 6, 9)))

    assert [r.record_id for r in parking_service.list_history(manager)] == [3, 2, 1]
    assert [r.record_id for r in parking_service.list_history(manager, year=2025)] == [3, 2]
    assert [r.record_id for r in parking_service.list_history(manager, year=2025, month=1)] == [2]
    assert [r.record_id for r in parking_service.list_history(manager, plate="51a")] == [2, 1]
    assert parking_service.available_years(manager) == [2025, 2024]


def test_payment_update_manager_only(parking_service, records_repo, make_completed, fixed_now):
    records_repo.add(make_completed(1, "51A-1", fixed_now, fixed_now + timedelta(hours=1), amount=1000, hours=1))

    with pytest.raises(AuthorizationError):
        parking_service.update_payment(current_role=Role.EMPLOYEE, record_id=1, status=PaymentStatus.PAID,
                                       method=PaymentMethod.CASH)


def test_paid_requires_method(parking_service, records_repo, make_completed, fixed_now):
    records_repo.add(make_completed(1, "51A-1", fixed_now, fixed_now + timedelta(hours=1), amount=1000, hours=1))

    with pytest.raises(ValidationError, match="payment method"):
        parking_service.update_payment(current_role=Role.MANAGER, record_id=1, status=PaymentStatus.PAID)


def test_mark_paid_then_unpaid(parking_service, records_repo, make_completed, fixed_now):
    records_repo.add(make_completed(1, "51A-1", fixed_now, fixed_now + timedelta(hours=1), amount=1000, hours=1))
    paid_at = fixed_now + timedelta(hours=2)

    parking_service.update_payment(current_role=Role.MANAGER, record_id=1, status=PaymentStatus.PAID,
                                   method=PaymentMethod.TRANSFER, updated_by="Manager", now=paid_at)
    record = records_repo.get_by_id(1)
    assert record.payment_status == PaymentStatus.PAID
    assert record.payment_method == PaymentMethod.TRANSFER
    assert record.paid_at == paid_at
    assert record.updated_by == "Manager"

    parking_service.update_payment(current_role=Role.MANAGER, record_id=1, status=PaymentStatus.UNPAID,
                                   method=PaymentMethod.CASH, now=paid_at)
    record = records_repo.get_by_id(1)
    assert record.payment_status == PaymentStatus.UNPAID
    assert record.payment_method is None
    assert record.paid_at is None


def test_delete_record(parking_service, records_repo, make_parked, fixed_now):
    records_repo.add(make_parked(1, "51A-1", fixed_now))

    with pytest.raises(AuthorizationError):
        parking_service.delete_record(current_role=Role.EMPLOYEE, record_id=1)

    parking_service.delete_record(current_role=Role.MANAGER, record_id=1)
    assert records_repo.get_by_id(1) is None
    with pytest.raises(NotFoundError):
        parking_service.delete_record(current_role=Role.MANAGER, record_id=1)
