# tests/test_logic.py
import pytest
from datetime import date
from rental_manager.errors import Conflict, NotFound, UnexpectedFailure, ValidationError
from rental_manager.models import Room, Tenant, Payment, UtilityConsumption
from rental_manager.services.readings import (
    consumption, display_total_cost, format_currency, format_reading, previous_period, total_cost,
    ELECTRIC_UNIT, WATER_UNIT,
)
from rental_manager.services import utility_consumption as utility_service
from rental_manager.services import tenants as tenant_service
from rental_manager.services.fields import to_int, to_number
from rental_manager.services.persistence import transaction
from rental_manager.services.receipts import generate_receipt, payment_statistics
from rental_manager.services.consumption_entry import (
    ConsumptionEntry, EntryState, ServiceGateway, GENERIC_SAVE_ERROR,
)

# The 'db_session' fixture keeps an application context pushed for every test.

# --- Helper function for setting up test data ---
def setup_room(db_session, name="Room A", rent=1000, status="AVAILABLE"):
    room = Room(name=name, address="123 Main St", rent=rent, bedrooms=2, bathrooms=1, status=status)
    db_session.add(room)
    db_session.commit()
    return room

def add_reading(db_session, room, month, year, electric, water, **extra):
    rec = UtilityConsumption(room=room, month=month, year=year,
                             electric_number=electric, water_number=water, **extra)
    db_session.add(rec)
    db_session.commit()
    return rec

def reading_payload(room, month=12, year=2025, electric=150, water=60, **extra):
    data = {"roomId": room.id, "month": month, "year": year,
            "electricNumber": electric, "waterNumber": water}
    data.update(extra)
    return data


# --- Testing the pure reading helpers ---
@pytest.mark.parametrize("current, previous, expected", [
    (150, 100, 50.0),
    (60, 50, 10.0),
    (100.75, 100.5, 0.25),
    (150, 0, None),
    (150, None, None),
])
def test_consumption(current, previous, expected):
    assert consumption(current, previous) == expected

def test_previous_period_wraps_january_to_december():
    assert previous_period(12, 2025) == (11, 2025)
    assert previous_period(1, 2025) == (12, 2024)

def test_total_cost_and_display_rule():
    assert total_cost(25, 15) == 40.0
    assert display_total_cost(25, 15) == 40.0
    assert display_total_cost(25, None) == 25.0
    assert display_total_cost(0, 0) is None
    assert display_total_cost(None, None) is None

def test_two_decimal_formatting():
    assert format_reading(50, ELECTRIC_UNIT) == "50.00 kWh"
    assert format_reading(10, WATER_UNIT) == "10.00 m³"
    assert format_currency(40) == "$40.00"
    assert format_reading(None, ELECTRIC_UNIT) is None


# --- Testing the utility consumption service ---
def test_create_resolves_previous_period_readings(db_session):
    room = setup_room(db_session)
    add_reading(db_session, room, 11, 2025, 100, 50)

    rec = utility_service.create_consumption(reading_payload(room))

    assert rec.previous_electric_number == 100
    assert rec.previous_water_number == 50
    assert rec.electric_consumption == 50.0
    assert rec.water_consumption == 10.0

def test_create_in_january_looks_at_december_of_previous_year(db_session):
    room = setup_room(db_session)
    add_reading(db_session, room, 12, 2024, 900, 300)
    # same month one year earlier is not the previous period
    add_reading(db_session, room, 1, 2024, 10, 10)

    rec = utility_service.create_consumption(reading_payload(room, month=1, year=2025, electric=950, water=320))
    assert rec.previous_electric_number == 900
    assert rec.previous_water_number == 300

def test_create_without_previous_record_leaves_baseline_empty(db_session):
    room = setup_room(db_session)
    rec = utility_service.create_consumption(reading_payload(room))
    assert rec.previous_electric_number is None
    assert rec.previous_water_number is None
    assert rec.electric_consumption is None
    assert rec.to_dict()['waterConsumption'] is None

def test_caller_supplied_previous_values_win(db_session):
    room = setup_room(db_session)
    add_reading(db_session, room, 11, 2025, 100, 50)
    rec = utility_service.create_consumption(
        reading_payload(room, previousElectricNumber=120, previousWaterNumber=None)
    )
    assert rec.previous_electric_number == 120
    # only the missing one is filled in
    assert rec.previous_water_number == 50

def test_previous_lookup_ignores_other_rooms(db_session):
    room = setup_room(db_session)
    other = setup_room(db_session, name="Room B")
    add_reading(db_session, other, 11, 2025, 100, 50)
    rec = utility_service.create_consumption(reading_payload(room))
    assert rec.previous_electric_number is None

def test_duplicate_period_is_a_conflict_and_keeps_original(db_session):
    room = setup_room(db_session)
    first = utility_service.create_consumption(reading_payload(room, electric=150))
    with pytest.raises(Conflict):
        utility_service.create_consumption(reading_payload(room, electric=999))
    stored = UtilityConsumption.query.filter_by(room_id=room.id).all()
    assert len(stored) == 1
    assert stored[0].id == first.id
    assert stored[0].electric_number == 150

@pytest.mark.parametrize("overrides", [
    {"month": 0},
    {"month": 13},
    {"electricNumber": None},
    {"waterNumber": None},
    {"electricNumber": "abc"},
    {"waterNumber": -5},
    {"electricNumber": "NaN"},
    {"waterNumber": "inf"},
    {"electricCost": float("nan")},
    {"previousWaterNumber": float("-inf")},
])
def test_create_validation_errors(db_session, overrides):
    room = setup_room(db_session)
    payload = reading_payload(room)
    payload.update(overrides)
    with pytest.raises(ValidationError):
        utility_service.create_consumption(payload)

def test_create_with_omitted_readings_fails(db_session):
    room = setup_room(db_session)
    payload = reading_payload(room)
    del payload['electricNumber']
    with pytest.raises(ValidationError) as exc:
        utility_service.create_consumption(payload)
    assert 'electricNumber' in exc.value.message

def test_create_for_unknown_room_is_not_found(db_session):
    with pytest.raises(NotFound):
        utility_service.create_consumption({"roomId": 999, "month": 5, "year": 2025,
                                            "electricNumber": 1, "waterNumber": 1})

def test_list_orders_by_year_then_month_desc(db_session):
    room = setup_room(db_session)
    add_reading(db_session, room, 11, 2024, 1, 1)
    add_reading(db_session, room, 2, 2025, 3, 3)
    add_reading(db_session, room, 12, 2024, 2, 2)
    periods = [(r.month, r.year) for r in utility_service.list_consumptions(room.id)]
    assert periods == [(2, 2025), (12, 2024), (11, 2024)]
    assert utility_service.list_consumptions(room.id + 100) == []

def test_update_only_touches_mutable_fields(db_session):
    room = setup_room(db_session)
    rec = add_reading(db_session, room, 5, 2025, 100, 40)
    updated = utility_service.update_consumption(rec.id, {
        "electricNumber": 180, "electricCost": 25, "waterCost": 15, "notes": "checked",
        "month": 7, "year": 2030, "roomId": 42,
    })
    assert updated.electric_number == 180
    assert updated.month == 5 and updated.year == 2025 and updated.room_id == room.id
    assert updated.to_dict()['totalCost'] == 40.0

def test_update_and_delete_missing_record(db_session):
    with pytest.raises(NotFound):
        utility_service.update_consumption(12345, {"notes": "x"})
    with pytest.raises(NotFound):
        utility_service.delete_consumption(12345)

def test_not_null_failure_is_not_reported_as_duplicate(db_session):
    room = setup_room(db_session)
    with pytest.raises(UnexpectedFailure):
        with transaction('create utility consumption record', conflict='duplicate'):
            db_session.add(UtilityConsumption(room=room, month=1, year=2025,
                                              electric_number=None, water_number=5))
    assert UtilityConsumption.query.count() == 0

def test_unique_failure_is_reported_as_conflict(db_session):
    room = setup_room(db_session)
    add_reading(db_session, room, 1, 2025, 10, 5)
    with pytest.raises(Conflict) as exc:
        with transaction('create utility consumption record', conflict='duplicate'):
            db_session.add(UtilityConsumption(room=room, month=1, year=2025,
                                              electric_number=20, water_number=6))
    assert exc.value.message == 'duplicate'


# --- Testing payload coercion ---
@pytest.mark.parametrize("value, expected", [
    (7, 7),
    (3.0, 3),
    (" 42 ", 42),
    (2**53 + 1, 2**53 + 1),
    ("9007199254740993", 9007199254740993),
])
def test_to_int_keeps_exact_values(value, expected):
    assert to_int(value, 'id') == expected

@pytest.mark.parametrize("value", [3.5, "3.5", "abc", True, [1]])
def test_to_int_rejects_non_integers(value):
    with pytest.raises(ValidationError):
        to_int(value, 'id')

@pytest.mark.parametrize("value", ["NaN", "inf", "-Infinity", float("nan"), float("inf")])
def test_to_number_rejects_non_finite(value):
    with pytest.raises(ValidationError) as exc:
        to_number(value, 'amount')
    assert 'finite' in exc.value.message


# --- Testing the tenant lifecycle ---
def tenant_payload(room, first="Alice", **extra):
    data = {"firstName": first, "lastName": "Smith", "roomId": room.id, "moveInDate": "2025-01-01"}
    data.update(extra)
    return data

def test_creating_tenant_occupies_room(db_session):
    room = setup_room(db_session, status="RESERVED")
    tenant = tenant_service.create_tenant(tenant_payload(room))
    assert tenant.status == "ACTIVE"
    assert db_session.get(Room, room.id).status == "OCCUPIED"
    # rent snapshot defaults to the room's rent
    assert tenant.rent == 1000

def test_deleting_last_active_tenant_frees_room(db_session):
    room = setup_room(db_session)
    tenant = tenant_service.create_tenant(tenant_payload(room))
    tenant_service.delete_tenant(tenant.id)
    assert db_session.get(Room, room.id).status == "AVAILABLE"
    assert db_session.get(Tenant, tenant.id) is None

def test_deleting_one_of_two_active_tenants_keeps_room_occupied(db_session):
    room = setup_room(db_session)
    t1 = tenant_service.create_tenant(tenant_payload(room, first="Alice"))
    tenant_service.create_tenant(tenant_payload(room, first="Bob"))
    tenant_service.delete_tenant(t1.id)
    assert db_session.get(Room, room.id).status == "OCCUPIED"

def test_inactive_tenants_do_not_keep_room_occupied(db_session):
    room = setup_room(db_session)
    active = tenant_service.create_tenant(tenant_payload(room, first="Alice"))
    tenant_service.create_tenant(tenant_payload(room, first="Old", status="MOVED_OUT"))
    tenant_service.delete_tenant(active.id)
    assert db_session.get(Room, room.id).status == "AVAILABLE"

def test_deactivating_tenant_reevaluates_room(db_session):
    room = setup_room(db_session)
    tenant = tenant_service.create_tenant(tenant_payload(room))
    tenant_service.update_tenant(tenant.id, {"status": "MOVED_OUT", "moveOutDate": "2025-06-30"})
    assert db_session.get(Room, room.id).status == "AVAILABLE"
    tenant_service.update_tenant(tenant.id, {"status": "ACTIVE"})
    assert db_session.get(Room, room.id).status == "OCCUPIED"

def test_deleting_tenant_removes_payments(db_session):
    room = setup_room(db_session)
    tenant = tenant_service.create_tenant(tenant_payload(room))
    db_session.add(Payment(tenant_id=tenant.id, amount=100, due_date=date(2025, 2, 1)))
    db_session.commit()
    tenant_service.delete_tenant(tenant.id)
    assert Payment.query.count() == 0

def test_tenant_move_out_before_move_in_rejected(db_session):
    room = setup_room(db_session)
    with pytest.raises(ValidationError):
        tenant_service.create_tenant(tenant_payload(room, moveOutDate="2024-12-01"))


# --- Testing the receipt aggregator ---
def test_receipt_statistics(db_session):
    room = setup_room(db_session)
    tenant = tenant_service.create_tenant(tenant_payload(room))
    db_session.add_all([
        Payment(tenant_id=tenant.id, amount=25, due_date=date(2025, 1, 1), date=date(2025, 1, 2), status="PAID"),
        Payment(tenant_id=tenant.id, amount=15, due_date=date(2025, 2, 1), date=date(2025, 2, 3), status="PENDING"),
    ])
    db_session.commit()

    receipt = generate_receipt(room.id)
    assert receipt['statistics'] == {'totalPaid': 25, 'pendingCount': 1, 'overdueCount': 0}
    assert receipt['tenant']['id'] == tenant.id
    assert [p['date'] for p in receipt['payments']] == ["2025-02-03", "2025-01-02"]

def test_receipt_without_tenant(db_session):
    room = setup_room(db_session)
    receipt = generate_receipt(room.id)
    assert receipt['tenant'] is None
    assert receipt['payments'] == []
    assert receipt['statistics']['totalPaid'] == 0

def test_receipt_for_missing_room(db_session):
    with pytest.raises(NotFound):
        generate_receipt(4242)

def test_payment_statistics_counts_overdue():
    payments = [Payment(amount=10, status="OVERDUE"), Payment(amount=5, status="CANCELLED"),
                Payment(amount=7.5, status="PAID"), Payment(amount=2.5, status="PAID")]
    assert payment_statistics(payments) == {'totalPaid': 10.0, 'pendingCount': 0, 'overdueCount': 1}


# --- Testing the entry workflow ---
class FakeGateway:
    def __init__(self, previous=None, fail_with=None):
        self.previous = previous or {}
        self.fail_with = fail_with
        self.fetches = []
        self.sent = []
        self.entry = None
        self.submit_allowed_during_fetch = None

    def fetch_previous(self, room_id, month, year):
        self.fetches.append((month, year))
        if self.entry is not None:
            self.submit_allowed_during_fetch = self.entry.can_submit
        return self.previous.get((month, year))

    def create(self, payload):
        self.sent.append(('create', payload))
        if self.fail_with:
            raise self.fail_with
        return dict(payload, id=1)

    def update(self, record_id, payload):
        self.sent.append(('update', record_id, payload))
        if self.fail_with:
            raise self.fail_with
        return dict(payload, id=record_id)

def test_entry_new_record_prefills_previous_readings():
    gw = FakeGateway(previous={(12, 2025): {'previousElectricNumber': 100, 'previousWaterNumber': 50}})
    entry = ConsumptionEntry(room_id=7, gateway=gw, today=date(2025, 12, 5))
    gw.entry = entry
    entry.start_new()
    assert gw.fetches == [(12, 2025)]
    assert gw.submit_allowed_during_fetch is False
    assert entry.state == EntryState.IDLE and entry.can_submit
    assert entry.previous_electric_number == 100
    assert entry.previous_water_number == 50

def test_entry_period_change_refetches_only_for_new_records():
    gw = FakeGateway()
    entry = ConsumptionEntry(room_id=7, gateway=gw, today=date(2025, 12, 5))
    entry.start_new()
    entry.change_period(month=3)
    assert gw.fetches == [(12, 2025), (3, 2025)]
    assert entry.previous_electric_number == 0

    entry.start_edit({'id': 9, 'month': 4, 'year': 2025, 'electricNumber': 150, 'waterNumber': 60,
                      'previousElectricNumber': 100, 'previousWaterNumber': 50})
    entry.change_period(month=5)
    assert len(gw.fetches) == 2
    assert entry.previous_electric_number == 100
    assert entry.electric_consumption == 50.0
    assert entry.water_consumption == 10.0

def test_entry_submit_sends_empty_optionals_as_none():
    gw = FakeGateway()
    entry = ConsumptionEntry(room_id=7, gateway=gw, today=date(2025, 12, 5))
    entry.start_new()
    entry.electric_number = 150
    entry.water_number = 60
    assert entry.submit() is True
    assert entry.state == EntryState.SAVED
    kind, payload = gw.sent[0]
    assert kind == 'create'
    assert payload['previousElectricNumber'] is None
    assert payload['electricCost'] is None
    assert payload['notes'] is None

def test_entry_surfaces_server_error_message():
    gw = FakeGateway(fail_with=Conflict('A record for this room, month, and year already exists'))
    entry = ConsumptionEntry(room_id=7, gateway=gw, today=date(2025, 12, 5))
    entry.start_new()
    assert entry.submit() is False
    assert entry.state == EntryState.FAILED
    assert entry.error == 'A record for this room, month, and year already exists'

def test_entry_transport_failure_uses_generic_message():
    gw = FakeGateway(fail_with=ConnectionError('connection reset'))
    entry = ConsumptionEntry(room_id=7, gateway=gw, today=date(2025, 12, 5))
    entry.start_edit({'id': 3, 'month': 1, 'year': 2025, 'electricNumber': 1, 'waterNumber': 1})
    assert entry.submit() is False
    assert entry.error == GENERIC_SAVE_ERROR
    assert gw.sent[0][0] == 'update'

def test_entry_against_service_layer(db_session):
    room = setup_room(db_session)
    add_reading(db_session, room, 11, 2025, 100, 50)
    entry = ConsumptionEntry(room_id=room.id, gateway=ServiceGateway(), today=date(2025, 12, 1))
    entry.start_new()
    assert entry.previous_electric_number == 100
    entry.electric_number = 150
    entry.water_number = 60
    assert entry.submit() is True
    assert entry.saved['electricConsumption'] == 50.0

    # a second save for the same period comes back as the server's conflict message
    again = ConsumptionEntry(room_id=room.id, gateway=ServiceGateway(), today=date(2025, 12, 1))
    again.start_new()
    again.electric_number = 160
    again.water_number = 61
    assert again.submit() is False
    assert 'already exists' in again.error
