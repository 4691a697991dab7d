from datetime import timedelta

import pytest
from sqlalchemy import create_engine, inspect, text

from tempmon.config import Settings
from tempmon.errors import StoreError, ValidationError
from tempmon.services import MeasurementStore
from tempmon.utils import utcnow

from conftest import BASE_TIME


def minutes(n):
    return BASE_TIME + timedelta(minutes=n)


# =============================================================================
# SCHEMA
# =============================================================================

def test_initialize_is_idempotent(store):
    store.initialize()
    store.initialize()

    assert store.get_count() == 0


def test_initialize_adds_missing_columns_to_old_table(tmp_path):
    url = f"sqlite:///{tmp_path / 'old.db'}"
    engine = create_engine(url)
    with engine.begin() as conn:
        conn.execute(text(
            "CREATE TABLE measurements ("
            " id INTEGER PRIMARY KEY AUTOINCREMENT,"
            " timestamp DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP,"
            " temperature FLOAT,"
            " humidity FLOAT)"
        ))
        conn.execute(text("INSERT INTO measurements (temperature, humidity) VALUES (22.5, 45.0)"))
    engine.dispose()

    store = MeasurementStore(Settings(database_url=url))
    store.initialize()

    columns = {c["name"] for c in inspect(store.engine).get_columns("measurements")}
    assert {"ip_address", "mac_address", "device_name"} <= columns
    assert store.get_count() == 1
    assert store.get_all()[0].mac_address is None


def test_unreachable_database_raises_store_error(tmp_path):
    store = MeasurementStore(Settings(database_url=f"sqlite:///{tmp_path / 'missing' / 'x.db'}"))

    with pytest.raises(StoreError):
        store.get_count()


# =============================================================================
# SAVE / PAGINATION
# =============================================================================

def test_save_then_newest_first(store):
    store.save(temperature=20.0, timestamp=minutes(0))
    new_id = store.save(temperature=22.0, humidity=None, mac_address="AA", device_name="A")

    latest = store.get_all(limit=1, offset=0)

    assert len(latest) == 1
    assert latest[0].id == new_id
    assert latest[0].temperature == 22.0
    assert latest[0].humidity is None


def test_ids_increase(store):
    first = store.save(temperature=1.0)
    second = store.save(temperature=2.0)

    assert second > first > 0


def test_save_defaults_timestamp_to_now(store):
    before = utcnow()
    store.save(humidity=50.0)
    after = utcnow()

    assert before <= store.get_all()[0].timestamp <= after


def test_pages_concatenate_to_full_list(store):
    for i in range(7):
        store.save(temperature=float(i), timestamp=minutes(i))
    # two rows sharing a timestamp must still land on exactly one page each
    store.save(temperature=100.0, timestamp=minutes(3))

    everything = store.get_all(limit=1000)
    pages = store.get_all(3, 0) + store.get_all(3, 3) + store.get_all(3, 6)

    assert [m.id for m in pages] == [m.id for m in everything]
    assert len({m.id for m in pages}) == 8
    assert [m.timestamp for m in everything] == sorted((m.timestamp for m in everything), reverse=True)


def test_default_page_size_comes_from_settings(tmp_path):
    store = MeasurementStore(Settings(database_url=f"sqlite:///{tmp_path / 'p.db'}", default_page_size=2))
    store.initialize()
    for i in range(3):
        store.save(temperature=float(i))

    assert len(store.get_all()) == 2
    assert store.get_count() == 3


def test_negative_offset_is_rejected(store):
    with pytest.raises(ValidationError):
        store.get_all(limit=10, offset=-1)


def test_get_by_device(store):
    store.save(temperature=1.0, mac_address="AA:AA", timestamp=minutes(0))
    store.save(temperature=2.0, mac_address="BB:BB", timestamp=minutes(1))
    store.save(temperature=3.0, mac_address="AA:AA", timestamp=minutes(2))

    result = store.get_by_device("AA:AA")

    assert [m.temperature for m in result] == [3.0, 1.0]


def test_get_by_room_with_and_without_window(store):
    store.save(temperature=1.0, device_name="Kitchen", timestamp=minutes(0))
    store.save(temperature=2.0, device_name="Kitchen", timestamp=minutes(10))
    store.save(temperature=3.0, device_name="Office", timestamp=minutes(5))

    assert [m.temperature for m in store.get_by_room("Kitchen")] == [2.0, 1.0]
    windowed = store.get_by_room("Kitchen", start=minutes(5), end=minutes(10))
    assert [m.temperature for m in windowed] == [2.0]


# =============================================================================
# TIME WINDOWS
# =============================================================================

def test_time_range_is_inclusive_and_ascending(store):
    store.save(temperature=1.0, timestamp=minutes(-1))
    store.save(temperature=2.0, timestamp=minutes(10))
    store.save(temperature=3.0, timestamp=minutes(0))
    store.save(temperature=4.0, timestamp=minutes(11))

    result = store.get_in_time_range(minutes(0), minutes(10))

    assert [m.temperature for m in result] == [3.0, 2.0]


def test_time_range_defaults_to_last_day(store):
    store.save(temperature=1.0, timestamp=utcnow() - timedelta(days=2))
    store.save(temperature=2.0)

    assert [m.temperature for m in store.get_in_time_range()] == [2.0]


def test_time_range_rejects_reversed_window(store):
    with pytest.raises(ValidationError):
        store.get_in_time_range(minutes(10), minutes(0))


def test_average_temperature(store):
    store.save(temperature=20.0, timestamp=minutes(0))
    store.save(temperature=22.0, timestamp=minutes(5))
    store.save(humidity=90.0, timestamp=minutes(6))
    store.save(temperature=99.0, timestamp=minutes(60))

    assert store.get_average_temperature(minutes(0), minutes(10)) == pytest.approx(21.0)


def test_average_of_empty_window_is_none(store):
    store.save(temperature=20.0, humidity=40.0, timestamp=minutes(0))

    assert store.get_average_temperature(minutes(30), minutes(40)) is None
    assert store.get_average_humidity(minutes(30), minutes(40)) is None


def test_average_humidity_ignores_rows_without_humidity(store):
    store.save(humidity=40.0, timestamp=minutes(0))
    store.save(temperature=20.0, timestamp=minutes(1))
    store.save(humidity=50.0, timestamp=minutes(2))

    assert store.get_average_humidity(minutes(0), minutes(2)) == pytest.approx(45.0)


# =============================================================================
# LATEST / DEVICES / ROOMS
# =============================================================================

def test_latest_per_device(store):
    store.save(temperature=1.0, device_name="A", timestamp=minutes(0))
    store.save(temperature=2.0, device_name="A", timestamp=minutes(5))
    store.save(temperature=3.0, device_name="B", timestamp=minutes(3))
    store.save(temperature=4.0, device_name=None, timestamp=minutes(9))

    latest = store.get_latest_per_device()

    assert [(m.device_name, m.temperature) for m in latest] == [("A", 2.0), ("B", 3.0)]


def test_latest_per_device_breaks_ties_by_highest_id(store):
    store.save(temperature=1.0, device_name="A", timestamp=minutes(5))
    second = store.save(temperature=2.0, device_name="A", timestamp=minutes(5))

    latest = store.get_latest_per_device()

    assert len(latest) == 1
    assert latest[0].id == second


def test_list_devices_distinct_and_ordered_by_mac(store):
    store.save(temperature=1.0, mac_address="BB", device_name="Office")
    store.save(temperature=2.0, mac_address="AA", device_name="Kitchen")
    store.save(temperature=3.0, mac_address="BB", device_name="Office")

    devices = store.list_devices()

    assert [(d.mac_address, d.name) for d in devices] == [("AA", "Kitchen"), ("BB", "Office")]


def test_list_rooms_groups_devices_by_name(store):
    store.save(temperature=1.0, mac_address="AA", device_name="A")
    store.save(temperature=2.0, mac_address="CC", device_name="A")
    store.save(temperature=3.0, mac_address="BB", device_name="B")
    store.save(temperature=4.0, mac_address="DD", device_name=None)

    rooms = store.list_rooms()

    assert [r.name for r in rooms] == ["A", "B"]
    assert [d.mac_address for d in rooms[0].devices] == ["AA", "CC"]
    assert [d.mac_address for d in rooms[1].devices] == ["BB"]
    assert all(room.devices for room in rooms)


def test_list_rooms_empty_store(store):
    assert store.list_rooms() == []


def test_one_sided_windows_that_invert_are_empty(store):
    old = utcnow() - timedelta(days=3)
    store.save(temperature=20.0, device_name="Kitchen", timestamp=old)
    future = utcnow() + timedelta(hours=1)

    assert store.get_in_time_range(end=old + timedelta(hours=1)) == []
    assert store.get_average_temperature(end=old + timedelta(hours=1)) is None
    assert store.get_by_room("Kitchen", end=old + timedelta(hours=1)) == []
    assert store.get_in_time_range(start=future) == []
    assert store.get_average_humidity(start=future) is None


def test_zero_limit_is_rejected(store):
    with pytest.raises(ValidationError):
        store.get_all(limit=0)
