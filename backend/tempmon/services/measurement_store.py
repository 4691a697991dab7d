"""
Measurement Store
=================

This is where every reading ends up, and where every dashboard query
gets its answers.

WHAT IT DOES:
------------
1. Owns the single `measurements` table (creates it on startup)
2. Inserts one row per accepted submission
3. Answers the read-side questions:
   - pages of measurements, newest first (all / one device / one room)
   - measurements in a time window, oldest first
   - average temperature / humidity in a time window
   - the latest measurement for every device name
   - the distinct devices, and the rooms they make up

HOW CONNECTIONS WORK:
--------------------
Every operation opens its own connection and closes it again, even when
something blows up halfway:

    with self._connect("save measurement") as conn:
        ...  # connection is released on every exit path

The engine uses NullPool, so nothing is shared between calls. Switch to a
pooled engine (drop `poolclass`) if ingestion rates ever need it.

Any SQLAlchemy failure comes out as a StoreError. Nothing is retried here.
"""

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, Optional

from sqlalchemy import (
    Column,
    DateTime,
    Float,
    Integer,
    MetaData,
    String,
    Table,
    and_,
    create_engine,
    func,
    insert,
    inspect,
    select,
    text,
)
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import NullPool

from tempmon.config import Settings
from tempmon.errors import StoreError
from tempmon.models import Device, Measurement, Room
from tempmon.utils.validation import (
    is_empty_window,
    resolve_time_window,
    to_naive_utc,
    utcnow,
    validate_pagination,
)

logger = logging.getLogger(__name__)


# =============================================================================
# SCHEMA
# =============================================================================

metadata = MetaData()

measurements = Table(
    "measurements",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("timestamp", DateTime, nullable=False, default=utcnow,
           server_default=func.current_timestamp(), index=True),
    Column("temperature", Float, nullable=True),
    Column("humidity", Float, nullable=True),
    Column("ip_address", String(45), nullable=True),
    Column("mac_address", String(17), nullable=True),
    Column("device_name", String(255), nullable=True),
)

# Columns that older databases may not have yet
ADDED_COLUMNS = ("ip_address", "mac_address", "device_name")

# Returned by save() when the database hands back no id
FAILED_INSERT_ID = -1


class MeasurementStore:
    """
    Read/write access to the measurements table.

    HOW TO USE:
    ----------
    store = MeasurementStore(Settings.from_env())
    store.initialize()

    new_id = store.save(temperature=21.5, mac_address="AA:BB:CC:DD:EE:FF")
    page = store.get_all(limit=20, offset=0)
    rooms = store.list_rooms()
    """

    def __init__(self, settings: Settings, engine: Optional[Engine] = None):
        """
        Args:
            settings: Application settings (database URL, default page size
                and default time window)
            engine: Pre-built engine, mostly for tests. Built from
                settings.database_url when omitted.
        """
        self.settings = settings
        self.engine = engine or create_engine(settings.database_url, poolclass=NullPool)

    # =========================================================================
    # CONNECTION HANDLING
    # =========================================================================

    @contextmanager
    def _connect(self, operation: str) -> Iterator[Connection]:
        """Open a connection in a transaction for one operation, always release it."""
        try:
            with self.engine.begin() as conn:
                yield conn
        except SQLAlchemyError as e:
            cause = getattr(e, "orig", None) or e
            raise StoreError(f"Failed to {operation}: {cause}") from e

    def _page(self, limit: Optional[int], offset: int) -> tuple[int, int]:
        if limit is None:
            limit = self.settings.default_page_size
        validate_pagination(limit, offset)
        return limit, offset

    def _window(
        self, start: Optional[datetime], end: Optional[datetime]
    ) -> tuple[datetime, datetime]:
        return resolve_time_window(start, end, self.settings.default_window_hours)

    # =========================================================================
    # SCHEMA BOOTSTRAP
    # =========================================================================

    def initialize(self) -> None:
        """
        Create the measurements table and add any missing columns.

        Safe to run on every startup. Older tables that predate the
        ip_address / mac_address / device_name columns get them added.
        """
        with self._connect("initialize measurements table") as conn:
            metadata.create_all(conn)

            existing = {c["name"] for c in inspect(conn).get_columns(measurements.name)}
            for name in ADDED_COLUMNS:
                if name in existing:
                    logger.debug(f"Column {name} already exists")
                    continue
                column_type = measurements.c[name].type.compile(dialect=conn.dialect)
                conn.execute(text(f"ALTER TABLE {measurements.name} ADD COLUMN {name} {column_type}"))
                logger.info(f"Added column {name} ({column_type}) to {measurements.name}")

        logger.info("Measurements table ready")

    def ping(self) -> None:
        """Run a trivial query. Raises StoreError if the database is unreachable."""
        with self._connect("reach database") as conn:
            conn.execute(select(1))

    # =========================================================================
    # WRITE
    # =========================================================================

    def save(
        self,
        temperature: Optional[float] = None,
        humidity: Optional[float] = None,
        ip_address: Optional[str] = None,
        mac_address: Optional[str] = None,
        device_name: Optional[str] = None,
        timestamp: Optional[datetime] = None,
    ) -> int:
        """
        Insert one measurement.

        Args:
            temperature: Temperature value, or None
            humidity: Humidity value, or None
            ip_address: Address the reading came from
            mac_address: Device MAC address
            device_name: Device name
            timestamp: When the reading happened (default: now, UTC)

        Returns:
            The new row's id, or FAILED_INSERT_ID (-1) if the database
            did not report one
        """
        values = {
            "temperature": temperature,
            "humidity": humidity,
            "ip_address": ip_address,
            "mac_address": mac_address,
            "device_name": device_name,
            "timestamp": to_naive_utc(timestamp) if timestamp else utcnow(),
        }
        with self._connect("save measurement") as conn:
            result = conn.execute(insert(measurements).values(**values))
            primary_key = result.inserted_primary_key

        if not primary_key or primary_key[0] is None:
            logger.warning("Insert into measurements returned no id")
            return FAILED_INSERT_ID
        return int(primary_key[0])

    # =========================================================================
    # PAGINATED READS (newest first)
    # =========================================================================

    def _fetch_page(self, operation, where, limit, offset):
        limit, offset = self._page(limit, offset)
        stmt = select(measurements)
        if where is not None:
            stmt = stmt.where(where)
        # id breaks timestamp ties so pages never overlap
        stmt = (
            stmt.order_by(measurements.c.timestamp.desc(), measurements.c.id.desc())
            .limit(limit)
            .offset(offset)
        )
        with self._connect(operation) as conn:
            rows = conn.execute(stmt).all()
        return [_to_measurement(row) for row in rows]

    def get_all(self, limit: Optional[int] = None, offset: int = 0) -> list[Measurement]:
        """All measurements, newest first, `limit` rows after skipping `offset`."""
        return self._fetch_page("retrieve measurements", None, limit, offset)

    def get_count(self) -> int:
        """Total number of stored measurements."""
        with self._connect("count measurements") as conn:
            return int(conn.execute(select(func.count()).select_from(measurements)).scalar_one())

    def get_by_device(
        self, mac_address: str, limit: Optional[int] = None, offset: int = 0
    ) -> list[Measurement]:
        """Measurements from one MAC address, newest first."""
        return self._fetch_page(
            "retrieve measurements for device",
            measurements.c.mac_address == mac_address,
            limit,
            offset,
        )

    def get_by_room(
        self,
        room: str,
        limit: Optional[int] = None,
        offset: int = 0,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[Measurement]:
        """
        Measurements for one room (device name), newest first.

        If either `start` or `end` is given the result is limited to that
        window (inclusive); the missing bound falls back to the default
        window. With neither, the whole history of the room is paged.
        """
        condition = measurements.c.device_name == room
        if start is not None or end is not None:
            start, end = self._window(start, end)
            if is_empty_window(start, end):
                return []
            condition = and_(condition, measurements.c.timestamp.between(start, end))
        return self._fetch_page("retrieve measurements for room", condition, limit, offset)

    # =========================================================================
    # TIME WINDOW READS
    # =========================================================================

    def get_in_time_range(
        self, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> list[Measurement]:
        """
        Measurements with start <= timestamp <= end, OLDEST first.

        Defaults to the last 24 hours (settings.default_window_hours).
        """
        start, end = self._window(start, end)
        if is_empty_window(start, end):
            return []
        stmt = (
            select(measurements)
            .where(measurements.c.timestamp.between(start, end))
            .order_by(measurements.c.timestamp.asc(), measurements.c.id.asc())
        )
        with self._connect("retrieve measurements in time range") as conn:
            rows = conn.execute(stmt).all()
        return [_to_measurement(row) for row in rows]

    def _average(self, column, operation, start, end) -> Optional[float]:
        start, end = self._window(start, end)
        if is_empty_window(start, end):
            return None
        stmt = select(func.avg(column)).where(measurements.c.timestamp.between(start, end))
        with self._connect(operation) as conn:
            value = conn.execute(stmt).scalar()
        return None if value is None else float(value)

    def get_average_temperature(
        self, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> Optional[float]:
        """Mean temperature in the window, or None if no row has one."""
        return self._average(
            measurements.c.temperature, "compute average temperature", start, end
        )

    def get_average_humidity(
        self, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> Optional[float]:
        """Mean humidity in the window, or None if no row has one."""
        return self._average(
            measurements.c.humidity, "compute average humidity", start, end
        )

    # =========================================================================
    # LATEST PER DEVICE
    # =========================================================================

    def get_latest_per_device(self) -> list[Measurement]:
        """
        The most recent measurement for every device name.

        1. max(timestamp) per device_name (rows without a name are skipped)
        2. join back to the rows having that name and timestamp
        3. if several rows share the max timestamp, keep the highest id

        Returns one row per device name, ordered by device name.
        """
        latest = (
            select(
                measurements.c.device_name,
                func.max(measurements.c.timestamp).label("max_timestamp"),
            )
            .where(measurements.c.device_name.is_not(None))
            .group_by(measurements.c.device_name)
            .subquery("latest_timestamps")
        )
        winners = (
            select(func.max(measurements.c.id))
            .select_from(
                measurements.join(
                    latest,
                    and_(
                        measurements.c.device_name == latest.c.device_name,
                        measurements.c.timestamp == latest.c.max_timestamp,
                    ),
                )
            )
            .group_by(measurements.c.device_name)
        )
        stmt = (
            select(measurements)
            .where(measurements.c.id.in_(winners))
            .order_by(measurements.c.device_name)
        )
        with self._connect("retrieve latest measurements by device") as conn:
            rows = conn.execute(stmt).all()
        return [_to_measurement(row) for row in rows]

    # =========================================================================
    # DEVICES AND ROOMS (derived, never stored)
    # =========================================================================

    def list_devices(self, limit: Optional[int] = None, offset: int = 0) -> list[Device]:
        """Distinct (MAC address, device name) pairs, ordered by MAC address."""
        limit, offset = self._page(limit, offset)
        stmt = (
            select(measurements.c.mac_address, measurements.c.device_name)
            .group_by(measurements.c.mac_address, measurements.c.device_name)
            .order_by(measurements.c.mac_address, measurements.c.device_name)
            .limit(limit)
            .offset(offset)
        )
        with self._connect("retrieve devices") as conn:
            rows = conn.execute(stmt).all()
        return [_to_device(row) for row in rows]

    def list_rooms(self, limit: Optional[int] = None, offset: int = 0) -> list[Room]:
        """
        Rooms built from the distinct device names.

        Each room holds every device that reported under its name, so a
        room is never empty. Rows without a device name belong to no room.
        """
        limit, offset = self._page(limit, offset)
        names_stmt = (
            select(measurements.c.device_name)
            .where(measurements.c.device_name.is_not(None))
            .distinct()
            .order_by(measurements.c.device_name)
            .limit(limit)
            .offset(offset)
        )
        with self._connect("retrieve rooms") as conn:
            names = list(conn.execute(names_stmt).scalars())
            if not names:
                return []
            device_rows = conn.execute(
                select(measurements.c.mac_address, measurements.c.device_name)
                .where(measurements.c.device_name.in_(names))
                .group_by(measurements.c.mac_address, measurements.c.device_name)
                .order_by(measurements.c.mac_address)
            ).all()

        devices_by_name: dict[str, list[Device]] = {name: [] for name in names}
        for row in device_rows:
            devices_by_name[row.device_name].append(_to_device(row))
        return [Room(name=name, devices=devices_by_name[name]) for name in names]


# =============================================================================
# ROW MAPPING
# =============================================================================

def _to_measurement(row) -> Measurement:
    return Measurement.model_validate(dict(row._mapping))


def _to_device(row) -> Device:
    return Device(mac_address=row.mac_address or "", name=row.device_name or "")
