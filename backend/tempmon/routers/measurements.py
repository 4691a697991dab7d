"""
Measurements API Router
=======================

Read-only endpoints the dashboard uses to show readings.

ALL ENDPOINTS:
-------------
GET /measurements                 - One page of readings + total count
GET /measurements/device          - Readings from one device (deviceMac)
GET /measurements/timerange       - Readings in a window, OLDEST first
GET /measurements/avgTemperature  - Mean temperature in a window (or null)
GET /measurements/avgHumidity     - Mean humidity in a window (or null)
GET /measurements/latest          - Newest reading for every device name

Pages are newest first. `limit` defaults to 100, `offset` to 0.
Windows are ISO-8601 `startTime`/`endTime`, inclusive, and default to
the last 24 hours.

Every endpoint is a plain `def`, so FastAPI runs it on its threadpool -
one worker per request, each with its own database connection.
"""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request

from tempmon.errors import ValidationError
from tempmon.models import Measurement, MeasurementsWithCount
from tempmon.routers.errors import client_errors
from tempmon.services import MeasurementStore
from tempmon.utils.validation import parse_iso_timestamp

router = APIRouter(prefix="/measurements", tags=["measurements"])


# =============================================================================
# DEPENDENCY INJECTION
# =============================================================================

def get_store(request: Request) -> MeasurementStore:
    """The MeasurementStore built at startup and attached to the app."""
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise HTTPException(status_code=500, detail="Server not fully started yet")
    return store


Limit = Annotated[Optional[int], Query(ge=1, description="Maximum number of measurements to retrieve (default: 100)")]
Offset = Annotated[int, Query(ge=0, description="Offset to start retrieving measurements from (default: 0)")]
StartTime = Annotated[Optional[str], Query(alias="startTime", description="Start time in ISO format (default: 24 hours ago)")]
EndTime = Annotated[Optional[str], Query(alias="endTime", description="End time in ISO format (default: now)")]


# =============================================================================
# PAGINATED
# =============================================================================

@router.get("", response_model=MeasurementsWithCount, summary="Get all measurements")
def get_all_measurements(
    limit: Limit = None,
    offset: Offset = 0,
    store: MeasurementStore = Depends(get_store),
):
    """
    One page of measurements, newest first, plus the total row count.

    The dashboard divides `count` by its page size to know how many pages
    there are.
    """
    with client_errors("retrieving measurements"):
        return MeasurementsWithCount(
            measurements=store.get_all(limit, offset),
            count=store.get_count(),
        )


@router.get("/device", response_model=list[Measurement], summary="Get all measurements by device")
def get_measurements_for_device(
    limit: Limit = None,
    offset: Offset = 0,
    device_mac: Annotated[Optional[str], Query(alias="deviceMac", description="MAC address of the device")] = None,
    device_mac_header: Annotated[Optional[str], Header(alias="deviceMac", include_in_schema=False)] = None,
    store: MeasurementStore = Depends(get_store),
):
    """
    Measurements from one device, newest first.

    `deviceMac` is required. Older dashboards send it as a header, so that
    works too.
    """
    with client_errors("retrieving measurements"):
        mac = device_mac or device_mac_header
        if not mac:
            raise ValidationError("Missing deviceMac parameter", parameter="deviceMac")
        return store.get_by_device(mac, limit, offset)


# =============================================================================
# TIME WINDOWS
# =============================================================================

@router.get("/timerange", response_model=list[Measurement], summary="Get measurements in time range")
def get_measurements_in_time_range(
    start_time: StartTime = None,
    end_time: EndTime = None,
    store: MeasurementStore = Depends(get_store),
):
    """Measurements between startTime and endTime (inclusive), oldest first."""
    with client_errors("retrieving measurements in time range"):
        return store.get_in_time_range(
            parse_iso_timestamp(start_time, "startTime"),
            parse_iso_timestamp(end_time, "endTime"),
        )


@router.get("/avgTemperature", response_model=Optional[float], summary="Get average temperature in time range")
def get_average_temperature(
    start_time: StartTime = None,
    end_time: EndTime = None,
    store: MeasurementStore = Depends(get_store),
):
    """Average temperature in the window. `null` if there is nothing to average."""
    with client_errors("retrieving average temperature in time range"):
        return store.get_average_temperature(
            parse_iso_timestamp(start_time, "startTime"),
            parse_iso_timestamp(end_time, "endTime"),
        )


@router.get("/avgHumidity", response_model=Optional[float], summary="Get average humidity in time range")
def get_average_humidity(
    start_time: StartTime = None,
    end_time: EndTime = None,
    store: MeasurementStore = Depends(get_store),
):
    """Average humidity in the window. `null` if there is nothing to average."""
    with client_errors("retrieving average humidity in time range"):
        return store.get_average_humidity(
            parse_iso_timestamp(start_time, "startTime"),
            parse_iso_timestamp(end_time, "endTime"),
        )


# =============================================================================
# LATEST
# =============================================================================

@router.get("/latest", response_model=list[Measurement], summary="Get latest measurements by device")
def get_latest_measurements_by_device(store: MeasurementStore = Depends(get_store)):
    """The newest measurement for each device name."""
    with client_errors("retrieving latest measurements by device"):
        return store.get_latest_per_device()
