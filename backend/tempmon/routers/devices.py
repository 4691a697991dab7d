"""
Devices & Rooms API Router
==========================

Devices and rooms are not stored anywhere - they are worked out from the
measurements every time.

- A DEVICE is a distinct (MAC address, device name) pair.
- A ROOM is a device name plus every device that reported under it.

ALL ENDPOINTS:
-------------
GET /devices              - Distinct devices, ordered by MAC address
GET /rooms                - Rooms with their devices
GET /rooms/measurements   - Readings for one room (optionally in a window)
"""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query

from tempmon.errors import ValidationError
from tempmon.models import Device, Measurement, Room
from tempmon.routers.errors import client_errors
from tempmon.routers.measurements import EndTime, Limit, Offset, StartTime, get_store
from tempmon.services import MeasurementStore
from tempmon.utils.validation import parse_iso_timestamp

router = APIRouter(tags=["devices"])


@router.get("/devices", response_model=list[Device], summary="Get all devices")
def get_all_devices(
    limit: Limit = None,
    offset: Offset = 0,
    store: MeasurementStore = Depends(get_store),
):
    """Every device that has ever sent a measurement."""
    with client_errors("retrieving devices"):
        return store.list_devices(limit, offset)


@router.get("/rooms", response_model=list[Room], summary="Get all rooms and their associated devices")
def get_all_rooms(store: MeasurementStore = Depends(get_store)):
    """
    All rooms, each with the devices that report under its name.

    Example response:
        [{"name": "11b", "devices": [{"macAddress": "00:11:22:33:44:55", "name": "11b"}]}]
    """
    with client_errors("retrieving rooms"):
        return store.list_rooms()


@router.get("/rooms/measurements", response_model=list[Measurement], summary="Get measurements for a room")
def get_measurements_for_room(
    room: Annotated[Optional[str], Query(description="The room name to filter measurements by")] = None,
    limit: Limit = None,
    offset: Offset = 0,
    start_time: StartTime = None,
    end_time: EndTime = None,
    store: MeasurementStore = Depends(get_store),
):
    """
    Measurements for one room, newest first.

    `room` is required. With startTime and/or endTime only that window is
    returned; without either, the room's whole history is paged.
    """
    with client_errors("retrieving measurements for room"):
        if not room:
            raise ValidationError("Missing room parameter", parameter="room")
        return store.get_by_room(
            room,
            limit,
            offset,
            start=parse_iso_timestamp(start_time, "startTime"),
            end=parse_iso_timestamp(end_time, "endTime"),
        )
