"""
Measurement Models
==================
Pydantic models for what the query API sends back to the dashboard.

- Measurement: One stored temperature/humidity reading
- Device: A distinct (MAC address, device name) pair seen in the data
- Room: A device name plus every Device reporting under it
- MeasurementsWithCount: One page of measurements plus the total row count

Devices and Rooms are never stored. They are computed from the
measurements table every time somebody asks.

JSON uses camelCase (ipAddress, macAddress, deviceName) because that is
what the dashboard and the sensor firmware speak.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Base for response models: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Measurement(ApiModel):
    """
    A single stored reading.

    Example:
        {
            "id": 1,
            "timestamp": "2025-03-01T12:00:00",
            "temperature": 22.5,
            "humidity": 55.0,
            "ipAddress": "192.168.1.100",
            "macAddress": "00:11:22:33:44:55",
            "deviceName": "Sensor1"
        }
    """
    id: int = Field(..., description="Store-assigned identity, increases with every insert")
    timestamp: datetime = Field(..., description="When the reading was recorded (UTC)")
    temperature: Optional[float] = Field(None, description="Temperature in °C")
    humidity: Optional[float] = Field(None, description="Relative humidity %")
    ip_address: Optional[str] = Field(None, description="Address the sensor submitted from")
    mac_address: Optional[str] = Field(None, description="Stable device identifier")
    device_name: Optional[str] = Field(None, description="Human-readable device/room label")


class Device(ApiModel):
    """A sensor, identified by MAC address and name."""
    mac_address: str = Field(..., description="MAC address ('' if the device never sent one)")
    name: str = Field(..., description="Device name")


class Room(ApiModel):
    """A named group of devices sharing the same device name."""
    name: str = Field(..., description="Room name (the shared device name)")
    devices: list[Device] = Field(..., description="Devices reporting under this name")


class MeasurementsWithCount(ApiModel):
    """
    One page of measurements plus the total number of rows.

    Lets the dashboard work out how many pages there are without a
    second request.
    """
    measurements: list[Measurement] = Field(..., description="Newest-first page")
    count: int = Field(..., description="Total number of stored measurements")
