"""
Models Package
==============

This is where all our data models live.
Import from here instead of the individual files.

Example:
    from tempmon.models import Measurement, TemperatureRequest
"""

from .measurement import (
    # What the query API sends back
    Measurement,
    Device,
    Room,
    MeasurementsWithCount,
)
from .requests import (
    # What sensors send to POST /request
    TemperatureHumidityRequest,
    HumidityRequest,
    TemperatureRequest,
    SubmissionRequest,
    REQUEST_TYPES,
    TEMPERATURE_HUMIDITY,
    HUMIDITY,
    TEMPERATURE,
)

__all__ = [
    "Measurement",
    "Device",
    "Room",
    "MeasurementsWithCount",
    "TemperatureHumidityRequest",
    "HumidityRequest",
    "TemperatureRequest",
    "SubmissionRequest",
    "REQUEST_TYPES",
    "TEMPERATURE_HUMIDITY",
    "HUMIDITY",
    "TEMPERATURE",
]
