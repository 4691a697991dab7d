"""
Submission Models
=================
What a sensor sends to POST /request.

There are three shapes, told apart by the `type` field:

| type                 | carries                  |
|----------------------|--------------------------|
| TEMPERATURE_HUMIDITY | temperature and humidity |
| HUMIDITY             | humidity only            |
| TEMPERATURE          | temperature only         |

Example body:
    {"type": "TEMPERATURE_HUMIDITY", "temperature": 25.0, "humidity": 60.0,
     "deviceName": "Classroom Sensor"}

Temperature and humidity must be JSON numbers: "22" or true is rejected,
not converted.

Each shape may also carry `ipAddress` and `deviceName` as the sensor sees
them. The handler prefers what it observes on the transport itself.
"""

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


TEMPERATURE_HUMIDITY = "TEMPERATURE_HUMIDITY"
HUMIDITY = "HUMIDITY"
TEMPERATURE = "TEMPERATURE"

REQUEST_TYPES = (TEMPERATURE_HUMIDITY, HUMIDITY, TEMPERATURE)


class _SubmissionBase(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    ip_address: Optional[str] = Field(None, description="Sender-reported IP address")
    device_name: Optional[str] = Field(None, description="Sender-reported device name")


class TemperatureHumidityRequest(_SubmissionBase):
    """Temperature and humidity in one submission."""
    type: Literal["TEMPERATURE_HUMIDITY"] = TEMPERATURE_HUMIDITY
    temperature: Optional[float] = Field(None, strict=True, description="Temperature in °C")
    humidity: Optional[float] = Field(None, strict=True, description="Relative humidity %")


class HumidityRequest(_SubmissionBase):
    """Humidity only."""
    type: Literal["HUMIDITY"] = HUMIDITY
    humidity: Optional[float] = Field(None, strict=True, description="Relative humidity %")


class TemperatureRequest(_SubmissionBase):
    """Temperature only."""
    type: Literal["TEMPERATURE"] = TEMPERATURE
    temperature: Optional[float] = Field(None, strict=True, description="Temperature in °C")


SubmissionRequest = Annotated[
    Union[TemperatureHumidityRequest, HumidityRequest, TemperatureRequest],
    Field(discriminator="type"),
]
