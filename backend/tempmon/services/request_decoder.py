"""
Request Decoder
===============

Turns the body of POST /request into exactly one of the three submission
shapes, or fails with DecodeError.

    raw bytes --json--> dict --look at "type"--> TemperatureHumidityRequest
                                                 HumidityRequest
                                                 TemperatureRequest

No fallbacks: a missing or unknown `type` is an error, never a guess.
Values are not range-checked - whatever float the sensor sends is kept.
"""

import json
from typing import Any, Union

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from tempmon.errors import DecodeError
from tempmon.models import (
    REQUEST_TYPES,
    HumidityRequest,
    SubmissionRequest,
    TemperatureHumidityRequest,
    TemperatureRequest,
)

Submission = Union[TemperatureHumidityRequest, HumidityRequest, TemperatureRequest]

_submission_adapter = TypeAdapter(SubmissionRequest)


def _load_json(body: Union[bytes, str]) -> Any:
    try:
        return json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise DecodeError(f"Body is not valid JSON: {e}") from e


def _describe_errors(error: PydanticValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(p) for p in item["loc"]) or "body"
        parts.append(f"{location}: {item['msg']}")
    return "; ".join(parts)


def decode_request(body: Union[bytes, str, dict]) -> Submission:
    """
    Decode a submission body.

    Args:
        body: Raw JSON (bytes or str) or an already-parsed dict

    Returns:
        The matching submission model. Its `type` equals the tag it was
        selected by.

    Raises:
        DecodeError: If the body is not JSON, not an object, has a missing
            or unrecognized `type`, or has fields of the wrong type
    """
    data = body if isinstance(body, dict) else _load_json(body)

    if not isinstance(data, dict):
        raise DecodeError("Body must be a JSON object")

    tag = data.get("type")
    if tag not in REQUEST_TYPES:
        raise DecodeError(
            f"Unrecognized or missing type: {tag!r}. "
            f"Expected one of: {', '.join(REQUEST_TYPES)}"
        )

    try:
        submission = _submission_adapter.validate_python(data)
    except PydanticValidationError as e:
        raise DecodeError(f"Invalid {tag} request: {_describe_errors(e)}") from e

    if submission.type != tag:
        raise DecodeError(f"Decoded {submission.type} for tag {tag}")

    return submission
