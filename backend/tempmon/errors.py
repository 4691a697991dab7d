"""
Errors
======

Every failure the API knows how to talk about.

- DecodeError:     the submission body is not one of the known request shapes
- ValidationError: a query parameter is missing/invalid, or a submission is empty
- StoreError:      the database could not be reached or a query failed

A query that simply finds nothing is NOT an error - it returns an empty
list or None.
"""


class TempMonError(Exception):
    """Base class for errors raised by this package."""


class DecodeError(TempMonError):
    """Malformed or unrecognized submission shape."""


class ValidationError(TempMonError):
    """Missing or invalid request parameter."""

    def __init__(self, message: str, parameter: str | None = None):
        super().__init__(message)
        self.parameter = parameter


class StoreError(TempMonError):
    """Connectivity or query execution failure in the measurement store."""
