"""Exceptions raised by the client.

Transport failures are not represented here: connection errors and non-success
HTTP statuses surface as the ``aiohttp`` exceptions that produced them.
"""

from collections.abc import Iterable

from pydantic import ValidationError

__all__ = (
    "WikimediaError",
    "OptionsValidationError",
    "ResponseDecodeError",
    "APIError",
)


def _error_fields(error: ValidationError) -> tuple[str, ...]:
    """Return the dotted locations of the fields named by ``error``."""

    return tuple(
        dict.fromkeys(
            ".".join(str(part) for part in detail["loc"]) for detail in error.errors()
        )
    )


class WikimediaError(Exception):
    """Base class of the errors raised by this package."""


class OptionsValidationError(WikimediaError, ValueError):
    """Caller-supplied options or titles are invalid.

    Raised before any request is sent. ``fields`` names the offending
    options.
    """

    def __init__(self, message: str, fields: Iterable[str] = ()):
        super().__init__(message)
        self.fields = tuple(fields)

    @classmethod
    def from_validation_error(cls, name: str, error: ValidationError):
        fields = _error_fields(error)
        return cls(f"Invalid {name}: {', '.join(fields) or error}", fields)


class ResponseDecodeError(WikimediaError, ValueError):
    """A response body does not match the schema of its operation."""

    def __init__(self, operation: str, message: str, fields: Iterable[str] = ()):
        super().__init__(f"Malformed '{operation}' response: {message}")
        self.operation = operation
        self.fields = tuple(fields)

    @classmethod
    def from_validation_error(cls, operation: str, error: ValidationError):
        fields = _error_fields(error)
        return cls(operation, ", ".join(fields) or str(error), fields)


class APIError(WikimediaError):
    """The API answered with its own ``error`` envelope."""

    def __init__(self, code: str, info: str):
        super().__init__(f"{code}: {info}")
        self.code = code
        self.info = info
