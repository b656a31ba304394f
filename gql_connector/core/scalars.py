"""Wire formats for temporal GraphQL values.

Two datetime formats are in use on the wire:

    DateTimeHandler        yyyy-MM-ddTHH:mm:ss.SSSZ   (arguments and variables)
    FilterDateTimeHandler  yyyy-MM-ddTHH:mm:ssZ       (the modified-since filter)

Naive datetimes are taken to be UTC; aware ones are converted to UTC.

Example usage:
    from gql_connector.core.scalars import DateTimeHandler

    DateTimeHandler().serialize(datetime(2024, 1, 15, 10, 30))
    # '2024-01-15T10:30:00.000Z'
"""

from datetime import date, datetime, timezone
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class ScalarHandler(Protocol):
    """Protocol for converting a Python value to and from its wire text."""

    def serialize(self, value: Any) -> str:
        """Convert a Python value to its GraphQL wire string."""
        ...

    def deserialize(self, value: str) -> Any:
        """Parse a GraphQL wire string."""
        ...


def _to_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _parse_iso(value: str) -> datetime:
    return _to_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))


class DateTimeHandler:
    """ISO 8601 with milliseconds, always in UTC."""

    def serialize(self, value: datetime) -> str:
        value = _to_utc(value)
        return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"

    def deserialize(self, value: str) -> datetime:
        return _parse_iso(value)


class FilterDateTimeHandler:
    """ISO 8601 truncated to whole seconds, always in UTC."""

    def serialize(self, value: datetime) -> str:
        return _to_utc(value).strftime("%Y-%m-%dT%H:%M:%SZ")

    def deserialize(self, value: str) -> datetime:
        return _parse_iso(value).replace(microsecond=0)


class DateHandler:
    """Handler for Date scalars using ISO 8601 date format."""

    def serialize(self, value: date) -> str:
        return value.isoformat()

    def deserialize(self, value: str) -> date:
        return date.fromisoformat(value)


DATETIME = DateTimeHandler()
FILTER_DATETIME = FilterDateTimeHandler()
DATE = DateHandler()


def to_wire(value: Any) -> Any:
    """Serialize temporal values found anywhere inside a JSON-like value."""
    if isinstance(value, datetime):
        return DATETIME.serialize(value)
    if isinstance(value, date):
        return DATE.serialize(value)
    if isinstance(value, dict):
        return {k: to_wire(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_wire(v) for v in value]
    return value
