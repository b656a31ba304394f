"""Exception hierarchy for the connector.

Every failure the connector reports derives from ConnectorError. Errors
that only affect a single fetched record are not exceptions; they are
attached to the record instead.
"""

from typing import Any


class ConnectorError(Exception):
    """Base class for all connector failures."""


class TransportError(ConnectorError):
    """The HTTP call failed or returned a non-2xx status.

    A timed-out or refused request has no status code.
    """

    def __init__(self, message: str, status_code: int | None = None,
                 reason: str | None = None, body: str | None = None):
        self.status_code = status_code
        self.reason = reason
        self.body = body
        super().__init__(message)


class GraphQLCallError(ConnectorError):
    """The response carried errors and no data at all."""

    def __init__(self, message: str, errors: list[dict[str, Any]]):
        self.message = message
        self.errors = errors
        super().__init__(message)


class SchemaResolutionError(ConnectorError):
    """A named operation, type or field does not exist in the schema."""

    def __init__(self, name: str, message: str | None = None):
        self.name = name
        super().__init__(message or f"Not found in schema: {name}")


class IntrospectionError(ConnectorError):
    """An introspection payload is malformed (for example, missing 'kind')."""


class AuthenticationError(ConnectorError):
    """The access token for the run could not be obtained."""
