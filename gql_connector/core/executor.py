"""GraphQL-over-HTTP execution.

RunSession owns everything that lives for exactly one run: the HTTP
client, the auth handler (and with it any lazily fetched token) and the
settings. It is used as an async context manager and thrown away
afterwards. Nothing here retries; a failed call is reported to the caller
as is.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

import httpx
from pydantic import BaseModel

from .auth import Auth, NoAuth, PreparedAuth
from .errors import GraphQLCallError, TransportError
from .query_builder import Query
from .scalars import to_wire
from .settings import ConnectorSettings

logger = logging.getLogger(__name__)


@dataclass
class GraphQLResponse:
    """Parsed GraphQL response body."""
    data: dict[str, Any] | None = None
    errors: list[dict[str, Any]] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)


ERROR_PART_SEPARATOR = " | "


def format_error(error: dict[str, Any]) -> str:
    """``code | message | details``, leaving out the parts that are absent."""
    extensions = error.get("extensions") or {}
    parts = [extensions.get("code"), error.get("message"), extensions.get("details")]
    return ERROR_PART_SEPARATOR.join(str(p) for p in parts if p not in (None, "")) or str(error)


def aggregate_error_message(errors: list[dict[str, Any]]) -> str:
    """Deduplicated, sorted error strings joined into one string."""
    return "; ".join(sorted({format_error(e) for e in errors}))


class RunSession:
    """Per-run connection to one GraphQL endpoint.

    Examples:
        async with RunSession(settings, auth=BearerAuth(token)) as session:
            response = await session.execute(query)

        # Token fetched on the first request, reused afterwards
        async with RunSession(settings, auth=TokenProviderAuth(fetch_token)) as session:
            ...
    """

    def __init__(
        self,
        settings: ConnectorSettings,
        auth: Auth | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the session.

        Args:
            settings: Endpoint and schema conventions
            auth: Authentication handler (implements Auth protocol)
            transport: Optional httpx transport, e.g. httpx.MockTransport in tests
        """
        self.settings = settings
        self._auth = auth if auth is not None else NoAuth()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "RunSession":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.settings.timeout,
                headers={"Content-Type": "application/json"},
                transport=self._transport,
            )
        return self._client

    async def close(self):
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _headers(self) -> dict[str, str]:
        if isinstance(self._auth, PreparedAuth):
            await self._auth.prepare()
        return self._auth.get_headers()

    async def post(self, payload: dict[str, Any]) -> GraphQLResponse:
        """POST a GraphQL payload and parse the body. Only transport failures raise."""
        client = self._get_client()
        headers = await self._headers()
        logger.debug("POST %s: %s", self.settings.url, payload.get("query"))
        try:
            response = await client.post(self.settings.url, json=payload, headers=headers)
        except httpx.TimeoutException as exc:
            raise TransportError(f"Request to {self.settings.url} timed out") from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"Request to {self.settings.url} failed: {exc}") from exc

        if not response.is_success:
            raise TransportError(
                f"HTTP {response.status_code} {response.reason_phrase} from {self.settings.url}",
                status_code=response.status_code,
                reason=response.reason_phrase,
                body=response.text,
            )

        try:
            body = response.json()
        except ValueError as exc:
            raise TransportError(
                f"Response from {self.settings.url} is not JSON",
                status_code=response.status_code,
                reason=response.reason_phrase,
                body=response.text,
            ) from exc
        if not isinstance(body, dict):
            raise TransportError(
                f"Response from {self.settings.url} is not a JSON object",
                status_code=response.status_code,
                body=response.text,
            )
        return GraphQLResponse(data=body.get("data"), errors=body.get("errors") or [])

    async def execute(self, query: Query) -> GraphQLResponse:
        """Execute a query.

        Returns:
            The parsed response; ``errors`` may be set alongside ``data``

        Raises:
            TransportError: On non-2xx status, timeouts and network failures
            GraphQLCallError: If the response has errors and no data
        """
        payload = query.to_payload()
        if "variables" in payload:
            payload["variables"] = self._serialize_variables(payload["variables"])
        response = await self.post(payload)
        if response.data is None and response.has_errors:
            message = aggregate_error_message(response.errors)
            raise GraphQLCallError(f"GraphQL errors: {message}", response.errors)
        return response

    async def execute_data(self, query: Query) -> dict[str, Any]:
        """Execute a query whose errors are never row-scoped, such as introspection.

        Any error fails the call.
        """
        response = await self.execute(query)
        if response.has_errors:
            message = aggregate_error_message(response.errors)
            raise GraphQLCallError(f"GraphQL errors: {message}", response.errors)
        return response.data or {}

    def _serialize_variables(self, variables: dict[str, Any]) -> dict[str, Any]:
        """Serialize variables for the GraphQL request.

        Pydantic models become dicts; datetimes become wire strings.
        """
        result = {}
        for key, value in variables.items():
            if isinstance(value, BaseModel):
                value = value.model_dump(by_alias=True, exclude_none=True)
            elif isinstance(value, list):
                value = [
                    v.model_dump(by_alias=True, exclude_none=True) if isinstance(v, BaseModel) else v
                    for v in value
                ]
            result[key] = to_wire(value)
        return result
