"""Authentication handlers for the connector's GraphQL requests.

Every handler implements the Auth protocol: ``get_headers()`` returns the
headers to send. Handlers whose credentials must be obtained first also
implement PreparedAuth; the session awaits ``prepare()`` before each
request and the handler decides whether there is anything to do.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Dict, Protocol, runtime_checkable

from .errors import AuthenticationError

logger = logging.getLogger(__name__)


@runtime_checkable
class Auth(Protocol):
    """Protocol for authentication handlers.

    Example:
        class TenantAuth:
            def __init__(self, token: str, tenant: str):
                self.token = token
                self.tenant = tenant

            def get_headers(self) -> dict[str, str]:
                return {"Authorization": f"Bearer {self.token}", "X-Tenant": self.tenant}
    """

    def get_headers(self) -> Dict[str, str]:
        """Return headers to include in requests."""
        ...


@runtime_checkable
class PreparedAuth(Protocol):
    """Auth whose credentials are fetched asynchronously before use."""

    async def prepare(self) -> None:
        ...

    def get_headers(self) -> Dict[str, str]:
        ...


class BearerAuth:
    """Static bearer token."""

    def __init__(self, token: str):
        self.token = token

    def get_headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


class ApiKeyAuth:
    """API key sent in a custom header (``x-api-key`` unless told otherwise)."""

    def __init__(self, api_key: str, header_name: str = "x-api-key"):
        self.api_key = api_key
        self.header_name = header_name

    def get_headers(self) -> Dict[str, str]:
        return {self.header_name: self.api_key}


class HeaderAuth:
    """Arbitrary fixed headers."""

    def __init__(self, headers: Dict[str, str]):
        self._headers = dict(headers)

    def get_headers(self) -> Dict[str, str]:
        return self._headers.copy()


class NoAuth:
    """No authentication (for public APIs or testing)."""

    def get_headers(self) -> Dict[str, str]:
        return {}


class TokenProviderAuth:
    """Bearer token obtained from an async provider on first use.

    The token is fetched once and reused for the lifetime of this handler,
    which is meant to be one run. A provider failure is fatal.

    Example:
        async def fetch_token() -> str:
            ...

        auth = TokenProviderAuth(fetch_token)
    """

    def __init__(self, provider: Callable[[], Awaitable[str]]):
        self._provider = provider
        self._token: str | None = None
        self._lock = asyncio.Lock()

    @property
    def has_token(self) -> bool:
        return self._token is not None

    async def prepare(self) -> None:
        async with self._lock:
            if self._token is not None:
                return
            logger.debug("Fetching access token")
            try:
                token = await self._provider()
            except Exception as exc:
                raise AuthenticationError(f"Could not obtain access token: {exc}") from exc
            if not token:
                raise AuthenticationError("Token provider returned an empty token")
            self._token = token

    def get_headers(self) -> Dict[str, str]:
        if self._token is None:
            raise AuthenticationError("Access token requested before prepare()")
        return {"Authorization": f"Bearer {self._token}"}
