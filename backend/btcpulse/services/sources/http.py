"""
Upstream HTTP Client

Thin aiohttp wrapper that turns transport problems into SourceUnavailable
and undecodable or invalid bodies into MalformedResponse.
"""

import logging
from typing import Any, Optional, Union

import aiohttp
from pydantic import BaseModel, TypeAdapter, ValidationError

from btcpulse.services.base import SourceUnavailable, MalformedResponse

logger = logging.getLogger(__name__)

USER_AGENT = "btc-pulse/0.1 (+market-snapshot)"


class HttpJsonClient:
    """
    JSON-over-HTTP client shared by all sources within one invocation.

    Usage:
        async with HttpJsonClient(timeout=8) as client:
            payload = await client.get_json(url, params={...})
    """

    def __init__(self, timeout: float = 10.0):
        self._timeout = timeout
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self) -> "HttpJsonClient":
        await self._ensure_session()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure we have an active HTTP session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._timeout),
                headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
            )
        return self._session

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def get_json(
        self,
        url: str,
        params: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> Any:
        """GET `url` and decode the JSON body."""
        session = await self._ensure_session()
        logger.debug(f"GET {url} params={params}")
        try:
            async with session.get(url, params=params, headers=headers) as resp:
                if resp.status >= 400:
                    raise SourceUnavailable(
                        url, f"HTTP {resp.status}", {"status": resp.status}
                    )
                try:
                    return await resp.json(content_type=None)
                except ValueError as e:
                    raise MalformedResponse(url, f"Body is not JSON: {e}") from e
        except aiohttp.ClientError as e:
            raise SourceUnavailable(url, f"Request failed: {e}") from e


def parse_payload(
    schema: Union[type[BaseModel], TypeAdapter], payload: Any, source: str
) -> Any:
    """Validate `payload` against a pydantic model or TypeAdapter."""
    try:
        if isinstance(schema, TypeAdapter):
            return schema.validate_python(payload)
        return schema.model_validate(payload)
    except ValidationError as e:
        raise MalformedResponse(
            source,
            f"Unexpected payload shape ({e.error_count()} errors)",
            {"errors": e.errors(include_url=False)[:3]},
        ) from e
