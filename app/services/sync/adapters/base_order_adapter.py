"""
Base adapter for order sources.

Provides:
- A lazily created httpx.AsyncClient per adapter (credentials fixed at construction)
- Translation of httpx failures into the OrderSourceError taxonomy
- Retry with exponential backoff for idempotent GETs (tenacity)
- Resolution of the loosely-shaped list responses both sources return

Usage:
    class MyAdapter(BaseOrderAdapter):
        source = "my_source"

    adapter = MyAdapter(base_url="https://example.test")
    payload = await adapter.get_json("/orders")
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from app.core.logging import get_logger
from app.services.sync.errors import (
    OrderSourceError,
    OrderSourceRejectedError,
    OrderSourceResponseError,
    OrderSourceTimeoutError,
    OrderSourceUnavailableError,
)

logger = get_logger(__name__)

RETRYABLE_ERRORS = (OrderSourceUnavailableError, OrderSourceTimeoutError)


class ResponseShape(Enum):
    """Shapes an order list response is known to arrive in."""
    ARRAY = "array"
    WRAPPED_ARRAY = "wrapped_array"
    SINGLETON = "singleton"
    UNRECOGNIZED = "unrecognized"


@dataclass(frozen=True)
class ParsedOrders:
    """Order records extracted from a response, tagged with the shape found."""
    shape: ResponseShape
    records: List[Dict[str, Any]] = field(default_factory=list)


def resolve_order_list(
    payload: Any,
    wrapper_keys: Iterable[str] = ("orders",),
    order_keys: Iterable[str] = ("id", "order_number"),
) -> ParsedOrders:
    """
    Resolve a response body into a list of order dicts.

    Accepted shapes:
    - ``[...]``: array of orders (items may be wrapped as ``{"order": {...}}``)
    - ``{"orders": [...]}``: array under one of ``wrapper_keys``
    - ``{"order": {...}}`` or a bare order object: singleton
    Anything else resolves to UNRECOGNIZED with no records.

    Args:
        payload: Decoded JSON body
        wrapper_keys: Keys that may hold the order array
        order_keys: Keys whose presence marks a bare dict as an order

    Returns:
        ParsedOrders
    """
    if isinstance(payload, list):
        return ParsedOrders(ResponseShape.ARRAY, _unwrap_items(payload))

    if isinstance(payload, dict):
        for key in wrapper_keys:
            if isinstance(payload.get(key), list):
                return ParsedOrders(ResponseShape.WRAPPED_ARRAY, _unwrap_items(payload[key]))

        if isinstance(payload.get("order"), dict):
            return ParsedOrders(ResponseShape.SINGLETON, [payload["order"]])

        if any(key in payload for key in order_keys):
            return ParsedOrders(ResponseShape.SINGLETON, [payload])

    return ParsedOrders(ResponseShape.UNRECOGNIZED)


def unwrap_order(payload: Any) -> Optional[Dict[str, Any]]:
    """
    Single-order body: ``{"order": {...}}`` or the bare object.

    An ``order`` key holding anything but an object (``{"order": null}``
    is how a missing order comes back) yields None.
    """
    if not isinstance(payload, dict):
        return None
    if "order" in payload:
        inner = payload["order"]
        return inner if isinstance(inner, dict) else None
    return payload


def _unwrap_items(items: List[Any]) -> List[Dict[str, Any]]:
    records = []
    for item in items:
        record = unwrap_order(item)
        if record is not None:
            records.append(record)
    return records


class BaseOrderAdapter:
    """
    Shared HTTP plumbing for order source adapters.

    Subclasses set ``source`` and call ``get_json`` / ``send``. The client,
    headers and auth are fixed when the adapter is constructed.

    Attributes:
        source: Short source name used in errors and logs
        base_url: Root URL every path is joined to
    """

    source = "unknown"

    def __init__(
        self,
        base_url: str,
        headers: Optional[Dict[str, str]] = None,
        auth: Optional[httpx.Auth] = None,
        timeout: float = 30.0,
        retry_attempts: int = 3,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize the adapter.

        Args:
            base_url: Root URL of the order source
            headers: Static headers sent on every request
            auth: Optional httpx auth (e.g. BasicAuth)
            timeout: Default request timeout in seconds
            retry_attempts: Total attempts for idempotent GETs
            transport: Optional transport override (tests use httpx.MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retry_attempts = max(1, retry_attempts)
        self._headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            **(headers or {}),
        }
        self._auth = auth
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=self._headers,
                auth=self._auth,
                timeout=httpx.Timeout(self.timeout),
                limits=httpx.Limits(max_keepalive_connections=5, max_connections=10),
                transport=self._transport,
            )
        return self._client

    async def close(self):
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def get_json(self, path: str, params: Optional[Dict[str, str]] = None) -> Any:
        """
        GET a JSON document, retrying transient failures.

        4xx responses and undecodable bodies are not retried.

        Raises:
            OrderSourceError: after the last attempt fails
        """
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.retry_attempts),
            wait=wait_exponential(multiplier=0.5, min=0.5, max=8),
            retry=retry_if_exception_type(RETRYABLE_ERRORS),
            reraise=True,
        ):
            with attempt:
                return await self.send("GET", path, params=params)

    async def send(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, str]] = None,
        json: Any = None,
        timeout: Optional[float] = None
    ) -> Any:
        """
        Send one request and decode the JSON response. No retries.

        Raises:
            OrderSourceTimeoutError: request exceeded its timeout
            OrderSourceUnavailableError: transport failure or 5xx
            OrderSourceRejectedError: 4xx
            OrderSourceResponseError: body is not JSON
        """
        client = self._get_client()
        request_timeout = httpx.Timeout(timeout) if timeout is not None else httpx.USE_CLIENT_DEFAULT

        try:
            response = await client.request(
                method, path, params=params, json=json, timeout=request_timeout
            )
        except httpx.TimeoutException as e:
            raise OrderSourceTimeoutError(
                f"{self.source} request timed out: {method} {path}", self.source
            ) from e
        except httpx.RequestError as e:
            raise OrderSourceUnavailableError(
                f"{self.source} request failed: {e}", self.source
            ) from e

        if response.is_error:
            raise self._error_from_response(response)

        try:
            return response.json()
        except ValueError as e:
            raise OrderSourceResponseError(
                f"{self.source} returned a non-JSON body for {method} {path}",
                self.source,
                status_code=response.status_code,
            ) from e

    def _error_from_response(self, response: httpx.Response) -> OrderSourceError:
        details = None
        try:
            details = response.json()
        except ValueError:
            pass

        message = None
        if isinstance(details, dict):
            message = details.get("message") or details.get("error")
        if not message:
            message = f"HTTP error! status: {response.status_code}"
        message = f"{self.source}: {message}"

        if response.is_client_error:
            return OrderSourceRejectedError(message, self.source, response.status_code, details)
        return OrderSourceUnavailableError(message, self.source, response.status_code, details)
