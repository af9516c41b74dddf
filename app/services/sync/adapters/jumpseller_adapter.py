"""JumpSeller adapter for the authoritative order platform.

JumpSeller uses HTTP Basic auth with the API key ("Login") as user and the
API secret ("Auth Token") as password. Orders come back either as a list,
a list under ``orders``, or a single ``{"order": {...}}`` object, and list
items may themselves be wrapped in ``{"order": ...}``.

Endpoints:
- GET  /orders             list (page, per_page, status, date filters)
- GET  /orders/{id}.json   single order
- PUT  /orders/{id}.json   partial update, body ``{"order": {...}}``
"""
from typing import Any, Dict, List, Optional

import httpx

from app.core.config import settings
from app.core.logging import get_logger
from app.models.orders import OrderListParams
from app.services.sync.adapters.base_order_adapter import (
    BaseOrderAdapter,
    resolve_order_list,
    unwrap_order,
)
from app.services.sync.errors import (
    OrderSourceConfigError,
    OrderSourceError,
    OrderSourceResponseError,
)

logger = get_logger(__name__)


class JumpSellerAdapter(BaseOrderAdapter):
    """
    Adapter for the JumpSeller orders API.

    Credentials are read once here and never change for the adapter's
    lifetime. List fetches never raise; single-order calls raise
    OrderSourceError subclasses.
    """

    source = "jumpseller"

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_secret: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        retry_attempts: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize the JumpSeller adapter.

        Args:
            api_key: JumpSeller login (defaults to settings)
            api_secret: JumpSeller auth token (defaults to settings)
            base_url: API root (defaults to settings)
            timeout: Request timeout in seconds (defaults to settings)
            retry_attempts: GET attempts (defaults to settings)
            transport: Optional httpx transport override
        """
        self._api_key = api_key if api_key is not None else settings.JUMPSELLER_API_KEY
        self._api_secret = api_secret if api_secret is not None else settings.JUMPSELLER_API_SECRET

        auth = None
        if self._api_key and self._api_secret:
            auth = httpx.BasicAuth(self._api_key, self._api_secret)

        super().__init__(
            base_url=base_url or settings.JUMPSELLER_API_URL,
            auth=auth,
            timeout=timeout if timeout is not None else settings.HTTP_TIMEOUT_SECONDS,
            retry_attempts=retry_attempts if retry_attempts is not None else settings.FETCH_RETRY_ATTEMPTS,
            transport=transport,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key and self._api_secret)

    def _require_credentials(self):
        if not self._api_key:
            raise OrderSourceConfigError("JumpSeller API key (Login) is not configured", self.source)
        if not self._api_secret:
            raise OrderSourceConfigError("JumpSeller API secret (Auth Token) is not configured", self.source)

    async def fetch_orders(
        self,
        per_page: Optional[int] = None,
        params: Optional[OrderListParams] = None
    ) -> List[Dict[str, Any]]:
        """
        Fetch a page of orders.

        Args:
            per_page: Page size hint (overrides params.per_page)
            params: Optional list filters

        Returns:
            List of order dicts, empty on any failure
        """
        query = params.model_copy() if params else OrderListParams()
        if per_page is not None:
            query.per_page = per_page

        try:
            self._require_credentials()
            payload = await self.get_json("/orders", params=query.to_query())
        except (OrderSourceError, httpx.HTTPError) as e:
            logger.error(f"Error fetching JumpSeller orders: {e}")
            return []

        parsed = resolve_order_list(payload)
        logger.info(
            f"Fetched {len(parsed.records)} orders from JumpSeller ({parsed.shape.value} response)"
        )
        return parsed.records

    async def fetch_order(self, order_id: int) -> Dict[str, Any]:
        """
        Fetch a single order.

        Raises:
            OrderSourceError: on configuration, transport or response failure
        """
        self._require_credentials()
        payload = await self.get_json(f"/orders/{order_id}.json")

        order = unwrap_order(payload)
        if order is None:
            raise OrderSourceResponseError(
                f"JumpSeller returned no order for id {order_id}", self.source
            )
        return order

    async def update_order(
        self,
        order_id: int,
        fields: Dict[str, Any],
        timeout: Optional[float] = None
    ) -> Dict[str, Any]:
        """
        Apply a partial update. Never retried.

        Args:
            order_id: JumpSeller order id
            fields: Only the fields to change
            timeout: Per-request timeout in seconds

        Returns:
            The updated order as returned by JumpSeller

        Raises:
            OrderSourceError: on configuration, timeout, rejection or transport failure
        """
        self._require_credentials()
        payload = await self.send(
            "PUT",
            f"/orders/{order_id}.json",
            json={"order": fields},
            timeout=timeout,
        )

        order = unwrap_order(payload)
        if order is None:
            raise OrderSourceResponseError(
                f"JumpSeller returned no order after updating {order_id}", self.source
            )
        return order
