"""WeareCloud adapter for the scraped order feed.

WeareCloud has no public API; orders are scraped by a separate microservice
that holds the WeareCloud login. This adapter only talks to that service,
authenticating with a static ``X-API-Key`` header when one is configured.

Data transformation:
- Raw scraper record (Spanish field names) -> common order shape
- ``pedido_ecommerce`` is the web-store order number and is what lines up
  with JumpSeller's ``order_number``
"""
from typing import Any, Dict, List, Optional

import httpx

from app.core.config import settings
from app.core.logging import get_logger
from app.services.sync.adapters.base_order_adapter import (
    BaseOrderAdapter,
    resolve_order_list,
    unwrap_order,
)
from app.services.sync.errors import OrderSourceError, OrderSourceResponseError

logger = get_logger(__name__)

SERVICE_PATH = "/api/wearecloud"

WRAPPER_KEYS = ("orders", "pedidos", "data")
ORDER_KEYS = ("warecloud_id", "pedido_ecommerce", "id", "order_number")


def map_wearecloud_order(raw: Dict[str, Any], public_url: Optional[str] = None) -> Dict[str, Any]:
    """
    Map a scraper record to the common order shape.

    Timestamps and totals are passed through untouched (parsing happens in
    the normalizer) and are left as None when the scraper did not provide
    them.

    Args:
        raw: Record from the scraping service
        public_url: WeareCloud site root used to build order links

    Returns:
        Order dict in the common shape
    """
    warecloud_id = raw.get("warecloud_id")
    pedido = raw.get("pedido_ecommerce")

    customer = raw.get("cliente") or raw.get("customer")
    if isinstance(customer, dict):
        customer = {
            "email": customer.get("email") or "",
            "name": customer.get("name") or customer.get("nombre") or "",
            "phone": customer.get("phone") or customer.get("telefono") or "",
        }
    else:
        customer = {"email": "", "name": ""}

    url = raw.get("url")
    if not url and warecloud_id and public_url:
        url = f"{public_url.rstrip('/')}/orders/{warecloud_id}"

    return {
        "id": _first_present(warecloud_id, pedido, raw.get("id")),
        "order_number": _first_present(pedido, raw.get("order_number"), warecloud_id) or "",
        "status": raw.get("estado") or raw.get("status") or "unknown",
        "created_at": raw.get("fecha_creacion") or raw.get("created_at"),
        "updated_at": raw.get("fecha_actualizacion") or raw.get("updated_at"),
        "customer": customer,
        "line_items": raw.get("items") or raw.get("line_items") or [],
        "total": raw.get("total"),
        "shipping_address": raw.get("direccion_envio") or raw.get("shipping_address"),
        "notes": raw.get("notes") or raw.get("notas"),
        "warecloud_id": warecloud_id,
        "pedido_ecommerce": pedido,
        "url": url,
    }


def _first_present(*values: Any) -> Optional[str]:
    for value in values:
        if value is not None and str(value).strip():
            return str(value).strip()
    return None


class WeareCloudAdapter(BaseOrderAdapter):
    """
    Adapter for the WeareCloud scraping microservice.

    List fetches never raise: the scraper is slow and flaky and must not
    block reconciliation against JumpSeller.
    """

    source = "wearecloud"

    def __init__(
        self,
        service_url: Optional[str] = None,
        api_key: Optional[str] = None,
        public_url: Optional[str] = None,
        timeout: Optional[float] = None,
        retry_attempts: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize the WeareCloud adapter.

        Args:
            service_url: Scraping service root (defaults to settings)
            api_key: Value for the X-API-Key header (defaults to settings)
            public_url: WeareCloud site root for order links (defaults to settings)
            timeout: Request timeout in seconds (defaults to settings)
            retry_attempts: GET attempts (defaults to settings)
            transport: Optional httpx transport override
        """
        api_key = api_key if api_key is not None else settings.WEARECLOUD_SERVICE_API_KEY
        self.public_url = public_url or settings.WEARECLOUD_URL

        headers = {}
        if api_key:
            headers["X-API-Key"] = api_key
        else:
            logger.debug("WeareCloud service API key not configured")

        service_url = (service_url or settings.WEARECLOUD_SERVICE_URL).rstrip("/")
        super().__init__(
            base_url=f"{service_url}{SERVICE_PATH}",
            headers=headers,
            timeout=timeout if timeout is not None else settings.HTTP_TIMEOUT_SECONDS,
            retry_attempts=retry_attempts if retry_attempts is not None else settings.FETCH_RETRY_ATTEMPTS,
            transport=transport,
        )

    async def fetch_orders(self, per_page: Optional[int] = None) -> List[Dict[str, Any]]:
        """
        Fetch orders from the scraper.

        The scraper has no pagination; ``per_page`` caps how many orders are
        returned.

        Returns:
            List of orders in the common shape, empty on any failure
        """
        try:
            payload = await self.get_json("/pedidos")
        except (OrderSourceError, httpx.HTTPError) as e:
            logger.error(f"Error fetching WeareCloud orders: {e}")
            return []

        parsed = resolve_order_list(payload, wrapper_keys=WRAPPER_KEYS, order_keys=ORDER_KEYS)
        records = parsed.records
        if per_page is not None:
            records = records[:per_page]

        logger.info(
            f"Fetched {len(records)} orders from WeareCloud ({parsed.shape.value} response)"
        )
        return [map_wearecloud_order(record, self.public_url) for record in records]

    async def fetch_order(self, order_id: str) -> Dict[str, Any]:
        """
        Fetch one order from the scraper.

        Raises:
            OrderSourceError: on transport or response failure
        """
        payload = await self.get_json(f"/pedidos/{order_id}")

        order = unwrap_order(payload)
        if not order or not any(order.get(key) is not None for key in ORDER_KEYS):
            raise OrderSourceResponseError(
                f"WeareCloud returned no order for id {order_id}", self.source
            )
        return map_wearecloud_order(order, self.public_url)
