"""Order source adapters.

Available adapters:
- jumpseller_adapter: JumpSeller orders API (authoritative, updatable)
- wearecloud_adapter: WeareCloud scraping microservice (read-only)

Base classes:
- BaseOrderAdapter: Shared HTTP client, retry logic and error mapping
"""
from app.services.sync.adapters.base_order_adapter import (
    BaseOrderAdapter,
    ParsedOrders,
    ResponseShape,
    resolve_order_list,
)
from app.services.sync.adapters.jumpseller_adapter import JumpSellerAdapter
from app.services.sync.adapters.wearecloud_adapter import WeareCloudAdapter

__all__ = [
    "BaseOrderAdapter",
    "ParsedOrders",
    "ResponseShape",
    "resolve_order_list",
    "JumpSellerAdapter",
    "WeareCloudAdapter",
]
