"""Shopify Storefront products API integration."""

import logging
from typing import Dict, Optional
from .client import StorefrontClient, error_messages, require_field
from .gid import to_gid
from .queries import PRODUCT_BY_ID_QUERY, PRODUCT_SEARCH_QUERY
from ...errors import NotFoundError, UpstreamError

logger = logging.getLogger(__name__)

class ShopifyProducts:
    """Handles Storefront product queries."""

    def __init__(self, client: StorefrontClient):
        self.client = client

    def search(self, query: str = "", first: int = 20, after: Optional[str] = None) -> Dict:
        """Search products; returns the raw `products` connection."""
        payload = self.client.execute(
            PRODUCT_SEARCH_QUERY,
            {"query": query, "first": first, "after": after}
        )
        return require_field(payload, "products", "Failed to fetch products")

    def get_by_id(self, product_id: str) -> Dict:
        """Get a product by raw or gid ID; raises NotFoundError when upstream returns null."""
        payload = self.client.execute(PRODUCT_BY_ID_QUERY, {"id": to_gid(product_id, "Product")})
        data = payload.get("data")
        if not isinstance(data, dict):
            details = error_messages(payload)
            raise UpstreamError(f"Failed to fetch product: {details}" if details else "Failed to fetch product")

        product = data.get("product")
        if product is None:
            logger.info(f"Product {product_id} not found")
            raise NotFoundError("Product not found")
        return product
