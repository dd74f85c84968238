"""Shopify Storefront collections API integration."""

from typing import Dict, Optional
from .client import StorefrontClient, require_field
from .queries import COLLECTIONS_QUERY

class ShopifyCollections:
    """Handles Storefront collection listing."""

    def __init__(self, client: StorefrontClient):
        self.client = client

    def list(self, first: int = 20, after: Optional[str] = None) -> Dict:
        """List collections; returns the raw `collections` connection."""
        payload = self.client.execute(COLLECTIONS_QUERY, {"first": first, "after": after})
        return require_field(payload, "collections", "Failed to fetch collections")
