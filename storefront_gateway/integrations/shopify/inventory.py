"""Shopify Storefront variant inventory lookups."""

import logging
from typing import Dict, List
from .client import StorefrontClient, require_field
from .gid import to_gid
from .queries import INVENTORY_QUERY

logger = logging.getLogger(__name__)

class ShopifyInventory:
    """Fetches stock data for product variants."""

    def __init__(self, client: StorefrontClient):
        self.client = client

    def get_variants(self, variant_ids: List[str]) -> List[Dict]:
        """Return the variant nodes for the given IDs, skipping unknown IDs."""
        ids = [to_gid(variant_id, "ProductVariant") for variant_id in variant_ids]
        payload = self.client.execute(INVENTORY_QUERY, {"ids": ids})
        nodes = require_field(payload, "nodes", "Failed to fetch inventory data")

        variants = [node for node in nodes if isinstance(node, dict) and node.get("id")]
        if len(variants) < len(ids):
            logger.warning(f"{len(ids) - len(variants)} of {len(ids)} variant IDs were not found")
        return variants
