# debug_storefront.py
"""Debug Storefront configuration and connection against a live store"""

import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from storefront_gateway.config import load_config
from storefront_gateway.errors import ConfigurationError, GatewayError
from storefront_gateway.integrations.shopify.client import StorefrontClient
from storefront_gateway.integrations.shopify.provider import StorefrontProvider
from storefront_gateway.models import SearchArgs

def debug_storefront_config():
    """Check that the environment validates and the Storefront API answers."""

    print("🛍️ Storefront Configuration Debug")
    print("=" * 50)

    try:
        config = load_config()
    except ConfigurationError as e:
        print(f"\n❌ PROBLEM FOUND: {e}")
        print("Set these in your environment or .env file:")
        print("SHOPIFY_STORE_DOMAIN=your-store.myshopify.com")
        print("SHOPIFY_API_VERSION=2024-04")
        return None

    print("Configuration values:")
    print(f"SHOPIFY_STORE_DOMAIN: {config.SHOPIFY_STORE_DOMAIN}")
    print(f"SHOPIFY_API_VERSION: {config.SHOPIFY_API_VERSION}")
    print(f"SHOPIFY_REQUEST_TIMEOUT: {config.SHOPIFY_REQUEST_TIMEOUT}s")
    print(f"Endpoint: {config.storefront_endpoint}")
    return config

def debug_search(config, query: str = "shirt"):
    """Run a product search and a follow-up product lookup."""

    print(f"\n🔌 Testing Storefront search for '{query}'...")
    client = StorefrontClient(
        config.SHOPIFY_STORE_DOMAIN,
        api_version=config.SHOPIFY_API_VERSION,
        timeout=config.SHOPIFY_REQUEST_TIMEOUT
    )
    provider = StorefrontProvider(client)

    try:
        page = provider.search_products(SearchArgs(query=query, limit=5))
    except GatewayError as e:
        print(f"❌ Storefront search failed: {e.message}")
        return False

    print(f"✅ Found {len(page.products)} products (has next page: {page.pagination.has_next_page})")
    for i, product in enumerate(page.products):
        print(f"  {i+1}. {product.title} (ID: {product.id}) ${product.price_range.min}")

    if page.products:
        sample = page.products[0]
        print(f"\n📦 Fetching product {sample.id}...")
        try:
            detail = provider.get_product_by_id(sample.id)
            print(f"✅ {detail.title}: {detail.total_variants} variants, in stock: {detail.in_stock}")
        except GatewayError as e:
            print(f"❌ Product lookup failed: {e.message}")
            return False

    return True

if __name__ == "__main__":
    config = debug_storefront_config()

    search_ok = debug_search(config, sys.argv[1] if len(sys.argv) > 1 else "shirt") if config else False

    print("\n🎯 Summary")
    print("=" * 50)
    if search_ok:
        print("✅ Storefront is configured and answering")
    else:
        print("❌ Storefront configuration or connectivity is the problem")
