"""
Shared fixtures: a fake Storefront transport and an app wired to it.

The gateway module builds its app at import time from the environment, so a
valid store domain is set before anything from the package is imported.
"""

import copy
import os
import re

os.environ.setdefault("SHOPIFY_STORE_DOMAIN", "test-store.myshopify.com")
os.environ.setdefault("ENVIRONMENT", "test")

import pytest
from fastapi.testclient import TestClient

from storefront_gateway.api.main import create_app
from storefront_gateway.config import Config


OPERATION_NAME = re.compile(r"query\s+(\w+)")


class FakeStorefrontClient:
    """Stands in for StorefrontClient; answers by GraphQL operation name."""

    def __init__(self, responses=None):
        self.responses = responses or {}
        self.calls = []

    def execute(self, query, variables=None):
        operation = OPERATION_NAME.search(query).group(1)
        self.calls.append((operation, variables))
        response = self.responses.get(operation)
        if isinstance(response, Exception):
            raise response
        return copy.deepcopy(response) if response is not None else {"data": {}}


def money(amount, currency="USD"):
    return {"amount": amount, "currencyCode": currency}


def connection(nodes, has_next_page=False, end_cursor=None):
    return {
        "edges": [{"node": node} for node in nodes],
        "pageInfo": {"hasNextPage": has_next_page, "endCursor": end_cursor},
    }


def variant_node(variant_id, quantity=3, available=True, sku="SKU-1", price="19.99", **extra):
    node = {
        "id": f"gid://shopify/ProductVariant/{variant_id}",
        "title": "Default Title",
        "sku": sku,
        "price": money(price),
        "compareAtPrice": None,
        "quantityAvailable": quantity,
        "availableForSale": available,
        "selectedOptions": [{"name": "Size", "value": "M"}],
    }
    node.update(extra)
    return node


def product_node(product_id, title, variants=None, description_html=None, **extra):
    variants = variants if variants is not None else [variant_node(product_id * 10)]
    node = {
        "id": f"gid://shopify/Product/{product_id}",
        "title": title,
        "handle": title.lower().replace(" ", "-"),
        "description": f"{title} description",
        "descriptionHtml": description_html,
        "productType": "Apparel",
        "tags": ["summer"],
        "vendor": "Acme",
        "priceRange": {"minVariantPrice": money("19.99"), "maxVariantPrice": money("24.99")},
        "variants": connection(variants),
        "images": connection([{"url": f"https://cdn.example.com/{product_id}.jpg", "altText": title}]),
    }
    node.update(extra)
    return node


def search_response(nodes, has_next_page=False, end_cursor=None):
    return {"data": {"products": connection(nodes, has_next_page, end_cursor)}}


@pytest.fixture
def test_config():
    return Config(_env_file=None, SHOPIFY_STORE_DOMAIN="test-store.myshopify.com", ENVIRONMENT="test")


@pytest.fixture
def storefront():
    return FakeStorefrontClient({
        "ProductSearch": search_response(
            [product_node(1, "Red T-Shirt"), product_node(2, "Blue T-Shirt")],
            has_next_page=True,
            end_cursor="cursor-2",
        ),
    })


@pytest.fixture
def app(test_config, storefront):
    return create_app(test_config, client=storefront)


@pytest.fixture
def client(app):
    return TestClient(app)
