"""Storefront provider - runs the upstream operations and converts results to projections."""

import logging
from contextlib import contextmanager
from typing import Dict, List, Optional
from pydantic import ValidationError as ModelValidationError
from ...errors import UpstreamError
from ...models import (
    Collection, CollectionPage, CollectionProduct, CollectionRef, Image, ImageDetail,
    InventoryItem, InventoryProduct, InventoryReport, InventorySummary, Pagination,
    PriceRange, ProductDetail, ProductSummary, SearchArgs, SearchPage, SelectedOption,
    StockLevel, Variant, VariantDetail,
)
from .client import StorefrontClient
from .collections import ShopifyCollections
from .inventory import ShopifyInventory
from .products import ShopifyProducts

logger = logging.getLogger(__name__)

LOW_STOCK_THRESHOLD = 5


def _nodes(connection: Optional[Dict]) -> List[Dict]:
    """Unwrap a GraphQL connection's edges into their nodes."""
    edges = (connection or {}).get("edges") or []
    return [edge["node"] for edge in edges if edge and edge.get("node")]


def _amount(money: Optional[Dict]) -> Optional[str]:
    return money.get("amount") if money else None


def _safe_int(value, default=None):
    try:
        return int(value) if value is not None else default
    except (TypeError, ValueError):
        return default


def _safe_float(value, default=None):
    try:
        return float(value) if value is not None else default
    except (TypeError, ValueError):
        return default


def _is_available(variant: Dict) -> bool:
    return bool(variant.get("availableForSale")) or (_safe_int(variant.get("quantityAvailable"), 0) > 0)


@contextmanager
def _malformed_payload(what: str):
    """Report nodes missing required keys or holding the wrong types as an upstream failure."""
    try:
        yield
    except (KeyError, TypeError, AttributeError, ModelValidationError) as e:
        logger.error(f"Malformed {what} in Storefront response: {e!r}")
        raise UpstreamError(f"Storefront API returned malformed {what} data") from e


class StorefrontProvider:
    """Shopify Storefront integration provider."""

    def __init__(self, client: StorefrontClient):
        self.client = client
        self.products_api = ShopifyProducts(client)
        self.inventory_api = ShopifyInventory(client)
        self.collections_api = ShopifyCollections(client)

    def search_products(self, args: SearchArgs) -> SearchPage:
        """Search products and convert them to summaries with pagination info."""
        connection = self.products_api.search(query=args.query, first=args.limit, after=args.cursor)
        with _malformed_payload("product"):
            products = [self._convert_product(node) for node in _nodes(connection)]
            pagination = self._convert_page_info(connection, len(products))
        logger.info(
            f"Search for {args.query!r} returned {len(products)} products",
            extra={"meta": {"query": args.query, "limit": args.limit, "cursor": args.cursor}}
        )
        return SearchPage(products=products, pagination=pagination)

    def get_product_by_id(self, product_id: str) -> ProductDetail:
        """Get a single product with variants, images and collections."""
        product = self.products_api.get_by_id(product_id)
        with _malformed_payload("product"):
            return self._convert_product_detail(product)

    def check_inventory(self, variant_ids: List[str]) -> InventoryReport:
        """Check stock for a batch of variants."""
        nodes = self.inventory_api.get_variants(variant_ids)
        with _malformed_payload("variant"):
            items = [self._convert_inventory_item(node) for node in nodes]
        return InventoryReport(inventory=items, summary=self._summarize_inventory(items))

    def list_collections(self, first: int = 20, after: Optional[str] = None) -> CollectionPage:
        """List collections; products are always converted, callers decide whether to expose them."""
        connection = self.collections_api.list(first=first, after=after)
        with _malformed_payload("collection"):
            collections = [self._convert_collection(node) for node in _nodes(connection)]
            pagination = self._convert_page_info(connection, len(collections))
        return CollectionPage(collections=collections, pagination=pagination)

    def _convert_page_info(self, connection: Dict, count: int) -> Pagination:
        page_info = connection.get("pageInfo") or {}
        return Pagination(
            has_next_page=bool(page_info.get("hasNextPage")),
            end_cursor=page_info.get("endCursor"),
            total_count=count
        )

    def _convert_price_range(self, price_range: Optional[Dict]) -> PriceRange:
        price_range = price_range or {}
        minimum = price_range.get("minVariantPrice") or {}
        maximum = price_range.get("maxVariantPrice") or minimum
        return PriceRange(
            min=minimum.get("amount"),
            max=maximum.get("amount"),
            currency=minimum.get("currencyCode")
        )

    def _convert_variant(self, variant: Dict, detail: bool = False) -> Variant:
        fields = dict(
            id=variant["id"],
            title=variant.get("title"),
            sku=variant.get("sku") or None,
            price=_amount(variant.get("price")),
            compare_at_price=_amount(variant.get("compareAtPrice")),
            inventory_quantity=_safe_int(variant.get("quantityAvailable")),
            available_for_sale=bool(variant.get("availableForSale")),
            options=[
                SelectedOption(name=option["name"], value=option["value"])
                for option in variant.get("selectedOptions") or []
            ]
        )
        if detail:
            return VariantDetail(
                weight=_safe_float(variant.get("weight")),
                weight_unit=variant.get("weightUnit"),
                **fields
            )
        return Variant(**fields)

    def _convert_product(self, product: Dict) -> ProductSummary:
        """Convert a Storefront product node to ProductSummary - handles None values."""
        variants = _nodes(product.get("variants"))
        return ProductSummary(
            id=product["id"],
            title=product.get("title") or "",
            handle=product.get("handle") or "",
            description=product.get("description") or "",
            description_html=product.get("descriptionHtml"),
            product_type=product.get("productType"),
            vendor=product.get("vendor"),
            tags=product.get("tags") or [],
            price_range=self._convert_price_range(product.get("priceRange")),
            in_stock=any(_is_available(v) for v in variants),
            variants=[self._convert_variant(v) for v in variants],
            images=[
                Image(url=image["url"], alt_text=image.get("altText"))
                for image in _nodes(product.get("images")) if image.get("url")
            ]
        )

    def _convert_product_detail(self, product: Dict) -> ProductDetail:
        variants = _nodes(product.get("variants"))
        return ProductDetail(
            id=product["id"],
            title=product.get("title") or "",
            handle=product.get("handle") or "",
            description=product.get("description") or "",
            product_type=product.get("productType"),
            vendor=product.get("vendor"),
            tags=product.get("tags") or [],
            price_range=self._convert_price_range(product.get("priceRange")),
            in_stock=any(_is_available(v) for v in variants),
            variants=[self._convert_variant(v, detail=True) for v in variants],
            images=[
                ImageDetail(
                    url=image["url"],
                    alt_text=image.get("altText"),
                    width=_safe_int(image.get("width")),
                    height=_safe_int(image.get("height"))
                )
                for image in _nodes(product.get("images")) if image.get("url")
            ],
            collections=[
                CollectionRef(id=c["id"], title=c.get("title") or "", handle=c.get("handle") or "")
                for c in _nodes(product.get("collections"))
            ],
            total_variants=len(variants)
        )

    def _convert_inventory_item(self, node: Dict) -> InventoryItem:
        product = node.get("product")
        price = node.get("price") or {}
        return InventoryItem(
            id=node["id"],
            sku=node.get("sku") or None,
            title=node.get("title"),
            inventory_quantity=_safe_int(node.get("quantityAvailable")),
            available_for_sale=bool(node.get("availableForSale")),
            price=price.get("amount"),
            currency=price.get("currencyCode"),
            product=InventoryProduct(title=product.get("title"), handle=product.get("handle")) if product else None
        )

    def _summarize_inventory(self, items: List[InventoryItem]) -> InventorySummary:
        """Count stock states; availability stands in when the quantity is not exposed."""
        in_stock = out_of_stock = low_stock = 0
        for item in items:
            quantity = item.inventory_quantity
            if quantity is None:
                if item.available_for_sale:
                    in_stock += 1
                else:
                    out_of_stock += 1
                continue
            if quantity > 0:
                in_stock += 1
                if quantity <= LOW_STOCK_THRESHOLD:
                    low_stock += 1
            elif quantity == 0:
                out_of_stock += 1
        return InventorySummary(
            total_variants=len(items),
            in_stock=in_stock,
            out_of_stock=out_of_stock,
            low_stock=low_stock
        )

    def _convert_collection(self, collection: Dict) -> Collection:
        products = []
        for product in _nodes(collection.get("products")):
            first_variant = next(iter(_nodes(product.get("variants"))), None)
            first_image = next(iter(_nodes(product.get("images"))), None)
            products.append(CollectionProduct(
                id=product["id"],
                title=product.get("title") or "",
                handle=product.get("handle") or "",
                price_range=self._convert_price_range(product.get("priceRange")),
                inventory=StockLevel(
                    quantity=_safe_int(first_variant.get("quantityAvailable")),
                    available_for_sale=bool(first_variant.get("availableForSale"))
                ) if first_variant else None,
                image=Image(url=first_image["url"], alt_text=first_image.get("altText"))
                if first_image and first_image.get("url") else None
            ))

        return Collection(
            id=collection["id"],
            title=collection.get("title") or "",
            handle=collection.get("handle") or "",
            description=collection.get("description"),
            products=products
        )
