# storefront_gateway/models.py

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for response projections; serialized with camelCase keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Request-side models

class RawRequest(BaseModel):
    """The parts of an incoming HTTP request the normalizer looks at."""
    query_params: Dict[str, str] = {}
    body: Any = None


class NormalizedCall(BaseModel):
    """Argument mapping recovered from whichever caller convention was used."""
    arguments: Dict[str, Any] = {}
    tool_call_id: Optional[str] = None
    source: str = "default"

    @property
    def is_tool_call(self) -> bool:
        return self.tool_call_id is not None


class SearchArgs(BaseModel):
    query: str = ""
    limit: int = Field(default=5, ge=1, le=50)
    cursor: Optional[str] = None


class InventoryArgs(BaseModel):
    variant_ids: List[str]


# Upstream projections

class PriceRange(CamelModel):
    min: Optional[str] = None
    max: Optional[str] = None
    currency: Optional[str] = None


class SelectedOption(CamelModel):
    name: str
    value: str


class Variant(CamelModel):
    id: str
    title: Optional[str] = None
    sku: Optional[str] = None
    price: Optional[str] = None
    compare_at_price: Optional[str] = None
    inventory_quantity: Optional[int] = None
    available_for_sale: bool = False
    options: List[SelectedOption] = []


class VariantDetail(Variant):
    weight: Optional[float] = None
    weight_unit: Optional[str] = None


class Image(CamelModel):
    url: str
    alt_text: Optional[str] = None


class ImageDetail(Image):
    width: Optional[int] = None
    height: Optional[int] = None


class CollectionRef(CamelModel):
    id: str
    title: str
    handle: str


class ProductSummary(CamelModel):
    """Product as returned by search."""
    id: str
    title: str
    handle: str
    description: str = ""
    description_html: Optional[str] = Field(default=None, exclude=True)
    product_type: Optional[str] = None
    vendor: Optional[str] = None
    tags: List[str] = []
    price_range: PriceRange
    in_stock: bool = False
    variants: List[Variant] = []
    images: List[Image] = []


class ProductDetail(ProductSummary):
    """Full product projection for the by-ID lookup."""
    variants: List[VariantDetail] = []
    images: List[ImageDetail] = []
    collections: List[CollectionRef] = []
    total_variants: int = 0


class Pagination(CamelModel):
    has_next_page: bool = False
    end_cursor: Optional[str] = None
    total_count: int = 0


class SearchPage(CamelModel):
    products: List[ProductSummary]
    pagination: Pagination


class InventoryProduct(CamelModel):
    title: Optional[str] = None
    handle: Optional[str] = None


class InventoryItem(CamelModel):
    id: str
    sku: Optional[str] = None
    title: Optional[str] = None
    inventory_quantity: Optional[int] = None
    available_for_sale: bool = False
    price: Optional[str] = None
    currency: Optional[str] = None
    product: Optional[InventoryProduct] = None


class InventorySummary(CamelModel):
    total_variants: int = 0
    in_stock: int = 0
    out_of_stock: int = 0
    low_stock: int = 0


class InventoryReport(CamelModel):
    inventory: List[InventoryItem]
    summary: InventorySummary


class StockLevel(CamelModel):
    quantity: Optional[int] = None
    available_for_sale: bool = False


class CollectionProduct(CamelModel):
    id: str
    title: str
    handle: str
    price_range: PriceRange
    inventory: Optional[StockLevel] = None
    image: Optional[Image] = None


class Collection(CamelModel):
    id: str
    title: str
    handle: str
    description: Optional[str] = None
    products: List[CollectionProduct] = []


class CollectionPage(CamelModel):
    collections: List[Collection]
    pagination: Pagination
