"""Turn route results and errors into HTTP responses for plain and tool-call callers."""

import json
import logging
import re
from enum import Enum
from typing import Any, List, Optional

from fastapi.responses import JSONResponse, PlainTextResponse, Response

from ..errors import GatewayError
from ..models import NormalizedCall, ProductSummary
from .normalizer import UNKNOWN_TOOL_CALL_ID

logger = logging.getLogger(__name__)

CONDITION_ROW = re.compile(
    r"<tr[^>]*>.*?<td[^>]*>.*?condition.*?</td>.*?<td[^>]*>(.*?)</td>.*?</tr>",
    re.IGNORECASE | re.DOTALL,
)
HTML_TAG = re.compile(r"<[^>]*>")


class ResultStyle(str, Enum):
    """How a route's result is carried inside the tool-call envelope."""
    STRUCTURED = "structured"
    JSON_STRING = "json_string"
    TEXT = "text"


def tool_call_envelope(tool_call_id: Optional[str], result: Any) -> dict:
    return {"results": [{"toolCallId": tool_call_id or UNKNOWN_TOOL_CALL_ID, "result": result}]}


def shape_response(call: Optional[NormalizedCall], result: Any, style: ResultStyle) -> Response:
    """
    Build the success response.

    Tool-call callers always get the ``results`` envelope; plain callers get
    the result itself, as text/plain for TEXT routes and JSON otherwise.
    """
    if call is not None and call.is_tool_call:
        if style is ResultStyle.JSON_STRING:
            result = json.dumps(result)
        return JSONResponse(tool_call_envelope(call.tool_call_id, result))

    if style is ResultStyle.TEXT:
        return PlainTextResponse(result)
    return JSONResponse(result)


def shape_error(call: Optional[NormalizedCall], error: GatewayError) -> JSONResponse:
    """
    Build the failure response.

    Tool-call callers see HTTP 200 for validation and not-found failures and
    HTTP 500 for upstream and internal failures, with the message inside
    ``result``.
    """
    if call is not None and call.is_tool_call:
        status_code = 500 if error.status_code >= 500 else 200
        return JSONResponse(
            tool_call_envelope(call.tool_call_id, {"error": error.message}),
            status_code=status_code,
        )
    return JSONResponse({"error": error.message}, status_code=error.status_code)


def extract_condition(description_html: Optional[str]) -> str:
    """Read the value cell of a 'condition' row from a product description table."""
    if not description_html:
        return "Unknown"
    match = CONDITION_ROW.search(description_html)
    if not match:
        return "Unknown"
    return HTML_TAG.sub("", match.group(1)).strip() or "Unknown"


def search_text_summary(query: str, products: List[ProductSummary]) -> str:
    """Human-readable search result for voice/chat callers."""
    if not products:
        return f'No products found for "{query}". Please try a different search term.'

    lines = [f'Found {len(products)} product{"" if len(products) == 1 else "s"} for "{query}":', ""]
    for index, product in enumerate(products, start=1):
        sku = product.variants[0].sku if product.variants and product.variants[0].sku else "N/A"
        price = f"${product.price_range.min}" if product.price_range.min else "N/A"
        lines += [
            f"{index}. {product.title}",
            f"   Price: {price}",
            f"   Condition: {extract_condition(product.description_html)}",
            f"   SKU: {sku}",
            f"   In Stock: {'Yes' if product.in_stock else 'No'}",
            "",
        ]
    return "\n".join(lines) + "\n"
