"""
Reduce the caller conventions accepted by the gateway to one argument mapping.

A caller can reach the search and inventory routes with:

1. plain query parameters (``?q=shoe&limit=3``)
2. a plain JSON body (``{"q": "shoe", "limit": 3}``)
3. a tool-call envelope in the body (``{"message": {"toolCallList": [...]}}``)
4. the same envelope URL-encoded into the ``message`` query parameter
5. a bare ``{"toolCall": {...}}`` or ``{"arguments": {...}}`` body

The shapes overlap, so the extractors in ``EXTRACTORS`` are tried in order and
the first one that recognises its shape wins. Only ``toolCallList[0]`` is
honoured; any further tool calls in the same batch are ignored.
"""

import json
import logging
import math
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Sequence
from urllib.parse import unquote

from ..errors import ValidationError
from ..integrations.shopify.gid import to_gid
from ..models import InventoryArgs, NormalizedCall, RawRequest, SearchArgs

logger = logging.getLogger(__name__)

UNKNOWN_TOOL_CALL_ID = "unknown"

MIN_LIMIT = 1
MAX_LIMIT = 50
MAX_INVENTORY_IDS = 50

SEARCH_FIELDS = ("q", "query", "limit", "cursor")
INVENTORY_FIELDS = ("ids", "variantIds")


def parse_json_body(raw: Optional[bytes]) -> Any:
    """Decode a request body; empty or malformed JSON is treated as no body."""
    if not raw or not raw.strip():
        return None
    try:
        return json.loads(raw)
    except (ValueError, UnicodeDecodeError):
        logger.debug("Ignoring request body that is not valid JSON")
        return None


def _loads(text: Any) -> Any:
    if not isinstance(text, str):
        return None
    try:
        return json.loads(text)
    except ValueError:
        return None


def _as_mapping(value: Any) -> Optional[Dict[str, Any]]:
    """Accept a mapping, or a string holding a JSON object."""
    if isinstance(value, str):
        value = _loads(value)
    if isinstance(value, Mapping):
        return dict(value)
    return None


def _tool_call_arguments(tool_call: Mapping) -> Dict[str, Any]:
    candidates = [tool_call.get("arguments")]
    function = tool_call.get("function")
    if isinstance(function, Mapping):
        candidates += [function.get("arguments"), function.get("parameters")]

    for candidate in candidates:
        arguments = _as_mapping(candidate)
        if arguments:
            return arguments
    return {}


def _call_from_tool_call(tool_call: Any, source: str, fallback_id: Any = None) -> Optional[NormalizedCall]:
    if not isinstance(tool_call, Mapping):
        return None
    tool_call_id = tool_call.get("id") or fallback_id or UNKNOWN_TOOL_CALL_ID
    return NormalizedCall(
        arguments=_tool_call_arguments(tool_call),
        tool_call_id=str(tool_call_id),
        source=source,
    )


def _call_from_message(message: Any, source: str) -> Optional[NormalizedCall]:
    if not isinstance(message, Mapping):
        return None
    tool_calls = message.get("toolCallList")
    if not isinstance(tool_calls, list) or not tool_calls:
        return None
    if len(tool_calls) > 1:
        logger.warning(f"Received {len(tool_calls)} tool calls; only the first is handled")
    return _call_from_tool_call(tool_calls[0], source)


def _has_any(mapping: Any, fields: Iterable[str]) -> bool:
    return isinstance(mapping, Mapping) and any(field in mapping for field in fields)


# Extractors. Each returns a NormalizedCall when it recognises its shape, else None.

def extract_body_envelope(request: RawRequest, fields: Sequence[str]) -> Optional[NormalizedCall]:
    """``{"message": {"toolCallList": [...]}}`` in the JSON body."""
    if not isinstance(request.body, Mapping):
        return None
    return _call_from_message(request.body.get("message"), "body_envelope")


def extract_direct_tool_call(request: RawRequest, fields: Sequence[str]) -> Optional[NormalizedCall]:
    """``{"toolCall": {...}}`` or ``{"arguments": {...}}`` without the message wrapper."""
    body = request.body
    if not isinstance(body, Mapping):
        return None
    if isinstance(body.get("toolCall"), Mapping):
        return _call_from_tool_call(body["toolCall"], "direct_tool_call", body.get("toolCallId"))
    if _as_mapping(body.get("arguments")) is not None:
        return _call_from_tool_call(body, "direct_arguments", body.get("toolCallId"))
    return None


def extract_query_envelope(request: RawRequest, fields: Sequence[str]) -> Optional[NormalizedCall]:
    """A tool-call envelope passed as JSON in the ``message`` query parameter."""
    raw = request.query_params.get("message")
    if not raw:
        return None
    decoded = _loads(raw)
    if decoded is None:
        decoded = _loads(unquote(raw))
    if not isinstance(decoded, Mapping):
        return None
    # Accept both the bare message object and one still wrapped in {"message": ...}
    message = decoded.get("message") if isinstance(decoded.get("message"), Mapping) else decoded
    return _call_from_message(message, "query_envelope")


def extract_body_fields(request: RawRequest, fields: Sequence[str]) -> Optional[NormalizedCall]:
    """Plain JSON body carrying the route's own fields."""
    if not _has_any(request.body, fields):
        return None
    return NormalizedCall(arguments=dict(request.body), source="body")


def extract_query_fields(request: RawRequest, fields: Sequence[str]) -> Optional[NormalizedCall]:
    """Plain query parameters carrying the route's own fields."""
    if not _has_any(request.query_params, fields):
        return None
    arguments = {key: value for key, value in request.query_params.items() if key != "message"}
    return NormalizedCall(arguments=arguments, source="query")


Extractor = Callable[[RawRequest, Sequence[str]], Optional[NormalizedCall]]

EXTRACTORS: Sequence[Extractor] = (
    extract_body_envelope,
    extract_direct_tool_call,
    extract_query_envelope,
    extract_body_fields,
    extract_query_fields,
)


def normalize_call(request: RawRequest, fields: Sequence[str] = SEARCH_FIELDS) -> NormalizedCall:
    """
    Run the extractors in order and return the first match.

    Never raises: a request nothing recognises yields empty arguments, which
    the argument builders turn into route defaults.
    """
    for extractor in EXTRACTORS:
        call = extractor(request, fields)
        if call is not None:
            logger.debug(f"Request normalized via {call.source}")
            return call
    return NormalizedCall()


def coerce_limit(value: Any, default: int) -> int:
    """Numeric coercion with fallback to ``default``, clamped to [MIN_LIMIT, MAX_LIMIT]."""
    number = float(default)
    if isinstance(value, int) and not isinstance(value, bool):
        # JSON integers can be too large for float()
        return max(MIN_LIMIT, min(MAX_LIMIT, value))
    if value is not None and not isinstance(value, bool):
        try:
            number = float(value)
        except (TypeError, ValueError, OverflowError):
            number = float(default)
        if math.isnan(number):
            number = float(default)

    if math.isinf(number):
        return MAX_LIMIT if number > 0 else MIN_LIMIT
    return max(MIN_LIMIT, min(MAX_LIMIT, int(number)))


def search_args(call: NormalizedCall, default_limit: int) -> SearchArgs:
    arguments = call.arguments
    query = arguments.get("q")
    if query is None:
        query = arguments.get("query")
    cursor = arguments.get("cursor")
    return SearchArgs(
        query="" if query is None else str(query),
        limit=coerce_limit(arguments.get("limit"), default_limit),
        cursor=str(cursor) if cursor else None,
    )


def inventory_args(call: NormalizedCall) -> InventoryArgs:
    """Build the variant ID list; accepts ``variantIds`` or ``ids`` as a list or comma string."""
    raw = call.arguments.get("variantIds")
    if raw is None:
        raw = call.arguments.get("ids")
    if raw is None or raw == "":
        raise ValidationError("Variant IDs are required")

    if isinstance(raw, str):
        items = raw.split(",")
    elif isinstance(raw, (list, tuple)):
        items = [item for item in raw if item is not None]
    else:
        items = [raw]

    variant_ids = [str(item).strip() for item in items if str(item).strip()]
    if not variant_ids:
        raise ValidationError("At least one valid variant ID is required")
    if len(variant_ids) > MAX_INVENTORY_IDS:
        raise ValidationError(f"Maximum {MAX_INVENTORY_IDS} variants can be checked at once")

    return InventoryArgs(variant_ids=[to_gid(variant_id, "ProductVariant") for variant_id in variant_ids])
