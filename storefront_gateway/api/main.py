# api/main.py
from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.responses import JSONResponse, Response
from storefront_gateway.api.cors import cors_headers
from storefront_gateway.api.normalizer import (
    INVENTORY_FIELDS,
    SEARCH_FIELDS,
    coerce_limit,
    inventory_args,
    normalize_call,
    parse_json_body,
    search_args,
)
from storefront_gateway.api.shaper import ResultStyle, search_text_summary, shape_error, shape_response
from storefront_gateway.config import Config, load_config
from storefront_gateway.debug_log import DebugLogBuffer, configure_logging
from storefront_gateway.errors import GatewayError, UpstreamError
from storefront_gateway.integrations.shopify.client import StorefrontClient
from storefront_gateway.integrations.shopify.provider import StorefrontProvider
from storefront_gateway.models import NormalizedCall, RawRequest
from typing import Optional, Sequence
import logging
import time

logger = logging.getLogger(__name__)

# Default page sizes per route; tool-call oriented entry points use the smaller one
SEARCH_GET_DEFAULT_LIMIT = 20
SEARCH_POST_DEFAULT_LIMIT = 5
CUSTOMER_SEARCH_DEFAULT_LIMIT = 5
COLLECTIONS_DEFAULT_LIMIT = 20

INTERNAL_ERROR_MESSAGE = "Internal server error"

router = APIRouter()


async def read_raw_request(request: Request) -> RawRequest:
    """Capture query parameters and the JSON body; the body is kept for error recovery."""
    body = None
    if request.method == "POST":
        body = parse_json_body(await request.body())
    raw = RawRequest(query_params=dict(request.query_params), body=body)
    request.state.raw = raw
    return raw


def get_provider(request: Request) -> StorefrontProvider:
    return request.app.state.provider


def get_debug_log_buffer(request: Request) -> DebugLogBuffer:
    return request.app.state.debug_logs


def _normalize(request: Request, raw: RawRequest, fields: Sequence[str]) -> NormalizedCall:
    call = normalize_call(raw, fields)
    request.state.call = call
    return call


def _search(request: Request, raw: RawRequest, provider: StorefrontProvider,
            default_limit: int, style: ResultStyle) -> Response:
    call = _normalize(request, raw, SEARCH_FIELDS)
    args = search_args(call, default_limit)
    logger.info(
        f"Search {args.query!r} via {call.source}",
        extra={"meta": {"toolCallId": call.tool_call_id, **args.model_dump()}}
    )

    page = provider.search_products(args)
    if style is ResultStyle.TEXT:
        return shape_response(call, search_text_summary(args.query, page.products), style)
    return shape_response(call, page.model_dump(by_alias=True), style)


@router.get("/search")
def search_products_get(request: Request,
                        raw: RawRequest = Depends(read_raw_request),
                        provider: StorefrontProvider = Depends(get_provider)):
    """Search products from query parameters or a `message` tool-call envelope."""
    return _search(request, raw, provider, SEARCH_GET_DEFAULT_LIMIT, ResultStyle.STRUCTURED)


@router.post("/search")
def search_products_post(request: Request,
                         raw: RawRequest = Depends(read_raw_request),
                         provider: StorefrontProvider = Depends(get_provider)):
    """Search products from a plain JSON body or a tool-call envelope."""
    return _search(request, raw, provider, SEARCH_POST_DEFAULT_LIMIT, ResultStyle.STRUCTURED)


@router.get("/inventory/search")
def customer_search_get(request: Request,
                        raw: RawRequest = Depends(read_raw_request),
                        provider: StorefrontProvider = Depends(get_provider)):
    """Customer-friendly search: a plain-text summary meant to be read aloud."""
    return _search(request, raw, provider, CUSTOMER_SEARCH_DEFAULT_LIMIT, ResultStyle.TEXT)


@router.post("/inventory/search")
def customer_search_post(request: Request,
                         raw: RawRequest = Depends(read_raw_request),
                         provider: StorefrontProvider = Depends(get_provider)):
    return _search(request, raw, provider, CUSTOMER_SEARCH_DEFAULT_LIMIT, ResultStyle.TEXT)


@router.get("/products/{product_id:path}")
def get_product(product_id: str, provider: StorefrontProvider = Depends(get_provider)):
    """Full product projection by raw numeric ID or gid."""
    product = provider.get_product_by_id(product_id)
    return JSONResponse(product.model_dump(by_alias=True))


def _check_inventory(request: Request, raw: RawRequest, provider: StorefrontProvider) -> Response:
    call = _normalize(request, raw, INVENTORY_FIELDS)
    args = inventory_args(call)
    logger.info(
        f"Checking inventory for {len(args.variant_ids)} variants via {call.source}",
        extra={"meta": {"toolCallId": call.tool_call_id, "variantIds": args.variant_ids}}
    )
    report = provider.check_inventory(args.variant_ids)
    return shape_response(call, report.model_dump(by_alias=True), ResultStyle.JSON_STRING)


@router.get("/inventory/check")
def check_inventory_get(request: Request,
                        raw: RawRequest = Depends(read_raw_request),
                        provider: StorefrontProvider = Depends(get_provider)):
    """Check stock for comma-separated variant `ids`."""
    return _check_inventory(request, raw, provider)


@router.post("/inventory/check")
def check_inventory_post(request: Request,
                         raw: RawRequest = Depends(read_raw_request),
                         provider: StorefrontProvider = Depends(get_provider)):
    """Batch stock check from `{"variantIds": [...]}` or a tool-call envelope."""
    return _check_inventory(request, raw, provider)


@router.get("/collections")
def list_collections(limit: Optional[str] = None,
                     cursor: Optional[str] = None,
                     include_products: Optional[str] = None,
                     provider: StorefrontProvider = Depends(get_provider)):
    page = provider.list_collections(
        first=coerce_limit(limit, COLLECTIONS_DEFAULT_LIMIT),
        after=cursor or None
    )
    exclude = None if include_products == "true" else {"collections": {"__all__": {"products"}}}
    return JSONResponse(page.model_dump(by_alias=True, exclude=exclude))


@router.get("/debug/logs")
def read_debug_logs(debug_logs: DebugLogBuffer = Depends(get_debug_log_buffer)):
    """Recent log records, newest first"""
    entries = debug_logs.entries()
    return {"logs": [entry.model_dump() for entry in entries], "count": len(entries)}


@router.delete("/debug/logs")
def clear_debug_logs(debug_logs: DebugLogBuffer = Depends(get_debug_log_buffer)):
    debug_logs.clear()
    return {"message": "Debug logs cleared", "count": 0}


@router.get("/health")
async def health_check():
    """Basic health check"""
    return {"status": "healthy", "service": "storefront-gateway"}


@router.options("/{path:path}")
async def preflight(path: str):
    # CORS headers are added by the middleware
    return Response(status_code=204)


def _recover_call(request: Request) -> Optional[NormalizedCall]:
    call = getattr(request.state, "call", None)
    if call is None:
        # Failed before normalization finished; recover the tool call id from the cached body
        raw = getattr(request.state, "raw", None)
        call = normalize_call(raw) if raw is not None else None
    return call


async def handle_gateway_error(request: Request, exc: GatewayError):
    call = _recover_call(request)

    log = logger.error if isinstance(exc, UpstreamError) else logger.warning
    log(
        f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}",
        extra={"meta": {
            "toolCallId": call.tool_call_id if call else None,
            "upstreamStatus": getattr(exc, "status", None),
        }}
    )
    return shape_error(call, exc)


def handle_unexpected_error(request: Request, exc: Exception) -> Response:
    """Last resort for exceptions no handler claimed; the caller still gets the usual error shape."""
    call = _recover_call(request)
    logger.exception(
        f"Unhandled {type(exc).__name__} on {request.method} {request.url.path}",
        extra={"meta": {"toolCallId": call.tool_call_id if call else None}}
    )
    return shape_error(call, GatewayError(INTERNAL_ERROR_MESSAGE))


def create_app(config: Optional[Config] = None, client: Optional[StorefrontClient] = None) -> FastAPI:
    """
    Build the gateway application.

    Args:
        config: Settings; loaded (and validated) from the environment when omitted
        client: Storefront transport; built from the config when omitted

    Raises:
        ConfigurationError: If the environment is missing or invalid
    """
    config = config or load_config()
    debug_logs = DebugLogBuffer(capacity=config.DEBUG_LOG_CAPACITY)
    configure_logging(config, debug_logs)

    client = client or StorefrontClient(
        config.SHOPIFY_STORE_DOMAIN,
        api_version=config.SHOPIFY_API_VERSION,
        timeout=config.SHOPIFY_REQUEST_TIMEOUT
    )

    app = FastAPI(title="Storefront Gateway API")
    app.state.config = config
    app.state.provider = StorefrontProvider(client)
    app.state.debug_logs = debug_logs

    @app.middleware("http")
    async def cors_and_request_logging(request: Request, call_next):
        started = time.perf_counter()
        origin = request.headers.get("origin")
        client_ip = request.headers.get("x-forwarded-for") or request.headers.get("x-real-ip") or (
            request.client.host if request.client else "unknown"
        )
        logger.info("HTTP Request", extra={"meta": {
            "method": request.method,
            "url": str(request.url),
            "userAgent": request.headers.get("user-agent"),
            "ip": client_ip,
        }})

        try:
            response = await call_next(request)
        except Exception as exc:
            response = handle_unexpected_error(request, exc)
        for name, value in cors_headers(origin).items():
            response.headers[name] = value

        logger.info("HTTP Response", extra={"meta": {
            "method": request.method,
            "url": str(request.url),
            "statusCode": response.status_code,
            "responseTime": f"{(time.perf_counter() - started) * 1000:.0f}ms",
        }})
        return response

    app.add_exception_handler(GatewayError, handle_gateway_error)
    app.include_router(router)

    logger.info(f"Storefront gateway configured for {config.SHOPIFY_STORE_DOMAIN} (API {config.SHOPIFY_API_VERSION})")
    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8001)
