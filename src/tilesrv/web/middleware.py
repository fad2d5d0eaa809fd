"""
aiohttp middlewares and response hooks.

Request logging and metrics, the clacks header, optional CORS handling
and optional support for reverse-proxy forwarding headers.
"""

import logging
import time

from aiohttp import web
from aiohttp.typedefs import Handler

from tilesrv.web.metrics import RequestMetrics

logger = logging.getLogger(__name__)

METRICS_KEY = web.AppKey("metrics", RequestMetrics)

CORS_ALLOWED_HEADERS = (
    "Content-Type",
    "Cache-Control",
    "ETag",
    "Expires",
    "Last-Modified",
    "Content-Length",
)
CORS_ALLOWED_METHODS = ("GET", "HEAD", "POST", "DELETE", "PUT")
CORS_EXPOSED_HEADERS = (
    "X-Clacks-Overhead",
    "Cache-Control",
    "ETag",
    "Expires",
    "Last-Modified",
)


@web.middleware
async def request_logging_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
    """Log every request and count it in the application's metrics."""
    start = time.time()
    status = 500

    try:
        response = await handler(request)
        status = response.status
        return response
    except web.HTTPException as e:
        status = e.status
        raise
    finally:
        delta = time.time() - start
        metrics = request.app.get(METRICS_KEY)
        if metrics is not None:
            metrics.record(request.method, status)
        logger.info(
            "Request handled: addr: %s, method: %s, uri: %s, userAgent: %s, "
            "startTime: %d, deltaTime: %d, status: %d",
            request.remote,
            request.method,
            request.path_qs,
            request.headers.get("User-Agent", ""),
            int(start * 1_000_000),
            int(delta * 1_000_000),
            status,
        )


async def add_clacks_header(request: web.Request, response: web.StreamResponse) -> None:
    """Say no more."""
    response.headers["X-Clacks-Overhead"] = "GNU Terry Pratchett"


@web.middleware
async def cors_preflight_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
    """Answer CORS preflight requests without routing them."""
    if request.method == "OPTIONS" and "Origin" in request.headers:
        return web.Response(status=200)
    return await handler(request)


async def add_cors_headers(request: web.Request, response: web.StreamResponse) -> None:
    """Add CORS headers to responses for cross-origin requests."""
    origin = request.headers.get("Origin")
    if not origin:
        return

    # Credentials are allowed, so the origin is echoed back rather than "*"
    response.headers["Access-Control-Allow-Origin"] = origin
    response.headers["Access-Control-Allow-Credentials"] = "true"
    vary = response.headers.get("Vary")
    if not vary:
        response.headers["Vary"] = "Origin"
    elif "origin" not in (v.strip().lower() for v in vary.split(",")):
        response.headers["Vary"] = f"{vary}, Origin"

    if request.method == "OPTIONS":
        response.headers["Access-Control-Allow-Methods"] = ", ".join(CORS_ALLOWED_METHODS)
        response.headers["Access-Control-Allow-Headers"] = ", ".join(CORS_ALLOWED_HEADERS)
    else:
        response.headers["Access-Control-Expose-Headers"] = ", ".join(CORS_EXPOSED_HEADERS)


@web.middleware
async def proxy_headers_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
    """Rewrite remote address, scheme and host from forwarding headers."""
    overrides = {}

    forwarded_for = request.headers.get("X-Forwarded-For")
    real_ip = request.headers.get("X-Real-IP")
    if forwarded_for:
        overrides["remote"] = forwarded_for.split(",")[0].strip()
    elif real_ip:
        overrides["remote"] = real_ip.strip()

    scheme = request.headers.get("X-Forwarded-Proto")
    if scheme:
        overrides["scheme"] = scheme.split(",")[0].strip().lower()

    host = request.headers.get("X-Forwarded-Host")
    if host:
        overrides["host"] = host.split(",")[0].strip()

    if overrides:
        request = request.clone(**overrides)

    return await handler(request)
