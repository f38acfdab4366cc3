import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.routing import Match

from fontpack.metrics import REQUEST_COUNT, REQUEST_ERRORS, REQUEST_LATENCY


def _route_path(request: Request) -> str:
    # Label by route template so query strings and asset names do not explode cardinality.
    for route in request.app.router.routes:
        match, _ = route.matches(request.scope)
        if match is Match.FULL:
            return getattr(route, "path", request.url.path)
    return "unmatched"


class ObservabilityMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start = time.monotonic()
        status = "500"
        try:
            response = await call_next(request)
            status = str(response.status_code)
            return response
        finally:
            path = _route_path(request)
            elapsed = time.monotonic() - start
            REQUEST_COUNT.labels(method=request.method, path=path, status=status).inc()
            REQUEST_LATENCY.labels(method=request.method, path=path, status=status).observe(elapsed)
            if status.startswith("5"):
                REQUEST_ERRORS.labels(method=request.method, path=path, status=status).inc()
