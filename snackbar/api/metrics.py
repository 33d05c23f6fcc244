import time
from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Counter, Histogram, generate_latest
from starlette.routing import Match


# Paths that match no route share one label value.
UNMATCHED_PATH = "unmatched"


class RequestMetrics:
    """
    Per-application HTTP request metrics in the Prometheus exposition format.

    Each app owns its own CollectorRegistry, so two apps in one process
    (for example in tests) never see each other's counts.
    """

    def __init__(self, namespace: str = "snackbar") -> None:
        self.registry = CollectorRegistry()
        self.requests = Counter(
            "requests_total",
            "Number of HTTP requests handled",
            ["method", "path", "status"],
            namespace=namespace,
            registry=self.registry,
        )
        self.duration = Histogram(
            "request_duration_seconds",
            "Time spent handling HTTP requests",
            ["method", "path"],
            namespace=namespace,
            registry=self.registry,
        )

    def observe(self, method: str, path: str, status_code: int, seconds: float) -> None:
        self.requests.labels(method=method, path=path, status=str(status_code)).inc()
        self.duration.labels(method=method, path=path).observe(seconds)

    def render(self) -> Response:
        return Response(content=generate_latest(self.registry), media_type=CONTENT_TYPE_LATEST)


def route_template(request: Request) -> str:
    """Returns the route pattern (`/v1/sales/{sale_id}`) rather than the raw URL path."""
    for route in request.app.router.routes:
        match, _ = route.matches(request.scope)
        if match == Match.FULL:
            return getattr(route, "path", UNMATCHED_PATH)
    return UNMATCHED_PATH


async def record_metrics(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    """Counts every request and its latency, labelled by method, route and status."""
    start = time.perf_counter()
    response = await call_next(request)
    request.app.state.metrics.observe(
        request.method,
        route_template(request),
        response.status_code,
        time.perf_counter() - start,
    )
    return response
