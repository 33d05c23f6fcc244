import logging
import time
from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse

from snackbar.api.metrics import RequestMetrics, record_metrics
from snackbar.api.routes import router
from snackbar.core.config import Settings
from snackbar.core.errors import (
    CatalogEntryNotFound,
    OperationCancelled,
    SaleError,
    SaleNotFound,
    SaleValidationError,
    StorageFailure,
)
from snackbar.data_access.database import build_engine, create_db_and_tables


logger = logging.getLogger(__name__)

# Most specific class first; the first match wins.
ERROR_STATUS: list[tuple[type[SaleError], int]] = [
    (SaleValidationError, status.HTTP_400_BAD_REQUEST),
    (CatalogEntryNotFound, status.HTTP_404_NOT_FOUND),
    (SaleNotFound, status.HTTP_404_NOT_FOUND),
    (OperationCancelled, status.HTTP_504_GATEWAY_TIMEOUT),
    (StorageFailure, status.HTTP_500_INTERNAL_SERVER_ERROR),
]

async def sale_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Translates sale core errors into JSON responses."""
    status_code = next(
        (code for error_type, code in ERROR_STATUS if isinstance(exc, error_type)),
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})

async def log_requests(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    """Logs method, path, status, duration and client address of every request."""
    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - start) * 1000
    client = request.client.host if request.client else "-"
    logger.info(
        f"{request.method} {request.url.path} -> {response.status_code} "
        f"in {duration_ms:.1f}ms (client={client})"
    )
    return response

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Builds the API around an explicit Settings object.

    Args:
        settings (Optional[Settings]): Configuration; read from the environment if omitted.

    Returns:
        FastAPI: The configured application.
    """
    settings = settings or Settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Handles system startup and shutdown events.

        Initializes logging and creates the SQL tables if they don't exist.
        """
        logging.basicConfig(
            level=settings.LOG_LEVEL.upper(),
            format="%(asctime)s [%(levelname)s] %(message)s",
            handlers=[logging.StreamHandler()] # This sends it to the Terminal
        )

        create_db_and_tables(app.state.engine)

        yield

        app.state.engine.dispose()

    # Define the FastAPI app with metadata for Swagger UI
    app = FastAPI(
        title="Snackbar POS API",
        description="Catalog management and point-of-sale recording for a snack bar",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.settings = settings
    app.state.engine = build_engine(settings.DATABASE_URL)
    app.state.metrics = RequestMetrics()

    app.add_exception_handler(SaleError, sale_error_handler)
    app.middleware("http")(log_requests)
    app.middleware("http")(record_metrics)

    # Include our routes
    app.include_router(router)

    @app.get("/")
    def read_root() -> dict[str, str]:
        """Landing endpoint for the API.

        Returns:
            Dict[str, str]: A welcome message.
        """
        return {"message": "Welcome to the Snackbar POS API"}

    @app.get("/metrics", include_in_schema=False)
    def read_metrics() -> Response:
        """Request counts and latencies per route, for Prometheus to scrape."""
        return app.state.metrics.render()

    return app
