from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from starlette.exceptions import HTTPException

from src.api.router import api_router
from src.config import settings
from src.database import engine
from src.errors import InfrastructureError
from src.middleware.access_log import AccessLogMiddleware
from src.middleware.error_handler import (
    http_exception_handler,
    infrastructure_error_handler,
    unhandled_exception_handler,
)
from src.middleware.request_id import RequestIdMiddleware
from src.services.orchestrator import check_connection

_OPENAPI_TAGS = [
    {"name": "Health", "description": "Health check endpoints"},
    {"name": "Verification", "description": "Row counts after a seed run"},
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    # Startup: refuse to serve without a reachable database
    await check_connection(engine)
    yield
    await engine.dispose()


app = FastAPI(
    title=settings.app_name,
    description="Operator API for the tea-auction stock ledger",
    version=settings.version,
    debug=settings.debug,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=_OPENAPI_TAGS,
)

# ---------------------------------------------------------------------------
# Exception handlers
# ---------------------------------------------------------------------------

app.add_exception_handler(HTTPException, http_exception_handler)  # type: ignore[arg-type]
app.add_exception_handler(InfrastructureError, infrastructure_error_handler)  # type: ignore[arg-type]
app.add_exception_handler(Exception, unhandled_exception_handler)

# ---------------------------------------------------------------------------
# Middleware (Starlette LIFO: last add_middleware call runs outermost)
# ---------------------------------------------------------------------------

# AccessLogMiddleware reads REQUEST_ID_CTX, so it must run inside RequestIdMiddleware.
app.add_middleware(AccessLogMiddleware)
app.add_middleware(RequestIdMiddleware)

app.include_router(api_router)
