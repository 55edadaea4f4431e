"""
Shipping Quotes API
FastAPI application entry point

- Multi-carrier (UPS, FedEx) rate quotes, ranked by price
- Demo quotes while carrier credentials are not configured
- OAuth diagnostics endpoint
- Error sanitization middleware
"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shipping_quotes import __version__
from shipping_quotes.api.routes import diag, shipping
from shipping_quotes.core.config import settings
from shipping_quotes.core.error_handler import ErrorSanitizationMiddleware

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

logger = logging.getLogger(__name__)


def configure_logging(level: str = settings.LOG_LEVEL) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format=LOG_FORMAT,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    logger.info(
        f"{settings.APP_NAME} starting: mode={settings.deployment_mode.value} "
        f"demo={settings.demo_mode_enabled} "
        f"timeout={settings.CARRIER_HTTP_TIMEOUT_SECONDS}s"
    )
    yield
    logger.info(f"{settings.APP_NAME} stopped")


app = FastAPI(
    lifespan=lifespan,
    title=settings.APP_NAME,
    description="Compare UPS and FedEx shipping quotes for a single shipment.",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=[
        {"name": "Health", "description": "Health check endpoints"},
        {"name": "Shipping", "description": "Multi-carrier rate quotes"},
        {"name": "Diagnostics", "description": "Carrier OAuth reachability"},
    ],
)

# Error sanitization (catches unhandled exceptions)
app.add_middleware(ErrorSanitizationMiddleware)

# CORS - keep '*' while testing; restrict via CORS_ORIGINS later
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)

app.include_router(shipping.router, prefix="/api", tags=["Shipping"])
app.include_router(diag.router, prefix="/api", tags=["Diagnostics"])


@app.get("/", tags=["Health"])
async def root():
    return {
        "message": settings.APP_NAME,
        "version": __version__,
        "status": "operational",
    }


@app.get("/health", tags=["Health"])
async def health_check():
    return {
        "status": "healthy",
        "mode": settings.deployment_mode.value,
        "demo": settings.demo_mode_enabled,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
