"""
Courier Desk — Web frontend API
Route price calculator, order form and shipment tracking
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import settings
from dependencies import reset_session_store
from routers import geo, orders, quotes
from services.delivery_api import close_delivery_api
from services.maps import close_provider

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logger.info("Courier Desk API starting (maps configured: %s)", bool(settings.GEOAPIFY_API_KEY))
    yield
    await close_provider()
    await close_delivery_api()
    reset_session_store()
    logger.info("Courier Desk API shut down.")


app = FastAPI(
    title="Courier Desk API",
    description="Delivery price calculator, ordering and tracking frontend",
    version="1.0.0",
    lifespan=lifespan,
)

# ── CORS ───────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Routers ────────────────────────────────────────────────
app.include_router(quotes.router, prefix="/api", tags=["Quotes"])
app.include_router(orders.router, prefix="/api", tags=["Orders"])
app.include_router(geo.router, prefix="/api/geo", tags=["Geo"])


@app.get("/health")
async def health_check():
    return {"status": "healthy", "service": "Courier Desk API"}
