"""
FastAPI application factory.

* Registers routes for pharmacies, medicines, cart, orders and admin.
* Starts / stops the background drone simulation via lifespan events.
* Applies rate-limiting middleware.
* Swagger / OpenAPI UI available at ``/docs``.
"""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from medifly.api.middleware import limiter
from medifly.api.routes import admin, cart, medicines, orders, pharmacies
from medifly.infrastructure.redis_client import close_redis
from medifly.workers import drone as _drone

logging.basicConfig(level=logging.INFO)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the drone worker on startup; stop on shutdown."""
    await _drone.start_drone_loop()
    yield
    await _drone.stop_drone_loop()
    await close_redis()


def create_app() -> FastAPI:
    app = FastAPI(
        title="Medifly Delivery API",
        description=(
            "Medicine storefront backend: nearby pharmacy ranking with fuzzy "
            "search, catalogue, cart and checkout, and simulated drone "
            "delivery tracking."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )

    # Rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # Routers
    app.include_router(pharmacies.router, prefix="/api/v1")
    app.include_router(medicines.router, prefix="/api/v1")
    app.include_router(cart.router, prefix="/api/v1")
    app.include_router(orders.router, prefix="/api/v1")
    app.include_router(admin.router, prefix="/api/v1")

    return app
