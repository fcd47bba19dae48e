import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import config
from db import create_db_and_tables
from jobs.notification_dispatch_job import NotificationDispatchJob, set_dispatcher
from middleware.rate_limit import build_listing_rate_limiter
from middleware.request_context import RequestContextMiddleware, REQUEST_ID_HEADER
from middleware.security_headers import SecurityHeadersMiddleware
from processing.processing import processing_router
from utils.error_handler import register_exception_handlers
from web.admin_router import admin_router
from web.api_router import api_router
from web.auth_router import auth_router
from web.checkout_router import checkout_router
from web.product_router import product_router
from web.wishlist_router import wishlist_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event handler for startup and shutdown."""
    # Startup
    await create_db_and_tables()

    app.state.listing_rate_limiter = build_listing_rate_limiter()

    notification_job = NotificationDispatchJob()
    await notification_job.start()
    set_dispatcher(notification_job)
    logger.info("[Startup] Notification dispatcher started")

    yield

    # Shutdown
    logger.warning('Shutting down..')
    set_dispatcher(None)
    await notification_job.stop()
    await app.state.listing_rate_limiter.close()
    logger.warning('Bye!')


def create_app() -> FastAPI:
    app = FastAPI(title="Kollect-It Storefront API", lifespan=lifespan)

    if config.SECURITY_HEADERS_ENABLED:
        app.add_middleware(SecurityHeadersMiddleware)
        logger.info("[Startup] Security headers middleware enabled")

    if config.CORS_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.CORS_ORIGINS,
            allow_credentials=True,
            allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
            allow_headers=["Content-Type", "Authorization", REQUEST_ID_HEADER],
            expose_headers=[REQUEST_ID_HEADER, "Retry-After"],
        )
        logger.info(f"[Startup] CORS middleware enabled for origins: {config.CORS_ORIGINS}")
    else:
        logger.debug("[Startup] CORS middleware disabled (no allowed origins configured)")

    # Added last so it runs first and every response carries the id
    app.add_middleware(RequestContextMiddleware)

    register_exception_handlers(app)

    app.include_router(checkout_router)
    app.include_router(product_router)
    app.include_router(admin_router)
    app.include_router(wishlist_router)
    app.include_router(auth_router)
    app.include_router(api_router)
    app.include_router(processing_router)
    return app


app = create_app()
