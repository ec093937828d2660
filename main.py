from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.utils import get_openapi
from starlette.exceptions import HTTPException as StarletteHTTPException

from storefront.api.dashboard.routes import dashboard_router
from storefront.api.orders.routes import orders_router
from storefront.api.products.routes import products_router
from storefront.api.reviews.routes import reviews_router
from storefront.api.users.routes import users_router
from storefront.config.cache_config import cache_config
from storefront.config.settings import settings
from storefront.database.connection import (
    build_engine,
    build_session_factory,
    create_tables,
)
from storefront.dependencies.firebase import initialize_firebase
from storefront.middleware.error import http_exception_handler
from storefront.middleware.timing import add_process_time_header
from storefront.shared.cache_service import build_cache_context
from storefront.shared.error_handler import ServiceError
from storefront.shared.exceptions import UpstreamUnavailable
from storefront.shared.utils import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    initialize_firebase()

    engine = build_engine()
    await create_tables(engine)
    app.state.session_factory = build_session_factory(engine)

    cache = build_cache_context()
    await cache.connect()
    try:
        await cache.store.ping()
    except UpstreamUnavailable as e:
        # Reads fail open, so the API can still start
        logger.warning(f"Cache not reachable at startup: {e}")
    app.state.cache = cache
    logger.info(
        f"Storefront started ({settings.ENVIRONMENT}) with cache settings "
        f"{cache_config.get_all_settings()}"
    )

    try:
        yield
    finally:
        await cache.close()
        await engine.dispose()
        logger.info("Storefront shut down")


app = FastAPI(
    title="Storefront API",
    description="API documentation for the storefront catalog, orders and dashboard.",
    version="1.0.0",
    lifespan=lifespan,
)

app.include_router(users_router)
app.include_router(products_router)
app.include_router(reviews_router)
app.include_router(orders_router)
app.include_router(dashboard_router)

app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(UpstreamUnavailable, http_exception_handler)
app.add_exception_handler(ServiceError, http_exception_handler)
app.add_exception_handler(Exception, http_exception_handler)


def custom_openapi():
    if app.openapi_schema:
        return app.openapi_schema
    openapi_schema = get_openapi(
        title="Storefront API",
        version="1.0.0",
        description="API documentation for the storefront catalog, orders and dashboard.",
        routes=app.routes,
    )
    openapi_schema["components"]["securitySchemes"] = {
        "BearerAuth": {
            "type": "http",
            "scheme": "bearer",
            "bearerFormat": "JWT",
        }
    }
    app.openapi_schema = openapi_schema
    # Add global security requirement
    openapi_schema["security"] = [{"BearerAuth": []}]
    return app.openapi_schema


app.openapi = custom_openapi


app.middleware("http")(add_process_time_header)

if settings.ALLOWED_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.get("/", tags=["App"])
async def read_root():
    return "Storefront API is running"
