"""FastAPI application for the catalog backend."""

import logging
import time

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from catalog import __version__
from catalog.config import CORS_ORIGINS, LOG_LEVEL
from catalog.db.postgres_client import db
from catalog.db.redis_client import redis_client
from catalog.errors import CatalogError, InternalError
from catalog.routes import brands, categories, images, products, reviews, sections, variants
from catalog.routes.deps import ok
from catalog.services.listing_cache import listing_cache

# Configure logging
logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)
http_logger = logging.getLogger("catalog.http")

# Create FastAPI app
app = FastAPI(
    title="Catalog API",
    description="Catalog backend: products, variants, pricing, sections and reviews",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - start) * 1000
    http_logger.info(f"{request.method} {request.url.path} {response.status_code} - {elapsed_ms:.0f}ms")
    return response


@app.exception_handler(CatalogError)
async def catalog_error_handler(request: Request, exc: CatalogError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.msg}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "form"))
    msg = f"{field}: {first.get('msg')}" if field else first.get("msg", "Invalid request")
    return JSONResponse(status_code=400, content={"success": False, "msg": msg, "kind": "bad_request"})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content=InternalError().to_dict())


# Health check endpoint
@app.get("/health")
def health_check():
    """Report store and cache reachability."""
    status = {"service": "Catalog API", "postgres": "ok", "redis": "ok"}
    try:
        db.ping()
    except Exception as e:
        logger.error(f"Health check: PostgreSQL unreachable: {e}")
        status["postgres"] = "unavailable"
    try:
        redis_client.ping()
    except Exception as e:
        logger.warning(f"Health check: Redis unreachable: {e}")
        status["redis"] = "unavailable"

    healthy = status["postgres"] == "ok"
    status["status"] = "healthy" if healthy else "degraded"
    return JSONResponse(status_code=200 if healthy else 503, content=status)


@app.get("/cache/stats")
def get_cache_stats():
    """Listing cache statistics for this process."""
    return ok(
        {
            "cacheHitRate": listing_cache.get_cache_hit_rate(),
            "cacheHits": listing_cache.cache_hit_count,
            "cacheMisses": listing_cache.cache_miss_count,
        }
    )


for module in (products, variants, brands, categories, sections, reviews, images):
    app.include_router(module.router)
