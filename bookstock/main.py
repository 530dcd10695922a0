# bookstock/main.py
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from . import config
from .catalog import catalog_router
from .catalog.cache import SnapshotCache
from .catalog.errors import CatalogError
from .catalog.source import load_snapshot

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


app = FastAPI(
    title=config.APP_NAME,
    description=(
        "Read-only view over the bookstore inventory sheet: filtered and "
        "paginated listings plus random in-stock recommendations."
    ),
    version=config.APP_VERSION,
)

app.state.snapshot_cache = SnapshotCache(load_snapshot)
app.include_router(catalog_router)


@app.exception_handler(CatalogError)
async def catalog_error_handler(request: Request, exc: CatalogError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("API Error on %s: %s (%s)", request.url.path, exc.message, exc.details)
    content = {"error": exc.message}
    if exc.details:
        content["details"] = exc.details
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s", request.url.path)
    return JSONResponse(
        status_code=500,
        content={"error": str(exc) or "Unknown error occurred", "details": type(exc).__name__},
    )


@app.get("/")
def health_check():
    return {"status": "ok"}
