"""
PartLookup FastAPI application entry point.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.routes.parts import router as parts_router
from app.config import settings
from app.db import PartStore, StorageFault
from app.services.lookup_state import LookupSession
from app.services.part_importer import PartImporter
from app.services.part_resolver import PartResolver

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


def build_session(store: PartStore) -> LookupSession:
    """Wire resolver and importer around one store."""
    return LookupSession(
        resolver=PartResolver(store),
        importer=PartImporter(store, csv_encoding=settings.csv_encoding),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle."""
    # Startup
    logger.info("Starting PartLookup API...")
    store = PartStore(settings.db_path, timeout=settings.db_timeout_seconds)
    await store.open()
    app.state.store = store
    app.state.session = build_session(store)

    yield

    # Shutdown
    logger.info("Shutting down PartLookup API...")
    await store.close()


# Create FastAPI app
app = FastAPI(
    title=settings.api_title,
    version=settings.api_version,
    debug=settings.debug,
    lifespan=lifespan,
)

# CORS middleware for frontend access
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify actual frontend origin
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(parts_router)


@app.exception_handler(StorageFault)
async def storage_fault_handler(request: Request, exc: StorageFault):
    logger.error(f"Storage fault on {request.url.path}: {exc}")
    return JSONResponse(status_code=503, content={"status": "error", "message": str(exc)})


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "PartLookup API",
        "version": settings.api_version,
        "endpoints": {
            "lookup": "/parts/lookup?part_number=...",
            "import": "/parts/import",
            "parts": "/parts",
            "count": "/parts/count",
            "state": "/parts/state",
            "docs": "/docs",
        },
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}
