"""
Pastebin - Main FastAPI application.
"""
import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from pastebin.config import settings
from pastebin.database import get_store
from pastebin.exceptions import IdExhaustionError, PasteValidationError, StoreError
from pastebin.routes import health, pastes

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Pastebin",
    description="Share text with optional time- and view-based expiration",
    version="1.0.0",
)

# Add CORS middleware (optional, for cross-origin requests)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

# Include route modules
app.include_router(health.router)
app.include_router(pastes.router)


@app.exception_handler(PasteValidationError)
async def validation_error_handler(request: Request, exc: PasteValidationError):
    """Invalid paste input is a client error."""
    return JSONResponse(
        status_code=400,
        content={"detail": exc.message, "field": exc.field},
    )


@app.exception_handler(IdExhaustionError)
async def id_exhaustion_handler(request: Request, exc: IdExhaustionError):
    logger.error(f"Paste creation failed: {exc}")
    return JSONResponse(
        status_code=500,
        content={"detail": "Failed to generate unique paste ID. Please try again."},
    )


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    logger.error(f"Paste store error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=503, content={"detail": "Paste storage is unavailable"})


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"detail": "An unexpected error occurred"})


@app.on_event("startup")
async def startup_event():
    """Startup event handler."""
    logger.info("Pastebin application starting...")

    # Log storage status
    if get_store().using_fallback:
        logger.warning("⚠️  STORAGE: Using IN-MEMORY storage (Redis not available)")
        logger.warning("   Data will NOT persist across server restarts!")
    else:
        logger.info("✅ STORAGE: Connected to Redis")


@app.on_event("shutdown")
async def shutdown_event():
    """Shutdown event handler."""
    logger.info("Pastebin application shutting down...")


@app.get("/")
async def root():
    """Service banner."""
    return {
        "name": "Pastebin API",
        "version": app.version,
        "endpoints": {
            "pastes": "/api/pastes",
            "stats": "/api/pastes/stats",
            "health": "/api/healthz",
        },
    }


def run():
    import uvicorn
    uvicorn.run(
        "pastebin.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
    )


if __name__ == "__main__":
    run()
