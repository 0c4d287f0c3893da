from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
import uuid
from contextlib import asynccontextmanager
from database import database
from routes import auth, vin, smart_docs, labels, compliance, documents, admin, billing, webhooks

import os
import logging
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables
ROOT_DIR = Path(__file__).parent
load_dotenv(ROOT_DIR / '.env')

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def _log_config_warnings():
    """Log missing configuration that disables a feature (no secret values)."""
    if not os.environ.get("LLM_API_KEY"):
        logger.error("LLM_API_KEY is not set. VIN decode, Smart Docs, Label Forge and compliance checks will fail.")
    if not os.environ.get("LEMONSQUEEZY_WEBHOOK_SECRET"):
        logger.error("LEMONSQUEEZY_WEBHOOK_SECRET is not set. Premium upgrades will not be applied.")
    if not os.environ.get("LEMON_SQUEEZY_SUBSCRIPTION_URL"):
        logger.warning("LEMON_SQUEEZY_SUBSCRIPTION_URL is not set. Checkout links are disabled.")
    if os.environ.get("JWT_SECRET", "") in ("", "your-secret-key-change-in-production"):
        logger.warning("JWT_SECRET is not set. Using the development default.")


# Lifespan context manager for startup/shutdown
@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("Starting DocuHaul API")
    if os.environ.get("PYTEST_RUNNING"):
        logger.info("PYTEST_RUNNING set - skipping MongoDB connection")
    else:
        await database.connect()
    _log_config_warnings()

    yield

    # Shutdown
    logger.info("Shutting down DocuHaul API")
    await database.close()

# Create FastAPI app
app = FastAPI(
    title="DocuHaul API",
    description="VIN decoding, trailer documentation and VIN label design",
    version="1.0.0",
    lifespan=lifespan
)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_credentials=True,
    allow_origins=os.environ.get('CORS_ORIGINS', '*').split(','),
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth.router)
app.include_router(vin.router)
app.include_router(smart_docs.router)
app.include_router(labels.router)
app.include_router(compliance.router)
app.include_router(documents.router)
app.include_router(admin.router)
app.include_router(billing.router)
app.include_router(webhooks.router)  # Lemon Squeezy

# Root endpoint
@app.get("/api")
async def root():
    return {
        "service": "DocuHaul",
        "version": "1.0.0",
        "status": "operational"
    }

# Health check
@app.get("/api/health")
async def health_check():
    return {
        "status": "healthy",
        "environment": os.getenv("ENVIRONMENT", "development")
    }


# Validation error handler: log request_id + errors (loc path)
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    request_id = str(uuid.uuid4())
    errors = exc.errors()
    logger.warning(
        "Validation failed request_id=%s path=%s errors=%s",
        request_id,
        request.url.path,
        [(e.get("loc"), e.get("msg"), e.get("type")) for e in errors],
    )
    return JSONResponse(
        status_code=422,
        content={"detail": [
            {"loc": list(e.get("loc", ())), "msg": e.get("msg"), "type": e.get("type")}
            for e in errors
        ], "request_id": request_id},
    )


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"}
    )

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "server:app",
        host="0.0.0.0",
        port=8001,
        reload=os.getenv("ENVIRONMENT") == "development"
    )
