"""
Crisis Reporting API - FastAPI Application

Main entry point for the crisis response reporting backend.

Architecture:
- Field staff submit crisis calls, mobile crisis dispatches and
  stabilization visits
- Summary endpoints aggregate one calendar month per submission type
- The dashboard combines submission counts, weekly trends and user growth
"""
import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from .routers import (
    users_router, admin_router, user_management_router, user_summary_router,
    crisis_calls_router, mobile_crisis_router, crisis_stabilization_router,
    dashboard_router,
)
from .database import init_db
from .errors import CrisisAPIError
from .services.uploads import UPLOAD_DIR

logger = logging.getLogger(__name__)

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize database on startup."""
    init_db()
    yield

# Create FastAPI app
app = FastAPI(
    lifespan=lifespan,
    title="Crisis Reporting API",
    description="""
    Crisis Reporting API - Submission and Reporting Backend

    Field staff submit crisis response forms; administrators manage accounts
    and read aggregated monthly reports and dashboard statistics.

    ## Reports
    - **Crisis calls**: calls by county and crisis type
    - **Mobile crisis**: dispatches, response times, outcomes, demographics
    - **Crisis stabilization**: visits, stabilization time, referrals, demographics
    - **Dashboard**: submission totals, weekly comparison, user growth
    """,
    version=VERSION,
    docs_url="/docs",
    redoc_url="/redoc"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(users_router)
app.include_router(admin_router)
app.include_router(user_management_router)
app.include_router(user_summary_router)
app.include_router(crisis_calls_router)
app.include_router(mobile_crisis_router)
app.include_router(crisis_stabilization_router)
app.include_router(dashboard_router)

# Uploaded profile images
os.makedirs(UPLOAD_DIR, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=UPLOAD_DIR), name="uploads")


# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================

@app.exception_handler(CrisisAPIError)
async def crisis_api_error_handler(request: Request, exc: CrisisAPIError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "message": "Validation failed",
            "errors": jsonable_encoder(exc.errors()),
        },
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.method} {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"success": False, "message": "Server error", "error": str(exc)},
    )


@app.get("/")
async def root():
    """Root endpoint - API information."""
    return {
        "name": "Crisis Reporting API",
        "version": VERSION,
        "docs": "/docs",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": VERSION}


# For running with: python -m crisis_api.main
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "5000")))
