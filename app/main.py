from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
import sys

from app.core.config import settings
from app.core.database import init_db
from app.core.exceptions import CaseTrackerError
from app.api.v1.api import api_router
from app.services.mailer import SmtpMailer
from app.services.notification_dispatcher import NotificationDispatcher

# Configure logging
logger.remove()
logger.add(sys.stderr, level=settings.LOG_LEVEL)
logger.add(settings.LOG_FILE, rotation="500 MB", level=settings.LOG_LEVEL)

app = FastAPI(
    title=settings.PROJECT_NAME,
    description=settings.DESCRIPTION,
    version=settings.VERSION,
    openapi_url=f"{settings.API_V1_STR}/openapi.json"
)

# Set up CORS middleware with appropriate origins
origins = ["*"] if settings.ALLOW_ALL_ORIGINS else [str(origin) for origin in settings.BACKEND_CORS_ORIGINS]

# Note: When allow_origins=["*"], allow_credentials must be False according to CORS spec
allow_credentials = not settings.ALLOW_ALL_ORIGINS

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=allow_credentials,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
    max_age=600,
)

app.state.dispatcher = NotificationDispatcher(SmtpMailer())

# Include API router
app.include_router(api_router, prefix=settings.API_V1_STR)

@app.exception_handler(CaseTrackerError)
async def case_tracker_error_handler(request: Request, exc: CaseTrackerError):
    if exc.http_status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.http_status_code, content=exc.to_dict())

@app.on_event("startup")
async def startup_event():
    """Initialize database on startup"""
    init_db(recreate=False)

@app.on_event("shutdown")
async def shutdown_event():
    """Let queued notifications finish before exiting"""
    app.state.dispatcher.shutdown(wait=True)

@app.get("/")
async def root():
    return {"message": "Welcome to the Judiciary Case Tracker API"}
