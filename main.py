import logging

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

# Load environment variables from .env file
load_dotenv()

from fetchsub.config import APP_VERSION, get_settings
from fetchsub.dependencies import JSONErrorException
from fetchsub.routers import (
    extract_router,
    download_router,
    playlist_router,
    coins_router,
    subscriptions_router,
    health_router,
    admin_router,
)
from fetchsub.utils.logging_utils import setup_logger
from scripts.credit_scheduler import start_scheduler, stop_scheduler

settings = get_settings()
setup_logger(getattr(logging, settings.log_level.upper(), logging.INFO))

app = FastAPI(
    title="FetchSub API",
    description="Extract YouTube video, playlist and channel subtitles in SRT, VTT, JSON, ASS, SMI, LRC and text formats",
    version=APP_VERSION,
)

# CORS configuration
app.add_middleware(CORSMiddleware,
    allow_origins=[settings.allowed_origin],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(JSONErrorException)
async def json_error_handler(request: Request, exc: JSONErrorException):
    return exc.to_response()


app.include_router(extract_router)
app.include_router(download_router)
app.include_router(playlist_router)
app.include_router(coins_router)
app.include_router(subscriptions_router)
app.include_router(health_router)
app.include_router(admin_router)


# Application lifecycle events
@app.on_event("startup")
async def startup_event():
    """Initialize services on application startup."""
    print("INFO: Starting application...")

    if not settings.credit_scheduler_enabled:
        print("INFO: Subscription credit scheduler disabled (CREDIT_SCHEDULER_ENABLED=false)")
        return

    try:
        start_scheduler()
    except Exception as e:
        print(f"WARNING: Failed to start subscription credit scheduler: {str(e)}")
        print("WARNING: Scheduled subscription crediting disabled")


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on application shutdown."""
    print("INFO: Shutting down application...")

    if settings.credit_scheduler_enabled:
        try:
            stop_scheduler()
        except Exception as e:
            print(f"WARNING: Error stopping subscription credit scheduler: {str(e)}")


@app.get("/")
async def root():
    return {"name": "FetchSub API", "version": APP_VERSION, "docs": "/docs"}
