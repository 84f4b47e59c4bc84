"""
Health router for deployment health checks.
"""

import importlib.util
import tempfile
import time
from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from fetchsub.config import APP_VERSION, get_settings

router = APIRouter(prefix="/api", tags=["Health"])

REQUIRED_LIBRARIES = ("yt_dlp", "youtube_transcript_api")
HEALTH_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "X-Health-Check": "true",
}


def _check_environment() -> dict:
    settings = get_settings()
    if settings.supabase_url and settings.supabase_service_key:
        return {"status": "pass", "message": "Environment variables present"}
    return {"status": "fail", "message": "Missing environment variables"}


def _check_libraries() -> dict:
    missing = [name for name in REQUIRED_LIBRARIES if importlib.util.find_spec(name) is None]
    if missing:
        return {"status": "fail", "message": f"Missing libraries: {', '.join(missing)}"}
    return {"status": "pass", "message": "Extraction libraries available"}


def _check_filesystem() -> dict:
    try:
        with tempfile.TemporaryFile() as handle:
            handle.write(b"ok")
    except OSError as e:
        return {"status": "fail", "message": f"Temp directory not writable: {e}"}
    return {"status": "pass", "message": "File system access available"}


def overall_status(checks: dict) -> str:
    """healthy with no failures, unhealthy when at least half fail, degraded otherwise."""
    failed = len([check for check in checks.values() if check["status"] == "fail"])
    if failed == 0:
        return "healthy"
    return "unhealthy" if failed >= len(checks) / 2 else "degraded"


@router.get("/health")
async def health_check():
    """Report environment, library, filesystem and response-time checks."""
    started = time.monotonic()
    checks = {
        "environment": _check_environment(),
        "libraries": _check_libraries(),
        "filesystem": _check_filesystem(),
    }
    elapsed_ms = int((time.monotonic() - started) * 1000)
    checks["responseTime"] = {
        "status": "pass" if elapsed_ms < 1000 else "fail",
        "message": f"Response time: {elapsed_ms}ms",
        "responseTime": elapsed_ms,
    }

    status = overall_status(checks)
    return JSONResponse(
        status_code=503 if status == "unhealthy" else 200,
        headers=HEALTH_HEADERS,
        content={
            "status": status,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "environment": get_settings().deploy_env,
            "version": APP_VERSION,
            "checks": checks,
        },
    )
