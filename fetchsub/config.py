"""
Configuration module for the FetchSub subtitle extraction API.

This module centralizes all environment variables, constants, and runtime configuration
using pydantic-settings for type-safe configuration management.
"""

import os
from functools import lru_cache
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # CORS Configuration
    allowed_origin: str = Field(
        default="*",
        validation_alias="ALLOWED_ORIGIN",
        description="Allowed CORS origin for API requests"
    )

    # Admin API Authentication
    api_key: str = Field(
        default="",
        validation_alias="API_KEY",
        description="API key for admin endpoint authentication"
    )

    # Cron token for the monthly subscription credit endpoint
    subscription_cron_api_key: Optional[str] = Field(
        default=None,
        validation_alias="SUBSCRIPTION_CRON_API_KEY",
        description="Bearer token expected by /api/subscriptions/monthly-credit"
    )

    # Supabase Configuration
    supabase_url: Optional[str] = Field(
        default=None,
        validation_alias="SUPABASE_URL",
        description="Supabase project URL"
    )

    supabase_service_key: Optional[str] = Field(
        default=None,
        validation_alias="SUPABASE_SERVICE_KEY",
        description="Supabase service role key"
    )

    # YouTube access
    youtube_api_key: Optional[str] = Field(
        default=None,
        validation_alias="YOUTUBE_API_KEY",
        description="YouTube Data API v3 key for playlist lookups"
    )

    ytdlp_cookies_file: Optional[str] = Field(
        default=None,
        validation_alias="YTDLP_COOKIES_FILE",
        description="Path to cookies.txt for authenticated yt-dlp requests"
    )

    # Deployment / processing limits
    deploy_env: str = Field(
        default="development",
        validation_alias="DEPLOY_ENV",
        description="Deployment environment name ('production' enables cloud limits)"
    )

    local_max_concurrent: int = Field(
        default=3,
        validation_alias="LOCAL_MAX_CONCURRENT",
        description="Videos processed in parallel for local direct requests"
    )

    cloud_max_concurrent: int = Field(
        default=1,
        validation_alias="CLOUD_MAX_CONCURRENT",
        description="Videos processed in parallel for cloud or site-routed requests"
    )

    cloud_max_videos: int = Field(
        default=200,
        validation_alias="CLOUD_MAX_VIDEOS",
        description="Maximum playlist videos processed for cloud or site-routed requests"
    )

    processing_timeout: int = Field(
        default=7200,
        validation_alias="PROCESSING_TIMEOUT",
        description="Seconds allowed for processing a batch of videos"
    )

    request_timeout: float = Field(
        default=25.0,
        validation_alias="REQUEST_TIMEOUT",
        description="Seconds before POST /api/youtube/extract returns the timeout fallback"
    )

    stream_threshold: int = Field(
        default=500,
        validation_alias="STREAM_THRESHOLD",
        description="Result count above which extraction responses are streamed"
    )

    playlist_fallback_enabled: bool = Field(
        default=False,
        validation_alias="PLAYLIST_FALLBACK_ENABLED",
        description="Return the curated fallback video list when every playlist lookup fails"
    )

    # Subscription credit scheduler
    credit_scheduler_enabled: bool = Field(
        default=False,
        validation_alias="CREDIT_SCHEDULER_ENABLED",
        description="Run monthly subscription crediting in-process"
    )

    credit_interval_hours: int = Field(
        default=24,
        validation_alias="CREDIT_INTERVAL_HOURS",
        description="Hours between subscription credit runs"
    )

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Logging level for the fetchsub logger"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Uses lru_cache to ensure settings are loaded only once.
    """
    return Settings()


# Initialize settings
settings = get_settings()

APP_VERSION = "1.0.0"

# Supabase Configuration
SUPABASE_URL = settings.supabase_url
SUPABASE_SERVICE_KEY = settings.supabase_service_key

# YouTube Configuration
YOUTUBE_API_KEY = settings.youtube_api_key
YTDLP_COOKIES_FILE = settings.ytdlp_cookies_file

# Processing limits
LOCAL_MAX_CONCURRENT = settings.local_max_concurrent
CLOUD_MAX_CONCURRENT = settings.cloud_max_concurrent
CLOUD_MAX_VIDEOS = settings.cloud_max_videos
PROCESSING_TIMEOUT = settings.processing_timeout
REQUEST_TIMEOUT = settings.request_timeout
STREAM_THRESHOLD = settings.stream_threshold

# Hosting platforms whose presence means we are running in the cloud
CLOUD_ENV_MARKERS = ["VERCEL", "NETLIFY", "HEROKU", "RAILWAY", "AWS_REGION", "CF_PAGES", "RENDER"]


def is_cloud_environment() -> bool:
    """Detect cloud hosting from platform env vars or DEPLOY_ENV=production."""
    if any(os.getenv(marker) for marker in CLOUD_ENV_MARKERS):
        return True
    return get_settings().deploy_env.lower() == "production"


# Log configuration status on module import
if SUPABASE_URL and SUPABASE_SERVICE_KEY:
    print("INFO: Supabase configuration detected")
else:
    print("INFO: Supabase not configured (SUPABASE_URL/SUPABASE_SERVICE_KEY missing) - coin metering disabled")

if YOUTUBE_API_KEY:
    print("INFO: YouTube Data API key detected - playlist lookups will use the API first")

print(f"INFO: Processing limits - local concurrency {LOCAL_MAX_CONCURRENT}, "
      f"cloud concurrency {CLOUD_MAX_CONCURRENT}, cloud max videos {CLOUD_MAX_VIDEOS}")
