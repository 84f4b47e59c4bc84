"""
Pydantic models for request/response validation.

This module contains all Pydantic BaseModel schemas used for API request
and response validation, plus the internal transcript and result records
passed between services. Wire-facing models serialize with camelCase aliases.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Any, List, Optional


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase field names."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TranscriptItem(BaseModel):
    """One caption cue: text plus start offset and duration in milliseconds."""
    text: str
    offset: int = Field(..., description="Cue start in milliseconds")
    duration: int = Field(..., description="Cue duration in milliseconds")

    @property
    def end(self) -> int:
        return self.offset + self.duration


class VideoInfo(BaseModel):
    title: str
    duration: int = 0


class PlaylistInfo(CamelModel):
    """Playlist title and size; is_estimate marks a guessed video count."""
    title: str = "YouTube Playlist"
    video_count: int = 0
    is_estimate: bool = False
    channel_name: Optional[str] = None


class SubtitleResult(CamelModel):
    """Result for one (video, format) pair, or an informational/error entry."""
    id: str
    video_title: str
    language: str
    format: str
    file_size: str = "0KB"
    content: str = ""
    url: str = ""
    download_url: str = ""
    is_playlist_or_channel: Optional[bool] = None
    is_being_processed: Optional[bool] = None
    is_generated: Optional[bool] = None
    error: Optional[str] = None
    notice: Optional[str] = None

    def to_response(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class ProcessingStats(CamelModel):
    total_videos: float = 0
    processed_videos: int = 0
    error_count: int = 0


class ExtractRequest(CamelModel):
    """Request body for POST /api/youtube/extract. Accepts camelCase or snake_case keys."""
    input_type: Optional[str] = Field(None, description="Only 'url' is supported")
    url: Optional[str] = None
    formats: Optional[List[str]] = Field(None, description="Subtitle formats, e.g. ['SRT', 'CLEAN_TEXT']")
    language: Optional[str] = Field(None, description="Language code, or 'auto'")
    anonymous_id: Optional[str] = None
    coin_cost_estimate: Optional[float] = Field(None, description="Client-side estimate; used as the charge when numeric")

    @field_validator("coin_cost_estimate", mode="before")
    @classmethod
    def ignore_non_numeric_estimate(cls, value: Any) -> Optional[float]:
        """Anything other than a JSON number is treated as no estimate."""
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        return value


class CoinEstimateRequest(CamelModel):
    url: str = Field(..., description="YouTube video, playlist, or channel URL")


class CoinEstimateResponse(CamelModel):
    estimated_cost: float
    is_batch: bool


class PlaylistVideosResponse(CamelModel):
    playlist_id: str
    video_ids: List[str]
    count: int
