"""
Pydantic data models for request/response validation.
"""

from .schemas import (
    CamelModel,
    TranscriptItem,
    VideoInfo,
    PlaylistInfo,
    SubtitleResult,
    ProcessingStats,
    ExtractRequest,
    CoinEstimateRequest,
    CoinEstimateResponse,
    PlaylistVideosResponse,
)

__all__ = [
    "CamelModel",
    "TranscriptItem",
    "VideoInfo",
    "PlaylistInfo",
    "SubtitleResult",
    "ProcessingStats",
    "ExtractRequest",
    "CoinEstimateRequest",
    "CoinEstimateResponse",
    "PlaylistVideosResponse",
]
