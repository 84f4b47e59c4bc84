"""
URL utility functions for classifying YouTube URLs.

This module provides utilities for:
- Extracting video, playlist, and channel IDs from YouTube URLs
- Classifying a URL as a single video or a batch source
- Building canonical watch URLs
"""

import re
from typing import Optional, Tuple


WATCH_PATTERN = re.compile(
    r'(?:youtube\.com/(?:[^/]+/.+/|(?:v|e(?:mbed)?)/|.*[?&]v=)|youtu\.be/)([^"&?/\s]{11})',
    re.IGNORECASE
)
PLAYLIST_PATTERN = re.compile(
    r'youtube\.com/(?:playlist\?(?:.*&)?list=|watch\?(?:.*&)?list=)([^&]+)',
    re.IGNORECASE
)
CHANNEL_PATTERN = re.compile(r'youtube\.com/(?:channel/|c/|@)([^/\s?]+)', re.IGNORECASE)

PLAYLIST_PREFIX = "playlist:"
CHANNEL_PREFIX = "channel:"


class InvalidUrlError(ValueError):
    """Raised when a URL is not a recognizable YouTube video, playlist, or channel."""


def extract_video_id(url: str) -> Optional[str]:
    """
    Extract an ID from a YouTube URL.

    Returns the 11-char video ID for watch/short/embed URLs,
    "playlist:<id>" for playlists, "channel:<id>" for channels, or None.
    A watch URL that carries both v= and list= resolves to the video.
    """
    clean_url = url.strip()

    match = WATCH_PATTERN.search(clean_url)
    if match:
        return match.group(1)

    match = PLAYLIST_PATTERN.search(clean_url)
    if match:
        return f"{PLAYLIST_PREFIX}{match.group(1)}"

    match = CHANNEL_PATTERN.search(clean_url)
    if match:
        return f"{CHANNEL_PREFIX}{match.group(1)}"

    return None


def classify_url(url: str) -> Tuple[str, str]:
    """
    Classify URL as ("video" | "playlist" | "channel", id).
    Raises InvalidUrlError for anything else.
    """
    extracted = extract_video_id(url)
    if not extracted:
        raise InvalidUrlError("Invalid YouTube URL")
    if extracted.startswith(PLAYLIST_PREFIX):
        return "playlist", extracted[len(PLAYLIST_PREFIX):]
    if extracted.startswith(CHANNEL_PREFIX):
        return "channel", extracted[len(CHANNEL_PREFIX):]
    return "video", extracted


def is_batch_url(url: str) -> bool:
    """Check if URL points at a playlist or channel (used for cost estimates)."""
    return any(marker in url for marker in ("playlist?list=", "&list=", "/channel/", "@"))


def build_watch_url(video_id: str) -> str:
    """Canonical watch URL for a video ID."""
    return f"https://www.youtube.com/watch?v={video_id}"


def build_playlist_url(playlist_id: str) -> str:
    return f"https://www.youtube.com/playlist?list={playlist_id}"
