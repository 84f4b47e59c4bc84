"""
Transcript retrieval service.

Cues are fetched with youtube-transcript-api first. When that fails, yt-dlp
is asked for the caption track list and the VTT track is downloaded and parsed.
If both fail, a TranscriptError is raised with a reason classified from the
underlying errors so callers can explain the failure to the user.
"""

import logging
from typing import List

import requests
import yt_dlp
from youtube_transcript_api import (
    YouTubeTranscriptApi,
    TranscriptsDisabled,
    NoTranscriptFound,
    VideoUnavailable,
)

from fetchsub.models.schemas import TranscriptItem
from fetchsub.services import ytdlp_service
from fetchsub.utils.language_utils import resolve_language
from fetchsub.utils.subtitle_utils import parse_vtt_cues
from fetchsub.utils.url_utils import build_watch_url

logger = logging.getLogger(__name__)

CAPTION_DOWNLOAD_TIMEOUT = 15

SUBTITLES_DISABLED = "SUBTITLES_DISABLED"
UNAVAILABLE = "UNAVAILABLE"
TIMEOUT = "TIMEOUT"
NOT_FOUND = "NOT_FOUND"
UNKNOWN = "UNKNOWN"

_UNAVAILABLE_MARKERS = ("private video", "video unavailable", "this video is not available", "has been removed")


class TranscriptError(Exception):
    """Transcript could not be retrieved; `reason` is one of the module-level reason codes."""

    def __init__(self, reason: str, message: str):
        super().__init__(message)
        self.reason = reason
        self.message = message


def classify_error(error: Exception) -> str:
    """Map an exception from either transcript source to a reason code."""
    if isinstance(error, TranscriptError):
        return error.reason
    if isinstance(error, TranscriptsDisabled):
        return SUBTITLES_DISABLED
    if isinstance(error, VideoUnavailable):
        return UNAVAILABLE
    if isinstance(error, NoTranscriptFound):
        return NOT_FOUND
    if isinstance(error, (requests.Timeout, TimeoutError)):
        return TIMEOUT
    if isinstance(error, yt_dlp.utils.DownloadError):
        message = str(error).lower()
        if any(marker in message for marker in _UNAVAILABLE_MARKERS):
            return UNAVAILABLE
        if "timed out" in message:
            return TIMEOUT
    return UNKNOWN


def fetch_with_transcript_api(video_id: str, language: str) -> List[TranscriptItem]:
    """
    Fetch cues via youtube-transcript-api.
    The requested language wins; otherwise the first auto-generated track is used.
    """
    transcript_list = YouTubeTranscriptApi().list(video_id)
    try:
        transcript = transcript_list.find_transcript([language])
    except NoTranscriptFound:
        generated = [t for t in transcript_list if t.is_generated]
        if not generated:
            raise
        transcript = generated[0]

    return [
        TranscriptItem(
            text=snippet.text,
            offset=round(snippet.start * 1000),
            duration=round(snippet.duration * 1000),
        )
        for snippet in transcript.fetch()
    ]


def fetch_with_ytdlp(video_id: str, language: str) -> List[TranscriptItem]:
    """Fetch cues by downloading the VTT caption track yt-dlp reports for the video."""
    info = ytdlp_service.extract_info(
        build_watch_url(video_id),
        writesubtitles=True,
        writeautomaticsub=True,
        subtitleslangs=[language],
    )
    track = ytdlp_service.find_caption_track(info or {}, language)
    if not track:
        raise TranscriptError(NOT_FOUND, f"No caption track found for {video_id}")

    response = requests.get(track["url"], timeout=CAPTION_DOWNLOAD_TIMEOUT)
    response.raise_for_status()
    return parse_vtt_cues(response.text)


def fetch_transcript(video_id: str, language: str = "en") -> List[TranscriptItem]:
    """
    Fetch caption cues for a video.

    Raises:
        TranscriptError: when neither source yields any cues
    """
    lang = resolve_language(language)

    try:
        items = fetch_with_transcript_api(video_id, lang)
        if items:
            return items
        api_error: Exception = TranscriptError(NOT_FOUND, "Empty transcript")
    except Exception as e:
        logger.info(f"youtube-transcript-api failed for {video_id}, falling back to yt-dlp: {e}")
        api_error = e

    try:
        items = fetch_with_ytdlp(video_id, lang)
        if items:
            return items
        fallback_error: Exception = TranscriptError(NOT_FOUND, "Empty caption track")
    except Exception as e:
        logger.info(f"yt-dlp caption fallback failed for {video_id}: {e}")
        fallback_error = e

    reason = classify_error(api_error)
    if reason in (UNKNOWN, NOT_FOUND):
        fallback_reason = classify_error(fallback_error)
        if fallback_reason != UNKNOWN:
            reason = fallback_reason

    raise TranscriptError(reason, f"{reason}: {api_error}")
