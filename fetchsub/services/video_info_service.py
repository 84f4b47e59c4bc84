"""
Video metadata lookups.

Titles are resolved through a chain of sources, cheapest first:
oEmbed, yt-dlp, noembed, and finally a generated "YouTube Video <id>" title.
"""

import logging

import requests

from fetchsub.models.schemas import VideoInfo
from fetchsub.services import ytdlp_service
from fetchsub.utils.url_utils import PLAYLIST_PREFIX, CHANNEL_PREFIX, build_watch_url

logger = logging.getLogger(__name__)

OEMBED_URL = "https://www.youtube.com/oembed"
NOEMBED_URL = "https://noembed.com/embed"
LOOKUP_TIMEOUT = 5


def _title_from_oembed(video_id: str) -> str:
    response = requests.get(
        OEMBED_URL,
        params={"url": build_watch_url(video_id), "format": "json"},
        timeout=LOOKUP_TIMEOUT,
    )
    response.raise_for_status()
    return response.json().get("title") or ""


def _title_from_ytdlp(video_id: str) -> str:
    info = ytdlp_service.extract_info(build_watch_url(video_id))
    return (info or {}).get("title") or ""


def _title_from_noembed(video_id: str) -> str:
    response = requests.get(NOEMBED_URL, params={"url": build_watch_url(video_id)}, timeout=LOOKUP_TIMEOUT)
    response.raise_for_status()
    return response.json().get("title") or ""


def get_video_info(video_id: str) -> VideoInfo:
    """
    Get a display title for a video, playlist, or channel ID.

    Playlist and channel IDs (prefixed "playlist:"/"channel:") get generic titles.
    Never raises: every lookup failure falls through to the next source.
    """
    if video_id.startswith(PLAYLIST_PREFIX):
        return VideoInfo(title="YouTube Playlist")
    if video_id.startswith(CHANNEL_PREFIX):
        return VideoInfo(title="YouTube Channel")

    for source, lookup in (
        ("oEmbed", _title_from_oembed),
        ("yt-dlp", _title_from_ytdlp),
        ("noembed", _title_from_noembed),
    ):
        try:
            title = lookup(video_id).strip()
        except Exception as e:
            logger.debug(f"{source} title lookup failed for {video_id}: {e}")
            continue
        if title:
            return VideoInfo(title=title)

    logger.info(f"All title lookups failed for {video_id}, using fallback title")
    return VideoInfo(title=f"YouTube Video {video_id}")
