"""
YT-DLP service module.

Thin wrapper around the yt-dlp Python API used for metadata lookups,
flat playlist/channel listing and caption track discovery. No media is
ever downloaded.
"""

import os
import logging
from typing import Any, Dict, List, Optional

import yt_dlp

from fetchsub.config import YTDLP_COOKIES_FILE

logger = logging.getLogger(__name__)

SUBTITLE_FALLBACK_LANGS = ['en', 'en-US', 'en-GB']


def build_ydl_opts(**overrides) -> Dict[str, Any]:
    """Base yt-dlp options (quiet, no download, cookies when configured) plus overrides."""
    ydl_opts = {
        'quiet': True,
        'no_warnings': True,
        'skip_download': True,
    }
    if YTDLP_COOKIES_FILE and os.path.exists(YTDLP_COOKIES_FILE):
        ydl_opts['cookiefile'] = YTDLP_COOKIES_FILE
    ydl_opts.update(overrides)
    return ydl_opts


def extract_info(url: str, **overrides) -> Dict[str, Any]:
    """Run yt-dlp metadata extraction for a URL without downloading."""
    with yt_dlp.YoutubeDL(build_ydl_opts(**overrides)) as ydl:
        return ydl.extract_info(url, download=False)


def extract_flat_entry_ids(url: str, limit: Optional[int] = None) -> List[str]:
    """
    List the video IDs of a playlist or channel tab using flat extraction.
    Only 11-character IDs are kept; unavailable entries are skipped.
    """
    overrides = {'extract_flat': 'in_playlist'}
    if limit:
        overrides['playlistend'] = limit

    info = extract_info(url, **overrides)
    video_ids = []
    for entry in info.get('entries') or []:
        if entry is None:
            continue
        video_id = entry.get('id')
        if video_id and len(video_id) == 11:
            video_ids.append(video_id)
    return video_ids


def find_caption_track(info: Dict[str, Any], lang: str) -> Optional[Dict[str, Any]]:
    """
    Pick a caption track from yt-dlp info, preferring uploaded subtitles over
    automatic captions and VTT over other formats. Falls back to English variants.
    """
    subtitles = info.get('subtitles') or {}
    auto_captions = info.get('automatic_captions') or {}

    available = subtitles.get(lang) or auto_captions.get(lang)
    if not available:
        for fallback_lang in SUBTITLE_FALLBACK_LANGS:
            available = subtitles.get(fallback_lang) or auto_captions.get(fallback_lang)
            if available:
                break

    if not available:
        return None

    for track in available:
        if track.get('ext') == 'vtt':
            return track
    return None
