"""
Download service: builds subtitle files for one or more videos.

A single (video, format) pair becomes one file. Anything more is packed
into an in-memory ZIP archive.
"""

import io
import logging
import zipfile
from dataclasses import dataclass
from typing import List

from fetchsub.services import transcript_service, video_info_service
from fetchsub.services.subtitle_formatter import format_transcript
from fetchsub.services.transcript_service import TranscriptError
from fetchsub.utils.filename_utils import safe_title, get_format_extension, get_format_mime_type

logger = logging.getLogger(__name__)


@dataclass
class SubtitleFile:
    filename: str
    content: str
    media_type: str


def build_subtitle_file(video_id: str, fmt: str, language: str, in_archive: bool = False) -> SubtitleFile:
    """
    Render one video's transcript in one format.
    When the transcript is unavailable the file body is the error text.
    """
    title = video_info_service.get_video_info(video_id).title
    try:
        items = transcript_service.fetch_transcript(video_id, language)
        content = format_transcript(items, fmt, title)
    except TranscriptError as e:
        logger.warning(f"Download for {video_id} has no transcript ({e.reason})")
        content = f"Subtitles unavailable for {title}: {e.message}"

    name = safe_title(title)
    extension = get_format_extension(fmt)
    filename = f"{name}_{fmt.lower()}{extension}" if in_archive else f"{name}{extension}"
    return SubtitleFile(filename=filename, content=content, media_type=get_format_mime_type(fmt))


def needs_archive(video_ids: List[str], formats: List[str], zip_requested: bool) -> bool:
    return zip_requested or len(video_ids) > 1 or len(formats) > 1


def build_zip_archive(files: List[SubtitleFile]) -> bytes:
    """Pack subtitle files into a deflated ZIP archive held in memory."""
    buffer = io.BytesIO()
    used_names = set()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
        for subtitle_file in files:
            name = subtitle_file.filename
            counter = 1
            while name in used_names:
                stem, dot, ext = subtitle_file.filename.rpartition(".")
                name = f"{stem}_{counter}.{ext}" if dot else f"{subtitle_file.filename}_{counter}"
                counter += 1
            used_names.add(name)
            archive.writestr(name, subtitle_file.content)
    return buffer.getvalue()
