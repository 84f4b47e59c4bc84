"""
Extraction orchestration service.

Turns a YouTube URL plus a list of formats into subtitle results:
- single videos produce one result per format
- playlists and channels are expanded and processed with bounded concurrency
- transcript failures become per-result error entries, never exceptions
"""

import asyncio
import logging
import math
import time
from dataclasses import dataclass
from typing import List, Mapping, Optional

from fetchsub.config import (
    LOCAL_MAX_CONCURRENT,
    CLOUD_MAX_CONCURRENT,
    CLOUD_MAX_VIDEOS,
    PROCESSING_TIMEOUT,
    is_cloud_environment,
)
from fetchsub.models.schemas import SubtitleResult, ProcessingStats
from fetchsub.services import playlist_service, transcript_service, video_info_service
from fetchsub.services.playlist_service import PlaylistError
from fetchsub.services.subtitle_formatter import format_transcript, file_size_label
from fetchsub.services.transcript_service import TranscriptError
from fetchsub.utils.language_utils import get_language_name
from fetchsub.utils.url_utils import (
    InvalidUrlError,
    PLAYLIST_PREFIX,
    CHANNEL_PREFIX,
    build_watch_url,
    classify_url,
)

logger = logging.getLogger(__name__)

LOCAL_HOSTS = ("localhost", "127.0.0.1", "test")
SITE_REFERERS = ("netlify.app", "vercel.app")
SUMMARY_ID_PREFIX = "batch-summary-"


@dataclass
class ProcessingConfig:
    max_concurrent: int
    max_videos: Optional[int]
    timeout: int


def is_site_routed(headers: Mapping[str, str]) -> bool:
    """True when the request came through a proxy, CDN, or hosted frontend."""
    if headers.get("x-forwarded-for") or headers.get("x-real-ip"):
        return True
    referer = headers.get("referer", "")
    if any(site in referer for site in SITE_REFERERS):
        return True
    host = headers.get("host", "").split(":")[0]
    return bool(host) and host not in LOCAL_HOSTS


def get_processing_config(site_routed: bool) -> ProcessingConfig:
    """Concurrency and video cap: strict for site-routed or cloud requests, relaxed locally."""
    if site_routed or is_cloud_environment():
        return ProcessingConfig(CLOUD_MAX_CONCURRENT, CLOUD_MAX_VIDEOS, PROCESSING_TIMEOUT)
    return ProcessingConfig(LOCAL_MAX_CONCURRENT, None, PROCESSING_TIMEOUT)


def _download_url(video_id: str, fmt: str, language: str) -> str:
    return f"/api/youtube/download?id={video_id}&format={fmt}&lang={language}"


def _transcript_error_result(error: TranscriptError, video_id: str, title: str,
                             url: str, fmt: str, language: str) -> SubtitleResult:
    """Map a classified transcript failure to a user-facing error result."""
    if error.reason == transcript_service.SUBTITLES_DISABLED:
        prefix = "subtitles-disabled"
        content = f'Subtitles are not available for this video. The creator "{title}" has disabled captions.'
        message = f"Creator has disabled subtitles for this video: {title}"
        notice = "Subtitles disabled by creator"
    elif error.reason == transcript_service.TIMEOUT:
        prefix = "timeout"
        content = "Video processing timed out. This may be a temporary network issue - please try again in a few moments."
        message = "Video processing timed out. This may be a temporary issue - please try again in a few moments."
        notice = "Processing timeout - please retry"
    elif error.reason == transcript_service.UNAVAILABLE:
        prefix = "unavailable"
        content = message = "This video is private or unavailable and cannot be processed."
        notice = "Video unavailable"
    elif error.reason == transcript_service.NOT_FOUND:
        prefix = "no-transcripts"
        content = message = (
            f"No subtitles are available for this video: {title}. The creator may have disabled captions."
        )
        notice = "No subtitles available"
    else:
        prefix = "error"
        content = message = f"Failed to extract subtitles from video: {title}. Error: {error.message}"
        notice = "Processing failed"

    return SubtitleResult(
        id=f"{prefix}-{video_id}-{fmt}-{language}",
        video_title=title,
        language=get_language_name(language),
        format=fmt,
        content=content,
        url=url,
        error=message,
        notice=notice,
    )


def extract_subtitles(url: str, fmt: str, language: str) -> SubtitleResult:
    """
    Extract subtitles for one URL in one format.

    Playlist and channel URLs produce informational results; batch expansion
    happens in process_youtube_url.

    Raises:
        InvalidUrlError: if the URL is not a YouTube URL
    """
    kind, item_id = classify_url(url)

    if kind == "playlist":
        info = video_info_service.get_video_info(f"{PLAYLIST_PREFIX}{item_id}")
        return SubtitleResult(
            id=f"{PLAYLIST_PREFIX}{item_id}-{fmt}-{language}",
            video_title=f"{info.title} (Processing All Videos)",
            language=get_language_name(language),
            format=fmt,
            content=(
                f"Processing playlist: {info.title}\n\nThis playlist URL will be processed "
                "automatically and all available videos will have their subtitles extracted."
            ),
            url=url,
            is_playlist_or_channel=True,
            is_being_processed=True,
        )

    if kind == "channel":
        info = video_info_service.get_video_info(f"{CHANNEL_PREFIX}{item_id}")
        return SubtitleResult(
            id=f"{CHANNEL_PREFIX}{item_id}-{fmt}-{language}",
            video_title=info.title,
            language=get_language_name(language),
            format=fmt,
            content="This is a channel URL. Please use the batch processing option to extract subtitles from multiple videos.",
            url=url,
            is_playlist_or_channel=True,
        )

    title = video_info_service.get_video_info(item_id).title
    try:
        items = transcript_service.fetch_transcript(item_id, language)
    except TranscriptError as e:
        logger.warning(f"Transcript unavailable for {item_id} ({e.reason})")
        return _transcript_error_result(e, item_id, title, url, fmt, language)

    content = format_transcript(items, fmt, title)
    return SubtitleResult(
        id=f"{item_id}-{fmt}-{language}",
        video_title=title,
        language=get_language_name(language),
        format=fmt,
        file_size=file_size_label(content),
        content=content,
        url=url,
        download_url=_download_url(item_id, fmt, language),
    )


def _error_result(result_id: str, title: str, language: str, fmt: str, content: str,
                  url: str, error: str, notice: Optional[str] = None) -> SubtitleResult:
    return SubtitleResult(
        id=result_id,
        video_title=title,
        language=get_language_name(language),
        format=fmt,
        content=content,
        url=url,
        error=error,
        notice=notice,
    )


def _playlist_error_result(playlist_id: str, url: str, formats: List[str], language: str,
                           error: Exception, site_routed: bool) -> SubtitleResult:
    detail = str(error)
    lowered = detail.lower()
    if "private" in lowered or "not exist" in lowered:
        message = ("This playlist appears to be private or doesn't exist. Please check that you have the "
                   "correct playlist URL and it is publicly accessible.")
    elif "no videos found" in lowered:
        message = "No valid videos found in this playlist. The playlist may be empty or contains only unavailable videos."
    elif "timeout" in lowered or "timed out" in lowered:
        message = ("Playlist processing timed out when routed through your site. Try using fewer videos or access the API directly."
                   if site_routed else "Playlist processing timed out. Please try again with fewer videos.")
    else:
        message = "Failed to fetch playlist videos."

    guidance = ""
    if site_routed:
        guidance = ("\n\nSite Routing Issue: This request came through your site's proxy/CDN which has stricter limits. Try:\n"
                    "1. Using individual video URLs instead of playlist URLs\n"
                    "2. Accessing the API endpoint directly\n"
                    "3. Processing smaller batches of videos")

    return _error_result(
        f"playlist-error-{playlist_id}-{int(time.time() * 1000)}",
        "Playlist Processing Error",
        language,
        formats[0] if formats else "txt",
        f"{message}\n\nTechnical details: {detail}{guidance}\n\nTry using individual video URLs instead of the playlist URL.",
        url,
        message,
        notice=("Site routing detected - try direct API access for better playlist processing" if site_routed
                else "If this error persists, try extracting videos from the playlist one by one instead."),
    )


def _summary_result(video_count: int, n_formats: int, results: List[SubtitleResult]) -> SubtitleResult:
    success = len([r for r in results if not r.error and not r.is_generated])
    generated = len([r for r in results if r.is_generated])
    errors = len([r for r in results if r.error])
    return SubtitleResult(
        id=f"{SUMMARY_ID_PREFIX}{int(time.time() * 1000)}",
        video_title="Batch Processing Summary",
        language="en",
        format="txt",
        content=(f"Processed {video_count} videos with {n_formats} format(s) each.\n"
                 f"✅ Successfully extracted: {success}\n"
                 f"⚠️ Generated fallbacks: {generated}\n"
                 f"❌ Errors: {errors}"),
        notice=f"Batch processing complete: {success} successful, {generated} fallbacks, {errors} errors",
    )


def _extract_or_error(video_url: str, video_id: str, fmt: str, language: str) -> SubtitleResult:
    try:
        return extract_subtitles(video_url, fmt, language)
    except Exception as e:
        logger.error(f"Error processing {video_url} with format {fmt}: {e}")
        return _error_result(
            f"error-{video_id}-{fmt}-{language}",
            "Error processing video",
            language,
            fmt,
            f"Failed to extract subtitle: {e}",
            video_url,
            f"Failed to extract subtitle for {video_url} in {fmt} format: {e}",
        )


async def process_youtube_url(url: str, formats: List[str], language: str, site_routed: bool = False,
                              request_logger: Optional[logging.LoggerAdapter] = None) -> List[SubtitleResult]:
    """
    Process a video, playlist, or channel URL into subtitle results.

    Results keep input order: videos in playlist order, formats in request order.
    A "Batch Processing Summary" entry is appended when more than one video ran.
    """
    log = request_logger or logger
    config = get_processing_config(site_routed)
    log.info(f"Processing {url} (formats={formats}, language={language}, site_routed={site_routed}, "
             f"max_concurrent={config.max_concurrent}, max_videos={config.max_videos})")

    try:
        kind, item_id = classify_url(url)
    except InvalidUrlError:
        return [_error_result(f"error-{int(time.time() * 1000)}", "Error", "N/A", "txt",
                              "Invalid YouTube URL", url, "Invalid YouTube URL")]

    if kind == "playlist":
        try:
            video_ids = await asyncio.wait_for(
                asyncio.to_thread(playlist_service.get_playlist_video_ids, item_id), config.timeout
            )
        except asyncio.TimeoutError:
            log.error(f"Playlist {item_id} expansion timed out after {config.timeout}s")
            timeout_error = PlaylistError(f"Playlist expansion timed out after {config.timeout}s")
            return [_playlist_error_result(item_id, url, formats, language, timeout_error, site_routed)]
        except PlaylistError as e:
            log.error(f"Playlist {item_id} could not be expanded: {e}")
            return [_playlist_error_result(item_id, url, formats, language, e, site_routed)]
        if config.max_videos and len(video_ids) > config.max_videos:
            log.info(f"Limiting playlist {item_id} from {len(video_ids)} to {config.max_videos} videos")
            video_ids = video_ids[:config.max_videos]
        video_urls = [build_watch_url(video_id) for video_id in video_ids]
    elif kind == "channel":
        try:
            video_ids = await asyncio.wait_for(
                asyncio.to_thread(playlist_service.get_channel_video_ids, item_id), config.timeout
            )
        except asyncio.TimeoutError:
            log.error(f"Channel {item_id} expansion timed out after {config.timeout}s")
            return [_error_result(
                f"channel-error-{item_id}", "Channel Error", language, formats[0] if formats else "txt",
                f"Channel processing timed out after {config.timeout}s. Try a single video URL instead.",
                url, "Channel processing timed out",
            )]
        except PlaylistError as e:
            log.error(f"Channel {item_id} could not be expanded: {e}")
            return [_error_result(
                f"channel-error-{item_id}", "Channel Error", language, formats[0] if formats else "txt",
                f"Error fetching videos from channel: {e}", url, f"Failed to fetch channel videos: {e}",
            )]
        if config.max_videos:
            video_ids = video_ids[:config.max_videos]
        video_urls = [build_watch_url(video_id) for video_id in video_ids]
    else:
        video_urls = [url]

    semaphore = asyncio.Semaphore(config.max_concurrent)

    async def process_video(video_url: str) -> List[SubtitleResult]:
        video_id = classify_url(video_url)[1]
        async with semaphore:
            return await asyncio.gather(*[
                asyncio.to_thread(_extract_or_error, video_url, video_id, fmt, language)
                for fmt in formats
            ])

    try:
        per_video = await asyncio.wait_for(
            asyncio.gather(*[process_video(video_url) for video_url in video_urls]), config.timeout
        )
    except asyncio.TimeoutError:
        log.error(f"Processing {url} timed out after {config.timeout}s")
        if kind == "playlist":
            timeout_error = PlaylistError(f"Playlist processing timed out after {config.timeout}s")
            return [_playlist_error_result(item_id, url, formats, language, timeout_error, site_routed)]
        return [_error_result(
            f"timeout-error-{item_id}-{int(time.time() * 1000)}", "Processing Timeout", language,
            formats[0] if formats else "txt",
            f"Processing timed out after {config.timeout}s. Please try again with fewer videos.",
            url, "Processing timed out",
        )]
    results = [result for video_results in per_video for result in video_results]

    for result in results:
        if result.error and result.error not in result.content:
            result.content = f"{result.content}\nError: {result.error}"

    if len(video_urls) > 1:
        results.append(_summary_result(len(video_urls), len(formats), results))

    log.info(f"Finished {url}: {len(results)} results from {len(video_urls)} videos")
    return results


def compute_stats(results: List[SubtitleResult], n_formats: int) -> ProcessingStats:
    """Processing stats over per-video results; the batch summary entry is not counted."""
    entries = [r for r in results if not r.id.startswith(SUMMARY_ID_PREFIX)]
    n_formats = max(n_formats, 1)
    successes = len([r for r in entries if not r.error and not r.is_generated])
    return ProcessingStats(
        total_videos=len(entries) / n_formats,
        processed_videos=math.ceil(successes / n_formats),
        error_count=len([r for r in entries if r.error]),
    )
