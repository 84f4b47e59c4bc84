"""
Extract router for subtitle extraction.

This module provides endpoints for:
- POST /api/youtube/extract: metered extraction for videos, playlists and channels
- GET /api/youtube/extract: quick single-video extraction with placeholder fallback
"""

import asyncio
import json
import time

from fastapi import APIRouter, Depends, Header, Query, Request
from fastapi.responses import JSONResponse, StreamingResponse

from fetchsub.config import get_settings
from fetchsub.dependencies import JSONErrorException, get_optional_bearer_token
from fetchsub.models.schemas import ExtractRequest
from fetchsub.services import coin_service, extraction_service, transcript_service, video_info_service
from fetchsub.services.coin_service import InsufficientCoinsError
from fetchsub.services.subtitle_formatter import generate_placeholder_subtitles
from fetchsub.services.supabase_service import verify_user_token
from fetchsub.services.transcript_service import TranscriptError
from fetchsub.utils.logging_utils import get_request_logger, new_request_id
from fetchsub.utils.timestamp_utils import format_srt_time, format_vtt_time
from fetchsub.utils.url_utils import InvalidUrlError, classify_url

router = APIRouter(prefix="/api/youtube", tags=["Extract"])

TIMEOUT_FALLBACK_CONTENT = (
    "[00:00] Request processing timed out to prevent gateway errors.\n\n"
    "[00:03] This is a protective measure for cloud deployments.\n\n"
    "[00:06] Please try again with:\n\n"
    "[00:09] - A shorter playlist (under 50 videos)\n\n"
    "[00:12] - A single video URL instead\n\n"
    "[00:15] - Or try again in a few moments\n\n"
    "[00:18] The system is working correctly."
)


def _timeout_fallback(request_url: str) -> JSONResponse:
    return JSONResponse(
        status_code=200,
        headers={"X-Timeout-Protection": "active"},
        content={
            "id": "timeout_fallback",
            "videoTitle": "Processing Timeout - Please Try Again",
            "language": "en",
            "format": "text",
            "fileSize": "0.8 KB",
            "content": TIMEOUT_FALLBACK_CONTENT,
            "url": request_url,
            "downloadUrl": "",
            "isGenerated": True,
            "isTimeoutFallback": True,
            "error": "Processing timeout (protective measure)",
            "notice": "This timeout prevents 504 Gateway errors. Please try a shorter request.",
        },
    )


def _stream_results(results: list):
    """Yield JSON chunks: a processing header, one chunk per result, then a completion marker."""
    yield json.dumps({"status": "processing", "total": len(results)})
    for result in results:
        yield json.dumps(result)
    yield json.dumps({"status": "complete"})


async def _resolve_user(token, anonymous_header, anonymous_id):
    """
    Return (user_id, is_anonymous) or raise JSONErrorException 401.
    The anonymous header wins over any bearer token sent alongside it.
    """
    if (anonymous_header or "").lower() == "true":
        return anonymous_id or f"anonymous-{int(time.time() * 1000)}", True
    if token:
        user_id = await asyncio.to_thread(verify_user_token, token)
        if not user_id:
            raise JSONErrorException(401, "Invalid authentication")
        return user_id, False
    raise JSONErrorException(401, "Authentication required")


@router.post("/extract")
async def extract_subtitles(
    request: Request,
    body: ExtractRequest,
    token: str = Depends(get_optional_bearer_token),
    x_anonymous_user: str = Header(None),
):
    """
    Extract subtitles for a video, playlist, or channel URL in one or more formats.

    Authenticated users are charged coins for successfully processed videos;
    anonymous users (X-Anonymous-User: true) are not charged. When processing
    exceeds REQUEST_TIMEOUT a 200 timeout fallback payload is returned instead.
    """
    settings = get_settings()
    request_id = new_request_id()
    log = get_request_logger(request_id)

    try:
        user_id, is_anonymous = await _resolve_user(token, x_anonymous_user, body.anonymous_id)

        if not body.formats or not body.language:
            raise JSONErrorException(400, "Missing required parameters")
        if body.input_type != "url" or not body.url:
            raise JSONErrorException(400, "Invalid input type or missing data")
    except JSONErrorException as e:
        return e.to_response()

    started = time.monotonic()
    site_routed = extraction_service.is_site_routed(request.headers)
    log.info(f"Extract request from {'anonymous' if is_anonymous else 'user'} {user_id}: {body.url}")

    try:
        results = await asyncio.wait_for(
            extraction_service.process_youtube_url(
                body.url, body.formats, body.language, site_routed, request_logger=log
            ),
            timeout=settings.request_timeout,
        )
    except asyncio.TimeoutError:
        log.warning(f"Extraction exceeded {settings.request_timeout}s, returning timeout fallback")
        return _timeout_fallback(str(request.url))
    except Exception as e:
        log.error(f"Extraction failed: {e}")
        return JSONResponse(status_code=500, content={"error": f"Failed to extract subtitles: {str(e)}"})

    stats = extraction_service.compute_stats(results, len(body.formats))

    if not is_anonymous and stats.processed_videos > 0:
        cost = coin_service.calculate_cost(stats.processed_videos, len(body.formats), body.coin_cost_estimate)
        try:
            await asyncio.to_thread(coin_service.deduct_coins, user_id, cost, "EXTRACT_SUBTITLES")
        except InsufficientCoinsError:
            log.warning(f"Insufficient coins for {user_id} (cost {cost})")
            return JSONResponse(
                status_code=402,
                content={"error": "Insufficient coins for this operation", "requireMoreCoins": True},
            )
        except Exception as e:
            log.error(f"Coin deduction failed for {user_id}: {e}")
            return JSONResponse(
                status_code=500,
                content={"error": "Failed to process coin deduction. Please try again.", "details": str(e)},
            )

    payload = [result.to_response() for result in results]

    if len(payload) > settings.stream_threshold:
        log.info(f"Streaming {len(payload)} results")
        return StreamingResponse(_stream_results(payload), media_type="application/json")

    elapsed_ms = int((time.monotonic() - started) * 1000)
    log.info(f"Returning {len(payload)} results in {elapsed_ms}ms")
    return {
        "subtitles": payload,
        "stats": stats.model_dump(by_alias=True),
        "processingTime": f"{elapsed_ms}ms",
    }


def _render_simple(items, fmt: str) -> str:
    if fmt == "json":
        return json.dumps([item.model_dump() for item in items], indent=2, ensure_ascii=False)
    if fmt == "srt":
        return "".join(
            f"{i}\n{format_srt_time(item.offset)} --> {format_srt_time(item.end)}\n{item.text}\n\n"
            for i, item in enumerate(items, 1)
        )
    if fmt == "vtt":
        return "WEBVTT\n\n" + "".join(
            f"{format_vtt_time(item.offset)} --> {format_vtt_time(item.end)}\n{item.text}\n\n"
            for item in items
        )
    return "\n".join(item.text for item in items)


def _quick_extract(video_id: str, kind: str, fmt: str, language: str) -> dict:
    title = video_info_service.get_video_info(video_id).title
    try:
        if kind != "video":
            raise TranscriptError(transcript_service.NOT_FOUND, "Playlist and channel URLs need POST /api/youtube/extract")
        content = _render_simple(transcript_service.fetch_transcript(video_id, language), fmt)
        return {"title": title, "content": content, "is_generated": False, "error": None}
    except TranscriptError as e:
        return {
            "title": title,
            "content": generate_placeholder_subtitles(title, fmt),
            "is_generated": True,
            "error": e.message,
        }


@router.get("/extract")
async def quick_extract(
    request: Request,
    url: str = Query(None, description="YouTube video URL"),
    format: str = Query("text", description="json, srt, vtt, or text"),
    lang: str = Query("en", description="Language code"),
):
    """Extract one video's subtitles without metering. Falls back to placeholder subtitles."""
    if not url:
        return JSONResponse(status_code=400, content={"error": "URL parameter is required"})
    try:
        kind, video_id = classify_url(url)
    except InvalidUrlError:
        return JSONResponse(status_code=400, content={"error": "Invalid YouTube URL"})

    try:
        extracted = await asyncio.to_thread(_quick_extract, video_id, kind, format, lang)
    except Exception as e:
        return JSONResponse(status_code=500, content={"error": f"Failed to extract subtitles: {str(e)}"})

    content = extracted["content"]
    response = {
        "id": video_id,
        "videoTitle": extracted["title"],
        "language": lang,
        "format": format,
        "fileSize": f"{len(content) / 1024:.2f} KB",
        "content": content,
        "url": url,
        "downloadUrl": f"{str(request.base_url).rstrip('/')}/api/youtube/download?id={video_id}&format={format}&lang={lang}",
        "isGenerated": extracted["is_generated"],
    }
    if extracted["error"]:
        response["error"] = extracted["error"]
    return response
