"""
Download router module.

Provides the subtitle file download endpoint:
- GET /api/youtube/download: one file for a single video and format,
  or a ZIP archive for several videos or formats
"""

import asyncio

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse, Response

from fetchsub.services.download_service import build_subtitle_file, build_zip_archive, needs_archive
from fetchsub.utils.filename_utils import encode_content_disposition_filename


router = APIRouter(prefix="/api/youtube", tags=["Download"])


def _split_param(value: str):
    return [part.strip() for part in (value or "").split(",") if part.strip()]


@router.get("/download")
async def download_subtitles(
    id: str = Query(None, description="Video ID, or comma-separated IDs"),
    format: str = Query(None, description="Subtitle format, e.g. SRT"),
    formats: str = Query(None, description="Comma-separated subtitle formats"),
    lang: str = Query("en"),
    zip: bool = Query(False, description="Force a ZIP archive"),
):
    """Download rendered subtitle files for one or more videos."""
    video_ids = _split_param(id)
    if not video_ids:
        return JSONResponse(status_code=400, content={"error": "Missing video ID parameter"})

    format_list = _split_param(formats) or _split_param(format) or ["SRT"]
    archive = needs_archive(video_ids, format_list, zip)

    try:
        files = await asyncio.gather(*[
            asyncio.to_thread(build_subtitle_file, video_id, fmt, lang, archive)
            for video_id in video_ids
            for fmt in format_list
        ])
    except Exception as e:
        return JSONResponse(status_code=500, content={"error": f"Failed to generate subtitles: {str(e)}"})

    if archive:
        return Response(
            content=build_zip_archive(files),
            media_type="application/zip",
            headers={
                "Content-Disposition": encode_content_disposition_filename(f"subtitles_{lang}.zip"),
                "Cache-Control": "no-cache",
            },
        )

    subtitle_file = files[0]
    return Response(
        content=subtitle_file.content.encode("utf-8"),
        media_type=subtitle_file.media_type,
        headers={
            "Content-Disposition": encode_content_disposition_filename(subtitle_file.filename),
            "Cache-Control": "no-cache",
        },
    )
