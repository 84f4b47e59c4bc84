"""
Playlist router for playlist metadata.

This module provides endpoints for:
- Playlist title and video count (with an estimate when lookups fail)
- Resolving a playlist to its video IDs
"""

import asyncio

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from fetchsub.models.schemas import PlaylistInfo, PlaylistVideosResponse
from fetchsub.services import playlist_service
from fetchsub.services.playlist_service import PlaylistError

router = APIRouter(prefix="/api/youtube", tags=["Playlist"])


@router.get("/playlist-info")
async def get_playlist_info(id: str = Query(None, description="YouTube playlist ID")):
    """Get a playlist's title and video count. Failures still return 200 with an estimate."""
    if not id:
        return JSONResponse(status_code=400, content={"error": "Playlist ID is required"})

    try:
        info = await asyncio.to_thread(playlist_service.get_playlist_info, id)
    except Exception as e:
        fallback = PlaylistInfo(video_count=playlist_service.estimate_playlist_size(id), is_estimate=True)
        return {**fallback.model_dump(by_alias=True, exclude_none=True), "error": str(e)}

    return info.model_dump(by_alias=True, exclude_none=True)


@router.get("/playlist-videos")
async def get_playlist_videos(id: str = Query(None, description="YouTube playlist ID")):
    """Resolve a playlist to its video IDs in playlist order."""
    if not id:
        return JSONResponse(status_code=400, content={"error": "Playlist ID is required"})

    try:
        video_ids = await asyncio.to_thread(playlist_service.get_playlist_video_ids, id)
    except PlaylistError as e:
        return JSONResponse(status_code=404, content={"error": str(e)})
    except Exception as e:
        return JSONResponse(status_code=500, content={"error": f"Failed to fetch playlist videos: {str(e)}"})

    return PlaylistVideosResponse(playlist_id=id, video_ids=video_ids, count=len(video_ids)).model_dump(by_alias=True)
