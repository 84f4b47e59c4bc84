"""
Integration tests for all API routers.

This module tests:
- Authentication (401/403 for missing or invalid credentials)
- Input validation (400 with {"error": ...} bodies)
- Endpoint responses with transcripts, titles and Supabase mocked
- All routers: extract, download, playlist, coins, subscriptions, health, admin
"""

import asyncio
import io
import zipfile

import pytest
from unittest.mock import patch, MagicMock, AsyncMock

from fetchsub.models import SubtitleResult, TranscriptItem, VideoInfo, PlaylistInfo
from fetchsub.services import coin_service, extraction_service, playlist_service, transcript_service, video_info_service
from fetchsub.services.coin_service import InsufficientCoinsError
from fetchsub.services.playlist_service import PlaylistError
from fetchsub.services.transcript_service import TranscriptError

ITEMS = [
    TranscriptItem(text="Hello world", offset=0, duration=2000),
    TranscriptItem(text="Second line", offset=2000, duration=1000),
]


def _extract_body(url, formats=("SRT",), language="en"):
    return {"inputType": "url", "url": url, "formats": list(formats), "language": language}


def _result(video_id="dQw4w9WgXcQ", fmt="SRT", error=None):
    return SubtitleResult(
        id=f"{video_id}-{fmt}-en",
        video_title="My Video",
        language="English",
        format=fmt,
        content="1\n00:00:00,000 --> 00:00:02,000\nHello world",
        error=error,
    )


@pytest.fixture
def mock_lookups():
    """Patch title and transcript lookups with canned data."""
    with patch.object(video_info_service, "get_video_info", return_value=VideoInfo(title="My Video")), \
            patch.object(transcript_service, "fetch_transcript", return_value=ITEMS) as mock_fetch:
        yield mock_fetch


class TestExtractAuthentication:
    """Test authentication for POST /api/youtube/extract."""

    @pytest.mark.asyncio
    async def test_no_credentials(self, client, youtube_url):
        """Test requests without a token or anonymous header are rejected."""
        response = await client.post("/api/youtube/extract", json=_extract_body(youtube_url))
        assert response.status_code == 401
        assert response.json() == {"error": "Authentication required"}

    @pytest.mark.asyncio
    async def test_invalid_token(self, client, youtube_url):
        """Test a token Supabase does not accept is rejected."""
        with patch("fetchsub.routers.extract.verify_user_token", return_value=None):
            response = await client.post(
                "/api/youtube/extract",
                json=_extract_body(youtube_url),
                headers={"Authorization": "Bearer bad-token"},
            )
        assert response.status_code == 401
        assert response.json() == {"error": "Invalid authentication"}

    @pytest.mark.asyncio
    async def test_anonymous_header_wins_over_stale_token(self, client, anonymous_headers, youtube_url):
        """Test a stale bearer token sent with the anonymous header is ignored."""
        with patch("fetchsub.routers.extract.verify_user_token", return_value=None) as mock_verify, \
                patch.object(extraction_service, "process_youtube_url", AsyncMock(return_value=[_result()])), \
                patch.object(coin_service, "deduct_coins") as mock_deduct:
            response = await client.post(
                "/api/youtube/extract",
                json=_extract_body(youtube_url),
                headers={**anonymous_headers, "Authorization": "Bearer stale-token"},
            )

        assert response.status_code == 200
        assert response.json()["subtitles"][0]["id"] == "dQw4w9WgXcQ-SRT-en"
        mock_verify.assert_not_called()
        mock_deduct.assert_not_called()

    @pytest.mark.asyncio
    async def test_anonymous_header_with_valid_token_not_charged(self, client, anonymous_headers, youtube_url):
        """Test a valid token does not turn an anonymous request into a charged one."""
        with patch("fetchsub.routers.extract.verify_user_token", return_value="user-1"), \
                patch.object(extraction_service, "process_youtube_url", AsyncMock(return_value=[_result()])), \
                patch.object(coin_service, "deduct_coins") as mock_deduct:
            response = await client.post(
                "/api/youtube/extract",
                json=_extract_body(youtube_url),
                headers={**anonymous_headers, "Authorization": "Bearer good-token"},
            )

        assert response.status_code == 200
        mock_deduct.assert_not_called()

    @pytest.mark.asyncio
    async def test_auth_checked_before_validation(self, client):
        """Test a malformed body still gets 401 without credentials."""
        response = await client.post("/api/youtube/extract", json={})
        assert response.status_code == 401


class TestExtractValidation:
    """Test body validation for POST /api/youtube/extract."""

    @pytest.mark.asyncio
    async def test_missing_formats(self, client, anonymous_headers, youtube_url):
        """Test missing formats is a 400."""
        body = {"inputType": "url", "url": youtube_url, "language": "en"}
        response = await client.post("/api/youtube/extract", json=body, headers=anonymous_headers)
        assert response.status_code == 400
        assert response.json() == {"error": "Missing required parameters"}

    @pytest.mark.asyncio
    async def test_wrong_input_type(self, client, anonymous_headers, youtube_url):
        """Test only URL input is accepted."""
        body = {**_extract_body(youtube_url), "inputType": "csv"}
        response = await client.post("/api/youtube/extract", json=body, headers=anonymous_headers)
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid input type or missing data"}

    @pytest.mark.asyncio
    async def test_non_numeric_estimate_ignored(self, client, anonymous_headers, youtube_url):
        """Test a non-numeric coinCostEstimate is dropped instead of failing validation."""
        body = {**_extract_body(youtube_url), "coinCostEstimate": "unknown"}
        with patch.object(extraction_service, "process_youtube_url", AsyncMock(return_value=[_result()])):
            response = await client.post("/api/youtube/extract", json=body, headers=anonymous_headers)

        assert response.status_code == 200
        assert response.json()["subtitles"][0]["id"] == "dQw4w9WgXcQ-SRT-en"

    @pytest.mark.asyncio
    async def test_non_numeric_estimate_charges_computed_cost(self, client, youtube_url):
        """Test authenticated users with a string estimate pay the computed cost."""
        body = {**_extract_body(youtube_url, formats=("SRT", "VTT")), "coinCostEstimate": "3"}
        results = [_result(fmt="SRT"), _result(fmt="VTT")]
        with patch("fetchsub.routers.extract.verify_user_token", return_value="user-1"), \
                patch.object(extraction_service, "process_youtube_url", AsyncMock(return_value=results)), \
                patch.object(coin_service, "deduct_coins", return_value=8) as mock_deduct:
            response = await client.post("/api/youtube/extract", json=body,
                                         headers={"Authorization": "Bearer good-token"})

        assert response.status_code == 200
        mock_deduct.assert_called_once_with("user-1", 2, "EXTRACT_SUBTITLES")


class TestExtractRouter:
    """Test POST /api/youtube/extract responses."""

    @pytest.mark.asyncio
    async def test_anonymous_extraction(self, client, anonymous_headers, youtube_url):
        """Test anonymous users get results and are never charged."""
        with patch.object(extraction_service, "process_youtube_url", AsyncMock(return_value=[_result()])), \
                patch.object(coin_service, "deduct_coins") as mock_deduct:
            response = await client.post("/api/youtube/extract", json=_extract_body(youtube_url),
                                         headers=anonymous_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["subtitles"][0]["id"] == "dQw4w9WgXcQ-SRT-en"
        assert data["subtitles"][0]["videoTitle"] == "My Video"
        assert "error" not in data["subtitles"][0]
        assert data["stats"] == {"totalVideos": 1, "processedVideos": 1, "errorCount": 0}
        assert data["processingTime"].endswith("ms")
        mock_deduct.assert_not_called()

    @pytest.mark.asyncio
    async def test_authenticated_user_is_charged(self, client, youtube_url):
        """Test coins are deducted for processed videos."""
        results = [_result(fmt="SRT"), _result(fmt="VTT")]
        with patch("fetchsub.routers.extract.verify_user_token", return_value="user-1"), \
                patch.object(extraction_service, "process_youtube_url", AsyncMock(return_value=results)), \
                patch.object(coin_service, "deduct_coins", return_value=8) as mock_deduct:
            response = await client.post(
                "/api/youtube/extract",
                json=_extract_body(youtube_url, formats=("SRT", "VTT")),
                headers={"Authorization": "Bearer good-token"},
            )

        assert response.status_code == 200
        mock_deduct.assert_called_once_with("user-1", 2, "EXTRACT_SUBTITLES")

    @pytest.mark.asyncio
    async def test_nothing_processed_is_free(self, client, youtube_url):
        """Test users are not charged when every video failed."""
        with patch("fetchsub.routers.extract.verify_user_token", return_value="user-1"), \
                patch.object(extraction_service, "process_youtube_url",
                             AsyncMock(return_value=[_result(error="No subtitles")])), \
                patch.object(coin_service, "deduct_coins") as mock_deduct:
            response = await client.post("/api/youtube/extract", json=_extract_body(youtube_url),
                                         headers={"Authorization": "Bearer good-token"})

        assert response.status_code == 200
        assert response.json()["stats"]["errorCount"] == 1
        mock_deduct.assert_not_called()

    @pytest.mark.asyncio
    async def test_insufficient_coins(self, client, youtube_url):
        """Test 402 when the balance does not cover the charge."""
        with patch("fetchsub.routers.extract.verify_user_token", return_value="user-1"), \
                patch.object(extraction_service, "process_youtube_url", AsyncMock(return_value=[_result()])), \
                patch.object(coin_service, "deduct_coins", side_effect=InsufficientCoinsError(0, 1)):
            response = await client.post("/api/youtube/extract", json=_extract_body(youtube_url),
                                         headers={"Authorization": "Bearer good-token"})

        assert response.status_code == 402
        assert response.json() == {"error": "Insufficient coins for this operation", "requireMoreCoins": True}

    @pytest.mark.asyncio
    async def test_deduction_failure(self, client, youtube_url):
        """Test 500 when the deduction itself fails."""
        with patch("fetchsub.routers.extract.verify_user_token", return_value="user-1"), \
                patch.object(extraction_service, "process_youtube_url", AsyncMock(return_value=[_result()])), \
                patch.object(coin_service, "deduct_coins", side_effect=RuntimeError("rpc down")):
            response = await client.post("/api/youtube/extract", json=_extract_body(youtube_url),
                                         headers={"Authorization": "Bearer good-token"})

        assert response.status_code == 500
        assert response.json()["details"] == "rpc down"

    @pytest.mark.asyncio
    async def test_timeout_fallback(self, client, anonymous_headers, youtube_url):
        """Test a timed-out extraction returns the 200 fallback payload."""
        with patch.object(extraction_service, "process_youtube_url",
                          AsyncMock(side_effect=asyncio.TimeoutError())):
            response = await client.post("/api/youtube/extract", json=_extract_body(youtube_url),
                                         headers=anonymous_headers)

        assert response.status_code == 200
        assert response.headers["x-timeout-protection"] == "active"
        data = response.json()
        assert data["id"] == "timeout_fallback"
        assert data["isTimeoutFallback"] is True
        assert data["content"].startswith("[00:00] Request processing timed out")

    @pytest.mark.asyncio
    async def test_processing_error(self, client, anonymous_headers, youtube_url):
        """Test unexpected failures are reported as 500."""
        with patch.object(extraction_service, "process_youtube_url", AsyncMock(side_effect=RuntimeError("boom"))):
            response = await client.post("/api/youtube/extract", json=_extract_body(youtube_url),
                                         headers=anonymous_headers)

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to extract subtitles: boom"}

    @pytest.mark.asyncio
    async def test_large_result_sets_are_streamed(self, client, anonymous_headers, youtube_url):
        """Test results above the stream threshold are sent as JSON chunks."""
        settings = MagicMock(request_timeout=25, stream_threshold=1)
        results = [_result(fmt="SRT"), _result(fmt="VTT")]
        with patch("fetchsub.routers.extract.get_settings", return_value=settings), \
                patch.object(extraction_service, "process_youtube_url", AsyncMock(return_value=results)):
            response = await client.post("/api/youtube/extract", json=_extract_body(youtube_url, ("SRT", "VTT")),
                                         headers=anonymous_headers)

        assert response.status_code == 200
        assert response.text.startswith('{"status": "processing", "total": 2}')
        assert response.text.endswith('{"status": "complete"}')

    @pytest.mark.asyncio
    async def test_end_to_end_with_mocked_transcript(self, client, anonymous_headers, youtube_url, mock_lookups):
        """Test a single video runs through the real extraction pipeline."""
        response = await client.post("/api/youtube/extract", json=_extract_body(youtube_url, ("SRT", "TXT")),
                                     headers=anonymous_headers)

        assert response.status_code == 200
        subtitles = response.json()["subtitles"]
        assert [s["format"] for s in subtitles] == ["SRT", "TXT"]
        assert subtitles[1]["content"] == "Hello world\n\nSecond line"
        assert subtitles[0]["downloadUrl"] == "/api/youtube/download?id=dQw4w9WgXcQ&format=SRT&lang=en"


class TestQuickExtractRouter:
    """Test GET /api/youtube/extract."""

    @pytest.mark.asyncio
    async def test_missing_url(self, client):
        """Test the url parameter is required."""
        response = await client.get("/api/youtube/extract")
        assert response.status_code == 400
        assert response.json() == {"error": "URL parameter is required"}

    @pytest.mark.asyncio
    async def test_invalid_url(self, client):
        """Test non-YouTube URLs are rejected."""
        response = await client.get("/api/youtube/extract", params={"url": "https://example.com"})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_text_format(self, client, youtube_url, mock_lookups):
        """Test plain text output and metadata."""
        response = await client.get("/api/youtube/extract", params={"url": youtube_url})

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == "dQw4w9WgXcQ"
        assert data["videoTitle"] == "My Video"
        assert data["content"] == "Hello world\nSecond line"
        assert data["isGenerated"] is False
        assert data["fileSize"].endswith(" KB")
        assert data["downloadUrl"] == "http://test/api/youtube/download?id=dQw4w9WgXcQ&format=text&lang=en"
        assert "error" not in data

    @pytest.mark.asyncio
    async def test_srt_format(self, client, youtube_url, mock_lookups):
        """Test SRT output."""
        response = await client.get("/api/youtube/extract", params={"url": youtube_url, "format": "srt"})
        assert response.json()["content"].startswith("1\n00:00:00,000 --> 00:00:02,000\nHello world\n\n2\n")

    @pytest.mark.asyncio
    async def test_placeholder_when_no_transcript(self, client, youtube_url):
        """Test placeholder subtitles are returned when the transcript is unavailable."""
        error = TranscriptError(transcript_service.NOT_FOUND, "NOT_FOUND: no captions")
        with patch.object(video_info_service, "get_video_info", return_value=VideoInfo(title="My Video")), \
                patch.object(transcript_service, "fetch_transcript", side_effect=error):
            response = await client.get("/api/youtube/extract", params={"url": youtube_url})

        data = response.json()
        assert response.status_code == 200
        assert data["isGenerated"] is True
        assert data["error"] == "NOT_FOUND: no captions"
        assert data["content"].startswith("[00:00] Hello everyone, and welcome to My Video.")


class TestDownloadRouter:
    """Test GET /api/youtube/download."""

    @pytest.mark.asyncio
    async def test_missing_id(self, client):
        """Test the id parameter is required."""
        response = await client.get("/api/youtube/download")
        assert response.status_code == 400
        assert response.json() == {"error": "Missing video ID parameter"}

    @pytest.mark.asyncio
    async def test_single_file(self, client, mock_lookups):
        """Test one video in one format downloads as a single file."""
        response = await client.get("/api/youtube/download", params={"id": "dQw4w9WgXcQ", "format": "SRT"})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/x-subrip")
        assert response.headers["content-disposition"] == 'attachment; filename="My_Video.srt"'
        assert response.headers["cache-control"] == "no-cache"
        assert response.text.startswith("1\n00:00:00,000 --> 00:00:02,000\nHello world")

    @pytest.mark.asyncio
    async def test_multiple_formats_zip(self, client, mock_lookups):
        """Test several formats are packed into a ZIP archive."""
        response = await client.get("/api/youtube/download",
                                    params={"id": "dQw4w9WgXcQ", "formats": "SRT,TXT", "lang": "en"})

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/zip"
        assert response.headers["content-disposition"] == 'attachment; filename="subtitles_en.zip"'
        with zipfile.ZipFile(io.BytesIO(response.content)) as archive:
            assert archive.namelist() == ["My_Video_srt.srt", "My_Video_txt.txt"]
            assert archive.read("My_Video_txt.txt").decode("utf-8") == "Hello world\n\nSecond line"

    @pytest.mark.asyncio
    async def test_unavailable_transcript_body(self, client):
        """Test the file body explains a missing transcript."""
        error = TranscriptError(transcript_service.SUBTITLES_DISABLED, "SUBTITLES_DISABLED: off")
        with patch.object(video_info_service, "get_video_info", return_value=VideoInfo(title="My Video")), \
                patch.object(transcript_service, "fetch_transcript", side_effect=error):
            response = await client.get("/api/youtube/download", params={"id": "dQw4w9WgXcQ"})

        assert response.status_code == 200
        assert response.text == "Subtitles unavailable for My Video: SUBTITLES_DISABLED: off"


class TestPlaylistRouter:
    """Test playlist router endpoints."""

    @pytest.mark.asyncio
    async def test_playlist_info_missing_id(self, client):
        """Test the id parameter is required."""
        response = await client.get("/api/youtube/playlist-info")
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_playlist_info(self, client):
        """Test playlist metadata is returned in camelCase."""
        info = PlaylistInfo(title="Test Playlist", video_count=3, channel_name="Test Channel")
        with patch.object(playlist_service, "get_playlist_info", return_value=info):
            response = await client.get("/api/youtube/playlist-info", params={"id": "PLtest"})

        assert response.status_code == 200
        assert response.json() == {
            "title": "Test Playlist",
            "videoCount": 3,
            "isEstimate": False,
            "channelName": "Test Channel",
        }

    @pytest.mark.asyncio
    async def test_playlist_info_failure_returns_estimate(self, client):
        """Test unexpected failures still return 200 with an estimate."""
        with patch.object(playlist_service, "get_playlist_info", side_effect=RuntimeError("boom")):
            response = await client.get("/api/youtube/playlist-info", params={"id": "PLtest"})

        assert response.status_code == 200
        data = response.json()
        assert data["isEstimate"] is True
        assert data["videoCount"] == 25
        assert data["error"] == "boom"

    @pytest.mark.asyncio
    async def test_playlist_videos(self, client):
        """Test playlist video IDs are returned in order."""
        with patch.object(playlist_service, "get_playlist_video_ids", return_value=["aaaaaaaaaaa", "bbbbbbbbbbb"]):
            response = await client.get("/api/youtube/playlist-videos", params={"id": "PLtest"})

        assert response.json() == {"playlistId": "PLtest", "videoIds": ["aaaaaaaaaaa", "bbbbbbbbbbb"], "count": 2}

    @pytest.mark.asyncio
    async def test_playlist_videos_not_found(self, client):
        """Test unresolvable playlists are a 404."""
        with patch.object(playlist_service, "get_playlist_video_ids", side_effect=PlaylistError("nothing")):
            response = await client.get("/api/youtube/playlist-videos", params={"id": "PLtest"})
        assert response.status_code == 404


class TestCoinsRouter:
    """Test coins router endpoints."""

    @pytest.mark.asyncio
    async def test_estimate_single(self, client, youtube_url):
        """Test single video estimate."""
        response = await client.post("/api/coins/estimate", json={"url": youtube_url})
        assert response.json() == {"estimatedCost": 1, "isBatch": False}

    @pytest.mark.asyncio
    async def test_estimate_playlist(self, client, playlist_url):
        """Test playlist estimate."""
        response = await client.post("/api/coins/estimate", json={"url": playlist_url})
        assert response.json() == {"estimatedCost": 2.5, "isBatch": True}

    @pytest.mark.asyncio
    async def test_estimate_invalid_body(self, client):
        """Test the url field is required."""
        response = await client.post("/api/coins/estimate", json={})
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_balance_requires_token(self, client):
        """Test the balance endpoint requires a bearer token."""
        response = await client.get("/api/coins/balance")
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_balance(self, client):
        """Test the authenticated user's balance is returned."""
        with patch("fetchsub.routers.coins.verify_user_token", return_value="user-1"), \
                patch.object(coin_service, "get_user_balance", return_value=12):
            response = await client.get("/api/coins/balance", headers={"Authorization": "Bearer good-token"})

        assert response.status_code == 200
        assert response.json() == {"userId": "user-1", "balance": 12}


class TestSubscriptionsRouter:
    """Test the monthly credit endpoint."""

    @pytest.mark.asyncio
    async def test_missing_authorization(self, client):
        """Test a missing bearer header is 401."""
        response = await client.post("/api/subscriptions/monthly-credit")
        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized"}

    @pytest.mark.asyncio
    async def test_wrong_key(self, client):
        """Test a wrong cron key is 403."""
        response = await client.post("/api/subscriptions/monthly-credit", headers={"Authorization": "Bearer nope"})
        assert response.status_code == 403
        assert response.json() == {"error": "Invalid API key"}

    @pytest.mark.asyncio
    async def test_credit_run(self, client, cron_headers):
        """Test the credit run result is returned."""
        result = {"success": True, "processed": 1, "results": [{"userId": "u1", "status": "credited"}]}
        with patch.object(coin_service, "credit_monthly_subscriptions", return_value=result):
            response = await client.post("/api/subscriptions/monthly-credit", headers=cron_headers)

        assert response.status_code == 200
        assert response.json() == result

    @pytest.mark.asyncio
    async def test_credit_run_failure(self, client, cron_headers):
        """Test a failed run is a 500 with the error message."""
        with patch.object(coin_service, "credit_monthly_subscriptions", side_effect=RuntimeError("db down")):
            response = await client.post("/api/subscriptions/monthly-credit", headers=cron_headers)

        assert response.status_code == 500
        assert response.json() == {"error": "db down"}


class TestHealthRouter:
    """Test the health endpoint."""

    @pytest.mark.asyncio
    async def test_health(self, client):
        """Test the health payload and headers."""
        response = await client.get("/api/health")

        data = response.json()
        assert response.headers["x-health-check"] == "true"
        assert set(data["checks"]) == {"environment", "libraries", "filesystem", "responseTime"}
        assert data["checks"]["libraries"]["status"] == "pass"
        assert data["version"] == "1.0.0"
        assert response.status_code == (503 if data["status"] == "unhealthy" else 200)

    def test_overall_status(self):
        """Test healthy, degraded and unhealthy thresholds."""
        from fetchsub.routers.health import overall_status

        passing = {"status": "pass"}
        failing = {"status": "fail"}
        assert overall_status({"a": passing, "b": passing, "c": passing, "d": passing}) == "healthy"
        assert overall_status({"a": failing, "b": passing, "c": passing, "d": passing}) == "degraded"
        assert overall_status({"a": failing, "b": failing, "c": passing, "d": passing}) == "unhealthy"


class TestAdminRouter:
    """Test admin router endpoints."""

    @pytest.mark.asyncio
    async def test_credit_subscriptions_missing_api_key(self, client):
        """Test manual credit endpoint rejects missing API key."""
        response = await client.post("/admin/credit-subscriptions")
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_credit_subscriptions_with_api_key(self, client, api_headers):
        """Test manual credit endpoint with valid API key."""
        with patch("fetchsub.routers.admin.trigger_manual_credit") as mock_credit:
            mock_credit.return_value = {
                "success": True,
                "processed": 0,
                "results": [],
                "timestamp": "2026-10-01T00:00:00"
            }

            response = await client.post("/admin/credit-subscriptions", headers=api_headers)
            assert response.status_code == 200
            assert response.json()["success"] is True

    @pytest.mark.asyncio
    async def test_credit_subscriptions_failure(self, client, api_headers):
        """Test a failed manual run is a 500."""
        with patch("fetchsub.routers.admin.trigger_manual_credit") as mock_credit:
            mock_credit.return_value = {"success": False, "error": "db down", "timestamp": "2026-10-01T00:00:00"}
            response = await client.post("/admin/credit-subscriptions", headers=api_headers)
        assert response.status_code == 500

    @pytest.mark.asyncio
    async def test_scheduler_status_missing_api_key(self, client):
        """Test scheduler status endpoint rejects missing API key."""
        response = await client.get("/admin/credit-scheduler/status")
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_scheduler_status_with_api_key(self, client, api_headers):
        """Test scheduler status reports a stopped scheduler in tests."""
        response = await client.get("/admin/credit-scheduler/status", headers=api_headers)
        assert response.status_code == 200
        assert response.json() == {"running": False, "message": "Scheduler not started"}


class TestRoot:
    """Test the root endpoint."""

    @pytest.mark.asyncio
    async def test_root(self, client):
        """Test service name and version."""
        response = await client.get("/")
        assert response.status_code == 200
        assert response.json()["name"] == "FetchSub API"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
