"""
Pytest configuration and shared fixtures for test suite.

This module provides:
- Test client fixtures for FastAPI
- Mock API key fixtures
- Mock environment variables
- Shared transcript and yt-dlp fixtures
"""

import os
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from unittest.mock import patch

TEST_ENV = {
    "API_KEY": "test-api-key",
    "ALLOWED_ORIGIN": "*",
    "SUBSCRIPTION_CRON_API_KEY": "test-cron-key",
    "DEPLOY_ENV": "test",
    "REQUEST_TIMEOUT": "25",
    "CREDIT_SCHEDULER_ENABLED": "false",
}

# Settings are cached on first import, so they must be in place before any
# fetchsub module is loaded by a test module.
for _key, _value in TEST_ENV.items():
    os.environ.setdefault(_key, _value)


@pytest.fixture(scope="session")
def mock_env_vars():
    """Mock environment variables for testing."""
    with patch.dict(os.environ, TEST_ENV):
        yield


@pytest.fixture
def api_key():
    """Return test API key."""
    return "test-api-key"


@pytest.fixture
def api_headers(api_key):
    """Return headers with API key."""
    return {"X-API-Key": api_key}


@pytest.fixture
def cron_headers():
    """Return headers with the subscription cron bearer key."""
    return {"Authorization": "Bearer test-cron-key"}


@pytest.fixture
def anonymous_headers():
    """Return headers for an anonymous extraction request."""
    return {"X-Anonymous-User": "true"}


@pytest_asyncio.fixture
async def client(mock_env_vars):
    """
    Create async test client for FastAPI app.

    Uses httpx AsyncClient with ASGITransport to test the FastAPI app
    without needing to run a server.
    """
    # Import app after env vars are mocked
    from main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def transcript_items():
    """Three caption cues in milliseconds."""
    from fetchsub.models import TranscriptItem

    return [
        TranscriptItem(text="Hello world", offset=0, duration=2000),
        TranscriptItem(text="This is a test", offset=2000, duration=3000),
        TranscriptItem(text="Goodbye &amp; thanks", offset=5000, duration=1500),
    ]


@pytest.fixture
def mock_ytdlp_info():
    """Mock yt-dlp video info response with caption tracks."""
    return {
        "id": "dQw4w9WgXcQ",
        "title": "Test Video Title",
        "duration": 120,
        "uploader": "Test Channel",
        "subtitles": {
            "en": [
                {"ext": "json3", "url": "https://example.com/subs.json3"},
                {"ext": "vtt", "url": "https://example.com/subs.vtt"},
            ]
        },
        "automatic_captions": {
            "de": [{"ext": "vtt", "url": "https://example.com/auto-de.vtt"}],
        },
    }


@pytest.fixture
def mock_ytdlp_playlist_info():
    """Mock yt-dlp flat playlist info response."""
    return {
        "_type": "playlist",
        "title": "Test Playlist",
        "channel": "Test Channel",
        "playlist_count": 3,
        "entries": [
            {"id": "aaaaaaaaaaa", "title": "Video 1"},
            None,
            {"id": "bbbbbbbbbbb", "title": "Video 2"},
            {"id": "short", "title": "Not a video"},
        ],
    }


@pytest.fixture
def youtube_url():
    """Sample YouTube URL for testing."""
    return "https://www.youtube.com/watch?v=dQw4w9WgXcQ"


@pytest.fixture
def playlist_url():
    """Sample YouTube playlist URL for testing."""
    return "https://www.youtube.com/playlist?list=PLtest12345"


@pytest.fixture
def sample_vtt():
    """Minimal WebVTT document with a header, a numbered cue and a multi-line cue."""
    return (
        "WEBVTT\n"
        "Kind: captions\n"
        "Language: en\n"
        "\n"
        "1\n"
        "00:00:01.000 --> 00:00:03.500 align:start position:0%\n"
        "First line\n"
        "\n"
        "00:03.500 --> 00:00:06.000\n"
        "Second cue\n"
        "continues here\n"
    )


# Mark all tests as asyncio
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "asyncio: mark test as an async test"
    )
