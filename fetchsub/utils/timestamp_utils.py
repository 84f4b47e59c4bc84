"""
Timestamp utility functions for parsing and formatting subtitle timestamps.

All functions work in integer milliseconds, the unit transcript cues are stored in.

This module provides utilities for:
- Parsing VTT/SRT timestamps to milliseconds
- Formatting milliseconds for SRT, VTT, ASS, LRC and plain-text clocks
"""

import re


_HMS_PATTERN = re.compile(r'(\d+):(\d+):(\d+)[.,](\d+)')
_MS_PATTERN = re.compile(r'(\d+):(\d+)[.,](\d+)')


def parse_vtt_time(timestamp: str) -> int:
    """
    Parse a VTT/SRT timestamp to milliseconds.
    Supports "HH:MM:SS.mmm", "MM:SS.mmm" and the SRT comma variant.
    Unparseable input returns 0.
    """
    hours = minutes = seconds = millis = 0
    match = _HMS_PATTERN.search(timestamp)
    if match:
        hours, minutes, seconds = int(match.group(1)), int(match.group(2)), int(match.group(3))
        millis = int(match.group(4))
    else:
        match = _MS_PATTERN.search(timestamp)
        if match:
            minutes, seconds = int(match.group(1)), int(match.group(2))
            millis = int(match.group(3))
    return (hours * 3600 + minutes * 60 + seconds) * 1000 + millis


def _split_ms(ms: int):
    ms = max(0, int(ms))
    hours = ms // 3_600_000
    minutes = (ms % 3_600_000) // 60_000
    seconds = (ms % 60_000) // 1000
    return hours, minutes, seconds, ms % 1000


def format_srt_time(ms: int) -> str:
    """Convert milliseconds to SRT timestamp format: HH:MM:SS,mmm"""
    hours, minutes, seconds, millis = _split_ms(ms)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d},{millis:03d}"


def format_vtt_time(ms: int) -> str:
    """Convert milliseconds to VTT timestamp format: HH:MM:SS.mmm"""
    hours, minutes, seconds, millis = _split_ms(ms)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}.{millis:03d}"


def format_ass_time(ms: int) -> str:
    """Convert milliseconds to ASS timestamp format: H:MM:SS.cc"""
    hours, minutes, seconds, millis = _split_ms(ms)
    return f"{hours}:{minutes:02d}:{seconds:02d}.{millis // 10:02d}"


def format_lrc_time(ms: int) -> str:
    """Convert milliseconds to LRC timestamp format: mm:ss.xx (minutes are not wrapped)"""
    ms = max(0, int(ms))
    minutes = ms // 60_000
    seconds = (ms % 60_000) // 1000
    return f"{minutes:02d}:{seconds:02d}.{(ms % 1000) // 10:02d}"


def format_clock(seconds: float) -> str:
    """Plain-text [MM:SS] clock used by placeholder transcripts."""
    minutes = int(seconds // 60)
    return f"{minutes:02d}:{int(seconds % 60):02d}"
