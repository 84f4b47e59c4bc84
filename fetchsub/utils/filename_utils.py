"""
Filename utility functions for subtitle downloads.

This module provides utilities for:
- Building ASCII-safe filename stems from video titles
- Mapping subtitle formats to file extensions and MIME types
- Encoding filenames for Content-Disposition headers
"""

import re
import unicodedata
from urllib.parse import quote


FORMAT_EXTENSIONS = {
    'SRT': '.srt',
    'VTT': '.vtt',
    'JSON': '.json',
    'ASS': '.ass',
    'SMI': '.smi',
    'LRC': '.lrc',
}

FORMAT_MIME_TYPES = {
    'SRT': 'application/x-subrip',
    'VTT': 'text/vtt',
    'JSON': 'application/json',
    'ASS': 'text/x-ssa',
    'SMI': 'application/smil+xml',
    'LRC': 'text/plain',
}


def safe_title(title: str, max_length: int = 50) -> str:
    """Replace every non-alphanumeric ASCII character with '_' and truncate."""
    return re.sub(r'[^a-z0-9]', '_', title, flags=re.IGNORECASE)[:max_length]


def get_format_extension(fmt: str) -> str:
    """File extension for a subtitle format; text formats fall back to .txt."""
    return FORMAT_EXTENSIONS.get(fmt.upper(), '.txt')


def get_format_mime_type(fmt: str) -> str:
    return FORMAT_MIME_TYPES.get(fmt.upper(), 'text/plain')


def encode_content_disposition_filename(filename: str) -> str:
    """Encode filename for Content-Disposition header following RFC 5987."""
    # For ASCII filenames, use simple format
    try:
        filename.encode('ascii')
        safe_filename = filename.replace('"', '\\"')
        return f'attachment; filename="{safe_filename}"'
    except UnicodeEncodeError:
        # For Unicode filenames, use RFC 5987 encoding with an ASCII fallback
        encoded_filename = quote(filename, safe='')
        ascii_filename = unicodedata.normalize('NFD', filename)
        ascii_filename = ascii_filename.encode('ascii', 'ignore').decode('ascii')
        ascii_filename = ascii_filename.replace('"', '\\"') or 'subtitles'
        return f'attachment; filename="{ascii_filename}"; filename*=UTF-8\'\'{encoded_filename}'
