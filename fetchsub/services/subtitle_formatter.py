"""
Subtitle formatting service.

Renders transcript cues into the supported output formats:
SRT, VTT, TXT/PLAIN, PARAGRAPH, CLEAN_TEXT, JSON, ASS, SMI and LRC.
Unknown formats fall back to plain text.
"""

import json
import math
import re
from typing import Callable, Dict, List

from fetchsub.models.schemas import TranscriptItem
from fetchsub.utils.text_cleaning import clean_text, decode_html_entities
from fetchsub.utils.timestamp_utils import (
    format_srt_time,
    format_vtt_time,
    format_ass_time,
    format_lrc_time,
    format_clock,
)


FORMAT_ALIASES = {
    'TEXT': 'TXT',
    'CLEAN': 'CLEAN_TEXT',
    'SAMI': 'SMI',
    'LYRICS': 'LRC',
    'ADVANCED_SUBSTATION': 'ASS',
}


def normalize_format(fmt: str) -> str:
    """Upper-case a format name and resolve aliases (TEXT -> TXT, SAMI -> SMI, ...)."""
    key = (fmt or '').strip().upper()
    return FORMAT_ALIASES.get(key, key)


def file_size_label(content: str) -> str:
    """Approximate size label, rounded up to whole kilobytes."""
    return f"{math.ceil(len(content) / 1024)}KB"


def _to_srt(items: List[TranscriptItem], title: str) -> str:
    blocks = []
    for index, item in enumerate(items, 1):
        text = item.text.replace('\n', '\r\n')
        blocks.append(f"{index}\n{format_srt_time(item.offset)} --> {format_srt_time(item.end)}\n{text}")
    return '\n\n'.join(blocks)


def _to_vtt(items: List[TranscriptItem], title: str) -> str:
    blocks = [f"{format_vtt_time(item.offset)} --> {format_vtt_time(item.end)}\n{item.text}" for item in items]
    return "WEBVTT\n\n" + '\n\n'.join(blocks)


def _to_plain(items: List[TranscriptItem], title: str) -> str:
    return '\n\n'.join(item.text for item in items)


def _to_paragraph(items: List[TranscriptItem], title: str) -> str:
    return ' '.join(item.text.replace('\n', ' ') for item in items)


def _to_clean_text(items: List[TranscriptItem], title: str) -> str:
    return clean_text(items)


def _to_json(items: List[TranscriptItem], title: str) -> str:
    entries = [
        {
            'id': index,
            'startTime': format_vtt_time(item.offset),
            'endTime': format_vtt_time(item.end),
            'startSeconds': item.offset / 1000,
            'endSeconds': item.end / 1000,
            'text': item.text,
        }
        for index, item in enumerate(items, 1)
    ]
    return json.dumps({
        'title': title,
        'entries': entries,
        'totalCount': len(items),
        'totalDuration': sum(item.duration for item in items) / 1000,
    }, indent=2, ensure_ascii=False)


ASS_HEADER = (
    "[Script Info]\n"
    "Title: {title}\n"
    "ScriptType: v4.00+\n"
    "WrapStyle: 0\n"
    "PlayResX: 1280\n"
    "PlayResY: 720\n"
    "\n"
    "[V4+ Styles]\n"
    "Format: Name, Fontname, Fontsize, PrimaryColour, SecondaryColour, OutlineColour, BackColour, "
    "Bold, Italic, Underline, StrikeOut, ScaleX, ScaleY, Spacing, Angle, BorderStyle, Outline, "
    "Shadow, Alignment, MarginL, MarginR, MarginV, Encoding\n"
    "Style: Default,Arial,20,&H00FFFFFF,&H000000FF,&H00000000,&H00000000,0,0,0,0,100,100,0,0,1,2,2,2,10,10,10,1\n"
    "\n"
    "[Events]\n"
    "Format: Layer, Start, End, Style, Name, MarginL, MarginR, MarginV, Effect, Text\n"
)


def _to_ass(items: List[TranscriptItem], title: str) -> str:
    events = [
        f"Dialogue: 0,{format_ass_time(item.offset)},{format_ass_time(item.end)},Default,,0,0,0,,"
        + item.text.replace('\n', '\\N')
        for item in items
    ]
    return ASS_HEADER.format(title=title) + '\n'.join(events)


SMI_HEADER = (
    "<SAMI>\n<HEAD>\n<TITLE>{title}</TITLE>\n"
    "<STYLE TYPE=\"text/css\">\n"
    "P {{ font-family: Arial; font-weight: normal; color: white; background-color: black; text-align: center; }}\n"
    ".ENCC {{ name: English; lang: en-US; }}\n"
    "</STYLE>\n</HEAD>\n<BODY>\n"
)


def _to_smi(items: List[TranscriptItem], title: str) -> str:
    cues = ''.join(
        f"<SYNC Start={item.offset}>\n<P Class=ENCC>{item.text.replace(chr(10), '<BR>')}</P>\n</SYNC>\n"
        for item in items
    )
    return SMI_HEADER.format(title=title) + cues + "</BODY>\n</SAMI>"


def _to_lrc(items: List[TranscriptItem], title: str) -> str:
    metadata = '\n'.join([
        f"[ti:{title}]",
        "[ar:FetchSub]",
        "[al:Generated Subtitles]",
        "[by:FetchSub Subtitle Extractor]",
        f"[length:{format_lrc_time(items[-1].end)}]",
        "",
    ])
    lines = []
    for item in items:
        # Lines of a multi-line cue are staggered by 200ms
        for line_index, line in enumerate(item.text.split('\n')):
            lines.append(f"[{format_lrc_time(item.offset + line_index * 200)}]{line}")
    return metadata + '\n'.join(lines)


FORMATTERS: Dict[str, Callable[[List[TranscriptItem], str], str]] = {
    'SRT': _to_srt,
    'VTT': _to_vtt,
    'TXT': _to_plain,
    'PLAIN': _to_plain,
    'PARAGRAPH': _to_paragraph,
    'CLEAN_TEXT': _to_clean_text,
    'JSON': _to_json,
    'ASS': _to_ass,
    'SMI': _to_smi,
    'LRC': _to_lrc,
}

SUPPORTED_FORMATS = list(FORMATTERS.keys())


def format_transcript(items: List[TranscriptItem], fmt: str, video_title: str) -> str:
    """
    Render transcript cues in the requested format.

    HTML entities are decoded in every cue before rendering.

    Raises:
        ValueError: if there are no cues
    """
    if not items:
        raise ValueError("No transcript data available")

    decoded = [item.model_copy(update={'text': decode_html_entities(item.text)}) for item in items]
    formatter = FORMATTERS.get(normalize_format(fmt), _to_plain)
    return formatter(decoded, video_title)


_STOP_WORDS = {'this', 'that', 'with', 'about', 'from', 'have', 'what'}


def generate_placeholder_subtitles(video_title: str, fmt: str) -> str:
    """
    Build a generic narrated script around the video title.

    Only used as a last resort when a transcript cannot be fetched; callers
    must flag the result as generated.
    """
    keywords = [
        word for word in re.split(r'\s+', re.sub(r'[^a-z0-9\s]', '', video_title.lower()))
        if len(word) > 3 and word not in _STOP_WORDS
    ]

    def keyword(index: int):
        return keywords[index] if len(keywords) > index else None

    second = keyword(1)
    script = [
        (f"Hello everyone, and welcome to {video_title}.", 4),
        ("My name is Alex, and today we'll be exploring everything you need to know about this topic.", 5),
        (f"In this comprehensive guide, we'll cover all the essential aspects of {keyword(0) or 'this subject'}.", 5),
        ("Let's start by understanding the core concepts.", 3),
        (f"{second.capitalize()} is one of the most important elements to consider." if second
         else "Understanding the fundamentals is crucial for success in this area.", 4),
        ("Many people often overlook these details, but they're essential for a complete understanding.", 5),
        ("Now, let's move on to some practical applications.", 3),
        (f"When working with {keyword(2)}, remember to always prioritize quality and efficiency." if keyword(2)
         else "The practical implementation requires careful attention to detail.", 5),
        ("This approach will help you achieve better results in less time.", 4),
        ("Next, let's address some common questions and misconceptions.", 4),
        (f"Many people wonder about {keyword(0)}, and the answer might surprise you." if keyword(0)
         else "There are several misconceptions about this topic that need clarification.", 5),
        ("The research actually shows a different perspective than what's commonly believed.", 4),
        ("As we wrap up, let's summarize the key points we've covered today.", 4),
        ("Remember that consistent practice and application of these principles is crucial for mastery.", 5),
        (f"Thank you for watching this video on {video_title}.", 3),
        ("If you found this content helpful, please consider subscribing for more videos like this one.", 5),
    ]

    timed = []
    current = 0
    for text, duration in script:
        timed.append((current, current + duration, text))
        current += duration

    normalized = normalize_format(fmt)
    if normalized == 'SRT':
        return '\n\n'.join(
            f"{i}\n{format_srt_time(start * 1000)} --> {format_srt_time(end * 1000)}\n{text}"
            for i, (start, end, text) in enumerate(timed, 1)
        )
    if normalized == 'VTT':
        return "WEBVTT\n\n" + '\n\n'.join(
            f"{format_vtt_time(start * 1000)} --> {format_vtt_time(end * 1000)}\n{text}"
            for start, end, text in timed
        )
    if normalized == 'JSON':
        return json.dumps([{'start': start, 'end': end, 'text': text} for start, end, text in timed], indent=2)
    return '\n\n'.join(f"[{format_clock(start)}] {text}" for start, _, text in timed)
