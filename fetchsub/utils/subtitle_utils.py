"""Subtitle parsing utilities for VTT caption files."""

import re
from typing import List

from fetchsub.models.schemas import TranscriptItem
from fetchsub.utils.timestamp_utils import parse_vtt_time


def parse_vtt_cues(vtt_content: str) -> List[TranscriptItem]:
    """
    Parse VTT content into transcript cues.

    Header lines before the first "-->" are skipped. Each timing line opens a
    cue; its text lines are joined with a space and a blank line closes it.
    """
    lines = re.split(r'\r?\n', vtt_content)
    cues: List[TranscriptItem] = []

    i = 0
    while i < len(lines) and '-->' not in lines[i]:
        i += 1

    current_text = ''
    current_start = 0
    current_duration = 0

    for line in lines[i:]:
        line = line.strip()

        if '-->' in line:
            start, end = [part.strip() for part in line.split('-->', 1)]
            current_start = parse_vtt_time(start)
            current_duration = parse_vtt_time(end) - current_start
            current_text = ''
        elif line and not line.isdigit() and not line.startswith('WEBVTT'):
            current_text = f"{current_text} {line}" if current_text else line
        elif not line and current_text:
            cues.append(TranscriptItem(text=current_text, offset=current_start, duration=current_duration))
            current_text = ''

    if current_text:
        cues.append(TranscriptItem(text=current_text, offset=current_start, duration=current_duration))

    return cues
