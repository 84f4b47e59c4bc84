"""
Caption text cleanup.

Auto-generated YouTube captions arrive HTML-escaped, littered with VTT inline
tags and sound cues, and with phrases repeated across overlapping cues. This
module turns them into readable prose:

1. strip tags, positioning and [Music]-style artifacts from each cue
2. drop words that repeat a phrase seen within the last few words
3. fix punctuation spacing, sentence capitalization and common contractions
4. group sentences into paragraphs
5. remove filler words
6. normalize whitespace and capitalize each paragraph

The paragraph step uses a seeded random draw, so the same transcript always
produces the same output.
"""

import random
import re
import zlib
from typing import Iterable, List

from fetchsub.models.schemas import TranscriptItem


def _char_from_code(code: int, original: str) -> str:
    try:
        return chr(code)
    except (ValueError, OverflowError):
        return original


# Applied in order; double-encoded entities must be handled before &amp;
_ENTITY_RULES = [
    (re.compile(r'&amp;#(\d+);'), lambda m: _char_from_code(int(m.group(1)), m.group(0))),
    (re.compile(r'&amp;#x([0-9a-fA-F]+);'), lambda m: _char_from_code(int(m.group(1), 16), m.group(0))),
    (re.compile(r'&amp;'), '&'),
    (re.compile(r'&lt;'), '<'),
    (re.compile(r'&gt;'), '>'),
    (re.compile(r'&quot;'), '"'),
    (re.compile(r'&#39;'), "'"),
    (re.compile(r'&apos;'), "'"),
    (re.compile(r'&nbsp;'), ' '),
    (re.compile(r'&#(\d+);'), lambda m: _char_from_code(int(m.group(1)), m.group(0))),
    (re.compile(r'&#x([0-9a-fA-F]+);'), lambda m: _char_from_code(int(m.group(1), 16), m.group(0))),
    (re.compile(r'&rsquo;'), "'"),
    (re.compile(r'&lsquo;'), "'"),
    (re.compile(r'&rdquo;'), '"'),
    (re.compile(r'&ldquo;'), '"'),
    (re.compile(r'&mdash;'), '—'),
    (re.compile(r'&ndash;'), '–'),
]


def decode_html_entities(text: str) -> str:
    """Decode the HTML entities YouTube leaves in caption text."""
    for pattern, replacement in _ENTITY_RULES:
        text = pattern.sub(replacement, text)
    return text


_CUE_ARTIFACTS = [
    re.compile(r'<\d{2}:\d{2}:\d{2}\.\d{3}>'),
    re.compile(r'</?[cv][^>]*>'),
    re.compile(r'<[^>]*>'),
    re.compile(r'align:start position:\d+%'),
    re.compile(r'\[Music\]', re.IGNORECASE),
    re.compile(r'\[Applause\]', re.IGNORECASE),
    re.compile(r'\[Laughter\]', re.IGNORECASE),
    re.compile(r'\[Silence\]', re.IGNORECASE),
]

_CONTRACTIONS = [
    (re.compile(r'\bwont\b'), "won't"),
    (re.compile(r'\bdont\b'), "don't"),
    (re.compile(r'\bcant\b'), "can't"),
    (re.compile(r'\bweve\b'), "we've"),
    (re.compile(r'\btheyre\b'), "they're"),
    (re.compile(r'\byoure\b'), "you're"),
    (re.compile(r'\bits\b'), "it's"),
    (re.compile(r'\bim\b', re.IGNORECASE), "I'm"),
]

_TRANSITION_PATTERN = re.compile(
    r'\b(however|meanwhile|furthermore|moreover|therefore|consequently|in conclusion|finally|next|first|second|third)\b',
    re.IGNORECASE
)

_FILLERS = [
    re.compile(r'\bum,?\s+', re.IGNORECASE),
    re.compile(r'\buh,?\s+', re.IGNORECASE),
    re.compile(r'\byou know,?\s+', re.IGNORECASE),
    re.compile(r'\bI mean,?\s+', re.IGNORECASE),
    re.compile(r'\bbasically,?\s+', re.IGNORECASE),
    re.compile(r'\bliterally,?\s+', re.IGNORECASE),
]

DEDUP_WINDOW = 8
MIN_PARAGRAPH_SENTENCES = 4
MAX_PARAGRAPH_SENTENCES = 6


def strip_cue_artifacts(text: str) -> str:
    """Remove VTT tags, positioning and sound cues from one caption line."""
    for pattern in _CUE_ARTIFACTS:
        text = pattern.sub('', text)
    text = text.replace('\n', ' ')
    return re.sub(r'\s+', ' ', text).strip()


def remove_repeated_phrases(words: List[str], window: int = DEDUP_WINDOW) -> List[str]:
    """
    Drop words that start a phrase already spoken within the last `window` words.

    Word i is dropped when, for some 1 <= j <= window, the pair (i, i+1) equals
    (i-j, i-j+1) and at least two consecutive words (checking up to four) match.
    Only positions i >= window are considered, and matching is done against
    the original word list.
    """
    kept = []
    for i, word in enumerate(words):
        duplicate = False
        if i >= window:
            for j in range(1, window + 1):
                if i - j < 0:
                    break
                if words[i - j] != word or i + 1 >= len(words) or words[i + 1] != words[i - j + 1]:
                    continue
                match_length = 0
                for k in range(4):
                    if i + k >= len(words) or words[i + k] != words[i - j + k]:
                        break
                    match_length += 1
                if match_length >= 2:
                    duplicate = True
                    break
        if not duplicate:
            kept.append(word)
    return kept


def fix_punctuation(text: str) -> str:
    """Normalize punctuation spacing, sentence capitals and missing apostrophes."""
    text = re.sub(r'\s+([.!?,:;])', r'\1', text)
    text = re.sub(r'([.!?])\s*([a-z])', r'\1 \2', text)
    text = re.sub(r'([.!?]\s+)([a-z])', lambda m: m.group(1) + m.group(2).upper(), text)
    for pattern, replacement in _CONTRACTIONS:
        text = pattern.sub(replacement, text)
    return re.sub(r'\s+', ' ', text).strip()


def split_paragraphs(text: str) -> str:
    """
    Group sentences into paragraphs separated by a blank line.

    A paragraph closes once it has at least four sentences and either reaches
    six, the latest sentence has a transition word, or a seeded draw exceeds 0.7.
    """
    rng = random.Random(zlib.crc32(text.encode('utf-8')))
    parts = re.split(r'([.!?]+\s+)', text)

    paragraphs = []
    current = ''
    count = 0
    for i in range(0, len(parts), 2):
        sentence = parts[i]
        punctuation = parts[i + 1] if i + 1 < len(parts) else ''
        if not sentence.strip():
            continue
        current += sentence + punctuation
        count += 1
        if count >= MIN_PARAGRAPH_SENTENCES and (
            count >= MAX_PARAGRAPH_SENTENCES
            or _TRANSITION_PATTERN.search(sentence)
            or rng.random() > 0.7
        ):
            paragraphs.append(current.strip())
            current = ''
            count = 0

    if current.strip():
        paragraphs.append(current.strip())
    return '\n\n'.join(paragraphs)


def remove_fillers(text: str) -> str:
    for pattern in _FILLERS:
        text = pattern.sub(' ', text)
    return text


def _final_cleanup(text: str) -> str:
    # Whitespace is collapsed per line so paragraph breaks survive
    text = re.sub(r'[ \t]+', ' ', text)
    text = re.sub(r'[ \t]+([.!?,:;])', r'\1', text)
    text = re.sub(r'\n[ \t]+', '\n', text)
    text = re.sub(r'[ \t]+\n', '\n', text)
    text = re.sub(r'\n{3,}', '\n\n', text)
    text = text.strip()

    paragraphs = [p[:1].upper() + p[1:] if p else p for p in text.split('\n\n')]
    return '\n\n'.join(paragraphs)


def clean_text(items: Iterable[TranscriptItem]) -> str:
    """Render transcript cues as cleaned, paragraphed prose (the CLEAN_TEXT format)."""
    cleaned = [strip_cue_artifacts(item.text) for item in items]
    raw_text = ' '.join(text for text in cleaned if text)
    if not raw_text:
        return ''

    raw_text = ' '.join(remove_repeated_phrases(raw_text.split(' ')))
    raw_text = fix_punctuation(raw_text)
    text = split_paragraphs(raw_text)
    text = remove_fillers(text)
    return _final_cleanup(text)
