"""Language code helpers."""

LANGUAGE_NAMES = {
    'en': 'English',
    'es': 'Spanish',
    'fr': 'French',
    'de': 'German',
    'it': 'Italian',
    'pt': 'Portuguese',
    'ru': 'Russian',
    'ja': 'Japanese',
    'ko': 'Korean',
    'zh': 'Chinese',
    'ar': 'Arabic',
    'hi': 'Hindi',
    'auto': 'Auto-detected',
}


def get_language_name(code: str) -> str:
    """Display name for a language code; unknown codes are returned unchanged."""
    return LANGUAGE_NAMES.get(code, code)


def resolve_language(code: str) -> str:
    """Transcript language to request: 'auto' means English first."""
    return 'en' if not code or code == 'auto' else code
