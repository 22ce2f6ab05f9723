"""Filesafe slug conversion for note titles.

Converts titles to lowercase kebab-case slugs usable as file names and URL
path segments.
"""

import re
import unicodedata


def to_kebab_case(text: str) -> str:
    """Convert a title to a lowercase kebab-case slug.

    Conversion rules:
    - Accents are stripped (é → e)
    - camelCase boundaries become hyphens
    - Runs of anything other than letters and digits become one hyphen
    - Leading and trailing hyphens are trimmed

    Examples:
        >>> to_kebab_case("Hello World")
        'hello-world'
        >>> to_kebab_case("API Reference: Getting Started")
        'api-reference-getting-started'
        >>> to_kebab_case("myNoteTitle")
        'my-note-title'
    """
    normalized = unicodedata.normalize('NFKD', text)
    ascii_text = normalized.encode('ascii', 'ignore').decode('ascii')

    # Split camelCase and acronym boundaries: "myHTTPServer" -> "my HTTP Server"
    spaced = re.sub(r'([a-z0-9])([A-Z])', r'\1 \2', ascii_text)
    spaced = re.sub(r'([A-Z]+)([A-Z][a-z])', r'\1 \2', spaced)

    slug = re.sub(r'[^A-Za-z0-9]+', '-', spaced).strip('-')
    return slug.lower()
