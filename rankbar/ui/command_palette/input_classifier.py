"""
Input classification for the command palette.

Decides from the shape of the text alone whether the user is searching
commands, pasting a URL, or asking for content ideas.
"""

import re
from enum import Enum
from urllib.parse import urlsplit

from rankbar.config.constants import AI_MIN_LENGTH
from rankbar.exceptions import InvalidInputError

_DOMAIN_SUFFIX = re.compile(r"\.[a-z]{2,}")


class InputMode(Enum):
    """What the current palette text asks for."""

    SEARCH = "search"  # Filter the command list
    URL = "url"  # Analyze a site
    AI = "ai"  # Generate content ideas


def classify(text: str) -> InputMode:
    """Classify palette text. Total: every string maps to a mode.

    URL-shaped text wins over length, so a long domain is still a URL.
    """
    value = text.strip().lower()

    if "." in value and (
        "http" in value
        or not any(ch.isspace() for ch in value)
        or _DOMAIN_SUFFIX.search(value)
    ):
        return InputMode.URL
    if len(value) > AI_MIN_LENGTH:
        return InputMode.AI
    return InputMode.SEARCH


def normalize_url(text: str) -> tuple[str, str]:
    """Turn palette text into ``(url, domain)``.

    Text without a scheme gets ``https://``; a leading ``www.`` is dropped
    from the domain.

    Raises:
        InvalidInputError: If no hostname can be extracted.
    """
    url = text.strip()
    if not url.startswith("http"):
        url = f"https://{url}"

    try:
        hostname = urlsplit(url).hostname
    except ValueError as e:
        raise InvalidInputError("Invalid URL", text=text) from e
    if not hostname or any(ch.isspace() for ch in hostname):
        raise InvalidInputError("Invalid URL", text=text)

    domain = hostname[4:] if hostname.startswith("www.") else hostname
    return url, domain
