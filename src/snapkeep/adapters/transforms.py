"""Regex-based transforms for stabilizing snapshot text.

Each transform replaces one kind of volatile content with a fixed
placeholder that the same pattern can never match again, which keeps every
transform idempotent:

- `PathScrubber`: a known absolute path (e.g. a temporary directory).
- `TimestampScrubber`: ISO-8601 dates and datetimes.
- `AddressScrubber`: ``0x`` memory addresses as printed by default reprs.
- `SecretScrubber`: passwords, tokens and API keys; in strict mode also
  usernames/ids.
"""

from __future__ import annotations

import os
import re
from enum import Enum

from snapkeep.interfaces.transform import TextTransform

# pylint: disable=too-few-public-methods

PLACEHOLDER = "***"
SECRET_KEYWORDS = [
    "password",
    "passwd",
    "pwd",
    "secret",
    "token",
    "api_key",
    "apikey",
    "access_token",
    "refresh_token",
    "id_token",
    "authorization",
]
STRICT_MODE_ADDITIONAL_KEYWORDS = ["user", "username", "uid"]
STRICT_MODE_SECRET_KEYWORDS = SECRET_KEYWORDS + STRICT_MODE_ADDITIONAL_KEYWORDS
SECRET_KEYWORDS_PATTERN = "|".join(kw.replace("_", "[-_]?") for kw in SECRET_KEYWORDS)
STRICT_MODE_SECRET_KEYWORDS_PATTERN = "|".join(
    kw.replace("_", "[-_]?") for kw in STRICT_MODE_SECRET_KEYWORDS
)
KEY_VALUE_SECRET_PATTERN = re.compile(
    rf"(\b(?:{SECRET_KEYWORDS_PATTERN})\s*[:=]\s*)[^\s&;,]+", re.IGNORECASE
)
STRICT_MODE_KEY_VALUE_SECRET_PATTERN = re.compile(
    rf"(\b(?:{STRICT_MODE_SECRET_KEYWORDS_PATTERN})\s*[:=]\s*)[^\s&;,]+",
    re.IGNORECASE,
)
BEARER_PATTERN = re.compile(r"(Bearer\s)[0-9a-zA-Z\-_.~+/]+=*", re.IGNORECASE)
URL_PASSWORD_PATTERN = re.compile(r"(?<=://)([^:@/\s]+):([^@/\s]+)@")

TIMESTAMP_PLACEHOLDER = "<timestamp>"
TIMESTAMP_PATTERN = re.compile(
    r"\b\d{4}-\d{2}-\d{2}"
    r"(?:[T ]\d{2}:\d{2}(?::\d{2}(?:[.,]\d+)?)?(?:Z|[+-]\d{2}:?\d{2})?)?\b"
)

ADDRESS_PLACEHOLDER = "0x<address>"
ADDRESS_PATTERN = re.compile(r"\b0x[0-9a-fA-F]{6,}\b")


class SecretMode(Enum):
    """Secret scrubbing modes.

    Modes:
    - LENIENT: scrub passwords/tokens but keep usernames/ids visible.
    - STRICT: scrub passwords/tokens and also usernames/ids.
    """

    LENIENT = "lenient"
    STRICT = "strict"


class SecretScrubber(TextTransform):
    """Mask credentials found in URLs, headers and ``key: value`` fragments."""

    def __init__(self, mode: SecretMode = SecretMode.LENIENT) -> None:
        self._mode = mode

    @property
    def mode(self) -> SecretMode:
        """Return the scrubbing mode."""
        return self._mode

    def apply(self, text: str) -> str:
        # 1) user:pass@  → user:***@
        scrubbed = URL_PASSWORD_PATTERN.sub(rf"\1:{PLACEHOLDER}@", text)

        # 2) Bearer tokens
        scrubbed = BEARER_PATTERN.sub(rf"\1{PLACEHOLDER}", scrubbed)

        # 3) key: value / key=value secrets
        key_value_pattern = (
            STRICT_MODE_KEY_VALUE_SECRET_PATTERN
            if self._mode == SecretMode.STRICT
            else KEY_VALUE_SECRET_PATTERN
        )
        return key_value_pattern.sub(rf"\1{PLACEHOLDER}", scrubbed)


class PathScrubber(TextTransform):
    """Replace every occurrence of a known path with a placeholder.

    Both the native and the forward-slash spelling of the path are replaced,
    so Windows paths printed either way end up identical.
    """

    def __init__(
        self, path: str | os.PathLike[str], placeholder: str = "<path>"
    ) -> None:
        raw = os.fspath(path)
        if not raw:
            raise ValueError("PathScrubber needs a non-empty path")
        spellings = {raw, raw.replace("\\", "/")}
        if any(spelling in placeholder for spelling in spellings):
            raise ValueError(
                f"Placeholder {placeholder!r} contains the path it replaces"
            )
        # longest first so a path is not partially replaced by a shorter spelling
        alternatives = sorted(spellings, key=len, reverse=True)
        self._pattern = re.compile("|".join(re.escape(s) for s in alternatives))
        self._placeholder = placeholder

    def apply(self, text: str) -> str:
        return self._pattern.sub(lambda _: self._placeholder, text)


class TimestampScrubber(TextTransform):
    """Replace ISO-8601 dates and datetimes."""

    def __init__(self, placeholder: str = TIMESTAMP_PLACEHOLDER) -> None:
        if TIMESTAMP_PATTERN.search(placeholder):
            raise ValueError(f"Placeholder {placeholder!r} looks like a timestamp")
        self._placeholder = placeholder

    def apply(self, text: str) -> str:
        return TIMESTAMP_PATTERN.sub(lambda _: self._placeholder, text)


class AddressScrubber(TextTransform):
    """Replace hexadecimal memory addresses such as ``0x7f3a9c2b1d40``."""

    def apply(self, text: str) -> str:
        return ADDRESS_PATTERN.sub(ADDRESS_PLACEHOLDER, text)
