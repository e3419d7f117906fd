"""
Data models for the Breakroom news feed client.
"""

import enum
from typing import Any, NamedTuple, Optional


class FailureKind(enum.Enum):
    """Failure classes reported by each stage of the feed pipeline."""

    MALFORMED_URL = "malformed-url"
    CONNECT_TIMEOUT = "connect-timeout"
    READ_TIMEOUT = "read-timeout"
    NON_200_STATUS = "non-200-status"
    IO_ERROR = "io-error"
    JSON_STRUCTURE = "json-structure-error"
    MISSING_REQUIRED_FIELD = "missing-required-field"
    THUMBNAIL = "thumbnail-error"


class MissingFieldPolicy(enum.Enum):
    """What the parser does with a result entry lacking a required field."""

    SKIP = "skip"  # drop the entry, keep scanning
    TRUNCATE = "truncate"  # stop at the entry, keep what came before


class Article(NamedTuple):
    """Type definition for an article."""

    publication_date: str
    title: str
    url: str
    trail_text: str = ""
    byline: str = ""
    thumbnail_url: str = ""
    thumbnail: Optional[Any] = None  # Decoded image, None when unavailable


class FetchResult(NamedTuple):
    """Outcome of a single HTTP GET."""

    body: str
    failure: Optional[FailureKind] = None
    status_code: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.failure is None
