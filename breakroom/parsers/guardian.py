"""
Guardian content API parser.

This module provides the GuardianParser class for turning a content API search
response into Article records.
"""

import json
import logging
from typing import Any, Dict, List, Optional

from breakroom.models import Article, FailureKind, MissingFieldPolicy
from breakroom.parsers.base import FeedParser
from breakroom.services.thumbnails import ThumbnailResolver

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("webPublicationDate", "webTitle", "webUrl")
OPTIONAL_FIELDS = ("trailText", "byline", "thumbnail")


class MissingFieldError(KeyError):
    """Raised when a result entry lacks a required field."""


def _as_text(value: Any) -> Optional[str]:
    """Returns scalar JSON values as text, None for null or containers."""
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


class GuardianParser(FeedParser):
    """
    Parses Guardian content API responses.

    When built with a ThumbnailResolver, each article's thumbnail is resolved
    inside the parse loop. Otherwise articles come back with thumbnail=None
    and the caller is expected to attach them.
    """

    def __init__(
        self,
        policy: MissingFieldPolicy = MissingFieldPolicy.SKIP,
        resolver: Optional[ThumbnailResolver] = None,
    ):
        self.policy = policy
        self.resolver = resolver

    def _required(self, entry: Dict[str, Any], key: str) -> str:
        value = _as_text(entry.get(key))
        if value is None:
            raise MissingFieldError(key)
        return value

    def _parse_entry(self, entry: Any) -> Article:
        """Builds one Article, raising MissingFieldError on a bad entry."""
        if not isinstance(entry, dict):
            raise MissingFieldError(REQUIRED_FIELDS[0])

        publication_date, title, url = (
            self._required(entry, key) for key in REQUIRED_FIELDS
        )

        fields = entry.get("fields")
        if not isinstance(fields, dict):
            fields = {}
        trail_text, byline, thumbnail_url = (
            _as_text(fields.get(key)) or "" for key in OPTIONAL_FIELDS
        )

        thumbnail = None
        if self.resolver is not None:
            thumbnail = self.resolver.resolve(thumbnail_url)

        return Article(
            publication_date=publication_date,
            title=title,
            url=url,
            trail_text=trail_text,
            byline=byline,
            thumbnail_url=thumbnail_url,
            thumbnail=thumbnail,
        )

    def parse(self, text: Optional[str]) -> List[Article]:
        """Parses a response body into articles, preserving result order."""
        articles: List[Article] = []
        if not text:
            logger.debug("The JSON string is empty or None. Returning early.")
            return articles

        try:
            root = json.loads(text)
            response = root["response"]
            results = response["results"]
            if not isinstance(results, list):
                raise TypeError(f"results is {type(results).__name__}, not a list")
        except (ValueError, KeyError, TypeError, RecursionError) as e:
            logger.error(
                "Problem parsing the article JSON results (%s): %s",
                FailureKind.JSON_STRUCTURE.value,
                e,
            )
            return articles

        for index, entry in enumerate(results):
            try:
                articles.append(self._parse_entry(entry))
            except MissingFieldError as e:
                if self.policy is MissingFieldPolicy.TRUNCATE:
                    logger.error(
                        "Result %d is missing required field %s (%s). "
                        "Keeping the %d articles parsed so far.",
                        index,
                        e,
                        FailureKind.MISSING_REQUIRED_FIELD.value,
                        len(articles),
                    )
                    break
                logger.warning(
                    "Skipping result %d: missing required field %s (%s).",
                    index,
                    e,
                    FailureKind.MISSING_REQUIRED_FIELD.value,
                )

        logger.info("Parsed %d of %d results.", len(articles), len(results))
        return articles
