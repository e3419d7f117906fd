"""
Thumbnail resolution for parsed articles.

This module provides the ThumbnailResolver class which downloads and decodes
each article's preview image. A failed thumbnail degrades to None and never
affects the rest of the article.
"""

import concurrent.futures
import logging
from typing import Any, List, Optional

from breakroom.models import Article, FailureKind
from breakroom.services.http import HttpFetcher, ThumbnailFetchError
from breakroom.services.images import ImageDecoder, PillowImageDecoder

logger = logging.getLogger(__name__)


class ThumbnailResolver:
    """Resolves thumbnail URLs into decoded images."""

    def __init__(
        self,
        fetcher: Optional[HttpFetcher] = None,
        decoder: Optional[ImageDecoder] = None,
        parallel: bool = True,
        max_workers: Optional[int] = None,
    ):
        self.fetcher = fetcher or HttpFetcher()
        self.decoder = decoder or PillowImageDecoder()
        self.parallel = parallel
        # ThreadPoolExecutor rejects non-positive pool sizes; None picks its default
        self.max_workers = max_workers if max_workers and max_workers > 0 else None

    def resolve(self, thumbnail_url: str) -> Optional[Any]:
        """Returns the decoded image, or None if it is missing or unusable."""
        if not thumbnail_url:
            return None

        try:
            data = self.fetcher.fetch_bytes(thumbnail_url)
        except ThumbnailFetchError as e:
            logger.error(
                "Thumbnail fetch failed for %s (%s): %s",
                thumbnail_url,
                e.kind.value,
                e,
            )
            return None

        try:
            return self.decoder.decode(data)
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.error(
                "Thumbnail decode failed for %s (%s): %s",
                thumbnail_url,
                FailureKind.THUMBNAIL.value,
                e,
            )
            return None

    def _with_thumbnail(self, article: Article) -> Article:
        return article._replace(thumbnail=self.resolve(article.thumbnail_url))

    def attach(self, articles: List[Article]) -> List[Article]:
        """Returns new articles with thumbnails resolved, in input order."""
        if not self.parallel or len(articles) < 2:
            return [self._with_thumbnail(a) for a in articles]

        with concurrent.futures.ThreadPoolExecutor(
            max_workers=self.max_workers
        ) as executor:
            # map() yields results in submission order
            return list(executor.map(self._with_thumbnail, articles))
