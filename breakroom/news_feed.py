"""
Breakroom News Feed
This module fetches a page of articles from the Guardian content API, parses
them into Article records and resolves each article's thumbnail.
"""

import logging
import sys
from typing import List, Optional
from urllib.parse import urlsplit

from breakroom.config import Settings, get_settings
from breakroom.models import Article, FailureKind, MissingFieldPolicy
from breakroom.parsers.base import FeedParser
from breakroom.parsers.guardian import GuardianParser
from breakroom.services.http import HttpFetcher
from breakroom.services.thumbnails import ThumbnailResolver

logger = logging.getLogger(__name__)


def build_url(string_url: Optional[str]) -> Optional[str]:
    """Returns the URL if it is a usable http(s) URL, otherwise None."""
    if not string_url:
        return None
    try:
        parts = urlsplit(string_url.strip())
    except ValueError as e:
        logger.error(
            "Malformed URL %r (%s): %s", string_url, FailureKind.MALFORMED_URL.value, e
        )
        return None
    if parts.scheme not in ("http", "https") or not parts.netloc:
        logger.error(
            "Malformed URL %r (%s)", string_url, FailureKind.MALFORMED_URL.value
        )
        return None
    return parts.geturl()


class ArticleFeedService:
    """Runs the fetch, parse and thumbnail steps for one feed request."""

    def __init__(
        self,
        fetcher: Optional[HttpFetcher] = None,
        parser: Optional[FeedParser] = None,
        resolver: Optional[ThumbnailResolver] = None,
        attach_thumbnails: bool = True,
    ):
        self.fetcher = fetcher or HttpFetcher()
        self.parser = parser or GuardianParser()
        self.resolver = resolver or ThumbnailResolver(fetcher=self.fetcher)
        # False when the parser already resolves thumbnails inside its loop
        self.attach_thumbnails = attach_thumbnails

    @classmethod
    def from_settings(cls, settings: Settings) -> "ArticleFeedService":
        """
        Builds a service wired from resolved settings.

        With parallel_thumbnails the parser only extracts fields and the
        resolver fans out afterwards. Without it, thumbnails are resolved one
        by one inside the parse loop.
        """
        fetcher = HttpFetcher(
            connect_timeout=settings["connect_timeout"],
            read_timeout=settings["read_timeout"],
            user_agent=settings["user_agent"],
        )
        resolver = ThumbnailResolver(
            fetcher=fetcher,
            parallel=settings["parallel_thumbnails"],
            max_workers=settings["max_workers"],
        )
        if settings["parallel_thumbnails"]:
            parser = GuardianParser(policy=settings["missing_field_policy"])
        else:
            parser = GuardianParser(
                policy=settings["missing_field_policy"], resolver=resolver
            )
        return cls(
            fetcher=fetcher,
            parser=parser,
            resolver=resolver,
            attach_thumbnails=settings["parallel_thumbnails"],
        )

    def fetch_article_data(self, request_url: Optional[str]) -> List[Article]:
        """Queries the feed and returns its articles. Never raises."""
        url = build_url(request_url)

        # Failures are logged by the fetcher; an empty body parses to no articles.
        result = self.fetcher.fetch(url)
        if not result.ok:
            logger.info("Feed request failed (%s).", result.failure.value)

        articles = self.parser.parse(result.body)
        if not self.attach_thumbnails:
            return articles
        return self.resolver.attach(articles)


def fetch_article_data(request_url: Optional[str]) -> List[Article]:
    """Query the feed with configured defaults and return a list of Articles."""
    return ArticleFeedService.from_settings(get_settings()).fetch_article_data(
        request_url
    )


def main():
    """Main execution entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    settings = get_settings()
    feed_url = sys.argv[1] if len(sys.argv) > 1 else settings["feed_url"]
    if not feed_url:
        logger.error("Error: no feed URL given and BREAKROOM_FEED_URL not set.")
        sys.exit(1)

    if settings["missing_field_policy"] is MissingFieldPolicy.TRUNCATE:
        logger.info("Stopping at the first result with a missing required field.")

    service = ArticleFeedService.from_settings(settings)
    articles = service.fetch_article_data(feed_url)
    if not articles:
        logger.info("No articles found.")
        return

    for article in articles:
        logger.info(
            "%s | %s | %s | %s",
            article.publication_date,
            article.title,
            article.byline or "-",
            "thumbnail" if article.thumbnail is not None else "no thumbnail",
        )
    logger.info("Fetched %d articles.", len(articles))


if __name__ == "__main__":
    main()
