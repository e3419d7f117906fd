"""Unit tests for news_feed module."""

import json
import unittest
from unittest.mock import MagicMock, patch

import requests

from breakroom import news_feed
from breakroom.config import get_settings
from breakroom.models import Article, FailureKind, FetchResult, MissingFieldPolicy
from breakroom.news_feed import ArticleFeedService, build_url
from breakroom.parsers.guardian import GuardianParser
from breakroom.services.http import HttpFetcher

SAMPLE_BODY = json.dumps(
    {
        "response": {
            "status": "ok",
            "results": [
                {
                    "webPublicationDate": "2024-01-01T00:00:00Z",
                    "webTitle": "T1",
                    "webUrl": "http://x/1",
                    "fields": {"thumbnail": "http://img/1.jpg", "byline": "Ann"},
                },
                {
                    "webPublicationDate": "2024-01-02T00:00:00Z",
                    "webTitle": "T2",
                    "webUrl": "http://x/2",
                    "fields": {"trailText": "More"},
                },
            ],
        }
    }
)


class TestBuildUrl(unittest.TestCase):
    def test_accepts_http_urls(self):
        self.assertEqual(
            build_url("https://content.guardianapis.com/search?q=tech"),
            "https://content.guardianapis.com/search?q=tech",
        )

    def test_rejects_malformed(self):
        for raw in (None, "", "not a url", "ftp://host/file", "http://", "http://[::1"):
            with self.subTest(raw=raw):
                self.assertIsNone(build_url(raw))


class TestArticleFeedService(unittest.TestCase):
    """Test cases for the feed pipeline."""

    def make_service(self, result, thumbnails=None):
        fetcher = MagicMock(spec=HttpFetcher)
        fetcher.fetch.return_value = result
        resolver = MagicMock()
        resolver.attach.side_effect = lambda articles: [
            a._replace(thumbnail=(thumbnails or {}).get(a.thumbnail_url))
            for a in articles
        ]
        return ArticleFeedService(fetcher=fetcher, resolver=resolver), fetcher

    def test_returns_articles_in_order_with_thumbnails(self):
        service, fetcher = self.make_service(
            FetchResult(SAMPLE_BODY, None, 200), {"http://img/1.jpg": "image-1"}
        )

        articles = service.fetch_article_data("https://example.com/search")

        fetcher.fetch.assert_called_once_with("https://example.com/search")
        self.assertEqual([a.title for a in articles], ["T1", "T2"])
        self.assertEqual(articles[0].thumbnail, "image-1")
        self.assertEqual(articles[0].byline, "Ann")
        self.assertIsNone(articles[1].thumbnail)
        self.assertEqual(articles[1].trail_text, "More")

    def test_failed_fetch_yields_empty_list(self):
        service, _ = self.make_service(FetchResult("", FailureKind.NON_200_STATUS, 503))
        self.assertEqual(service.fetch_article_data("https://example.com"), [])

    def test_malformed_url_is_passed_on_as_none(self):
        service, fetcher = self.make_service(FetchResult("", FailureKind.MALFORMED_URL))

        self.assertEqual(service.fetch_article_data("::nonsense::"), [])
        fetcher.fetch.assert_called_once_with(None)

    def test_skips_attach_when_parser_resolves_in_loop(self):
        resolver = MagicMock()
        resolver.resolve.return_value = "inline"
        fetcher = MagicMock(spec=HttpFetcher)
        fetcher.fetch.return_value = FetchResult(SAMPLE_BODY, None, 200)
        service = ArticleFeedService(
            fetcher=fetcher,
            parser=GuardianParser(resolver=resolver),
            resolver=resolver,
            attach_thumbnails=False,
        )

        articles = service.fetch_article_data("https://example.com")

        self.assertEqual([a.thumbnail for a in articles], ["inline", "inline"])
        resolver.attach.assert_not_called()

    def test_from_settings_wires_policy_and_timeouts(self):
        settings = get_settings(
            {
                "connect_timeout": 3,
                "read_timeout": 4,
                "parallel_thumbnails": False,
                "missing_field_policy": "truncate",
            }
        )

        service = ArticleFeedService.from_settings(settings)

        self.assertEqual(service.fetcher.connect_timeout, 3.0)
        self.assertEqual(service.fetcher.read_timeout, 4.0)
        self.assertEqual(service.parser.policy, MissingFieldPolicy.TRUNCATE)
        self.assertIs(service.parser.resolver, service.resolver)
        self.assertFalse(service.attach_thumbnails)


class TestFetchArticleDataEndToEnd(unittest.TestCase):
    """Runs the real fetcher, parser and resolver against a mocked requests.get."""

    def setUp(self):
        self.settings = get_settings({"parallel_thumbnails": True, "max_workers": 2})

    @patch("breakroom.news_feed.get_settings")
    @patch("requests.get")
    def test_thumbnail_timeout_keeps_article(self, mock_get, mock_settings):
        mock_settings.return_value = self.settings
        feed_resp = MagicMock(status_code=200)
        feed_resp.iter_lines.return_value = [SAMPLE_BODY.encode("utf-8")]

        def get_side_effect(url, **kwargs):
            if url.startswith("http://img/"):
                raise requests.exceptions.ReadTimeout("thumbnail too slow")
            return feed_resp

        mock_get.side_effect = get_side_effect

        articles = news_feed.fetch_article_data("https://example.com/search")

        self.assertEqual(len(articles), 2)
        self.assertEqual(articles[0].title, "T1")
        self.assertEqual(articles[0].url, "http://x/1")
        self.assertEqual(articles[0].thumbnail_url, "http://img/1.jpg")
        self.assertIsNone(articles[0].thumbnail)

    @patch("breakroom.news_feed.get_settings")
    @patch("requests.get")
    def test_non_200_returns_empty_list(self, mock_get, mock_settings):
        mock_settings.return_value = self.settings
        mock_get.return_value = MagicMock(status_code=404)

        self.assertEqual(news_feed.fetch_article_data("https://example.com"), [])

    @patch("breakroom.news_feed.get_settings")
    @patch("requests.get")
    def test_connection_error_returns_empty_list(self, mock_get, mock_settings):
        mock_settings.return_value = self.settings
        mock_get.side_effect = requests.exceptions.ConnectTimeout("no route")

        self.assertEqual(news_feed.fetch_article_data("https://example.com"), [])


class TestMain(unittest.TestCase):
    """Test cases for the command line entry point."""

    def setUp(self):
        self.settings = get_settings({"parallel_thumbnails": True})
        self.settings["feed_url"] = None

    @patch("breakroom.news_feed.logging.basicConfig")
    @patch("breakroom.news_feed.ArticleFeedService")
    @patch("breakroom.news_feed.get_settings")
    def test_exits_without_feed_url(self, mock_settings, mock_service, _):
        mock_settings.return_value = self.settings

        with patch("sys.argv", ["breakroom"]):
            with self.assertRaises(SystemExit) as ctx:
                news_feed.main()

        self.assertEqual(ctx.exception.code, 1)
        mock_service.from_settings.assert_not_called()

    @patch("breakroom.news_feed.logging.basicConfig")
    @patch("breakroom.news_feed.ArticleFeedService")
    @patch("breakroom.news_feed.get_settings")
    def test_lists_articles_for_url_argument(self, mock_settings, mock_service, _):
        mock_settings.return_value = self.settings
        service = mock_service.from_settings.return_value
        service.fetch_article_data.return_value = [
            Article("2024-01-01T00:00:00Z", "T1", "http://x/1", byline="Ann"),
            Article("2024-01-02T00:00:00Z", "T2", "http://x/2", thumbnail="img"),
        ]

        with patch("sys.argv", ["breakroom", "https://example.com/search"]):
            with self.assertLogs("breakroom.news_feed", level="INFO") as logs:
                news_feed.main()

        mock_service.from_settings.assert_called_once_with(self.settings)
        service.fetch_article_data.assert_called_once_with(
            "https://example.com/search"
        )
        output = "\n".join(logs.output)
        self.assertIn("2024-01-01T00:00:00Z | T1 | Ann | no thumbnail", output)
        self.assertIn("2024-01-02T00:00:00Z | T2 | - | thumbnail", output)
        self.assertIn("Fetched 2 articles.", output)

    @patch("breakroom.news_feed.logging.basicConfig")
    @patch("breakroom.news_feed.ArticleFeedService")
    @patch("breakroom.news_feed.get_settings")
    def test_reports_empty_feed(self, mock_settings, mock_service, _):
        self.settings["feed_url"] = "https://example.com/configured"
        mock_settings.return_value = self.settings
        service = mock_service.from_settings.return_value
        service.fetch_article_data.return_value = []

        with patch("sys.argv", ["breakroom"]):
            with self.assertLogs("breakroom.news_feed", level="INFO") as logs:
                news_feed.main()

        service.fetch_article_data.assert_called_once_with(
            "https://example.com/configured"
        )
        self.assertIn("No articles found.", "\n".join(logs.output))


if __name__ == "__main__":
    unittest.main()
