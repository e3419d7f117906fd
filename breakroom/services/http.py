"""
HTTP service for retrieving feed documents and thumbnail payloads.

This module provides the HttpFetcher class which performs a single GET per
call with connect/read timeouts and classifies every failure instead of
raising it.
"""

import logging
from contextlib import closing
from typing import Optional

import requests
from urllib3.exceptions import ReadTimeoutError

from breakroom.config import (
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_READ_TIMEOUT,
    DEFAULT_USER_AGENT,
)
from breakroom.models import FailureKind, FetchResult

logger = logging.getLogger(__name__)


class ThumbnailFetchError(Exception):
    """Raised by fetch_bytes when a binary payload cannot be retrieved."""

    def __init__(self, kind: FailureKind, message: str):
        super().__init__(message)
        self.kind = kind


def classify_error(err: Exception) -> FailureKind:
    """Maps a transport exception onto the failure taxonomy."""
    if isinstance(err, requests.exceptions.ConnectTimeout):
        return FailureKind.CONNECT_TIMEOUT
    if isinstance(err, requests.exceptions.ReadTimeout):
        return FailureKind.READ_TIMEOUT
    # A read timeout while streaming the body arrives wrapped in ConnectionError
    if isinstance(err, requests.exceptions.ConnectionError) and any(
        isinstance(arg, ReadTimeoutError) for arg in err.args
    ):
        return FailureKind.READ_TIMEOUT
    if isinstance(
        err,
        (
            requests.exceptions.MissingSchema,
            requests.exceptions.InvalidSchema,
            requests.exceptions.InvalidURL,
        ),
    ):
        return FailureKind.MALFORMED_URL
    return FailureKind.IO_ERROR


class HttpFetcher:
    """Performs one GET request per call with fixed timeouts."""

    def __init__(
        self,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
        read_timeout: float = DEFAULT_READ_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
    ):
        self.connect_timeout = connect_timeout
        self.read_timeout = read_timeout
        self.user_agent = user_agent

    def _get(self, url: str) -> requests.Response:
        return requests.get(
            url,
            timeout=(self.connect_timeout, self.read_timeout),
            headers={"User-Agent": self.user_agent},
            stream=True,
        )

    @staticmethod
    def _read_text(resp: requests.Response) -> str:
        """Decodes the body as UTF-8 and joins its lines without terminators."""
        return "".join(
            line.decode("utf-8", errors="replace") for line in resp.iter_lines()
        )

    def fetch(self, url: Optional[str]) -> FetchResult:
        """Fetches a text document. Never raises; failures come back classified."""
        if not url:
            logger.error("Malformed URL: %r. Skipping request.", url)
            return FetchResult("", FailureKind.MALFORMED_URL)

        try:
            with closing(self._get(url)) as resp:
                if resp.status_code != 200:
                    logger.error(
                        "Error response code %d from %s", resp.status_code, url
                    )
                    return FetchResult(
                        "", FailureKind.NON_200_STATUS, resp.status_code
                    )
                body = self._read_text(resp)
                logger.debug(
                    "Read %d characters from %s. Closing stream.", len(body), url
                )
                return FetchResult(body, None, resp.status_code)
        except (requests.RequestException, OSError) as err:
            kind = classify_error(err)
            logger.error("Problem retrieving %s (%s): %s", url, kind.value, err)
            return FetchResult("", kind)

    def fetch_bytes(self, url: str) -> bytes:
        """Fetches a binary payload, raising ThumbnailFetchError on any failure."""
        if not url:
            raise ThumbnailFetchError(FailureKind.MALFORMED_URL, "empty URL")

        try:
            with closing(self._get(url)) as resp:
                if resp.status_code != 200:
                    raise ThumbnailFetchError(
                        FailureKind.NON_200_STATUS,
                        f"error response code {resp.status_code} from {url}",
                    )
                return resp.content
        except (requests.RequestException, OSError) as err:
            raise ThumbnailFetchError(classify_error(err), str(err)) from err
