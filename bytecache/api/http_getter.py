"""
Loader that fetches source values over HTTP.
GET {base_url}/{key} -> response body is the value.
"""

import logging
import urllib.parse

import httpx

from bytecache.api.errors import LoaderError, SourceNotFound, SourceUnavailable

logger = logging.getLogger(__name__)


class HttpGetter:
    def __init__(self, base_url: str, *, timeout: float = 10.0, client: httpx.Client | None = None):
        self.base_url = base_url.rstrip("/")
        # Connect timeout is short to fail fast on a dead source
        self.client = client or httpx.Client(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout, connect=min(timeout, 5.0)),
            follow_redirects=True,
        )

    def close(self):
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def _url_for(self, key: str) -> str:
        return "/" + urllib.parse.quote(key, safe="")

    def get(self, key: str) -> bytes:
        url = self._url_for(key)
        try:
            response = self.client.get(url)
        except (httpx.RequestError, httpx.InvalidURL) as e:
            logger.error(f"Request error to {self.base_url}{url}: {e}")
            raise SourceUnavailable(f"source unreachable: {e}", key=key) from e

        status = response.status_code
        if status == 404:
            raise SourceNotFound("no such key at source", key=key)
        if status == 429 or status >= 500:
            raise SourceUnavailable("source unavailable", key=key, status_code=status)
        if status >= 400:
            raise LoaderError(f"source rejected request: HTTP {status}", key=key)
        return response.content
