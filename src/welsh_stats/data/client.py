"""HTTP access to dataset files and StatsWales OData endpoints."""

import json
import time
from urllib.parse import urljoin

import requests
import structlog
from attrs import define, field

from ..errors import MalformedSourceError
from .parser import WELSH_STATS_ROWS_KEY

logger = structlog.get_logger(__name__)

# OData responses are paged; each page links to the next until the last one.
ODATA_NEXT_LINK_KEY = "odata.nextLink"
MAX_BACKOFF = 60.0


@define(slots=True)
class StatsWalesHttpClient:
    """Fetch dataset files relative to ``base_url``, retrying on timeouts.

    StatsWales is slow to build large OData responses, so a timed out request
    is retried up to ``max_retries`` times with a doubling delay.
    """

    base_url: str
    timeout: float = 30.0
    max_retries: int = 3
    backoff: float = 2.0
    session: requests.Session = field(factory=requests.Session)
    headers: dict[str, str] = field(
        factory=lambda: {
            "User-Agent": "welsh-stats",
            "Accept": "application/json,text/csv,text/plain,*/*;q=0.1",
        },
    )

    def url_for(self, filename: str) -> str:
        base = self.base_url if self.base_url.endswith("/") else f"{self.base_url}/"
        return urljoin(base, filename)

    def _get(self, url: str, *, encoding: str = "utf-8") -> requests.Response:
        log = logger.bind(url=url)
        delay = self.backoff
        attempt = 0
        while True:
            attempt += 1
            log.debug("http.fetch_start", attempt=attempt, timeout=self.timeout)
            try:
                response = self.session.get(url, timeout=self.timeout, headers=self.headers)
                response.raise_for_status()
            except requests.Timeout:
                if attempt > self.max_retries:
                    log.error("http.fetch_timed_out", attempts=attempt)
                    raise
                log.warning("http.fetch_retry", attempt=attempt, delay=delay)
                time.sleep(delay)
                delay = min(delay * 2, MAX_BACKOFF)
                continue
            except requests.HTTPError as exc:
                status = exc.response.status_code if exc.response is not None else None
                log.error("http.fetch_failed", status=status)
                raise
            response.encoding = encoding
            log.debug("http.fetch_success", bytes=len(response.content))
            return response

    def get_text(self, filename: str, *, encoding: str = "utf-8") -> str:
        """Fetch ``filename`` relative to the base URL and return its decoded text."""
        return self._get(self.url_for(filename), encoding=encoding).text

    def get_odata_document(self, filename: str) -> str:
        """Fetch an OData document and fold every page's rows into one document.

        A first page that is not an object with a rows array is returned as
        text so the JSON parser can report it.
        """
        url = self.url_for(filename)
        first = self._get(url)
        try:
            document = first.json()
        except ValueError:
            return first.text
        if not isinstance(document, dict) or not isinstance(
            document.get(WELSH_STATS_ROWS_KEY), list
        ):
            return first.text

        rows = list(document[WELSH_STATS_ROWS_KEY])
        next_link = document.pop(ODATA_NEXT_LINK_KEY, None)
        seen = {url}
        while next_link:
            if next_link in seen:
                raise MalformedSourceError(f"Malformed file: page loop at {next_link}")
            seen.add(next_link)
            page = self._get(next_link).json()
            if not isinstance(page, dict) or not isinstance(page.get(WELSH_STATS_ROWS_KEY), list):
                raise MalformedSourceError(
                    f"Malformed file: page {next_link} has no {WELSH_STATS_ROWS_KEY!r} array"
                )
            rows.extend(page[WELSH_STATS_ROWS_KEY])
            next_link = page.get(ODATA_NEXT_LINK_KEY)

        document[WELSH_STATS_ROWS_KEY] = rows
        logger.debug("http.odata_complete", url=url, pages=len(seen), rows=len(rows))
        return json.dumps(document, ensure_ascii=False)

    def close(self) -> None:
        """Release the underlying HTTP session."""
        self.session.close()
        logger.debug("http.session_closed")


__all__ = ["StatsWalesHttpClient", "ODATA_NEXT_LINK_KEY"]
