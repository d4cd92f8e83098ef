"""
Website Crawler - Homepage and About Page Text
===============================================

Fetches a company's homepage and, if one exists, its about page, and
returns the visible text. Used to let the language model pick
adjectives that fit the business.

SAFETY:
- One wall-clock budget covers every request of a crawl. Each request
  gets what is left as its timeout; nothing starts once it is spent.
- Bodies are streamed and the deadline is checked on every chunk, so a
  server that trickles bytes cannot hold a crawl open. The crawl runs in
  a worker thread and crawl() returns when the deadline passes.
- At most max_page_bytes are read from any page.
- Only two pages are ever downloaded, about paths are probed with HEAD.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import List, Optional
from urllib.parse import urljoin, urlparse

import requests
from bs4 import BeautifulSoup

from ..config import CrawlerSettings, get_settings

logger = logging.getLogger(__name__)

STRIPPED_TAGS = ["script", "style", "nav", "header", "footer", "noscript"]

CHUNK_SIZE = 1024


class CrawlDeadlineExceeded(Exception):
    """The crawl budget ran out before a request or a body read could finish."""
    pass


class _Deadline:
    """Remaining-time tracker for one crawl."""

    def __init__(self, seconds: float):
        self._expires_at = time.monotonic() + seconds

    def remaining(self) -> float:
        return self._expires_at - time.monotonic()

    def timeout(self) -> float:
        left = self.remaining()
        if left <= 0:
            raise CrawlDeadlineExceeded("Crawl deadline reached")
        return left


def extract_visible_text(html: str) -> str:
    """Visible page text without scripts, styles and site chrome."""
    soup = BeautifulSoup(html or "", "html.parser")
    for tag in soup(STRIPPED_TAGS):
        tag.decompose()
    text = soup.get_text(separator=" ")
    return " ".join(text.split())


def _decode(body: bytes, encoding: Optional[str]) -> str:
    try:
        return body.decode(encoding or "utf-8", errors="replace")
    except LookupError:
        return body.decode("utf-8", errors="replace")


def normalize_url(url: str) -> Optional[str]:
    """Add a scheme if missing; None when the URL is unusable."""
    url = (url or "").strip()
    if not url:
        return None
    if "://" not in url:
        url = f"https://{url}"
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return None
    return url


class WebsiteCrawler:
    """
    Crawl homepage + about page within a fixed deadline.

    Usage:
        crawler = WebsiteCrawler()
        text = crawler.crawl("https://acmeplumbing.example")
    """

    def __init__(self, settings: Optional[CrawlerSettings] = None, session: Optional[requests.Session] = None):
        self._settings = settings or get_settings().crawler
        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": self._settings.user_agent})

    def crawl(self, url: str) -> str:
        """
        Return labelled visible text of the homepage and about page.

        Empty string if nothing could be fetched. Never raises for
        network failures or an exhausted deadline, and returns once the
        deadline passes even if a server is still sending.
        """
        home_url = normalize_url(url)
        if not home_url:
            logger.info(f"Not crawling invalid URL: {url!r}")
            return ""

        deadline = _Deadline(self._settings.deadline_seconds)
        sections: List[str] = []

        # The worker may outlive this call; it stops at its next deadline check
        pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="crawl")
        future = pool.submit(self._collect_sections, home_url, deadline, sections)
        try:
            future.result(timeout=max(deadline.remaining(), 0))
        except (CrawlDeadlineExceeded, FutureTimeoutError):
            logger.warning(f"Crawl of {home_url} hit the {self._settings.deadline_seconds}s deadline")
        finally:
            pool.shutdown(wait=False)

        content = "\n\n".join(list(sections))
        return content[: self._settings.max_content_chars]

    def _collect_sections(self, home_url: str, deadline: _Deadline, sections: List[str]) -> None:
        home_text = self._fetch_text(home_url, deadline)
        if home_text:
            sections.append(f"--- Homepage ---\n{home_text}")

        self._pause(deadline)

        about_url = self._find_about_page(home_url, deadline)
        if about_url:
            about_text = self._fetch_text(about_url, deadline)
            if about_text:
                sections.append(f"--- About Page ---\n{about_text}")

    def _pause(self, deadline: _Deadline) -> None:
        delay = min(self._settings.politeness_delay_seconds, max(deadline.remaining(), 0))
        if delay > 0:
            time.sleep(delay)

    def _fetch_text(self, url: str, deadline: _Deadline) -> str:
        try:
            response = self._session.get(url, timeout=deadline.timeout(), stream=True)
        except requests.RequestException as e:
            logger.info(f"Failed to fetch {url}: {e}")
            return ""

        try:
            if not response.ok:
                logger.info(f"Fetching {url} returned HTTP {response.status_code}")
                return ""
            body = self._read_body(response, deadline)
        except requests.RequestException as e:
            logger.info(f"Failed to read {url}: {e}")
            return ""
        finally:
            response.close()

        return extract_visible_text(_decode(body, response.encoding))

    def _read_body(self, response: requests.Response, deadline: _Deadline) -> bytes:
        """
        Read a streamed body chunk by chunk.

        Raises CrawlDeadlineExceeded as soon as a chunk arrives after the
        deadline. Bytes past max_page_bytes are dropped.
        """
        limit = self._settings.max_page_bytes
        chunks = []
        size = 0
        for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
            deadline.timeout()
            chunks.append(chunk)
            size += len(chunk)
            if size >= limit:
                logger.info(f"Page {response.url} exceeds {limit} bytes, truncating")
                break
        return b"".join(chunks)[:limit]

    def _find_about_page(self, home_url: str, deadline: _Deadline) -> Optional[str]:
        """First about path that answers a HEAD request with 2xx."""
        for path in self._settings.about_paths:
            candidate = urljoin(home_url, path)
            try:
                response = self._session.head(
                    candidate, timeout=deadline.timeout(), allow_redirects=True
                )
                if response.ok:
                    logger.debug(f"Found about page: {candidate}")
                    return candidate
            except requests.RequestException:
                continue
        return None
