"""
Discovery of Greenhouse board tokens.

Resolves the set of boards to query from a web search index:
- DuckDuckGo (duckduckgo_search) result URLs
- A Google results page fetched over HTTP and parsed with BeautifulSoup

Falls back to a hand-maintained catalog when the index yields nothing.
"""

from __future__ import annotations

import logging
import re
import urllib.parse
from typing import TYPE_CHECKING, Callable, FrozenSet, Iterable, List, Optional, Set

from bs4 import BeautifulSoup
from duckduckgo_search import DDGS

from boardscout.config import Settings, get_settings

if TYPE_CHECKING:
    from boardscout.fetchers.http import HttpFetcher

logger = logging.getLogger(__name__)


GREENHOUSE_BOARDS_HOST = "boards.greenhouse.io/"
GREENHOUSE_TOKEN_RE = re.compile(r"^[A-Za-z0-9\-_]+$")
GOOGLE_SEARCH_URL = "https://www.google.com/search?q={query}&num={num}"

# Boards known to exist; used whenever discovery yields nothing.
KNOWN_BOARD_TOKENS: FrozenSet[str] = frozenset([
    "stripe", "uber", "airbnb", "shopify", "atlassian",
    "mongodb", "snowflake", "databricks", "plaid", "twilio",
    "coinbase", "square", "dropbox", "slack", "zoom",
    "figma", "notion", "airtable", "zapier", "hubspot",
    "asana", "gitlab", "newrelic", "datadog", "sendgrid",
    "doordash", "instacart", "reddit", "discord", "spotify",
    "pinterest", "robinhood", "lyft", "github", "palantir",
])


def extract_board_token(url: str) -> Optional[str]:
    """
    Extract the board token from a Greenhouse URL.

    "https://boards.greenhouse.io/stripe/jobs/123" -> "stripe"
    Embed URLs ("boards.greenhouse.io/embed/...") carry no token.
    """
    if not url or GREENHOUSE_BOARDS_HOST not in url:
        return None
    rest = url.split(GREENHOUSE_BOARDS_HOST, 1)[1]
    token = rest.split("/", 1)[0].split("?", 1)[0].split("#", 1)[0]
    if not token or token == "embed" or not GREENHOUSE_TOKEN_RE.match(token):
        return None
    return token.lower()


def tokens_from_urls(urls: Iterable[str]) -> Set[str]:
    """Board tokens found in a list of URLs."""
    tokens: Set[str] = set()
    for url in urls:
        token = extract_board_token(url)
        if token:
            tokens.add(token)
    return tokens


def _unwrap_google_href(href: str) -> str:
    """Google result links look like /url?q=<target>&sa=..."""
    if href.startswith("/url?"):
        params = urllib.parse.parse_qs(urllib.parse.urlsplit(href).query)
        return (params.get("q") or [href])[0]
    return href


def extract_tokens_from_html(html: str) -> Set[str]:
    """Board tokens linked from a search results page."""
    if not html:
        return set()
    soup = BeautifulSoup(html, "lxml")
    hrefs = [
        _unwrap_google_href(a.get("href", ""))
        for a in soup.select("a[href*='boards.greenhouse.io']")
    ]
    return tokens_from_urls(hrefs)


def ddg_search(query: str, max_results: int = 100) -> List[str]:
    """
    Search DuckDuckGo and return result URLs.

    Returns an empty list on any search failure.
    """
    urls: List[str] = []
    try:
        with DDGS() as ddgs:
            for r in ddgs.text(query, max_results=max_results) or []:
                href = r.get("href") or r.get("link") or r.get("url")
                if href:
                    urls.append(href)
    except Exception as e:
        # DDG can rate limit, timeout, or return no results
        logger.warning("DuckDuckGo search failed: %s", e)
        return []
    return urls


async def google_search(fetcher: "HttpFetcher", query: str, max_results: int = 100) -> Set[str]:
    """Fetch a Google results page and extract board tokens from its links."""
    url = GOOGLE_SEARCH_URL.format(query=urllib.parse.quote_plus(query), num=max_results)
    result = await fetcher.fetch(url)
    if not result.ok:
        logger.warning("Google search failed: %s", result.error or f"HTTP {result.status}")
        return set()
    return extract_tokens_from_html(result.text)


class SourceCatalog:
    """
    Resolves the immutable set of board tokens for one run.

    Zero tokens from the search index (failure or genuinely empty) is the
    trigger for the fallback catalog; resolution never raises.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        search_fn: Callable[[str, int], List[str]] = ddg_search,
        fallback: Iterable[str] = KNOWN_BOARD_TOKENS,
    ):
        self.settings = settings or get_settings()
        self.search_fn = search_fn
        self.fallback = frozenset(fallback)

    def resolve(self) -> FrozenSet[str]:
        """Resolve tokens using the DuckDuckGo backend."""
        tokens: Set[str] = set()
        if self.settings.discovery_enabled:
            urls = self.search_fn(self.settings.discovery_query, self.settings.max_search_results)
            tokens = tokens_from_urls(urls)
        return self._finish(tokens)

    async def resolve_async(self, fetcher: "HttpFetcher") -> FrozenSet[str]:
        """Resolve tokens with the configured backend."""
        if self.settings.discovery_enabled and self.settings.discovery_backend == "google":
            tokens = await google_search(
                fetcher, self.settings.discovery_query, self.settings.max_search_results
            )
            return self._finish(tokens)
        return self.resolve()

    def _finish(self, tokens: Set[str]) -> FrozenSet[str]:
        if tokens:
            logger.info("Found %d board tokens from search", len(tokens))
        else:
            logger.info("No tokens found via search, using %d known board tokens", len(self.fallback))
            tokens = set(self.fallback)
        tokens.update(self.settings.extra_sources)
        logger.debug("Board tokens: %s", ", ".join(sorted(tokens)))
        return frozenset(tokens)
