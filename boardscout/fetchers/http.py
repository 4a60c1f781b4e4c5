"""
HTTP fetcher with per-request timeouts and optional retries with backoff.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

import aiohttp

from boardscout.config import DEFAULT_USER_AGENT

logger = logging.getLogger(__name__)


@dataclass
class FetchResult:
    """Result of a fetch operation."""
    url: str
    status: int = 0
    text: str = ""
    json_data: Any = None
    content_type: str = ""
    error: str = ""
    elapsed_ms: float = 0

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 400 and not self.error

    @property
    def is_transport_error(self) -> bool:
        """No HTTP status was received at all."""
        return self.status == 0 and bool(self.error)

    @property
    def is_html(self) -> bool:
        return "text/html" in self.content_type.lower()

    @property
    def is_json(self) -> bool:
        return "json" in self.content_type.lower()


class HttpFetcher:
    """
    Async HTTP fetcher sharing one aiohttp session across tasks.

    fetch() never raises for network problems; the failure is reported on
    the returned FetchResult instead.
    """

    def __init__(
        self,
        timeout_s: float = 30,
        max_retries: int = 1,
        base_delay_ms: int = 500,
        user_agent: str = DEFAULT_USER_AGENT,
        connection_limit: int = 50,
    ):
        self.timeout_s = timeout_s
        self.max_retries = max(1, max_retries)
        self.base_delay_ms = base_delay_ms
        self.user_agent = user_agent
        self.connection_limit = connection_limit
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self) -> "HttpFetcher":
        await self.start()
        return self

    async def __aexit__(self, *args) -> None:
        await self.close()

    async def start(self) -> None:
        """Initialize the HTTP session."""
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(
                limit=self.connection_limit,
                ttl_dns_cache=300,
            )
            headers = {
                "User-Agent": self.user_agent,
                "Accept": "text/html,application/json,application/xml;q=0.9,*/*;q=0.8",
                "Accept-Language": "en-US,en;q=0.9",
            }
            self._session = aiohttp.ClientSession(
                connector=connector,
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=self.timeout_s),
            )

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    async def fetch(
        self,
        url: str,
        timeout_s: Optional[float] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> FetchResult:
        """
        Fetch a URL, retrying 429/5xx and network errors up to max_retries attempts.
        """
        if self._session is None:
            await self.start()

        start_time = time.time()
        last_error = ""
        last_status = 0
        timeout = aiohttp.ClientTimeout(total=timeout_s or self.timeout_s)

        for attempt in range(self.max_retries):
            is_last = attempt == self.max_retries - 1
            try:
                async with self._session.get(url, timeout=timeout, headers=headers, allow_redirects=True) as resp:
                    last_status = resp.status

                    # Handle rate limiting
                    if resp.status == 429 and not is_last:
                        delay = self._parse_retry_after(resp.headers.get("Retry-After", ""), attempt)
                        last_error = f"Rate limited (429), waiting {delay}ms"
                        await asyncio.sleep(delay / 1000)
                        continue

                    # Handle server errors with retry
                    if resp.status in (500, 502, 503, 504) and not is_last:
                        last_error = f"Server error ({resp.status}), retrying"
                        await asyncio.sleep(self._backoff_delay(attempt) / 1000)
                        continue

                    if resp.status >= 400:
                        return FetchResult(
                            url=url,
                            status=resp.status,
                            error=f"HTTP {resp.status}",
                            elapsed_ms=(time.time() - start_time) * 1000,
                        )

                    content_type = resp.headers.get("Content-Type", "")
                    text = await resp.text(errors="replace")

                    # Try to parse JSON
                    json_data = None
                    if "json" in content_type.lower():
                        try:
                            json_data = json.loads(text)
                        except ValueError:
                            json_data = None

                    return FetchResult(
                        url=url,
                        status=resp.status,
                        text=text,
                        json_data=json_data,
                        content_type=content_type,
                        elapsed_ms=(time.time() - start_time) * 1000,
                    )

            except asyncio.TimeoutError:
                last_error = "Timeout"
            except aiohttp.ClientError as e:
                last_error = str(e) or type(e).__name__

            if not is_last:
                await asyncio.sleep(self._backoff_delay(attempt) / 1000)

        logger.debug("GET %s failed after %d attempt(s): %s", url, self.max_retries, last_error)
        return FetchResult(
            url=url,
            status=last_status,
            error=last_error or "Max retries exceeded",
            elapsed_ms=(time.time() - start_time) * 1000,
        )

    async def fetch_json(self, url: str, timeout_s: Optional[float] = None) -> FetchResult:
        """Fetch and expect JSON response."""
        return await self.fetch(
            url,
            timeout_s=timeout_s,
            headers={"Accept": "application/json"},
        )

    def _backoff_delay(self, attempt: int) -> int:
        """Calculate exponential backoff delay in milliseconds."""
        return self.base_delay_ms * (2 ** attempt)

    def _parse_retry_after(self, header: str, attempt: int) -> int:
        """Parse Retry-After header or use backoff."""
        if not header:
            return self._backoff_delay(attempt)
        try:
            # Try as seconds
            return int(header) * 1000
        except ValueError:
            pass
        # Default to backoff
        return self._backoff_delay(attempt)
