"""
Fetcher layer for BoardScout.

Provides one shared async HTTP client with:
- Per-request timeouts
- Optional retries with exponential backoff
- 429/503 handling with Retry-After
"""

from boardscout.fetchers.http import HttpFetcher, FetchResult

__all__ = ["HttpFetcher", "FetchResult"]
