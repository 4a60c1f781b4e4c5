"""
Base provider interface for job sources.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional

from boardscout.models import Query, SourceOutcome

if TYPE_CHECKING:
    from boardscout.fetchers.http import HttpFetcher


class Provider(ABC):
    """
    Base class for job source providers.

    A provider turns one source identifier into a SourceOutcome:
    - Fetching the source's posting list
    - Applying the match heuristic to every posting
    - Reporting failures as a diagnostic instead of raising
    """

    name: str = "base"

    @abstractmethod
    async def collect(
        self,
        fetcher: "HttpFetcher",
        source: str,
        query: Query,
        timeout_s: Optional[float] = None,
    ) -> SourceOutcome:
        """
        Collect matching jobs from one source.

        Args:
            fetcher: HTTP fetcher for making requests
            source: Source identifier (e.g. a board token)
            query: Search query
            timeout_s: Per-request timeout override

        Returns:
            SourceOutcome with matches in the source's listing order
        """
        raise NotImplementedError
