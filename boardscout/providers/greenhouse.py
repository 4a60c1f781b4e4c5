"""
Greenhouse ATS API provider.

Public API: https://boards-api.greenhouse.io/v1/boards/{token}/jobs
"""

from __future__ import annotations

import json
import logging
from typing import List, Optional, TYPE_CHECKING

from boardscout.exceptions import PostingParseError
from boardscout.matching import DEFAULT_RULES, MatchRules, matches, resolve_company
from boardscout.models import FailureKind, MatchResult, Posting, Query, SourceOutcome
from boardscout.providers.base import Provider

if TYPE_CHECKING:
    from boardscout.fetchers.http import HttpFetcher

logger = logging.getLogger(__name__)

API_URL = "https://boards-api.greenhouse.io/v1/boards/{token}/jobs?content=true"


def board_url(token: str) -> str:
    """API URL for a board; content=true includes departments."""
    return API_URL.format(token=token)


class GreenhouseProvider(Provider):
    """Provider for Greenhouse ATS job boards."""

    name = "greenhouse"

    def __init__(self, rules: MatchRules = DEFAULT_RULES):
        self.rules = rules

    async def collect(
        self,
        fetcher: "HttpFetcher",
        source: str,
        query: Query,
        timeout_s: Optional[float] = None,
    ) -> SourceOutcome:
        """Collect matching jobs from a single Greenhouse board."""
        url = board_url(source)
        result = await fetcher.fetch_json(url, timeout_s=timeout_s)

        if result.is_transport_error:
            return SourceOutcome.failed(source, FailureKind.TRANSPORT, detail=result.error)
        if not result.ok:
            return SourceOutcome.failed(
                source, FailureKind.STATUS, detail=result.error, status=result.status
            )

        data = result.json_data
        if data is None:
            try:
                data = json.loads(result.text)
            except ValueError as e:
                return SourceOutcome.failed(source, FailureKind.DECODE, detail=str(e))

        raw_jobs = data.get("jobs") if isinstance(data, dict) else None
        if not isinstance(raw_jobs, list):
            return SourceOutcome.failed(
                source, FailureKind.DECODE, detail="Response has no 'jobs' list"
            )

        return self.filter_jobs(source, raw_jobs, query)

    def filter_jobs(self, source: str, raw_jobs: List[dict], query: Query) -> SourceOutcome:
        """Apply the match heuristic to every job object, keeping listing order."""
        outcome = SourceOutcome(source=source)

        for j in raw_jobs:
            try:
                posting = Posting.from_api(j)
            except PostingParseError as e:
                outcome.skipped += 1
                logger.debug("%s: skipping job: %s", source, e)
                continue

            outcome.scanned += 1
            if not matches(posting, query.keywords, query.location, self.rules):
                continue

            company = resolve_company(posting, source)
            logger.info("Match: %r at %s (%s)", posting.title, company, posting.location)
            outcome.matches.append(
                MatchResult(
                    title=posting.title,
                    company=company,
                    date_posted=posting.updated_at,
                    url=posting.url,
                    source=source,
                )
            )

        if outcome.scanned:
            logger.info("%s: %d jobs found, %d matching", source, outcome.scanned, len(outcome.matches))
        return outcome
