"""
Main orchestrator for BoardScout search runs.

Ties together discovery, the per-board provider, and fan-in of results
into a single search_jobs() function. run_search() is the engine on its own:
one task per source, failures folded into diagnostics, never raised.
"""

from __future__ import annotations

import asyncio
import logging
import random
from typing import Callable, Iterable, List, Optional

from boardscout.config import Settings, get_settings
from boardscout.fetchers.http import HttpFetcher
from boardscout.models import FailureKind, MatchResult, Query, SearchReport, SourceOutcome
from boardscout.providers.base import Provider
from boardscout.providers.discovery import SourceCatalog
from boardscout.providers.greenhouse import GreenhouseProvider

logger = logging.getLogger(__name__)

ProgressFn = Callable[[int, int, str], None]


async def _collect_from_source(
    provider: Provider,
    fetcher: HttpFetcher,
    source: str,
    query: Query,
    settings: Settings,
    rng: random.Random,
    semaphore: Optional[asyncio.Semaphore],
) -> SourceOutcome:
    """Collect one source. Always returns an outcome; errors become diagnostics."""
    # Small random delay to be respectful to the API
    delay_ms = rng.randint(settings.jitter_min_ms, settings.jitter_max_ms)
    if delay_ms:
        await asyncio.sleep(delay_ms / 1000)

    try:
        if semaphore is None:
            return await provider.collect(fetcher, source, query, timeout_s=settings.request_timeout_s)
        async with semaphore:
            return await provider.collect(fetcher, source, query, timeout_s=settings.request_timeout_s)
    except asyncio.CancelledError:
        raise
    except Exception as e:
        error_msg = str(e)[:200] if str(e) else type(e).__name__
        return SourceOutcome.failed(source, FailureKind.INTERNAL, detail=error_msg)


async def run_search(
    sources: Iterable[str],
    query: Query,
    fetcher: HttpFetcher,
    settings: Optional[Settings] = None,
    provider: Optional[Provider] = None,
    cancel_event: Optional[asyncio.Event] = None,
    rng: Optional[random.Random] = None,
    progress: Optional[ProgressFn] = None,
) -> SearchReport:
    """
    Query every source concurrently and merge the matches.

    Args:
        sources: Source identifiers; duplicates are queried once
        query: Keywords and location
        fetcher: Shared HTTP fetcher
        settings: Timeouts, jitter and concurrency limit
        provider: Source provider (default: GreenhouseProvider)
        cancel_event: When set, stop waiting and return what has completed
        rng: Random source for jitter
        progress: Called as progress(done, total, source) after each source

    Returns:
        SearchReport; matches from one source keep that source's listing order,
        order across sources follows completion order.
    """
    settings = settings or get_settings()
    provider = provider or GreenhouseProvider()
    rng = rng or random.Random()
    unique_sources = sorted(frozenset(sources))
    report = SearchReport(sources_total=len(unique_sources))
    if not unique_sources:
        return report

    semaphore = asyncio.Semaphore(settings.concurrency) if settings.concurrency > 0 else None
    pending = {
        asyncio.ensure_future(
            _collect_from_source(provider, fetcher, source, query, settings, rng, semaphore)
        )
        for source in unique_sources
    }
    cancel_waiter = asyncio.ensure_future(cancel_event.wait()) if cancel_event else None

    try:
        while pending:
            wait_on = pending | {cancel_waiter} if cancel_waiter else pending
            done, _ = await asyncio.wait(wait_on, return_when=asyncio.FIRST_COMPLETED)

            for task in done:
                if task is cancel_waiter:
                    continue
                pending.discard(task)
                outcome = task.result()
                report.add(outcome)
                if outcome.diagnostic is not None:
                    logger.debug(
                        "Source %s contributed nothing (%s): %s",
                        outcome.source,
                        outcome.diagnostic.kind.value,
                        outcome.diagnostic,
                    )
                if progress:
                    progress(report.sources_queried, report.sources_total, outcome.source)

            if cancel_waiter is not None and cancel_waiter.done() and pending:
                logger.info("Search cancelled with %d source(s) outstanding", len(pending))
                report.cancelled = True
                break
    finally:
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        if cancel_waiter is not None:
            cancel_waiter.cancel()
            await asyncio.gather(cancel_waiter, return_exceptions=True)

    logger.info(
        "Searched %d source(s): %d match(es), %d failed",
        report.sources_queried,
        len(report.matches),
        len(report.failed_sources),
    )
    return report


async def run(
    sources: Iterable[str],
    query: Query,
    fetcher: HttpFetcher,
    **kwargs,
) -> List[MatchResult]:
    """Engine contract: the aggregated matches only. Never raises for source failures."""
    report = await run_search(sources, query, fetcher, **kwargs)
    return report.matches


async def search_jobs(
    query: Query,
    settings: Optional[Settings] = None,
    sources: Optional[Iterable[str]] = None,
    cancel_event: Optional[asyncio.Event] = None,
    progress: Optional[ProgressFn] = None,
) -> SearchReport:
    """
    Run a complete search session.

    Args:
        query: Keywords and location
        settings: Runtime configuration
        sources: Explicit board tokens; skips discovery when given
        cancel_event: Passed through to run_search()
        progress: Passed through to run_search()

    Returns:
        SearchReport for the run
    """
    settings = settings or get_settings()
    fetcher = HttpFetcher(
        timeout_s=settings.request_timeout_s,
        max_retries=settings.max_retries,
        user_agent=settings.user_agent,
    )

    async with fetcher:
        if sources:
            resolved = frozenset(s.strip().lower() for s in sources if s and s.strip())
            logger.info("Using %d board token(s) given explicitly", len(resolved))
        else:
            resolved = await SourceCatalog(settings).resolve_async(fetcher)

        logger.info("Searching %d board(s) for %r in %r", len(resolved), query.text, query.location)
        return await run_search(
            resolved,
            query,
            fetcher,
            settings=settings,
            cancel_event=cancel_event,
            progress=progress,
        )
