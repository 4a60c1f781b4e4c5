"""
Console rendering of search reports and browser states.

Pure functions returning lists of lines; the CLI prints them.
"""

from __future__ import annotations

from typing import List, Sequence

from boardscout.browser import BrowserState, View
from boardscout.models import MatchResult, SearchReport

LIST_WINDOW = 10


def render_summary(report: SearchReport) -> List[str]:
    """Run summary. Zero matches and failed sources are reported separately."""
    lines = [
        "=" * 50,
        "Search Summary",
        "=" * 50,
        f"  Boards searched:  {report.sources_queried}/{report.sources_total}",
        f"  Postings scanned: {report.postings_scanned}",
        f"  Matches:          {len(report.matches)}",
    ]
    failed = report.failed_sources
    if failed:
        lines.append(f"  Boards failed:    {len(failed)} (run with -v for details)")
    if report.cancelled:
        lines.append("  Search was cancelled; results are partial.")
    lines.append("")
    lines.extend(render_no_matches(report))
    return lines


def render_no_matches(report: SearchReport) -> List[str]:
    """Explicit zero-match line, or nothing when there are matches."""
    if report.matches:
        return []
    failed = report.failed_sources
    if failed and len(failed) == report.sources_queried:
        return ["No results: every board failed to respond."]
    return ["No jobs found matching your criteria."]


def render_result(index: int, job: MatchResult) -> List[str]:
    return [
        f"{index}. Job Title: {job.title}",
        f"   Company: {job.company}",
        f"   Date Posted: {job.date_posted}",
        f"   URL: {job.url}",
    ]


def render_results(results: Sequence[MatchResult]) -> List[str]:
    """Numbered dump of every result, for non-interactive runs."""
    if not results:
        return ["No jobs found matching your criteria."]
    lines = [f"Found {len(results)} matching job(s):", ""]
    for i, job in enumerate(results, start=1):
        lines.extend(render_result(i, job))
        lines.append("")
    return lines


def _render_list(state: BrowserState) -> List[str]:
    n = len(state.results)
    start = (state.cursor // LIST_WINDOW) * LIST_WINDOW
    lines = [f"Results {start + 1}-{min(start + LIST_WINDOW, n)} of {n}"]
    for i in range(start, min(start + LIST_WINDOW, n)):
        job = state.results[i]
        marker = ">" if i == state.cursor else " "
        lines.append(f"{marker} {i + 1:>3}. {job.title} - {job.company}")
    lines.append("")
    lines.append("[n]ext  [p]rev  [s]elect  <number> open  [q]uit")
    return lines


def _render_detail(state: BrowserState) -> List[str]:
    job = state.selected_result or state.current
    index = state.selected if state.selected is not None else state.cursor
    return render_result(index + 1, job) + ["", "[a]pply  [b]ack  [q]uit"]


def _render_confirm(state: BrowserState) -> List[str]:
    job = state.selected_result or state.current
    return [f"Apply to '{job.title}' at {job.company}? [y/n]"]


def _render_complete(state: BrowserState) -> List[str]:
    job = state.selected_result or state.current
    return [
        f"Selected '{job.title}' at {job.company}.",
        f"Apply at: {job.url}",
        "",
        "Press Enter to return to the list, [q] to quit.",
    ]


_RENDERERS = {
    View.LIST: _render_list,
    View.DETAIL: _render_detail,
    View.CONFIRM: _render_confirm,
    View.COMPLETE: _render_complete,
}


def render_state(state: BrowserState) -> List[str]:
    """Lines for the browser's current view."""
    return _RENDERERS[state.view](state)
