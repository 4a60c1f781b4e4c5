"""
Command-line interface for BoardScout.

Usage:
    python -m boardscout "principal product manager" --location 94555
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import webbrowser
from typing import Callable, List, Optional, Sequence

from boardscout.browser import BrowserState, View, handle_line
from boardscout.config import Settings, get_settings
from boardscout.exceptions import EmptyResultsError, InvalidInput
from boardscout.models import MatchResult, Query, split_keywords
from boardscout.render import render_no_matches, render_results, render_state, render_summary

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="boardscout",
        description="Search public Greenhouse job boards and browse the matches",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Basic search, boards discovered via DuckDuckGo
  python -m boardscout "principal product manager" --location 94555

  # Only specific boards, no discovery
  python -m boardscout "data engineer" --sources stripe,figma,notion

  # Print results instead of browsing them
  python -m boardscout "staff engineer" --no-browse

  # Google results page for discovery, with diagnostics
  python -m boardscout "product designer" --backend google -v
""",
    )

    parser.add_argument(
        "query",
        help="Keywords that must all appear in the job title (e.g., 'principal product manager')",
    )
    parser.add_argument(
        "--location", "-l",
        default=None,
        help="Location filter (e.g., '94555', 'Remote'); broad aliases such as remote always match",
    )

    # Sources
    parser.add_argument(
        "--sources", "-s",
        default="",
        help="Comma-separated board tokens to search instead of discovery",
    )
    parser.add_argument(
        "--no-discover",
        action="store_true",
        help="Skip search-index discovery and use the built-in board list",
    )
    parser.add_argument(
        "--backend",
        choices=["duckduckgo", "google"],
        default=None,
        help="Search index used for discovery (default: duckduckgo)",
    )

    # Behavior
    parser.add_argument(
        "--concurrency", "-c",
        type=int,
        default=None,
        help="Max boards queried at once, 0 for unbounded (default: 16)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Request timeout in seconds (default: 30)",
    )
    parser.add_argument(
        "--no-browse",
        action="store_true",
        help="Print all results instead of starting the interactive browser",
    )
    parser.add_argument(
        "--open",
        action="store_true",
        help="Open the job page in a web browser after confirming a selection",
    )

    # Verbosity
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log per-board diagnostics",
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress all output except results and errors",
    )

    return parser.parse_args(argv)


def build_settings(args: argparse.Namespace, base: Optional[Settings] = None) -> Settings:
    """Overlay command line options on environment settings."""
    base = base or get_settings()
    overrides = {}
    if args.no_discover:
        overrides["discovery_enabled"] = False
    if args.backend:
        overrides["discovery_backend"] = args.backend
    if args.concurrency is not None:
        overrides["concurrency"] = max(0, args.concurrency)
    if args.timeout is not None:
        overrides["request_timeout_s"] = args.timeout
    return base.model_copy(update=overrides)


def build_query(args: argparse.Namespace, settings: Settings) -> Query:
    location = args.location if args.location is not None else settings.default_location
    return Query.parse(args.query, location)


def configure_logging(args: argparse.Namespace, settings: Settings) -> None:
    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.ERROR
    else:
        level = getattr(logging, settings.log_level.upper(), logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _print_lines(lines: Sequence[str]) -> None:
    for line in lines:
        print(line)


def browse(
    results: Sequence[MatchResult],
    read_line: Callable[[str], str] = input,
    write: Callable[[Sequence[str]], None] = _print_lines,
    on_confirm: Optional[Callable[[MatchResult], None]] = None,
) -> Optional[MatchResult]:
    """
    Interactive loop over the results.

    Returns the last confirmed result, or None. Never enters the list
    view for an empty result sequence.
    """
    try:
        state = BrowserState.start(results)
    except EmptyResultsError:
        write(["No results to browse."])
        return None

    confirmed: Optional[MatchResult] = None
    while not state.is_terminal:
        write(render_state(state))
        try:
            line = read_line("> ")
        except EOFError:
            break
        try:
            new_state = handle_line(state, line)
        except InvalidInput as e:
            write([str(e)])
            continue
        if new_state.view == View.COMPLETE and state.view == View.CONFIRM:
            confirmed = new_state.selected_result
            logger.info("Selected %s", confirmed.url)
            if on_confirm:
                on_confirm(confirmed)
        state = new_state
    return confirmed


def _print_progress(done: int, total: int, source: str) -> None:
    print(f"\rProgress: {done}/{total} - Checked {source}...".ljust(60), end="", flush=True)


async def async_main(args: argparse.Namespace) -> int:
    """Async entry point."""
    from boardscout.orchestrator import search_jobs

    settings = build_settings(args)
    configure_logging(args, settings)
    query = build_query(args, settings)
    sources = split_keywords(args.sources.replace(",", " ")) or None

    if not args.quiet:
        print(f"BoardScout - Searching for: {query.text}")
        if query.location:
            print(f"  Location: {query.location}")
        if sources:
            print(f"  Boards: {', '.join(sources)}")
        print()

    show_progress = not args.quiet and not args.verbose
    try:
        report = await search_jobs(
            query,
            settings=settings,
            sources=sources,
            progress=_print_progress if show_progress else None,
        )
    except KeyboardInterrupt:
        if not args.quiet:
            print("\nInterrupted by user")
        return 130
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1

    if show_progress:
        print()
    for diag in report.diagnostics:
        logger.debug("Board failed: %s", diag)

    if not args.quiet:
        print()
        _print_lines(render_summary(report))

    if not report.matches:
        if args.quiet:
            _print_lines(render_no_matches(report))
        return 0

    if args.no_browse:
        _print_lines(render_results(report.matches))
        return 0

    on_confirm = (lambda job: webbrowser.open(job.url)) if args.open else None
    try:
        browse(report.matches, on_confirm=on_confirm)
    except KeyboardInterrupt:
        print()
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    try:
        return asyncio.run(async_main(args))
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
