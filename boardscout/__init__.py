"""
BoardScout: concurrent Greenhouse job-board search.

Discovers public Greenhouse boards, queries them concurrently, filters
postings with a keyword/location heuristic, and browses the matches.
"""

__version__ = "1.0.0"

from boardscout.models import MatchResult, Posting, Query, SearchReport
from boardscout.matching import MatchRules, matches, resolve_company
from boardscout.orchestrator import run, run_search, search_jobs

__all__ = [
    "MatchResult",
    "MatchRules",
    "Posting",
    "Query",
    "SearchReport",
    "matches",
    "resolve_company",
    "run",
    "run_search",
    "search_jobs",
]
