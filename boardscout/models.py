"""
Core data models for BoardScout.

Provides:
- Posting: one job listing as returned by a Greenhouse board
- MatchResult: immutable projection of a matching posting
- Query: keyword/location search intent
- SourceDiagnostic / SourceOutcome / SearchReport: per-source and aggregate run results
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from boardscout.exceptions import PostingParseError


# ----------------------------- Utilities -----------------------------

def normalize_text(s: str) -> str:
    """Collapse whitespace and strip."""
    return re.sub(r"\s+", " ", (s or "")).strip()


def split_keywords(s: str) -> List[str]:
    """Split a query string into lower-cased, whitespace-separated keywords."""
    return [kw for kw in normalize_text(s).lower().split(" ") if kw]


# ----------------------------- Posting -----------------------------

@dataclass
class Posting:
    """
    One job listing from a source.

    Ephemeral: created per fetch response and discarded once projected
    to a MatchResult.
    """

    title: str
    location: str
    url: str
    updated_at: str = ""
    provider_id: str = ""
    departments: List[str] = field(default_factory=list)

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Posting":
        """
        Build a Posting from a Greenhouse job object.

        Only title, location.name, updated_at, absolute_url and the department
        names are read; everything else is ignored.
        """
        if not isinstance(data, dict):
            raise PostingParseError(f"Expected job object, got {type(data).__name__}")

        title = data.get("title")
        if not isinstance(title, str) or not title.strip():
            raise PostingParseError("Job is missing a title")

        location_obj = data.get("location")
        location = location_obj.get("name") if isinstance(location_obj, dict) else None
        if not isinstance(location, str):
            raise PostingParseError(f"Job {title!r} is missing location.name")

        url = data.get("absolute_url")
        if not isinstance(url, str) or not url.strip():
            raise PostingParseError(f"Job {title!r} is missing absolute_url")

        raw_departments = data.get("departments") or []
        if not isinstance(raw_departments, list):
            raise PostingParseError(f"Job {title!r} has malformed departments")

        departments: List[str] = []
        for dept in raw_departments:
            if isinstance(dept, dict):
                name = dept.get("name")
                departments.append(name if isinstance(name, str) else "")

        updated_at = data.get("updated_at")
        return cls(
            title=title,
            location=location,
            url=url.strip(),
            updated_at=updated_at if isinstance(updated_at, str) else "",
            provider_id=str(data.get("id", "")),
            departments=departments,
        )


# ----------------------------- MatchResult -----------------------------

@dataclass(frozen=True)
class MatchResult:
    """A posting that satisfied the query, with its resolved company name."""

    title: str
    company: str
    date_posted: str
    url: str
    source: str = ""


# ----------------------------- Query -----------------------------

@dataclass(frozen=True)
class Query:
    """Search intent: every keyword must match the title, location is OR-ed with aliases."""

    keywords: Tuple[str, ...]
    location: str = ""

    @classmethod
    def parse(cls, text: str, location: str = "") -> "Query":
        return cls(keywords=tuple(split_keywords(text)), location=normalize_text(location))

    @property
    def text(self) -> str:
        return " ".join(self.keywords)


# ----------------------------- Run results -----------------------------

class FailureKind(str, Enum):
    """Why a source contributed nothing."""
    TRANSPORT = "transport"
    STATUS = "status"
    DECODE = "decode"
    INTERNAL = "internal"


@dataclass(frozen=True)
class SourceDiagnostic:
    """One per-source failure, kept for observability."""

    source: str
    kind: FailureKind
    detail: str = ""
    status: int = 0

    def __str__(self) -> str:
        if self.kind == FailureKind.STATUS:
            return f"{self.source}: HTTP {self.status}"
        return f"{self.source}: {self.kind.value} error: {self.detail}"


@dataclass
class SourceOutcome:
    """Contribution of one source to a run."""

    source: str
    matches: List[MatchResult] = field(default_factory=list)
    scanned: int = 0
    skipped: int = 0
    diagnostic: Optional[SourceDiagnostic] = None

    @property
    def ok(self) -> bool:
        return self.diagnostic is None

    @classmethod
    def failed(cls, source: str, kind: FailureKind, detail: str = "", status: int = 0) -> "SourceOutcome":
        return cls(
            source=source,
            diagnostic=SourceDiagnostic(source=source, kind=kind, detail=detail, status=status),
        )


@dataclass
class SearchReport:
    """Aggregate of one engine run. Partial failure never makes the run fail."""

    matches: List[MatchResult] = field(default_factory=list)
    outcomes: List[SourceOutcome] = field(default_factory=list)
    sources_total: int = 0
    cancelled: bool = False

    @property
    def diagnostics(self) -> List[SourceDiagnostic]:
        return [o.diagnostic for o in self.outcomes if o.diagnostic is not None]

    @property
    def failed_sources(self) -> List[str]:
        return [o.source for o in self.outcomes if not o.ok]

    @property
    def sources_queried(self) -> int:
        return len(self.outcomes)

    @property
    def postings_scanned(self) -> int:
        return sum(o.scanned for o in self.outcomes)

    def add(self, outcome: SourceOutcome) -> None:
        """Fold one completed source into the aggregate."""
        self.outcomes.append(outcome)
        self.matches.extend(outcome.matches)
