"""
Keyword/location match heuristic.

All functions here are pure: the same posting, query and rules always give
the same answer, independent of letter case.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, Mapping, Sequence, Tuple

from boardscout.exceptions import InvalidSourceError
from boardscout.models import Posting


# Keyword -> extra title terms that also satisfy it.
DEFAULT_SYNONYMS: Mapping[str, Tuple[str, ...]] = MappingProxyType({
    "principal": ("senior", "staff", "lead"),
    "manager": ("management",),
})

# A posting location containing any of these matches every query location.
DEFAULT_LOCATION_ALIASES: Tuple[str, ...] = (
    "remote",
    "bay area",
    "san francisco",
    "california",
    "ca",
    "fremont",
    "silicon valley",
    "sf",
    "anywhere",
    "us",
    "united states",
)


def _freeze_synonyms(synonyms: Mapping[str, Iterable[str]]) -> Dict[str, Tuple[str, ...]]:
    frozen: Dict[str, Tuple[str, ...]] = {}
    for keyword, terms in synonyms.items():
        key = keyword.strip().lower()
        if not key:
            continue
        frozen[key] = tuple(t.strip().lower() for t in terms if t and t.strip())
    return frozen


@dataclass(frozen=True)
class MatchRules:
    """
    Synonym table and location allow-list used by the matcher.

    Both are data; extend them with with_synonyms()/with_location_aliases()
    rather than changing the matching functions.
    """

    synonyms: Mapping[str, Tuple[str, ...]] = field(default_factory=lambda: dict(DEFAULT_SYNONYMS))
    location_aliases: Tuple[str, ...] = DEFAULT_LOCATION_ALIASES

    def __post_init__(self):
        object.__setattr__(self, "synonyms", MappingProxyType(_freeze_synonyms(self.synonyms)))
        object.__setattr__(
            self,
            "location_aliases",
            tuple(a.strip().lower() for a in self.location_aliases if a and a.strip()),
        )

    def terms_for(self, keyword: str) -> Tuple[str, ...]:
        """All title terms that satisfy keyword, the keyword itself first."""
        kw = keyword.lower()
        return (kw,) + self.synonyms.get(kw, ())

    def iter_synonyms(self) -> Iterator[Tuple[str, Tuple[str, ...]]]:
        return iter(sorted(self.synonyms.items()))

    def with_synonyms(self, extra: Mapping[str, Iterable[str]]) -> "MatchRules":
        """Return a copy with extra synonym terms merged in."""
        merged: Dict[str, Tuple[str, ...]] = dict(self.synonyms)
        for keyword, terms in _freeze_synonyms(extra).items():
            existing = merged.get(keyword, ())
            merged[keyword] = existing + tuple(t for t in terms if t not in existing)
        return replace(self, synonyms=merged)

    def with_location_aliases(self, extra: Iterable[str]) -> "MatchRules":
        """Return a copy with extra location aliases appended."""
        aliases = list(self.location_aliases)
        for alias in extra:
            alias = alias.strip().lower()
            if alias and alias not in aliases:
                aliases.append(alias)
        return replace(self, location_aliases=tuple(aliases))


DEFAULT_RULES = MatchRules()


def title_matches(title: str, keywords: Sequence[str], rules: MatchRules = DEFAULT_RULES) -> bool:
    """True if every keyword appears in the title, directly or via a synonym."""
    t = (title or "").lower()
    return all(
        any(term in t for term in rules.terms_for(kw))
        for kw in keywords
        if kw
    )


def location_matches(location: str, query_location: str, rules: MatchRules = DEFAULT_RULES) -> bool:
    """True if the label contains the query location or any broad alias."""
    loc = (location or "").lower()
    if (query_location or "").lower() in loc:
        return True
    return any(alias in loc for alias in rules.location_aliases)


def matches(
    posting: Posting,
    keywords: Sequence[str],
    location: str,
    rules: MatchRules = DEFAULT_RULES,
) -> bool:
    """A posting matches when both the title and location predicates hold."""
    return title_matches(posting.title, keywords, rules) and location_matches(
        posting.location, location, rules
    )


def capitalize_source(source: str) -> str:
    """'acme' -> 'Acme'. Only the first character changes."""
    if not source:
        raise InvalidSourceError("Source identifier must not be empty")
    return source[0].upper() + source[1:]


def resolve_company(posting: Posting, source: str) -> str:
    """Company display name: first department label, else the capitalized source id."""
    if posting.departments and posting.departments[0]:
        return posting.departments[0]
    return capitalize_source(source)
