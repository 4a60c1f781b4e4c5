"""
Interactive result browser as a pure state machine.

reduce(state, event) is the whole behavior: no I/O, no network, no shared
state. The CLI feeds it one event at a time and renders the new state.

    LIST --select--> DETAIL --apply--> CONFIRM --yes--> COMPLETE --any--> LIST
    DETAIL --back--> LIST,  CONFIRM --no--> LIST,  quit from every view
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Sequence, Tuple

from boardscout.exceptions import EmptyResultsError, InvalidInput, InvalidTransition
from boardscout.models import MatchResult


class View(str, Enum):
    LIST = "list"
    DETAIL = "detail"
    CONFIRM = "confirm"
    COMPLETE = "complete"


class Event(str, Enum):
    NEXT = "next"
    PREV = "prev"
    SELECT = "select"
    BACK = "back"
    APPLY = "apply"
    YES = "yes"
    NO = "no"
    ANY = "any"
    QUIT = "quit"


@dataclass(frozen=True)
class BrowserState:
    """
    Everything a renderer needs: view tag, results, cursor, selection.

    results is fixed for the session and never empty; cursor is always a
    valid index into it.
    """

    results: Tuple[MatchResult, ...]
    view: View = View.LIST
    cursor: int = 0
    selected: Optional[int] = None
    quit: bool = False

    @classmethod
    def start(cls, results: Sequence[MatchResult]) -> "BrowserState":
        """Initial LIST state. Raises EmptyResultsError if there is nothing to browse."""
        if not results:
            raise EmptyResultsError("No results to browse")
        return cls(results=tuple(results))

    @property
    def current(self) -> MatchResult:
        return self.results[self.cursor]

    @property
    def selected_result(self) -> Optional[MatchResult]:
        if self.selected is None:
            return None
        return self.results[self.selected]

    @property
    def is_terminal(self) -> bool:
        return self.quit


def _list(state: BrowserState, event: Event) -> BrowserState:
    n = len(state.results)
    if event == Event.NEXT:
        return replace(state, cursor=(state.cursor + 1) % n)
    if event == Event.PREV:
        return replace(state, cursor=(state.cursor - 1) % n)
    if event == Event.SELECT:
        return replace(state, view=View.DETAIL, selected=state.cursor)
    raise InvalidTransition(state.view, event)


def _detail(state: BrowserState, event: Event) -> BrowserState:
    if event == Event.BACK:
        return replace(state, view=View.LIST)
    if event == Event.APPLY:
        return replace(state, view=View.CONFIRM)
    raise InvalidTransition(state.view, event)


def _confirm(state: BrowserState, event: Event) -> BrowserState:
    if event == Event.YES:
        return replace(state, view=View.COMPLETE)
    if event == Event.NO:
        return replace(state, view=View.LIST)
    raise InvalidTransition(state.view, event)


def _complete(state: BrowserState, event: Event) -> BrowserState:
    return replace(state, view=View.LIST)


_HANDLERS = {
    View.LIST: _list,
    View.DETAIL: _detail,
    View.CONFIRM: _confirm,
    View.COMPLETE: _complete,
}


def reduce(state: BrowserState, event: Event) -> BrowserState:
    """Return the state after handling one event."""
    if state.quit:
        return state
    if event == Event.QUIT:
        return replace(state, quit=True)
    return _HANDLERS[state.view](state, event)


def jump_to(state: BrowserState, index: int) -> BrowserState:
    """Move the list cursor to a 0-based index."""
    if state.view != View.LIST:
        raise InvalidInput("Jumping is only possible from the list")
    if not 0 <= index < len(state.results):
        raise InvalidInput(f"Choose a number between 1 and {len(state.results)}")
    return replace(state, cursor=index)


# Keys accepted in each view. Empty string is a bare Enter.
KEYMAP = {
    View.LIST: {
        "n": Event.NEXT, "j": Event.NEXT, "": Event.NEXT,
        "p": Event.PREV, "k": Event.PREV,
        "s": Event.SELECT, "o": Event.SELECT,
        "q": Event.QUIT,
    },
    View.DETAIL: {
        "b": Event.BACK, "": Event.BACK,
        "a": Event.APPLY,
        "q": Event.QUIT,
    },
    View.CONFIRM: {
        "y": Event.YES, "yes": Event.YES,
        "n": Event.NO, "no": Event.NO,
        "q": Event.QUIT,
    },
}


def parse_input(line: str, view: View) -> Event:
    """Map one line of user input to an event for the given view."""
    key = (line or "").strip().lower()
    if view == View.COMPLETE:
        return Event.QUIT if key == "q" else Event.ANY
    try:
        return KEYMAP[view][key]
    except KeyError:
        keys = ", ".join(repr(k) for k in KEYMAP[view] if k)
        raise InvalidInput(f"Unknown command {key!r}; expected one of {keys}") from None


def handle_line(state: BrowserState, line: str) -> BrowserState:
    """
    Apply one line of input. A number in the list view selects that entry
    (1-based) directly.
    """
    key = (line or "").strip()
    if state.view == View.LIST and key.isascii() and key.isdigit():
        return reduce(jump_to(state, int(key) - 1), Event.SELECT)
    return reduce(state, parse_input(key, state.view))
