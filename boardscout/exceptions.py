"""
Exception types for BoardScout.

Per-source fetch failures are not exceptions; they are reported as
SourceDiagnostic values on the run report.
"""


class BoardScoutError(Exception):
    """Base class for BoardScout errors."""


class InvalidSourceError(BoardScoutError, ValueError):
    """A source identifier cannot be used (e.g. empty)."""


class PostingParseError(BoardScoutError, ValueError):
    """A job object from a source is missing a required field."""


class EmptyResultsError(BoardScoutError):
    """The result browser was started with no results."""


class InvalidInput(BoardScoutError, ValueError):
    """User input could not be mapped to a browser event. Re-prompt."""


class InvalidTransition(BoardScoutError):
    """An event is not valid in the browser's current view."""

    def __init__(self, view, event):
        self.view = view
        self.event = event
        super().__init__(f"{event.value!r} is not valid in {view.value} view")
