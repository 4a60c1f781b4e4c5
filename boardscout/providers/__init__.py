"""
Job source providers for BoardScout.

A provider turns one source identifier into a SourceOutcome; discovery
resolves which source identifiers to query.
"""

from boardscout.providers.base import Provider
from boardscout.providers.greenhouse import GreenhouseProvider
from boardscout.providers.discovery import (
    KNOWN_BOARD_TOKENS,
    SourceCatalog,
    ddg_search,
    extract_board_token,
)

__all__ = [
    "Provider",
    "GreenhouseProvider",
    "KNOWN_BOARD_TOKENS",
    "SourceCatalog",
    "ddg_search",
    "extract_board_token",
]
