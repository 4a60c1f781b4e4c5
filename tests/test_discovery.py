# tests/test_discovery.py
import asyncio

import pytest
from conftest import FakeFetcher

from boardscout.config import Settings
from boardscout.fetchers.http import FetchResult
from boardscout.providers import discovery
from boardscout.providers.discovery import (
    KNOWN_BOARD_TOKENS,
    SourceCatalog,
    extract_board_token,
    extract_tokens_from_html,
)


@pytest.mark.parametrize("url,token", [
    ("https://boards.greenhouse.io/stripe", "stripe"),
    ("https://boards.greenhouse.io/stripe/jobs/12345", "stripe"),
    ("https://boards.greenhouse.io/Figma?gh_src=abc", "figma"),
    ("https://boards.greenhouse.io/embed/job_board?for=acme", None),
    ("https://boards.greenhouse.io/", None),
    ("https://jobs.lever.co/stripe", None),
    ("", None),
])
def test_extract_board_token(url, token):
    assert extract_board_token(url) == token


def test_extract_tokens_from_google_html():
    html = """
    <html><body>
      <a href="/url?q=https://boards.greenhouse.io/airbnb/jobs/1&sa=U">Airbnb</a>
      <a href="https://boards.greenhouse.io/notion">Notion</a>
      <a href="https://boards.greenhouse.io/embed/job_app">Embed</a>
      <a href="https://example.com/careers">Other</a>
    </body></html>
    """
    assert extract_tokens_from_html(html) == {"airbnb", "notion"}


def test_extract_tokens_from_empty_html():
    assert extract_tokens_from_html("") == set()


def catalog(search_fn, **overrides):
    settings = Settings(discovery_enabled=True, extra_sources=[], **overrides)
    return SourceCatalog(settings, search_fn=search_fn)


def test_resolve_uses_search_results():
    urls = [
        "https://boards.greenhouse.io/airbnb/jobs/1",
        "https://boards.greenhouse.io/airbnb/jobs/2",
        "https://boards.greenhouse.io/notion",
    ]
    assert catalog(lambda q, n: urls).resolve() == frozenset({"airbnb", "notion"})


def test_resolve_passes_query_and_limit():
    seen = {}

    def search(query, max_results):
        seen["args"] = (query, max_results)
        return []

    catalog(search, max_search_results=25).resolve()
    assert seen["args"] == ("site:boards.greenhouse.io", 25)


def test_resolve_falls_back_when_search_finds_nothing():
    assert catalog(lambda q, n: ["https://example.com"]).resolve() == KNOWN_BOARD_TOKENS


def test_resolve_falls_back_when_discovery_disabled():
    settings = Settings(discovery_enabled=False, extra_sources=[])

    def search(query, max_results):
        raise AssertionError("search must not run")

    assert SourceCatalog(settings, search_fn=search).resolve() == KNOWN_BOARD_TOKENS


def test_extra_sources_are_added():
    settings = Settings(discovery_enabled=False, extra_sources="acme,Beta")
    tokens = SourceCatalog(settings, fallback=["stripe"]).resolve()
    assert tokens == frozenset({"stripe", "acme", "beta"})


def test_fallback_catalog_is_non_empty_and_unique():
    assert len(KNOWN_BOARD_TOKENS) == 35


def test_ddg_search_failure_returns_empty(monkeypatch):
    class BrokenDDGS:
        def __enter__(self):
            return self

        def __exit__(self, *args):
            return False

        def text(self, query, max_results=None):
            raise RuntimeError("rate limited")

    monkeypatch.setattr(discovery, "DDGS", BrokenDDGS)
    assert discovery.ddg_search("site:boards.greenhouse.io") == []


def test_ddg_search_collects_hrefs(monkeypatch):
    class FakeDDGS:
        def __enter__(self):
            return self

        def __exit__(self, *args):
            return False

        def text(self, query, max_results=None):
            return [{"href": "https://boards.greenhouse.io/a"}, {"title": "no link"}]

    monkeypatch.setattr(discovery, "DDGS", FakeDDGS)
    assert discovery.ddg_search("q") == ["https://boards.greenhouse.io/a"]


def test_resolve_async_google_backend():
    fetcher = FakeFetcher()
    url = discovery.GOOGLE_SEARCH_URL.format(query="site%3Aboards.greenhouse.io", num=100)
    fetcher.responses[url] = FetchResult(
        url=url,
        status=200,
        text='<a href="https://boards.greenhouse.io/reddit/jobs/9">r</a>',
        content_type="text/html",
    )
    cat = catalog(lambda q, n: [], discovery_backend="google")

    assert asyncio.run(cat.resolve_async(fetcher)) == frozenset({"reddit"})


def test_resolve_async_google_failure_falls_back():
    cat = catalog(lambda q, n: [], discovery_backend="google")
    assert asyncio.run(cat.resolve_async(FakeFetcher())) == KNOWN_BOARD_TOKENS
