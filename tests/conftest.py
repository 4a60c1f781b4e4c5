# tests/conftest.py
"""
Pytest configuration and fixtures.
"""
import json
from typing import Dict, Optional

import pytest

from boardscout.config import Settings
from boardscout.fetchers.http import FetchResult
from boardscout.providers.greenhouse import board_url


class FakeFetcher:
    """Stands in for HttpFetcher: canned FetchResults keyed by URL."""

    def __init__(self, responses: Optional[Dict[str, FetchResult]] = None):
        self.responses = dict(responses or {})
        self.requested = []

    def add_board(self, token: str, jobs, status: int = 200) -> None:
        url = board_url(token)
        body = json.dumps({"jobs": jobs})
        self.responses[url] = FetchResult(
            url=url,
            status=status,
            text=body,
            json_data={"jobs": jobs},
            content_type="application/json",
            error="" if status < 400 else f"HTTP {status}",
        )

    def add_result(self, token: str, **kwargs) -> None:
        url = board_url(token)
        self.responses[url] = FetchResult(url=url, **kwargs)

    async def fetch(self, url, timeout_s=None, headers=None):
        self.requested.append(url)
        if url in self.responses:
            return self.responses[url]
        return FetchResult(url=url, status=404, error="HTTP 404")

    async def fetch_json(self, url, timeout_s=None):
        return await self.fetch(url, timeout_s=timeout_s)


def make_job(title, location="Remote", job_id=1, departments=None, updated_at="2024-05-01T10:00:00-04:00"):
    job = {
        "id": job_id,
        "title": title,
        "updated_at": updated_at,
        "location": {"name": location},
        "absolute_url": f"https://boards.greenhouse.io/acme/jobs/{job_id}",
    }
    if departments is not None:
        job["departments"] = [{"id": i, "name": name} for i, name in enumerate(departments)]
    return job


@pytest.fixture
def fake_fetcher():
    return FakeFetcher()


@pytest.fixture
def settings():
    """Settings with no jitter and no discovery, independent of the environment."""
    return Settings(
        jitter_min_ms=0,
        jitter_max_ms=0,
        concurrency=4,
        discovery_enabled=False,
        extra_sources=[],
    )


@pytest.fixture
def pm_jobs():
    return [
        make_job("Senior Product Manager", "Remote", job_id=1, departments=["Payments"]),
        make_job("Software Engineer", "New York", job_id=2),
        make_job("Lead Product Manager, Growth", "San Francisco, CA", job_id=3),
        make_job("Staff Product Manager", "London", job_id=4),
    ]
