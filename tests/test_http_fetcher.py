# tests/test_http_fetcher.py
"""
HttpFetcher against a local aiohttp application.
"""
import asyncio

from aiohttp import web
from aiohttp import test_utils

from boardscout.fetchers.http import FetchResult, HttpFetcher


def make_app(state):
    async def jobs(request):
        state["user_agent"] = request.headers.get("User-Agent")
        return web.json_response({"jobs": [{"title": "PM"}]})

    async def missing(request):
        return web.Response(status=404, text="no such board")

    async def flaky(request):
        state["flaky_calls"] = state.get("flaky_calls", 0) + 1
        if state["flaky_calls"] == 1:
            return web.Response(status=503)
        return web.json_response({"jobs": []})

    async def slow(request):
        await asyncio.sleep(1)
        return web.json_response({"jobs": []})

    async def html(request):
        return web.Response(text="<a href='x'>x</a>", content_type="text/html")

    app = web.Application()
    app.router.add_get("/jobs", jobs)
    app.router.add_get("/missing", missing)
    app.router.add_get("/flaky", flaky)
    app.router.add_get("/slow", slow)
    app.router.add_get("/html", html)
    return app


def with_server(scenario, **fetcher_kwargs):
    state = {}

    async def main():
        server = test_utils.TestServer(make_app(state))
        await server.start_server()
        try:
            async with HttpFetcher(**fetcher_kwargs) as fetcher:
                return await scenario(fetcher, lambda path: str(server.make_url(path)))
        finally:
            await server.close()

    return asyncio.run(main()), state


def test_fetch_json_success():
    async def scenario(fetcher, url):
        return await fetcher.fetch_json(url("/jobs"))

    result, state = with_server(scenario, user_agent="boardscout-test")

    assert result.ok
    assert result.is_json
    assert result.json_data == {"jobs": [{"title": "PM"}]}
    assert state["user_agent"] == "boardscout-test"


def test_client_error_not_retried():
    async def scenario(fetcher, url):
        return await fetcher.fetch_json(url("/missing"))

    result, _ = with_server(scenario, max_retries=3, base_delay_ms=1)

    assert not result.ok
    assert result.status == 404
    assert result.error == "HTTP 404"
    assert not result.is_transport_error


def test_server_error_returned_without_retry_by_default():
    async def scenario(fetcher, url):
        return await fetcher.fetch(url("/flaky"))

    result, state = with_server(scenario)

    assert result.status == 503
    assert state["flaky_calls"] == 1


def test_server_error_retried_when_configured():
    async def scenario(fetcher, url):
        return await fetcher.fetch(url("/flaky"))

    result, state = with_server(scenario, max_retries=2, base_delay_ms=1)

    assert result.ok
    assert state["flaky_calls"] == 2


def test_per_request_timeout():
    async def scenario(fetcher, url):
        return await fetcher.fetch_json(url("/slow"), timeout_s=0.2)

    result, _ = with_server(scenario)

    assert result.is_transport_error
    assert result.error == "Timeout"


def test_html_is_not_decoded_as_json():
    async def scenario(fetcher, url):
        return await fetcher.fetch(url("/html"))

    result, _ = with_server(scenario)

    assert result.ok
    assert result.is_html
    assert result.json_data is None


def test_connection_refused_is_transport_error():
    async def main():
        async with HttpFetcher(timeout_s=2) as fetcher:
            return await fetcher.fetch("http://127.0.0.1:1/jobs")

    result = asyncio.run(main())

    assert isinstance(result, FetchResult)
    assert result.is_transport_error


def test_retry_after_parsing():
    fetcher = HttpFetcher(base_delay_ms=100)
    assert fetcher._parse_retry_after("3", 0) == 3000
    assert fetcher._parse_retry_after("", 1) == 200
    assert fetcher._parse_retry_after("Wed, 21 Oct 2015 07:28:00 GMT", 2) == 400
