from __future__ import annotations

import base64

import httpx
import pytest

from artifact_worker.core.exceptions import HttpStatusError, TransportError
from artifact_worker.resources import ResourceFetcher, encode_cache_key

EXTERNAL_URL = "https://x.test/a b"


def _ok(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, content=b"payload-bytes", headers={"X-Cache-Id": "c-1"})


def test_cache_key_is_unpadded_urlsafe_base64():
    key = encode_cache_key(EXTERNAL_URL)

    assert "=" not in key
    assert "+" not in key and "/" not in key
    assert base64.urlsafe_b64decode(key + "=" * (-len(key) % 4)).decode() == EXTERNAL_URL


def test_external_url_goes_through_cache_when_enabled(make_env, serve):
    transport, client = serve(_ok)
    fetcher = ResourceFetcher(make_env(cache_url="http://cache"), client)

    body = fetcher.fetch(EXTERNAL_URL, lambda reader: reader.read())

    assert body == b"payload-bytes"
    expected = "http://cache/" + base64.urlsafe_b64encode(EXTERNAL_URL.encode()).decode().rstrip("=")
    assert [str(request.url) for request in transport.requests] == [expected]


def test_external_url_is_fetched_directly_when_caching_disabled(make_env, serve):
    transport, client = serve(_ok)
    fetcher = ResourceFetcher(make_env(no_caching=True, cache_url="http://cache"), client)

    fetcher.fetch(EXTERNAL_URL, lambda reader: reader.read())

    assert [request.url for request in transport.requests] == [httpx.URL(EXTERNAL_URL)]


def test_external_url_is_fetched_directly_without_cache_endpoint(make_env, serve):
    transport, client = serve(_ok)
    fetcher = ResourceFetcher(make_env(), client)

    assert fetcher.resolve_url("https://example.test/img.png") == "https://example.test/img.png"


def test_artifact_reference_is_fetched_from_storage(make_env, serve):
    transport, client = serve(_ok)
    fetcher = ResourceFetcher(make_env(cache_url="http://cache"), client)

    fetcher.fetch("urn:ivcap:artifact:123", lambda reader: reader.read())

    assert transport.requests[0].url.host == "storage.test"
    assert transport.requests[0].url.path == "/urn:ivcap:artifact:123"


def test_non_200_raises_status_error(make_env, serve):
    _, client = serve(lambda request: httpx.Response(404))
    fetcher = ResourceFetcher(make_env(), client)
    consumed: list[bytes] = []

    with pytest.raises(HttpStatusError) as excinfo:
        fetcher.fetch("urn:missing", consumed.append)

    assert excinfo.value.status_code == 404
    assert consumed == []


def test_other_success_statuses_are_rejected(make_env, serve):
    _, client = serve(lambda request: httpx.Response(204))
    fetcher = ResourceFetcher(make_env(), client)

    with pytest.raises(HttpStatusError):
        fetcher.fetch("urn:empty", lambda reader: reader.read())


def test_transport_failure_is_wrapped(make_env, serve, logger):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("dns failure", request=request)

    _, client = serve(handler)
    fetcher = ResourceFetcher(make_env(), client)

    with pytest.raises(TransportError) as excinfo:
        fetcher.fetch("urn:any", lambda reader: reader.read())

    assert isinstance(excinfo.value.cause, httpx.ConnectError)
    assert logger.levels("error")


def test_consumer_error_propagates_and_reader_is_closed(make_env, serve):
    _, client = serve(_ok)
    fetcher = ResourceFetcher(make_env(), client)
    seen = []

    def consumer(reader):
        seen.append(reader)
        reader.read(3)
        raise ValueError("cannot decode image")

    with pytest.raises(ValueError, match="cannot decode image"):
        fetcher.fetch("urn:img", consumer)

    assert seen[0].closed


def test_consumer_result_is_returned(make_env, serve):
    _, client = serve(_ok)
    fetcher = ResourceFetcher(make_env(), client)

    assert fetcher.fetch("urn:img", lambda reader: len(reader.read())) == len(b"payload-bytes")
