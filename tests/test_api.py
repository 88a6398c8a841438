from __future__ import annotations

import json
import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest
import requests

sys.path.append(str(Path(__file__).resolve().parents[1]))

from townsite.core import api
from townsite.core.api import ApiClient, parse_blog_post, parse_settlement
from townsite.core.errors import ApiError, ValidationError


def _response(body: bytes, status: int = 200) -> requests.Response:
    response = requests.Response()
    response.status_code = status
    response._content = body
    response.encoding = "utf-8"
    return response


def _envelope(data) -> bytes:
    return json.dumps({"status": "success", "data": {"data": data}}).encode("utf-8")


def test_parse_settlement_accepts_backend_keys() -> None:
    settlement = parse_settlement(
        {"_id": "abc", "name": "Cluj", "judet": "Cluj", "lat": 46.77, "lng": 23.6, "active": True}
    )
    assert settlement.id == "abc"
    assert settlement.region == "Cluj"
    assert settlement.active
    assert settlement.site_name == "Cluj-CLUJ"


def test_parse_settlement_rejects_bad_coordinates() -> None:
    with pytest.raises(ValidationError):
        parse_settlement({"id": "x", "name": "X", "region": "Y", "lat": 91, "lng": 0})
    with pytest.raises(ValidationError):
        parse_settlement({"id": "x", "name": "X", "region": "Y", "lat": 0, "lng": -181})


def test_parse_blog_post_handles_z_dates_and_populated_settlement() -> None:
    post = parse_blog_post(
        {
            "_id": "p1",
            "title": "Titlu",
            "description": "D",
            "content": "<p>C</p>",
            "settlement": {"_id": "s1", "name": "Cluj"},
            "date": "2024-02-03T08:30:00.000Z",
        }
    )
    assert post.id == "p1"
    assert post.settlement == "s1"
    assert post.date == datetime(2024, 2, 3, 8, 30, tzinfo=timezone.utc)


def test_get_settlement_sends_bearer_token(monkeypatch) -> None:
    seen = {}

    def fake_get(url, params=None, headers=None, timeout=None):
        seen["url"] = url
        seen["auth"] = headers.get("Authorization")
        return _response(_envelope({"_id": "s1", "name": "Cluj", "judet": "CJ", "lat": 46.7, "lng": 23.5}))

    monkeypatch.setattr(api.requests, "get", fake_get)
    settlement = ApiClient("https://api.test/v1/", "tok").get_settlement("s1")
    assert settlement.name == "Cluj"
    assert seen == {"url": "https://api.test/v1/settlements/s1", "auth": "Bearer tok"}


def test_get_blog_posts_sorted_newest_first(monkeypatch) -> None:
    posts = [
        {"_id": "old", "title": "A", "description": "", "content": "", "settlement": "s1", "date": "2024-01-01T00:00:00Z"},
        {"_id": "new", "title": "B", "description": "", "content": "", "settlement": "s1", "date": "2024-06-01T00:00:00Z"},
    ]
    seen = {}

    def fake_get(url, params=None, headers=None, timeout=None):
        seen["url"] = url
        seen["params"] = params
        seen["timeout"] = timeout
        return _response(_envelope(posts))

    monkeypatch.setattr(api.requests, "get", fake_get)
    result = ApiClient("https://api.test/v1", timeout=5).get_blog_posts("s1")
    assert [p.id for p in result] == ["new", "old"]
    assert seen == {"url": "https://api.test/v1/blog-posts", "params": {"settlement": "s1"}, "timeout": 5}


def test_http_error_raises_api_error(monkeypatch) -> None:
    monkeypatch.setattr(api.requests, "get", lambda url, **kwargs: _response(b"missing", 404))
    with pytest.raises(ApiError) as excinfo:
        ApiClient("https://api.test/v1").get_settlement("nope")
    assert excinfo.value.status == 404
    assert excinfo.value.details == "missing"


@pytest.mark.parametrize(
    "error",
    [
        requests.ConnectionError("Remote end closed connection without response"),
        requests.Timeout("read timed out"),
    ],
)
def test_transport_failure_raises_api_error(monkeypatch, error) -> None:
    def fake_get(url, **kwargs):
        raise error

    monkeypatch.setattr(api.requests, "get", fake_get)
    with pytest.raises(ApiError):
        ApiClient("https://api.test/v1").get_blog_posts("s1")


def test_malformed_envelope_raises_api_error(monkeypatch) -> None:
    monkeypatch.setattr(api.requests, "get", lambda url, **kwargs: _response(b"<html>"))
    with pytest.raises(ApiError):
        ApiClient("https://api.test/v1").get_settlement("s1")


def test_undecodable_body_raises_api_error(monkeypatch) -> None:
    monkeypatch.setattr(api.requests, "get", lambda url, **kwargs: _response(b"\xff\xfe"))
    with pytest.raises(ApiError):
        ApiClient("https://api.test/v1").get_settlement("s1")
