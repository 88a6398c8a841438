from __future__ import annotations

import sys
from pathlib import Path

import pytest
import requests

sys.path.append(str(Path(__file__).resolve().parents[1]))

from townsite.core import publish
from townsite.core.errors import PublishError, ValidationError
from townsite.core.generator import GeneratorOptions
from townsite.core.models import BlogContent, FooterContent, HeaderContent, Settlement, WebsiteComponent
from townsite.core.publish import N8nWebhookClient, Publisher, is_success


class FakeClient:
    def __init__(self, response: str = "success") -> None:
        self.response = response
        self.calls: list[tuple[str, dict]] = []

    def create_site(self, payload: dict) -> str:
        self.calls.append(("create", payload))
        return self.response

    def update_site(self, payload: dict) -> str:
        self.calls.append(("update", payload))
        return self.response


def _settlement(active: bool = False) -> Settlement:
    return Settlement(id="s1", name="Sibiu", region="sb", lat=45.79, lng=24.12, active=active)


def _components(with_blog: bool = False) -> list[WebsiteComponent]:
    items = [WebsiteComponent(id="hd", type="header", content=HeaderContent(), position=0)]
    if with_blog:
        items.append(WebsiteComponent(id="bl", type="blog", content=BlogContent(), position=1))
    items.append(WebsiteComponent(id="ft", type="footer", content=FooterContent(), position=len(items)))
    return items


def _publisher(client: FakeClient) -> Publisher:
    return Publisher(client, GeneratorOptions(api_url="https://api.example.test", year=2024))


def test_inactive_settlement_creates_and_becomes_active() -> None:
    client = FakeClient()
    settlement = _settlement(active=False)
    result = _publisher(client).publish(settlement, _components())
    assert result.action == "create"
    assert [c[0] for c in client.calls] == ["create"]
    assert settlement.active


def test_active_settlement_updates() -> None:
    client = FakeClient()
    settlement = _settlement(active=True)
    result = _publisher(client).publish(settlement, _components())
    assert result.action == "update"
    assert [c[0] for c in client.calls] == ["update"]
    assert settlement.active


def test_payload_names_site_and_ships_files() -> None:
    client = FakeClient()
    _publisher(client).publish(_settlement(), _components(with_blog=True), [], "p {}")
    payload = client.calls[0][1]
    assert payload["name"] == "Sibiu-SB"
    assert set(payload["files-content"]) == {"index.html", "styles.css", "script.js", "blog.html", "post.html"}
    assert payload["files-content"]["styles.css"].endswith("p {}")


def test_misspelled_success_is_accepted() -> None:
    settlement = _settlement()
    _publisher(FakeClient("suuccess")).publish(settlement, _components())
    assert settlement.active


def test_failure_leaves_active_untouched() -> None:
    settlement = _settlement()
    with pytest.raises(PublishError) as excinfo:
        _publisher(FakeClient('{"status": "error"}')).publish(settlement, _components())
    assert not settlement.active
    assert excinfo.value.details == '{"status": "error"}'


def test_empty_component_list_is_rejected_before_dispatch() -> None:
    client = FakeClient()
    with pytest.raises(ValidationError):
        _publisher(client).publish(_settlement(), [])
    assert client.calls == []


@pytest.mark.parametrize(
    "body",
    ["success", "suuccess", '"success"', '{"status": "success"}', '[{"status": "suuccess"}]', " success\n"],
)
def test_success_shapes(body: str) -> None:
    assert is_success(body)


@pytest.mark.parametrize(
    "body",
    ["", "error", '{"status": "fail"}', '[{"status": "success"}, {"status": "success"}]', "{broken", "{}"],
)
def test_failure_shapes(body: str) -> None:
    assert not is_success(body)


def test_webhook_client_requires_urls() -> None:
    with pytest.raises(PublishError):
        N8nWebhookClient(None, None).create_site({"name": "x"})


def _response(body: bytes, status: int = 200) -> requests.Response:
    response = requests.Response()
    response.status_code = status
    response._content = body
    response.encoding = "utf-8"
    return response


def test_webhook_client_sends_json(monkeypatch) -> None:
    seen = {}

    def fake_request(method, url, json=None, timeout=None):
        seen.update(method=method, url=url, body=json, timeout=timeout)
        return _response(b'{"status": "success"}')

    monkeypatch.setattr(publish.requests, "request", fake_request)
    client = N8nWebhookClient("https://hooks.test/create", "https://hooks.test/update", "put")
    body = client.update_site({"name": "Sibiu-SB"})
    assert is_success(body)
    assert seen == {
        "method": "PUT",
        "url": "https://hooks.test/update",
        "body": {"name": "Sibiu-SB"},
        "timeout": publish.WEBHOOK_TIMEOUT,
    }


def test_webhook_http_error_becomes_publish_error(monkeypatch) -> None:
    monkeypatch.setattr(publish.requests, "request", lambda method, url, **kwargs: _response(b"bad gateway", 502))
    with pytest.raises(PublishError) as excinfo:
        N8nWebhookClient("https://hooks.test/create", None).create_site({})
    assert excinfo.value.details == "bad gateway"


def test_dropped_connection_becomes_publish_error(monkeypatch) -> None:
    def fake_request(method, url, **kwargs):
        raise requests.ConnectionError("Remote end closed connection without response")

    monkeypatch.setattr(publish.requests, "request", fake_request)
    settlement = _settlement()
    publisher = Publisher(
        N8nWebhookClient("https://hooks.test/create", None),
        GeneratorOptions(api_url="https://api.example.test", year=2024),
    )
    with pytest.raises(PublishError):
        publisher.publish(settlement, _components())
    assert not settlement.active


def test_undecodable_webhook_body_is_a_failed_publish(monkeypatch) -> None:
    monkeypatch.setattr(publish.requests, "request", lambda method, url, **kwargs: _response(b"\xff\xfe"))
    settlement = _settlement()
    publisher = Publisher(
        N8nWebhookClient("https://hooks.test/create", None),
        GeneratorOptions(api_url="https://api.example.test", year=2024),
    )
    with pytest.raises(PublishError):
        publisher.publish(settlement, _components())
    assert not settlement.active
