"""Publishing generated sites through the n8n webhooks."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Literal, Optional, Protocol, Sequence

import requests

from .errors import PublishError, ValidationError
from .generator import GeneratorOptions, SiteBundle, generate_site
from .models import BlogPost, Settlement, WebsiteComponent

logger = logging.getLogger(__name__)

# The deployment workflow has been seen answering with this misspelling.
SUCCESS_TOKENS = frozenset({"success", "suuccess"})
WEBHOOK_TIMEOUT = 60


class PublishClient(Protocol):
    def create_site(self, payload: dict) -> str:
        ...

    def update_site(self, payload: dict) -> str:
        ...


class N8nWebhookClient:
    def __init__(
        self,
        create_url: Optional[str],
        update_url: Optional[str],
        update_method: str = "POST",
        timeout: float = WEBHOOK_TIMEOUT,
    ) -> None:
        self.create_url = create_url
        self.update_url = update_url
        self.update_method = update_method.upper()
        self.timeout = timeout

    def create_site(self, payload: dict) -> str:
        return self._send(self.create_url, "POST", payload, "N8N_CREATE_SITE")

    def update_site(self, payload: dict) -> str:
        return self._send(self.update_url, self.update_method, payload, "N8N_UPDATE_SITE")

    def _send(self, url: Optional[str], method: str, payload: dict, setting: str) -> str:
        if not url:
            raise PublishError(f"{setting} URL not configured")
        try:
            response = requests.request(method, url, json=payload, timeout=self.timeout)
        except requests.RequestException as exc:
            raise PublishError(f"Could not reach the webhook: {exc}") from exc
        if response.status_code >= 400:
            raise PublishError(f"Webhook answered with HTTP {response.status_code}", response.text)
        return response.text


def _status_of(value: Any) -> Any:
    if isinstance(value, dict):
        return value.get("status")
    if isinstance(value, list) and len(value) == 1 and isinstance(value[0], dict):
        return value[0].get("status")
    return value


def is_success(body: str) -> bool:
    """True when the webhook body confirms the deployment.

    Accepted: the bare token, a JSON string, ``{"status": token}`` or a
    one-element list holding such an object.
    """
    text = body.strip()
    if text in SUCCESS_TOKENS:
        return True
    try:
        parsed = json.loads(text)
    except ValueError:
        return False
    status = _status_of(parsed)
    return isinstance(status, str) and status in SUCCESS_TOKENS


@dataclass(frozen=True)
class PublishResult:
    action: Literal["create", "update"]
    response: str


def build_payload(settlement: Settlement, bundle: SiteBundle) -> dict:
    return {"name": settlement.site_name, "files-content": bundle.files()}


class Publisher:
    def __init__(self, client: PublishClient, options: GeneratorOptions = GeneratorOptions()) -> None:
        self.client = client
        self.options = options

    def publish(
        self,
        settlement: Settlement,
        components: Sequence[WebsiteComponent],
        posts: Sequence[BlogPost] = (),
        custom_css: str = "",
    ) -> PublishResult:
        """Ship the site and mark the settlement active after a first deploy.

        ``settlement.active`` only changes after the webhook confirms a create.
        """
        if not components:
            raise ValidationError("Adaugă cel puțin o componentă înainte de salvare.")

        bundle = generate_site(settlement, components, posts, custom_css, self.options)
        payload = build_payload(settlement, bundle)
        action: Literal["create", "update"] = "update" if settlement.active else "create"
        logger.info(
            "Publishing %s (%s, %d files)", payload["name"], action, len(payload["files-content"])
        )

        try:
            if action == "create":
                body = self.client.create_site(payload)
            else:
                body = self.client.update_site(payload)
        except PublishError:
            logger.exception("Publishing %s failed", payload["name"])
            raise

        if not is_success(body):
            logger.error("Webhook did not confirm %s for %s: %s", action, payload["name"], body)
            raise PublishError("N8N did not return success status", body)

        if action == "create":
            settlement.active = True
        logger.info("Published %s (%s)", payload["name"], action)
        return PublishResult(action=action, response=body)
