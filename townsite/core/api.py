"""Client for the settlements REST backend."""

from __future__ import annotations

import logging
import urllib.parse
from datetime import datetime, timezone
from typing import Any, List, Optional

import requests

from .errors import ApiError, ValidationError
from .models import BlogPost, Settlement, sort_posts

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.bachelordegree.tech/api/v1"


def parse_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value:
        raise ValueError(f"Not a timestamp: {value!r}")
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _record_id(data: dict) -> str:
    value = data.get("_id", data.get("id"))
    if value is None or value == "":
        raise ValueError("record has no id")
    return str(value)


def parse_settlement(data: dict) -> Settlement:
    """Build a Settlement from a backend record, rejecting bad coordinates."""
    try:
        settlement = Settlement(
            id=_record_id(data),
            name=str(data["name"]),
            region=str(data.get("judet", data.get("region", ""))),
            lat=float(data["lat"]),
            lng=float(data["lng"]),
            active=bool(data.get("active", False)),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise ValidationError(f"Invalid settlement record: {exc}") from exc
    settlement.validate()
    return settlement


def parse_blog_post(data: dict) -> BlogPost:
    owner = data.get("settlement", "")
    if isinstance(owner, dict):
        owner = owner.get("_id", owner.get("id", ""))
    try:
        return BlogPost(
            id=_record_id(data),
            title=str(data.get("title", "")),
            description=str(data.get("description", "")),
            content=str(data.get("content", "")),
            settlement=str(owner),
            date=parse_datetime(data.get("date")),
        )
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Invalid blog post record: {exc}") from exc


class ApiClient:
    """Reads settlements and their blog posts.

    Every response is wrapped as ``{"status": ..., "data": {"data": ...}}``.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout

    def _request(self, path: str, params: Optional[dict] = None) -> Any:
        url = f"{self.base_url}/{path.lstrip('/')}"
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        logger.debug("GET %s %s", url, params or "")
        try:
            response = requests.get(url, params=params, headers=headers, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.error("GET %s failed: %s", url, exc)
            raise ApiError(f"Could not reach the server: {exc}") from exc

        if response.status_code >= 400:
            logger.error("GET %s failed with HTTP %s", url, response.status_code)
            raise ApiError(
                f"Request failed with HTTP {response.status_code}",
                response.text,
                response.status_code,
            )

        # A body that is not valid UTF-8 JSON lands here as a ValueError.
        try:
            payload = response.json()
            return payload["data"]["data"]
        except (ValueError, KeyError, TypeError) as exc:
            raise ApiError("Unexpected response from the server", response.text) from exc

    def get_settlement(self, settlement_id: str) -> Settlement:
        data = self._request(f"settlements/{urllib.parse.quote(settlement_id, safe='')}")
        if not isinstance(data, dict):
            raise ApiError("Settlement response is not an object")
        return parse_settlement(data)

    def get_blog_posts(self, settlement_id: str) -> List[BlogPost]:
        data = self._request("blog-posts", {"settlement": settlement_id})
        if not isinstance(data, list):
            raise ApiError("Blog post response is not a list")
        posts = [parse_blog_post(item) for item in data if isinstance(item, dict)]
        logger.info("Fetched %d blog posts for %s", len(posts), settlement_id)
        return sort_posts(posts)
