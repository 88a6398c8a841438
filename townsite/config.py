"""Application settings: ``settings.json`` in the data directory, then env vars."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Mapping, Optional

from .core.api import DEFAULT_API_URL

logger = logging.getLogger(__name__)

APP_NAME = "Townsite"

# Environment variable -> AppConfig field
ENV_OVERRIDES = {
    "TOWNSITE_API_URL": "api_url",
    "TOWNSITE_PUBLIC_API_URL": "public_api_url",
    "TOWNSITE_TOKEN": "token",
    "N8N_CREATE_SITE": "n8n_create_url",
    "N8N_UPDATE_SITE": "n8n_update_url",
    "N8N_UPDATE_METHOD": "n8n_update_method",
    "TOWNSITE_LOG_LEVEL": "log_level",
}


def app_data_dir(env: Mapping[str, str] = os.environ) -> Path:
    """Return the platform-specific application data directory."""
    override = env.get("TOWNSITE_DATA_DIR")
    if override:
        target = Path(override)
    else:
        if os.name == "nt":
            base = Path(env.get("LOCALAPPDATA", Path.home()))
        else:
            base = Path.home() / ".local" / "share"
        target = base / APP_NAME
    target.mkdir(parents=True, exist_ok=True)
    return target


@dataclass
class AppConfig:
    api_url: str = DEFAULT_API_URL
    public_api_url: Optional[str] = None
    token: Optional[str] = None
    n8n_create_url: Optional[str] = None
    n8n_update_url: Optional[str] = None
    n8n_update_method: str = "POST"
    log_level: str = "INFO"
    last_settlement_id: Optional[str] = None
    data_dir: Optional[Path] = None

    @property
    def site_api_url(self) -> str:
        """API base URL baked into generated sites."""
        return self.public_api_url or self.api_url

    @property
    def drafts_path(self) -> Path:
        return (self.data_dir or app_data_dir()) / "drafts.json"

    def to_dict(self) -> dict:
        data = asdict(self)
        data.pop("data_dir", None)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "AppConfig":
        known = {f.name for f in fields(cls)} - {"data_dir"}
        return cls(**{k: v for k, v in data.items() if k in known and v not in (None, "")})


def load_config(env: Mapping[str, str] = os.environ, path: Optional[Path] = None) -> AppConfig:
    data_dir = app_data_dir(env)
    settings_path = path or data_dir / "settings.json"
    data: dict = {}
    if settings_path.exists():
        try:
            data = json.loads(settings_path.read_text(encoding="utf-8"))
        except ValueError as exc:
            logger.warning("Ignoring unreadable %s: %s", settings_path, exc)
            data = {}
        if not isinstance(data, dict):
            logger.warning("Ignoring %s: not a JSON object", settings_path)
            data = {}

    config = AppConfig.from_dict(data)
    for var, attr in ENV_OVERRIDES.items():
        value = env.get(var)
        if value:
            setattr(config, attr, value)
    config.n8n_update_method = config.n8n_update_method.upper()
    config.log_level = config.log_level.upper()
    config.data_dir = data_dir
    return config


def save_config(config: AppConfig, path: Optional[Path] = None) -> None:
    settings_path = path or (config.data_dir or app_data_dir()) / "settings.json"
    settings_path.write_text(json.dumps(config.to_dict(), indent=2), encoding="utf-8")
