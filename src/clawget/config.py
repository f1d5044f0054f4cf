from __future__ import annotations

import json
import os
import stat
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from platformdirs import user_config_path

DEFAULT_BASE_URL = "https://www.clawget.io/api"
DEFAULT_TIMEOUT_S = 30.0
DEFAULT_INSTALL_DIR = "./skills"

API_KEY_ENV = "CLAWGET_API_KEY"
BASE_URL_ENV = "CLAWGET_BASE_URL"
CONFIG_PATH_ENV = "CLAWGET_CONFIG_PATH"

API_KEY_HEADER = "x-api-key"
AGENT_ID_HEADER = "x-agent-id"
LICENSE_KEY_HEADER = "x-license-key"


@dataclass(frozen=True)
class Config:
    api_key: str | None = None
    base_url: str | None = None
    # {"search": {"limit": 20, "category": "..."}, "install": {"dir": "..."}}
    defaults: dict[str, dict[str, Any]] = field(default_factory=dict)

    def default(self, section: str, key: str) -> Any:
        values = self.defaults.get(section)
        if not isinstance(values, dict):
            return None
        return values.get(key)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.api_key:
            out["apiKey"] = self.api_key
        if self.base_url:
            out["baseUrl"] = self.base_url
        defaults = {k: dict(v) for k, v in self.defaults.items() if isinstance(v, dict) and v}
        if defaults:
            out["defaults"] = defaults
        return out

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "Config":
        api_key = raw.get("apiKey", raw.get("api_key"))
        base_url = raw.get("baseUrl", raw.get("base_url"))
        defaults_raw = raw.get("defaults")
        defaults: dict[str, dict[str, Any]] = {}
        if isinstance(defaults_raw, dict):
            defaults = {str(k): dict(v) for k, v in defaults_raw.items() if isinstance(v, dict)}
        return cls(
            api_key=api_key if isinstance(api_key, str) and api_key.strip() else None,
            base_url=base_url if isinstance(base_url, str) and base_url.strip() else None,
            defaults=defaults,
        )


def config_path(path_override: str | Path | None = None) -> Path:
    if path_override is not None:
        return Path(path_override).expanduser()
    if env := os.getenv(CONFIG_PATH_ENV):
        return Path(env).expanduser()
    return user_config_path("clawget") / "config.json"


def load_config(path_override: str | Path | None = None) -> Config:
    """Read the config file. Missing, unreadable or corrupt files give an empty Config."""
    path = config_path(path_override)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError):
        return Config()
    if not isinstance(raw, dict):
        return Config()
    return Config.from_dict(raw)


def save_config(cfg: Config, path_override: str | Path | None = None) -> Path:
    path = config_path(path_override)
    path.parent.mkdir(parents=True, exist_ok=True)

    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(json.dumps(cfg.to_dict(), indent=2, sort_keys=True) + "\n", encoding="utf-8")
    tmp.replace(path)

    # Best-effort permissions hardening (the file holds the API key).
    try:
        os.chmod(path, stat.S_IRUSR | stat.S_IWUSR)
    except OSError:
        pass

    return path


def redact_token(token: str | None) -> str | None:
    if not token:
        return token
    if len(token) <= 10:
        return token[:2] + "..." + token[-2:]
    return token[:6] + "..." + token[-4:]
