"""
safedate/config.py
Explicit AI configuration. Persists to safedate_config.json.
The config is passed into collaborators; nothing reads it from
module-level state.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "safedate_config.json"

PROVIDERS = ("ollama", "openai", "openrouter", "anthropic", "gemini", "custom")

DEFAULT_MODELS = {
    "ollama":     "llama3:8b-instruct",
    "openai":     "gpt-4o-mini",
    "openrouter": "openai/gpt-4o-mini",
    "anthropic":  "claude-3-haiku-20240307",
    "gemini":     "gemini-1.5-flash",
    "custom":     "gpt-3.5-turbo",
}

ENV_PREFIX = "SAFEDATE_"


@dataclass
class AIConfig:
    """Recognized options for building a text-generation client."""
    provider:    str            = "ollama"
    api_key:     str            = ""
    model:       str            = ""      # empty → provider default
    endpoint:    Optional[str]  = None    # base URL override (ollama host, custom API)
    timeout_sec: int            = 60
    temperature: float          = 0.7

    @property
    def resolved_model(self) -> str:
        return self.model or DEFAULT_MODELS.get(self.provider, "")

    @property
    def has_api_key(self) -> bool:
        return len(self.api_key or "") > 10

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AIConfig":
        """Accept snake_case or the camelCase keys the desktop app wrote."""
        aliases = {"apiKey": "api_key", "timeoutSec": "timeout_sec"}
        known = {f.name for f in fields(cls)}
        clean: Dict[str, Any] = {}
        for key, value in (data or {}).items():
            key = aliases.get(key, key)
            if key in known and value is not None:
                clean[key] = value
        if "provider" in clean:
            clean["provider"] = str(clean["provider"]).strip().lower()
        return cls(**clean)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _config_path(project_root: Optional[Path] = None) -> Path:
    root = project_root or Path.cwd()
    return root / CONFIG_FILENAME


def load_config(path: Optional[Path] = None) -> AIConfig:
    """
    Load config from a JSON file (default: ./safedate_config.json).
    Returns defaults if the file is missing or unreadable.
    """
    path = path if path is not None else _config_path()
    if path.exists():
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            if isinstance(data, dict):
                return AIConfig.from_dict(data)
            logger.warning(f"Config load failed: expected an object in {path}")
        except (json.JSONDecodeError, OSError, TypeError) as e:
            logger.warning(f"Config load failed: {e}")
    return AIConfig()


def save_config(config: AIConfig, path: Optional[Path] = None) -> Path:
    """Persist config to JSON."""
    path = path if path is not None else _config_path()
    path.write_text(json.dumps(config.to_dict(), indent=2), encoding="utf-8")
    return path


def config_from_env(
    base: Optional[AIConfig] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> AIConfig:
    """
    Overlay SAFEDATE_PROVIDER / _API_KEY / _MODEL / _ENDPOINT on a base config.
    """
    env = os.environ if environ is None else environ
    merged = (base or AIConfig()).to_dict()
    for key in ("provider", "api_key", "model", "endpoint"):
        value = env.get(ENV_PREFIX + key.upper())
        if value:
            merged[key] = value
    return AIConfig.from_dict(merged)
