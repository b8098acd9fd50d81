from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[1] / "configs" / "app.yaml"


class ConfigError(RuntimeError):
    """Raised when configuration cannot be loaded."""


def _resolve_env(value: Any) -> Any:
    if isinstance(value, str) and value.startswith("${") and value.endswith("}"):
        env_key = value[2:-1]
        return os.getenv(env_key, "")
    if isinstance(value, dict):
        return {k: _resolve_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_resolve_env(item) for item in value]
    return value


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise ConfigError(f"Missing configuration file: {path}")
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration root must be a mapping: {path}")
    return _resolve_env(data)


@lru_cache(maxsize=4)
def load_app_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Load the primary application config."""

    path = Path(config_path or os.getenv("CHEMSEARCH_CONFIG") or DEFAULT_CONFIG_PATH)
    return _load_yaml(path)


@dataclass
class PubChemSettings:
    base_url: str = "https://pubchem.ncbi.nlm.nih.gov/rest/pug"
    autocomplete_url: str = "https://pubchem.ncbi.nlm.nih.gov/rest/autocomplete"
    image_url: str = "https://pubchem.ncbi.nlm.nih.gov/image/imagefly.cgi"
    timeout_seconds: float = 20.0
    user_agent: str = "ChemSearch/0.1"

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "PubChemSettings":
        section = config.get("pubchem", {}) or {}
        defaults = cls()
        return cls(
            base_url=str(section.get("base_url", defaults.base_url)).rstrip("/"),
            autocomplete_url=str(
                section.get("autocomplete_url", defaults.autocomplete_url)
            ).rstrip("/"),
            image_url=str(section.get("image_url", defaults.image_url)),
            timeout_seconds=float(section.get("timeout_seconds", defaults.timeout_seconds)),
            user_agent=str(section.get("user_agent", defaults.user_agent)),
        )


@dataclass
class SearchSettings:
    debounce_ms: int = 500
    suggestion_limit: int = 5

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000.0

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "SearchSettings":
        section = config.get("search", {}) or {}
        defaults = cls()
        return cls(
            debounce_ms=int(section.get("debounce_ms", defaults.debounce_ms)),
            suggestion_limit=int(section.get("suggestion_limit", defaults.suggestion_limit)),
        )
