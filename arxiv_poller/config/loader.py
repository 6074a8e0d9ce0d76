"""Configuration loading helpers for arxiv-poller."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path

import yaml

from .models import PollerConfig

CONFIG_EXTENSIONS = (".yaml", ".yml", ".json")
HOME_ENV_VAR = "ARXIV_POLLER_HOME"


def _read_file(path: Path) -> dict:
    text = path.read_text(encoding="utf-8")
    if path.suffix in (".yaml", ".yml"):
        data = yaml.safe_load(text) or {}
    else:
        data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file must contain a mapping: {path}")
    return data


def _write_file(path: Path, payload: dict) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as stream:
        if path.suffix in (".yaml", ".yml"):
            yaml.safe_dump(payload, stream, allow_unicode=True, sort_keys=False)
        else:
            json.dump(payload, stream, indent=2, ensure_ascii=False)


def load_config(path: Path | str) -> PollerConfig:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration not found: {path}")
    if path.suffix not in CONFIG_EXTENSIONS:
        raise ValueError(f"Unsupported configuration format: {path.suffix or path.name}")
    return PollerConfig.model_validate(_read_file(path))


def save_config(path: Path | str, config: PollerConfig) -> Path:
    path = Path(path)
    payload = config.model_dump(mode="json")
    _write_file(path, payload)
    return path


@dataclass(slots=True)
class ConfigLocator:
    """Resolve the directories arxiv-poller writes to."""

    project_root: Path | None = None
    logs_dir: Path | None = None

    def __post_init__(self) -> None:
        env_root = os.environ.get(HOME_ENV_VAR)
        if env_root:
            root = Path(env_root).expanduser().resolve()
        else:
            root = (self.project_root or Path(__file__).resolve().parents[2]).resolve()
        self.project_root = root
        self.logs_dir = (root / "logs").resolve()

    def ensure_directories(self) -> None:
        self.logs_dir.mkdir(parents=True, exist_ok=True)


__all__ = [
    "CONFIG_EXTENSIONS",
    "ConfigLocator",
    "HOME_ENV_VAR",
    "load_config",
    "save_config",
]
