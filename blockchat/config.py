from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent
DEFAULT_CONFIG_PATH = BASE_DIR / "config.yaml"

logger = logging.getLogger(__name__)


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _env_overrides() -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    log_path = os.getenv("BLOCKCHAT_LOG_PATH")
    if log_path:
        overrides.setdefault("paths", {})["log_file"] = log_path

    server_dir = os.getenv("BLOCKCHAT_SERVER_DIR")
    if server_dir:
        overrides.setdefault("server", {})["dir"] = server_dir

    ops = os.getenv("BLOCKCHAT_OPS", "").strip()
    if ops:
        names = [token.strip() for token in ops.split(",") if token.strip()]
        if names:
            overrides.setdefault("roles", {})["ops"] = names

    return overrides


def resolve_path(path_value: str, *, base_dir: Optional[Path] = None) -> Path:
    candidate = Path(path_value)
    if not candidate.is_absolute():
        candidate = (base_dir or BASE_DIR) / candidate
    return candidate.resolve()


@lru_cache(maxsize=1)
def load_config() -> Dict[str, Any]:
    load_dotenv(dotenv_path=BASE_DIR / ".env")

    config_path = os.getenv("BLOCKCHAT_CONFIG")
    path = resolve_path(config_path, base_dir=Path.cwd()) if config_path else DEFAULT_CONFIG_PATH

    data: Dict[str, Any] = {}
    if path.exists():
        try:
            loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:
            logger.error("Ignoring unreadable config %s: %s", path, exc)
            loaded = None
        if isinstance(loaded, dict):
            data = loaded

    return _deep_merge(data, _env_overrides())


def reload_config() -> Dict[str, Any]:
    load_config.cache_clear()
    return load_config()


def _section(cfg: Dict[str, Any], name: str) -> Dict[str, Any]:
    value = cfg.get(name, {})
    return value if isinstance(value, dict) else {}


def get_log_path(config: Optional[Dict[str, Any]] = None) -> Path:
    cfg = config or load_config()
    log_path = str(_section(cfg, "paths").get("log_file", "logs/blockchat.log"))
    return resolve_path(log_path)


def get_server_dir(config: Optional[Dict[str, Any]] = None) -> Path:
    cfg = config or load_config()
    return resolve_path(str(_section(cfg, "server").get("dir", ".")), base_dir=Path.cwd())


def get_properties_path(config: Optional[Dict[str, Any]] = None) -> Path:
    return get_server_dir(config) / "server.properties"


def get_ops_path(config: Optional[Dict[str, Any]] = None) -> Path:
    return get_server_dir(config) / "ops.txt"


def get_role_names(role: str, config: Optional[Dict[str, Any]] = None) -> List[str]:
    cfg = config or load_config()
    names = _section(cfg, "roles").get(role, [])
    if not isinstance(names, list):
        return []
    return [str(n).strip() for n in names if str(n).strip()]
