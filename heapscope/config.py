"""Configuration loading, validation, and defaults."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml

from .types import SORT_ORDERS, HeapscopeConfig, RenderConfig, ServerConfig

CONFIG_FILENAMES = [
    "heapscope.yaml",
    "heapscope.yml",
    "heapscope.json",
]

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _discover_config() -> Path | None:
    """Search CWD then parent dirs up to home for a config file."""
    cwd = Path.cwd()
    home = Path.home()
    search = cwd
    while True:
        for name in CONFIG_FILENAMES:
            candidate = search / name
            if candidate.is_file():
                return candidate
        if search == home or search == search.parent:
            break
        search = search.parent
    return None


def _build_config(raw: dict[str, Any]) -> HeapscopeConfig:
    """Build a HeapscopeConfig from a raw dict."""
    server_raw = raw.get("server", {})
    timeout = server_raw.get("timeout")
    server = ServerConfig(
        base_url=server_raw.get("base_url", "http://127.0.0.1:7070"),
        query_path=server_raw.get("query_path", "query"),
        init_path=server_raw.get("init_path", "init"),
        classes_path=server_raw.get("classes_path", "classes"),
        timeout=float(timeout) if timeout is not None else None,
    )

    render_raw = raw.get("render", {})
    render = RenderConfig(
        tab_title=render_raw.get("tab_title", "Histogram"),
        sort_by=render_raw.get("sort_by", "label"),
        expand_depth=int(render_raw.get("expand_depth", 0)),
    )

    return HeapscopeConfig(
        version=str(raw.get("version", "0.1")),
        init_query=raw.get("init_query", "histo(x) from Object x"),
        log_level=str(raw.get("log_level", "WARNING")).upper(),
        server=server,
        render=render,
    )


def validate_config(config: HeapscopeConfig) -> list[str]:
    """Validate a config. Returns list of error strings (empty = valid)."""
    errors: list[str] = []

    if not config.server.base_url.startswith(("http://", "https://")):
        errors.append(f"server.base_url must be an http(s) URL, got '{config.server.base_url}'")

    if config.server.timeout is not None and config.server.timeout <= 0:
        errors.append(f"server.timeout must be > 0 or null, got {config.server.timeout}")

    for name in ("query_path", "init_path", "classes_path"):
        if not getattr(config.server, name):
            errors.append(f"server.{name} must not be empty")

    if config.render.sort_by not in SORT_ORDERS:
        errors.append(
            f"render.sort_by must be one of {', '.join(SORT_ORDERS)}, "
            f"got '{config.render.sort_by}'"
        )

    if config.render.expand_depth < 0:
        errors.append("render.expand_depth must be >= 0")

    if not config.init_query.strip():
        errors.append("init_query must not be empty")

    if config.log_level not in LOG_LEVELS:
        errors.append(f"log_level must be one of {', '.join(LOG_LEVELS)}")

    return errors


def configure_logging(config: HeapscopeConfig, verbose: bool = False) -> None:
    """Point the root logger at stderr at the configured level."""
    level = logging.DEBUG if verbose else getattr(logging, config.log_level, logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def load_config(
    config_path: str | Path | None = None,
    config_dict: dict | None = None,
) -> HeapscopeConfig:
    """Load config from dict, explicit path, or auto-discover."""
    if config_dict is not None:
        return _build_config(config_dict)

    if config_path is not None:
        path = Path(config_path)
    else:
        path = _discover_config()

    if path is None:
        # Return defaults
        return _build_config({})

    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    text = path.read_text()
    if path.suffix == ".json":
        raw = json.loads(text)
    else:
        raw = yaml.safe_load(text) or {}

    return _build_config(raw)
