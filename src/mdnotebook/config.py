"""Configuration loader for mdnb.toml."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore

from .adapters.json_storage import DEFAULT_FILENAME
from .core.store import Defaults

CONFIG_NAME = "mdnb.toml"
DEFAULT_DATA_DIR = Path("./notebooks")


@dataclass
class StoreConfig:
    """Where the notebook collection lives."""
    path: Path


@dataclass
class IdConfig:
    """ID generation configuration."""
    bytes: int = 8


@dataclass
class LogConfig:
    level: str = "WARNING"


@dataclass
class ServeConfig:
    """Local JSON API settings."""
    host: str = "127.0.0.1"
    port: int = 8765


@dataclass
class NotebookConfig:
    """Complete mdnotebook configuration."""
    store: StoreConfig
    id: IdConfig
    defaults: Defaults
    log: LogConfig
    serve: ServeConfig


def load_config(config_path: Path | None = None, data_path: Path | None = None) -> NotebookConfig:
    """
    Load configuration from mdnb.toml.

    Search order:
    1. config_path (if provided)
    2. cwd/mdnb.toml
    3. directory of data_path/mdnb.toml

    Args:
        config_path: Explicit path to config file
        data_path: Data file path for fallback search

    Returns:
        NotebookConfig with resolved settings
    """
    toml_data: dict[str, Any] = {}

    search_paths = []
    if config_path:
        search_paths.append(config_path)
    search_paths.append(Path.cwd() / CONFIG_NAME)
    if data_path:
        search_paths.append(data_path.parent / CONFIG_NAME)

    for path in search_paths:
        if path.exists():
            with open(path, "rb") as f:
                toml_data = tomllib.load(f)
            break

    store_data = toml_data.get("store", {})
    store_config = StoreConfig(
        path=Path(store_data.get("path", data_path or DEFAULT_DATA_DIR / DEFAULT_FILENAME)),
    )

    id_data = toml_data.get("id", {})
    id_config = IdConfig(bytes=id_data.get("bytes", 8))

    base = Defaults()
    defaults_data = toml_data.get("defaults", {})
    defaults = Defaults(
        notebook_title=defaults_data.get("notebook_title", base.notebook_title),
        page_title=defaults_data.get("page_title", base.page_title),
        page_placeholder=defaults_data.get("page_placeholder", base.page_placeholder),
    )

    log_data = toml_data.get("log", {})
    log_config = LogConfig(level=str(log_data.get("level", "WARNING")).upper())

    serve_data = toml_data.get("serve", {})
    serve_config = ServeConfig(
        host=serve_data.get("host", "127.0.0.1"),
        port=serve_data.get("port", 8765),
    )

    return NotebookConfig(
        store=store_config,
        id=id_config,
        defaults=defaults,
        log=log_config,
        serve=serve_config,
    )
