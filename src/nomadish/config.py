"""Configuration loading from environment variables and nomadish.toml."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib
from pathlib import Path

from nomadish.memory.store import DEFAULT_FILENAME

_DEFAULT_DATA_DIR = Path.home() / ".nomadish"
_CONFIG_FILENAME = "nomadish.toml"


@dataclass
class RemoteConfig:
    """Memory server connection."""

    base_url: str = "http://127.0.0.1:8000"
    timeout: float = 30


@dataclass
class CacheConfig:
    """Where the local cache blob lives."""

    data_dir: Path = _DEFAULT_DATA_DIR
    filename: str = DEFAULT_FILENAME

    @property
    def path(self) -> Path:
        return self.data_dir / self.filename


@dataclass
class NomadishConfig:
    """Top-level Nomadish configuration."""

    remote: RemoteConfig = field(default_factory=RemoteConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    log_level: str = "INFO"


def load_config(config_path: Path | None = None) -> NomadishConfig:
    """Load configuration from environment variables and optional nomadish.toml.

    Priority: environment variables > nomadish.toml > defaults.
    """
    file_data: dict = {}
    if config_path and config_path.exists():
        file_data = tomllib.loads(config_path.read_text())
    else:
        # Search current dir and ~/.nomadish/
        for candidate in [Path.cwd() / _CONFIG_FILENAME, _DEFAULT_DATA_DIR / _CONFIG_FILENAME]:
            if candidate.exists():
                file_data = tomllib.loads(candidate.read_text())
                break

    remote_data = file_data.get("remote", {})
    cache_data = file_data.get("cache", {})

    data_dir = os.getenv("NOMADISH_DATA_DIR", cache_data.get("data_dir"))

    config = NomadishConfig(
        remote=RemoteConfig(
            base_url=os.getenv(
                "NOMADISH_BASE_URL", remote_data.get("base_url", "http://127.0.0.1:8000")
            ),
            timeout=float(os.getenv("NOMADISH_TIMEOUT", remote_data.get("timeout", 30))),
        ),
        cache=CacheConfig(
            data_dir=Path(data_dir).expanduser() if data_dir else _DEFAULT_DATA_DIR,
            filename=cache_data.get("filename", DEFAULT_FILENAME),
        ),
        log_level=os.getenv("NOMADISH_LOG_LEVEL", file_data.get("log_level", "INFO")),
    )
    return config
