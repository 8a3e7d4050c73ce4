"""Tests for configuration loading."""

import pytest
from pathlib import Path

from nomadish.config import load_config

_ENV_KEYS = ["NOMADISH_BASE_URL", "NOMADISH_TIMEOUT", "NOMADISH_DATA_DIR", "NOMADISH_LOG_LEVEL"]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


class TestConfig:
    def test_defaults(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        config = load_config(tmp_path / "missing.toml")
        assert config.remote.base_url == "http://127.0.0.1:8000"
        assert config.remote.timeout == 30
        assert config.cache.path.name == "foodmemories.json"
        assert config.log_level == "INFO"

    def test_env_override(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("NOMADISH_BASE_URL", "http://192.168.1.10:8000")
        monkeypatch.setenv("NOMADISH_TIMEOUT", "5")
        monkeypatch.setenv("NOMADISH_DATA_DIR", str(tmp_path / "data"))

        config = load_config(tmp_path / "missing.toml")
        assert config.remote.base_url == "http://192.168.1.10:8000"
        assert config.remote.timeout == 5.0
        assert config.cache.path == tmp_path / "data" / "foodmemories.json"

    def test_toml_file(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        toml_path = tmp_path / "nomadish.toml"
        toml_path.write_text(f"""
log_level = "DEBUG"

[remote]
base_url = "https://api.example.com"
timeout = 12

[cache]
data_dir = "{tmp_path.as_posix()}/cache"
filename = "memories.json"
""")
        config = load_config(toml_path)
        assert config.remote.base_url == "https://api.example.com"
        assert config.remote.timeout == 12
        assert config.cache.path == tmp_path / "cache" / "memories.json"
        assert config.log_level == "DEBUG"

    def test_toml_in_cwd_is_discovered(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "nomadish.toml").write_text('[remote]\nbase_url = "http://found"\n')
        config = load_config()
        assert config.remote.base_url == "http://found"

    def test_env_overrides_toml(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("NOMADISH_BASE_URL", "http://from-env")

        toml_path = tmp_path / "nomadish.toml"
        toml_path.write_text("""
[remote]
base_url = "http://from-file"
""")
        config = load_config(toml_path)
        assert config.remote.base_url == "http://from-env"  # env wins
