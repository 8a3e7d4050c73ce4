"""Tests for the command-line entry point."""

from __future__ import annotations

from pathlib import Path

import pytest

from nomadish.__main__ import main
from nomadish.memory.models import Coordinate, FoodMemory
from nomadish.memory.store import MemoryCache


@pytest.fixture
def data_dir(tmp_path: Path, monkeypatch) -> Path:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("NOMADISH_DATA_DIR", str(tmp_path / "data"))
    # Nothing listens on port 9; every remote call fails fast.
    monkeypatch.setenv("NOMADISH_BASE_URL", "http://127.0.0.1:9")
    monkeypatch.setenv("NOMADISH_TIMEOUT", "2")
    monkeypatch.setenv("NOMADISH_LOG_LEVEL", "WARNING")
    return tmp_path / "data"


def _run(argv: list[str]) -> int:
    with pytest.raises(SystemExit) as exc:
        main(argv)
    return exc.value.code


class TestMain:
    def test_no_command(self, data_dir: Path):
        assert _run([]) == 1

    def test_list_empty(self, data_dir: Path, capsys):
        assert _run(["list"]) == 0
        assert "no memories yet" in capsys.readouterr().out

    def test_list_cached(self, data_dir: Path, capsys):
        MemoryCache(data_dir / "foodmemories.json").save(
            [FoodMemory(name="Ramen", coordinate=Coordinate(35.0, 139.0), rating=4)]
        )
        assert _run(["list"]) == 0
        out = capsys.readouterr().out
        assert "Ramen" in out
        assert "★★★★" in out

    def test_add_offline_saves_locally(self, data_dir: Path, capsys):
        assert _run(["add", "Tacos", "--lat", "19.43", "--lon", "-99.13", "--rating", "5"]) == 0
        assert "not synced" in capsys.readouterr().out

        cached = MemoryCache(data_dir / "foodmemories.json").load()
        assert [m.name for m in cached] == ["Tacos"]
        assert cached[0].is_pending

    def test_refresh_offline_fails(self, data_dir: Path):
        assert _run(["refresh"]) == 1

    def test_remove_unknown_id(self, data_dir: Path, capsys):
        assert _run(["remove", "nope"]) == 1
        assert "No memory with id" in capsys.readouterr().err

    def test_invalid_rating(self, data_dir: Path, capsys):
        assert _run(["add", "Tacos", "--lat", "0", "--lon", "0", "--rating", "9"]) == 1
        assert "rating" in capsys.readouterr().err

    def test_reset(self, data_dir: Path, capsys):
        cache = MemoryCache(data_dir / "foodmemories.json")
        cache.save([FoodMemory(name="Ramen", coordinate=Coordinate(35.0, 139.0))])
        assert _run(["reset"]) == 0
        assert not cache.path.exists()
        assert _run(["list"]) == 0
        assert "no memories yet" in capsys.readouterr().out
