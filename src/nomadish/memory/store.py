"""Local cache — the whole memory list as one JSON array on disk.

The file is the durable copy of the coordinator's in-memory list. It is
always rewritten in full (temp file + rename), never patched, so a reader
sees either the previous blob or the new one.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Iterable
from pathlib import Path

from nomadish.errors import DecodeError, PersistenceError
from nomadish.memory.codec import decode, encode
from nomadish.memory.models import FoodMemory

logger = logging.getLogger(__name__)

DEFAULT_FILENAME = "foodmemories.json"


class MemoryCache:
    """Read/write access to the durable memory blob."""

    def __init__(self, path: Path) -> None:
        self.path = path

    # ── Load ──────────────────────────────────────────────────

    def load(self) -> list[FoodMemory]:
        """Return every decodable record. Never raises.

        A record that fails to decode, or repeats an earlier id, is skipped
        and logged; the others are kept.
        """
        if not self.path.exists():
            logger.info("No cache file at %s, starting fresh", self.path)
            return []

        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning("Failed to read cache %s: %s", self.path, e)
            return []

        if not isinstance(raw, list):
            logger.warning("Cache %s is not a JSON array (got %s)", self.path, type(raw).__name__)
            return []

        memories: list[FoodMemory] = []
        seen: set[str] = set()
        for index, item in enumerate(raw):
            try:
                memory = decode(item)
            except DecodeError as e:
                logger.warning("Skipping cached record #%d: %s", index, e)
                continue
            if memory.id in seen:
                logger.warning("Skipping cached record #%d: duplicate id %s", index, memory.id)
                continue
            seen.add(memory.id)
            memories.append(memory)
        logger.info("Loaded %d/%d memories from %s", len(memories), len(raw), self.path)
        return memories

    # ── Save ──────────────────────────────────────────────────

    def save(self, memories: Iterable[FoodMemory]) -> None:
        """Overwrite the blob with ``memories``. Raises PersistenceError."""
        payload = [encode(m, durable=True) for m in memories]
        data = json.dumps(payload, ensure_ascii=False, indent=2)

        tmp_name: str | None = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
            tmp_name = None
        except OSError as e:
            raise PersistenceError(f"Failed to save memories to {self.path}: {e}") from e
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    logger.debug("Temp file %s already gone", tmp_name)

        logger.info("Saved %d memories to %s", len(payload), self.path)

    def clear(self) -> None:
        """Remove the blob. Idempotent."""
        try:
            self.path.unlink()
        except FileNotFoundError:
            return
        except OSError as e:
            raise PersistenceError(f"Failed to remove {self.path}: {e}") from e
        logger.info("Removed cache %s", self.path)
