"""Remote client protocol."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class RemoteClient(Protocol):
    """Protocol that every memory server backend must implement.

    Records cross this boundary in wire form (plain dicts, see
    nomadish.memory.codec). Failures raise RemoteError subclasses.
    """

    async def fetch_all(self) -> list[dict[str, Any]]:
        """Return every memory the server knows about."""
        ...

    async def add(self, record: dict[str, Any], photo: bytes | None) -> dict[str, Any]:
        """Create a memory and return the server's canonical copy."""
        ...

    async def delete(self, memory_id: str) -> None:
        """Delete a memory by id."""
        ...
