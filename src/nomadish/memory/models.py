"""Food memory records."""

from __future__ import annotations

import enum
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone

MIN_RATING = 1
MAX_RATING = 5
DEFAULT_RATING = 3


class SyncState(str, enum.Enum):
    """Whether the server knows about a record."""

    SYNCED = "synced"
    PENDING_ADD = "pending_add"


@dataclass(frozen=True)
class Coordinate:
    """A (latitude, longitude) pair in degrees."""

    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"latitude out of range: {self.latitude}")
        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError(f"longitude out of range: {self.longitude}")


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class FoodMemory:
    """A dish pinned on the map.

    ``id`` is provisional (a client UUID) until the server returns its
    canonical copy. The photo is held only until upload; once the server
    has assigned ``image_url`` the photo is dropped.
    """

    name: str
    coordinate: Coordinate
    id: str = field(default_factory=_new_id)
    date_added: datetime = field(default_factory=_utcnow)
    notes: str = ""
    rating: int = DEFAULT_RATING
    image_url: str | None = None
    photo: bytes | None = field(default=None, compare=False, repr=False)
    sync_state: SyncState = SyncState.SYNCED

    def __post_init__(self) -> None:
        if self.date_added.tzinfo is None:
            self.date_added = self.date_added.replace(tzinfo=timezone.utc)
        if not MIN_RATING <= self.rating <= MAX_RATING:
            raise ValueError(f"rating must be in [{MIN_RATING}, {MAX_RATING}], got {self.rating}")
        if self.image_url:
            self.photo = None

    @property
    def is_complete(self) -> bool:
        return bool(self.name.strip())

    @property
    def is_pending(self) -> bool:
        return self.sync_state is SyncState.PENDING_ADD

    @property
    def image_ref(self) -> str | bytes | None:
        """The authoritative image: remote URL if uploaded, else the local photo."""
        if self.image_url:
            return self.image_url
        return self.photo

    def with_sync_state(self, state: SyncState) -> FoodMemory:
        return replace(self, sync_state=state)
