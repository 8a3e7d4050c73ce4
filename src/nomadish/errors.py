"""Error taxonomy shared by the codec, the cache and the remote client."""

from __future__ import annotations


class NomadishError(Exception):
    """Base class for every error raised by nomadish."""


# ── Remote ───────────────────────────────────────────────────


class RemoteError(NomadishError):
    """A remote operation did not succeed."""


class NetworkUnavailableError(RemoteError):
    """The server could not be reached (connection refused, DNS, timeout)."""


class ServerError(RemoteError):
    """The server answered with an unexpected status code."""

    def __init__(self, status: int, detail: str = "") -> None:
        self.status = status
        self.detail = detail
        message = f"Server returned status code {status}"
        if detail:
            message += f": {detail}"
        super().__init__(message)


# ── Decoding ─────────────────────────────────────────────────


class DecodeError(NomadishError):
    """A wire or durable object could not be turned into a FoodMemory."""


class MissingFieldError(DecodeError):
    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"Missing required field '{field}'")


class TypeMismatchError(DecodeError):
    def __init__(self, field: str, expected: str) -> None:
        self.field = field
        self.expected = expected
        super().__init__(f"Field '{field}' must be {expected}")


class InvalidValueError(DecodeError):
    def __init__(self, field: str, reason: str) -> None:
        self.field = field
        super().__init__(f"Field '{field}' is invalid: {reason}")


class InvalidDateError(DecodeError):
    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(f"Cannot decode date string {value!r}")


# ── Persistence ──────────────────────────────────────────────


class PersistenceError(NomadishError):
    """The local cache blob could not be written."""
