"""Event records broadcast by the hub."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Literal

Role = Literal["user", "assistant", "system", "host"]
VALID_ROLES: frozenset[str] = frozenset({"user", "assistant", "system", "host"})


class InvalidEventError(ValueError):
    """Raised when an event is rejected at the hub boundary."""


@dataclass(frozen=True)
class EventRecord:
    """One immutable unit of broadcast information."""

    id: int
    timestamp: str  # ISO format, UTC
    role: str
    text: str

    def to_dict(self) -> dict:
        return asdict(self)


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds")


def validate_event(
    role: str, text: str, roles: frozenset[str] | None = VALID_ROLES
) -> None:
    """Check role and text before a record is built.

    ``roles=None`` accepts any non-empty role tag.

    Raises:
        InvalidEventError: role is empty or unknown, or text is not a string.
    """
    if not isinstance(role, str) or not role:
        raise InvalidEventError("Event role must be a non-empty string")
    if roles is not None and role not in roles:
        raise InvalidEventError(
            f"Unknown event role: {role!r} (expected one of {sorted(roles)})"
        )
    if not isinstance(text, str):
        raise InvalidEventError(
            f"Event text must be a string, got {type(text).__name__}"
        )
