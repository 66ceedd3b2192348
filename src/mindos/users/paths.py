"""User archetypes used to filter mission templates."""

from __future__ import annotations

from enum import Enum

from mindos.errors import InvalidInput


class UserPath(str, Enum):
    BUILDER = "builder"
    AUTOMATOR = "automator"
    DEALMAKER = "dealmaker"


_ALIASES = {
    "deal-maker": UserPath.DEALMAKER,
    "deal_maker": UserPath.DEALMAKER,
}


def parse_path(value: str | UserPath | None) -> UserPath | None:
    """Normalize a path name; ``None`` and empty strings mean no path."""
    if value is None or isinstance(value, UserPath):
        return value
    key = value.strip().lower()
    if not key:
        return None
    if key in _ALIASES:
        return _ALIASES[key]
    try:
        return UserPath(key)
    except ValueError:
        msg = f"Unknown path: {value!r}"
        raise InvalidInput(msg) from None
