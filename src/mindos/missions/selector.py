"""Deterministic, date-seeded daily mission selection.

Everyone on the same path gets the same mission on the same day without a
central scheduler: the seed is the sum of the code points of the ISO date.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date

from mindos.errors import InvalidInput, NoEligibleTemplate
from mindos.missions.templates import MISSION_TEMPLATES, MissionTemplate
from mindos.users.paths import UserPath, parse_path


def date_seed(day: date | str) -> int:
    """Sum of character codes of the ``YYYY-MM-DD`` date string."""
    if isinstance(day, date):
        day_string = day.isoformat()
    else:
        try:
            day_string = date.fromisoformat(day).isoformat()
        except (TypeError, ValueError):
            msg = f"Invalid date: {day!r}"
            raise InvalidInput(msg) from None
    return sum(ord(c) for c in day_string)


def eligible_templates(
    user_path: UserPath | str | None,
    templates: Sequence[MissionTemplate] = MISSION_TEMPLATES,
) -> list[MissionTemplate]:
    path = parse_path(user_path)
    return [t for t in templates if t.is_eligible(path)]


def select_daily_mission(
    day: date | str,
    user_path: UserPath | str | None = None,
    templates: Sequence[MissionTemplate] = MISSION_TEMPLATES,
) -> MissionTemplate:
    """Pick ``eligible[seed % len(eligible)]`` for the given day and path.

    Raises:
        InvalidInput: malformed date or unknown path.
        NoEligibleTemplate: no template matches the path.
    """
    seed = date_seed(day)
    eligible = eligible_templates(user_path, templates)
    if not eligible:
        msg = f"No mission template available for path {user_path!r}"
        raise NoEligibleTemplate(msg)
    return eligible[seed % len(eligible)]
