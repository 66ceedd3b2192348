"""Level and rank computation.

Levels are linear: every ``xp_per_level`` XP (100 by default) is one level,
starting at level 1 with zero XP. Rank titles are coarser bands over levels
and must match the dashboard's progress panel.
"""

from __future__ import annotations

XP_PER_LEVEL = 100

RANK_TITLES: list[dict] = [
    {"min_level": 50, "title": "Legend"},
    {"min_level": 40, "title": "Master"},
    {"min_level": 30, "title": "Expert"},
    {"min_level": 20, "title": "Advanced"},
    {"min_level": 10, "title": "Intermediate"},
    {"min_level": 1, "title": "Beginner"},
]


def level_for_xp(total_xp: int, xp_per_level: int = XP_PER_LEVEL) -> int:
    """Level for a total XP amount: ``floor(total_xp / xp_per_level) + 1``."""
    if total_xp < 0:
        msg = f"total_xp must be non-negative, got {total_xp}"
        raise ValueError(msg)
    return total_xp // xp_per_level + 1


def rank_title(level: int) -> str:
    for band in RANK_TITLES:
        if level >= band["min_level"]:
            return band["title"]
    return RANK_TITLES[-1]["title"]


def compute_level_progress(total_xp: int, xp_per_level: int = XP_PER_LEVEL) -> dict:
    """Compute level info from total XP.

    Returns the level, its rank title, how far into the level the user is
    and how much XP remains until the next one.
    """
    level = level_for_xp(total_xp, xp_per_level)
    xp_into_level = total_xp - (level - 1) * xp_per_level
    return {
        "level": level,
        "title": rank_title(level),
        "total_xp": total_xp,
        "xp_into_level": xp_into_level,
        "xp_for_level": xp_per_level,
        "xp_to_next_level": xp_per_level - xp_into_level,
        "next_level": level + 1,
        "progress_percent": round(xp_into_level * 100 / xp_per_level, 1),
    }
