"""Leaderboard ordering.

Users are sorted by the XP field the window selects, highest first. Ties
are broken by user id ascending so the order never depends on how rows
came back from the datastore. Ranks are positional and 1-based: equal XP
does not share a rank.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from mindos.errors import InvalidInput


class LeaderboardWindow(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    GLOBAL = "global"


WINDOW_FIELDS = {
    LeaderboardWindow.DAILY: "daily_xp",
    LeaderboardWindow.WEEKLY: "weekly_xp",
    LeaderboardWindow.GLOBAL: "total_xp",
}


@dataclass(frozen=True)
class LeaderboardUser:
    user_id: str
    total_xp: int = 0
    weekly_xp: int = 0
    daily_xp: int = 0
    display_name: str | None = None
    level: int = 1
    streak_days: int = 0


@dataclass(frozen=True)
class RankedEntry:
    rank: int
    user: LeaderboardUser
    xp: int


@dataclass
class Ranking:
    window: LeaderboardWindow
    entries: list[RankedEntry] = field(default_factory=list)
    own_rank: int | None = None
    population: int = 0


def parse_window(window: LeaderboardWindow | str) -> LeaderboardWindow:
    try:
        return LeaderboardWindow(window)
    except ValueError:
        msg = f"Unknown leaderboard window: {window!r}"
        raise InvalidInput(msg) from None


def window_xp(user: LeaderboardUser, window: LeaderboardWindow) -> int:
    return getattr(user, WINDOW_FIELDS[window])


def rank(
    users: Iterable[LeaderboardUser],
    window: LeaderboardWindow | str,
    requesting_user_id: str | None = None,
    limit: int | None = None,
) -> Ranking:
    """Order users for a window and assign positional ranks.

    ``limit`` truncates the returned entries only; the requesting user's
    rank and the population size are computed over everyone.
    """
    selected = parse_window(window)
    ordered = sorted(users, key=lambda u: (-window_xp(u, selected), u.user_id))

    ranking = Ranking(window=selected, population=len(ordered))
    for position, user in enumerate(ordered, start=1):
        if user.user_id == requesting_user_id:
            ranking.own_rank = position
        if limit is None or position <= limit:
            ranking.entries.append(RankedEntry(rank=position, user=user, xp=window_xp(user, selected)))
    return ranking
