"""Mission persistence, daily assignment and the completion transition."""

from __future__ import annotations

import html
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from mindos.achievements.service import unlock_achievement_if_eligible
from mindos.db.models import DailyMissionAssignment, Mission, XpEvent
from mindos.errors import InvalidInput, NotFound
from mindos.events.categories import EventCategory, EventType
from mindos.events.service import append_event
from mindos.gamification.streak_service import StreakResult, record_activity, today_utc
from mindos.gamification.xp_service import XpResult, apply_xp, load_profile
from mindos.missions.selector import select_daily_mission
from mindos.missions.state import INITIAL_STATES, MissionStatus, parse_status, transition
from mindos.missions.templates import TEMPLATES_BY_ID, MissionTemplate

logger = logging.getLogger(__name__)

DEFAULT_RATING = 5
MIN_RATING = 1
MAX_RATING = 10


@dataclass
class MissionCompletionResult:
    mission: Mission
    xp_earned: int
    xp: XpResult
    streak: StreakResult
    achievements: list[str] = field(default_factory=list)
    notifications: list[str] = field(default_factory=list)


@dataclass
class DailyMission:
    template: MissionTemplate
    assignment: DailyMissionAssignment
    mission: Mission
    created: bool


def mission_xp(xp_reward: int, amazingness_rating: int = DEFAULT_RATING) -> int:
    """``max(1, floor(xp_reward * rating / 5))``."""
    return max(1, xp_reward * amazingness_rating // 5)


def validate_rating(rating: object) -> int:
    if isinstance(rating, bool) or not isinstance(rating, int):
        msg = f"amazingness_rating must be an integer, got {rating!r}"
        raise InvalidInput(msg)
    if not MIN_RATING <= rating <= MAX_RATING:
        msg = f"amazingness_rating must be between {MIN_RATING} and {MAX_RATING}"
        raise InvalidInput(msg)
    return rating


async def create_mission(
    db: AsyncSession,
    user_id: str,
    title: str,
    description: str = "",
    xp_reward: int = 0,
    difficulty_level: int = 1,
    category: str = "general",
    status: MissionStatus | str = MissionStatus.OPEN,
    template_id: str | None = None,
) -> Mission:
    """Create a mission in its initial state (open or locked)."""
    if not title or not title.strip():
        raise InvalidInput("Mission title is required")
    if isinstance(difficulty_level, bool) or not 1 <= difficulty_level <= 10:
        raise InvalidInput("difficulty_level must be between 1 and 10")
    if isinstance(xp_reward, bool) or xp_reward < 0:
        raise InvalidInput("xp_reward must be non-negative")
    initial = parse_status(status)
    if initial not in INITIAL_STATES:
        msg = f"Missions cannot be created as {initial.value}"
        raise InvalidInput(msg)

    await load_profile(db, user_id)
    mission = Mission(
        user_id=user_id,
        template_id=template_id,
        title=title.strip(),
        description=description,
        category=category,
        difficulty_level=difficulty_level,
        xp_reward=xp_reward,
        status=initial,
    )
    db.add(mission)
    await db.flush()
    return mission


async def get_mission(db: AsyncSession, mission_id: int, user_id: str | None = None) -> Mission:
    """Fetch a mission; one owned by somebody else is reported as missing."""
    stmt = select(Mission).where(Mission.id == mission_id).execution_options(populate_existing=True)
    mission = (await db.execute(stmt)).scalar_one_or_none()
    if mission is None or (user_id is not None and mission.user_id != user_id):
        msg = f"Mission {mission_id} not found"
        raise NotFound(msg)
    return mission


async def list_missions(
    db: AsyncSession,
    user_id: str,
    status: MissionStatus | str | None = None,
    limit: int = 50,
) -> list[Mission]:
    stmt = select(Mission).where(Mission.user_id == user_id)
    if status is not None:
        stmt = stmt.where(Mission.status == parse_status(status))
    stmt = stmt.order_by(Mission.created_at.desc(), Mission.id.desc()).limit(limit)
    return list((await db.execute(stmt)).scalars().all())


async def complete_mission(
    db: AsyncSession,
    mission_id: int,
    amazingness_rating: int = DEFAULT_RATING,
    user_id: str | None = None,
    activity_date: date | None = None,
) -> MissionCompletionResult:
    """Move a mission from open to done and pay out its XP.

    The status change is a conditional UPDATE (``WHERE status = 'open'``),
    so of two concurrent completions exactly one matches a row. The loser
    gets AlreadyCompleted and no XP is written.
    """
    rating = validate_rating(amazingness_rating)
    now = datetime.now(timezone.utc)

    stmt = update(Mission).where(Mission.id == mission_id, Mission.status == MissionStatus.OPEN)
    if user_id is not None:
        stmt = stmt.where(Mission.user_id == user_id)
    stmt = (
        stmt.values(status=transition(MissionStatus.OPEN, MissionStatus.DONE), completed_at=now)
        .returning(Mission.user_id, Mission.xp_reward, Mission.title)
        .execution_options(synchronize_session=False)
    )
    row = (await db.execute(stmt)).one_or_none()
    if row is None:
        mission = await get_mission(db, mission_id, user_id)
        # Raises AlreadyCompleted / MissionLocked for the terminal states.
        transition(mission.status, MissionStatus.DONE)
        msg = f"Mission {mission_id} could not be completed"
        raise InvalidInput(msg)

    owner_id, xp_reward, title = row
    xp_earned = mission_xp(xp_reward, rating)

    xp = await apply_xp(db, owner_id, xp_earned, "mission_completed", description=f"Completed mission: {title}")
    await append_event(
        db,
        owner_id,
        EventType.MISSION_COMPLETED,
        EventCategory.LEARNING,
        meta={"mission_id": mission_id, "title": title, "amazingness_rating": rating},
        xp_impact=xp_earned,
    )
    streak = await record_activity(db, owner_id, activity_date or today_utc())
    unlocked = await unlock_achievement_if_eligible(db, owner_id)

    mission = await get_mission(db, mission_id)
    result = MissionCompletionResult(
        mission=mission,
        xp_earned=xp_earned,
        xp=xp,
        streak=streak,
        achievements=[a.slug for a in unlocked.unlocked],
    )
    result.notifications.append(
        f"✅ <b>Mission completed:</b> {html.escape(title)} by user {owner_id} (+{xp_earned} XP)"
    )
    result.notifications.extend(xp.notifications)
    result.notifications.extend(unlocked.notifications)
    logger.info("Mission %s completed by %s for %d XP", mission_id, owner_id, xp_earned)
    return result


async def get_or_create_daily_mission(
    db: AsyncSession,
    user_id: str,
    day: date | None = None,
) -> DailyMission:
    """Return the user's mission for ``day``, assigning one on first request.

    The template comes from the deterministic selector for the user's path;
    the assignment row is unique per (user, date).
    """
    day = day or today_utc()
    existing = await _find_assignment(db, user_id, day)
    if existing is not None:
        return DailyMission(_template_for(existing, day), existing, existing.mission, created=False)

    profile = await load_profile(db, user_id)
    template = select_daily_mission(day, profile.path)

    try:
        async with db.begin_nested():
            mission = Mission(
                user_id=user_id,
                template_id=template.id,
                title=template.title,
                description=template.description,
                category=template.category,
                difficulty_level=template.difficulty_level,
                xp_reward=template.xp_reward,
                status=MissionStatus.OPEN,
            )
            db.add(mission)
            await db.flush()
            assignment = DailyMissionAssignment(
                user_id=user_id,
                assigned_date=day,
                template_id=template.id,
                mission_id=mission.id,
            )
            db.add(assignment)
    except IntegrityError:
        # A concurrent request assigned today's mission first.
        existing = await _find_assignment(db, user_id, day)
        if existing is None:
            raise
        return DailyMission(_template_for(existing, day), existing, existing.mission, created=False)

    return DailyMission(template, assignment, mission, created=True)


async def _find_assignment(db: AsyncSession, user_id: str, day: date) -> DailyMissionAssignment | None:
    result = await db.execute(
        select(DailyMissionAssignment)
        .where(DailyMissionAssignment.user_id == user_id, DailyMissionAssignment.assigned_date == day)
        .execution_options(populate_existing=True)
    )
    return result.unique().scalar_one_or_none()


def _template_for(assignment: DailyMissionAssignment, day: date) -> MissionTemplate:
    template = TEMPLATES_BY_ID.get(assignment.template_id)
    if template is None:
        # Template retired since assignment; fall back to the general pick for the day.
        template = select_daily_mission(day)
    return template


async def mission_stats(db: AsyncSession, user_id: str, today: date | None = None) -> dict:
    """Open and completed counts, today's completions and mission XP."""
    today = today or today_utc()
    start_of_day = datetime.combine(today, time.min, tzinfo=timezone.utc)
    profile = await load_profile(db, user_id)

    async def count(*filters) -> int:
        stmt = select(func.count()).select_from(Mission).where(Mission.user_id == user_id, *filters)
        return (await db.execute(stmt)).scalar() or 0

    mission_xp_total = (
        await db.execute(
            select(func.coalesce(func.sum(XpEvent.amount), 0)).where(
                XpEvent.user_id == user_id, XpEvent.source == "mission_completed"
            )
        )
    ).scalar() or 0

    return {
        "open": await count(Mission.status == MissionStatus.OPEN),
        "locked": await count(Mission.status == MissionStatus.LOCKED),
        "completed_today": await count(
            Mission.status == MissionStatus.DONE, Mission.completed_at >= start_of_day
        ),
        "total_completed": await count(Mission.status == MissionStatus.DONE),
        "streak_days": profile.streak_days,
        "mission_xp": int(mission_xp_total),
    }
