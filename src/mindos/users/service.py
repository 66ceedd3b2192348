"""Identity mirroring, profiles and onboarding."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import structlog
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from mindos.config import get_settings
from mindos.db.models import Profile, User
from mindos.errors import InvalidInput
from mindos.events.categories import EventCategory, EventType
from mindos.events.service import append_event
from mindos.gamification.xp_service import XpResult, apply_xp, load_profile
from mindos.users.paths import UserPath, parse_path

logger = structlog.get_logger()

MAX_DISPLAY_NAME = 128


@dataclass
class PathResult:
    profile: Profile
    path: UserPath
    onboarding_xp: XpResult | None = None
    notifications: list[str] = field(default_factory=list)


async def get_or_create_profile(
    db: AsyncSession,
    user_id: str,
    email: str | None = None,
    display_name: str | None = None,
) -> tuple[Profile, bool]:
    """
    Return the user's profile, creating the identity row and profile on first sign-in.

    The second element is True when this call created the rows. They are
    flushed but not committed.
    """
    profile = (await db.execute(select(Profile).where(Profile.id == user_id))).scalar_one_or_none()
    if profile is not None:
        return profile, False

    try:
        async with db.begin_nested():
            if await db.get(User, user_id) is None:
                db.add(User(id=user_id, email=email))
            profile = Profile(
                id=user_id,
                display_name=(display_name or (email.split("@")[0] if email else None)),
            )
            db.add(profile)
    except IntegrityError:
        # Concurrent first request created it.
        return await load_profile(db, user_id), False

    logger.info("profile_created", user_id=user_id)
    return profile, True


async def get_profile(db: AsyncSession, user_id: str) -> Profile:
    """Raises NotFound when the profile does not exist."""
    return await load_profile(db, user_id)


async def update_display_name(db: AsyncSession, user_id: str, display_name: str) -> Profile:
    name = display_name.strip()
    if not name or len(name) > MAX_DISPLAY_NAME:
        msg = f"display_name must be 1-{MAX_DISPLAY_NAME} characters"
        raise InvalidInput(msg)
    profile = await load_profile(db, user_id)
    profile.display_name = name
    await db.flush()
    return profile


async def set_user_path(
    db: AsyncSession,
    user_id: str,
    path: UserPath | str,
    quiz_answers: dict[str, Any] | None = None,
) -> PathResult:
    """Store the user's path from the onboarding quiz.

    The first call completes onboarding and awards the one-time onboarding
    XP; the flag flip is a conditional UPDATE so the bonus is paid once.
    Later calls only change the path.
    """
    selected = parse_path(path)
    if selected is None:
        raise InvalidInput("path is required")

    await load_profile(db, user_id)
    first_time = (
        await db.execute(
            update(Profile)
            .where(Profile.id == user_id, Profile.onboarding_completed == False)  # noqa: E712
            .values(onboarding_completed=True)
            .returning(Profile.id)
            .execution_options(synchronize_session=False)
        )
    ).one_or_none() is not None

    values: dict[str, Any] = {"path": selected}
    if quiz_answers is not None:
        values["quiz_answers"] = quiz_answers
    await db.execute(
        update(Profile).where(Profile.id == user_id).values(**values).execution_options(synchronize_session=False)
    )
    await append_event(
        db,
        user_id,
        EventType.PATH_SELECTED,
        EventCategory.GENERAL,
        meta={"path": selected.value, "first_time": first_time},
    )

    result = PathResult(profile=await load_profile(db, user_id), path=selected)
    if first_time:
        settings = get_settings()
        result.onboarding_xp = await apply_xp(
            db,
            user_id,
            settings.onboarding_xp,
            "onboarding_completed",
            description=f"Completed onboarding quiz - assigned to {selected.value} path",
        )
        result.notifications.append(f"\U0001f9ed <b>Onboarding complete:</b> user {user_id} chose the {selected.value} path")
        result.notifications.extend(result.onboarding_xp.notifications)
        result.profile = await load_profile(db, user_id)
    return result
