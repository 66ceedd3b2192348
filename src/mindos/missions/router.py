"""Mission endpoints: daily assignment, listing, creation and completion."""

from __future__ import annotations

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from mindos.auth.dependencies import get_current_profile
from mindos.clients import get_notification_sink
from mindos.database import get_session
from mindos.db.models import Mission, Profile
from mindos.missions.schemas import (
    DailyMissionResponse,
    MissionCompleteRequest,
    MissionCompleteResponse,
    MissionCreateRequest,
    MissionListResponse,
    MissionResponse,
    MissionStatsResponse,
)
from mindos.missions.service import (
    DEFAULT_RATING,
    complete_mission,
    create_mission,
    get_mission,
    get_or_create_daily_mission,
    list_missions,
    mission_stats,
)
from mindos.notifications.dispatcher import dispatch_notifications
from mindos.notifications.sink import BaseNotificationSink

router = APIRouter(prefix="/api/v1/missions", tags=["Missions"])


def _mission_response(mission: Mission) -> MissionResponse:
    return MissionResponse(
        id=mission.id,
        template_id=mission.template_id,
        title=mission.title,
        description=mission.description,
        category=mission.category,
        difficulty_level=mission.difficulty_level,
        xp_reward=mission.xp_reward,
        status=mission.status.value,
        created_at=mission.created_at,
        completed_at=mission.completed_at,
    )


# Fixed paths are declared before /{mission_id}.


@router.get("/daily", response_model=DailyMissionResponse)
async def get_daily_mission(
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_session),
):
    """Get today's micro-mission, assigning it on the first request of the day."""
    daily = await get_or_create_daily_mission(db, profile.id)
    if daily.created:
        await db.commit()

    return DailyMissionResponse(
        assigned_date=daily.assignment.assigned_date,
        estimated_time=daily.template.estimated_time,
        difficulty=daily.template.difficulty,
        path_specific=[p.value for p in daily.template.path_specific],
        mission=_mission_response(daily.mission),
    )


@router.get("/stats", response_model=MissionStatsResponse)
async def get_mission_stats(
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_session),
):
    """Get open/completed counts and mission XP for the caller."""
    return MissionStatsResponse(**await mission_stats(db, profile.id))


@router.get("", response_model=MissionListResponse)
async def get_missions(
    status: str | None = Query(None, description="open, done or locked"),
    limit: int = Query(50, ge=1, le=100),
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_session),
):
    """List the caller's missions, newest first."""
    missions = await list_missions(db, profile.id, status=status, limit=limit)
    return MissionListResponse(missions=[_mission_response(m) for m in missions], total=len(missions))


@router.post("", response_model=MissionResponse, status_code=201)
async def post_mission(
    body: MissionCreateRequest,
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_session),
):
    """Create a custom mission (open or locked)."""
    mission = await create_mission(
        db,
        profile.id,
        body.title,
        description=body.description,
        xp_reward=body.xp_reward,
        difficulty_level=body.difficulty_level,
        category=body.category,
        status=body.status,
    )
    await db.commit()
    return _mission_response(mission)


@router.get("/{mission_id}", response_model=MissionResponse)
async def get_one_mission(
    mission_id: int,
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_session),
):
    """Get one of the caller's missions."""
    return _mission_response(await get_mission(db, mission_id, profile.id))


@router.post("/{mission_id}/complete", response_model=MissionCompleteResponse)
async def post_complete_mission(
    mission_id: int,
    background_tasks: BackgroundTasks,
    body: MissionCompleteRequest | None = None,
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_session),
    sink: BaseNotificationSink = Depends(get_notification_sink),
):
    """Complete an open mission; XP scales with the self-rated amazingness."""
    rating = body.amazingness_rating if body is not None else DEFAULT_RATING
    result = await complete_mission(db, mission_id, rating, user_id=profile.id)
    await db.commit()
    background_tasks.add_task(dispatch_notifications, sink, result.notifications)

    return MissionCompleteResponse(
        mission=_mission_response(result.mission),
        xp_earned=result.xp_earned,
        total_xp=result.xp.new_total_xp,
        level=result.xp.new_level,
        leveled_up=result.xp.leveled_up,
        streak_days=result.streak.streak_days,
        achievements=result.achievements,
    )
