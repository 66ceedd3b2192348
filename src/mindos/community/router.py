"""Community submission endpoint (anonymous or signed-in)."""

from __future__ import annotations

from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from mindos.ai.textgen import BaseTextGenerator
from mindos.auth.dependencies import get_optional_profile
from mindos.clients import get_notification_sink, get_text_generator
from mindos.community.schemas import SubmissionRequest, SubmissionResponse
from mindos.community.service import submit_community_content
from mindos.database import get_session
from mindos.db.models import Profile
from mindos.notifications.dispatcher import dispatch_notifications
from mindos.notifications.sink import BaseNotificationSink

router = APIRouter(prefix="/api/v1/community", tags=["Community"])


@router.post("/submissions", response_model=SubmissionResponse, status_code=201)
async def post_submission(
    body: SubmissionRequest,
    background_tasks: BackgroundTasks,
    profile: Profile | None = Depends(get_optional_profile),
    db: AsyncSession = Depends(get_session),
    generator: BaseTextGenerator = Depends(get_text_generator),
    sink: BaseNotificationSink = Depends(get_notification_sink),
):
    """Submit community content; it is polished when text generation is configured."""
    result = await submit_community_content(
        db,
        generator,
        body.title,
        body.content,
        category=body.category,
        submitted_by=profile.id if profile is not None else None,
    )
    await db.commit()
    background_tasks.add_task(dispatch_notifications, sink, result.notifications)

    submission = result.submission
    return SubmissionResponse(
        id=submission.id,
        title=submission.title,
        content=submission.content,
        polished=submission.polished,
        category=submission.category,
        insights=submission.insights,
        estimated_read_minutes=submission.estimated_read_minutes,
        xp_earned=result.xp_earned,
        created_at=submission.created_at,
    )
