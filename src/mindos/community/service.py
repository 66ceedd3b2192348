"""Community content submissions."""

from __future__ import annotations

import html
import math
import re
from dataclasses import dataclass, field

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from mindos.ai.textgen import BaseTextGenerator, polish_content
from mindos.config import get_settings
from mindos.db.models import CommunitySubmission
from mindos.errors import InvalidInput
from mindos.events.categories import EventCategory, EventType
from mindos.events.service import append_event
from mindos.gamification.xp_service import XpResult, apply_xp

logger = structlog.get_logger()

MAX_TITLE = 200
MAX_CONTENT = 20_000
MAX_INSIGHTS = 5
CHARS_PER_MINUTE = 200
DEFAULT_CATEGORY = "community_intelligence"

ACTIONABLE_KEYWORDS = ("implement", "use", "apply", "leverage", "automate", "optimize", "build", "create", "deploy")
CONCEPT_KEYWORDS = ("ai", "automation", "productivity", "efficiency", "innovation", "strategy", "system", "process")

_SENTENCE_SPLIT = re.compile(r"[.!?]+")


@dataclass
class SubmissionResult:
    submission: CommunitySubmission
    xp_earned: int = 0
    xp: XpResult | None = None
    notifications: list[str] = field(default_factory=list)


def extract_insights(content: str, title: str) -> list[str]:
    """Title plus up to two actionable and one conceptual sentence, deduplicated."""
    sentences = [s.strip() for s in _SENTENCE_SPLIT.split(content) if len(s.strip()) > 20]

    insights = [title.strip()]
    insights += [s for s in sentences if any(k in s.lower() for k in ACTIONABLE_KEYWORDS)][:2]
    insights += [s for s in sentences if any(k in s.lower() for k in CONCEPT_KEYWORDS)][:1]

    unique = list(dict.fromkeys(insights))[:MAX_INSIGHTS]
    return [i for i in unique if len(i) > 10]


def estimate_read_minutes(content: str) -> int:
    return max(1, math.ceil(len(content) / CHARS_PER_MINUTE))


async def submit_community_content(
    db: AsyncSession,
    generator: BaseTextGenerator,
    title: str,
    content: str,
    category: str | None = None,
    submitted_by: str | None = None,
) -> SubmissionResult:
    """Store a community submission, polished when text generation is available.

    Signed-in submitters earn ``community_submission_xp``.
    """
    title = (title or "").strip()
    content = (content or "").strip()
    if not title or not content:
        raise InvalidInput("Title and content are required")
    if len(title) > MAX_TITLE:
        msg = f"Title must be at most {MAX_TITLE} characters"
        raise InvalidInput(msg)
    if len(content) > MAX_CONTENT:
        msg = f"Content must be at most {MAX_CONTENT} characters"
        raise InvalidInput(msg)

    text, polished = await polish_content(generator, title, content)
    insights = extract_insights(text, title)

    submission = CommunitySubmission(
        submitted_by=submitted_by,
        title=title,
        original_content=content,
        content=text,
        polished=polished,
        category=(category or DEFAULT_CATEGORY).strip() or DEFAULT_CATEGORY,
        insights=insights,
        estimated_read_minutes=estimate_read_minutes(text),
    )
    db.add(submission)
    await db.flush()

    result = SubmissionResult(submission=submission)
    if submitted_by is not None:
        result.xp_earned = get_settings().community_submission_xp
        result.xp = await apply_xp(
            db, submitted_by, result.xp_earned, "community_submission", description=f"Submitted: {title}"
        )
        result.notifications.extend(result.xp.notifications)

    await append_event(
        db,
        submitted_by,
        EventType.CONTENT_SUBMITTED,
        EventCategory.SOCIAL,
        meta={
            "submission_id": submission.id,
            "polished": polished,
            "insights": len(insights),
            "xp_earned": result.xp_earned,
        },
    )
    result.notifications.insert(
        0,
        "\n".join(
            [
                "\U0001f9e0 <b>NEW COMMUNITY INTEL</b>",
                f"\U0001f4f0 {html.escape(title)}",
                f"\U0001f464 {submitted_by or 'Anonymous'}",
                f"\U0001f3af {html.escape(submission.category)}",
                f"\U0001f4a1 {len(insights)} insights extracted",
            ]
        ),
    )
    logger.info("community_submission_stored", submission_id=submission.id, polished=polished)
    return result
