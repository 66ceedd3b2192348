"""ORM models for the progression datastore.

Every user-owned table cascades on deletion of the owning ``users`` row,
except ``referrals.referee_id`` which is set to NULL. ``events.user_id`` is
optional: system-level events have no owner.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    false,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mindos.db.base import Base, BigIntPK, JSONType
from mindos.missions.state import MissionStatus
from mindos.referrals.state import ReferralStatus
from mindos.users.paths import UserPath


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _enum(enum_cls: type, name: str) -> Enum:
    """Store the enum value (not the member name) in a VARCHAR column."""
    return Enum(
        enum_cls,
        name=name,
        native_enum=False,
        length=16,
        values_callable=lambda members: [m.value for m in members],
    )


# ---------------------------------------------------------------------------
# Identity and profile
# ---------------------------------------------------------------------------


class User(Base):
    """Identity row mirrored from the external identity provider."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)

    profile: Mapped[Profile | None] = relationship(
        "Profile", back_populates="user", uselist=False, cascade="all, delete-orphan", passive_deletes=True
    )


class Profile(Base):
    """One progression profile per user; ``total_xp`` caches the XP ledger sum."""

    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(String(64), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    display_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    path: Mapped[UserPath | None] = mapped_column(_enum(UserPath, "user_path"), nullable=True)
    current_level: Mapped[int] = mapped_column(Integer, nullable=False, default=1, server_default="1")
    total_xp: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    weekly_xp: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    daily_xp: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    streak_days: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    longest_streak: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    last_activity_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    referral_code: Mapped[str | None] = mapped_column(String(16), unique=True, nullable=True)
    referred_by_code: Mapped[str | None] = mapped_column(String(16), nullable=True)
    onboarding_completed: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    quiz_answers: Mapped[dict[str, Any] | None] = mapped_column(JSONType, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )

    user: Mapped[User] = relationship("User", back_populates="profile")


# ---------------------------------------------------------------------------
# Ledgers
# ---------------------------------------------------------------------------


class XpEvent(Base):
    """Immutable XP ledger entry. Sum per user equals ``profiles.total_xp``."""

    __tablename__ = "xp_events"
    __table_args__ = (Index("ix_xp_events_user_created", "user_id", "created_at"),)

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    source: Mapped[str] = mapped_column(String(64), nullable=False)
    description: Mapped[str | None] = mapped_column(String(256), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)


class Event(Base):
    """Append-only activity log."""

    __tablename__ = "events"
    __table_args__ = (Index("ix_events_user_created", "user_id", "created_at"),)

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    user_id: Mapped[str | None] = mapped_column(
        String(64), ForeignKey("users.id", ondelete="CASCADE"), nullable=True
    )
    type: Mapped[str] = mapped_column(String(64), nullable=False)
    category: Mapped[str] = mapped_column(String(32), nullable=False, default="general")
    meta: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False, default=dict)
    xp_impact: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)


# ---------------------------------------------------------------------------
# Missions
# ---------------------------------------------------------------------------


class Mission(Base):
    """A discrete task with a fixed XP reward."""

    __tablename__ = "missions"
    __table_args__ = (Index("ix_missions_user_status", "user_id", "status"),)

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    template_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    category: Mapped[str] = mapped_column(String(32), nullable=False, default="general")
    difficulty_level: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    xp_reward: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[MissionStatus] = mapped_column(
        _enum(MissionStatus, "mission_status"), nullable=False, default=MissionStatus.OPEN
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class DailyMissionAssignment(Base):
    """The daily mission handed to a user on a given date."""

    __tablename__ = "daily_mission_assignments"
    __table_args__ = (
        UniqueConstraint("user_id", "assigned_date", name="daily_mission_assignments_user_id_assigned_date_key"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    assigned_date: Mapped[date] = mapped_column(Date, nullable=False)
    template_id: Mapped[str] = mapped_column(String(64), nullable=False)
    mission_id: Mapped[int] = mapped_column(
        BigIntPK, ForeignKey("missions.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)

    mission: Mapped[Mission] = relationship("Mission", lazy="joined")


# ---------------------------------------------------------------------------
# Lessons
# ---------------------------------------------------------------------------


class LessonCompletion(Base):
    """Immutable record of a finished lesson.

    ``amazingness_rating`` is the learner's self-reported 1-10 rating;
    ``amazingness_score`` is the computed 0-150 composite. They are different
    scales and are never derived from one another.
    """

    __tablename__ = "lesson_completions"
    __table_args__ = (Index("ix_lesson_completions_user", "user_id"),)

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    lesson_id: Mapped[str] = mapped_column(String(128), nullable=False)
    mission_id: Mapped[int | None] = mapped_column(
        BigIntPK, ForeignKey("missions.id", ondelete="SET NULL"), nullable=True
    )
    performance_score: Mapped[int] = mapped_column(Integer, nullable=False)
    amazingness_rating: Mapped[int | None] = mapped_column(Integer, nullable=True)
    amazingness_score: Mapped[int] = mapped_column(Integer, nullable=False)
    quality_tier: Mapped[str] = mapped_column(String(32), nullable=False)
    xp_earned: Mapped[int] = mapped_column(Integer, nullable=False)
    completion_time_seconds: Mapped[int | None] = mapped_column(Integer, nullable=True)
    feedback: Mapped[dict[str, Any] | None] = mapped_column(JSONType, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)


# ---------------------------------------------------------------------------
# Referrals
# ---------------------------------------------------------------------------


class Referral(Base):
    """Referral link between a referrer and (eventually) a referee."""

    __tablename__ = "referrals"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    ref_code: Mapped[str] = mapped_column(String(16), unique=True, nullable=False)
    referrer_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    referee_id: Mapped[str | None] = mapped_column(
        String(64), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    referred_email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    status: Mapped[ReferralStatus] = mapped_column(
        _enum(ReferralStatus, "referral_status"), nullable=False, default=ReferralStatus.PENDING
    )
    reward_earned: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())
    xp_reward: Mapped[int] = mapped_column(Integer, nullable=False, default=50, server_default="50")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    claimed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


# ---------------------------------------------------------------------------
# Achievements
# ---------------------------------------------------------------------------


class UserAchievement(Base):
    """Achievements unlocked by users. UNIQUE(user_id, slug) prevents duplicates."""

    __tablename__ = "user_achievements"
    __table_args__ = (UniqueConstraint("user_id", "slug", name="user_achievements_user_id_slug_key"),)

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    slug: Mapped[str] = mapped_column(String(64), nullable=False)
    xp_bonus: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    unlocked_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)


# ---------------------------------------------------------------------------
# Community
# ---------------------------------------------------------------------------


class CommunitySubmission(Base):
    """Community-contributed content, optionally polished by text generation."""

    __tablename__ = "community_submissions"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    submitted_by: Mapped[str | None] = mapped_column(
        String(64), ForeignKey("users.id", ondelete="CASCADE"), nullable=True
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    original_content: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    polished: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())
    category: Mapped[str] = mapped_column(String(32), nullable=False, default="general")
    insights: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)
    estimated_read_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)
