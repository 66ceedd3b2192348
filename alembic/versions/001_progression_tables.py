"""Progression tables.

Creates users, profiles, xp_events, events, missions,
daily_mission_assignments, lesson_completions, referrals,
user_achievements and community_submissions.

Revision ID: 001_progression_tables
Revises:
Create Date: 2026-10-19
"""

from collections.abc import Sequence

from alembic import op

revision: str = "001_progression_tables"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # --- Identity and profile ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS users (
            id VARCHAR(64) PRIMARY KEY,
            email VARCHAR(320),
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE TABLE IF NOT EXISTS profiles (
            id VARCHAR(64) PRIMARY KEY REFERENCES users(id) ON DELETE CASCADE,
            display_name VARCHAR(128),
            path VARCHAR(16) CHECK (path IN ('builder', 'automator', 'dealmaker')),
            current_level INTEGER NOT NULL DEFAULT 1 CHECK (current_level >= 1),
            total_xp INTEGER NOT NULL DEFAULT 0 CHECK (total_xp >= 0),
            weekly_xp INTEGER NOT NULL DEFAULT 0 CHECK (weekly_xp >= 0),
            daily_xp INTEGER NOT NULL DEFAULT 0 CHECK (daily_xp >= 0),
            streak_days INTEGER NOT NULL DEFAULT 0 CHECK (streak_days >= 0),
            longest_streak INTEGER NOT NULL DEFAULT 0,
            last_activity_date DATE,
            referral_code VARCHAR(16) UNIQUE,
            referred_by_code VARCHAR(16),
            onboarding_completed BOOLEAN NOT NULL DEFAULT false,
            quiz_answers JSONB,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS ix_profiles_total_xp
        ON profiles(total_xp DESC, id)
    """)

    # --- Ledgers ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS xp_events (
            id BIGSERIAL PRIMARY KEY,
            user_id VARCHAR(64) NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            amount INTEGER NOT NULL,
            source VARCHAR(64) NOT NULL,
            description VARCHAR(256),
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS ix_xp_events_user_created
        ON xp_events(user_id, created_at)
    """)
    op.execute("""
        CREATE TABLE IF NOT EXISTS events (
            id BIGSERIAL PRIMARY KEY,
            user_id VARCHAR(64) REFERENCES users(id) ON DELETE CASCADE,
            type VARCHAR(64) NOT NULL,
            category VARCHAR(32) NOT NULL DEFAULT 'general'
                CHECK (category IN ('general', 'learning', 'gamification', 'social', 'achievement')),
            meta JSONB NOT NULL DEFAULT '{}',
            xp_impact INTEGER NOT NULL DEFAULT 0,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS ix_events_user_created
        ON events(user_id, created_at)
    """)

    # --- Missions ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS missions (
            id BIGSERIAL PRIMARY KEY,
            user_id VARCHAR(64) NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            template_id VARCHAR(64),
            title VARCHAR(200) NOT NULL,
            description TEXT NOT NULL DEFAULT '',
            category VARCHAR(32) NOT NULL DEFAULT 'general',
            difficulty_level INTEGER NOT NULL DEFAULT 1 CHECK (difficulty_level BETWEEN 1 AND 10),
            xp_reward INTEGER NOT NULL DEFAULT 0 CHECK (xp_reward >= 0),
            status VARCHAR(16) NOT NULL DEFAULT 'open' CHECK (status IN ('open', 'done', 'locked')),
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            completed_at TIMESTAMPTZ,
            CHECK ((status = 'done') = (completed_at IS NOT NULL))
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS ix_missions_user_status
        ON missions(user_id, status)
    """)
    op.execute("""
        CREATE TABLE IF NOT EXISTS daily_mission_assignments (
            id BIGSERIAL PRIMARY KEY,
            user_id VARCHAR(64) NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            assigned_date DATE NOT NULL,
            template_id VARCHAR(64) NOT NULL,
            mission_id BIGINT NOT NULL REFERENCES missions(id) ON DELETE CASCADE,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT daily_mission_assignments_user_id_assigned_date_key UNIQUE (user_id, assigned_date)
        )
    """)

    # --- Lessons ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS lesson_completions (
            id BIGSERIAL PRIMARY KEY,
            user_id VARCHAR(64) NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            lesson_id VARCHAR(128) NOT NULL,
            mission_id BIGINT REFERENCES missions(id) ON DELETE SET NULL,
            performance_score INTEGER NOT NULL CHECK (performance_score BETWEEN 0 AND 100),
            amazingness_rating INTEGER CHECK (amazingness_rating BETWEEN 1 AND 10),
            amazingness_score INTEGER NOT NULL CHECK (amazingness_score BETWEEN 0 AND 150),
            quality_tier VARCHAR(32) NOT NULL,
            xp_earned INTEGER NOT NULL,
            completion_time_seconds INTEGER,
            feedback JSONB,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS ix_lesson_completions_user
        ON lesson_completions(user_id)
    """)

    # --- Referrals ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS referrals (
            id BIGSERIAL PRIMARY KEY,
            ref_code VARCHAR(16) UNIQUE NOT NULL,
            referrer_id VARCHAR(64) NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            referee_id VARCHAR(64) REFERENCES users(id) ON DELETE SET NULL,
            referred_email VARCHAR(320),
            status VARCHAR(16) NOT NULL DEFAULT 'pending'
                CHECK (status IN ('pending', 'completed', 'cancelled')),
            reward_earned BOOLEAN NOT NULL DEFAULT false,
            xp_reward INTEGER NOT NULL DEFAULT 50,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            completed_at TIMESTAMPTZ,
            claimed_at TIMESTAMPTZ,
            CHECK (NOT reward_earned OR status = 'completed')
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS ix_referrals_referrer_id
        ON referrals(referrer_id)
    """)

    # --- Achievements ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS user_achievements (
            id BIGSERIAL PRIMARY KEY,
            user_id VARCHAR(64) NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            slug VARCHAR(64) NOT NULL,
            xp_bonus INTEGER NOT NULL DEFAULT 0,
            unlocked_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT user_achievements_user_id_slug_key UNIQUE (user_id, slug)
        )
    """)

    # --- Community ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS community_submissions (
            id BIGSERIAL PRIMARY KEY,
            submitted_by VARCHAR(64) REFERENCES users(id) ON DELETE CASCADE,
            title VARCHAR(200) NOT NULL,
            original_content TEXT NOT NULL,
            content TEXT NOT NULL,
            polished BOOLEAN NOT NULL DEFAULT false,
            category VARCHAR(32) NOT NULL DEFAULT 'general',
            insights JSONB NOT NULL DEFAULT '[]',
            estimated_read_minutes INTEGER NOT NULL DEFAULT 1,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS community_submissions CASCADE")
    op.execute("DROP TABLE IF EXISTS user_achievements CASCADE")
    op.execute("DROP TABLE IF EXISTS referrals CASCADE")
    op.execute("DROP TABLE IF EXISTS lesson_completions CASCADE")
    op.execute("DROP TABLE IF EXISTS daily_mission_assignments CASCADE")
    op.execute("DROP TABLE IF EXISTS missions CASCADE")
    op.execute("DROP TABLE IF EXISTS events CASCADE")
    op.execute("DROP TABLE IF EXISTS xp_events CASCADE")
    op.execute("DROP TABLE IF EXISTS profiles CASCADE")
    op.execute("DROP TABLE IF EXISTS users CASCADE")
