"""create users, challenges, onboarding steps and submissions

Revision ID: 4d2e9a7c1b30
Revises:
Create Date: 2026-10-16 09:00:00.000000
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "4d2e9a7c1b30"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("username", sa.String(length=100), nullable=True),
        sa.Column("role", sa.String(length=20), nullable=False, server_default="learner"),
        sa.Column("total_xp", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("latest_completed_step", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_blocked", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)

    op.create_table(
        "challenges",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("difficulty", sa.String(length=20), nullable=False),
        sa.Column("challenge_type", sa.String(length=30), nullable=False),
        sa.Column("requirements", sa.JSON(), nullable=False),
        sa.Column("xp_reward", sa.Integer(), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("created_by", sa.String(length=64), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["created_by"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_challenges_title"), "challenges", ["title"], unique=False)
    op.create_index(op.f("ix_challenges_challenge_type"), "challenges", ["challenge_type"], unique=False)
    op.create_index(op.f("ix_challenges_status"), "challenges", ["status"], unique=False)

    op.create_table(
        "onboarding_steps",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("step_number", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("prompt_instructions", sa.Text(), nullable=True),
        sa.Column("video_url", sa.Text(), nullable=True),
        sa.Column("submission_type", sa.String(length=30), nullable=False),
        sa.Column("submission_label", sa.String(length=200), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_onboarding_steps_step_number"), "onboarding_steps", ["step_number"], unique=True)

    op.create_table(
        "submissions",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("challenge_id", sa.String(length=64), nullable=False),
        sa.Column("onboarding_step_id", sa.String(length=64), nullable=True),
        sa.Column("parent_submission_id", sa.String(length=64), nullable=True),
        sa.Column("submission_type", sa.String(length=40), nullable=False),
        sa.Column("submission_data", sa.JSON(), nullable=True),
        sa.Column("solution_url", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("feedback", sa.Text(), nullable=True),
        sa.Column("reviewed_by", sa.String(length=64), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["challenge_id"], ["challenges.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["onboarding_step_id"], ["onboarding_steps.id"]),
        sa.ForeignKeyConstraint(["parent_submission_id"], ["submissions.id"]),
        sa.ForeignKeyConstraint(["reviewed_by"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_submissions_user_id"), "submissions", ["user_id"], unique=False)
    op.create_index(op.f("ix_submissions_challenge_id"), "submissions", ["challenge_id"], unique=False)
    op.create_index(op.f("ix_submissions_onboarding_step_id"), "submissions", ["onboarding_step_id"], unique=False)
    op.create_index(op.f("ix_submissions_parent_submission_id"), "submissions", ["parent_submission_id"], unique=False)
    op.create_index(op.f("ix_submissions_status"), "submissions", ["status"], unique=False)
    op.create_index(op.f("ix_submissions_created_at"), "submissions", ["created_at"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_submissions_created_at"), table_name="submissions")
    op.drop_index(op.f("ix_submissions_status"), table_name="submissions")
    op.drop_index(op.f("ix_submissions_parent_submission_id"), table_name="submissions")
    op.drop_index(op.f("ix_submissions_onboarding_step_id"), table_name="submissions")
    op.drop_index(op.f("ix_submissions_challenge_id"), table_name="submissions")
    op.drop_index(op.f("ix_submissions_user_id"), table_name="submissions")
    op.drop_table("submissions")
    op.drop_index(op.f("ix_onboarding_steps_step_number"), table_name="onboarding_steps")
    op.drop_table("onboarding_steps")
    op.drop_index(op.f("ix_challenges_status"), table_name="challenges")
    op.drop_index(op.f("ix_challenges_challenge_type"), table_name="challenges")
    op.drop_index(op.f("ix_challenges_title"), table_name="challenges")
    op.drop_table("challenges")
    op.drop_index(op.f("ix_users_email"), table_name="users")
    op.drop_table("users")
