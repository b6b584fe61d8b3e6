"""Initial schema for Diligence Labs

Revision ID: 20261019_000000
Revises: None
Create Date: 2026-10-19 00:00:00.000000

Creates every table of the Diligence Labs service:
- Accounts (users, user reputations, achievements, admin users, admin keys)
- Consultations (sessions, reports), staff assignments and subscriptions
- Expert workflow (expert profiles, projects, assignments, evaluations)
- Rewards (distributions, payouts) and audit logs

Revision format: YYYYMMDD_HHMMSS_description

"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "20261019_000000"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list:
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def upgrade() -> None:
    """Create all tables."""

    # Create users table
    op.create_table(
        "users",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=True),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("role", sa.String(), nullable=False, server_default="USER"),
        sa.Column("account_status", sa.String(), nullable=False, server_default="ACTIVE"),
        sa.Column("password_hash", sa.String(), nullable=True),
        sa.Column("email_verified", sa.DateTime(), nullable=True),
        sa.Column("email_verification_token", sa.String(), nullable=True),
        sa.Column("email_verification_expires", sa.DateTime(), nullable=True),
        sa.Column("password_reset_token", sa.String(), nullable=True),
        sa.Column("password_reset_expires", sa.DateTime(), nullable=True),
        sa.Column("failed_login_attempts", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("account_locked_until", sa.DateTime(), nullable=True),
        sa.Column("status_reason", sa.String(), nullable=True),
        sa.Column("status_changed_at", sa.DateTime(), nullable=True),
        sa.Column("status_changed_by", sa.String(), nullable=True),
        sa.Column("free_consultation_used", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("free_consultation_date", sa.DateTime(), nullable=True),
        sa.Column("submitter_tier", sa.String(), nullable=False, server_default="BASIC"),
        sa.Column("monthly_project_limit", sa.Integer(), nullable=False, server_default="5"),
        sa.Column("monthly_projects_used", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_reset_date", sa.DateTime(), nullable=False),
        sa.Column("total_projects_submitted", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("reputation_points", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
        sa.Index("ix_users_email", "email"),
        sa.Index("ix_users_email_verification_token", "email_verification_token"),
        sa.Index("ix_users_password_reset_token", "password_reset_token"),
        sa.Index("ix_users_created_at", "created_at"),
    )

    # Create admin_users table
    op.create_table(
        "admin_users",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("password_hash", sa.String(), nullable=False),
        sa.Column("role", sa.String(), nullable=False, server_default="ADMIN"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("last_login", sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
        sa.Index("ix_admin_users_email", "email"),
    )

    # Create admin_keys table
    op.create_table(
        "admin_keys",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("key", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("expires_at", sa.DateTime(), nullable=True),
        sa.Column("max_usages", sa.Integer(), nullable=True),
        sa.Column("usage_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_by", sa.String(), sa.ForeignKey("admin_users.id"), nullable=True),
        sa.Column("last_used_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("key"),
        sa.Index("ix_admin_keys_key", "key"),
    )

    # Create user_reputations table
    op.create_table(
        "user_reputations",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("total_points", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("level", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("projects_submitted", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("quality_projects", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id"),
        sa.Index("ix_user_reputations_user_id", "user_id"),
    )

    # Create sessions table
    op.create_table(
        "sessions",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("consultation_type", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("status", sa.String(), nullable=False, server_default="PENDING"),
        sa.Column("scheduled_at", sa.DateTime(), nullable=True),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        sa.Column("duration_minutes", sa.Integer(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("guest_email", sa.String(), nullable=True),
        sa.Column("guest_name", sa.String(), nullable=True),
        sa.Column("guest_phone", sa.String(), nullable=True),
        sa.Column("is_free_consultation", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("client_ip_address", sa.String(), nullable=True),
        sa.Column("client_fingerprint", sa.String(), nullable=True),
        sa.Column("account_creation_token", sa.String(), nullable=True),
        sa.Column("account_creation_token_expires", sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("account_creation_token"),
        sa.Index("ix_sessions_user_id", "user_id"),
        sa.Index("ix_sessions_status", "status"),
        sa.Index("ix_sessions_guest_email", "guest_email"),
        sa.Index("ix_sessions_client_ip_address", "client_ip_address"),
        sa.Index("ix_sessions_client_fingerprint", "client_fingerprint"),
        sa.Index("ix_sessions_created_at", "created_at"),
    )

    # Create reports table
    op.create_table(
        "reports",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("type", sa.String(), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("status", sa.String(), nullable=False, server_default="PENDING"),
        sa.Column("file_url", sa.String(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_reports_user_id", "user_id"),
        sa.Index("ix_reports_status", "status"),
        sa.Index("ix_reports_created_at", "created_at"),
    )

    # Create staff_assignments table
    op.create_table(
        "staff_assignments",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("item_type", sa.String(), nullable=False),
        sa.Column("item_id", sa.String(), nullable=False),
        sa.Column("assignee_id", sa.String(), sa.ForeignKey("admin_users.id"), nullable=False),
        sa.Column("assigned_by", sa.String(), sa.ForeignKey("admin_users.id"), nullable=True),
        sa.Column("role", sa.String(), nullable=False, server_default="LEAD"),
        sa.Column("status", sa.String(), nullable=False, server_default="ASSIGNED"),
        sa.Column("estimated_hours", sa.Integer(), nullable=True),
        sa.Column("actual_hours", sa.Integer(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("started_at", sa.DateTime(), nullable=True),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_staff_assignments_item_type", "item_type"),
        sa.Index("ix_staff_assignments_item_id", "item_id"),
        sa.Index("ix_staff_assignments_assignee_id", "assignee_id"),
        sa.Index("ix_staff_assignments_status", "status"),
    )

    # Create subscriptions table
    op.create_table(
        "subscriptions",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("plan_type", sa.String(), nullable=False),
        sa.Column("billing_cycle", sa.String(), nullable=False, server_default="MONTHLY"),
        sa.Column("status", sa.String(), nullable=False, server_default="ACTIVE"),
        sa.Column("amount", sa.Float(), nullable=False, server_default="0"),
        sa.Column("current_period_start", sa.DateTime(), nullable=False),
        sa.Column("current_period_end", sa.DateTime(), nullable=False),
        sa.Column("cancel_at_period_end", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("canceled_at", sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_subscriptions_user_id", "user_id"),
        sa.Index("ix_subscriptions_status", "status"),
        sa.Index("ix_subscriptions_current_period_end", "current_period_end"),
        sa.Index("ix_subscriptions_created_at", "created_at"),
    )

    # Create expert_profiles table
    op.create_table(
        "expert_profiles",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("linkedin_url", sa.String(), nullable=True),
        sa.Column("github_url", sa.String(), nullable=True),
        sa.Column("twitter_handle", sa.String(), nullable=True),
        sa.Column("company", sa.String(), nullable=True),
        sa.Column("position", sa.String(), nullable=True),
        sa.Column("years_experience", sa.Integer(), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("primary_expertise", sa.Text(), nullable=False, server_default="[]"),
        sa.Column("secondary_expertise", sa.Text(), nullable=False, server_default="[]"),
        sa.Column("verification_status", sa.String(), nullable=False, server_default="PENDING"),
        sa.Column("expert_tier", sa.String(), nullable=False, server_default="BRONZE"),
        sa.Column("reputation_points", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_evaluations", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("monthly_evaluations", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_rewards", sa.Float(), nullable=False, server_default="0"),
        sa.Column("verified_at", sa.DateTime(), nullable=True),
        sa.Column("review_notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id"),
        sa.Index("ix_expert_profiles_user_id", "user_id"),
        sa.Index("ix_expert_profiles_verification_status", "verification_status"),
        sa.Index("ix_expert_profiles_reputation_points", "reputation_points"),
    )

    # Create achievements table
    op.create_table(
        "achievements",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("expert_id", sa.String(), sa.ForeignKey("expert_profiles.id"), nullable=True),
        sa.Column("achievement_type", sa.String(), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("points_awarded", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_achievements_user_id", "user_id"),
        sa.Index("ix_achievements_expert_id", "expert_id"),
    )

    # Create projects table
    op.create_table(
        "projects",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("category", sa.String(), nullable=False),
        sa.Column("website", sa.String(), nullable=True),
        sa.Column("team_size", sa.Integer(), nullable=True),
        sa.Column("blockchain", sa.String(), nullable=True),
        sa.Column("technology_stack", sa.Text(), nullable=False, server_default="[]"),
        sa.Column("smart_contract", sa.String(), nullable=True),
        sa.Column("repository", sa.String(), nullable=True),
        sa.Column("whitepaper", sa.String(), nullable=True),
        sa.Column("funding_raised", sa.Float(), nullable=True),
        sa.Column("user_base", sa.Integer(), nullable=True),
        sa.Column("monthly_revenue", sa.Float(), nullable=True),
        sa.Column("evaluation_deadline", sa.DateTime(), nullable=True),
        sa.Column("priority_level", sa.String(), nullable=False, server_default="MEDIUM"),
        sa.Column("evaluation_budget", sa.Float(), nullable=True),
        sa.Column("twitter_handle", sa.String(), nullable=True),
        sa.Column("linkedin_profile", sa.String(), nullable=True),
        sa.Column("discord_server", sa.String(), nullable=True),
        sa.Column("telegram_group", sa.String(), nullable=True),
        sa.Column("submitter_id", sa.String(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("status", sa.String(), nullable=False, server_default="SUBMITTED"),
        sa.Column("overall_score", sa.Float(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_projects_category", "category"),
        sa.Index("ix_projects_submitter_id", "submitter_id"),
        sa.Index("ix_projects_status", "status"),
        sa.Index("ix_projects_created_at", "created_at"),
    )

    # Create project_assignments table
    op.create_table(
        "project_assignments",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("project_id", sa.String(), sa.ForeignKey("projects.id"), nullable=False),
        sa.Column("expert_id", sa.String(), sa.ForeignKey("expert_profiles.id"), nullable=False),
        sa.Column("assignment_type", sa.String(), nullable=False, server_default="PRIMARY"),
        sa.Column("status", sa.String(), nullable=False, server_default="ASSIGNED"),
        sa.Column("estimated_hours", sa.Integer(), nullable=True),
        sa.Column("specialization", sa.String(), nullable=True),
        sa.Column("assigned_at", sa.DateTime(), nullable=False),
        sa.Column("accepted_at", sa.DateTime(), nullable=True),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("project_id", "expert_id", name="uq_project_assignments_project_expert"),
        sa.Index("ix_project_assignments_project_id", "project_id"),
        sa.Index("ix_project_assignments_expert_id", "expert_id"),
        sa.Index("ix_project_assignments_status", "status"),
    )

    # Create project_evaluations table
    section_columns = []
    for section in ("team", "pmf", "infrastructure", "status", "competitive", "risk"):
        section_columns.append(sa.Column(f"{section}_score", sa.Float(), nullable=True))
        section_columns.append(sa.Column(f"{section}_comments", sa.Text(), nullable=True))
    op.create_table(
        "project_evaluations",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("project_id", sa.String(), sa.ForeignKey("projects.id"), nullable=False),
        sa.Column("expert_id", sa.String(), sa.ForeignKey("expert_profiles.id"), nullable=False),
        sa.Column("assignment_id", sa.String(), sa.ForeignKey("project_assignments.id"), nullable=True),
        *section_columns,
        sa.Column("overall_score", sa.Float(), nullable=True),
        sa.Column("overall_comments", sa.Text(), nullable=True),
        sa.Column("recommendation", sa.String(), nullable=True),
        sa.Column("confidence_level", sa.Float(), nullable=True),
        sa.Column("status", sa.String(), nullable=False, server_default="DRAFT"),
        sa.Column("submitted_at", sa.DateTime(), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(), nullable=True),
        sa.Column("reviewed_by", sa.String(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("project_id", "expert_id", name="uq_project_evaluations_project_expert"),
        sa.Index("ix_project_evaluations_project_id", "project_id"),
        sa.Index("ix_project_evaluations_expert_id", "expert_id"),
        sa.Index("ix_project_evaluations_status", "status"),
    )

    # Create reward_distributions table
    op.create_table(
        "reward_distributions",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("project_id", sa.String(), sa.ForeignKey("projects.id"), nullable=False),
        sa.Column("total_fee", sa.Float(), nullable=False),
        sa.Column("platform_fee", sa.Float(), nullable=False),
        sa.Column("expert_pool", sa.Float(), nullable=False),
        sa.Column("submitter_bonus", sa.Float(), nullable=False),
        sa.Column("status", sa.String(), nullable=False, server_default="PENDING"),
        sa.Column("distributed_by", sa.String(), nullable=True),
        sa.Column("distributed_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_reward_distributions_project_id", "project_id"),
        sa.Index("ix_reward_distributions_created_at", "created_at"),
    )

    # Create expert_payouts table
    op.create_table(
        "expert_payouts",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("distribution_id", sa.String(), sa.ForeignKey("reward_distributions.id"), nullable=False),
        sa.Column("user_id", sa.String(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("expert_id", sa.String(), sa.ForeignKey("expert_profiles.id"), nullable=True),
        sa.Column("evaluation_id", sa.String(), sa.ForeignKey("project_evaluations.id"), nullable=True),
        sa.Column("payout_type", sa.String(), nullable=False, server_default="EVALUATION_REWARD"),
        sa.Column("amount", sa.Float(), nullable=False),
        sa.Column("multiplier", sa.Float(), nullable=False, server_default="1"),
        sa.Column("status", sa.String(), nullable=False, server_default="PENDING"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_expert_payouts_distribution_id", "distribution_id"),
        sa.Index("ix_expert_payouts_user_id", "user_id"),
        sa.Index("ix_expert_payouts_expert_id", "expert_id"),
    )

    # Create activity_logs table
    op.create_table(
        "activity_logs",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("admin_id", sa.String(), sa.ForeignKey("admin_users.id"), nullable=True),
        sa.Column("action", sa.String(), nullable=False),
        sa.Column("details", sa.Text(), nullable=False, server_default="{}"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_activity_logs_user_id", "user_id"),
        sa.Index("ix_activity_logs_admin_id", "admin_id"),
        sa.Index("ix_activity_logs_action", "action"),
        sa.Index("ix_activity_logs_created_at", "created_at"),
    )

    # Create admin_notification_logs table
    op.create_table(
        "admin_notification_logs",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("admin_id", sa.String(), sa.ForeignKey("admin_users.id"), nullable=True),
        sa.Column("notification_type", sa.String(), nullable=False),
        sa.Column("subject", sa.String(), nullable=False),
        sa.Column("recipient_email", sa.String(), nullable=False),
        sa.Column("days_remaining", sa.Integer(), nullable=True),
        sa.Column("success", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("details", sa.Text(), nullable=False, server_default="{}"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_admin_notification_logs_user_id", "user_id"),
        sa.Index("ix_admin_notification_logs_notification_type", "notification_type"),
        sa.Index("ix_admin_notification_logs_created_at", "created_at"),
    )


def downgrade() -> None:
    """Drop all tables created in upgrade."""
    op.drop_table("admin_notification_logs")
    op.drop_table("staff_assignments")
    op.drop_table("activity_logs")
    op.drop_table("expert_payouts")
    op.drop_table("reward_distributions")
    op.drop_table("project_evaluations")
    op.drop_table("project_assignments")
    op.drop_table("projects")
    op.drop_table("achievements")
    op.drop_table("expert_profiles")
    op.drop_table("subscriptions")
    op.drop_table("reports")
    op.drop_table("sessions")
    op.drop_table("user_reputations")
    op.drop_table("admin_keys")
    op.drop_table("admin_users")
    op.drop_table("users")
