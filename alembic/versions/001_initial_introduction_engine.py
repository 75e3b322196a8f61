"""initial schema: users, organizations, sponsors, candidates, job roles,
introduction requests, privacy firewall events, credit ledger, notifications

Revision ID: 001
Revises:
Create Date: 2026-10-17

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("hashed_password", sa.String(length=1024), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("is_superuser", sa.Boolean(), nullable=False),
        sa.Column("is_verified", sa.Boolean(), nullable=False),
        sa.Column("full_name", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index(op.f("ix_users_id"), "users", ["id"], unique=False)
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)

    op.create_table(
        "organizations",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("slug", sa.String(), nullable=True),
        sa.Column("introduction_credit_balance", sa.Integer(), server_default="0", nullable=False),
        sa.Column("subscription_expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("introduction_credit_balance >= 0", name="ck_organizations_credit_balance_non_negative"),
    )
    op.create_index(op.f("ix_organizations_id"), "organizations", ["id"], unique=False)
    op.create_index(op.f("ix_organizations_slug"), "organizations", ["slug"], unique=True)

    op.create_table(
        "sponsors",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("organization_id", sa.Integer(), sa.ForeignKey("organizations.id"), nullable=False),
        sa.Column("job_title", sa.String(), nullable=True),
        sa.Column("can_send_introductions", sa.Boolean(), nullable=False),
        sa.Column("can_create_roles", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
    )
    op.create_index(op.f("ix_sponsors_id"), "sponsors", ["id"], unique=False)
    op.create_index(op.f("ix_sponsors_user_id"), "sponsors", ["user_id"], unique=True)
    op.create_index(op.f("ix_sponsors_organization_id"), "sponsors", ["organization_id"], unique=False)

    op.create_table(
        "candidates",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("first_name", sa.String(), nullable=False),
        sa.Column("last_name", sa.String(), nullable=False),
        sa.Column("headline", sa.String(), nullable=True),
        sa.Column("summary", sa.Text(), nullable=True),
        sa.Column("current_title", sa.String(), nullable=True),
        sa.Column("current_employer", sa.String(), nullable=True),
        sa.Column("location_city", sa.String(), nullable=True),
        sa.Column("location_country", sa.String(), nullable=True),
        sa.Column("years_of_experience", sa.Integer(), nullable=True),
        sa.Column("linkedin_url", sa.String(), nullable=True),
        sa.Column("portfolio_url", sa.String(), nullable=True),
        sa.Column("employment_history", sa.JSON(), nullable=True),
        sa.Column("skills", sa.JSON(), nullable=True),
        sa.Column("open_to_opportunities", sa.Boolean(), nullable=False),
        sa.Column("confidential_search", sa.Boolean(), nullable=False),
        sa.Column("hide_from_org_ids", sa.JSON(), nullable=True),
        sa.Column("verification_status", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index(op.f("ix_candidates_id"), "candidates", ["id"], unique=False)
    op.create_index(op.f("ix_candidates_user_id"), "candidates", ["user_id"], unique=True)

    op.create_table(
        "job_roles",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("organization_id", sa.Integer(), sa.ForeignKey("organizations.id"), nullable=False),
        sa.Column("created_by_sponsor_id", sa.Integer(), sa.ForeignKey("sponsors.id"), nullable=True),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("location", sa.String(), nullable=True),
        sa.Column("is_confidential", sa.Boolean(), nullable=False),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("filled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("closed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index(op.f("ix_job_roles_id"), "job_roles", ["id"], unique=False)
    op.create_index(op.f("ix_job_roles_organization_id"), "job_roles", ["organization_id"], unique=False)
    op.create_index(op.f("ix_job_roles_created_by_sponsor_id"), "job_roles", ["created_by_sponsor_id"], unique=False)
    op.create_index(op.f("ix_job_roles_status"), "job_roles", ["status"], unique=False)

    op.create_table(
        "introduction_requests",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("job_role_id", sa.Integer(), sa.ForeignKey("job_roles.id"), nullable=False),
        sa.Column("organization_id", sa.Integer(), sa.ForeignKey("organizations.id"), nullable=False),
        sa.Column("sent_by_sponsor_id", sa.Integer(), sa.ForeignKey("sponsors.id"), nullable=False),
        sa.Column("candidate_id", sa.Integer(), sa.ForeignKey("candidates.id"), nullable=False),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("sent_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("responded_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("withdrawn_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("viewed_by_candidate", sa.Boolean(), nullable=False),
        sa.Column("viewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("credits_refunded", sa.Boolean(), nullable=False),
    )
    for column in ("id", "job_role_id", "organization_id", "sent_by_sponsor_id", "candidate_id", "status", "expires_at"):
        op.create_index(op.f(f"ix_introduction_requests_{column}"), "introduction_requests", [column], unique=False)
    op.create_index(
        "ix_introduction_requests_candidate_org", "introduction_requests", ["candidate_id", "organization_id"], unique=False
    )
    op.create_index(
        "ix_introduction_requests_candidate_role", "introduction_requests", ["candidate_id", "job_role_id"], unique=False
    )

    op.create_table(
        "privacy_firewall_events",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("candidate_id", sa.Integer(), sa.ForeignKey("candidates.id"), nullable=False),
        sa.Column("organization_id", sa.Integer(), sa.ForeignKey("organizations.id"), nullable=False),
        sa.Column("event_type", sa.String(), nullable=False),
        sa.Column("reason", sa.String(), nullable=False),
        sa.Column("occurred_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(op.f("ix_privacy_firewall_events_id"), "privacy_firewall_events", ["id"], unique=False)
    op.create_index(op.f("ix_privacy_firewall_events_candidate_id"), "privacy_firewall_events", ["candidate_id"], unique=False)
    op.create_index(
        op.f("ix_privacy_firewall_events_organization_id"), "privacy_firewall_events", ["organization_id"], unique=False
    )
    op.create_index(
        "ix_privacy_firewall_events_candidate_occurred",
        "privacy_firewall_events",
        ["candidate_id", "occurred_at"],
        unique=False,
    )

    op.create_table(
        "credit_ledger_entries",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("organization_id", sa.Integer(), sa.ForeignKey("organizations.id"), nullable=False),
        sa.Column("delta", sa.Integer(), nullable=False),
        sa.Column("balance_after", sa.Integer(), nullable=False),
        sa.Column("reason", sa.String(), nullable=False),
        sa.Column("external_ref", sa.String(), nullable=True),
        sa.Column("introduction_id", sa.Integer(), sa.ForeignKey("introduction_requests.id"), nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
    )
    op.create_index(op.f("ix_credit_ledger_entries_id"), "credit_ledger_entries", ["id"], unique=False)
    op.create_index(
        op.f("ix_credit_ledger_entries_organization_id"), "credit_ledger_entries", ["organization_id"], unique=False
    )
    op.create_index(op.f("ix_credit_ledger_entries_external_ref"), "credit_ledger_entries", ["external_ref"], unique=True)
    op.create_index(
        op.f("ix_credit_ledger_entries_introduction_id"), "credit_ledger_entries", ["introduction_id"], unique=False
    )

    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("notification_type", sa.String(), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("related_entity_type", sa.String(), nullable=True),
        sa.Column("related_entity_id", sa.Integer(), nullable=True),
        sa.Column("link", sa.String(), nullable=True),
        sa.Column("channel", sa.String(), nullable=False),
        sa.Column("dedupe_key", sa.String(), nullable=True),
        sa.Column("is_read", sa.Boolean(), nullable=False),
        sa.Column("read_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
    )
    op.create_index(op.f("ix_notifications_id"), "notifications", ["id"], unique=False)
    op.create_index(op.f("ix_notifications_user_id"), "notifications", ["user_id"], unique=False)
    op.create_index(op.f("ix_notifications_dedupe_key"), "notifications", ["dedupe_key"], unique=True)


def downgrade() -> None:
    op.drop_table("notifications")
    op.drop_table("credit_ledger_entries")
    op.drop_table("privacy_firewall_events")
    op.drop_table("introduction_requests")
    op.drop_table("job_roles")
    op.drop_table("candidates")
    op.drop_table("sponsors")
    op.drop_table("organizations")
    op.drop_table("users")
