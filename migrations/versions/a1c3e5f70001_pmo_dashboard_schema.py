"""pmo_dashboard_schema

Initial PMO dashboard schema: users, sessions, projects, simple projects,
dropdown options, PMO comments, admin activity log and system settings.

Revision ID: a1c3e5f70001
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect as sa_inspect


# revision identifiers, used by Alembic.
revision = "a1c3e5f70001"
down_revision = None
branch_labels = None
depends_on = None

DROPDOWN_TYPES = ("account_managers", "statuses", "phases", "priorities", "end_months")


def upgrade():
    bind = op.get_bind()
    inspector = sa_inspect(bind)
    existing_tables = set(inspector.get_table_names())

    if "users" not in existing_tables:
        op.create_table(
            "users",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("username", sa.String(length=100), nullable=False),
            sa.Column("email", sa.String(length=255), nullable=False),
            sa.Column("password_hash", sa.String(length=256), nullable=False),
            sa.Column("role", sa.String(length=20), nullable=False, server_default="viewer"),
            sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
            sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
            sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
            sa.CheckConstraint("role IN ('admin', 'manager', 'viewer')", name="ck_users_role"),
            sa.PrimaryKeyConstraint("id"),
            sa.UniqueConstraint("username"),
            sa.UniqueConstraint("email"),
        )

    if "sessions" not in existing_tables:
        op.create_table(
            "sessions",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("user_id", sa.Integer(), nullable=False),
            sa.Column("token_hash", sa.String(length=64), nullable=False),
            sa.Column("ip_address", sa.String(length=45), nullable=True),
            sa.Column("user_agent", sa.String(length=500), nullable=True),
            sa.Column("is_active", sa.Boolean(), nullable=True, server_default=sa.true()),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
            sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
            sa.Column("last_used_at", sa.DateTime(timezone=True), nullable=True),
            sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("id"),
            sa.UniqueConstraint("token_hash"),
        )

    if "projects" not in existing_tables:
        op.create_table(
            "projects",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("customer_name", sa.String(length=255), nullable=True),
            sa.Column("project_name", sa.String(length=255), nullable=False),
            sa.Column("account_manager", sa.String(length=255), nullable=True),
            sa.Column("status", sa.String(length=100), nullable=True),
            sa.Column("current_phase", sa.String(length=255), nullable=True),
            sa.Column("priority", sa.String(length=50), nullable=True),
            sa.Column("end_month", sa.String(length=50), nullable=True),
            sa.Column("status2", sa.String(length=100), nullable=True),
            sa.Column("pmo_comments", sa.Text(), nullable=True),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
            sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_projects_updated_at", "projects", ["updated_at"])
        op.create_index("ix_projects_status", "projects", ["status"])

    if "simple_projects" not in existing_tables:
        op.create_table(
            "simple_projects",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("project", sa.String(length=255), nullable=False),
            sa.Column("month", sa.String(length=10), nullable=True),
            sa.Column("status", sa.String(length=100), nullable=True),
            sa.Column("comments", sa.Text(), nullable=True),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
            sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
            sa.PrimaryKeyConstraint("id"),
        )

    if "dropdown_options" not in existing_tables:
        op.create_table(
            "dropdown_options",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column(
                "type",
                sa.Enum(*DROPDOWN_TYPES, name="dropdown_type", native_enum=False, length=50),
                nullable=False,
            ),
            sa.Column("value", sa.String(length=255), nullable=False),
            sa.Column("description", sa.String(length=500), nullable=True),
            sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
            sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
            sa.PrimaryKeyConstraint("id"),
            sa.UniqueConstraint("type", "value", name="uq_dropdown_type_value"),
        )

    if "pmo_comments" not in existing_tables:
        op.create_table(
            "pmo_comments",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("project_id", sa.Integer(), nullable=False),
            sa.Column("comment_text", sa.String(length=1000), nullable=False),
            sa.Column("added_by", sa.String(length=100), nullable=False),
            sa.Column("added_at", sa.DateTime(timezone=True), nullable=False),
            sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
            sa.ForeignKeyConstraint(["project_id"], ["projects.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_pmo_comments_project_id", "pmo_comments", ["project_id"])
        op.create_index("ix_pmo_comments_added_at", "pmo_comments", ["added_at"])

    if "admin_activity_log" not in existing_tables:
        op.create_table(
            "admin_activity_log",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("action", sa.String(length=100), nullable=False),
            sa.Column("details", sa.Text(), nullable=True),
            sa.Column("user_id", sa.Integer(), nullable=True),
            sa.Column("ip_address", sa.String(length=45), nullable=True),
            sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("idx_activity_ts", "admin_activity_log", ["timestamp"])
        op.create_index("idx_activity_action", "admin_activity_log", ["action"])

    if "system_settings" not in existing_tables:
        op.create_table(
            "system_settings",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("setting_key", sa.String(length=100), nullable=False),
            sa.Column("setting_value", sa.Text(), nullable=True),
            sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
            sa.PrimaryKeyConstraint("id"),
            sa.UniqueConstraint("setting_key"),
        )


def downgrade():
    bind = op.get_bind()
    inspector = sa_inspect(bind)
    existing_tables = set(inspector.get_table_names())

    if "system_settings" in existing_tables:
        op.drop_table("system_settings")
    if "admin_activity_log" in existing_tables:
        op.drop_index("idx_activity_action", table_name="admin_activity_log")
        op.drop_index("idx_activity_ts", table_name="admin_activity_log")
        op.drop_table("admin_activity_log")
    if "pmo_comments" in existing_tables:
        op.drop_index("ix_pmo_comments_added_at", table_name="pmo_comments")
        op.drop_index("ix_pmo_comments_project_id", table_name="pmo_comments")
        op.drop_table("pmo_comments")
    if "dropdown_options" in existing_tables:
        op.drop_table("dropdown_options")
    if "simple_projects" in existing_tables:
        op.drop_table("simple_projects")
    if "projects" in existing_tables:
        op.drop_index("ix_projects_status", table_name="projects")
        op.drop_index("ix_projects_updated_at", table_name="projects")
        op.drop_table("projects")
    if "sessions" in existing_tables:
        op.drop_table("sessions")
    if "users" in existing_tables:
        op.drop_table("users")
