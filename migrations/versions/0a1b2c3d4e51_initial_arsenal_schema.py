"""initial_arsenal_schema

Create users, projects, submissions, incubation_projects and audit_log.

Revision ID: 0a1b2c3d4e51
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect as sa_inspect


# revision identifiers, used by Alembic.
revision = "0a1b2c3d4e51"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade():
    bind = op.get_bind()
    existing_tables = set(sa_inspect(bind).get_table_names())

    if "users" not in existing_tables:
        op.create_table(
            "users",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("email", sa.String(length=255), nullable=False),
            sa.Column("name", sa.String(length=200), nullable=False),
            sa.Column("role", sa.String(length=20), nullable=False, server_default="user"),
            sa.Column("theatre", sa.String(length=20), nullable=True),
            *_timestamps(),
            sa.PrimaryKeyConstraint("id"),
            sa.UniqueConstraint("email"),
            sa.CheckConstraint("role IN ('user', 'moderator', 'admin')", name="ck_users_role"),
        )

    if "projects" not in existing_tables:
        op.create_table(
            "projects",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("name", sa.String(length=200), nullable=False),
            sa.Column("description", sa.Text(), nullable=True),
            sa.Column("link", sa.String(length=500), nullable=True),
            sa.Column("repo", sa.String(length=300), nullable=True),
            sa.Column("product", sa.String(length=50), nullable=True),
            sa.Column("theatre", sa.String(length=20), nullable=True),
            sa.Column("usecase", sa.Text(), nullable=True),
            sa.Column("language", sa.String(length=50), nullable=True),
            sa.Column("status", sa.String(length=20), nullable=False, server_default="draft"),
            sa.Column("submitted_by", sa.String(length=36), nullable=False),
            sa.Column("reviewed_by", sa.String(length=36), nullable=True),
            sa.Column("tags", sa.JSON(), nullable=True),
            sa.Column("technical_stack", sa.JSON(), nullable=True),
            sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
            *_timestamps(),
            sa.ForeignKeyConstraint(["submitted_by"], ["users.id"], ondelete="RESTRICT"),
            sa.ForeignKeyConstraint(["reviewed_by"], ["users.id"], ondelete="SET NULL"),
            sa.PrimaryKeyConstraint("id"),
            sa.UniqueConstraint("name"),
        )
        op.create_index("idx_projects_status", "projects", ["status"])
        op.create_index("idx_projects_product", "projects", ["product"])
        op.create_index("idx_projects_theatre", "projects", ["theatre"])
        op.create_index("idx_projects_submitted_by", "projects", ["submitted_by"])

    if "submissions" not in existing_tables:
        op.create_table(
            "submissions",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("data", sa.JSON(), nullable=False),
            sa.Column("status", sa.String(length=20), nullable=False, server_default="draft"),
            sa.Column("submitted_by", sa.String(length=36), nullable=False),
            sa.Column("reviewed_by", sa.String(length=36), nullable=True),
            sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
            sa.Column("rejection_reason", sa.Text(), nullable=True),
            sa.Column("review_notes", sa.Text(), nullable=True),
            sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=True),
            *_timestamps(),
            sa.ForeignKeyConstraint(["submitted_by"], ["users.id"], ondelete="CASCADE"),
            sa.ForeignKeyConstraint(["reviewed_by"], ["users.id"], ondelete="SET NULL"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("idx_submissions_status", "submissions", ["status"])
        op.create_index("idx_submissions_submitted_by", "submissions", ["submitted_by"])

    if "incubation_projects" not in existing_tables:
        op.create_table(
            "incubation_projects",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("project_id", sa.String(length=36), nullable=False),
            sa.Column("status", sa.String(length=20), nullable=False, server_default="nominated"),
            sa.Column("target", sa.String(length=30), nullable=False),
            sa.Column("nominated_by", sa.String(length=36), nullable=True),
            sa.Column("maturity_score", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("notes", sa.Text(), nullable=True),
            *_timestamps(),
            sa.ForeignKeyConstraint(["project_id"], ["projects.id"], ondelete="CASCADE"),
            sa.ForeignKeyConstraint(["nominated_by"], ["users.id"], ondelete="SET NULL"),
            sa.PrimaryKeyConstraint("id"),
            sa.CheckConstraint(
                "maturity_score >= 0 AND maturity_score <= 100",
                name="ck_incubation_maturity_range",
            ),
        )
        op.create_index("idx_incubation_project", "incubation_projects", ["project_id"])
        op.create_index("idx_incubation_status", "incubation_projects", ["status"])

    if "audit_log" not in existing_tables:
        op.create_table(
            "audit_log",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("action", sa.String(length=60), nullable=False),
            sa.Column("resource_type", sa.String(length=40), nullable=False),
            sa.Column("resource_id", sa.String(length=36), nullable=False,
                      comment="PK of the referenced entity"),
            sa.Column("user_id", sa.String(length=36), nullable=True),
            sa.Column("user_email", sa.String(length=255), nullable=True),
            sa.Column("details", sa.JSON(), nullable=True),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
            sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="SET NULL"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("idx_audit_resource", "audit_log", ["resource_type", "resource_id"])
        op.create_index("idx_audit_action", "audit_log", ["action"])
        op.create_index("idx_audit_user", "audit_log", ["user_id"])
        op.create_index("idx_audit_created_at", "audit_log", ["created_at"])


def downgrade():
    op.drop_table("audit_log")
    op.drop_table("incubation_projects")
    op.drop_table("submissions")
    op.drop_table("projects")
    op.drop_table("users")
