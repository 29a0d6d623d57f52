"""Initial portal schema: users, tokens, projects, folders, assets, deliveries, upload sessions

Revision ID: 0001
Revises: None
Create Date: 2026-10-17 09:00:00
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        "user",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("role", sa.String(16), nullable=False, comment="ADMIN | STAFF | CLIENT"),
        *_timestamps(),
        mysql_charset="utf8mb4",
        mysql_collate="utf8mb4_unicode_ci",
    )
    op.create_index("ix_user_email", "user", ["email"])

    op.create_table(
        "auth_tokens",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("token", sa.String(512), nullable=False, unique=True),
        sa.Column("user_id", sa.String(64), sa.ForeignKey("user.id", ondelete="CASCADE"), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("revoked_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        mysql_charset="utf8mb4",
        mysql_collate="utf8mb4_unicode_ci",
    )
    op.create_index("idx_auth_tokens_user_id", "auth_tokens", ["user_id"])

    op.create_table(
        "projects",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("title", sa.String(255), nullable=True),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("status", sa.String(16), nullable=False, comment="PENDING | IN_PROGRESS | COMPLETED"),
        sa.Column("client_id", sa.String(64), sa.ForeignKey("user.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("created_by_id", sa.String(64), sa.ForeignKey("user.id", ondelete="SET NULL"), nullable=True),
        *_timestamps(),
        mysql_charset="utf8mb4",
        mysql_collate="utf8mb4_unicode_ci",
    )
    op.create_index("idx_projects_client_id_created_at", "projects", ["client_id", "created_at"])

    op.create_table(
        "project_staff_assignments",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("project_id", sa.String(64), sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False),
        sa.Column("staff_id", sa.String(64), sa.ForeignKey("user.id", ondelete="CASCADE"), nullable=False),
        sa.Column("assigned_by_id", sa.String(64), sa.ForeignKey("user.id", ondelete="SET NULL"), nullable=True),
        sa.Column("assigned_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("project_id", "staff_id", name="uq_project_staff"),
        mysql_charset="utf8mb4",
        mysql_collate="utf8mb4_unicode_ci",
    )

    op.create_table(
        "folders",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("project_id", sa.String(64), sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("type", sa.String(16), nullable=False, comment="PROJECT | ASSETS | DELIVERABLES"),
        sa.Column("parent_id", sa.String(64), sa.ForeignKey("folders.id", ondelete="SET NULL"), nullable=True),
        sa.Column("version", sa.Integer, nullable=False, server_default="1"),
        *_timestamps(),
        mysql_charset="utf8mb4",
        mysql_collate="utf8mb4_unicode_ci",
    )
    op.create_index("idx_folders_project_parent", "folders", ["project_id", "parent_id"])

    for table, has_type in (("assets", True), ("deliveries", False)):
        columns = [
            sa.Column("id", sa.String(64), primary_key=True),
            sa.Column("key", sa.String(512), nullable=False, unique=True),
            sa.Column("filename", sa.String(512), nullable=False),
            sa.Column("content_type", sa.String(255), nullable=False),
            sa.Column("size_bytes", sa.BigInteger, nullable=False),
        ]
        if has_type:
            columns.append(sa.Column("type", sa.String(16), nullable=False, comment="SCRIPT | IMAGE | AUDIO | OTHER"))
        columns += [
            sa.Column("project_id", sa.String(64), sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False),
            sa.Column("folder_id", sa.String(64), sa.ForeignKey("folders.id", ondelete="SET NULL"), nullable=True),
            sa.Column("uploaded_by_id", sa.String(64), sa.ForeignKey("user.id", ondelete="RESTRICT"), nullable=False),
        ]
        op.create_table(
            table,
            *columns,
            *_timestamps(),
            mysql_charset="utf8mb4",
            mysql_collate="utf8mb4_unicode_ci",
        )
    op.create_index("idx_assets_project_folder", "assets", ["project_id", "folder_id"])
    op.create_index("idx_deliveries_project_folder", "deliveries", ["project_id", "folder_id"])

    op.create_table(
        "upload_sessions",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("upload_id", sa.String(1024), nullable=False),
        sa.Column("key", sa.String(512), nullable=False),
        sa.Column("kind", sa.String(16), nullable=False, comment="ASSET | DELIVERY"),
        sa.Column("project_id", sa.String(64), sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False),
        sa.Column("folder_id", sa.String(64), nullable=True),
        sa.Column("filename", sa.String(512), nullable=False),
        sa.Column("content_type", sa.String(255), nullable=False),
        sa.Column("size_bytes", sa.BigInteger, nullable=False),
        sa.Column("part_size", sa.Integer, nullable=False),
        sa.Column("part_count", sa.Integer, nullable=False),
        sa.Column("status", sa.String(16), nullable=False, comment="INITIATED | COMPLETED | ABORTED | EXPIRED"),
        sa.Column("created_by_id", sa.String(64), sa.ForeignKey("user.id", ondelete="SET NULL"), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        mysql_charset="utf8mb4",
        mysql_collate="utf8mb4_unicode_ci",
    )
    op.create_index("idx_upload_sessions_status_created_at", "upload_sessions", ["status", "created_at"])
    op.create_index("idx_upload_sessions_key", "upload_sessions", ["key"])


def downgrade() -> None:
    op.drop_index("idx_upload_sessions_key", table_name="upload_sessions")
    op.drop_index("idx_upload_sessions_status_created_at", table_name="upload_sessions")
    op.drop_table("upload_sessions")
    op.drop_index("idx_deliveries_project_folder", table_name="deliveries")
    op.drop_table("deliveries")
    op.drop_index("idx_assets_project_folder", table_name="assets")
    op.drop_table("assets")
    op.drop_index("idx_folders_project_parent", table_name="folders")
    op.drop_table("folders")
    op.drop_table("project_staff_assignments")
    op.drop_index("idx_projects_client_id_created_at", table_name="projects")
    op.drop_table("projects")
    op.drop_index("idx_auth_tokens_user_id", table_name="auth_tokens")
    op.drop_table("auth_tokens")
    op.drop_index("ix_user_email", table_name="user")
    op.drop_table("user")
