"""Initial schema - document, document_version, favorite, view_log, notification.

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""

from collections.abc import Sequence

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "document",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("owner_id", sa.String(255), nullable=False),
        sa.Column("material_type", sa.String(20), nullable=False),
        sa.Column("is_free", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("approval_status", sa.String(20), nullable=False),
        sa.Column("file_url", sa.Text(), nullable=False),
        sa.Column("storage_handle", sa.String(512), nullable=False),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("view_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("processed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("course", sa.String(255), nullable=True),
        sa.Column("subject", sa.String(255), nullable=True),
        sa.Column("field", sa.String(255), nullable=True),
        sa.Column("university_name", sa.String(255), nullable=True),
        sa.CheckConstraint(
            "approval_status IN ('pending', 'approved', 'rejected')",
            name="ck_document_approval_status",
        ),
        sa.CheckConstraint(
            "material_type IN ('personal', 'university')",
            name="ck_document_material_type",
        ),
    )
    op.create_index("ix_document_owner_id", "document", ["owner_id"])
    op.create_index("ix_document_approval_status", "document", ["approval_status", "created_at"])

    op.create_table(
        "document_version",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column(
            "document_id",
            sa.UUID(),
            sa.ForeignKey("document.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("uploader_id", sa.String(255), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("file_url", sa.Text(), nullable=False),
        sa.Column("storage_handle", sa.String(512), nullable=False),
        sa.Column("content_hash", sa.String(64), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("uploaded_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("is_current_live", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "previous_version_id",
            sa.UUID(),
            sa.ForeignKey("document_version.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("processed_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("status IN ('pending', 'approved')", name="ck_document_version_status"),
    )
    op.create_index("ix_document_version_document_id", "document_version", ["document_id"])
    # At most one live version per document.
    op.create_index(
        "ux_document_version_live",
        "document_version",
        ["document_id"],
        unique=True,
        postgresql_where=sa.text("is_current_live"),
    )

    op.create_table(
        "favorite",
        sa.Column("user_id", sa.String(255), primary_key=True),
        sa.Column(
            "document_id",
            sa.UUID(),
            sa.ForeignKey("document.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_favorite_document_id", "favorite", ["document_id"])

    op.create_table(
        "view_log",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("viewer_id", sa.String(255), nullable=False),
        sa.Column(
            "document_id",
            sa.UUID(),
            sa.ForeignKey("document.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("viewed_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_view_log_document_id", "view_log", ["document_id", "viewed_at"])

    op.create_table(
        "notification",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column(
            "document_id",
            sa.UUID(),
            sa.ForeignKey("document.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("kind", sa.String(20), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "user_notification",
        sa.Column("user_id", sa.String(255), primary_key=True),
        sa.Column(
            "notification_id",
            sa.UUID(),
            sa.ForeignKey("notification.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
    )


def downgrade() -> None:
    op.drop_table("user_notification")
    op.drop_table("notification")
    op.drop_table("view_log")
    op.drop_table("favorite")
    op.drop_index("ux_document_version_live", table_name="document_version")
    op.drop_table("document_version")
    op.drop_table("document")
