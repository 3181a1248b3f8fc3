from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision = "0003_submissions_and_verification"
down_revision = "0002_mcp_servers"
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "mcp_server_submissions",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("submitted_by", sa.String(length=36), sa.ForeignKey("accounts.id"), nullable=False),
        sa.Column("submitted_payload", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("schema_version", sa.String(length=20), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
        sa.Column("validation_errors", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("review_notes", sa.Text(), nullable=True),
        sa.Column("reviewed_by", sa.String(length=36), sa.ForeignKey("accounts.id"), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("server_id", sa.String(length=36), sa.ForeignKey("mcp_servers.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("status IN ('pending', 'approved', 'rejected')", name="ck_submissions_status"),
    )
    op.create_index("ix_mcp_server_submissions_submitted_by", "mcp_server_submissions", ["submitted_by"])
    op.create_index("ix_mcp_server_submissions_status", "mcp_server_submissions", ["status"])

    op.create_table(
        "verification_requests",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("server_id", sa.String(length=36), sa.ForeignKey("mcp_servers.id"), nullable=False),
        sa.Column("requested_by", sa.String(length=36), sa.ForeignKey("accounts.id"), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
        sa.Column("request_notes", sa.Text(), nullable=True),
        sa.Column("review_notes", sa.Text(), nullable=True),
        sa.Column("reviewed_by", sa.String(length=36), sa.ForeignKey("accounts.id"), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("status IN ('pending', 'approved', 'rejected')", name="ck_verification_requests_status"),
    )
    op.create_index("ix_verification_requests_server_id", "verification_requests", ["server_id"])
    # one open request per server
    op.create_index(
        "uq_verification_requests_pending",
        "verification_requests",
        ["server_id"],
        unique=True,
        postgresql_where=sa.text("status = 'pending'"),
    )


def downgrade():
    op.drop_index("uq_verification_requests_pending", table_name="verification_requests")
    op.drop_index("ix_verification_requests_server_id", table_name="verification_requests")
    op.drop_table("verification_requests")
    op.drop_index("ix_mcp_server_submissions_status", table_name="mcp_server_submissions")
    op.drop_index("ix_mcp_server_submissions_submitted_by", table_name="mcp_server_submissions")
    op.drop_table("mcp_server_submissions")
