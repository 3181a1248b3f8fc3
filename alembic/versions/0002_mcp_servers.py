from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision = "0002_mcp_servers"
down_revision = "0001_accounts_and_api_keys"
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "mcp_servers",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("slug", sa.String(length=50), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("description", sa.String(length=500), nullable=False),

        sa.Column("homepage_url", sa.Text(), nullable=True),
        sa.Column("repo_url", sa.Text(), nullable=True),
        sa.Column("docs_url", sa.Text(), nullable=True),

        sa.Column("tags", postgresql.JSONB(astext_type=sa.Text()), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("transport", sa.String(length=20), nullable=False),
        sa.Column("auth", sa.String(length=20), nullable=False),
        sa.Column(
            "capabilities",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            server_default=sa.text("'{\"tools\": false, \"resources\": false, \"prompts\": false}'::jsonb"),
        ),

        sa.Column("verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("verified_at", sa.DateTime(timezone=True), nullable=True),

        sa.Column("owner_id", sa.String(length=36), sa.ForeignKey("accounts.id"), nullable=True),
        sa.Column("moderation_notes", sa.Text(), nullable=True),

        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),

        sa.UniqueConstraint("slug", name="uq_mcp_servers_slug"),
        sa.CheckConstraint("transport IN ('stdio', 'http', 'both')", name="ck_mcp_servers_transport"),
        sa.CheckConstraint("auth IN ('none', 'oauth', 'api_key', 'other')", name="ck_mcp_servers_auth"),
    )
    op.create_index("ix_mcp_servers_verified_created", "mcp_servers", ["verified", "created_at", "id"])
    op.create_index("ix_mcp_servers_name", "mcp_servers", ["name", "id"])

    op.create_table(
        "mcp_server_tags",
        sa.Column("server_id", sa.String(length=36), sa.ForeignKey("mcp_servers.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("tag", sa.String(length=50), primary_key=True),
    )
    op.create_index("ix_mcp_server_tags_tag", "mcp_server_tags", ["tag"])


def downgrade():
    op.drop_index("ix_mcp_server_tags_tag", table_name="mcp_server_tags")
    op.drop_table("mcp_server_tags")
    op.drop_index("ix_mcp_servers_name", table_name="mcp_servers")
    op.drop_index("ix_mcp_servers_verified_created", table_name="mcp_servers")
    op.drop_table("mcp_servers")
