"""Base schema: companies, bots, app_users, uploaded_files.

companies carries the subscription/storage facts the validation cache reads.
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "000_base"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # 1) companies (everything else references it)
    op.create_table(
        "companies",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("subscription_status", sa.String(32), nullable=True),
        sa.Column("plan_level", sa.String(32), nullable=True),
        sa.Column("storage_used_bytes", sa.BigInteger(), nullable=True),
        sa.Column("storage_limit_bytes", sa.BigInteger(), nullable=True),
        sa.Column("storage_updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("current_period_start", sa.DateTime(timezone=True), nullable=True),
        sa.Column("current_period_end", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
    )

    # 2) bots
    op.create_table(
        "bots",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("company_id", sa.Integer(), sa.ForeignKey("companies.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("processing_enabled", sa.Boolean(), nullable=False, server_default=sa.true()),
    )
    op.create_index("ix_bots_company_id", "bots", ["company_id"], unique=False, if_not_exists=True)

    # 3) app_users (seat count for the usage dashboard)
    op.create_table(
        "app_users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("company_id", sa.Integer(), sa.ForeignKey("companies.id", ondelete="SET NULL"), nullable=True),
        sa.Column("bot_id", sa.Integer(), sa.ForeignKey("bots.id", ondelete="SET NULL"), nullable=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("username", sa.String(255), nullable=True),
        sa.Column("blocked", sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    op.create_index("ix_app_users_company_id", "app_users", ["company_id"], unique=False, if_not_exists=True)

    # 4) uploaded_files (storage recalculation source)
    op.create_table(
        "uploaded_files",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("company_id", sa.Integer(), sa.ForeignKey("companies.id", ondelete="CASCADE"), nullable=False),
        sa.Column("bot_id", sa.Integer(), sa.ForeignKey("bots.id", ondelete="SET NULL"), nullable=True),
        sa.Column("name", sa.String(512), nullable=False),
        sa.Column("size_bytes", sa.BigInteger(), nullable=True),
        sa.Column("mime", sa.String(255), nullable=True),
        sa.Column("ext", sa.String(32), nullable=True),
        sa.Column("uploaded_by", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
    )
    op.create_index(
        "ix_uploaded_files_company_id", "uploaded_files", ["company_id", "id"], unique=False, if_not_exists=True
    )


def downgrade() -> None:
    op.drop_index("ix_uploaded_files_company_id", table_name="uploaded_files")
    op.drop_table("uploaded_files")
    op.drop_index("ix_app_users_company_id", table_name="app_users")
    op.drop_table("app_users")
    op.drop_index("ix_bots_company_id", table_name="bots")
    op.drop_table("bots")
    op.drop_table("companies")
