"""Initial back-office schema

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 09:00:00
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "20261019_0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


admin_role_enum = sa.Enum("admin", "super_admin", name="admin_role_enum", native_enum=False)
user_role_enum = sa.Enum("user", "creator", "admin", "super_admin", name="user_role_enum", native_enum=False)
creator_application_status_enum = sa.Enum(
    "pending",
    "approved",
    "rejected",
    name="creator_application_status_enum",
    native_enum=False,
)
post_type_enum = sa.Enum("text", "image", "video", name="post_type_enum", native_enum=False)
post_status_enum = sa.Enum("visible", "hidden", "deleted", name="post_status_enum", native_enum=False)
comment_status_enum = sa.Enum("visible", "hidden", "deleted", name="comment_status_enum", native_enum=False)
stream_status_enum = sa.Enum("live", "ended", name="stream_status_enum", native_enum=False)
report_reason_enum = sa.Enum(
    "spam",
    "harassment",
    "hate_speech",
    "nudity",
    "violence",
    "misinformation",
    "other",
    name="report_reason_enum",
    native_enum=False,
)
report_status_enum = sa.Enum(
    "pending",
    "under_review",
    "resolved",
    "dismissed",
    name="report_status_enum",
    native_enum=False,
)
moderation_action_enum = sa.Enum(
    "no_action",
    "warning_sent",
    "content_removed",
    "user_suspended",
    "user_banned",
    name="moderation_action_enum",
    native_enum=False,
)
payment_status_enum = sa.Enum(
    "pending",
    "completed",
    "failed",
    "refunded",
    name="payment_status_enum",
    native_enum=False,
)
discount_type_enum = sa.Enum("percentage", "fixed", name="discount_type_enum", native_enum=False)
discount_code_type_enum = sa.Enum("promotional", "creator", name="discount_code_type_enum", native_enum=False)


def _id_col() -> sa.Column:
    return sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False)


def _created_col() -> sa.Column:
    return sa.Column("created_at", sa.DateTime(timezone=True), nullable=False)


def _updated_col() -> sa.Column:
    return sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False)


def _uuid(name: str, nullable: bool = True) -> sa.Column:
    return sa.Column(name, postgresql.UUID(as_uuid=True), nullable=nullable)


def _ts(name: str, nullable: bool = True) -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), nullable=nullable)


def _fk(table: str, column: str, target: str, ondelete: str) -> sa.ForeignKeyConstraint:
    return sa.ForeignKeyConstraint(
        [column],
        [f"{target}.id"],
        name=f"fk_{table}_{column}_{target}",
        ondelete=ondelete,
    )


def _index(table: str, *columns: str, unique: bool = False) -> None:
    for column in columns:
        op.create_index(f"ix_{table}_{column}", table, [column], unique=unique)


def upgrade() -> None:
    op.create_table(
        "admins",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("role", admin_role_enum, nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        _ts("last_login_at"),
        sa.Column("login_count", sa.Integer(), nullable=False),
    )
    _index("admins", "email", unique=True)
    _index("admins", "created_at", "role", "is_active")

    op.create_table(
        "admin_sessions",
        _id_col(),
        _created_col(),
        _updated_col(),
        _uuid("admin_id", nullable=False),
        sa.Column("token_id", sa.String(length=64), nullable=False),
        _ts("expires_at", nullable=False),
        _ts("revoked_at"),
        _fk("admin_sessions", "admin_id", "admins", "CASCADE"),
    )
    _index("admin_sessions", "token_id", unique=True)
    _index("admin_sessions", "created_at", "admin_id")

    op.create_table(
        "audit_records",
        _id_col(),
        _created_col(),
        _uuid("actor_id"),
        sa.Column("action", sa.String(length=64), nullable=False),
        sa.Column("subject_kind", sa.String(length=64), nullable=False),
        sa.Column("subject_id", sa.String(length=64), nullable=True),
        _uuid("affected_user_id"),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("details", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
    )
    _index("audit_records", "created_at", "actor_id", "action", "subject_kind", "subject_id", "affected_user_id")

    op.create_table(
        "users",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("username", sa.String(length=64), nullable=False),
        sa.Column("display_name", sa.String(length=128), nullable=True),
        sa.Column("role", user_role_enum, nullable=False),
        sa.Column("is_verified", sa.Boolean(), nullable=False),
        sa.Column("is_suspended", sa.Boolean(), nullable=False),
        sa.Column("suspended_reason", sa.Text(), nullable=True),
        _uuid("suspended_by"),
        _ts("suspended_at"),
        _ts("suspension_expires_at"),
        sa.Column("admin_notes", sa.Text(), nullable=True),
        _ts("last_login_at"),
    )
    _index("users", "email", "username", unique=True)
    _index("users", "created_at", "role", "is_suspended")

    op.create_table(
        "creator_applications",
        _id_col(),
        _created_col(),
        _updated_col(),
        _uuid("user_id", nullable=False),
        sa.Column("status", creator_application_status_enum, nullable=False),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("category", sa.String(length=64), nullable=True),
        _uuid("reviewed_by"),
        _ts("reviewed_at"),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("review_note", sa.Text(), nullable=True),
        _fk("creator_applications", "user_id", "users", "CASCADE"),
    )
    _index("creator_applications", "created_at", "user_id", "status")

    op.create_table(
        "posts",
        _id_col(),
        _created_col(),
        _updated_col(),
        _uuid("author_id", nullable=False),
        sa.Column("type", post_type_enum, nullable=False),
        sa.Column("content", sa.Text(), nullable=True),
        sa.Column("media_url", sa.String(length=512), nullable=True),
        sa.Column("status", post_status_enum, nullable=False),
        sa.Column("is_flagged", sa.Boolean(), nullable=False),
        sa.Column("hidden_reason", sa.Text(), nullable=True),
        _uuid("hidden_by"),
        _ts("hidden_at"),
        sa.Column("deleted_reason", sa.Text(), nullable=True),
        _uuid("deleted_by"),
        _ts("deleted_at"),
        _fk("posts", "author_id", "users", "CASCADE"),
    )
    _index("posts", "created_at", "author_id", "status")

    op.create_table(
        "comments",
        _id_col(),
        _created_col(),
        _updated_col(),
        _uuid("post_id", nullable=False),
        _uuid("author_id", nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("status", comment_status_enum, nullable=False),
        sa.Column("hidden_reason", sa.Text(), nullable=True),
        _uuid("hidden_by"),
        _ts("hidden_at"),
        sa.Column("deleted_reason", sa.Text(), nullable=True),
        _uuid("deleted_by"),
        _ts("deleted_at"),
        _fk("comments", "post_id", "posts", "CASCADE"),
        _fk("comments", "author_id", "users", "CASCADE"),
    )
    _index("comments", "created_at", "post_id", "author_id", "status")

    op.create_table(
        "likes",
        _id_col(),
        _created_col(),
        _uuid("post_id", nullable=False),
        _uuid("user_id", nullable=False),
        _fk("likes", "post_id", "posts", "CASCADE"),
        _fk("likes", "user_id", "users", "CASCADE"),
        sa.UniqueConstraint("post_id", "user_id", name="uq_likes_post_user"),
    )
    _index("likes", "created_at", "post_id", "user_id")

    op.create_table(
        "streams",
        _id_col(),
        _created_col(),
        _updated_col(),
        _uuid("host_id", nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("status", stream_status_enum, nullable=False),
        sa.Column("viewer_count", sa.Integer(), nullable=False),
        _ts("started_at"),
        _ts("ended_at"),
        _uuid("ended_by"),
        sa.Column("end_reason", sa.Text(), nullable=True),
        _fk("streams", "host_id", "users", "CASCADE"),
    )
    _index("streams", "created_at", "host_id", "status")

    op.create_table(
        "reports",
        _id_col(),
        _created_col(),
        _updated_col(),
        _uuid("reporter_id", nullable=False),
        _uuid("reported_user_id"),
        sa.Column("target_type", sa.String(length=32), nullable=False),
        sa.Column("target_id", sa.String(length=64), nullable=True),
        sa.Column("reason", report_reason_enum, nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("status", report_status_enum, nullable=False),
        _uuid("reviewed_by"),
        _ts("reviewed_at"),
        sa.Column("resolution", sa.Text(), nullable=True),
        sa.Column("moderation_action", moderation_action_enum, nullable=True),
        _fk("reports", "reporter_id", "users", "CASCADE"),
        _fk("reports", "reported_user_id", "users", "SET NULL"),
    )
    _index("reports", "created_at", "reporter_id", "reported_user_id", "reason", "status")

    op.create_table(
        "coin_packages",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("name", sa.String(length=128), nullable=False),
        sa.Column("coins", sa.Integer(), nullable=False),
        sa.Column("bonus_coins", sa.Integer(), nullable=False),
        sa.Column("price", sa.Numeric(12, 2), nullable=False),
        sa.Column("currency", sa.String(length=3), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
    )
    _index("coin_packages", "created_at")

    op.create_table(
        "payments",
        _id_col(),
        _created_col(),
        _updated_col(),
        _uuid("user_id", nullable=False),
        _uuid("package_id"),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("currency", sa.String(length=3), nullable=False),
        sa.Column("total_coins", sa.Integer(), nullable=False),
        sa.Column("status", payment_status_enum, nullable=False),
        sa.Column("order_id", sa.String(length=64), nullable=False),
        sa.Column("transaction_id", sa.String(length=128), nullable=True),
        sa.Column("failure_reason", sa.Text(), nullable=True),
        _ts("completed_at"),
        _uuid("refunded_by"),
        _ts("refunded_at"),
        _fk("payments", "user_id", "users", "CASCADE"),
        _fk("payments", "package_id", "coin_packages", "SET NULL"),
    )
    _index("payments", "order_id", unique=True)
    _index("payments", "created_at", "user_id", "package_id", "status", "transaction_id")

    op.create_table(
        "coin_wallets",
        _id_col(),
        _created_col(),
        _updated_col(),
        _uuid("user_id", nullable=False),
        sa.Column("balance", sa.Integer(), nullable=False),
        _fk("coin_wallets", "user_id", "users", "CASCADE"),
    )
    _index("coin_wallets", "user_id", unique=True)
    _index("coin_wallets", "created_at")

    op.create_table(
        "balance_ledger_entries",
        _id_col(),
        _created_col(),
        _uuid("user_id", nullable=False),
        _uuid("payment_id", nullable=False),
        sa.Column("delta", sa.Integer(), nullable=False),
        sa.Column("balance_after", sa.Integer(), nullable=False),
        sa.Column("shortfall", sa.Integer(), nullable=False),
        sa.Column("reason", sa.Text(), nullable=False),
        _uuid("created_by", nullable=False),
        _fk("balance_ledger_entries", "user_id", "users", "CASCADE"),
        _fk("balance_ledger_entries", "payment_id", "payments", "CASCADE"),
        sa.UniqueConstraint("payment_id", name="uq_balance_ledger_entries_payment_id"),
    )
    _index("balance_ledger_entries", "created_at", "user_id")

    op.create_table(
        "discount_codes",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("code", sa.String(length=64), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("discount_type", discount_type_enum, nullable=False),
        sa.Column("discount_value", sa.Numeric(12, 2), nullable=False),
        sa.Column("code_type", discount_code_type_enum, nullable=False),
        _uuid("creator_id"),
        sa.Column("max_uses", sa.Integer(), nullable=True),
        sa.Column("used_count", sa.Integer(), nullable=False),
        _ts("starts_at"),
        _ts("expires_at"),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        _uuid("created_by"),
        _fk("discount_codes", "creator_id", "users", "SET NULL"),
    )
    _index("discount_codes", "code", unique=True)
    _index("discount_codes", "created_at", "creator_id", "is_active")

    op.create_table(
        "discount_redemptions",
        _id_col(),
        _created_col(),
        _uuid("discount_code_id"),
        _uuid("user_id", nullable=False),
        _uuid("payment_id"),
        sa.Column("discount_amount", sa.Numeric(12, 2), nullable=False),
        _fk("discount_redemptions", "discount_code_id", "discount_codes", "SET NULL"),
        _fk("discount_redemptions", "user_id", "users", "CASCADE"),
        _fk("discount_redemptions", "payment_id", "payments", "SET NULL"),
    )
    _index("discount_redemptions", "created_at", "discount_code_id", "user_id")

    op.create_table(
        "gifts",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("name", sa.String(length=128), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("image_url", sa.String(length=512), nullable=True),
        sa.Column("coin_cost", sa.Integer(), nullable=False),
        sa.Column("category", sa.String(length=64), nullable=True),
        sa.Column("sort_order", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.UniqueConstraint("name", name="uq_gifts_name"),
    )
    _index("gifts", "created_at", "is_active")

    op.create_table(
        "gift_transactions",
        _id_col(),
        _created_col(),
        _uuid("gift_id"),
        _uuid("sender_id", nullable=False),
        _uuid("receiver_id", nullable=False),
        _uuid("stream_id"),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("total_coins", sa.Integer(), nullable=False),
        _fk("gift_transactions", "gift_id", "gifts", "SET NULL"),
        _fk("gift_transactions", "sender_id", "users", "CASCADE"),
        _fk("gift_transactions", "receiver_id", "users", "CASCADE"),
        _fk("gift_transactions", "stream_id", "streams", "SET NULL"),
    )
    _index("gift_transactions", "created_at", "gift_id", "sender_id", "receiver_id")


def downgrade() -> None:
    for table in (
        "gift_transactions",
        "gifts",
        "discount_redemptions",
        "discount_codes",
        "balance_ledger_entries",
        "coin_wallets",
        "payments",
        "coin_packages",
        "reports",
        "streams",
        "likes",
        "comments",
        "posts",
        "creator_applications",
        "users",
        "audit_records",
        "admin_sessions",
        "admins",
    ):
        op.drop_table(table)
