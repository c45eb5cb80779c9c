"""Platform user repository layer."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.modules.content.models import Comment, Post, Stream
from backoffice.modules.payments.models import CoinWallet
from backoffice.modules.reports.models import Report
from backoffice.modules.users.models import User


class UserRepository:
    """DB operations for user detail and notes."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_user(self, user_id: UUID, for_update: bool = False) -> User | None:
        stmt = select(User).where(User.id == user_id)
        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        return await self.session.scalar(stmt)

    async def get_activity_counts(self, user_id: UUID) -> dict[str, int]:
        return {
            "post_count": await self._count(Post.author_id == user_id),
            "comment_count": await self._count(Comment.author_id == user_id),
            "stream_count": await self._count(Stream.host_id == user_id),
            "report_count": await self._count(Report.reported_user_id == user_id),
        }

    async def get_coin_balance(self, user_id: UUID) -> int:
        stmt = select(CoinWallet.balance).where(CoinWallet.user_id == user_id)
        return int((await self.session.scalar(stmt)) or 0)

    async def update_notes(self, user: User, admin_notes: str | None) -> User:
        user.admin_notes = admin_notes
        await self.session.flush()
        return user

    async def _count(self, condition) -> int:
        column = condition.left
        stmt = select(func.count()).select_from(column.table).where(condition)
        return int((await self.session.scalar(stmt)) or 0)
