"""Row-locking loads and writes used by guarded transitions."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.enums import SubjectKindEnum
from backoffice.modules.content.models import Comment, Post, Stream
from backoffice.modules.identity.models import Admin
from backoffice.modules.payments.models import BalanceLedgerEntry, CoinWallet, Payment
from backoffice.modules.reports.models import Report
from backoffice.modules.users.models import CreatorApplication, User

SUBJECT_MODELS = {
    SubjectKindEnum.USER: User,
    SubjectKindEnum.CREATOR_APPLICATION: CreatorApplication,
    SubjectKindEnum.POST: Post,
    SubjectKindEnum.COMMENT: Comment,
    SubjectKindEnum.STREAM: Stream,
    SubjectKindEnum.REPORT: Report,
    SubjectKindEnum.PAYMENT: Payment,
    SubjectKindEnum.ADMIN: Admin,
}


class TransitionRepository:
    """DB operations for the transition framework."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_for_update(self, subject_kind: SubjectKindEnum, subject_id: UUID):
        """Load a subject with a row lock, refreshing any identity-mapped copy."""
        model = SUBJECT_MODELS[subject_kind]
        stmt = (
            select(model)
            .where(model.id == subject_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return await self.session.scalar(stmt)

    async def get_user(self, user_id: UUID, for_update: bool = False) -> User | None:
        stmt = select(User).where(User.id == user_id)
        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        return await self.session.scalar(stmt)

    async def lock_active_admins(self) -> list[Admin]:
        """Lock every active actor row so last-actor checks serialise."""
        stmt = (
            select(Admin)
            .where(Admin.is_active.is_(True))
            .order_by(Admin.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return list((await self.session.scalars(stmt)).all())

    async def delete_admin(self, admin: Admin) -> None:
        await self.session.delete(admin)
        await self.session.flush()

    async def get_wallet_for_update(self, user_id: UUID) -> CoinWallet | None:
        stmt = (
            select(CoinWallet)
            .where(CoinWallet.user_id == user_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return await self.session.scalar(stmt)

    async def create_wallet(self, user_id: UUID) -> CoinWallet:
        wallet = CoinWallet(user_id=user_id, balance=0)
        self.session.add(wallet)
        await self.session.flush()
        return wallet

    async def add_ledger_entry(
        self,
        user_id: UUID,
        payment_id: UUID,
        delta: int,
        balance_after: int,
        shortfall: int,
        reason: str,
        created_by: UUID,
    ) -> BalanceLedgerEntry:
        entry = BalanceLedgerEntry(
            user_id=user_id,
            payment_id=payment_id,
            delta=delta,
            balance_after=balance_after,
            shortfall=shortfall,
            reason=reason,
            created_by=created_by,
        )
        self.session.add(entry)
        await self.session.flush()
        return entry

    async def flush(self) -> None:
        await self.session.flush()
