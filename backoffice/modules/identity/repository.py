"""Identity repository layer."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.enums import AdminRoleEnum
from backoffice.modules.identity.models import Admin, AdminSession


class IdentityRepository:
    """DB operations for back-office actors and their sessions."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_admin_by_email(self, email: str) -> Admin | None:
        stmt = select(Admin).where(func.lower(Admin.email) == email.lower())
        return await self.session.scalar(stmt)

    async def get_admin_by_id(self, admin_id: UUID) -> Admin | None:
        return await self.session.get(Admin, admin_id)

    async def create_admin(
        self,
        email: str,
        name: str,
        password_hash: str,
        role: AdminRoleEnum,
    ) -> Admin:
        admin = Admin(
            email=email.lower(),
            name=name,
            password_hash=password_hash,
            role=role,
            is_active=True,
            login_count=0,
        )
        self.session.add(admin)
        await self.session.flush()
        return admin

    async def record_login(self, admin: Admin, logged_in_at: datetime) -> Admin:
        admin.last_login_at = logged_in_at
        admin.login_count = (admin.login_count or 0) + 1
        await self.session.flush()
        return admin

    async def count_super_admins(self) -> int:
        stmt = select(func.count()).select_from(Admin).where(Admin.role == AdminRoleEnum.SUPER_ADMIN)
        return int((await self.session.scalar(stmt)) or 0)

    async def create_session(
        self,
        admin_id: UUID,
        token_id: str,
        expires_at: datetime,
    ) -> AdminSession:
        admin_session = AdminSession(admin_id=admin_id, token_id=token_id, expires_at=expires_at)
        self.session.add(admin_session)
        await self.session.flush()
        return admin_session

    async def get_session_by_token_id(self, token_id: str) -> AdminSession | None:
        stmt = select(AdminSession).where(AdminSession.token_id == token_id)
        return await self.session.scalar(stmt)

    async def revoke_session(self, token_id: str, revoked_at: datetime) -> None:
        admin_session = await self.get_session_by_token_id(token_id)
        if admin_session is not None and admin_session.revoked_at is None:
            admin_session.revoked_at = revoked_at
            await self.session.flush()
