"""Identity business logic layer."""

from __future__ import annotations

import logging

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.access import authorize
from backoffice.core.database import get_db_session
from backoffice.core.enums import AccessLevelEnum, AdminRoleEnum, AuditActionEnum, SubjectKindEnum
from backoffice.core.security import (
    ACCESS_TOKEN,
    REFRESH_TOKEN,
    create_access_token,
    create_refresh_token,
    hash_password,
    new_token_id,
    oauth2_scheme,
    read_claims,
    refresh_expires_at,
    verify_password,
)
from backoffice.modules.audit.service import AuditService, build_audit_service
from backoffice.modules.identity.models import Admin
from backoffice.modules.identity.repository import IdentityRepository
from backoffice.modules.identity.schemas import AdminCreate, LoginRequest, TokenPair
from backoffice.shared.exceptions import ConflictException, UnauthenticatedException
from backoffice.shared.utils import ensure_utc, utc_now

logger = logging.getLogger(__name__)


class IdentityService:
    """Identity domain service."""

    def __init__(self, repository: IdentityRepository, audit_service: AuditService) -> None:
        self.repository = repository
        self.audit_service = audit_service

    async def login(self, payload: LoginRequest) -> TokenPair:
        """Authenticate an actor and issue JWT tokens."""
        admin = await self.repository.get_admin_by_email(payload.email)
        if admin is None or not verify_password(payload.password, admin.password_hash):
            raise UnauthenticatedException("Invalid credentials")

        if not admin.is_active:
            raise UnauthenticatedException("Account is deactivated")

        await self.repository.record_login(admin, utc_now())
        tokens = await self._issue_tokens(admin)

        await self.audit_service.record_best_effort(
            actor_id=admin.id,
            action=AuditActionEnum.ADMIN_LOGIN,
            subject_kind=SubjectKindEnum.ADMIN,
            subject_id=str(admin.id),
            description=f"{admin.email} signed in",
            details={"login_count": admin.login_count},
        )
        logger.info("Admin signed in: admin_id=%s", admin.id)
        return tokens

    async def refresh_tokens(self, refresh_token_value: str) -> TokenPair:
        """Rotate refresh token and issue new token pair."""
        claims = read_claims(refresh_token_value, REFRESH_TOKEN)
        token_id = claims.token_id

        admin_session = await self.repository.get_session_by_token_id(token_id)
        if (
            admin_session is None
            or admin_session.revoked_at is not None
            or ensure_utc(admin_session.expires_at) <= utc_now()
        ):
            raise UnauthenticatedException("Refresh token is not valid")

        await self.repository.revoke_session(token_id, utc_now())

        admin = await self.repository.get_admin_by_id(claims.admin_id)
        if admin is None or not admin.is_active:
            raise UnauthenticatedException("Account is not valid")

        return await self._issue_tokens(admin)

    async def logout(self, actor: Admin, refresh_token_value: str) -> None:
        """Revoke the refresh session behind a token owned by the actor."""
        claims = read_claims(refresh_token_value, REFRESH_TOKEN)
        if claims.admin_id != actor.id:
            raise UnauthenticatedException("Refresh token does not belong to this account")
        await self.repository.revoke_session(claims.token_id, utc_now())

    async def get_admin_from_access_token(self, token: str) -> Admin:
        """Resolve actor from access token."""
        claims = read_claims(token, ACCESS_TOKEN)
        admin = await self.repository.get_admin_by_id(claims.admin_id)
        if admin is None:
            raise UnauthenticatedException("Account not found")
        if not admin.is_active:
            raise UnauthenticatedException("Account is deactivated")
        return admin

    async def create_admin(self, actor: Admin, payload: AdminCreate) -> Admin:
        """Provision a new actor (super admin only)."""
        authorize(actor, AccessLevelEnum.SUPER_ADMIN)

        existing = await self.repository.get_admin_by_email(payload.email)
        if existing is not None:
            raise ConflictException("Admin with this email already exists")

        admin = await self.repository.create_admin(
            email=payload.email,
            name=payload.name,
            password_hash=hash_password(payload.password),
            role=payload.role,
        )
        await self.audit_service.record(
            actor_id=actor.id,
            action=AuditActionEnum.ADMIN_CREATED,
            subject_kind=SubjectKindEnum.ADMIN,
            subject_id=str(admin.id),
            description=f"Created {admin.role.value} {admin.email}",
            details={"email": admin.email, "role": admin.role.value},
        )
        logger.info("Admin created: admin_id=%s role=%s by=%s", admin.id, admin.role.value, actor.id)
        return admin

    async def ensure_bootstrap_admin(self, email: str, password: str, name: str) -> Admin | None:
        """Create the configured super admin when no super admin exists yet."""
        if await self.repository.count_super_admins() > 0:
            return None
        if await self.repository.get_admin_by_email(email) is not None:
            return None

        admin = await self.repository.create_admin(
            email=email,
            name=name,
            password_hash=hash_password(password),
            role=AdminRoleEnum.SUPER_ADMIN,
        )
        await self.audit_service.record(
            actor_id=None,
            action=AuditActionEnum.ADMIN_CREATED,
            subject_kind=SubjectKindEnum.ADMIN,
            subject_id=str(admin.id),
            description=f"Bootstrap super admin {admin.email} created",
            details={"email": admin.email, "role": admin.role.value, "bootstrap": True},
        )
        logger.info("Bootstrap super admin created: admin_id=%s", admin.id)
        return admin

    async def _issue_tokens(self, admin: Admin) -> TokenPair:
        token_id = new_token_id()
        role = AdminRoleEnum(admin.role).value
        access_token = create_access_token(subject=str(admin.id), role=role)
        refresh_token = create_refresh_token(subject=str(admin.id), token_id=token_id, role=role)

        await self.repository.create_session(admin.id, token_id, refresh_expires_at(utc_now()))
        return TokenPair(access_token=access_token, refresh_token=refresh_token)


def build_identity_service(session: AsyncSession) -> IdentityService:
    return IdentityService(IdentityRepository(session), build_audit_service(session))


async def get_identity_service(session: AsyncSession = Depends(get_db_session)) -> IdentityService:
    """Dependency to provide identity service."""
    return build_identity_service(session)


async def get_current_actor(
    token: str | None = Depends(oauth2_scheme),
    service: IdentityService = Depends(get_identity_service),
) -> Admin:
    """Resolve currently authenticated actor from bearer token."""
    if not token:
        raise UnauthenticatedException("Authentication required")
    return await service.get_admin_from_access_token(token)


def require_level(level: AccessLevelEnum):
    """Dependency factory for level-gated routes."""

    async def _checker(current_actor: Admin = Depends(get_current_actor)) -> Admin:
        authorize(current_actor, level)
        return current_actor

    return _checker
