from __future__ import annotations

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from backoffice.core.database import run_read_with_retry
from backoffice.core.enums import AdminRoleEnum, AuditActionEnum
from backoffice.modules.analytics.repository import AnalyticsRepository
from backoffice.modules.analytics.service import AnalyticsService
from backoffice.modules.audit.models import AuditRecord
from backoffice.modules.audit.service import build_audit_service
from backoffice.modules.identity.models import Admin
from backoffice.modules.transitions.repository import TransitionRepository
from backoffice.modules.transitions.service import TransitionService
from backoffice.shared.exceptions import UnavailableException


def _transient() -> OperationalError:
    return OperationalError("SELECT", {}, Exception("server closed the connection"))


def _flaky(failures: int, result="rows"):
    calls = {"count": 0}

    async def _operation():
        calls["count"] += 1
        if calls["count"] <= failures:
            raise _transient()
        return result

    return _operation, calls


@pytest.mark.asyncio
async def test_read_is_retried_once_after_transient_error(session) -> None:
    operation, calls = _flaky(failures=1)

    assert await run_read_with_retry(session, operation) == "rows"
    assert calls["count"] == 2


@pytest.mark.asyncio
async def test_second_transient_error_is_unavailable(session) -> None:
    operation, calls = _flaky(failures=2)

    with pytest.raises(UnavailableException):
        await run_read_with_retry(session, operation)
    assert calls["count"] == 2


@pytest.mark.asyncio
async def test_retry_keeps_request_objects_loaded(session, factory, monkeypatch) -> None:
    admin = await factory.admin(AdminRoleEnum.ADMIN)
    await session.commit()
    actor = await session.scalar(select(Admin).where(Admin.id == admin.id))

    real_users = AnalyticsRepository.users
    attempts = {"count": 0}

    async def _fails_after_querying(self, lower, upper):
        attempts["count"] += 1
        result = await real_users(self, lower, upper)
        if attempts["count"] == 1:
            raise _transient()
        return result

    monkeypatch.setattr(AnalyticsRepository, "users", _fails_after_querying)
    service = AnalyticsService(AnalyticsRepository(session), build_audit_service(session))

    result = await service.aggregate(actor, "users")

    assert attempts["count"] == 2
    assert result.totals["new_users"] == 0
    record = await session.scalar(
        select(AuditRecord).where(AuditRecord.action == AuditActionEnum.ANALYTICS_VIEWED),
    )
    assert record.actor_id == actor.id


@pytest.mark.asyncio
async def test_transitions_are_not_retried(session, factory, admin_actor, monkeypatch) -> None:
    user = await factory.user()
    loads = {"count": 0}

    async def _unavailable(self, subject_kind, subject_id):
        loads["count"] += 1
        raise _transient()

    monkeypatch.setattr(TransitionRepository, "get_for_update", _unavailable)
    service = TransitionService(TransitionRepository(session), build_audit_service(session))

    with pytest.raises(OperationalError):
        await service.apply("user", user.id, "suspend", admin_actor, {"reason": "Automated spam account"})

    assert loads["count"] == 1
    assert await session.scalar(select(func.count()).select_from(AuditRecord)) == 0
