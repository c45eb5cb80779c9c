from __future__ import annotations

from collections.abc import AsyncGenerator
from datetime import datetime, timedelta
from decimal import Decimal
from types import SimpleNamespace
from uuid import UUID, uuid4

import pytest
import pytest_asyncio
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import backoffice.modules  # noqa: F401
from backoffice.core.database import Base
from backoffice.core.enums import (
    AdminRoleEnum,
    ContentStatusEnum,
    CreatorApplicationStatusEnum,
    PaymentStatusEnum,
    ReportReasonEnum,
    ReportStatusEnum,
    StreamStatusEnum,
    UserRoleEnum,
)
from backoffice.modules.content.models import Comment, Post, Stream
from backoffice.modules.identity.models import Admin
from backoffice.modules.payments.models import CoinWallet, Payment
from backoffice.modules.reports.models import Report
from backoffice.modules.users.models import CreatorApplication, User
from backoffice.shared.utils import utc_now


def make_actor(role: AdminRoleEnum = AdminRoleEnum.ADMIN, *, is_active: bool = True, actor_id: UUID | None = None):
    return SimpleNamespace(id=actor_id or uuid4(), role=role, is_active=is_active, email="actor@backoffice.dev")


@pytest.fixture
def admin_actor():
    return make_actor(AdminRoleEnum.ADMIN)


@pytest.fixture
def super_actor():
    return make_actor(AdminRoleEnum.SUPER_ADMIN)


@pytest.fixture
def actor_factory():
    return make_actor


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    test_engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    # Let SQLAlchemy own BEGIN so SAVEPOINTs behave on the sqlite driver.
    @event.listens_for(test_engine.sync_engine, "connect")
    def _disable_driver_transactions(dbapi_connection, _):
        dbapi_connection.isolation_level = None

    @event.listens_for(test_engine.sync_engine, "begin")
    def _emit_begin(connection):
        connection.exec_driver_sql("BEGIN")

    async with test_engine.begin() as connection:
        await connection.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest_asyncio.fixture
async def session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as db_session:
        yield db_session


class Factory:
    """Persist minimal valid rows for SQLite-backed tests."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self._counter = 0

    def _next(self) -> int:
        self._counter += 1
        return self._counter

    async def _save(self, instance):
        self.session.add(instance)
        await self.session.flush()
        return instance

    async def admin(
        self,
        role: AdminRoleEnum = AdminRoleEnum.ADMIN,
        *,
        is_active: bool = True,
    ) -> Admin:
        number = self._next()
        return await self._save(
            Admin(
                email=f"admin{number}@backoffice.dev",
                name=f"Admin {number}",
                password_hash="not-a-real-hash",
                role=role,
                is_active=is_active,
                login_count=0,
            ),
        )

    async def user(
        self,
        role: UserRoleEnum = UserRoleEnum.USER,
        *,
        created_at: datetime | None = None,
        **fields,
    ) -> User:
        number = self._next()
        user = User(
            email=f"user{number}@example.com",
            username=f"user{number}",
            role=role,
            **fields,
        )
        if created_at is not None:
            user.created_at = created_at
        return await self._save(user)

    async def application(self, user: User, status=CreatorApplicationStatusEnum.PENDING) -> CreatorApplication:
        return await self._save(CreatorApplication(user_id=user.id, status=status, bio="Streams music"))

    async def post(self, author: User, status=ContentStatusEnum.VISIBLE) -> Post:
        return await self._save(Post(author_id=author.id, content="hello", status=status))

    async def comment(self, post: Post, author: User) -> Comment:
        return await self._save(Comment(post_id=post.id, author_id=author.id, content="nice"))

    async def stream(self, host: User, status=StreamStatusEnum.LIVE) -> Stream:
        return await self._save(Stream(host_id=host.id, title="Live now", status=status, started_at=utc_now()))

    async def report(self, reporter: User, reported: User | None = None, status=ReportStatusEnum.PENDING) -> Report:
        return await self._save(
            Report(
                reporter_id=reporter.id,
                reported_user_id=reported.id if reported else None,
                target_type="user",
                reason=ReportReasonEnum.SPAM,
                status=status,
            ),
        )

    async def payment(
        self,
        user: User,
        *,
        coins: int = 100,
        amount: Decimal = Decimal("9.99"),
        status: PaymentStatusEnum = PaymentStatusEnum.COMPLETED,
        created_at: datetime | None = None,
    ) -> Payment:
        payment = Payment(
            user_id=user.id,
            amount=amount,
            currency="USD",
            total_coins=coins,
            status=status,
            order_id=f"ORDER-{self._next():05d}-{uuid4().hex[:6]}",
            completed_at=utc_now() if status == PaymentStatusEnum.COMPLETED else None,
        )
        if created_at is not None:
            payment.created_at = created_at
        return await self._save(payment)

    async def wallet(self, user: User, balance: int) -> CoinWallet:
        return await self._save(CoinWallet(user_id=user.id, balance=balance))


@pytest.fixture
def factory(session: AsyncSession) -> Factory:
    return Factory(session)


@pytest.fixture
def days_ago():
    def _days_ago(days: int) -> datetime:
        return utc_now() - timedelta(days=days)

    return _days_ago
