"""Seed idempotent demo data for local/non-production environments."""

from __future__ import annotations

import argparse
import asyncio
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

import backoffice.modules  # noqa: F401
from backoffice.core.config import get_settings
from backoffice.core.database import SessionLocal, close_engine
from backoffice.core.enums import (
    AdminRoleEnum,
    CreatorApplicationStatusEnum,
    DiscountTypeEnum,
    PaymentStatusEnum,
    PostTypeEnum,
    ReportReasonEnum,
    StreamStatusEnum,
    UserRoleEnum,
)
from backoffice.core.security import hash_password, verify_password
from backoffice.modules.catalog.models import DiscountCode, Gift
from backoffice.modules.content.models import Comment, Post, Stream
from backoffice.modules.identity.models import Admin
from backoffice.modules.payments.models import CoinPackage, CoinWallet, Payment
from backoffice.modules.reports.models import Report
from backoffice.modules.users.models import CreatorApplication, User

DEMO_PASSWORD = "DemoPass123!"

DEMO_SUPER_ADMIN_EMAIL = "demo-super-admin@backoffice.dev"
DEMO_ADMIN_EMAIL = "demo-admin@backoffice.dev"

DEMO_USERS = (
    ("demo-viewer@backoffice.dev", "demo_viewer", UserRoleEnum.USER),
    ("demo-applicant@backoffice.dev", "demo_applicant", UserRoleEnum.USER),
    ("demo-creator@backoffice.dev", "demo_creator", UserRoleEnum.CREATOR),
)

DEMO_ORDER_ID = "DEMO-ORDER-0001"
DEMO_PACKAGE_NAME = "Demo 500 coins"
DEMO_PACKAGE_COINS = 500
DEMO_PACKAGE_PRICE = Decimal("4.99")
DEMO_GIFT_NAME = "Demo Rose"
DEMO_DISCOUNT_CODE = "DEMO10"


@dataclass(slots=True)
class SeedStats:
    admins_created: int = 0
    admins_updated: int = 0
    users_created: int = 0
    content_created: bool = False
    payment_created: bool = False
    catalog_created: int = 0


async def _ensure_admin(session: AsyncSession, *, email: str, role: AdminRoleEnum) -> tuple[Admin, bool]:
    admin = await session.scalar(select(Admin).where(Admin.email == email))
    created = False
    if admin is None:
        admin = Admin(
            email=email,
            name=email.split("@", 1)[0],
            password_hash=hash_password(DEMO_PASSWORD),
            role=role,
            is_active=True,
            login_count=0,
        )
        session.add(admin)
        created = True
    else:
        if not verify_password(DEMO_PASSWORD, admin.password_hash):
            admin.password_hash = hash_password(DEMO_PASSWORD)
        if admin.role != role:
            admin.role = role
        if not admin.is_active:
            admin.is_active = True

    await session.flush()
    return admin, created


async def _ensure_users(session: AsyncSession) -> tuple[dict[str, User], int]:
    users: dict[str, User] = {}
    created = 0
    for email, username, role in DEMO_USERS:
        user = await session.scalar(select(User).where(User.email == email))
        if user is None:
            user = User(email=email, username=username, display_name=username.replace("_", " ").title(), role=role)
            session.add(user)
            created += 1
        users[username] = user
    await session.flush()
    return users, created


async def _ensure_content(session: AsyncSession, users: dict[str, User]) -> bool:
    creator = users["demo_creator"]
    viewer = users["demo_viewer"]
    applicant = users["demo_applicant"]

    existing = await session.scalar(select(Post).where(Post.author_id == creator.id))
    if existing is not None:
        return False

    post = Post(author_id=creator.id, type=PostTypeEnum.TEXT, content="Welcome to my channel!")
    session.add(post)
    await session.flush()

    session.add_all(
        [
            Comment(post_id=post.id, author_id=viewer.id, content="Great stream yesterday"),
            Stream(
                host_id=creator.id,
                title="Demo live session",
                status=StreamStatusEnum.LIVE,
                started_at=datetime.now(UTC) - timedelta(minutes=15),
            ),
            Report(
                reporter_id=viewer.id,
                reported_user_id=creator.id,
                target_type="post",
                target_id=str(post.id),
                reason=ReportReasonEnum.SPAM,
                description="Demo report awaiting review",
            ),
            CreatorApplication(
                user_id=applicant.id,
                status=CreatorApplicationStatusEnum.PENDING,
                bio="I stream acoustic covers.",
                category="music",
            ),
        ],
    )
    await session.flush()
    return True


async def _ensure_payment(session: AsyncSession, buyer: User) -> bool:
    if await session.scalar(select(Payment).where(Payment.order_id == DEMO_ORDER_ID)) is not None:
        return False

    package = await session.scalar(select(CoinPackage).where(CoinPackage.name == DEMO_PACKAGE_NAME))
    if package is None:
        package = CoinPackage(name=DEMO_PACKAGE_NAME, coins=DEMO_PACKAGE_COINS, price=DEMO_PACKAGE_PRICE)
        session.add(package)
        await session.flush()

    now = datetime.now(UTC)
    session.add(
        Payment(
            user_id=buyer.id,
            package_id=package.id,
            amount=package.price,
            currency=package.currency,
            total_coins=package.coins,
            status=PaymentStatusEnum.COMPLETED,
            order_id=DEMO_ORDER_ID,
            transaction_id="demo-txn-0001",
            completed_at=now,
        ),
    )

    wallet = await session.scalar(select(CoinWallet).where(CoinWallet.user_id == buyer.id))
    if wallet is None:
        session.add(CoinWallet(user_id=buyer.id, balance=package.coins))
    else:
        wallet.balance += package.coins
    await session.flush()
    return True


async def _ensure_catalog(session: AsyncSession, admin: Admin) -> int:
    created = 0
    if await session.scalar(select(Gift).where(Gift.name == DEMO_GIFT_NAME)) is None:
        session.add(Gift(name=DEMO_GIFT_NAME, coin_cost=10, category="classic"))
        created += 1
    if await session.scalar(select(DiscountCode).where(DiscountCode.code == DEMO_DISCOUNT_CODE)) is None:
        session.add(
            DiscountCode(
                code=DEMO_DISCOUNT_CODE,
                description="Demo 10% off coin packages",
                discount_type=DiscountTypeEnum.PERCENTAGE,
                discount_value=Decimal("10.00"),
                created_by=admin.id,
            ),
        )
        created += 1
    await session.flush()
    return created


async def _run_seed(*, allow_production: bool) -> SeedStats:
    settings = get_settings()
    app_env = settings.app_env.strip().lower()
    if app_env in {"production", "prod"} and not allow_production:
        raise RuntimeError(
            "Refusing to seed demo data in production. "
            "Re-run with --allow-production only if you are absolutely sure.",
        )

    stats = SeedStats()

    async with SessionLocal() as session:
        try:
            super_admin, super_created = await _ensure_admin(
                session,
                email=DEMO_SUPER_ADMIN_EMAIL,
                role=AdminRoleEnum.SUPER_ADMIN,
            )
            _, admin_created = await _ensure_admin(session, email=DEMO_ADMIN_EMAIL, role=AdminRoleEnum.ADMIN)
            stats.admins_created = sum([super_created, admin_created])
            stats.admins_updated = 2 - stats.admins_created

            users, stats.users_created = await _ensure_users(session)
            stats.content_created = await _ensure_content(session, users)
            stats.payment_created = await _ensure_payment(session, users["demo_viewer"])
            stats.catalog_created = await _ensure_catalog(session, super_admin)

            await session.commit()
        except Exception:
            await session.rollback()
            raise

    return stats


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=(
            "Seed idempotent demo data for the back office (admins, platform users, "
            "content awaiting moderation, a refundable payment, catalog items)."
        ),
    )
    parser.add_argument(
        "--allow-production",
        action="store_true",
        help="Allow seeding even when APP_ENV is production/prod.",
    )
    return parser


def _print_summary(stats: SeedStats) -> None:
    print("Demo seed completed.")
    print(f"- Admins created: {stats.admins_created}")
    print(f"- Admins updated: {stats.admins_updated}")
    print(f"- Users created: {stats.users_created}")
    print(f"- Content created: {stats.content_created}")
    print(f"- Completed payment created: {stats.payment_created}")
    print(f"- Catalog items created: {stats.catalog_created}")
    print("")
    print("Demo credentials (non-production only):")
    print(f"- super admin: {DEMO_SUPER_ADMIN_EMAIL} / {DEMO_PASSWORD}")
    print(f"- admin:       {DEMO_ADMIN_EMAIL} / {DEMO_PASSWORD}")


def main() -> int:
    parser = _build_parser()
    args = parser.parse_args()

    try:
        stats = asyncio.run(_run_seed(allow_production=args.allow_production))
    except Exception as exc:
        print(f"Demo seed failed: {exc}")
        return 1
    finally:
        asyncio.run(close_engine())

    _print_summary(stats)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
