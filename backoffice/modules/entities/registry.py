"""Per-entity-kind list configuration: filters, sort allow-list and search fields."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel
from sqlalchemy import or_
from sqlalchemy.sql.elements import ColumnElement

from backoffice.core.enums import AccessLevelEnum, EntityKindEnum
from backoffice.modules.catalog.models import DiscountCode, Gift, GiftTransaction
from backoffice.modules.catalog.schemas import DiscountCodeRead, GiftRead, GiftTransactionRead
from backoffice.modules.content.models import Comment, Post, Stream
from backoffice.modules.content.schemas import CommentRead, PostRead, StreamRead
from backoffice.modules.entities.schemas import (
    AdminFilters,
    CommentFilters,
    CreatorApplicationFilters,
    DiscountCodeFilters,
    GiftFilters,
    GiftTransactionFilters,
    PaymentFilters,
    PostFilters,
    ReportFilters,
    StreamFilters,
    UserFilters,
)
from backoffice.modules.identity.models import Admin
from backoffice.modules.identity.schemas import AdminRead
from backoffice.modules.payments.models import Payment
from backoffice.modules.payments.schemas import PaymentRead
from backoffice.modules.reports.models import Report
from backoffice.modules.reports.schemas import ReportRead
from backoffice.modules.users.models import CreatorApplication, User
from backoffice.modules.users.schemas import CreatorApplicationRead, UserRead
from backoffice.shared.exceptions import InvalidInputException

SearchBuilder = Callable[[str], ColumnElement[bool]]


@dataclass(frozen=True)
class EntityDefinition:
    """How one entity kind is listed."""

    kind: EntityKindEnum
    model: Any
    read_schema: type[BaseModel]
    filters_model: type[BaseModel]
    sort_fields: dict[str, Any]
    search: SearchBuilder | None = None
    required_level: AccessLevelEnum = AccessLevelEnum.ADMIN
    default_sort: str = "createdAt"


def _ilike_any(*columns) -> SearchBuilder:
    def _build(pattern: str) -> ColumnElement[bool]:
        return or_(*(column.ilike(pattern, escape="\\") for column in columns))

    return _build


def _user_search(pattern: str) -> ColumnElement[bool]:
    return or_(
        User.email.ilike(pattern, escape="\\"),
        User.username.ilike(pattern, escape="\\"),
        User.display_name.ilike(pattern, escape="\\"),
    )


ENTITY_DEFINITIONS: dict[EntityKindEnum, EntityDefinition] = {
    EntityKindEnum.USERS: EntityDefinition(
        kind=EntityKindEnum.USERS,
        model=User,
        read_schema=UserRead,
        filters_model=UserFilters,
        sort_fields={
            "createdAt": User.created_at,
            "updatedAt": User.updated_at,
            "email": User.email,
            "username": User.username,
            "lastLoginAt": User.last_login_at,
        },
        search=_user_search,
    ),
    EntityKindEnum.CREATOR_APPLICATIONS: EntityDefinition(
        kind=EntityKindEnum.CREATOR_APPLICATIONS,
        model=CreatorApplication,
        read_schema=CreatorApplicationRead,
        filters_model=CreatorApplicationFilters,
        sort_fields={
            "createdAt": CreatorApplication.created_at,
            "reviewedAt": CreatorApplication.reviewed_at,
            "status": CreatorApplication.status,
        },
        search=lambda pattern: or_(
            CreatorApplication.bio.ilike(pattern, escape="\\"),
            CreatorApplication.category.ilike(pattern, escape="\\"),
            CreatorApplication.user.has(_user_search(pattern)),
        ),
    ),
    EntityKindEnum.POSTS: EntityDefinition(
        kind=EntityKindEnum.POSTS,
        model=Post,
        read_schema=PostRead,
        filters_model=PostFilters,
        sort_fields={
            "createdAt": Post.created_at,
            "updatedAt": Post.updated_at,
            "status": Post.status,
        },
        search=_ilike_any(Post.content),
    ),
    EntityKindEnum.COMMENTS: EntityDefinition(
        kind=EntityKindEnum.COMMENTS,
        model=Comment,
        read_schema=CommentRead,
        filters_model=CommentFilters,
        sort_fields={
            "createdAt": Comment.created_at,
            "updatedAt": Comment.updated_at,
            "status": Comment.status,
        },
        search=_ilike_any(Comment.content),
    ),
    EntityKindEnum.STREAMS: EntityDefinition(
        kind=EntityKindEnum.STREAMS,
        model=Stream,
        read_schema=StreamRead,
        filters_model=StreamFilters,
        sort_fields={
            "createdAt": Stream.created_at,
            "startedAt": Stream.started_at,
            "viewerCount": Stream.viewer_count,
            "title": Stream.title,
        },
        search=_ilike_any(Stream.title),
    ),
    EntityKindEnum.REPORTS: EntityDefinition(
        kind=EntityKindEnum.REPORTS,
        model=Report,
        read_schema=ReportRead,
        filters_model=ReportFilters,
        sort_fields={
            "createdAt": Report.created_at,
            "reviewedAt": Report.reviewed_at,
            "status": Report.status,
            "reason": Report.reason,
        },
        search=_ilike_any(Report.description, Report.resolution),
    ),
    EntityKindEnum.PAYMENTS: EntityDefinition(
        kind=EntityKindEnum.PAYMENTS,
        model=Payment,
        read_schema=PaymentRead,
        filters_model=PaymentFilters,
        sort_fields={
            "createdAt": Payment.created_at,
            "completedAt": Payment.completed_at,
            "amount": Payment.amount,
            "totalCoins": Payment.total_coins,
            "status": Payment.status,
        },
        search=lambda pattern: or_(
            Payment.order_id.ilike(pattern, escape="\\"),
            Payment.transaction_id.ilike(pattern, escape="\\"),
            Payment.user.has(_user_search(pattern)),
        ),
    ),
    EntityKindEnum.DISCOUNT_CODES: EntityDefinition(
        kind=EntityKindEnum.DISCOUNT_CODES,
        model=DiscountCode,
        read_schema=DiscountCodeRead,
        filters_model=DiscountCodeFilters,
        sort_fields={
            "createdAt": DiscountCode.created_at,
            "code": DiscountCode.code,
            "usedCount": DiscountCode.used_count,
            "expiresAt": DiscountCode.expires_at,
        },
        search=_ilike_any(DiscountCode.code, DiscountCode.description),
    ),
    EntityKindEnum.GIFTS: EntityDefinition(
        kind=EntityKindEnum.GIFTS,
        model=Gift,
        read_schema=GiftRead,
        filters_model=GiftFilters,
        sort_fields={
            "createdAt": Gift.created_at,
            "name": Gift.name,
            "coinCost": Gift.coin_cost,
            "sortOrder": Gift.sort_order,
        },
        search=_ilike_any(Gift.name, Gift.description, Gift.category),
    ),
    EntityKindEnum.GIFT_TRANSACTIONS: EntityDefinition(
        kind=EntityKindEnum.GIFT_TRANSACTIONS,
        model=GiftTransaction,
        read_schema=GiftTransactionRead,
        filters_model=GiftTransactionFilters,
        sort_fields={
            "createdAt": GiftTransaction.created_at,
            "totalCoins": GiftTransaction.total_coins,
            "quantity": GiftTransaction.quantity,
        },
    ),
    EntityKindEnum.ADMINS: EntityDefinition(
        kind=EntityKindEnum.ADMINS,
        model=Admin,
        read_schema=AdminRead,
        filters_model=AdminFilters,
        sort_fields={
            "createdAt": Admin.created_at,
            "email": Admin.email,
            "name": Admin.name,
            "lastLoginAt": Admin.last_login_at,
        },
        search=_ilike_any(Admin.email, Admin.name),
        required_level=AccessLevelEnum.SUPER_ADMIN,
    ),
}


def get_entity_definition(entity_kind: str) -> EntityDefinition:
    try:
        return ENTITY_DEFINITIONS[EntityKindEnum(entity_kind)]
    except ValueError as exc:
        raise InvalidInputException(f"Unknown entity kind: {entity_kind}") from exc
