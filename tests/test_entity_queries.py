from __future__ import annotations

from uuid import uuid4

import pytest

from backoffice.core.enums import AdminRoleEnum, ContentStatusEnum, SortOrderEnum, UserRoleEnum
from backoffice.modules.entities.repository import EntityRepository
from backoffice.modules.entities.service import EntityService
from backoffice.shared.exceptions import ForbiddenException, InvalidInputException, NotFoundException
from backoffice.shared.pagination import PaginationParams, build_page, total_pages


def _service(session) -> EntityService:
    return EntityService(EntityRepository(session))


def _pages(limit: int, page: int = 1, **kwargs) -> PaginationParams:
    return PaginationParams(page=page, limit=limit, **kwargs)


@pytest.mark.parametrize(("total", "limit", "expected"), [(0, 20, 0), (1, 20, 1), (20, 20, 1), (21, 20, 2), (45, 10, 5)])
def test_total_pages_is_ceiling(total: int, limit: int, expected: int) -> None:
    assert total_pages(total, limit) == expected


def test_page_serializes_total_pages_in_camel_case() -> None:
    page = build_page([1, 2], total=7, params=_pages(2, page=2))
    payload = page.model_dump(by_alias=True)

    assert payload["pagination"] == {"page": 2, "limit": 2, "total": 7, "totalPages": 4}


@pytest.mark.asyncio
async def test_pages_partition_the_collection(session, factory, admin_actor) -> None:
    for _ in range(7):
        await factory.user()
    service = _service(session)

    seen: list[str] = []
    for page in (1, 2, 3):
        items, total = await service.query(admin_actor, "users", {}, None, _pages(3, page=page))
        assert total == 7
        seen.extend(item["id"] for item in items)

    assert len(seen) == 7
    assert len(set(seen)) == 7

    past_end, total = await service.query(admin_actor, "users", {}, None, _pages(3, page=4))
    assert past_end == []
    assert total == 7


@pytest.mark.asyncio
async def test_default_sort_is_newest_first(session, factory, admin_actor, days_ago) -> None:
    old = await factory.user(created_at=days_ago(10))
    new = await factory.user(created_at=days_ago(1))
    service = _service(session)

    items, _ = await service.query(admin_actor, "users", {}, None, _pages(10))
    assert [item["id"] for item in items] == [str(new.id), str(old.id)]

    items, _ = await service.query(admin_actor, "users", {}, None, _pages(10, sort_order=SortOrderEnum.ASC))
    assert [item["id"] for item in items] == [str(old.id), str(new.id)]


@pytest.mark.asyncio
async def test_sort_by_allowed_field(session, factory, admin_actor) -> None:
    for _ in range(3):
        await factory.user()

    items, _ = await _service(session).query(
        admin_actor,
        "users",
        {},
        None,
        _pages(10, sort_by="username", sort_order=SortOrderEnum.ASC),
    )

    usernames = [item["username"] for item in items]
    assert usernames == sorted(usernames)


@pytest.mark.asyncio
async def test_unknown_sort_field_is_rejected(session, admin_actor) -> None:
    with pytest.raises(InvalidInputException):
        await _service(session).query(admin_actor, "users", {}, None, _pages(10, sort_by="password_hash"))


@pytest.mark.asyncio
@pytest.mark.parametrize(("page", "limit"), [(0, 10), (1, 0), (1, 101)])
async def test_out_of_range_pagination_is_rejected(session, admin_actor, page: int, limit: int) -> None:
    with pytest.raises(InvalidInputException):
        await _service(session).query(admin_actor, "users", {}, None, _pages(limit, page=page))


@pytest.mark.asyncio
async def test_filters_use_camel_case_keys(session, factory, admin_actor) -> None:
    await factory.user(is_suspended=True)
    await factory.user(UserRoleEnum.CREATOR)
    await factory.user()
    service = _service(session)

    items, total = await service.query(admin_actor, "users", {"isSuspended": "true"}, None, _pages(10))
    assert total == 1
    assert items[0]["is_suspended"] is True

    _, total = await service.query(admin_actor, "users", {"role": "creator"}, None, _pages(10))
    assert total == 1


@pytest.mark.asyncio
async def test_unknown_filter_and_bad_values_are_invalid_input(session, admin_actor) -> None:
    service = _service(session)

    with pytest.raises(InvalidInputException):
        await service.query(admin_actor, "users", {"passwordHash": "x"}, None, _pages(10))
    with pytest.raises(InvalidInputException):
        await service.query(admin_actor, "users", {"role": "emperor"}, None, _pages(10))
    with pytest.raises(InvalidInputException):
        await service.query(
            admin_actor,
            "users",
            {"createdFrom": "2026-05-02T00:00:00Z", "createdTo": "2026-05-01T00:00:00Z"},
            None,
            _pages(10),
        )


@pytest.mark.asyncio
async def test_created_range_filter(session, factory, admin_actor, days_ago) -> None:
    await factory.user(created_at=days_ago(30))
    recent = await factory.user(created_at=days_ago(2))

    items, total = await _service(session).query(
        admin_actor,
        "users",
        {"createdFrom": days_ago(7).isoformat()},
        None,
        _pages(10),
    )

    assert total == 1
    assert items[0]["id"] == str(recent.id)


@pytest.mark.asyncio
async def test_search_matches_case_insensitively(session, factory, admin_actor) -> None:
    await factory.user(display_name="Night Owl")
    await factory.user(display_name="Early Bird")
    service = _service(session)

    items, total = await service.query(admin_actor, "users", {}, "  night ", _pages(10))
    assert total == 1
    assert items[0]["display_name"] == "Night Owl"

    _, total = await service.query(admin_actor, "users", {}, "100%", _pages(10))
    assert total == 0


@pytest.mark.asyncio
async def test_search_on_kind_without_search_fields(session, admin_actor) -> None:
    with pytest.raises(InvalidInputException):
        await _service(session).query(admin_actor, "gift_transactions", {}, "rose", _pages(10))


@pytest.mark.asyncio
async def test_posts_filtered_by_status(session, factory, admin_actor) -> None:
    author = await factory.user()
    await factory.post(author)
    hidden = await factory.post(author, status=ContentStatusEnum.HIDDEN)

    items, total = await _service(session).query(admin_actor, "posts", {"status": "hidden"}, None, _pages(10))

    assert total == 1
    assert items[0]["id"] == str(hidden.id)


@pytest.mark.asyncio
async def test_admin_listing_requires_super_admin(session, factory, admin_actor, super_actor) -> None:
    await factory.admin(AdminRoleEnum.SUPER_ADMIN)
    service = _service(session)

    with pytest.raises(ForbiddenException):
        await service.query(admin_actor, "admins", {}, None, _pages(10))

    items, total = await service.query(super_actor, "admins", {}, None, _pages(10))
    assert total == 1
    assert "password_hash" not in items[0]


@pytest.mark.asyncio
async def test_unknown_kind_and_missing_item(session, admin_actor) -> None:
    service = _service(session)

    with pytest.raises(InvalidInputException):
        await service.query(admin_actor, "planets", {}, None, _pages(10))
    with pytest.raises(NotFoundException):
        await service.get(admin_actor, "users", uuid4())


@pytest.mark.asyncio
async def test_get_returns_serialized_item(session, factory, admin_actor) -> None:
    user = await factory.user()

    item = await _service(session).get(admin_actor, "users", user.id)

    assert item["id"] == str(user.id)
    assert item["email"] == user.email
