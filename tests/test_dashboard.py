import pytest

from conftest import InMemoryUserRepository
from workspot.dashboard import DashboardLoader
from workspot.dashboard.loader import SECTION_ERRORS
from workspot.errors import Notice
from workspot.favorites import FavoritesService
from workspot.messaging import MessageService
from workspot.models import User
from workspot.search import QueryPlanner


@pytest.fixture
def owner():
    return User(id="u1", email="owner@example.com", role="both", favorites=["c2", "o2", "gone"])


@pytest.fixture
def users(owner):
    return InMemoryUserRepository([owner])


@pytest.fixture
def loader(property_repo, message_repo, users):
    return DashboardLoader(
        planner=QueryPlanner(property_repo, policy="conditional"),
        repository=property_repo,
        messages=MessageService(message_repo),
        favorites=FavoritesService(users),
    )


def ids(items):
    return [item.id for item in items]


async def test_loads_all_sections(loader, owner):
    view = await loader.load(owner)

    assert ids(view.properties) == ["o1", "c1", "h1"]
    assert ids(view.favorites) == ["o2", "c2"]
    assert ids(view.messages) == ["m3", "m4", "m1"]
    assert view.unread_count == 3
    assert view.errors == {}


async def test_message_failure_does_not_block_properties(loader, owner, message_repo):
    message_repo.fail_on.add("get_received")

    view = await loader.load(owner)

    assert view.messages == []
    assert view.errors == {"messages": SECTION_ERRORS["messages"]}
    assert ids(view.properties) == ["o1", "c1", "h1"]
    assert ids(view.favorites) == ["o2", "c2"]


async def test_property_failure_does_not_block_messages(loader, owner, property_repo):
    property_repo.fail_on.add("fetch_where_equal")

    view = await loader.load(owner)

    assert set(view.errors) == {"properties"}
    assert view.properties == []
    assert ids(view.favorites) == ["o2", "c2"]
    assert len(view.messages) == 3


async def test_every_section_can_fail(loader, owner, property_repo, message_repo):
    property_repo.fail_on.update({"fetch_where_equal", "get_many"})
    message_repo.fail_on.add("get_received")

    view = await loader.load(owner)

    assert view.errors == SECTION_ERRORS


async def test_no_favorites_skips_store(loader, property_repo):
    user = User(id="u2", email="x@example.com")

    view = await loader.load(user)

    assert view.favorites == []
    assert property_repo.calls["get_many"] == 0


async def test_remove_favorite_updates_view(loader, owner):
    view = await loader.load(owner)

    notice = loader.remove_favorite(view, owner, "c2")

    assert notice is None
    assert ids(view.favorites) == ["o2"]
    assert "c2" not in owner.favorites


async def test_remove_favorite_failure_returns_notice(loader, owner, users):
    view = await loader.load(owner)
    users.fail_on.add("remove_favorite")

    notice = loader.remove_favorite(view, owner, "c2")

    assert isinstance(notice, Notice)
    assert notice.level == "error"
    assert ids(view.favorites) == ["o2", "c2"]


async def test_mark_as_read(loader, owner, message_repo):
    view = await loader.load(owner)

    assert loader.mark_as_read(view, "m3") is None
    assert view.unread_count == 2

    message_repo.fail_on.add("mark_as_read")
    notice = loader.mark_as_read(view, "m1")

    assert notice.level == "error"
    assert view.unread_count == 2
