import pytest

from workspot.errors import QueryFailed, ValidationError
from workspot.favorites import FavoritesService
from workspot.messaging import MessageService


@pytest.fixture
def service(message_repo):
    return MessageService(message_repo)


class TestMessages:
    def test_send(self, service, message_repo, buyer):
        message = service.send(buyer, "u1", "  Still available?  ", property_id="o1")

        assert message.id is not None
        assert message.content == "Still available?"
        assert message.sender_email == "buyer@example.com"
        assert not message.read
        assert message_repo.calls["create"] == 1

    @pytest.mark.parametrize("content", ["", "   ", None])
    def test_empty_content_rejected(self, service, message_repo, buyer, content):
        with pytest.raises(ValidationError):
            service.send(buyer, "u1", content)

        assert message_repo.calls["create"] == 0

    def test_inbox_newest_first(self, service):
        assert [m.id for m in service.inbox("u1")] == ["m3", "m4", "m1"]

    def test_conversation_merges_both_directions_oldest_first(self, service, message_repo):
        conversation = service.conversation("u1", "u3")

        assert [m.id for m in conversation] == ["m1", "m2", "m3"]
        assert message_repo.calls["get_between"] == 2

    def test_inbox_failure_propagates(self, service, message_repo):
        message_repo.fail_on.add("get_received")

        with pytest.raises(QueryFailed):
            service.inbox("u1")

    def test_mark_as_read(self, service, message_repo):
        assert service.mark_as_read("m1") is None
        assert next(r for r in message_repo.rows if r["id"] == "m1")["read"]

    def test_mark_as_read_failure_is_visible(self, service, message_repo):
        message_repo.fail_on.add("mark_as_read")

        notice = service.mark_as_read("m1")

        assert notice.level == "error"
        assert notice.title == "Could not update message"


class TestFavorites:
    @pytest.fixture
    def favorites(self, user_repo):
        return FavoritesService(user_repo)

    def test_toggle(self, favorites, buyer):
        assert favorites.toggle(buyer, "c1") is True
        assert buyer.favorites == ["c1"]

        assert favorites.toggle(buyer, "c1") is False
        assert buyer.favorites == []

    def test_add_is_idempotent(self, favorites, buyer, user_repo):
        favorites.add(buyer, "c1")
        favorites.add(buyer, "c1")

        assert user_repo.rows["u3"]["favorites"] == ["c1"]

    def test_remove_failure_returns_notice(self, favorites, buyer, user_repo):
        favorites.add(buyer, "c1")
        user_repo.fail_on.add("remove_favorite")

        notice = favorites.remove(buyer, "c1")

        assert notice.level == "error"
        assert buyer.favorites == ["c1"]

    def test_toggle_failure_raises(self, favorites, buyer, user_repo):
        favorites.add(buyer, "c1")
        user_repo.fail_on.add("remove_favorite")

        with pytest.raises(QueryFailed):
            favorites.toggle(buyer, "c1")
