import pytest

from workspot.errors import AccessDenied, NotFound, ValidationError
from workspot.listings import ListingService
from workspot.models import User


@pytest.fixture
def service(property_repo):
    return ListingService(property_repo)


@pytest.fixture
def other():
    return User(id="u2", email="other@example.com", role="seller")


def test_get(service):
    prop = service.get("o1")

    assert prop.office.floor_size == 5000
    assert prop.family == "office_rent"


def test_get_missing(service):
    with pytest.raises(NotFound):
        service.get("missing")


def test_featured(service, property_repo):
    property_repo.rows[0]["featured"] = True
    property_repo.rows[5]["featured"] = True

    assert [p.id for p in service.featured()] == ["o1", "h1"]
    assert property_repo.calls["fetch_where_equal"] == 1


def test_featured_skips_invalid_rows(service, property_repo):
    property_repo.rows[0]["featured"] = True
    property_repo.rows.append(
        {"id": "bad", "type": "house", "price": "not a number", "title": "x", "featured": True}
    )

    assert [p.id for p in service.featured()] == ["h1"]


def test_update_own_listing(service, seller, property_repo):
    updated = service.update(seller, "h1", {"title": "Renovated home", "price": 470000})

    assert updated.title == "Renovated home"
    assert updated.price == 470000


def test_update_rejects_other_owner(service, other):
    with pytest.raises(AccessDenied):
        service.update(other, "h1", {"title": "Mine now"})


def test_update_rejects_non_editable_fields(service, seller):
    with pytest.raises(ValidationError) as exc_info:
        service.update(seller, "h1", {"user_id": "u2"})

    assert exc_info.value.details == {"fields": ["user_id"]}


def test_update_rejects_invalid_values(service, seller, property_repo):
    with pytest.raises(ValidationError):
        service.update(seller, "h1", {"price": "expensive"})

    assert property_repo.calls["update"] == 0


def test_delete(service, seller, property_repo, other):
    with pytest.raises(AccessDenied):
        service.delete(other, "h1")

    assert service.delete(seller, "h1") is True
    assert all(r["id"] != "h1" for r in property_repo.rows)
