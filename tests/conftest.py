import uuid
from collections import Counter
from datetime import datetime, timedelta, timezone

import pytest

from workspot.config import Settings, get_settings
from workspot.errors import QueryFailed
from workspot.models import Message, Property, User


@pytest.fixture(autouse=True)
def settings_env(monkeypatch):
    """Credenciales de mentira para que get_settings() no dependa del entorno."""
    monkeypatch.setenv("SUPABASE_URL", "https://example.supabase.co")
    monkeypatch.setenv("SUPABASE_KEY", "test-anon-key")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings():
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_key="test-anon-key",
        prediction_base_url="http://prediction.test",
    )


class InMemoryPropertyRepository:
    """Tabla 'properties' en memoria. Cuenta las llamadas por primitiva."""

    def __init__(self, rows=None):
        self.rows = [dict(r) for r in (rows or [])]
        self.calls = Counter()
        self.fail_on = set()

    def _call(self, name):
        self.calls[name] += 1
        if name in self.fail_on:
            raise QueryFailed("Failed to reach the property store. Please try again later.")

    def fetch_all(self):
        self._call("fetch_all")
        return [dict(r) for r in self.rows]

    def fetch_where_equal(self, constraints):
        self._call("fetch_where_equal")
        return [
            dict(r)
            for r in self.rows
            if all(r.get(field) == value for field, value in constraints.items())
        ]

    def fetch_in_range(self, field, minimum=None, maximum=None):
        self._call("fetch_in_range")
        result = []
        for r in self.rows:
            value = r.get(field)
            if value is None:
                continue
            if minimum is not None and value < minimum:
                continue
            if maximum is not None and value > maximum:
                continue
            result.append(dict(r))
        return result

    def get_by_id(self, property_id):
        self._call("get_by_id")
        return next((dict(r) for r in self.rows if r["id"] == property_id), None)

    def get_many(self, property_ids):
        self._call("get_many")
        return [dict(r) for r in self.rows if r["id"] in property_ids]

    def create(self, prop):
        self._call("create")
        row = {**prop.to_db_dict(), "id": str(uuid.uuid4())}
        self.rows.append(row)
        return dict(row)

    def update(self, property_id, changes):
        self._call("update")
        for row in self.rows:
            if row["id"] == property_id:
                row.update(changes)
                return dict(row)
        return {}

    def delete(self, property_id):
        self._call("delete")
        before = len(self.rows)
        self.rows = [r for r in self.rows if r["id"] != property_id]
        return len(self.rows) < before


class InMemoryUserRepository:
    def __init__(self, users=None):
        self.rows = {u.id: u.to_db_dict() for u in (users or [])}
        self.calls = Counter()
        self.fail_on = set()

    def _call(self, name):
        self.calls[name] += 1
        if name in self.fail_on:
            raise QueryFailed("Failed to reach the property store. Please try again later.")

    def create(self, user):
        self._call("create")
        self.rows[user.id] = user.to_db_dict()
        return dict(self.rows[user.id])

    def get_by_id(self, user_id):
        self._call("get_by_id")
        row = self.rows.get(user_id)
        return dict(row) if row else None

    def update(self, user_id, changes):
        self._call("update")
        self.rows[user_id].update(changes)
        return dict(self.rows[user_id])

    def add_favorite(self, user_id, property_id):
        self._call("add_favorite")
        favorites = self.rows[user_id].setdefault("favorites", [])
        if property_id not in favorites:
            favorites.append(property_id)
        return list(favorites)

    def remove_favorite(self, user_id, property_id):
        self._call("remove_favorite")
        favorites = [f for f in self.rows[user_id].get("favorites", []) if f != property_id]
        self.rows[user_id]["favorites"] = favorites
        return list(favorites)


class InMemoryMessageRepository:
    def __init__(self, messages=None):
        self.rows = [m.model_dump(mode="json") for m in (messages or [])]
        self.calls = Counter()
        self.fail_on = set()

    def _call(self, name):
        self.calls[name] += 1
        if name in self.fail_on:
            raise QueryFailed("Failed to reach the property store. Please try again later.")

    def create(self, message):
        self._call("create")
        row = {**message.to_db_dict(), "id": str(uuid.uuid4())}
        self.rows.append(row)
        return dict(row)

    def get_received(self, user_id):
        self._call("get_received")
        return [dict(r) for r in self.rows if r["receiver_id"] == user_id]

    def get_between(self, sender_id, receiver_id):
        self._call("get_between")
        return [
            dict(r)
            for r in self.rows
            if r["sender_id"] == sender_id and r["receiver_id"] == receiver_id
        ]

    def mark_as_read(self, message_id):
        self._call("mark_as_read")
        for row in self.rows:
            if row["id"] == message_id:
                row["read"] = True
                return True
        return False


def make_row(id, **fields) -> dict:
    """Fila de 'properties' tal como la devolvería el store."""
    data = {"title": f"Listing {id}", "type": "apartment", "price": 1000, **fields}
    return {**Property.model_validate(data).to_db_dict(), "id": id}


@pytest.fixture
def pune_rows():
    base = datetime(2024, 5, 1, tzinfo=timezone.utc)
    return [
        make_row(
            "p1",
            type="coworking_dedicated_desk",
            location="Pune",
            price=20000,
            created_at=base,
        ),
        make_row(
            "p2",
            type="coworking_dedicated_desk",
            location="pune",
            price=30000,
            created_at=base + timedelta(days=1),
        ),
        make_row(
            "p3",
            type="coworking_private_cabin",
            location="Pune",
            price=40000,
            created_at=base + timedelta(days=2),
        ),
    ]


@pytest.fixture
def mixed_rows():
    """Legacy, coworking y office_rent en varias ciudades."""
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    return [
        make_row("h1", type="house", location="ny", price=450000, bedrooms=3, bathrooms=2,
                 area=1800, user_id="u1", created_at=base, description="Family home with garden"),
        make_row("h2", type="apartment", location="ny", price=250000, bedrooms=1, bathrooms=1,
                 area=600, user_id="u2", created_at=base + timedelta(days=1)),
        make_row("c1", type="coworking_dedicated_desk", location="mumbai", price=9000,
                 user_id="u1", created_at=base + timedelta(days=2),
                 property_details={"city": "mumbai", "total_seating_capacity": 120,
                                   "total_center_area": 9000, "total_weekly_hours": 84}),
        make_row("c2", type="coworking_private_cabin", location="pune", price=42000,
                 user_id="u2", created_at=base + timedelta(days=3),
                 property_details={"city": "pune", "total_seating_capacity": 40,
                                   "total_center_area": 3000, "total_weekly_hours": 60}),
        make_row("c3", type="coworking_managed_office", location="mumbai", price=60000,
                 user_id="u2", created_at=base + timedelta(days=4)),
        make_row("o1", type="office_rent", location="mumbai", price=550000,
                 user_id="u1", created_at=base + timedelta(days=5),
                 property_details={"city": "mumbai", "floor_size": 5000, "building_grade": 1,
                                   "furnishing": "fully_furnished"}),
        make_row("o2", type="office_rent", location="pune", price=120000,
                 user_id="u2", created_at=base + timedelta(days=6),
                 property_details={"city": "pune", "floor_size": 1500, "building_grade": 2,
                                   "furnishing": "unfurnished"}),
    ]


@pytest.fixture
def property_repo(mixed_rows):
    return InMemoryPropertyRepository(mixed_rows)


@pytest.fixture
def seller():
    return User(id="u1", email="seller@example.com", name="Seller", role="seller")


@pytest.fixture
def buyer():
    return User(id="u3", email="buyer@example.com", name="Buyer", role="buyer")


@pytest.fixture
def user_repo(seller, buyer):
    return InMemoryUserRepository([seller, buyer])


@pytest.fixture
def message_repo():
    base = datetime(2024, 6, 1, tzinfo=timezone.utc)
    return InMemoryMessageRepository(
        [
            Message(id="m1", sender_id="u3", receiver_id="u1", content="Is it available?",
                    property_id="c1", created_at=base),
            Message(id="m2", sender_id="u1", receiver_id="u3", content="Yes, it is.",
                    property_id="c1", created_at=base + timedelta(hours=1)),
            Message(id="m3", sender_id="u3", receiver_id="u1", content="Can I visit?",
                    property_id="c1", created_at=base + timedelta(hours=2)),
            Message(id="m4", sender_id="u2", receiver_id="u1", content="Hello",
                    created_at=base + timedelta(minutes=30)),
        ]
    )
