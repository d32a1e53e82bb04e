from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from setshaba.config.mock_firestore import MockFirestore
from setshaba.core.settings import Settings
from setshaba.main import create_app
from setshaba.services.geocoding import GeocodingProvider, empty_result
from setshaba.services.identity import MockIdentityProvider

TSHWANE_POINT = (-25.7479, 28.2293)
JOBURG_POINT = (-26.2041, 28.0473)
OCEAN_POINT = (-34.0, 10.0)

BASE_TIME = datetime(2024, 3, 1, 8, 0, tzinfo=timezone.utc)


class StaticGeocoder(GeocodingProvider):
    """Reverse geocoder answering from a fixed table of points."""

    def __init__(self, places):
        self.places = places
        self.calls = []

    def reverse_geocode(self, latitude, longitude):
        self.calls.append((latitude, longitude))
        result = empty_result("static")
        result.update(self.places.get((latitude, longitude), {}))
        return result


def _user(name, role, municipality_id):
    return {
        "name": name,
        "email": f"{name.lower().replace(' ', '.')}@example.org",
        "role": role,
        "municipality_id": municipality_id,
        "created_at": BASE_TIME,
    }


SEED = {
    "municipalities": {
        "m1": {"name": "City of Tshwane", "province": "Gauteng"},
        "m2": {"name": "City of Johannesburg", "province": "Gauteng"},
        "m3": {"name": "Drakenstein", "province": "Western Cape"},
    },
    "users": {
        "citizen_a": _user("Alice Mokoena", "citizen", "m1"),
        "citizen_d": _user("Dineo Khumalo", "citizen", "m1"),
        "citizen_g": _user("Gift Ndlovu", "citizen", "m2"),
        "citizen_n": _user("Naledi Dube", "citizen", None),
        "official_c": _user("Charles Botha", "official", "m1"),
        "official_f": _user("Fatima Patel", "official", "m1"),
        "official_b": _user("Bongani Zulu", "official", "m2"),
        "official_e": _user("Emma Naidoo", "official", "m2"),
    },
}


@pytest.fixture
def test_settings():
    return Settings(
        _env_file=None,
        ENVIRONMENT="test",
        USE_MOCK_DB=True,
        IDENTITY_PROVIDER="mock",
        ALLOW_OFFICIAL_REGISTRATION=True,
    )


@pytest.fixture
def db():
    return MockFirestore(seed=SEED)


@pytest.fixture
def identity():
    return MockIdentityProvider()


@pytest.fixture
def geocoder():
    return StaticGeocoder({
        TSHWANE_POINT: {"municipality": "City of Tshwane Metropolitan Municipality", "state": "Gauteng"},
        JOBURG_POINT: {"city": "Johannesburg", "state": "Gauteng"},
    })


@pytest.fixture
def app(test_settings, db, identity, geocoder):
    return create_app(test_settings, db=db, identity=identity, geocoder=geocoder)


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def auth_headers(identity):
    """Bearer header for a seeded (or registered) user id."""

    def _headers(uid):
        session = identity.issue_token(uid)
        return {"Authorization": f"Bearer {session.access_token}"}

    return _headers


@pytest.fixture
def report_body():
    def _body(point=TSHWANE_POINT, **overrides):
        body = {
            "title": "Burst water pipe",
            "description": "Water running down the street since Monday.",
            "category": "water",
            "lat": point[0],
            "lng": point[1],
            "address": "12 Church Street, Pretoria",
        }
        body.update(overrides)
        return body

    return _body


@pytest.fixture
def create_report(client, auth_headers, report_body):
    """Submit a report through the API and return its JSON representation."""

    def _create(uid="citizen_a", **overrides):
        response = client.post("/reports", json=report_body(**overrides), headers=auth_headers(uid))
        assert response.status_code == 201, response.text
        return response.json()["data"]["report"]

    return _create


@pytest.fixture
def seed_report(db):
    """Write a report document directly, with a controlled created_at."""
    counter = {"n": 0}

    def _seed(created_by="citizen_a", municipality_id="m1", minutes=None, **fields):
        counter["n"] += 1
        report_id = fields.pop("id", f"r{counter['n']:03d}")
        offset = counter["n"] if minutes is None else minutes
        doc = {
            "title": f"Report {report_id}",
            "description": "Seeded report",
            "category": "roads",
            "lat": TSHWANE_POINT[0],
            "lng": TSHWANE_POINT[1],
            "address": "1 Test Street",
            "photo_url": None,
            "municipality_id": municipality_id,
            "created_by": created_by,
            "assigned_official": None,
            "status": "open",
            "status_history": [],
            "resolved_at": None,
            "created_at": BASE_TIME + timedelta(minutes=offset),
            "updated_at": BASE_TIME + timedelta(minutes=offset),
        }
        doc.update(fields)
        db.collection("reports").document(report_id).set(doc)
        return report_id

    return _seed
