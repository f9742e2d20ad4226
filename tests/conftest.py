"""
Shared fixtures for the Autokatalog tests.

Each test gets its own in-memory SQLite database with the schema created
from the models. API tests run the FastAPI app against that database with a
fixed token table.
"""

from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool

from autokatalog.config import Settings, get_settings
from autokatalog.db import Base, get_db, make_engine, make_session_factory
from autokatalog.main import create_app
from autokatalog.models import Auto, AutoArt, Bezeichnung, Zubehoer

ADMIN_TOKEN = "admin-token"
USER_TOKEN = "user-token"


@pytest.fixture
def engine():
    """In-memory database shared by all sessions of one test."""
    engine = make_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_auto():
    """Build an unsaved Auto with Bezeichnung and optional Zubehoer."""

    def _make_auto(
        fahrgestellnummer="WBAKC81020C456789",
        art=AutoArt.SUV,
        preis=Decimal("35000.00"),
        lieferbar=True,
        datum=date(2022, 1, 31),
        titel="Alpha",
        zusatz="Untertitel",
        zubehoere=(),
    ):
        auto = Auto(
            fahrgestellnummer=fahrgestellnummer,
            art=art,
            preis=preis,
            lieferbar=lieferbar,
            datum=datum,
        )
        auto.bezeichnung = Bezeichnung(bezeichnung=titel, zusatz=zusatz)
        auto.zubehoere = [Zubehoer(name=name, beschreibung=beschreibung) for name, beschreibung in zubehoere]
        return auto

    return _make_auto


@pytest.fixture
def settings():
    return Settings(
        create_schema=False,
        tokens={ADMIN_TOKEN: ["admin", "user"], USER_TOKEN: ["user"]},
    )


@pytest.fixture
def client(settings, session_factory):
    app = create_app(settings)

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: settings
    return TestClient(app)


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {ADMIN_TOKEN}"}


@pytest.fixture
def user_headers():
    return {"Authorization": f"Bearer {USER_TOKEN}"}


@pytest.fixture
def gql(client):
    """POST a GraphQL operation and return the decoded body."""

    def _gql(query, variables=None, headers=None):
        response = client.post(
            "/graphql",
            json={"query": query, "variables": variables or {}},
            headers=headers or {},
        )
        assert response.headers["content-type"].startswith("application/json")
        return response.json()

    return _gql
