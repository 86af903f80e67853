import os
import tempfile

# main.py creates its tables at import time; keep that away from any real database
os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(tempfile.mkdtemp(), "reservations.db")

from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from database import Base, build_engine, get_db
from records import Actor
import catalog
import models  # noqa: F401


@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'reservations.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def staff():
    return Actor(username="admin", is_staff=True)


@pytest.fixture
def customer():
    return Actor(username="alice")


@pytest.fixture
def other_customer():
    return Actor(username="bob")


@pytest.fixture
def make_car(db, staff):
    def _make_car(**overrides):
        fields = {
            "name": "Toyota Avanza",
            "type": "MINIVAN",
            "color": "silver",
            "price": 100,
            "base_rental_duration": 5,
            "description": "Seven seats, automatic",
        }
        fields.update(overrides)
        return catalog.create_vehicle(db, staff, fields)
    return _make_car


@pytest.fixture
def day():
    base = date(2030, 11, 1)

    def _day(offset: int) -> date:
        return date.fromordinal(base.toordinal() + offset)
    return _day


@pytest.fixture
def client(session_factory):
    from main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
