import os

# Must be set before app.config / app.db are imported anywhere.
os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from app import models
from app.db import Base, get_db, make_engine, make_session_factory


@pytest.fixture
def db_session():
    """Fresh in-memory database per test."""
    engine = make_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    TestingSession = make_session_factory(engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def driver(db_session):
    d = models.Driver(name="Test Driver")
    db_session.add(d)
    db_session.commit()
    return d


@pytest.fixture
def week_of_records(db_session, driver):
    """Two rides, one 4h shift and a fuel fill inside the week of Wed 2025-04-16."""
    db_session.add_all([
        models.Ride(driver_id=driver.id, date=datetime(2025, 4, 16, 9, 30), fare=50.0, tips=5.0, distance=20.0),
        models.Ride(driver_id=driver.id, date=datetime(2025, 4, 16, 11, 15), fare=30.0, tips=0.0, distance=10.0),
        models.Shift(
            driver_id=driver.id,
            date=datetime(2025, 4, 16),
            start_time=datetime(2025, 4, 16, 9, 0),
            end_time=datetime(2025, 4, 16, 13, 0),
            status="COMPLETED",
        ),
        models.FuelExpense(driver_id=driver.id, date=datetime(2025, 4, 16, 14, 0), amount=40.0, quantity=25.0),
    ])
    db_session.commit()
    return driver


@pytest.fixture
def client(db_session):
    from main import app

    def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
