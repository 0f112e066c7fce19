import os
import sys
import uuid
from datetime import datetime, timedelta
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from main import app
from api.dependencies import get_plan_service
from core.database import Base, get_db

# Ensure models are registered with SQLAlchemy metadata
import models.order_container  # noqa: F401
import models.receive_plan  # noqa: F401

from models.order_container import CargoReleaseStatus, CustomsStatus, OrderContainer
from services import config_service
from services.receive_plan_service import ReceivePlanService

BASE_TIME = datetime(2026, 3, 2, 0, 0, 0)


@compiles(PG_UUID, "sqlite")
def _compile_uuid_sqlite(type_, compiler, **kwargs):
    return "CHAR(36)"


def at(hour: int, minute: int = 0, day: int = 0) -> datetime:
    """Naive UTC instant on the test day."""
    return BASE_TIME + timedelta(days=day, hours=hour, minutes=minute)


class FakeClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture(autouse=True)
def reset_config_overrides():
    yield
    config_service.set_single_in_progress_plan(None)
    config_service.set_expected_end_epsilon(None)


@pytest.fixture(scope="function")
def db_session():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def file_session_factory(tmp_path):
    """Sessions on a file database, one connection per session, for threaded tests."""
    engine = create_engine(
        f"sqlite+pysqlite:///{tmp_path / 'plans.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    try:
        yield factory
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def clock():
    return FakeClock(at(7))


@pytest.fixture
def service(clock):
    return ReceivePlanService(clock=clock)


@pytest.fixture
def make_container():
    counter = {"value": 0}

    def _make(db, **overrides) -> OrderContainer:
        counter["value"] += 1
        fields = {
            "id": uuid.uuid4(),
            "container_no": f"TEST{counter['value']:07d}",
            "type_code": "40HC",
            "order_code": "ORD-001",
            "customs_status": CustomsStatus.NOT_REGISTERED,
            "cargo_release_status": CargoReleaseStatus.NOT_REQUESTED,
            "is_priority": False,
            "at_yard": False,
        }
        fields.update(overrides)
        container = OrderContainer(**fields)
        db.add(container)
        db.commit()
        db.refresh(container)
        return container

    return _make


@pytest.fixture(scope="function")
def client(db_session, service):
    def _override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_plan_service] = lambda: service

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
