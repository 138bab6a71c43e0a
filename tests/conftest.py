import pytest
import os
import sys

CURRENT_DIR = os.path.dirname(__file__)
SERVICE_ROOT = os.path.dirname(CURRENT_DIR)
if SERVICE_ROOT not in sys.path:
    sys.path.insert(0, SERVICE_ROOT)

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from roster_service.domain.entities import StudentFields
from roster_service.infrastructure.models import Base
from roster_service.infrastructure.repositories import JsonStudentStore, SqlStudentStore


@pytest.fixture(autouse=True)
def setup_test_environment(monkeypatch, tmp_path):
    """Настройка тестового окружения"""
    # Локальное хранилище во временной папке, БД в памяти
    monkeypatch.setenv("LOCAL_STORE_PATH", str(tmp_path / "storage.json"))
    monkeypatch.setenv("DATABASE_URL", "sqlite:///:memory:")


@pytest.fixture
def test_engine():
    """Движок SQLite в памяти, общий для всех потоков"""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def sql_store(test_engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)
    return SqlStudentStore(TestingSessionLocal)


class TickingClock:
    """Часы, которые сдвигаются на 1 секунду при каждом вызове"""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        value = self.now
        self.now += 1.0
        return value


@pytest.fixture
def local_store(tmp_path):
    return JsonStudentStore(tmp_path / "storage.json", clock=TickingClock())


@pytest.fixture
def ann():
    return StudentFields(
        first_name="Ann",
        last_name="Lee",
        roll_no="A1",
        email="a@x.com",
        department="Computers",
    )


@pytest.fixture
def bo():
    return StudentFields(
        first_name="Bo",
        last_name="Ray",
        roll_no="B2",
        email="b@x.com",
        department="Mechanical and Automation",
    )
