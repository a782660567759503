import os
from datetime import datetime, timedelta, timezone
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

# Importing task_api.main builds a default app from the environment; keep it off the filesystem.
os.environ.setdefault("DATABASE_URL", "sqlite://")

from task_api.db import Database  # noqa: E402
from task_api.main import create_app  # noqa: E402
from task_api.settings import Settings  # noqa: E402


class StepClock:
    """Deterministic clock: every call returns a time one second later than the last."""

    def __init__(self, start: datetime = datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)) -> None:
        self.current = start

    def __call__(self) -> datetime:
        self.current = self.current + timedelta(seconds=1)
        return self.current


def parse_ts(value: str) -> datetime:
    # datetime.fromisoformat only accepts a trailing 'Z' from Python 3.11 on
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


@pytest.fixture()
def settings() -> Settings:
    return Settings(database_url="sqlite://", log_level="DEBUG")


@pytest.fixture()
def client(settings: Settings) -> Iterator[TestClient]:
    # A fresh in-memory database per test; the context manager runs the lifespan (table creation).
    app = create_app(settings)
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def database() -> Iterator[Database]:
    db = Database("sqlite://")
    db.create_all()
    yield db
    db.dispose()


@pytest.fixture()
def clock() -> StepClock:
    return StepClock()
