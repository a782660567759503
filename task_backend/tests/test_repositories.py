from datetime import timezone

import pytest
from conftest import StepClock
from sqlalchemy import inspect, select

from task_api.db import Database
from task_api.models import TaskModel, UserModel
from task_api.repositories import SQLAlchemyRepository
from task_api.schemas import TaskCreate, TaskOut


@pytest.fixture()
def repo(database: Database, clock: StepClock):
    with database.session() as session:
        yield SQLAlchemyRepository(session, clock=clock)


class TestSQLAlchemyRepository:
    def test_create_sets_defaults_and_equal_timestamps(self, repo: SQLAlchemyRepository, clock: StepClock):
        task = repo.create(TaskCreate(title="Write docs", description=None))
        assert task.id == 1
        assert task.title == "Write docs"
        assert task.description is None
        assert task.completed is False
        assert task.created_at == task.updated_at

        out = TaskOut.model_validate(task)
        assert out.created_at == clock.current
        assert out.created_at.tzinfo == timezone.utc

    def test_get_missing_returns_none(self, repo: SQLAlchemyRepository):
        assert repo.get(42) is None

    def test_list_orders_newest_first(self, repo: SQLAlchemyRepository):
        a = repo.create(TaskCreate(title="A"))
        b = repo.create(TaskCreate(title="B"))
        c = repo.create(TaskCreate(title="C"))
        assert [t.id for t in repo.list()] == [c.id, b.id, a.id]

    def test_set_completed_refreshes_updated_at(self, repo: SQLAlchemyRepository):
        task = repo.create(TaskCreate(title="Finish"))
        created_at = TaskOut.model_validate(task).created_at

        first = TaskOut.model_validate(repo.set_completed(task.id, True))
        assert first.completed is True
        assert first.created_at == created_at
        assert first.updated_at > created_at

        second = TaskOut.model_validate(repo.set_completed(task.id, True))
        assert second.completed is True
        assert second.updated_at > first.updated_at

        reopened = repo.set_completed(task.id, False)
        assert reopened is not None
        assert reopened.completed is False

    def test_set_completed_missing_returns_none(self, repo: SQLAlchemyRepository):
        assert repo.set_completed(7, True) is None

    def test_delete(self, repo: SQLAlchemyRepository):
        task = repo.create(TaskCreate(title="Gone soon"))
        assert repo.delete(task.id) == task.id
        assert repo.get(task.id) is None
        assert repo.delete(task.id) is None

    def test_deleted_ids_are_not_reused(self, repo: SQLAlchemyRepository):
        first = repo.create(TaskCreate(title="First"))
        repo.delete(first.id)
        second = repo.create(TaskCreate(title="Second"))
        assert second.id > first.id

    def test_writes_are_committed(self, database: Database, repo: SQLAlchemyRepository):
        task = repo.create(TaskCreate(title="Visible elsewhere"))
        with database.session() as other:
            assert other.scalars(select(TaskModel.title).where(TaskModel.id == task.id)).one() == "Visible elsewhere"


class TestSchema:
    def test_create_all_builds_both_tables(self, database: Database):
        tables = set(inspect(database.engine).get_table_names())
        assert {"tasks", "users"} <= tables

    def test_user_rows_get_generated_ids_and_timestamps(self, database: Database):
        with database.session() as session:
            user = UserModel(name="Ada", email="ada@example.com", settings={"theme": "dark"})
            session.add(user)
            session.commit()
            user_id = user.id

        with database.session() as session:
            stored = session.get(UserModel, user_id)
            assert stored is not None
            assert len(stored.id) == 36
            assert stored.settings == {"theme": "dark"}
            assert stored.created_at is not None
            assert stored.updated_at is not None

    def test_file_database_directory_is_created(self, tmp_path):
        db_file = tmp_path / "nested" / "tasks.db"
        db = Database(f"sqlite:///{db_file}")
        try:
            db.create_all()
            assert db_file.exists()
        finally:
            db.dispose()
