# tests/conftest.py

from __future__ import annotations

import pytest

from taskboard.app import create_app
from taskboard.config import Config
from taskboard.models import Task
from taskboard.store import BoardStore

from .fakes import FakeRepository, FakeTaskApi


def sample_tasks():
    return [
        Task(id='task-1', title='Write docs', column='todo', created_at=1000),
        Task(id='task-2', title='Review PR', description='Backend', column='inProgress', created_at=2000),
        Task(id='task-3', title='Ship it', column='done', created_at=3000),
    ]


@pytest.fixture()
def config() -> Config:
    # Auth disabled: every request is a local anonymous user
    return Config(secret_key='test-secret', log_level='WARNING')


@pytest.fixture()
def repository() -> FakeRepository:
    return FakeRepository(sample_tasks())


@pytest.fixture()
def app(config, repository):
    app = create_app(config, repository=repository)
    app.config['TESTING'] = True
    return app


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def auth_app(repository):
    config = Config(
        secret_key='test-secret',
        google_client_id='client-id',
        google_client_secret='client-secret',
        log_level='WARNING',
    )
    app = create_app(config, repository=repository)
    app.config['TESTING'] = True
    return app


@pytest.fixture()
def api() -> FakeTaskApi:
    return FakeTaskApi(sample_tasks())


@pytest.fixture()
def store(api) -> BoardStore:
    store = BoardStore(api)
    store.tasks = sample_tasks()
    return store
