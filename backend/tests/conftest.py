from __future__ import annotations

import pathlib
import sys

import pytest
from sqlalchemy.pool import StaticPool

ROOT = pathlib.Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def _load_dependencies():
    from otobook import Config, create_app
    from backend.otobook.extensions import db

    return Config, create_app, db


ConfigBase, create_app, db = _load_dependencies()


class TestConfig(ConfigBase):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite+pysqlite:///:memory:"
    SQLALCHEMY_ENGINE_OPTIONS = {
        "poolclass": StaticPool,
        "connect_args": {"check_same_thread": False},
    }
    CORS_ALLOWED_ORIGINS = "http://localhost"
    DB_INIT_MAX_RETRIES = 1
    RATELIMIT_ENABLED = False
    RPA_STORE = "memory"
    RPA_STEP_LATENCY_MIN = 0.0
    RPA_STEP_LATENCY_MAX = 0.0
    RPA_CONNECTION_DELAY_MIN = 0.0
    RPA_CONNECTION_DELAY_MAX = 0.0
    RPA_RANDOM_SEED = 1234
    RPA_EXECUTION_TIMEOUT = 30.0


@pytest.fixture(scope="module")
def app():
    app = create_app(TestConfig)
    ctx = app.app_context()
    ctx.push()
    yield app
    runner = app.extensions.get("otobook_runner")
    if runner is not None:
        runner.close()
    db.session.remove()
    ctx.pop()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def executors():
    from backend.otobook.executors import Simulation, build_default_registry

    return build_default_registry(Simulation(seed=7))


@pytest.fixture()
def service(executors):
    """An RPA service over fresh in-memory stores, independent of any app."""

    from backend.otobook.rpa.history import InMemoryRunHistory
    from backend.otobook.rpa.registry import InMemoryWorkflowRegistry
    from backend.otobook.rpa.service import RpaService

    return RpaService(
        InMemoryWorkflowRegistry(executors.validate_step),
        InMemoryRunHistory(),
        executors,
        connection_delay=(0.0, 0.0),
    )
