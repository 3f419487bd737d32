"""Shared test fixtures: a throwaway SQLite store per test."""
import pytest

from db import init_db, dispose_db, get_session
from services.schema_gateway import SchemaGateway
from tests import factories


@pytest.fixture
def db_url(tmp_path):
    return f"sqlite:///{tmp_path / 'storefront.sqlite'}"


@pytest.fixture
def database(db_url):
    """Initialised engine with no tables yet."""
    init_db(db_url)
    yield db_url
    dispose_db()


@pytest.fixture
def schema(database):
    """Initialised engine with the order tables created."""
    SchemaGateway().create_schema()
    return database


@pytest.fixture
def session(schema):
    _session = get_session()
    factories.bind(_session)
    yield _session
    factories.bind(None)
    _session.close()


@pytest.fixture
def gateway(session):
    return SchemaGateway(session)


@pytest.fixture
def app(database):
    from main import create_app
    _app = create_app(init_database=False)
    _app.config["TESTING"] = True
    return _app


@pytest.fixture
def client(app):
    return app.test_client()
