import pytest
from student_api.config import resolve_app_settings, resolve_database_options
from student_api.lifecycle import ApplicationLifecycle

# In-memory SQLite instead of PostgreSQL
TEST_CONFIG = {"TESTING": True, "SQLALCHEMY_DATABASE_URI": "sqlite://"}


@pytest.fixture
def make_lifecycle():
    """Build a lifecycle from an explicit environment mapping"""
    def factory(environ=None, **kwargs):
        environ = environ or {}
        kwargs.setdefault("config_overrides", TEST_CONFIG)
        return ApplicationLifecycle(
            settings=resolve_app_settings(environ),
            database_options=resolve_database_options(environ),
            **kwargs
        )
    return factory


@pytest.fixture
def lifecycle(make_lifecycle):
    return make_lifecycle()


@pytest.fixture
def app(lifecycle):
    return lifecycle.get_or_create_application()


@pytest.fixture
def client(app):
    return app.test_client()
