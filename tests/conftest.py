import pytest

from src import create_app


@pytest.fixture
def app():
    """Create an application for testing."""
    # Create the app with test config
    test_config = {
        "TESTING": True,
        "DEBUG": True,
        "DATABASE_URL": "sqlite://",
        "SUCCESS_RATE": 1.0,
        "MAX_DELAY_MS": 0,
        "STORAGE_KEY": "test-todo-lists",
    }
    app = create_app(test_config)

    yield app

    # Teardown
    app.extensions["database"].close()
