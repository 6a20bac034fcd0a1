import pytest

from app import create_app
from config import Settings


@pytest.fixture
def settings():
    return Settings(openai_api_key=None)


@pytest.fixture
def client(settings):
    app = create_app(settings)
    app.config["TESTING"] = True
    return app.test_client()
