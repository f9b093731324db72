import pytest


@pytest.fixture
def api_key(monkeypatch):
    from services import openai_client

    monkeypatch.setattr(openai_client, "OPENAI_API_KEY", "sk-test")
    return "sk-test"


@pytest.fixture
def no_api_key(monkeypatch):
    from services import openai_client

    monkeypatch.setattr(openai_client, "OPENAI_API_KEY", None)
