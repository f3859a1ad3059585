import pytest

from claudeserver.schema import _ClaudeServerSettings


@pytest.fixture(autouse=True)
def no_dotenv(monkeypatch):
    # keep a developer's .env out of the tests
    monkeypatch.setitem(_ClaudeServerSettings.model_config, "env_file", None)
