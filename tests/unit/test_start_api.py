import importlib.util
from pathlib import Path

import pytest

from shipping_quotes.core.config import Settings

SCRIPT = Path(__file__).resolve().parents[2] / "scripts" / "start_api.py"


@pytest.fixture
def start_api():
    spec = importlib.util.spec_from_file_location("start_api", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_server_options_come_from_settings(start_api):
    config = Settings(_env_file=None, ENVIRONMENT="development", HOST="127.0.0.1", PORT=8080, LOG_LEVEL="DEBUG")
    assert start_api.server_options(config) == {
        "host": "127.0.0.1",
        "port": 8080,
        "log_level": "debug",
        "reload": False,
    }


def test_main_runs_app(start_api, monkeypatch):
    calls = []
    monkeypatch.setattr(start_api.uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs)))

    start_api.main()

    assert calls[0][0] == "shipping_quotes.main:app"
    assert set(calls[0][1]) == {"host", "port", "log_level", "reload"}
