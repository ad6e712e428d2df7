import pytest
from fastapi.testclient import TestClient

import xss_defender.engines.instances as services
from xss_defender.app.main import app
from xss_defender.app.policy import policy
from xss_defender.engines.sanitizer_engine import SanitizerEngine


@pytest.fixture
def sanitizer():
    return SanitizerEngine()


@pytest.fixture
def make_client(monkeypatch):
    """Starts the app against an in-memory defender policy."""
    clients = []

    def _make(strategy="trim", enabled=True, escape_after_trim=False):
        monkeypatch.setattr(policy, "_config", {
            "defender": {
                "enabled": enabled,
                "strategy": strategy,
                "escape_after_trim": escape_after_trim,
            }
        })
        client = TestClient(app)
        client.__enter__()
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.__exit__(None, None, None)
    services.sanitizer_service = None
    services.defender_service = None
