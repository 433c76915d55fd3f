import pytest
from fastapi.testclient import TestClient

from api.dependencies import Settings
from main import create_app


def make_bot_payload(**overrides):
    payload = {
        'name': 'Test Bot',
        'exchange': 'bitget',
        'pair': 'BTC/USDT',
        'api_key': 'k',
        'api_secret': 's',
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def bot_payload():
    return make_bot_payload()


@pytest.fixture
def app():
    return create_app(Settings(simulation_mode=False, default_position_size=0.01))


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def simulation_client():
    return TestClient(create_app(Settings(simulation_mode=True)))
