"""Settings and gateway selection."""

from smartreader.core.config import Settings
from smartreader.core.dependencies import build_container, get_gateway
from smartreader.infrastructure.gateway.firebase import FirebaseGateway
from smartreader.infrastructure.gateway.memory import MemoryGateway


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("GATEWAY_BACKEND", "firebase")
    monkeypatch.setenv("FIREBASE_API_KEY", "key")
    monkeypatch.setenv("TOP_RATED_LIMIT", "5")

    config = Settings()

    assert config.gateway_backend == "firebase"
    assert config.firebase_api_key == "key"
    assert config.top_rated_limit == 5


def test_memory_backend_selected_by_default():
    assert isinstance(get_gateway(Settings(gateway_backend="memory")), MemoryGateway)


def test_firebase_backend_gets_configured():
    config = Settings(
        gateway_backend="firebase",
        firebase_api_key="key",
        firebase_project_id="proj",
        http_timeout=3.0,
    )

    gateway = get_gateway(config)

    assert isinstance(gateway, FirebaseGateway)
    assert (gateway.api_key, gateway.project_id, gateway.timeout) == ("key", "proj", 3.0)


def test_container_shares_one_gateway():
    gateway = MemoryGateway()
    container = build_container(gateway)

    assert container.session_store.auth_gateway is gateway
    assert container.book_store.document_gateway is gateway
    assert container.auth_listener.session_store is container.session_store
