"""Session store and auth-state listener."""

from unittest.mock import AsyncMock

import pytest

from conftest import PASSWORD
from smartreader.domain.entities import User
from smartreader.domain.gateway import USERS, GatewayError


async def test_register_creates_user_document(session_store, gateway):
    await session_store.register("ana@example.com", PASSWORD, "Ana")

    user = session_store.user
    assert user.name == "Ana" and user.email == "ana@example.com"
    assert await gateway.get_document(USERS, user.id) == {
        "id": user.id,
        "name": "Ana",
        "email": "ana@example.com",
    }
    assert session_store.loading is False
    assert session_store.error is None


async def test_login_loads_user(session_store):
    await session_store.register("ana@example.com", PASSWORD, "Ana")
    await session_store.logout()
    assert session_store.user is None

    await session_store.login("ana@example.com", PASSWORD)

    assert session_store.user.name == "Ana"
    assert session_store.loading is False


async def test_wrong_password_sets_message_and_reraises(session_store):
    await session_store.register("ana@example.com", PASSWORD, "Ana")
    previous = session_store.user

    with pytest.raises(GatewayError) as exc_info:
        await session_store.login("ana@example.com", "Wrong1234")

    assert exc_info.value.code == "auth/wrong-password"
    assert session_store.error == "Senha incorreta."
    assert session_store.loading is False
    assert session_store.user is previous


@pytest.mark.parametrize(
    "code, message",
    [
        ("auth/invalid-credential", "Credenciais inválidas. Verifique seu e-mail e senha."),
        ("auth/user-disabled", "Esta conta foi desativada."),
        ("auth/user-not-found", "Não existe usuário com este e-mail."),
        ("auth/too-many-requests", "Muitas tentativas sem sucesso. Tente novamente mais tarde."),
        (
            "auth/network-request-failed",
            "Erro de conexão. Verifique sua internet e tente novamente.",
        ),
        ("auth/something-else", "Ocorreu um erro ao fazer login. Tente novamente."),
    ],
)
async def test_login_error_table(session_store, gateway, code, message):
    gateway.sign_in = AsyncMock(side_effect=GatewayError(code))

    with pytest.raises(GatewayError):
        await session_store.login("ana@example.com", PASSWORD)

    assert session_store.error == message


async def test_login_non_gateway_error_uses_default(session_store, gateway):
    gateway.sign_in = AsyncMock(side_effect=RuntimeError("boom"))

    with pytest.raises(RuntimeError):
        await session_store.login("ana@example.com", PASSWORD)

    assert session_store.error == "Ocorreu um erro ao fazer login. Tente novamente."


async def test_disabled_account(session_store, gateway):
    await gateway.create_account("ana@example.com", PASSWORD)
    gateway.disable_account("ana@example.com")

    with pytest.raises(GatewayError):
        await session_store.login("ana@example.com", PASSWORD)

    assert session_store.error == "Esta conta foi desativada."


async def test_register_email_in_use(session_store):
    await session_store.register("ana@example.com", PASSWORD, "Ana")

    with pytest.raises(GatewayError):
        await session_store.register("ana@example.com", PASSWORD, "Other")

    assert session_store.error.startswith("Este e-mail já está sendo usado.")
    assert session_store.user.name == "Ana"


async def test_register_weak_password(session_store):
    with pytest.raises(GatewayError):
        await session_store.register("ana@example.com", "123", "Ana")

    assert session_store.error == "A senha é muito fraca. Por favor, use uma senha mais forte."
    assert session_store.user is None


async def test_register_operation_not_allowed(session_store, gateway):
    gateway.create_account = AsyncMock(side_effect=GatewayError("auth/operation-not-allowed"))

    with pytest.raises(GatewayError):
        await session_store.register("ana@example.com", PASSWORD, "Ana")

    assert session_store.error == "O cadastro com e-mail e senha não está habilitado."


async def test_logout_failure(session_store, gateway):
    await session_store.register("ana@example.com", PASSWORD, "Ana")
    gateway.sign_out = AsyncMock(side_effect=GatewayError("auth/internal-error"))

    with pytest.raises(GatewayError):
        await session_store.logout()

    assert session_store.error == "Ocorreu um erro ao sair. Tente novamente."
    assert session_store.user is not None
    assert session_store.loading is False


async def test_listener_initializes_anonymous_session(session_store, listener):
    assert session_store.status == "uninitialized"

    await listener.start()

    assert session_store.initialized is True
    assert session_store.loading is False
    assert session_store.user is None
    assert session_store.status == "anonymous"


async def test_listener_tracks_sign_in_and_out(session_store, listener, gateway):
    await listener.start()
    identity = await gateway.create_account("ana@example.com", PASSWORD)
    user = User(id=identity.uid, name="Ana", email="ana@example.com")
    await gateway.set_document(USERS, identity.uid, user.to_document())

    await gateway.sign_in("ana@example.com", PASSWORD)
    assert session_store.user.name == "Ana"
    assert session_store.status == "authenticated"

    await gateway.sign_out()
    assert session_store.user is None
    assert session_store.status == "anonymous"


async def test_listener_sets_none_when_profile_fetch_fails(session_store, listener, gateway):
    await gateway.create_account("ana@example.com", PASSWORD)
    gateway.get_document = AsyncMock(side_effect=GatewayError("unavailable"))

    await listener.start()

    assert session_store.user is None
    assert session_store.initialized is True


async def test_listener_subscribes_once(listener, gateway):
    gateway.on_auth_state_change = AsyncMock(return_value=lambda: None)

    await listener.start()
    await listener.start()

    gateway.on_auth_state_change.assert_awaited_once()
    listener.stop()
    assert not listener.running


async def test_stopped_listener_ignores_events(session_store, listener, gateway):
    await listener.start()
    listener.stop()
    session_store.set_initialized(False)

    await gateway.create_account("ana@example.com", PASSWORD)

    assert session_store.initialized is False


async def test_snapshot_is_a_copy(session_store):
    await session_store.register("ana@example.com", PASSWORD, "Ana")

    snap = session_store.snapshot()
    snap["user"]["name"] = "Changed"

    assert session_store.user.name == "Ana"
    assert snap["loading"] is False
    assert snap["error"] is None


async def test_login_stays_loading_until_profile_is_fetched(session_store, listener, gateway):
    await session_store.register("ana@example.com", PASSWORD, "Ana")
    await session_store.logout()
    await listener.start()

    seen = []
    real_get_document = gateway.get_document

    async def recording_get_document(collection, doc_id):
        seen.append(session_store.loading)
        return await real_get_document(collection, doc_id)

    gateway.get_document = recording_get_document
    await session_store.login("ana@example.com", PASSWORD)

    # the listener's fetch runs first, then the login's own fetch
    assert seen == [True, True]
    assert session_store.loading is False
    assert session_store.user.name == "Ana"
