import pytest
from sqlalchemy import delete

from app.api.v1 import usuarios as usuarios_api
from app.middleware.rate_limit import MemoryWindowStore, set_window_store
from app.models import Usuario
from app.settings import settings
from app.utils.jwt_manager import decode_access_token

REGISTER_URL = "/api/usuarios/register"
LOGIN_URL = "/api/usuarios/login"
REFRESH_URL = "/api/usuarios/refresh"
LOGOUT_URL = "/api/usuarios/logout"
ME_URL = "/api/usuarios/me"


def refresh_set_cookie(response) -> str:
    headers = [
        value
        for value in response.headers.get_list("set-cookie")
        if value.startswith(f"{settings.REFRESH_COOKIE_NAME}=")
    ]
    assert len(headers) == 1
    return headers[0].lower()


@pytest.mark.asyncio
async def test_register_returns_tokens_and_sets_refresh_cookie(client):
    response = await client.post(
        REGISTER_URL,
        json={"nome": "Ana", "email": "  Ana@Example.COM ", "senha": "segredo123"},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["token_type"] == "Bearer"
    assert body["expires_in"] == settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60
    assert body["user"]["email"] == "ana@example.com"
    assert body["user"]["papel"] == 0
    assert "senha_hash" not in body["user"]

    payload = decode_access_token(body["access_token"])
    assert payload["sub"] == str(body["user"]["id"])
    assert payload["papel"] == 0
    assert payload["nome"] == "Ana"

    cookie = refresh_set_cookie(response)
    assert "httponly" in cookie
    assert "path=/api/usuarios" in cookie
    assert "samesite=lax" in cookie


@pytest.mark.asyncio
async def test_register_duplicate_email_conflicts(client, make_user):
    await make_user(email="ana@example.com")

    response = await client.post(
        REGISTER_URL,
        json={"nome": "Outra Ana", "email": "ANA@example.com", "senha": "segredo123"},
    )

    assert response.status_code == 409


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"nome": "Ana", "email": "ana@example.com"},
        {"nome": "  ", "email": "ana@example.com", "senha": "segredo123"},
        {"nome": "Ana", "email": "ana@example.com", "senha": "12345"},
    ],
)
async def test_register_rejects_incomplete_payload(client, payload):
    response = await client.post(REGISTER_URL, json=payload)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_login_with_valid_credentials(client, make_user):
    usuario = await make_user(email="ana@example.com", senha="segredo123")

    response = await client.post(
        LOGIN_URL, json={"email": "ANA@example.com", "senha": "segredo123"}
    )

    assert response.status_code == 200
    assert response.json()["user"]["id"] == usuario.id
    refresh_set_cookie(response)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "email, senha",
    [("ana@example.com", "senha-errada"), ("ninguem@example.com", "segredo123")],
)
async def test_login_with_bad_credentials_is_unauthorized(client, make_user, email, senha):
    await make_user(email="ana@example.com", senha="segredo123")

    response = await client.post(LOGIN_URL, json={"email": email, "senha": senha})

    assert response.status_code == 401
    assert response.json()["detail"] == "credenciais inválidas"


@pytest.mark.asyncio
async def test_login_without_fields_is_bad_request(client):
    response = await client.post(LOGIN_URL, json={"email": "ana@example.com"})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_refresh_rotates_cookie_and_issues_working_access_token(client, make_user):
    await make_user(email="ana@example.com", senha="segredo123")
    login = await client.post(
        LOGIN_URL, json={"email": "ana@example.com", "senha": "segredo123"}
    )
    first_cookie = login.cookies[settings.REFRESH_COOKIE_NAME]

    response = await client.post(REFRESH_URL)

    assert response.status_code == 200
    new_cookie = response.cookies[settings.REFRESH_COOKIE_NAME]
    assert new_cookie != first_cookie

    me = await client.get(
        ME_URL, headers={"Authorization": f"Bearer {response.json()['access_token']}"}
    )
    assert me.status_code == 200
    assert me.json()["email"] == "ana@example.com"


@pytest.mark.asyncio
async def test_refresh_without_cookie_is_unauthorized(client):
    response = await client.post(REFRESH_URL)

    assert response.status_code == 401
    assert "max-age=0" in refresh_set_cookie(response)


@pytest.mark.asyncio
async def test_refresh_with_invalid_cookie_is_unauthorized(client):
    client.cookies.set(settings.REFRESH_COOKIE_NAME, "nao-e-um-jwt")

    response = await client.post(REFRESH_URL)

    assert response.status_code == 401
    assert "max-age=0" in refresh_set_cookie(response)


@pytest.mark.asyncio
async def test_access_token_is_not_accepted_as_refresh_token(client, make_user, auth_headers):
    usuario = await make_user()
    access_token = auth_headers(usuario)["Authorization"].split(" ", 1)[1]
    client.cookies.set(settings.REFRESH_COOKIE_NAME, access_token)

    response = await client.post(REFRESH_URL)

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_logout_clears_refresh_cookie(client):
    response = await client.post(LOGOUT_URL)

    assert response.status_code == 204
    assert "max-age=0" in refresh_set_cookie(response)


@pytest.mark.asyncio
async def test_me_requires_token(client):
    response = await client.get(ME_URL)

    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_me_returns_current_user(client, make_user, auth_headers):
    usuario = await make_user(nome="Bia", email="bia@example.com")

    response = await client.get(ME_URL, headers=auth_headers(usuario))

    assert response.status_code == 200
    assert response.json() == {
        "id": usuario.id,
        "nome": "Bia",
        "email": "bia@example.com",
        "papel": 0,
    }


@pytest.mark.asyncio
async def test_register_requires_recaptcha_when_enabled(client, monkeypatch):
    monkeypatch.setattr(settings, "RECAPTCHA_SECRET_KEY", "recaptcha-secret")

    response = await client.post(
        REGISTER_URL,
        json={"nome": "Ana", "email": "ana@example.com", "senha": "segredo123"},
    )

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_login_attempts_are_rate_limited(client, make_user, monkeypatch):
    await make_user(email="ana@example.com", senha="segredo123")
    monkeypatch.setattr(settings, "RATE_LIMIT_ENABLED", True)
    monkeypatch.setattr(settings, "AUTH_RATE_LIMIT", 2)
    store = MemoryWindowStore()
    set_window_store(store)
    try:
        statuses = []
        for _ in range(3):
            response = await client.post(
                LOGIN_URL, json={"email": "ana@example.com", "senha": "errada"}
            )
            statuses.append(response.status_code)
    finally:
        set_window_store(None)

    assert statuses == [401, 401, 429]
    assert int(response.headers["retry-after"]) > 0


@pytest.mark.asyncio
async def test_login_with_unknown_email_still_checks_a_password(client, monkeypatch):
    calls = []
    monkeypatch.setattr(usuarios_api, "dummy_verify", lambda: calls.append(True))

    response = await client.post(
        LOGIN_URL, json={"email": "ninguem@example.com", "senha": "segredo123"}
    )

    assert response.status_code == 401
    assert calls == [True]


@pytest.mark.asyncio
async def test_token_of_deleted_user_is_unauthorized(
    client, make_user, auth_headers, session_factory
):
    usuario = await make_user()
    headers = auth_headers(usuario)
    async with session_factory() as session:
        await session.execute(delete(Usuario).where(Usuario.id == usuario.id))
        await session.commit()

    response = await client.get(ME_URL, headers=headers)

    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"
