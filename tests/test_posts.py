import pytest

from app.models import POST_TEXTO_MAX


async def create_post(client, usuario_id, texto="Olá, mundo"):
    response = await client.post(
        "/api/posts", json={"usuario_id": usuario_id, "texto": texto}
    )
    assert response.status_code == 201
    return response.json()


@pytest.mark.asyncio
async def test_create_post(client, make_user):
    usuario = await make_user()

    response = await client.post(
        "/api/posts", json={"usuario_id": usuario.id, "texto": "  Primeiro post  "}
    )

    assert response.status_code == 201
    body = response.json()
    assert body["usuario_id"] == usuario.id
    assert body["texto"] == "Primeiro post"
    assert body["id"] > 0
    assert body["data_criacao"] and body["data_atualizacao"]


@pytest.mark.asyncio
async def test_create_post_for_unknown_user_is_bad_request(client):
    response = await client.post("/api/posts", json={"usuario_id": 999, "texto": "oi"})

    assert response.status_code == 400
    assert "chave estrangeira" in response.json()["detail"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"usuario_id": 1},
        {"usuario_id": 0, "texto": "oi"},
        {"usuario_id": 1, "texto": "   "},
        {"usuario_id": 1, "texto": "x" * (POST_TEXTO_MAX + 1)},
    ],
)
async def test_create_post_rejects_invalid_body(client, make_user, payload):
    await make_user()

    response = await client.post("/api/posts", json=payload)

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_get_and_list_posts(client, make_user):
    ana = await make_user(email="ana@example.com")
    bia = await make_user(email="bia@example.com")
    primeiro = await create_post(client, ana.id, "primeiro")
    await create_post(client, bia.id, "da bia")
    terceiro = await create_post(client, ana.id, "terceiro")

    fetched = await client.get(f"/api/posts/{primeiro['id']}")
    assert fetched.status_code == 200
    assert fetched.json() == primeiro

    everything = await client.get("/api/posts")
    assert [p["texto"] for p in everything.json()] == ["terceiro", "da bia", "primeiro"]

    timeline = await client.get(f"/api/posts/usuario/{ana.id}")
    assert timeline.status_code == 200
    assert [p["id"] for p in timeline.json()] == [terceiro["id"], primeiro["id"]]


@pytest.mark.asyncio
async def test_list_posts_of_user_without_posts_is_empty(client, make_user):
    usuario = await make_user()

    response = await client.get(f"/api/posts/usuario/{usuario.id}")

    assert response.status_code == 200
    assert response.json() == []


@pytest.mark.asyncio
@pytest.mark.parametrize("post_id", ["0", "abc"])
async def test_invalid_post_id_is_bad_request(client, post_id):
    response = await client.get(f"/api/posts/{post_id}")
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_missing_post_is_not_found(client):
    response = await client.get("/api/posts/42")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_put_replaces_post(client, make_user):
    ana = await make_user(email="ana@example.com")
    bia = await make_user(email="bia@example.com")
    post = await create_post(client, ana.id)

    response = await client.put(
        f"/api/posts/{post['id']}", json={"usuario_id": bia.id, "texto": "novo texto"}
    )

    assert response.status_code == 200
    assert response.json()["usuario_id"] == bia.id
    assert response.json()["texto"] == "novo texto"


@pytest.mark.asyncio
async def test_put_missing_post_is_not_found(client, make_user):
    usuario = await make_user()

    response = await client.put(
        "/api/posts/42", json={"usuario_id": usuario.id, "texto": "novo"}
    )

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_put_with_unknown_user_is_bad_request(client, make_user):
    usuario = await make_user()
    post = await create_post(client, usuario.id)

    response = await client.put(
        f"/api/posts/{post['id']}", json={"usuario_id": 999, "texto": "novo"}
    )

    assert response.status_code == 400
    unchanged = await client.get(f"/api/posts/{post['id']}")
    assert unchanged.json()["usuario_id"] == usuario.id


@pytest.mark.asyncio
async def test_patch_updates_only_sent_fields(client, make_user):
    usuario = await make_user()
    post = await create_post(client, usuario.id, "antes")

    response = await client.patch(f"/api/posts/{post['id']}", json={"texto": "depois"})

    assert response.status_code == 200
    assert response.json()["texto"] == "depois"
    assert response.json()["usuario_id"] == usuario.id


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [{}, {"texto": None}, {"usuario_id": None}])
async def test_patch_rejects_empty_or_null_fields(client, make_user, payload):
    usuario = await make_user()
    post = await create_post(client, usuario.id)

    response = await client.patch(f"/api/posts/{post['id']}", json=payload)

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_patch_missing_post_is_not_found(client):
    response = await client.patch("/api/posts/42", json={"texto": "novo"})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_delete_post(client, make_user):
    usuario = await make_user()
    post = await create_post(client, usuario.id)

    first = await client.delete(f"/api/posts/{post['id']}")
    second = await client.delete(f"/api/posts/{post['id']}")

    assert first.status_code == 204
    assert second.status_code == 404
    assert (await client.get(f"/api/posts/{post['id']}")).status_code == 404
