"""Tests for collection endpoints, including cross-user access."""
from collections.abc import Callable

from httpx import AsyncClient

from models.user import User


async def _create_collection(client: AsyncClient, name: str = "Reading") -> int:
    response = await client.post("/collections", json={"name": name})
    assert response.status_code == 201
    return response.json()["id"]


async def _add_member(client: AsyncClient, collection_id: int, user_id: int) -> None:
    response = await client.post(
        f"/collections/{collection_id}/members", json={"user_id": user_id},
    )
    assert response.status_code == 201


async def test_create_collection_returns_summary(client: AsyncClient, owner: User) -> None:
    response = await client.post(
        "/collections",
        json={"name": "  Reading  ", "description": "Things to read"},
    )

    assert response.status_code == 201
    data = response.json()
    assert data["name"] == "Reading"
    assert data["description"] == "Things to read"
    assert data["is_public"] is False
    assert data["owner"] == {"id": owner.id, "name": "Olivia Owner", "email": "owner@test.com"}
    assert data["members"] == []
    assert data["bookmark_count"] == 0
    assert data["member_count"] == 0


async def test_create_collection_empty_name_returns_400(client: AsyncClient) -> None:
    response = await client.post("/collections", json={"name": "   "})

    assert response.status_code == 400
    assert response.json()["detail"] == "Collection name is required"


async def test_list_collections_requires_auth(
    client_factory: Callable[[User | None], AsyncClient],
) -> None:
    async with client_factory(None) as client:
        response = await client.get("/collections")
    assert response.status_code == 401


async def test_owner_invites_member_who_reads_detail(
    client_factory: Callable[[User | None], AsyncClient],
    owner: User,
    member: User,
) -> None:
    async with client_factory(owner) as client:
        collection_id = await _create_collection(client)
        lookup = await client.post("/users/search", json={"email": "member@test.com"})
        await _add_member(client, collection_id, lookup.json()["user"]["id"])

    async with client_factory(member) as client:
        listed = await client.get("/collections")
        detail = await client.get(f"/collections/{collection_id}")

    assert [c["id"] for c in listed.json()] == [collection_id]
    assert detail.status_code == 200
    data = detail.json()
    assert data["owner"]["id"] == owner.id
    assert data["bookmarks"] == []
    assert [m["user"]["id"] for m in data["members"]] == [member.id]
    assert data["member_count"] == 1


async def test_outsider_gets_404_for_collection(
    client_factory: Callable[[User | None], AsyncClient],
    owner: User,
    outsider: User,
) -> None:
    async with client_factory(owner) as client:
        collection_id = await _create_collection(client)

    async with client_factory(outsider) as client:
        get_response = await client.get(f"/collections/{collection_id}")
        put_response = await client.put(f"/collections/{collection_id}", json={"name": "X"})
        delete_response = await client.delete(f"/collections/{collection_id}")
        listed = await client.get("/collections")

    assert get_response.status_code == 404
    assert get_response.json()["detail"] == "Collection not found"
    assert put_response.status_code == 404
    assert delete_response.status_code == 404
    assert listed.json() == []


async def test_missing_collection_returns_404(client: AsyncClient) -> None:
    response = await client.get("/collections/999999")
    assert response.status_code == 404


async def test_non_numeric_collection_id_returns_400(client: AsyncClient) -> None:
    response = await client.get("/collections/abc")
    assert response.status_code == 400


async def test_update_collection_partial(client: AsyncClient) -> None:
    created = await client.post(
        "/collections", json={"name": "Old", "description": "Keep"},
    )
    collection_id = created.json()["id"]

    response = await client.put(f"/collections/{collection_id}", json={"is_public": True})

    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Old"
    assert data["description"] == "Keep"
    assert data["is_public"] is True


async def test_member_cannot_update_or_delete(
    client_factory: Callable[[User | None], AsyncClient],
    owner: User,
    member: User,
) -> None:
    async with client_factory(owner) as client:
        collection_id = await _create_collection(client)
        await _add_member(client, collection_id, member.id)

    async with client_factory(member) as client:
        put_response = await client.put(f"/collections/{collection_id}", json={"name": "Mine"})
        delete_response = await client.delete(f"/collections/{collection_id}")
        invite_response = await client.post(
            f"/collections/{collection_id}/members", json={"user_id": owner.id},
        )

    assert put_response.status_code == 403
    assert put_response.json()["detail"] == "Only collection owner can edit"
    assert delete_response.status_code == 403
    assert delete_response.json()["detail"] == "Only collection owner can delete"
    assert invite_response.status_code == 403


async def test_delete_collection_returns_204_and_keeps_bookmarks(client: AsyncClient) -> None:
    collection_id = await _create_collection(client)
    bookmark = await client.post("/bookmarks", json={"title": "T", "url": "https://e.example"})
    await client.post(
        f"/collections/{collection_id}/bookmarks",
        json={"bookmark_id": bookmark.json()["id"]},
    )

    response = await client.delete(f"/collections/{collection_id}")

    assert response.status_code == 204
    assert (await client.get(f"/collections/{collection_id}")).status_code == 404
    assert len((await client.get("/bookmarks")).json()) == 1


async def test_add_member_twice_returns_409(client: AsyncClient, member: User) -> None:
    collection_id = await _create_collection(client)
    await _add_member(client, collection_id, member.id)

    response = await client.post(
        f"/collections/{collection_id}/members", json={"user_id": member.id},
    )

    assert response.status_code == 409
    assert response.json()["detail"] == "User is already a member"
    detail = await client.get(f"/collections/{collection_id}")
    assert detail.json()["member_count"] == 1


async def test_add_owner_as_member_returns_409(client: AsyncClient, owner: User) -> None:
    collection_id = await _create_collection(client)

    response = await client.post(
        f"/collections/{collection_id}/members", json={"user_id": owner.id},
    )

    assert response.status_code == 409


async def test_add_unknown_member_returns_404(client: AsyncClient) -> None:
    collection_id = await _create_collection(client)

    response = await client.post(
        f"/collections/{collection_id}/members", json={"user_id": 999999},
    )

    assert response.status_code == 404
    assert response.json()["detail"] == "User not found"


async def test_add_member_without_user_id_returns_400(client: AsyncClient) -> None:
    collection_id = await _create_collection(client)

    response = await client.post(f"/collections/{collection_id}/members", json={})

    assert response.status_code == 400


async def test_remove_member_is_idempotent(client: AsyncClient, member: User) -> None:
    collection_id = await _create_collection(client)
    await _add_member(client, collection_id, member.id)

    first = await client.request(
        "DELETE", f"/collections/{collection_id}/members", json={"user_id": member.id},
    )
    second = await client.request(
        "DELETE", f"/collections/{collection_id}/members", json={"user_id": member.id},
    )

    assert first.status_code == 204
    assert second.status_code == 204
    detail = await client.get(f"/collections/{collection_id}")
    assert detail.json()["members"] == []


async def test_member_adds_public_bookmark_of_another_user(
    client_factory: Callable[[User | None], AsyncClient],
    owner: User,
    member: User,
    outsider: User,
) -> None:
    async with client_factory(outsider) as client:
        public = await client.post("/bookmarks", json={"title": "Pub", "url": "https://p.example"})

    async with client_factory(owner) as client:
        collection_id = await _create_collection(client)
        await _add_member(client, collection_id, member.id)

    async with client_factory(member) as client:
        response = await client.post(
            f"/collections/{collection_id}/bookmarks",
            json={"bookmark_id": public.json()["id"]},
        )

    assert response.status_code == 201
    data = response.json()
    assert data["collection_id"] == collection_id
    assert data["bookmark"]["title"] == "Pub"
    assert "added_at" in data

    async with client_factory(owner) as client:
        detail = await client.get(f"/collections/{collection_id}")
    assert [link["bookmark"]["id"] for link in detail.json()["bookmarks"]] == [
        public.json()["id"],
    ]


async def test_add_private_bookmark_of_another_user_returns_404(
    client_factory: Callable[[User | None], AsyncClient],
    owner: User,
    outsider: User,
) -> None:
    async with client_factory(outsider) as client:
        private = await client.post(
            "/bookmarks",
            json={"title": "Secret", "url": "https://s.example", "is_public": False},
        )

    async with client_factory(owner) as client:
        collection_id = await _create_collection(client)
        response = await client.post(
            f"/collections/{collection_id}/bookmarks",
            json={"bookmark_id": private.json()["id"]},
        )
        detail = await client.get(f"/collections/{collection_id}")

    assert response.status_code == 404
    assert response.json()["detail"] == "Bookmark not found"
    assert detail.json()["bookmark_count"] == 0


async def test_add_bookmark_twice_returns_409(client: AsyncClient) -> None:
    collection_id = await _create_collection(client)
    bookmark = await client.post("/bookmarks", json={"title": "T", "url": "https://e.example"})
    body = {"bookmark_id": bookmark.json()["id"]}

    first = await client.post(f"/collections/{collection_id}/bookmarks", json=body)
    second = await client.post(f"/collections/{collection_id}/bookmarks", json=body)

    assert first.status_code == 201
    assert second.status_code == 409
    assert second.json()["detail"] == "Bookmark is already in collection"


async def test_remove_bookmark_from_collection_is_idempotent(client: AsyncClient) -> None:
    collection_id = await _create_collection(client)
    bookmark = await client.post("/bookmarks", json={"title": "T", "url": "https://e.example"})
    body = {"bookmark_id": bookmark.json()["id"]}
    await client.post(f"/collections/{collection_id}/bookmarks", json=body)

    first = await client.request("DELETE", f"/collections/{collection_id}/bookmarks", json=body)
    second = await client.request("DELETE", f"/collections/{collection_id}/bookmarks", json=body)

    assert first.status_code == 204
    assert second.status_code == 204
    detail = await client.get(f"/collections/{collection_id}")
    assert detail.json()["bookmarks"] == []
    assert len((await client.get("/bookmarks")).json()) == 1
