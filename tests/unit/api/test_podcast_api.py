from pathlib import Path

from fastapi.testclient import TestClient

from tests.helpers.catalog import build_app

PNG = ("cover.jpg", b"jpeg-bytes", "image/jpeg")
OGG = ("episode.ogg", b"ogg-bytes", "audio/ogg")


def _create(client: TestClient, **overrides) -> dict:
    data = {
        "title": "Pilot",
        "presenter": "Grace Hopper",
        "description": "Compilers and ships",
        "categories": ["Technology", "Society & Culture"],
        "guests": "Ada, Alan",
        "year": "2021",
    }
    data.update(overrides)
    response = client.post("/api/podcasts", data=data, files={"thumbnail_file": PNG, "content_file": OGG})
    assert response.status_code == 201, response.text
    return response.json()


def test_podcast_lifecycle_end_to_end(tmp_path: Path) -> None:
    app, store = build_app(tmp_path)
    client = TestClient(app)

    created = _create(client)
    assert created["categories"] == ["Technology", "Society & Culture"]
    assert created["guests"] == ["Ada", "Alan"]
    assert (created["episode_number"], created["season_number"]) == (1, 1)
    assert f"{created['id']}/content.ogg" in store.objects

    updated = client.put(
        "/api/podcasts",
        data={"id": created["id"], "episode_number": "2", "categories": "Science"},
    )
    assert updated.status_code == 200, updated.text
    assert updated.json()["episode_number"] == 2
    assert updated.json()["categories"] == ["Science"]

    content = client.get("/api/podcasts/content", params={"id": created["id"]})
    assert content.json()["url"].startswith(f"https://cdn.test/{created['id']}/content.ogg")

    assert client.delete(f"/api/podcasts/{created['id']}").status_code == 204
    assert client.get(f"/api/podcasts/{created['id']}").status_code == 404
    assert store.objects == {}


def test_podcast_search_endpoints(tmp_path: Path) -> None:
    app, _ = build_app(tmp_path)
    client = TestClient(app)
    first = _create(client)
    second = _create(client, title="Markets", presenter="Warren", categories=["Business"], guests="Charlie")

    assert [p["id"] for p in client.get("/api/podcasts/search", params={"presenter": "hopper"}).json()] == [
        first["id"]
    ]
    assert [p["id"] for p in client.get("/api/podcasts/search", params={"guest": "char"}).json()] == [second["id"]]
    by_guests = client.post("/api/podcasts/search/by-guests", json=["Alan", "Charlie"]).json()
    assert [p["id"] for p in by_guests] == [first["id"], second["id"]]
    by_categories = client.post("/api/podcasts/search/by-categories", json=["business"]).json()
    assert [p["id"] for p in by_categories] == [second["id"]]


def test_podcast_owner_listing(tmp_path: Path) -> None:
    app, _ = build_app(tmp_path)
    client = TestClient(app)
    created = _create(client)

    listing = client.get("/api/podcasts/owner/Grace").json()

    assert [item["id"] for item in listing] == [created["id"]]
    assert listing[0]["presenter"] == "Grace Hopper"


def test_podcast_rejects_too_many_categories(tmp_path: Path) -> None:
    app, _ = build_app(tmp_path)
    client = TestClient(app)

    response = client.post(
        "/api/podcasts",
        data={
            "title": "Too much",
            "presenter": "Host",
            "description": "d",
            "categories": ["Comedy", "News", "Sports", "Arts"],
        },
        files={"thumbnail_file": PNG, "content_file": OGG},
    )

    assert response.status_code == 422


def test_disabled_music_module_is_not_mounted(tmp_path: Path) -> None:
    app, _ = build_app(tmp_path, music_enabled=False)
    client = TestClient(app)

    assert client.get("/api/music/search", params={"title": "x"}).status_code == 404
    assert client.get("/api/podcasts/search", params={"title": "x"}).status_code == 200
