"""End-to-end smoke tests for the Massive Wiki API.

Starts the app against a temp wiki home and exercises the page lifecycle:
create, read, save, rename, delete, tree, special pages and config.
"""

import importlib
import os

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient


@pytest.fixture()
def wiki_app(tmp_path):
    """Create a fresh app instance pointing at a temp wiki home.

    Reloads config and main modules so the app picks up the temp
    wiki_home, then runs startup to seed the wiki and build the index.
    """
    os.environ["MASSIVEWIKI_WIKI_HOME"] = str(tmp_path)

    import massivewiki.config
    importlib.reload(massivewiki.config)
    import massivewiki.main
    importlib.reload(massivewiki.main)
    massivewiki.main.startup()

    yield massivewiki.main.app

    os.environ.pop("MASSIVEWIKI_WIKI_HOME", None)


@pytest_asyncio.fixture()
async def client(wiki_app):
    """Async HTTP client wired to the app (no lifespan)."""
    transport = ASGITransport(app=wiki_app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


def flatten(nodes):
    for node in nodes:
        yield node
        yield from flatten(node["children"])


# ============================================================
# Initialization
# ============================================================


class TestInitialization:
    @pytest.mark.asyncio
    async def test_seeded_home_page(self, client):
        resp = await client.get("/api/page/home")
        assert resp.status_code == 200
        data = resp.json()
        assert data["path"] == "home"
        assert "Welcome to Massive Wiki" in data["content"]
        # getting-started exists, so its link is not red
        assert 'href="/getting-started" class="wikilink"' in data["content"]

    @pytest.mark.asyncio
    async def test_empty_path_is_home(self, client):
        resp = await client.get("/api/page/")
        assert resp.status_code == 200
        assert resp.json()["path"] == "home"

    @pytest.mark.asyncio
    async def test_tree(self, client):
        resp = await client.get("/api/tree")
        assert resp.status_code == 200
        tree = resp.json()
        assert [n["name"] for n in tree] == ["home", "getting-started"]
        assert tree[0] == {
            "name": "home",
            "path": "home",
            "type": "page",
            "hasContent": True,
            "children": [],
        }


# ============================================================
# Page lifecycle
# ============================================================


class TestPages:
    @pytest.mark.asyncio
    async def test_missing_page_404(self, client):
        resp = await client.get("/api/page/nope")
        assert resp.status_code == 404
        assert "error" in resp.json()

    @pytest.mark.asyncio
    async def test_save_and_read(self, client):
        content = "# Intro\n\n---\n\nfoot"
        resp = await client.post("/api/page/guides/intro", json={"content": content})
        assert resp.json() == {"success": True, "path": "guides/intro"}

        data = (await client.get("/api/page/guides/intro")).json()
        assert "Intro</h1>" in data["content"]
        assert "foot" in data["footer"]
        assert data["raw"] == content

    @pytest.mark.asyncio
    async def test_save_requires_content(self, client):
        resp = await client.post("/api/page/x", json={})
        assert resp.status_code == 400

    @pytest.mark.asyncio
    async def test_saved_page_is_indexed(self, client):
        await client.post("/api/page/computers/atari", json={"content": "# Atari"})
        resp = await client.post("/api/preview", json={"content": "[[Atari]]"})
        assert 'data-page="computers/atari" data-exists="true"' in resp.json()["html"]

    @pytest.mark.asyncio
    async def test_create(self, client):
        resp = await client.post("/api/create", json={"path": "systems/retro", "title": "Retro"})
        assert resp.status_code == 200
        assert (await client.get("/api/exists/systems/retro")).json() == {"exists": True}
        raw = (await client.get("/api/page/systems/retro")).json()["raw"]
        assert raw.startswith("# Retro")

    @pytest.mark.asyncio
    async def test_create_existing(self, client):
        resp = await client.post("/api/create", json={"path": "home"})
        assert resp.status_code == 400

    @pytest.mark.asyncio
    async def test_create_requires_path(self, client):
        resp = await client.post("/api/create", json={"title": "No path"})
        assert resp.status_code == 400

    @pytest.mark.asyncio
    async def test_red_link_auto_parenting(self, client):
        await client.post("/api/create", json={"path": "systems/retro"})
        await client.post("/api/page/systems/retro", json={"content": "[[Nintendo]]"})
        html = (await client.get("/api/page/systems/retro")).json()["content"]
        assert 'data-page="systems/retro/nintendo" data-exists="false"' in html

        await client.post("/api/page/home", json={"content": "[[Nintendo]]"})
        html = (await client.get("/api/page/home")).json()["content"]
        assert 'data-page="nintendo" data-exists="false"' in html


class TestDelete:
    @pytest.mark.asyncio
    async def test_delete_page_parent(self, client):
        await client.post("/api/create", json={"path": "guides"})
        await client.post("/api/create", json={"path": "guides/intro"})
        await client.post("/api/create", json={"path": "guides/advanced/tips"})

        children = (await client.get("/api/children/guides")).json()
        assert children["count"] == 2

        resp = await client.delete("/api/page/guides")
        assert resp.json() == {"success": True}

        paths = [n["path"] for n in flatten((await client.get("/api/tree")).json())]
        assert not any(p.startswith("guides") for p in paths)
        html = (await client.post("/api/preview", json={"content": "[[intro]]"})).json()["html"]
        assert 'data-exists="false"' in html

    @pytest.mark.asyncio
    async def test_delete_home_forbidden(self, client):
        resp = await client.delete("/api/page/home")
        assert resp.status_code == 400
        assert (await client.get("/api/exists/home")).json() == {"exists": True}


# ============================================================
# Rename
# ============================================================


class TestRename:
    @pytest.mark.asyncio
    async def test_rename_updates_references(self, client):
        await client.post("/api/page/guides/old-name", json={"content": "# Old"})
        await client.post("/api/page/home", json={"content": "Go to [[old-name]]"})
        await client.post("/api/page/guides/other", json={"content": "[text](old-name)"})

        refs = (await client.get("/api/references/guides/old-name")).json()
        assert refs["count"] == 2

        resp = await client.post(
            "/api/rename", json={"oldPath": "guides/old-name", "newName": "new-name"}
        )
        data = resp.json()
        assert data["success"] is True
        assert data["newPath"] == "guides/new-name"
        assert data["updatedCount"] == 2
        assert sorted(data["updatedPages"]) == ["guides/other", "home"]

        home = (await client.get("/api/page/home")).json()
        assert home["raw"] == "Go to [[new-name]]"
        assert 'data-page="guides/new-name" data-exists="true"' in home["content"]
        other = (await client.get("/api/page/guides/other")).json()
        assert other["raw"] == "[text](new-name)"

    @pytest.mark.asyncio
    async def test_rename_home_forbidden(self, client):
        resp = await client.post("/api/rename", json={"oldPath": "home", "newName": "start"})
        assert resp.status_code == 400

    @pytest.mark.asyncio
    async def test_rename_invalid_name(self, client):
        resp = await client.post(
            "/api/rename", json={"oldPath": "getting-started", "newName": "bad name"}
        )
        assert resp.status_code == 400

    @pytest.mark.asyncio
    async def test_rename_missing(self, client):
        resp = await client.post("/api/rename", json={"oldPath": "ghost", "newName": "spirit"})
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_rename_requires_fields(self, client):
        resp = await client.post("/api/rename", json={"oldPath": "getting-started"})
        assert resp.status_code == 400


# ============================================================
# Special pages and config
# ============================================================


class TestSpecialAndConfig:
    @pytest.mark.asyncio
    async def test_sidebar(self, client):
        resp = await client.get("/api/special/sidebar")
        assert "Quick Links" in resp.json()["content"]

        await client.post("/api/special/sidebar", json={"content": "[[home|Start]]"})
        data = (await client.get("/api/special/sidebar", params={"render": True})).json()
        assert data["content"] == "[[home|Start]]"
        assert ">Start</a>" in data["html"]

    @pytest.mark.asyncio
    async def test_unknown_special(self, client):
        resp = await client.get("/api/special/secret")
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_config_roundtrip(self, client):
        config = (await client.get("/api/config")).json()
        assert config["wikiName"] == "Massive Wiki"

        config["wikiName"] = "Retro Wiki"
        config["enableWikilinks"] = False
        await client.post("/api/config", json=config)

        assert (await client.get("/api/config")).json()["wikiName"] == "Retro Wiki"
        html = (await client.post("/api/preview", json={"content": "[[home]]"})).json()["html"]
        assert "<a" not in html

    @pytest.mark.asyncio
    async def test_custom_home_page(self, client):
        await client.post("/api/create", json={"path": "start"})
        config = (await client.get("/api/config")).json()
        config["defaultHomePage"] = "start"
        await client.post("/api/config", json=config)

        assert (await client.delete("/api/page/start")).status_code == 400
        resp = await client.delete("/api/page/getting-started")
        assert resp.status_code == 200
