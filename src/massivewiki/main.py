"""Massive Wiki FastAPI application."""

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Body, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from massivewiki.config import settings
from massivewiki.core.errors import WikiError
from massivewiki.core.index import get_index, init_index
from massivewiki.core.models import PageReference, TreeNode, WikiConfig
from massivewiki.core.names import clean_path
from massivewiki.core.parser import render_content, render_page
from massivewiki.core.references import find_references, rename_page
from massivewiki.core.special import SpecialStore, initialize_wiki
from massivewiki.core.storage import FileStorage
from massivewiki.core.tree import build_tree

logger = logging.getLogger(__name__)


def startup() -> None:
    """Create the wiki layout if needed and build the page index."""
    logger.info("Wiki home directory: %s", settings.wiki_home)
    initialize_wiki(settings.wiki_home)
    init_index(settings.pages_dir)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: initialize wiki and page index."""
    startup()
    yield


# Initialize app
app = FastAPI(
    title=settings.app_title,
    debug=settings.debug,
    lifespan=lifespan,
)

# Initialize storage
storage = FileStorage(settings.pages_dir, home_page=settings.home_page)
special = SpecialStore(settings.wiki_dir)


class SaveRequest(BaseModel):
    content: str | None = None


class CreateRequest(BaseModel):
    path: str = ""
    title: str | None = None


class RenameRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    old_path: str = Field("", alias="oldPath")
    new_name: str = Field("", alias="newName")


class PreviewRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    content: str = ""
    current_page: str | None = Field(None, alias="currentPage")


@app.exception_handler(WikiError)
async def wiki_error_handler(request: Request, exc: WikiError) -> JSONResponse:
    """Turn core errors into JSON error responses."""
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc)})


async def load_config() -> WikiConfig:
    """Load the wiki config and keep the storage's home page in sync."""
    config = await special.get_config()
    storage.home_page = config.default_home_page or settings.home_page
    return config


# ========== Pages ==========


@app.get("/api/tree", response_model=list[TreeNode])
async def api_tree():
    """Page hierarchy for the navigation sidebar."""
    return build_tree(settings.pages_dir)


@app.get("/api/page/{path:path}")
async def api_get_page(path: str):
    """Rendered page body and footer plus the raw markdown."""
    config = await load_config()
    path = clean_path(path) or storage.home_page
    content = await storage.read(path)
    html, footer_html = render_page(
        content,
        path,
        get_index(),
        home_page=storage.home_page,
        enable_wikilinks=config.enable_wikilinks,
    )
    return {"path": path, "content": html, "footer": footer_html, "raw": content}


@app.post("/api/page/{path:path}")
async def api_save_page(path: str, request: SaveRequest):
    """Save page content."""
    if not request.content:
        raise HTTPException(status_code=400, detail="Content is required")
    path = clean_path(path) or storage.home_page
    is_new = not await storage.exists(path)
    page = await storage.write(path, request.content)
    if is_new:
        get_index().rebuild()
    return {"success": True, "path": page.path}


@app.delete("/api/page/{path:path}")
async def api_delete_page(path: str):
    """Delete a page and every page below it."""
    await load_config()
    await storage.delete(path)
    get_index().rebuild()
    return {"success": True}


@app.get("/api/exists/{path:path}")
async def api_exists(path: str):
    """Check if a page exists."""
    return {"exists": await storage.exists(path)}


@app.post("/api/create")
async def api_create(request: CreateRequest):
    """Create a new page with stub content."""
    if not clean_path(request.path):
        raise HTTPException(status_code=400, detail="Path is required")
    page = await storage.create(request.path, request.title)
    get_index().rebuild()
    return {"success": True, "path": page.path}


@app.get("/api/children/{path:path}")
async def api_children(path: str):
    """All pages nested below a page, for delete confirmation."""
    children = await storage.list_children(path)
    return {"children": children, "count": len(children)}


@app.get("/api/references/{path:path}")
async def api_references(path: str):
    """Pages that link to the given page."""
    references = await find_references(storage, path)
    return {
        "references": [_reference_to_dict(r) for r in references],
        "count": len(references),
    }


def _reference_to_dict(reference: PageReference) -> dict[str, Any]:
    return {
        "file": reference.path,
        "wikilinks": reference.wikilinks,
        "mdlinks": reference.mdlinks,
        "total": reference.total,
    }


@app.post("/api/rename")
async def api_rename(request: RenameRequest):
    """Rename a page and update every link to it."""
    if not request.old_path or not request.new_name:
        raise HTTPException(status_code=400, detail="oldPath and newName are required")
    await load_config()
    result = await rename_page(storage, get_index(), request.old_path, request.new_name)
    return {
        "success": True,
        **result.model_dump(by_alias=True),
        "updatedCount": result.updated_count,
    }


@app.post("/api/preview")
async def api_preview(request: PreviewRequest):
    """Render markdown from the editor."""
    if not request.content:
        raise HTTPException(status_code=400, detail="Content is required")
    config = await load_config()
    html = render_content(
        request.content,
        request.current_page or storage.home_page,
        get_index(),
        home_page=storage.home_page,
        enable_wikilinks=config.enable_wikilinks,
    )
    return {"html": html}


# ========== Special pages & config ==========


@app.get("/api/special/{name}")
async def api_get_special(name: str, render: bool = False):
    """Raw sidebar or footer markdown, optionally rendered."""
    content = await special.get_special(name)
    if not render:
        return {"content": content}
    config = await load_config()
    html = render_content(
        content,
        None,
        get_index(),
        home_page=storage.home_page,
        enable_wikilinks=config.enable_wikilinks,
    )
    return {"content": content, "html": html}


@app.post("/api/special/{name}")
async def api_save_special(name: str, request: SaveRequest):
    """Save the sidebar or footer."""
    if request.content is None:
        raise HTTPException(status_code=400, detail="Content is required")
    await special.save_special(name, request.content)
    return {"success": True}


@app.get("/api/config")
async def api_get_config():
    """Wiki configuration."""
    config = await load_config()
    return config.model_dump(by_alias=True)


@app.post("/api/config")
async def api_save_config(data: dict[str, Any] = Body(...)):
    """Replace the wiki configuration."""
    try:
        config = WikiConfig.model_validate(data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    await special.save_config(config)
    await load_config()
    return {"success": True}

