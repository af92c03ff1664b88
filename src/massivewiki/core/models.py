"""Data models for Massive Wiki."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from massivewiki.core.names import leaf_name, split_content


class Page(BaseModel):
    """Represents a wiki page."""

    path: str
    content: str

    @property
    def name(self) -> str:
        """Last segment of the page path."""
        return leaf_name(self.path)

    @property
    def body(self) -> str:
        return split_content(self.content)[0]

    @property
    def footer(self) -> str:
        return split_content(self.content)[1]


class NodeType(str, Enum):
    """Kind of entry in the page tree."""

    PAGE = "page"
    FOLDER = "folder"
    PAGE_PARENT = "page-parent"


class TreeNode(BaseModel):
    """One named entry at a level of the page tree."""

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    name: str
    path: str
    type: NodeType
    has_content: bool = Field(alias="hasContent")
    children: list["TreeNode"] = Field(default_factory=list)


TreeNode.model_rebuild()


class ResolvedLink(BaseModel):
    """A wikilink after looking its target up in the page index."""

    target: str
    display: str
    path: str
    exists: bool


class PageReference(BaseModel):
    """Links from one page to another page."""

    path: str
    wikilinks: int = 0
    mdlinks: int = 0

    @property
    def total(self) -> int:
        return self.wikilinks + self.mdlinks


class RenameResult(BaseModel):
    """Outcome of renaming a page."""

    model_config = ConfigDict(populate_by_name=True)

    old_path: str = Field(alias="oldPath")
    new_path: str = Field(alias="newPath")
    updated_pages: list[str] = Field(default_factory=list, alias="updatedPages")

    @property
    def updated_count(self) -> int:
        return len(self.updated_pages)


class WikiConfig(BaseModel):
    """Per-wiki settings stored in _wiki/_config.json."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    wiki_name: str = Field("Massive Wiki", alias="wikiName")
    wiki_description: str = Field(
        "A simple, fast wiki document management system", alias="wikiDescription"
    )
    show_sidebar: bool = Field(True, alias="showSidebar")
    show_global_footer: bool = Field(True, alias="showGlobalFooter")
    theme: str = "default"
    enable_wikilinks: bool = Field(True, alias="enableWikilinks")
    default_home_page: str = Field("home", alias="defaultHomePage")
