"""Special documents and wiki home initialization.

The _wiki folder next to pages/ holds the sidebar, the global footer and
the per-wiki configuration.
"""

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from massivewiki.core.errors import PageNotFoundError, StorageError
from massivewiki.core.models import WikiConfig
from massivewiki.core.storage import read_text, write_text

logger = logging.getLogger(__name__)

SPECIAL_FILES = {
    "sidebar": "_sidebar.md",
    "footer": "_footer.md",
}
CONFIG_FILE = "_config.json"


class SpecialStore:
    """Read and write the documents in the _wiki folder."""

    def __init__(self, base_path: Path):
        self.base_path = base_path

    def _get_path(self, name: str) -> Path:
        key = name.strip().lstrip("_").removesuffix(".md")
        if key not in SPECIAL_FILES:
            raise PageNotFoundError(name)
        return self.base_path / SPECIAL_FILES[key]

    async def get_special(self, name: str) -> str:
        """Return a special document, or an empty string if it was never written."""
        path = self._get_path(name)
        if not path.is_file():
            return ""
        try:
            return read_text(path)
        except OSError as e:
            raise StorageError(f"Failed to read {path.name}: {e}") from e

    async def save_special(self, name: str, content: str) -> None:
        """Overwrite a special document."""
        path = self._get_path(name)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            write_text(path, content)
        except OSError as e:
            raise StorageError(f"Failed to write {path.name}: {e}") from e

    async def get_config(self) -> WikiConfig:
        """Load _config.json, falling back to defaults."""
        path = self.base_path / CONFIG_FILE
        if not path.is_file():
            return WikiConfig()
        try:
            return WikiConfig.model_validate(json.loads(read_text(path)))
        except (OSError, ValueError, ValidationError):
            logger.warning("Invalid %s, using defaults", path, exc_info=True)
            return WikiConfig()

    async def save_config(self, config: WikiConfig) -> None:
        """Write _config.json."""
        path = self.base_path / CONFIG_FILE
        data = config.model_dump(by_alias=True)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            write_text(path, json.dumps(data, indent=2))
        except OSError as e:
            raise StorageError(f"Failed to write {CONFIG_FILE}: {e}") from e


HOME_CONTENT = """# Welcome to Massive Wiki

This is your wiki home page. This page cannot be renamed or deleted.

## Getting Started

Check out the [[getting-started|Getting Started]] guide to learn how to use your wiki.

## Features

- **Wikilinks**: Put a page name in double square brackets to link to it from anywhere
- **Markdown**: GitHub-flavored Markdown support
- **Organization**: Organize pages in folders and hierarchies
- **Simple**: All pages are just markdown files on disk

Start creating your knowledge base!
"""

GETTING_STARTED_CONTENT = """# Getting Started

## Creating Pages

1. Create a page with a title and a path such as `guides/tutorial`
2. Or link to a page that does not exist yet and follow the red link

## Wikilinks

Put a page name in double square brackets to link to it. Add a pipe and
some text after the name to show that text instead of the name.

Wikilinks are **global**: [[home|a link to home]] works from anywhere in the wiki.

## Organizing Pages

`guides/tutorial` creates tutorial.md in the guides folder. A page can
also be a folder: `guides.md` and the `guides/` folder live side by side.

## Special Pages

- **Sidebar**: shown next to every page
- **Footer**: shown at the bottom of every page
- **Config**: wiki name, description and display settings
"""

SIDEBAR_CONTENT = """## Quick Links

- [[home|Home]]
- [[getting-started|Getting Started]]

## Resources

- [Markdown Guide](https://guides.github.com/features/mastering-markdown/)
"""

FOOTER_CONTENT = """---
**Massive Wiki** | Powered by Markdown
"""


def initialize_wiki(home: Path) -> bool:
    """Create the wiki folder layout and seed it on first run.

    Returns:
        True if this was the first run and default content was written.
    """
    pages_dir = home / "pages"
    wiki_dir = home / "_wiki"
    first_run = not (pages_dir / "home.md").exists()

    for directory in (home, pages_dir, home / "images", wiki_dir):
        directory.mkdir(parents=True, exist_ok=True)

    if not first_run:
        return False

    logger.info("First run detected, initializing wiki structure in %s", home)
    seeds = {
        pages_dir / "home.md": HOME_CONTENT,
        pages_dir / "getting-started.md": GETTING_STARTED_CONTENT,
        wiki_dir / "_sidebar.md": SIDEBAR_CONTENT,
        wiki_dir / "_footer.md": FOOTER_CONTENT,
        wiki_dir / CONFIG_FILE: json.dumps(WikiConfig().model_dump(by_alias=True), indent=2),
    }
    for path, content in seeds.items():
        write_text(path, content)
        logger.info("Created %s", path.name)
    return True
