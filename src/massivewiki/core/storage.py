"""Storage abstraction for wiki pages."""

import logging
import os
import re
import shutil
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterator

from massivewiki.core.errors import (
    ForbiddenError,
    InvalidNameError,
    PageExistsError,
    PageNotFoundError,
    StorageError,
)
from massivewiki.core.models import Page
from massivewiki.core.names import clean_path, leaf_name, normalize

logger = logging.getLogger(__name__)

PAGE_SUFFIX = ".md"

# Rename targets: letters, numbers and hyphens only
PAGE_NAME_PATTERN = re.compile(r"^[A-Za-z0-9-]+$")


def walk_pages(directory: Path, prefix: str = "") -> Iterator[tuple[str, Path]]:
    """Yield (page_path, file) for every markdown file below directory.

    Entries are visited in lexicographic order by name and dot-prefixed
    entries are skipped, so the walk order is reproducible.
    """
    try:
        entries = sorted(directory.iterdir(), key=lambda p: p.name)
    except FileNotFoundError:
        if prefix:
            # Subdirectory removed while walking
            return
        raise StorageError(f"Pages directory not found: {directory}")
    except OSError as e:
        raise StorageError(f"Cannot read directory {directory}: {e}") from e

    for entry in entries:
        if entry.name.startswith("."):
            continue
        rel = f"{prefix}/{entry.name}" if prefix else entry.name
        if entry.is_dir():
            yield from walk_pages(entry, rel)
        elif entry.is_file() and entry.name.endswith(PAGE_SUFFIX):
            yield rel.removesuffix(PAGE_SUFFIX), entry


def read_text(path: Path) -> str:
    """Read a UTF-8 file without newline translation."""
    with path.open(encoding="utf-8", newline="") as f:
        return f.read()


def write_text(path: Path, content: str) -> None:
    """Write a UTF-8 file through a temporary sibling and an atomic replace."""
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(content)
        os.replace(tmp, path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise


class Storage(ABC):
    """Abstract base class for page storage."""

    @abstractmethod
    async def read(self, path: str) -> str:
        """Return raw page content. Raises PageNotFoundError if absent."""
        ...

    @abstractmethod
    async def get_page(self, path: str) -> Page | None:
        """Get a page by path. Returns None if not found."""
        ...

    @abstractmethod
    async def write(self, path: str, content: str) -> Page:
        """Save a page. Creates it and its parent folders if needed."""
        ...

    @abstractmethod
    async def create(self, path: str, title: str | None = None) -> Page:
        """Create a new page with stub content."""
        ...

    @abstractmethod
    async def delete(self, path: str) -> bool:
        """Delete a page and its same-named folder."""
        ...

    @abstractmethod
    async def rename(self, old_path: str, new_name: str) -> str:
        """Rename a page in place. Returns the new path."""
        ...

    @abstractmethod
    async def exists(self, path: str) -> bool:
        """Check if a page exists."""
        ...

    @abstractmethod
    async def list_pages(self) -> list[str]:
        """List all page paths."""
        ...

    @abstractmethod
    async def list_children(self, path: str) -> list[str]:
        """List every page nested below the folder of the same name."""
        ...

    @abstractmethod
    def iter_pages(self) -> Iterator[tuple[str, Path]]:
        """Walk all pages in a stable order."""
        ...


class FileStorage(Storage):
    """File-based storage implementation.

    Pages are stored as Markdown files below base_path. The page path
    guides/intro maps to base_path/guides/intro.md and the folder
    base_path/guides/intro/ holds its child pages.
    """

    def __init__(self, base_path: Path, home_page: str = "home"):
        self.base_path = base_path
        self.base_path.mkdir(parents=True, exist_ok=True)
        self.home_page = home_page
        self._root = self.base_path.resolve()

    def _resolve(self, path: str) -> Path:
        """Map a page path to its location without extension."""
        path = clean_path(path)
        if not path:
            raise ForbiddenError("Page path is empty")
        target = (self._root / path).resolve()
        if target == self._root or not target.is_relative_to(self._root):
            raise ForbiddenError(f"Page path escapes the pages directory: {path}")
        return target

    def _get_path(self, path: str) -> Path:
        """Get the markdown file for a page."""
        target = self._resolve(path)
        return target.with_name(target.name + PAGE_SUFFIX)

    def _get_folder(self, path: str) -> Path:
        """Get the folder that holds a page's children."""
        return self._resolve(path)

    def page_path(self, path: str) -> str:
        """Canonical page path with . and .. segments resolved."""
        return self._resolve(path).relative_to(self._root).as_posix()

    def holds_home(self, path: str) -> bool:
        """True if path is the home page or a folder the home page lives under."""
        key = self.page_path(path).casefold()
        home = self.page_path(self.home_page).casefold()
        return home == key or home.startswith(key + "/")

    async def read(self, path: str) -> str:
        """Get raw file content."""
        file = self._get_path(path)
        if not file.is_file():
            raise PageNotFoundError(clean_path(path))
        try:
            return read_text(file)
        except OSError as e:
            raise StorageError(f"Failed to read page {path}: {e}") from e

    async def get_page(self, path: str) -> Page | None:
        """Get a page by path."""
        try:
            content = await self.read(path)
        except PageNotFoundError:
            return None
        return Page(path=clean_path(path), content=content)

    async def write(self, path: str, content: str) -> Page:
        """Save a page."""
        file = self._get_path(path)
        try:
            file.parent.mkdir(parents=True, exist_ok=True)
            write_text(file, content)
        except OSError as e:
            raise StorageError(f"Failed to write page {path}: {e}") from e
        return Page(path=clean_path(path), content=content)

    async def create(self, path: str, title: str | None = None) -> Page:
        """Create a page with a heading and placeholder text."""
        if await self.exists(path):
            raise PageExistsError(clean_path(path))
        heading = title or leaf_name(path)
        content = f"# {heading}\n\nStart writing your content here...\n"
        page = await self.write(path, content)
        logger.info("Created page %s", page.path)
        return page

    async def delete(self, path: str) -> bool:
        """Delete a page together with every page below it."""
        if self.holds_home(path):
            raise ForbiddenError("Cannot delete home page")

        path = self.page_path(path)
        file = self._get_path(path)
        folder = self._get_folder(path)
        deleted = False
        try:
            if file.is_file():
                file.unlink()
                deleted = True
            if folder.is_dir():
                shutil.rmtree(folder)
                deleted = True
        except FileNotFoundError:
            pass
        except OSError as e:
            raise StorageError(f"Failed to delete page {path}: {e}") from e

        if deleted:
            logger.info("Deleted page %s", path)
        return deleted

    def renamed_path(self, old_path: str, new_name: str) -> str:
        """Replace the last segment of old_path with the normalized new name."""
        parts = self.page_path(old_path).split("/")
        parts[-1] = normalize(new_name)
        return "/".join(parts)

    async def check_rename(self, old_path: str, new_name: str) -> tuple[str, str]:
        """Raise if old_path may not be renamed to new_name.

        Checks run in a fixed order: home page, name format, target taken,
        source missing, then a clash between the two child folders.

        Returns:
            Tuple of (old path, new path), both canonical.
        """
        if self.holds_home(old_path):
            raise ForbiddenError("Cannot rename the home page")
        if not PAGE_NAME_PATTERN.match(new_name):
            raise InvalidNameError(new_name)

        old_path = self.page_path(old_path)
        new_path = self.renamed_path(old_path, new_name)
        if await self.exists(new_path):
            raise PageExistsError(new_path)
        if not await self.exists(old_path):
            raise PageNotFoundError(old_path)

        new_folder = self._get_folder(new_path)
        if (
            self._get_folder(old_path).is_dir()
            and new_folder.is_dir()
            and any(new_folder.iterdir())
        ):
            raise PageExistsError(f"{new_path}/")
        return old_path, new_path

    async def rename(self, old_path: str, new_name: str) -> str:
        """Rename a page and its same-named folder.

        References in other pages are left alone; see
        massivewiki.core.references.update_references.
        """
        old_path, new_path = await self.check_rename(old_path, new_name)
        old_file = self._get_path(old_path)
        new_file = self._get_path(new_path)
        try:
            old_file.rename(new_file)
        except OSError as e:
            raise StorageError(f"Failed to rename page {old_path}: {e}") from e

        old_folder = self._get_folder(old_path)
        if old_folder.is_dir():
            try:
                old_folder.rename(self._get_folder(new_path))
            except OSError as e:
                new_file.rename(old_file)
                raise StorageError(f"Failed to move folder {old_path}/: {e}") from e

        logger.info("Renamed page %s to %s", old_path, new_path)
        return new_path

    async def exists(self, path: str) -> bool:
        """Check if a page exists."""
        return self._get_path(path).is_file()

    def iter_pages(self) -> Iterator[tuple[str, Path]]:
        """Walk all pages in lexicographic order."""
        return walk_pages(self.base_path)

    async def list_pages(self) -> list[str]:
        """List all page paths."""
        return sorted(path for path, _ in self.iter_pages())

    async def list_children(self, path: str) -> list[str]:
        """List all pages below the folder named like the page."""
        folder = self._get_folder(path)
        if not folder.is_dir():
            return []
        prefix = clean_path(path)
        return [child for child, _ in walk_pages(folder, prefix)]
