"""Global page index.

Maps canonical page keys to full page paths so that wikilinks such as
[[atari]] resolve to computers/atari from anywhere in the wiki. The index
is never patched in place: every rebuild produces a new mapping that
replaces the old one in a single assignment.
"""

import logging
from pathlib import Path

from massivewiki.core.errors import StorageError
from massivewiki.core.names import leaf_name, normalize
from massivewiki.core.storage import walk_pages

logger = logging.getLogger(__name__)


class PageIndex:
    """Lookup table from canonical name or path to page path."""

    def __init__(self, root: Path | None = None) -> None:
        self.root = root
        self._entries: dict[str, str] = {}

    def rebuild(self, root: Path | None = None) -> int:
        """Rescan the pages directory and swap in a fresh mapping.

        Leaf names are first-come first-served in walk order. Full paths
        always win their own key.

        Returns:
            Number of keys in the new index.
        """
        root = root if root is not None else self.root
        if root is None:
            raise ValueError("PageIndex has no root directory")

        entries: dict[str, str] = {}
        for page_path, _ in walk_pages(root):
            leaf_key = normalize(leaf_name(page_path))
            if leaf_key not in entries:
                entries[leaf_key] = page_path
            entries[normalize(page_path)] = page_path

        self.root = root
        self._entries = entries
        logger.info("Page index built: %d entries", len(entries))
        return len(entries)

    def lookup(self, key: str) -> str | None:
        """Return the page path for a name or path, or None."""
        return self._entries.get(normalize(key.strip().strip("/")))

    def keys(self) -> list[str]:
        return list(self._entries)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.lookup(key) is not None

    def __len__(self) -> int:
        return len(self._entries)


_index = PageIndex()


def get_index() -> PageIndex:
    """Get the global page index."""
    return _index


def init_index(root: Path) -> PageIndex:
    """Point the global index at root and build it.

    A failed scan is logged and leaves the previous mapping in place.
    """
    try:
        _index.rebuild(root)
    except StorageError:
        logger.exception("Failed to build page index")
    return _index
