"""Finding and rewriting links to a page.

Used when a page is renamed. Matching is textual: any wikilink whose text
contains the old page name is rewritten, so renaming atari also touches
[[atari-jaguar]]. Markdown links are matched on their full target.
"""

import logging
import re

from massivewiki.core.index import PageIndex
from massivewiki.core.models import PageReference, RenameResult
from massivewiki.core.names import clean_path, leaf_name, parent_path
from massivewiki.core.storage import FileStorage, Storage

logger = logging.getLogger(__name__)

# [text](target) with the target captured separately from an optional leading slash
MD_LINK_PATTERN = re.compile(r"(\[[^\]]+\]\()(/?)([^()\s]+)(\))")


def _wikilink_pattern(name: str) -> re.Pattern:
    return re.compile(rf"\[\[([^\]]*{re.escape(name)}[^\]]*)\]\]", re.IGNORECASE)


def _md_link_target(target: str, slash: str, page: str, old_path: str, new_path: str) -> str | None:
    """Return the replacement target for a markdown link, or None to keep it.

    Absolute targets (with or without a leading slash) must equal old_path.
    Targets relative to the linking page's folder are also followed.
    """
    if target.lower() == old_path.lower():
        return new_path
    folder = parent_path(page)
    if not slash and folder and f"{folder}/{target}".lower() == old_path.lower():
        return new_path[len(folder) + 1 :]
    return None


def rewrite_content(content: str, page: str, old_path: str, new_path: str) -> tuple[str, int, int]:
    """Rewrite links to old_path inside one page.

    Returns:
        Tuple of (new content, wikilinks rewritten, markdown links rewritten).
    """
    old_name = leaf_name(old_path)
    new_name = leaf_name(new_path)
    name_re = re.compile(re.escape(old_name), re.IGNORECASE)
    wikilinks = 0
    mdlinks = 0

    def replace_wikilink(m: re.Match) -> str:
        nonlocal wikilinks
        wikilinks += 1
        return "[[" + name_re.sub(lambda _: new_name, m.group(1)) + "]]"

    def replace_md_link(m: re.Match) -> str:
        nonlocal mdlinks
        before, slash, target, after = m.groups()
        replacement = _md_link_target(target, slash, page, old_path, new_path)
        if replacement is None:
            return m.group(0)
        mdlinks += 1
        return f"{before}{replacement}{after}"

    content = _wikilink_pattern(old_name).sub(replace_wikilink, content)
    content = MD_LINK_PATTERN.sub(replace_md_link, content)
    return content, wikilinks, mdlinks


async def find_references(storage: Storage, path: str) -> list[PageReference]:
    """List pages that link to path, with link counts."""
    path = clean_path(path)
    references = []
    for page, _ in storage.iter_pages():
        content = await storage.read(page)
        _, wikilinks, mdlinks = rewrite_content(content, page, path, path)
        if wikilinks or mdlinks:
            references.append(PageReference(path=page, wikilinks=wikilinks, mdlinks=mdlinks))
    return references


async def update_references(storage: Storage, old_path: str, new_path: str) -> list[str]:
    """Rewrite links to old_path so they point at new_path.

    Must run before the page itself is renamed.

    Returns:
        Paths of the pages that were changed, in walk order.
    """
    old_path = clean_path(old_path)
    new_path = clean_path(new_path)
    updated = []
    for page, _ in list(storage.iter_pages()):
        content = await storage.read(page)
        new_content, wikilinks, mdlinks = rewrite_content(content, page, old_path, new_path)
        if wikilinks or mdlinks:
            await storage.write(page, new_content)
            updated.append(page)

    logger.info("Updated references to %s in %d pages", old_path, len(updated))
    return updated


async def rename_page(
    storage: FileStorage, index: PageIndex, old_path: str, new_name: str
) -> RenameResult:
    """Rename a page, rewrite links to it and rebuild the index.

    Every check runs before any file is touched. References are rewritten
    against the old path while the page is still in place, then the page
    and its folder are moved.
    """
    old_path, new_path = await storage.check_rename(old_path, new_name)
    updated = await update_references(storage, old_path, new_path)
    await storage.rename(old_path, new_name)
    index.rebuild()
    return RenameResult(old_path=old_path, new_path=new_path, updated_pages=updated)
