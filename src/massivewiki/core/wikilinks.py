"""Wikilink resolution.

Turns [[Target]] and [[Target|Display Text]] into HTML anchors before the
content goes through the markdown renderer. Targets are looked up in the
global page index, so a link works from anywhere regardless of folder.

Links to pages that do not exist yet become red links. Their target is a
child of the page that contains the link, except on the home page where
new pages are created at the top level. Following a red link is what
creates the page, so both the target path and the existence flag are
kept on the anchor as data-page and data-exists.

The display text after a pipe is trimmed of surrounding whitespace, and
is HTML-escaped like the link attributes. Wikilinks inside fenced code
blocks are resolved like any other text.
"""

import html
import re

from massivewiki.core.index import PageIndex
from massivewiki.core.models import ResolvedLink
from massivewiki.core.names import clean_path, normalize

# [[PageName]] or [[PageName|Display Text]]; the first ]] closes the link
WIKILINK_PATTERN = re.compile(r"\[\[([^\]]+)\]\]")


def split_wikilink(inner: str) -> tuple[str, str]:
    """Split the text between the brackets into (target key, display text)."""
    if "|" in inner:
        target, display = inner.split("|", 1)
        return normalize(target.strip()), display.strip()
    return normalize(inner.strip()), inner


def resolve_link(
    inner: str,
    current_page: str | None,
    index: PageIndex,
    home_page: str = "home",
) -> ResolvedLink:
    """Look up one wikilink and work out where it points."""
    target, display = split_wikilink(inner)
    found = index.lookup(target)
    if found is not None:
        return ResolvedLink(target=target, display=display, path=found, exists=True)

    current = clean_path(current_page or "")
    if not current or normalize(current) == normalize(home_page):
        path = target
    else:
        path = f"{current}/{target}"
    return ResolvedLink(target=target, display=display, path=path, exists=False)


def render_link(link: ResolvedLink) -> str:
    """Build the anchor markup for a resolved link."""
    css_class = "wikilink" if link.exists else "wikilink wikilink-new"
    page = html.escape(link.path, quote=True)
    exists = "true" if link.exists else "false"
    display = html.escape(link.display, quote=False)
    return (
        f'<a href="/{page}" class="{css_class}" data-page="{page}" '
        f'data-exists="{exists}">{display}</a>'
    )


def find_wikilinks(
    content: str,
    current_page: str | None,
    index: PageIndex,
    home_page: str = "home",
) -> list[ResolvedLink]:
    """Resolve every wikilink in content without rewriting it."""
    return [
        resolve_link(m.group(1), current_page, index, home_page)
        for m in WIKILINK_PATTERN.finditer(content)
    ]


def resolve_wikilinks(
    content: str,
    current_page: str | None,
    index: PageIndex,
    home_page: str = "home",
) -> str:
    """Replace every wikilink in content with an anchor.

    Must run exactly once on raw markdown, before rendering.

    Args:
        content: Raw markdown.
        current_page: Path of the page being rendered. Empty or None
            behaves like the home page.
        index: Page index used for lookups.
        home_page: Key of the home page.

    Returns:
        Markdown with wikilinks replaced by inline HTML.
    """

    def replace(m: re.Match) -> str:
        return render_link(resolve_link(m.group(1), current_page, index, home_page))

    return WIKILINK_PATTERN.sub(replace, content)
