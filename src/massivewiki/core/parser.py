"""Markdown rendering for pages, sidebar and footer."""

from markdown import Markdown
from markdown.extensions import Extension
from markdown.inlinepatterns import SimpleTagInlineProcessor

from massivewiki.core.index import PageIndex
from massivewiki.core.names import split_content
from massivewiki.core.wikilinks import resolve_wikilinks

# Pattern for strikethrough: ~~text~~
# Group 2 must contain the text (SimpleTagInlineProcessor expectation)
STRIKETHROUGH_PATTERN = r"(~~)(.*?)~~"


class StrikethroughExtension(Extension):
    """Markdown extension for ~~strikethrough~~ text."""

    def extendMarkdown(self, md: Markdown) -> None:
        """Add strikethrough pattern to markdown parser."""
        md.inlinePatterns.register(
            SimpleTagInlineProcessor(STRIKETHROUGH_PATTERN, "del"),
            "strikethrough",
            50,
        )


def create_parser() -> Markdown:
    """Create a Markdown parser with GitHub-flavored extensions.

    Wikilinks are not handled here; content is passed through
    resolve_wikilinks first.
    """
    return Markdown(
        extensions=[
            "extra",  # Includes: abbreviations, attr_list, def_list, fenced_code, footnotes, md_in_html, tables
            "sane_lists",
            "nl2br",  # Single newlines become <br>, as on GitHub
            "toc",
            "pymdownx.tasklist",
            StrikethroughExtension(),
        ]
    )


def render_markdown(content: str) -> str:
    """Convert markdown to HTML."""
    if not content:
        return ""
    return create_parser().convert(content)


def render_content(
    content: str,
    current_page: str | None,
    index: PageIndex,
    home_page: str = "home",
    enable_wikilinks: bool = True,
) -> str:
    """Resolve wikilinks, then render to HTML."""
    if enable_wikilinks:
        content = resolve_wikilinks(content, current_page, index, home_page)
    return render_markdown(content)


def render_page(
    content: str,
    current_page: str,
    index: PageIndex,
    home_page: str = "home",
    enable_wikilinks: bool = True,
) -> tuple[str, str]:
    """Render a page as (body_html, footer_html).

    The footer is whatever follows the last horizontal rule and is
    rendered separately so it can be shown below the page.
    """
    body, footer = split_content(content)
    body_html = render_content(body, current_page, index, home_page, enable_wikilinks)
    footer_html = render_content(footer, current_page, index, home_page, enable_wikilinks)
    return body_html, footer_html
