"""Page name and path helpers."""

import re

WHITESPACE_PATTERN = re.compile(r"\s+")

# A line of three or more dashes with a blank line above and below it
FOOTER_DELIMITER_PATTERN = re.compile(r"(?<=\n)[ \t]*\n-{3,}[ \t]*\n(?=[ \t]*(?:\n|$))")


def normalize(text: str) -> str:
    """Convert display text or a typed link target into a canonical key.

    Lowercases and collapses every whitespace run into a single hyphen.
    Other punctuation is left alone.
    """
    return WHITESPACE_PATTERN.sub("-", text.lower())


def clean_path(path: str) -> str:
    """Strip whitespace and surrounding slashes from a page path."""
    return path.strip().strip("/")


def leaf_name(path: str) -> str:
    """Return the last segment of a slash-delimited page path."""
    return clean_path(path).rsplit("/", 1)[-1]


def parent_path(path: str) -> str:
    """Return everything before the last segment, or an empty string."""
    path = clean_path(path)
    return path.rsplit("/", 1)[0] if "/" in path else ""


def split_content(content: str) -> tuple[str, str]:
    """Split raw page content into (body, footer).

    The footer is whatever follows the last rule line that has a blank
    line on each side. Earlier delimiters stay in the body unchanged, and
    a setext heading underline is never taken for a delimiter.
    """
    matches = list(FOOTER_DELIMITER_PATTERN.finditer(content))
    if not matches:
        return content, ""
    last = matches[-1]
    return content[: last.start()], content[last.end() :]
