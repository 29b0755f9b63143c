"""
Plain-text rendering for the Latest Books tool.

Each author is printed as a header line followed by one tab-indented
line per title and a blank separator line.
"""

import json
from typing import Iterable

from latest_books.config import CatalogConfig


MANUAL_SEARCH_MESSAGE = (
    "WARNING: Manual search required for '{term}': either the author isn't in the "
    "catalog, or the search returned a list of authors instead of a list "
    "of titles, or the web page is not as expected. Skipping."
)


def format_author_titles(author_name: str, titles: Iterable[str]) -> str:
    """
    Render one author's titles.

    Args:
        author_name: Author display name, printed as the header.
        titles: Titles to list beneath the header.

    Returns:
        Text block ending with a blank line.
    """
    lines = [author_name]
    lines.extend(f"\t{title}" for title in titles)
    return "\n".join(lines) + "\n\n"


def format_manual_search_warning(term: str) -> str:
    """Return the one-line diagnostic for a page that could not be read."""
    return MANUAL_SEARCH_MESSAGE.format(term=term)


def format_config(config: CatalogConfig) -> str:
    """Render the processed configuration as indented JSON."""
    return json.dumps(config.to_dict(), indent=2, ensure_ascii=False) + "\n"
