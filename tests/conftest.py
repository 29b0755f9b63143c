"""
Shared fixtures for the Latest Books tests.

Result pages are built in the nested-table shape the iPAC 2.0 catalog
produces: body/center[1]/table[2]/tr/td/table per record, with the
record's text rows in the second column's nested table.
"""

from html import escape
from typing import Iterable, Sequence

import pytest


def build_result_page(records: Iterable[Sequence[str]]) -> str:
    """Render records as an iPAC-style result page."""
    blocks = []
    for cells in records:
        rows = "".join(f"<tr><td>{escape(cell)}</td></tr>" for cell in cells)
        blocks.append(
            "<tr><td><table><tr>"
            "<td><input type='checkbox'></td>"
            f"<td><table>{rows}</table></td>"
            "</tr></table></td></tr>"
        )

    return (
        "<html><head><title>Search Results</title></head><body>"
        "<center>"
        "<table><tr><td>Public Access Catalog</td></tr></table>"
        f"<table>{''.join(blocks)}</table>"
        "</center>"
        "</body></html>"
    )


def book(title_cell: str, publication: str, byline: bool = False, author: str = "M.C. Beaton"):
    """Cells of one record, optionally with a byline row before the publication row."""
    cells = [
        f"{title_cell} {publication}",
        "Book",
        title_cell,
        "Beaton, M. C.",
    ]
    if byline:
        cells.append(f"by {author}")
    cells.append(publication)
    cells.append("Mystery BEATON")
    return cells


@pytest.fixture
def result_page():
    """Factory turning a list of records into result page HTML."""
    return build_result_page


@pytest.fixture
def make_book():
    """Factory for the cells of one record."""
    return book


@pytest.fixture
def unrecognized_page():
    """A result page listing matching authors instead of titles."""
    return (
        "<html><body>"
        "<center><table><tr><td>Did you mean:</td></tr></table></center>"
        "<ul><li>Beaton, M. C.</li><li>Beaton, Cecil</li></ul>"
        "</body></html>"
    )
