"""
Tests for the locate module.

Tests cover:
- Locating records on iPAC-shaped result pages
- Positional steps and document order
- The "unrecognized page" signal
- Cell text cleanup
"""

import pytest
from bs4 import BeautifulSoup

from latest_books.locate import (
    IPAC20_LAYOUT,
    LAYOUTS,
    LayoutDescriptor,
    Step,
    cell_text,
    get_layout,
    locate_records,
    select_path,
)


class TestLocateRecords:
    """Tests for record location on full pages."""

    def test_returns_cells_of_each_record_in_order(self, result_page):
        """Test that each block yields its rows' text in page order."""
        html = result_page([
            ["summary one", "Book", "Title One / by A. Writer.", "x", "2024"],
            ["summary two", "Book", "Title Two / by A. Writer.", "y", "2023"],
        ])

        records = locate_records(html)

        assert records == [
            ("summary one", "Book", "Title One / by A. Writer.", "x", "2024"),
            ("summary two", "Book", "Title Two / by A. Writer.", "y", "2023"),
        ]

    def test_page_with_no_matching_structure(self, unrecognized_page):
        """Test that an unexpected page gives None, not an empty list."""
        assert locate_records(unrecognized_page) is None

    def test_empty_document(self):
        """Test that an empty document is treated as unrecognized."""
        assert locate_records("") is None

    def test_page_without_body(self):
        """Test a fragment without a body element."""
        assert locate_records("<table><tr><td>x</td></tr></table>") is None

    def test_only_second_table_under_center_is_used(self):
        """Test that records in the first table are not picked up."""
        html = (
            "<html><body><center>"
            "<table><tr><td><table><tr><td>nav</td>"
            "<td><table><tr><td>not a record</td></tr></table></td>"
            "</tr></table></td></tr></table>"
            "<table><tr><td><table><tr><td></td>"
            "<td><table><tr><td>record</td></tr></table></td>"
            "</tr></table></td></tr></table>"
            "</center></body></html>"
        )

        assert locate_records(html) == [("record",)]

    def test_only_first_center_is_used(self, result_page):
        """Test that a second centered block is ignored."""
        page = result_page([["a", "b", "c"]])
        html = page.replace(
            "</body>",
            "<center><table></table><table><tr><td><table><tr><td></td>"
            "<td><table><tr><td>other</td></tr></table></td>"
            "</tr></table></td></tr></table></center></body>",
        )

        assert locate_records(html) == [("a", "b", "c")]

    def test_block_without_cells_gives_empty_record(self):
        """Test that a matched block with no inner rows is kept as empty."""
        html = (
            "<html><body><center><table></table>"
            "<table><tr><td><table><tr><td>only one column</td></tr></table></td></tr></table>"
            "</center></body></html>"
        )

        assert locate_records(html) == [()]

    def test_whitespace_in_cells_is_compacted(self):
        """Test that markup whitespace does not leak into cell text."""
        html = (
            "<html><body><center><table></table>"
            "<table><tr><td><table><tr><td></td><td><table>"
            "<tr><td>\n   Death of a   Poison Pen\n</td></tr>"
            "</table></td></tr></table></td></tr></table>"
            "</center></body></html>"
        )

        assert locate_records(html) == [("Death of a Poison Pen",)]

    def test_custom_layout(self):
        """Test that a registered alternative descriptor drives traversal."""
        layout = LayoutDescriptor(
            name="flat",
            version="test",
            root="body",
            blocks=(Step("div"),),
            cells=(Step("p"),),
        )
        html = "<html><body><div><p>a</p><p>b</p></div><div><p>c</p></div></body></html>"

        assert locate_records(html, layout) == [("a", "b"), ("c",)]

    def test_trace_logs_records(self, result_page, caplog):
        """Test that trace mode logs each located record."""
        html = result_page([["a", "b", "c"]])

        with caplog.at_level("INFO", logger="latest_books.locate"):
            locate_records(html, trace=True)

        assert "Record 0" in caplog.text


class TestSelectPath:
    """Tests for positional step traversal."""

    def _soup(self, html):
        return BeautifulSoup(html, "html.parser")

    def test_position_selects_nth_child(self):
        """Test that a position keeps only the n-th matching child."""
        soup = self._soup("<div><p>1</p><span>x</span><p>2</p><p>3</p></div>")

        result = select_path([soup.div], [Step("p", 2)])

        assert [tag.get_text() for tag in result] == ["2"]

    def test_position_out_of_range(self):
        """Test that a missing n-th child ends the path."""
        soup = self._soup("<div><p>1</p></div>")

        assert select_path([soup.div], [Step("p", 2), Step("span")]) == []

    def test_only_direct_children_match(self):
        """Test that steps do not descend more than one level."""
        soup = self._soup("<div><section><p>nested</p></section></div>")

        assert select_path([soup.div], [Step("p")]) == []

    def test_document_order_across_parents(self):
        """Test that results keep document order across parents."""
        soup = self._soup(
            "<main><div><p>1</p><p>2</p></div><div><p>3</p></div></main>"
        )

        result = select_path([soup.main], [Step("div"), Step("p")])

        assert [tag.get_text() for tag in result] == ["1", "2", "3"]


class TestLayouts:
    """Tests for the layout registry."""

    def test_ipac20_is_registered(self):
        """Test that the built-in layout can be looked up by name."""
        assert get_layout("ipac20") is IPAC20_LAYOUT
        assert "ipac20" in LAYOUTS

    def test_unknown_layout(self):
        """Test that unknown layout names raise KeyError."""
        with pytest.raises(KeyError):
            get_layout("koha")

    def test_describe(self):
        """Test the XPath-like description of the built-in layout."""
        assert IPAC20_LAYOUT.describe() == (
            "//body/center[1]/table[2]/tr/td/table -> tr/td[2]/table/tr/td"
        )


class TestCellText:
    """Tests for cell text extraction."""

    def test_keeps_non_breaking_space(self):
        """Test that U+00A0 survives whitespace compaction."""
        soup = BeautifulSoup("<td>Title&nbsp;*</td>", "html.parser")

        assert cell_text(soup.td) == "Title\xa0*"

    def test_joins_nested_text(self):
        """Test that nested inline markup is flattened."""
        soup = BeautifulSoup("<td><a href='#'>Title</a> <b>2024</b></td>", "html.parser")

        assert cell_text(soup.td) == "Title 2024"
