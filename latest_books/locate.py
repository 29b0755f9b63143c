"""
Record locator for catalog result pages.

The iPAC result page carries no ids or classes around the publication
list, so records are found by walking absolute positional paths through
nested tables. Those paths are described as data (LayoutDescriptor) so
that another catalog release can be supported by registering a new
descriptor in LAYOUTS rather than by editing the traversal code.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from bs4 import BeautifulSoup, Tag

from latest_books.utils import get_logger, compact_whitespace


# Module logger
logger = get_logger("locate")

# One candidate publication: the visible text of each matched cell, in page order
RawRecord = Tuple[str, ...]


@dataclass(frozen=True)
class Step:
    """
    One location step: child elements named `tag`.

    Attributes:
        tag: Element name to match among the direct children.
        position: 1-based index among the matching children, or None
                  to keep every match.
    """
    tag: str
    position: Optional[int] = None

    def __str__(self) -> str:
        if self.position is None:
            return self.tag
        return f"{self.tag}[{self.position}]"


@dataclass(frozen=True)
class LayoutDescriptor:
    """
    Positional description of where records live on a result page.

    Attributes:
        name: Key used to select the layout from configuration.
        version: Catalog release(s) the layout was observed on.
        root: Tag searched for anywhere in the document to start from.
        blocks: Steps from the root to each record block.
        cells: Steps from a record block to each text cell.
    """
    name: str
    version: str
    root: str
    blocks: Tuple[Step, ...]
    cells: Tuple[Step, ...]

    def describe(self) -> str:
        """Return the layout as an XPath-like string, for logs."""
        block_path = "/".join(str(step) for step in self.blocks)
        cell_path = "/".join(str(step) for step in self.cells)
        return f"//{self.root}/{block_path} -> {cell_path}"


# body/center[1]/table[2]/tr/td/table, then tr/td[2]/table/tr/td per block
IPAC20_LAYOUT = LayoutDescriptor(
    name="ipac20",
    version="iPAC 2.0 / Horizon Information Portal 3.23_63xx",
    root="body",
    blocks=(
        Step("center", 1),
        Step("table", 2),
        Step("tr"),
        Step("td"),
        Step("table"),
    ),
    cells=(
        Step("tr"),
        Step("td", 2),
        Step("table"),
        Step("tr"),
        Step("td"),
    ),
)

LAYOUTS: Dict[str, LayoutDescriptor] = {
    IPAC20_LAYOUT.name: IPAC20_LAYOUT,
}

DEFAULT_LAYOUT = IPAC20_LAYOUT.name


def get_layout(name: str) -> LayoutDescriptor:
    """
    Look up a registered layout by name.

    Raises:
        KeyError: If no layout is registered under that name.
    """
    return LAYOUTS[name]


def _children(element: Tag, step: Step) -> List[Tag]:
    matches = list(element.find_all(step.tag, recursive=False))
    if step.position is None:
        return matches
    if step.position <= len(matches):
        return [matches[step.position - 1]]
    return []


def select_path(roots: Iterable[Tag], steps: Iterable[Step]) -> List[Tag]:
    """
    Apply location steps to a set of starting elements.

    Each step replaces the current elements with their matching direct
    children. Elements stay in document order since the children of
    distinct parents never overlap.

    Args:
        roots: Elements to start from.
        steps: Location steps to apply in order.

    Returns:
        Elements reached by the final step, in document order.
    """
    current = list(roots)
    for step in steps:
        current = [child for element in current for child in _children(element, step)]
        if not current:
            break
    return current


def cell_text(cell: Tag) -> str:
    """Return the visible text of a cell."""
    return compact_whitespace(cell.get_text())


def locate_records(
    html: str,
    layout: LayoutDescriptor = IPAC20_LAYOUT,
    trace: bool = False
) -> Optional[List[RawRecord]]:
    """
    Locate the publication records on a catalog result page.

    Args:
        html: Raw HTML of the result page.
        layout: Positional description of the page.
        trace: If True, log every located record at INFO level.

    Returns:
        List of RawRecords in page order, or None when the layout matched
        nothing (author missing, an author list was returned instead of
        titles, or the page is not shaped as expected).
    """
    if not html:
        logger.debug("Empty document")
        return None

    soup = BeautifulSoup(html, "html.parser")
    blocks = select_path(soup.find_all(layout.root), layout.blocks)

    if not blocks:
        logger.debug(f"Layout '{layout.name}' matched nothing: {layout.describe()}")
        return None

    records: List[RawRecord] = []
    for block in blocks:
        cells = select_path([block], layout.cells)
        records.append(tuple(cell_text(cell) for cell in cells))

    logger.debug(f"Located {len(records)} record(s) with layout '{layout.name}'")

    if trace:
        for index, record in enumerate(records):
            logger.info(f"Record {index}: {list(record)}")

    return records
