"""
Record normalizer and filter for the Latest Books tool.

Turns the raw records located on a result page into the list of titles
published in the target year:
- title from cell 2, with the author's byline and the trailing
  placeholder marker removed
- year field from cell 4, or cell 5 when cell 4 is a "by ..." byline row
- stop at the first record that is not from the target year
- drop titles matching the author's ignore patterns
"""

import re
from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Sequence

from latest_books.utils import get_logger


# Module logger
logger = get_logger("records")

TITLE_CELL = 2
YEAR_CELL = 4
YEAR_CELL_AFTER_BYLINE = 5

BYLINE_RE = re.compile(r"^by ")

# U+00A0 followed by '*', rendered by the catalog after some titles
DECORATIVE_MARKER = "\xa0*"


@dataclass(frozen=True)
class PublicationRecord:
    """A normalized publication: clean title and the raw text holding its year."""
    title: str
    year_field: str


def current_year() -> str:
    """Return the current calendar year as a 4-digit string."""
    return date.today().strftime("%Y")


def _cell(record: Sequence[str], index: int) -> str:
    if index < len(record):
        return record[index]
    return ""


def select_year_field(record: Sequence[str]) -> str:
    """
    Pick the cell that holds the publication information.

    Some catalog releases insert a "by <author>" row before the
    publication row, pushing it from cell 4 to cell 5.
    """
    year_field = _cell(record, YEAR_CELL)
    if BYLINE_RE.match(year_field):
        year_field = _cell(record, YEAR_CELL_AFTER_BYLINE)
    return year_field


def strip_author(title: str, author_name: str) -> str:
    """
    Remove the "/ by <author>." suffix the catalog appends to titles.

    The author name is matched exactly as configured, including case and
    punctuation.

    Args:
        title: Title cell text.
        author_name: Author display name ("First Last").

    Returns:
        Title without the author suffix.
    """
    pattern = r"\s*/\s*(?:by\s)?" + re.escape(author_name) + r"\.?"
    return re.sub(pattern, "", title, count=1)


def strip_marker(title: str) -> str:
    """Remove a trailing U+00A0 + '*' marker, and nothing else."""
    if title.endswith(DECORATIVE_MARKER):
        return title[:-len(DECORATIVE_MARKER)]
    return title


def normalize_record(record: Sequence[str], author_name: str) -> PublicationRecord:
    """
    Build a PublicationRecord from one raw record.

    Args:
        record: Cell texts of one located record.
        author_name: Author display name ("First Last").

    Returns:
        PublicationRecord with the cleaned title and the year field.
    """
    title = strip_author(_cell(record, TITLE_CELL), author_name)
    title = strip_marker(title)
    return PublicationRecord(title=title, year_field=select_year_field(record))


def is_ignored(title: str, ignore_patterns: Iterable[str]) -> bool:
    """
    Check whether a title contains any ignore pattern.

    Patterns are literal text compared case-insensitively.
    """
    folded = title.casefold()
    return any(pattern.casefold() in folded for pattern in ignore_patterns)


def extract_and_filter(
    records: Iterable[Sequence[str]],
    author_name: str,
    target_year: str,
    ignore_patterns: Iterable[str] = ()
) -> List[str]:
    """
    Return the titles published in the target year, newest first.

    The catalog lists publications newest to oldest, so processing stops
    at the first record whose year field does not mention the target
    year. Records after it are never examined, even if they are from the
    target year.

    Args:
        records: Raw records in page order.
        author_name: Author display name ("First Last").
        target_year: 4-digit year string.
        ignore_patterns: Case-insensitive substrings of titles to drop.

    Returns:
        Titles to report, in page order.
    """
    patterns = tuple(ignore_patterns)
    titles: List[str] = []

    for record in records:
        publication = normalize_record(record, author_name)

        if target_year not in publication.year_field:
            logger.debug(
                f"Stopping for {author_name} at '{publication.title}' "
                f"(year field '{publication.year_field}')"
            )
            break

        if is_ignored(publication.title, patterns):
            logger.debug(f"Ignoring '{publication.title}' for {author_name}")
            continue

        titles.append(publication.title)

    return titles
