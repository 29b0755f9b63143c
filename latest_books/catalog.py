"""
Catalog query construction for iPAC / Horizon Information Portal sites.

Holds the media type table and builds the author search URL.
"""

from dataclasses import dataclass
from typing import Dict, Optional


@dataclass(frozen=True)
class MediaCode:
    """Limit-box type and code the catalog uses for one media type."""
    type: str
    code: str


# Codes observed on Horizon Information Portal 3.23_6380; 3.23_6390 changed them.
MATERIAL_TYPES: Dict[str, MediaCode] = {
    "BOOK": MediaCode("IT01", "it_BOOK"),      # books
    "ABOOK": MediaCode("CO01", "gp_ABOOK"),    # adult books
    "EBOOK": MediaCode("CO01", "co_EBOOK"),    # e-books
    "ANONB": MediaCode("CO01", "gp_ANONB"),    # adult non-book
    "CDBK": MediaCode("CO01", "gp_CDBK"),      # audiobooks
    "PAB": MediaCode("IT01", "it_PAB"),        # portable audiobooks
    "EAUDIO": MediaCode("CO01", "co_EAUDIO"),  # downloadable e-audio
    "CD": MediaCode("IT01", "it_CD"),          # CDs
    "DVD": MediaCode("IT01", "it_DVD"),        # DVDs
    "CHBK": MediaCode("CO01", "gp_CHBK"),      # children's books
    "CHNFBK": MediaCode("CO01", "gp_CHNFBK"),  # children's non-fiction
    "LP": MediaCode("CO01", "gp_LP"),          # large print books
}

DEFAULT_MEDIA_TYPE = "BOOK"

# Author index search on the adult profile
SEARCH_PARAMS = "profile=adm-ada&index=.AW&term="


def is_known_media_type(media_type: Optional[str]) -> bool:
    """Check whether a media type name (any case) is in MATERIAL_TYPES."""
    return bool(media_type) and media_type.upper() in MATERIAL_TYPES


def get_media_code(media_type: str) -> MediaCode:
    """
    Return the catalog code for a media type name (any case).

    Raises:
        KeyError: If the media type is unknown.
    """
    return MATERIAL_TYPES[media_type.upper()]


def search_term(last_name: str, first_name: str) -> str:
    """Return the author search term, last name first."""
    return f"{last_name},{first_name}"


def build_query_url(
    base_url: str,
    last_name: str,
    first_name: str,
    media: Optional[MediaCode] = None,
    sort_by_media: bool = False
) -> str:
    """
    Build the author search URL.

    Args:
        base_url: Catalog search page, e.g. 'catalog.example.org/ipac20/ipac.jsp'.
        last_name: Author last name.
        first_name: Author first name.
        media: Media code used to limit results when sort_by_media is set.
        sort_by_media: Add a 'limitbox_1' term for the media code.

    Returns:
        Query URL string.
    """
    url = f"{base_url}?"

    if sort_by_media and media is not None:
        url += f"limitbox_1={media.type}+%3D+{media.code}&"

    url += SEARCH_PARAMS + search_term(last_name, first_name)
    return url
