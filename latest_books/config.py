"""
Configuration loading and validation for the Latest Books tool.

The configuration is a JSON file:

    {
        "library_url": "catalog.example.org/ipac20/ipac.jsp",
        "media_type": "BOOK",
        "authors": [
            {"last_name": "Beaton", "first_name": "M.C.",
             "ignore": ["large print", "policeman"]},
            {"last_name": "Child", "first_name": "Lee", "media_type": "cdbk"}
        ]
    }

`authors` may be a single object and `ignore` a single string; both are
normalized to sequences here so the rest of the tool never has to check.
"""

import json
import math
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from latest_books.catalog import DEFAULT_MEDIA_TYPE, is_known_media_type
from latest_books.fetch import DEFAULT_TIMEOUT
from latest_books.locate import DEFAULT_LAYOUT, LAYOUTS
from latest_books.utils import get_logger, get_env_var


# Module logger
logger = get_logger("config")

DEFAULT_CONFIG_PATH = "config/latest_books.json"
CONFIG_PATH_ENV = "LATEST_BOOKS_CONFIG"
DEFAULT_REQUEST_DELAY = 2.0  # seconds between author queries

_TESTED_URL_RE = re.compile(r"ipac20/ipac\.jsp$", re.IGNORECASE)


class ConfigError(Exception):
    """Raised when the configuration file cannot be read or is invalid."""
    pass


@dataclass
class AuthorEntry:
    """
    One author to look up.

    Attributes:
        last_name: Author last name, as the catalog indexes it.
        first_name: Author first name or initials, e.g. 'M.C.'.
        media_type: Media type name overriding the default, upper-cased.
        ignore: Title substrings to leave out of the report.
    """
    last_name: str
    first_name: str
    media_type: Optional[str] = None
    ignore: Tuple[str, ...] = ()

    def __post_init__(self):
        self.last_name = self.last_name.strip()
        self.first_name = self.first_name.strip()
        if self.media_type is not None:
            self.media_type = self.media_type.strip().upper()
        self.ignore = tuple(self.ignore)

    @property
    def display_name(self) -> str:
        """Name as printed in reports and in catalog title cells."""
        return f"{self.first_name} {self.last_name}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        data: Dict[str, Any] = {
            "last_name": self.last_name,
            "first_name": self.first_name,
        }
        if self.media_type is not None:
            data["media_type"] = self.media_type
        if self.ignore:
            data["ignore"] = list(self.ignore)
        return data


@dataclass
class CatalogConfig:
    """Processed configuration for one run."""
    library_url: str
    media_type: str = DEFAULT_MEDIA_TYPE
    layout: str = DEFAULT_LAYOUT
    request_delay: float = DEFAULT_REQUEST_DELAY
    timeout: float = DEFAULT_TIMEOUT
    authors: List[AuthorEntry] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "library_url": self.library_url,
            "media_type": self.media_type,
            "layout": self.layout,
            "request_delay": self.request_delay,
            "timeout": self.timeout,
            "authors": [author.to_dict() for author in self.authors],
        }


def resolve_config_path(config_path: Optional[str] = None) -> Tuple[str, bool]:
    """
    Decide which configuration file to read.

    Priority:
    1. Provided config_path parameter (the -c option)
    2. LATEST_BOOKS_CONFIG environment variable
    3. Default config file path

    Returns:
        Tuple of (path, is_default).
    """
    if config_path:
        return config_path, False

    env_path = get_env_var(CONFIG_PATH_ENV, required=False)
    if env_path:
        return env_path, False

    return DEFAULT_CONFIG_PATH, True


def read_config_file(filepath: str) -> Any:
    """
    Read and decode a JSON configuration file.

    Raises:
        ConfigError: If the file is missing, unreadable or not valid JSON.
    """
    path = Path(filepath)

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        raise ConfigError(f"Configuration file '{filepath}' not found")
    except json.JSONDecodeError as e:
        raise ConfigError(f"Syntax error in configuration file '{filepath}': {e}")
    except OSError as e:
        raise ConfigError(f"Cannot read configuration file '{filepath}': {e}")

    logger.debug(f"Read configuration from {filepath}")
    return data


def _as_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def _as_number(data: Dict[str, Any], key: str, default: float) -> float:
    value = data.get(key, default)
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ConfigError(f"'{key}' must be a number, got {value!r}")
    if not math.isfinite(number):
        raise ConfigError(f"'{key}' must be a finite number, got {value!r}")
    return number


def _parse_author_entry(entry: Any, position: int) -> AuthorEntry:
    """
    Parse a single author entry from configuration.

    Missing names are kept as empty strings so that validate_config can
    report every problem at once.

    Raises:
        ConfigError: If the entry is not a JSON object.
    """
    if not isinstance(entry, dict):
        raise ConfigError(f"Author entry {position} is not an object: {entry!r}")

    media_type = entry.get("media_type")

    return AuthorEntry(
        last_name=str(entry.get("last_name") or ""),
        first_name=str(entry.get("first_name") or ""),
        media_type=str(media_type) if media_type is not None else None,
        ignore=tuple(str(pattern) for pattern in _as_list(entry.get("ignore"))),
    )


def parse_config(data: Any) -> CatalogConfig:
    """
    Build a CatalogConfig from decoded JSON.

    Args:
        data: Decoded configuration file contents.

    Returns:
        CatalogConfig with a normalized author list.

    Raises:
        ConfigError: If the structure cannot be interpreted.
    """
    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a JSON object")

    authors = [
        _parse_author_entry(entry, position)
        for position, entry in enumerate(_as_list(data.get("authors")), start=1)
    ]

    media_type = data.get("media_type") or DEFAULT_MEDIA_TYPE

    return CatalogConfig(
        library_url=str(data.get("library_url") or "").strip(),
        media_type=str(media_type).strip().upper(),
        layout=str(data.get("layout") or DEFAULT_LAYOUT),
        request_delay=_as_number(data, "request_delay", DEFAULT_REQUEST_DELAY),
        timeout=_as_number(data, "timeout", DEFAULT_TIMEOUT),
        authors=authors,
    )


def load_config(config_path: Optional[str] = None) -> CatalogConfig:
    """
    Load and parse the configuration file.

    Args:
        config_path: Optional path to the configuration file.

    Returns:
        Parsed (not yet validated) CatalogConfig.

    Raises:
        ConfigError: If the file cannot be read or parsed. When the
                     default path is in use the message says so.
    """
    filepath, is_default = resolve_config_path(config_path)

    try:
        config = parse_config(read_config_file(filepath))
    except ConfigError as e:
        if is_default:
            raise ConfigError(
                f"{e}\nDefault configuration file not found or not usable."
            ) from e
        raise

    logger.info(f"Loaded configuration from {filepath} ({len(config.authors)} author(s))")
    return config


def _describe_author(author: AuthorEntry) -> str:
    if author.first_name and author.last_name:
        return author.display_name
    return author.first_name or author.last_name or "an author"


def validate_config(config: CatalogConfig) -> List[str]:
    """
    Validate a configuration and return every error found.

    A library URL that is not an iPAC 2.0 search page only produces a
    warning in the log.

    Args:
        config: Parsed configuration.

    Returns:
        List of error messages (empty if the configuration is usable).
    """
    errors: List[str] = []

    if not config.library_url:
        errors.append("Library URL missing from configuration file")
    elif not _TESTED_URL_RE.search(config.library_url):
        logger.warning(
            "Library URL does not end in 'ipac20/ipac.jsp'. iPAC 2.0 and "
            "Horizon Information Portal 3.23_63xx systems are expected to "
            "work; other systems are untested"
        )

    if not is_known_media_type(config.media_type):
        errors.append(f"Bad media type ('{config.media_type}') in configuration")

    if config.layout not in LAYOUTS:
        errors.append(
            f"Unknown page layout ('{config.layout}'); "
            f"known layouts: {', '.join(sorted(LAYOUTS))}"
        )

    for author in config.authors:
        if not author.last_name:
            who = f"'{author.first_name}'" if author.first_name else "an author"
            errors.append(f"Configuration missing last name for {who}")

        if not author.first_name:
            who = f"'{author.last_name}'" if author.last_name else "an author"
            errors.append(f"Configuration missing first name for {who}")

        if author.media_type is not None and not is_known_media_type(author.media_type):
            errors.append(
                f"Bad media type ('{author.media_type}') in configuration "
                f"for '{_describe_author(author)}'"
            )

    if config.request_delay < 0:
        errors.append("'request_delay' must not be negative")

    if config.timeout <= 0:
        errors.append("'timeout' must be positive")

    return errors
