"""
Fetch module for the Latest Books tool.

This module handles fetching catalog search pages with retries and
exponential backoff. Any failure to obtain a page is raised as a
TransportError; callers never receive a partial or empty document
in place of an error.
"""

import re
from typing import Optional
from urllib.parse import urlparse

import requests
from bs4.dammit import EncodingDetector
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from latest_books.utils import get_logger


# Module logger
logger = get_logger("fetch")

# Default configuration
DEFAULT_TIMEOUT = 30  # seconds
DEFAULT_MAX_RETRIES = 3
DEFAULT_BACKOFF_FACTOR = 1.0  # exponential backoff multiplier
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)


class TransportError(Exception):
    """Raised when a catalog page cannot be fetched at all."""

    def __init__(self, url: str, reason: str, status_code: Optional[int] = None):
        self.url = url
        self.reason = reason
        self.status_code = status_code
        super().__init__(f"{reason} ({url})")


def create_session(
    max_retries: int = DEFAULT_MAX_RETRIES,
    backoff_factor: float = DEFAULT_BACKOFF_FACTOR
) -> requests.Session:
    """
    Create a requests session with retry configuration.

    Configures automatic retries with exponential backoff for
    transient failures (429 and 5xx responses, connection errors).

    Args:
        max_retries: Maximum number of retry attempts.
        backoff_factor: Multiplier for exponential backoff between retries.
                       Sleep time = backoff_factor * (2 ** retry_number)

    Returns:
        Configured requests.Session instance.
    """
    session = requests.Session()

    retry_strategy = Retry(
        total=max_retries,
        backoff_factor=backoff_factor,
        status_forcelist=[429, 500, 502, 503, 504],
        allowed_methods=["GET", "HEAD"],
        raise_on_status=False
    )

    adapter = HTTPAdapter(max_retries=retry_strategy)
    session.mount("http://", adapter)
    session.mount("https://", adapter)

    session.headers.update({
        "User-Agent": DEFAULT_USER_AGENT,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.5",
        "Accept-Encoding": "gzip, deflate",
        "Connection": "keep-alive",
    })

    return session


def ensure_scheme(url: str) -> str:
    """
    Prefix a URL with 'http://' unless it already names http or https.

    Args:
        url: URL as written in the configuration.

    Returns:
        Fully-qualified URL string.
    """
    if _SCHEME_RE.match(url):
        return url
    return "http://" + url


def validate_url(url: str) -> bool:
    """
    Validate that a URL is well-formed and uses HTTP/HTTPS.

    Args:
        url: URL string to validate.

    Returns:
        True if URL is valid, False otherwise.
    """
    try:
        parsed = urlparse(url)
        return parsed.scheme in ("http", "https") and bool(parsed.netloc)
    except ValueError:
        return False


def decode_page(response: requests.Response) -> str:
    """
    Decode a page body, honouring the charset the page itself declares.

    requests falls back to ISO-8859-1 for text/html without a charset
    parameter, which garbles UTF-8 catalog pages. In that case the
    document's <meta> declaration is used, then a detected encoding.

    Args:
        response: Successful response for an HTML page.

    Returns:
        Decoded HTML content.
    """
    content_type = response.headers.get("Content-Type", "")
    if "charset" not in content_type.lower():
        declared = EncodingDetector.find_declared_encoding(response.content, is_html=True)
        response.encoding = declared or response.apparent_encoding
    return response.text


def fetch_page(
    url: str,
    session: requests.Session,
    timeout: float = DEFAULT_TIMEOUT,
    trace: bool = False
) -> str:
    """
    Fetch a single catalog page and return its HTML.

    Args:
        url: URL to fetch; 'http://' is assumed when no scheme is given.
        session: Configured requests session.
        timeout: Request timeout in seconds.
        trace: If True, log the full query URL at INFO level.

    Returns:
        Decoded HTML content of the page.

    Raises:
        TransportError: If the URL is malformed, the host is unreachable,
                        the request fails or the server does not answer 200.
    """
    url = ensure_scheme(url)

    if trace:
        logger.info(f"URL: {url}")
    else:
        logger.debug(f"Fetching URL: {url}")

    if not validate_url(url):
        raise TransportError(url, "Invalid URL format")

    try:
        response = session.get(url, timeout=timeout)
    except requests.exceptions.Timeout as e:
        raise TransportError(url, f"Request timeout: {e}") from e
    except requests.exceptions.ConnectionError as e:
        raise TransportError(url, f"Connection error: {e}") from e
    except requests.exceptions.RequestException as e:
        raise TransportError(url, f"Request failed: {e}") from e

    if response.status_code != 200:
        raise TransportError(
            url,
            f"HTTP {response.status_code}",
            status_code=response.status_code
        )

    html = decode_page(response)
    logger.debug(f"Fetched {url} ({len(html)} characters, {response.encoding})")
    return html
