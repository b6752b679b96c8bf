"""Spreadsheet share-link handling and CSV export fetching."""

import asyncio
import logging
import re
from urllib.parse import quote

import httpx

from proflow.config import get_settings
from proflow.errors import FormatError, NetworkError

logger = logging.getLogger(__name__)

SHEET_ID_PATTERN = re.compile(r"/spreadsheets/d/([a-zA-Z0-9-_]+)")
SHEET_EXPORT_URL = "https://docs.google.com/spreadsheets/d/{sheet_id}/export?format=csv"

# Characters encodeURIComponent leaves untouched
_URI_COMPONENT_SAFE = "-_.!~*'()"


def to_csv_export_url(url: str) -> str:
    """Rewrite a spreadsheet share link into its CSV export link.

    Links without a recognizable document id are returned unchanged.

    Args:
        url: Share link or CSV URL.

    Returns:
        str: CSV export URL.
    """
    if not url:
        return ""
    match = SHEET_ID_PATTERN.search(url)
    if match:
        return SHEET_EXPORT_URL.format(sheet_id=match.group(1))
    return url


def build_fetch_url(export_url: str, proxy_template: str | None) -> str:
    """Route an export URL through the configured relay, if any."""
    if not proxy_template:
        return export_url
    return proxy_template.replace("{url}", quote(export_url, safe=_URI_COMPONENT_SAFE))


def ensure_csv_body(text: str) -> None:
    """Reject HTML pages served in place of CSV.

    Raises:
        FormatError: If the body is an HTML document.
    """
    stripped = text.strip()
    if stripped.startswith("<!DOCTYPE") or stripped.startswith("<html"):
        raise FormatError("HTML content detected. Ensure Sheet is 'Anyone with the link'.")


class SheetFetcher:
    """Fetches CSV exports over HTTP with a bounded timeout.

    Attributes:
        proxy_template: Relay URL template containing ``{url}``.
        timeout: Deadline in seconds for the whole download.
    """

    def __init__(self, proxy_template: str | None = None, timeout: float | None = None):
        """Initialize the fetcher.

        Args:
            proxy_template: Relay URL template, defaults to settings.
            timeout: Timeout in seconds, defaults to settings.
        """
        settings = get_settings()
        self.proxy_template = (
            proxy_template if proxy_template is not None else settings.sheet_proxy_url
        )
        self.timeout = timeout if timeout is not None else settings.import_fetch_timeout

    async def fetch(self, export_url: str) -> str:
        """Download CSV text.

        Args:
            export_url: CSV export URL.

        Returns:
            str: Response body decoded as UTF-8.

        Raises:
            NetworkError: On timeout, transport failure or non-success status.
        """
        request_url = build_fetch_url(export_url, self.proxy_template)
        logger.info(f"Fetching sheet export {export_url}")

        try:
            # httpx timeouts are per read; the deadline bounds the whole download
            async with asyncio.timeout(self.timeout):
                async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
                    response = await client.get(request_url)
                    response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning(f"Sheet fetch failed with HTTP {e.response.status_code}")
            raise NetworkError(
                f"Network response was not ok: {e.response.status_code}"
            ) from e
        except (httpx.TimeoutException, TimeoutError) as e:
            logger.warning(f"Sheet fetch timed out after {self.timeout}s")
            raise NetworkError(f"Timed out after {self.timeout:g}s fetching the sheet") from e
        except httpx.RequestError as e:
            logger.warning(f"Sheet fetch network error: {e}")
            raise NetworkError(f"Failed to fetch the sheet: {e}") from e

        return response.content.decode("utf-8-sig", errors="replace")
