"""
Network access to published CSV sheets
"""
import logging

import requests

from constants import CSV_ACCEPT_HEADER
from exceptions import FetchError

logger = logging.getLogger("main")


class CsvFetcher:
    """GETs a published sheet and returns its text"""

    def __init__(self, session=None, timeout: int = 15):
        self.session = session or requests.Session()
        self.timeout = timeout

    def fetch_text(self, url: str) -> str:
        logger.info(f"Fetching CSV from {url}")
        try:
            response = self.session.get(url, headers={"Accept": CSV_ACCEPT_HEADER}, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise FetchError(f"Failed to load {url}: {e}") from e

        if not response.ok:
            raise FetchError(
                f"Failed to load {url}: {response.status_code} {response.reason}",
                status_code=response.status_code,
            )

        text = response.text
        logger.debug(f"CSV response length: {len(text or '')}")
        if not text or not text.strip():
            raise FetchError(f"Empty response from {url}")
        return text
