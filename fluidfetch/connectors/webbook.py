"""
WebBook HTTP client.

Three calls are made against the WebBook:

- the substance selection page (HTML), scraped for the catalogue
- the "prime" request (Action=Load), which makes the server compute the
  table; its HTML response is discarded
- the data request (Action=Data&Wide=on), which returns the computed table
  as whitespace-delimited text, and only after the prime request

Each call is attempted exactly once.
"""

import logging
from typing import Optional

import requests

from fluidfetch.config import FluidsSettings
from fluidfetch.connectors.errors import (
    ConnectorEmptyResponse,
    classify_connector_error,
)

logger = logging.getLogger(__name__)


class WebBookClient:
    """Thin requests wrapper mapping failures onto the connector taxonomy."""

    def __init__(
        self,
        settings: FluidsSettings,
        session: Optional[requests.Session] = None,
    ):
        self.settings = settings
        self.timeout = settings.request_timeout
        self.session = session or self._create_session()

    def _create_session(self) -> requests.Session:
        session = requests.Session()
        session.headers.update({"User-Agent": self.settings.user_agent})
        return session

    def _get(self, url: str, connector: str) -> requests.Response:
        logger.info(f"GET {url}")
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise classify_connector_error(e, connector, url) from e
        logger.debug(f"{connector}: HTTP {response.status_code}, {len(response.content)} bytes")
        return response

    def fetch_substance_page(self) -> str:
        """Return the HTML of the substance selection page."""
        return self._get(self.settings.catalogue_url, "webbook/catalogue").text

    def prime(self, url: str) -> None:
        """Issue the Action=Load request; the response body is ignored."""
        self._get(url, "webbook/prime")

    def fetch_table(self, url: str) -> str:
        """Issue the Action=Data request and return the text table.

        Raises:
            ConnectorEmptyResponse: if the body holds no table rows
        """
        body = self._get(url, "webbook/data").text
        if not body.strip():
            raise ConnectorEmptyResponse(
                "WebBook returned an empty table; check the request parameters",
                connector="webbook/data",
                url=url,
            )
        return body

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "WebBookClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
