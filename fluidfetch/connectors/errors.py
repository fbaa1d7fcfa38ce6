"""
Connector Error Taxonomy
========================

Structured error hierarchy for requests made to the WebBook.

Every connector error is a NetworkError, so callers that only care about
"the run must abort" can catch that; the subclasses tell a timeout from
an HTTP status failure or an empty table.
"""

from typing import Any, Dict, Optional

import requests

from fluidfetch.exceptions import NetworkError


class ConnectorError(NetworkError):
    """
    Base exception for all connector errors

    - message: Human-readable error description
    - connector: Which endpoint raised the error ("webbook/data", ...)
    - status_code: HTTP status code (if applicable)
    - url: Target URL (if applicable)
    - original_error: Wrapped exception (if any)
    """

    def __init__(
        self,
        message: str,
        connector: str,
        status_code: Optional[int] = None,
        url: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None
    ):
        self.connector = connector
        self.status_code = status_code
        self.url = url
        self.original_error = original_error

        parts = [f"[{connector}] {message}"]
        if status_code:
            parts.append(f"(HTTP {status_code})")
        if url:
            parts.append(f"(URL: {url})")

        context = context or {}
        context.update({"connector": connector, "status_code": status_code, "url": url})
        super().__init__(" ".join(parts), context=context)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["original_error"] = str(self.original_error) if self.original_error else None
        return data


class ConnectorNetworkError(ConnectorError):
    """
    Network communication error

    Common causes:
    - DNS resolution failure
    - TLS/SSL errors
    - Network unreachable
    """
    pass


class ConnectorTimeoutError(ConnectorError):
    """Request exceeded the configured timeout."""
    pass


class ConnectorNotFound(ConnectorError):
    """Endpoint answered 404, usually a changed base URL."""
    pass


class ConnectorBadRequest(ConnectorError):
    """
    Bad request error (4xx)

    Common causes:
    - Invalid query parameters
    - Unknown substance ID
    """
    pass


class ConnectorServerError(ConnectorError):
    """Server error (5xx)."""
    pass


class ConnectorEmptyResponse(ConnectorError):
    """
    Data request succeeded but returned no table

    The WebBook answers an out-of-range request (or a data request that was
    not primed) with an empty body rather than an error status.
    """
    pass


def classify_connector_error(
    error: Exception,
    connector: str,
    url: Optional[str] = None
) -> ConnectorError:
    """
    Classify a requests exception as a specific ConnectorError type

    Args:
        error: Original exception
        connector: Connector identifier
        url: Request URL if applicable

    Returns:
        ConnectorError subclass instance

    Example:
        try:
            response = session.get(url, timeout=30)
            response.raise_for_status()
        except requests.RequestException as e:
            raise classify_connector_error(e, "webbook/data", url) from e
    """
    if isinstance(error, requests.Timeout):
        return ConnectorTimeoutError(
            f"Request timed out: {error}",
            connector=connector,
            url=url,
            original_error=error
        )

    if isinstance(error, requests.ConnectionError):
        return ConnectorNetworkError(
            f"Network error: {error}",
            connector=connector,
            url=url,
            original_error=error
        )

    response = getattr(error, "response", None)
    status_code = getattr(response, "status_code", None)

    if status_code == 404:
        return ConnectorNotFound(
            f"Resource not found: {error}",
            connector=connector,
            status_code=status_code,
            url=url,
            original_error=error
        )

    if status_code is not None and 400 <= status_code < 500:
        return ConnectorBadRequest(
            f"Bad request: {error}",
            connector=connector,
            status_code=status_code,
            url=url,
            original_error=error
        )

    if status_code is not None and 500 <= status_code < 600:
        return ConnectorServerError(
            f"Server error: {error}",
            connector=connector,
            status_code=status_code,
            url=url,
            original_error=error
        )

    return ConnectorError(
        str(error),
        connector=connector,
        status_code=status_code,
        url=url,
        original_error=error
    )
