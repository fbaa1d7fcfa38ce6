"""
fluidfetch Connectors
=====================

HTTP access to the NIST Chemistry WebBook and the error taxonomy for it.
"""

from fluidfetch.connectors.errors import (
    ConnectorError,
    ConnectorNetworkError,
    ConnectorTimeoutError,
    ConnectorNotFound,
    ConnectorBadRequest,
    ConnectorServerError,
    ConnectorEmptyResponse,
    classify_connector_error,
)
from fluidfetch.connectors.webbook import WebBookClient

__all__ = [
    "ConnectorError",
    "ConnectorNetworkError",
    "ConnectorTimeoutError",
    "ConnectorNotFound",
    "ConnectorBadRequest",
    "ConnectorServerError",
    "ConnectorEmptyResponse",
    "classify_connector_error",
    "WebBookClient",
]
