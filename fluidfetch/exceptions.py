"""fluidfetch Exception Hierarchy.

Exception Hierarchy:
    FluidsException (base)
    ├── UsageError
    │   └── InvalidUnitCode
    ├── ResolutionError
    ├── CatalogueError
    ├── NetworkError
    │   └── ConnectorError (see fluidfetch.connectors.errors)
    └── FormatError

All exceptions carry:
- error_code: Unique error identifier
- context: Dictionary with error-specific details
- timestamp: When the error occurred

Only FormatError is non-fatal: the run still writes the table, unannotated.

Example:
    >>> from fluidfetch.exceptions import InvalidUnitCode
    >>> raise InvalidUnitCode(quantity="pressure", code=9, valid=range(1, 6))
"""

import json
import re
from datetime import datetime
from typing import Any, Dict, Iterable, Optional


# ==============================================================================
# Base Exception
# ==============================================================================

class FluidsException(Exception):
    """Base exception for all fluidfetch errors.

    Attributes:
        message: Human-readable error message
        error_code: Unique error identifier (e.g., "FLUIDS_USAGE_ERROR")
        context: Dictionary with error-specific details
        timestamp: When the error occurred
    """

    ERROR_PREFIX = "FLUIDS"

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self._generate_error_code()
        self.context = context or {}
        self.timestamp = datetime.now()

    def _generate_error_code(self) -> str:
        """Generate error code from the class name.

        Returns:
            Error code like "FLUIDS_RESOLUTION_ERROR"
        """
        error_type = re.sub(r'(?<!^)(?=[A-Z])', '_', self.__class__.__name__).upper()
        return f"{self.ERROR_PREFIX}_{error_type}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
        }

    def to_json(self) -> str:
        """Convert exception to JSON string."""
        return json.dumps(self.to_dict(), indent=2, default=str)

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message='{self.message}', "
            f"error_code='{self.error_code}')"
        )


# ==============================================================================
# Usage and input errors
# ==============================================================================

class UsageError(FluidsException):
    """Invalid command-line input.

    Raised before any network access, e.g. for a malformed unit override.
    """


class InvalidUnitCode(UsageError):
    """A unit code does not index the label list of its quantity."""

    def __init__(
        self,
        quantity: str,
        code: Any,
        valid: Iterable[int],
        context: Optional[Dict[str, Any]] = None,
    ):
        valid = list(valid)
        message = (
            f"Invalid {quantity} unit code {code!r}: "
            f"expected {valid[0]}..{valid[-1]}"
        )
        context = context or {}
        context.update({"quantity": quantity, "code": code, "valid": valid})
        super().__init__(message, context=context)
        self.quantity = quantity
        self.code = code
        self.valid = valid


class ResolutionError(FluidsException):
    """Substance ID (or name) is not listed in the catalogue."""

    def __init__(
        self,
        message: str,
        substance: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        context = context or {}
        if substance:
            context["substance"] = substance
        super().__init__(message, context=context)
        self.substance = substance


class CatalogueError(FluidsException):
    """Catalogue file is missing or the substance page could not be parsed."""

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        context = context or {}
        if path:
            context["path"] = str(path)
        super().__init__(message, context=context)


class NetworkError(FluidsException):
    """A request to the WebBook failed. The run is aborted."""


class FormatError(FluidsException):
    """Response column count matches no known legend.

    Never raised by the pipeline; it is reported as a warning and the table
    is written without a column legend.
    """

    def __init__(
        self,
        column_count: int,
        known: Iterable[int] = (),
        context: Optional[Dict[str, Any]] = None,
    ):
        known = sorted(known)
        context = context or {}
        context.update({"column_count": column_count, "known": known})
        super().__init__(
            f"Can't identify the output format ({column_count} columns)",
            context=context,
        )
        self.column_count = column_count


# ==============================================================================
# Exception Utilities
# ==============================================================================

def format_exception_chain(exc: Exception) -> str:
    """Format exception chain for logging/display.

    Args:
        exc: Exception to format

    Returns:
        Formatted string with full exception chain
    """
    lines = []
    current = exc

    while current is not None:
        if isinstance(current, FluidsException):
            lines.append(f"[{current.error_code}] {current}")
            if current.context:
                lines.append(f"  Context: {current.context}")
        else:
            lines.append(f"{type(current).__name__}: {current}")

        current = getattr(current, "__cause__", None)

    return "\n".join(lines)
