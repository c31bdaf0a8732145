"""
Error types raised by the Drips SDK
"""

from typing import Any, Dict, Optional


class DripsError(Exception):
    """
    Base class for every error raised by the SDK.

    Args:
        message: Human readable description
        meta: Offending values and the operation that rejected them
    """

    def __init__(self, message: str, meta: Optional[Dict[str, Any]] = None):
        super().__init__(f"[Drips SDK] {message}")
        self.message = message
        self.meta: Dict[str, Any] = dict(meta or {})


class InvalidArgumentError(DripsError, ValueError):
    """An argument is malformed (address, stream id, ...)"""


class RangeError(DripsError, ValueError):
    """A numeric field does not fit its bit width"""


class InvalidReceiverError(DripsError, ValueError):
    """A receivers list violates count, zero-value or weight rules"""


class ReconciliationError(DripsError):
    """Reconstructed receivers do not hash to the list hash the chain emitted"""


class InsufficientHistoryError(DripsError):
    """No suffix of the available history chains back to the checkpoint"""


class SubgraphQueryError(DripsError):
    """The subgraph request failed or returned GraphQL errors"""
