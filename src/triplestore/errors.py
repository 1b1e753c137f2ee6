"""
Error kinds shared by the store, validation and transaction layers.

Every failure raised by this project is a GraphError carrying an ErrorKind tag
and structured context, so callers can branch on ``error.kind`` instead of on
exception classes.
"""

from enum import Enum
from typing import Any, Dict


class ErrorKind(str, Enum):
    """Categories of failures."""
    CONNECTION = "connection"              # store closed or unreachable
    MALFORMED_QUERY = "malformed_query"    # query rejected before or during parsing
    QUERY_EVALUATION = "query_evaluation"  # query parsed but could not be evaluated
    INVALID_STATE = "invalid_state"        # operation not allowed in the current transaction state
    VALIDATION = "validation"              # committed state would violate the schema


class GraphError(Exception):
    """Base error with a kind tag and structured context fields."""

    def __init__(self, kind: ErrorKind, message: str, **context: Any):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.context: Dict[str, Any] = dict(context)

    def __str__(self) -> str:
        return self.message


class StoreError(GraphError):
    """Raised when the triple store cannot execute an operation or a query."""
