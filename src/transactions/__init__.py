"""
Transactions Module

This module provides atomic units of work over the triple store. Validated
transactions check the OWL Lite schema before their changes become visible and
roll back entirely on the first violation.

Public Interface:
- TransactionService: Creates transactions over a shared store
- Transaction: Plain transaction (commit without validation)
- ValidatedTransaction: Transaction validated on commit
- TransactionState, TransactionStateError
- TransactionConfig: Configuration, optionally read from the environment
- ObjectMapper: Creates and looks up typed resources
"""

from .config import TransactionConfig
from .mapping import ObjectMapper
from .service import TransactionService
from .transaction import Transaction, TransactionState, TransactionStateError
from .validated import ValidatedTransaction

__all__ = [
    "TransactionService",
    "Transaction",
    "ValidatedTransaction",
    "TransactionState",
    "TransactionStateError",
    "TransactionConfig",
    "ObjectMapper",
]
