"""
Transactions over a TripleStore.

A Transaction is a single-writer unit of work: begin() claims the store,
mutations go through the object mapper, and commit() or rollback() ends the
unit and releases the store. The plain Transaction commits without checking
the schema; ValidatedTransaction adds the validation step.

States:
    IDLE -> OPEN -> VALIDATING -> COMMITTED | ROLLED_BACK
A finished transaction can be begun again.
"""

import logging
from enum import Enum
from typing import Iterable, List, Optional

from rdflib import URIRef
from rdflib.resource import Resource

from triplestore import ErrorKind, GraphError, TripleStore

from .mapping import ObjectMapper

logger = logging.getLogger(__name__)


class TransactionState(str, Enum):
    """Lifecycle states of a transaction."""
    IDLE = "idle"                  # created, never begun
    OPEN = "open"                  # accepting mutations
    VALIDATING = "validating"      # commit in progress
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


class TransactionStateError(GraphError):
    """Raised when an operation is not allowed in the transaction's current state."""

    def __init__(self, message: str, **context):
        super().__init__(ErrorKind.INVALID_STATE, message, **context)


class Transaction:
    """Unit of work over a store, committed without schema validation."""

    def __init__(self, store: TripleStore, mapper: ObjectMapper):
        self.store = store
        self.mapper = mapper
        self._state = TransactionState.IDLE

    @property
    def state(self) -> TransactionState:
        return self._state

    def is_active(self) -> bool:
        return self._state in (TransactionState.OPEN, TransactionState.VALIDATING)

    def _require(self, operation: str, *states: TransactionState):
        if self._state not in states:
            raise TransactionStateError(
                f"Cannot {operation} a transaction in state {self._state.value}",
                operation=operation,
                state=self._state,
            )

    # -------------------- Lifecycle --------------------

    def begin(self) -> "Transaction":
        """Start the transaction.

        Raises:
            TransactionStateError: If this transaction is already active, another
                transaction holds the store, or the store has uncommitted changes
            StoreError: If the store is closed
        """
        self._require("begin", TransactionState.IDLE, TransactionState.COMMITTED, TransactionState.ROLLED_BACK)
        if self.store.owner is not None and self.store.owner is not self:
            raise TransactionStateError("The store is in use by another transaction", operation="begin")
        if self.store.pending_changes:
            raise TransactionStateError(
                f"The store has {self.store.pending_changes} uncommitted changes made outside a transaction",
                operation="begin",
            )

        self.store.claim(self)
        self._state = TransactionState.OPEN
        self._on_begin()
        logger.info("Transaction started")
        return self

    def commit(self):
        """Validate (if the transaction validates) and make the changes permanent.

        On a schema violation the store is rolled back before the error is
        raised. A store failure leaves the transaction VALIDATING; call
        rollback() to end it.

        Raises:
            ValidationFailedError: If the changes violate the schema
            StoreError: If the store fails
            TransactionStateError: If the transaction is not open
        """
        self._require("commit", TransactionState.OPEN)
        self._state = TransactionState.VALIDATING

        try:
            self._validate()
        except GraphError as e:
            if e.kind == ErrorKind.VALIDATION:
                self.store.rollback()
                self._finish(TransactionState.ROLLED_BACK)
                logger.warning(f"Transaction rolled back: {e}")
            raise

        changes = self.store.pending_changes
        self.store.commit()
        self._finish(TransactionState.COMMITTED)
        logger.info(f"Transaction committed ({changes} statement changes)")

    def rollback(self):
        """Discard every change made since begin()."""
        self._require("roll back", TransactionState.OPEN, TransactionState.VALIDATING)
        self.store.rollback()
        self._finish(TransactionState.ROLLED_BACK)
        logger.info("Transaction rolled back")

    def _finish(self, state: TransactionState):
        self._state = state
        self.store.release(self)
        self._on_finish()

    # Hooks for subclasses.

    def _on_begin(self):
        pass

    def _on_finish(self):
        pass

    def _touched(self, nodes: Iterable[URIRef]):
        pass

    def _validate(self):
        pass

    # -------------------- Mutations --------------------

    def create(self, rdf_type: URIRef, iri: Optional[URIRef] = None) -> Resource:
        """Create a new instance of ``rdf_type``."""
        self._require("create objects in", TransactionState.OPEN)
        resource = self.mapper.create(rdf_type, iri)
        self._touched([resource.identifier])
        return resource

    def persist(self, resource: Resource) -> Resource:
        """Store a resource built outside the store."""
        self._require("persist objects in", TransactionState.OPEN)
        persisted = self.mapper.persist(resource)
        self._touched([persisted.identifier])
        return persisted

    def find_by_id(self, rdf_type: URIRef, iri: URIRef) -> Optional[Resource]:
        self._require("find objects in", TransactionState.OPEN)
        resource = self.mapper.find_by_id(rdf_type, iri)
        if resource is not None:
            self._touched([resource.identifier])
        return resource

    def find_all(self, rdf_type: URIRef) -> List[Resource]:
        self._require("find objects in", TransactionState.OPEN)
        resources = self.mapper.find_all(rdf_type)
        self._touched(r.identifier for r in resources)
        return resources
