"""
Transaction service wiring the store, schema, object mapping and validation.

Developer Guide (HOW TO USE TRANSACTIONS)
=========================================
The `TransactionService` owns one in-memory `TripleStore` holding both the
schema (OWL Lite axioms) and the instance data, and hands out transactions
over it.

Setting up a schema:
    service = TransactionService()
    service.ontology.declare_class(PERSON)
    service.ontology.declare_property(HAS_FRIEND, PropertyCharacteristic.SYMMETRIC)
    service.ontology.add_restriction(TEAM, Restriction(HAS_MEMBER, RestrictionKind.ALL_VALUES_FROM, PERSON))
    service.store.commit()          # schema changes are committed like any other change

Running a transaction:
    tx = service.create_transaction().begin()
    alice = tx.create(PERSON)                   # a Resource bound to the store
    bob = tx.find_by_id(PERSON, BOB)
    alice.add(HAS_FRIEND, bob)
    tx.commit()                                  # raises ValidationFailedError on a violation

What is validated on commit:
    Every node created, persisted or found while the transaction was open is
    affected. Everything connected to an affected node (edges followed in both
    directions) is checked against the ten axiom kinds, in this order:
    functional, inverse functional, symmetric, transitive, inverseOf,
    subPropertyOf, allValuesFrom, someValuesFrom, minCardinality,
    maxCardinality. The first violation rolls back the whole transaction; fix
    it and run the transaction again to see the next one, if any.

    Statements added through a Resource count as changes of that resource, so
    work on resources obtained from the transaction (create / find_by_id /
    find_all / persist).

Errors (all GraphError, match on `error.kind`):
    VALIDATION      The schema would be violated; the store was rolled back
    INVALID_STATE   Operation not allowed in the transaction's state, or the
                    store is in use by another transaction
    CONNECTION      The store is closed
    MALFORMED_QUERY / QUERY_EVALUATION
                    A validation query could not be built or evaluated; the
                    transaction stays VALIDATING until rollback()

Configuration (`TransactionConfig`, or ONTOLOGY_TX_* environment variables):
    resource_namespace  Prefix of minted IRIs (default urn:uuid:)
    validate_on_commit  False hands out plain transactions that skip validation
    log_queries         Log every rendered query at DEBUG level
"""

import logging
from typing import Optional

from ontology import OntologyStore
from triplestore import GraphQueryFacade, TripleStore
from validation import ValidationService

from .config import TransactionConfig
from .mapping import ObjectMapper
from .transaction import Transaction
from .validated import ValidatedTransaction

logger = logging.getLogger(__name__)


class TransactionService:
    """
    Main entry point of the transaction layer.

    Creates the store-facing components once and shares them between the
    transactions it creates.
    """

    def __init__(self, store: Optional[TripleStore] = None, config: Optional[TransactionConfig] = None):
        """
        Initialize the service.

        :param store: Store to work on; a new empty store is created if omitted
        :param config: Configuration; defaults are used if omitted
        """
        self.config = config or TransactionConfig()
        self.store = store if store is not None else TripleStore()
        self.facade = GraphQueryFacade(self.store, log_queries=self.config.log_queries)
        self.ontology = OntologyStore(self.store)
        self.mapper = ObjectMapper(self.store, namespace=self.config.resource_namespace)
        self.validation = ValidationService(self.facade)

        logger.info(
            f"Transaction service ready (validate_on_commit={self.config.validate_on_commit}, "
            f"namespace={self.config.resource_namespace})"
        )

    @classmethod
    def from_env(cls, store: Optional[TripleStore] = None) -> "TransactionService":
        """Create a service configured from ONTOLOGY_TX_* environment variables."""
        return cls(store=store, config=TransactionConfig.from_env())

    def create_transaction(self, validated: Optional[bool] = None) -> Transaction:
        """
        Create a new, not yet begun, transaction.

        :param validated: Whether commit validates the schema; defaults to
            ``config.validate_on_commit``
        """
        if validated is None:
            validated = self.config.validate_on_commit
        if validated:
            return ValidatedTransaction(self.store, self.mapper, self.validation)
        return Transaction(self.store, self.mapper)
