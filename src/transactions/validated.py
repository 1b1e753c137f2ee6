"""
Transactions that validate the schema before committing.
"""

import logging
from typing import FrozenSet, Iterable, Set

from rdflib import URIRef

from triplestore import TripleStore
from validation import ValidationService

from .mapping import ObjectMapper
from .transaction import Transaction

logger = logging.getLogger(__name__)


class ValidatedTransaction(Transaction):
    """A transaction whose commit is refused when the result violates the schema.

    Every node created, persisted or looked up while the transaction is open is
    recorded as affected. On commit the affected nodes, together with everything
    connected to them, are validated; the first violation rolls back the whole
    transaction.
    """

    def __init__(self, store: TripleStore, mapper: ObjectMapper, validation: ValidationService):
        super().__init__(store, mapper)
        self.validation = validation
        self._affected: Set[URIRef] = set()

    @property
    def affected(self) -> FrozenSet[URIRef]:
        """Nodes touched since begin(); emptied when the transaction ends."""
        return frozenset(self._affected)

    def _on_begin(self):
        self._affected = set()

    def _on_finish(self):
        self._affected = set()

    def _touched(self, nodes: Iterable[URIRef]):
        self._affected.update(node for node in nodes if isinstance(node, URIRef))

    def _validate(self):
        logger.debug(f"Validating {len(self._affected)} affected nodes")
        self.validation.validate(self._affected)
