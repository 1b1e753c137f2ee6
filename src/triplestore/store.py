"""
In-memory RDF triple store with commit and rollback.

The store wraps an rdflib Graph backed by an AuditableStore, which records the
reverse of every add/remove since the last commit. ``rollback()`` replays that
log, ``commit()`` forgets it. The store knows nothing about schemas; schema
enforcement is layered on top by the validation package.
"""

import logging
from typing import Any, Iterator, List, Optional, Tuple

from rdflib import Graph, Namespace, OWL, RDF, RDFS, XSD
from rdflib.plugins.sparql import prepareQuery
from rdflib.plugins.stores.auditable import AuditableStore
from rdflib.plugins.stores.memory import Memory

from .errors import ErrorKind, StoreError

logger = logging.getLogger(__name__)

TriplePattern = Tuple[Any, Any, Any]


class TripleStore:
    """Transactional in-memory RDF store."""

    def __init__(self, identifier: Optional[str] = None):
        self._backend = AuditableStore(Memory())
        self.graph = Graph(store=self._backend, identifier=identifier)
        self._closed = False
        self._owner: Optional[object] = None

        self._init_namespaces()

    def _init_namespaces(self):
        """Bind the vocabularies used by schema axioms."""
        self.graph.bind("owl", Namespace(str(OWL)))
        self.graph.bind("rdf", Namespace(str(RDF)))
        self.graph.bind("rdfs", Namespace(str(RDFS)))
        self.graph.bind("xsd", Namespace(str(XSD)))

    # -------------------- Connection --------------------

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self):
        """Close the store. Every later operation raises StoreError."""
        if not self._closed:
            self.graph.close()
            self._closed = True
            logger.info("Triple store closed")

    def _ensure_open(self):
        if self._closed:
            raise StoreError(ErrorKind.CONNECTION, "Triple store is closed")

    # -------------------- Statements --------------------

    def add(self, triple: TriplePattern):
        self._ensure_open()
        self.graph.add(triple)

    def remove(self, triple: TriplePattern):
        """Remove matching statements; ``None`` acts as a wildcard."""
        self._ensure_open()
        self.graph.remove(triple)

    def triples(self, pattern: TriplePattern) -> Iterator[TriplePattern]:
        self._ensure_open()
        return self.graph.triples(pattern)

    def objects(self, subject, predicate) -> List[Any]:
        self._ensure_open()
        return list(self.graph.objects(subject, predicate))

    def subjects(self, predicate, obj) -> List[Any]:
        self._ensure_open()
        return list(self.graph.subjects(predicate, obj))

    def transitive_objects(self, subject, predicate) -> List[Any]:
        """``subject`` followed by everything reachable from it along ``predicate``."""
        self._ensure_open()
        return list(self.graph.transitive_objects(subject, predicate))

    def transitive_subjects(self, predicate, obj) -> List[Any]:
        """``obj`` followed by everything reaching it along ``predicate``."""
        self._ensure_open()
        return list(self.graph.transitive_subjects(predicate, obj))

    def __contains__(self, triple: TriplePattern) -> bool:
        self._ensure_open()
        return triple in self.graph

    def __len__(self) -> int:
        self._ensure_open()
        return len(self.graph)

    # -------------------- Queries --------------------

    def query(self, sparql: str) -> List[Any]:
        """Evaluate a SPARQL SELECT query and return all result rows.

        Raises:
            StoreError: MALFORMED_QUERY if the text does not parse,
                QUERY_EVALUATION if evaluation fails, CONNECTION if closed.
        """
        self._ensure_open()
        try:
            prepared = prepareQuery(sparql)
        except Exception as e:
            raise StoreError(
                ErrorKind.MALFORMED_QUERY, f"Query is malformed. Details: {e}", query=sparql
            ) from e

        try:
            return list(self.graph.query(prepared))
        except Exception as e:
            raise StoreError(
                ErrorKind.QUERY_EVALUATION, f"Query could not be evaluated. Details: {e}", query=sparql
            ) from e

    # -------------------- Transactions --------------------

    @property
    def pending_changes(self) -> int:
        """Number of net statement changes since the last commit or rollback."""
        return len(self._backend.reverseOps)

    def commit(self):
        self._ensure_open()
        changes = self.pending_changes
        self.graph.commit()
        logger.debug(f"Committed {changes} statement changes")

    def rollback(self):
        self._ensure_open()
        changes = self.pending_changes
        self.graph.rollback()
        logger.debug(f"Rolled back {changes} statement changes")

    def claim(self, owner: object):
        """Register ``owner`` as the single writer of this store."""
        self._ensure_open()
        if self._owner is not None and self._owner is not owner:
            raise StoreError(
                ErrorKind.INVALID_STATE,
                "Triple store is already in use by another transaction",
            )
        self._owner = owner

    def release(self, owner: object):
        if self._owner is owner:
            self._owner = None

    @property
    def owner(self) -> Optional[object]:
        return self._owner
