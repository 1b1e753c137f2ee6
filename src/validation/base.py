"""
Base class and shared query fragments of the constraint validators.
"""

import logging
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional

from rdflib import OWL, RDF, RDFS, URIRef

from triplestore import GraphQueryFacade, alternative, inverse, one_or_more, sequence, zero_or_more

from .domain import AxiomKind, Violation

logger = logging.getLogger(__name__)

# Undirected owl:sameAs chain of length one or more.
SAME_AS = one_or_more(alternative(OWL.sameAs, inverse(OWL.sameAs)))

# ?x INSTANCE_OF ?c holds when ?x has type ?c or a subclass of ?c.
INSTANCE_OF = sequence(RDF.type, zero_or_more(RDFS.subClassOf))

# ?x RESTRICTED_BY ?r holds when a type of ?x is a transitive subclass of ?r.
RESTRICTED_BY = sequence(RDF.type, one_or_more(RDFS.subClassOf))


class ConstraintValidator(ABC):
    """Checks one kind of axiom for a set of anchor nodes."""

    axiom: AxiomKind

    def __init__(self, facade: GraphQueryFacade):
        self.facade = facade

    def validate(self, anchors: Iterable[URIRef]) -> Optional[Violation]:
        """Return the first violation among ``anchors``, or None.

        An empty anchor set is never a violation.

        Raises:
            StoreError: If a query cannot be evaluated
        """
        anchors = sorted({a for a in anchors if isinstance(a, URIRef)})
        if not anchors:
            return None

        logger.debug(f"Checking {self.axiom.value} axioms for {len(anchors)} anchors")
        violation = self._find_violation(anchors)
        if violation is not None:
            logger.debug(f"{self.axiom.value} violation: {violation}")
        return violation

    @abstractmethod
    def _find_violation(self, anchors: List[URIRef]) -> Optional[Violation]:
        """Search a non-empty, sorted list of anchor IRIs for a violation."""
        pass
