"""
Reachability closure used to bound the scope of validation.

A transaction can break constraints on nodes it never touched directly, for
example by adding the first half of a symmetric pair to a neighbour. Every
node connected to a touched node by any chain of edges, in either direction,
is therefore validated.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Set

from rdflib import URIRef

from triplestore import (
    Filter, GraphQueryFacade, IsIRI, Triple, Values, alternative, inverse,
    negated, select, variables, zero_or_more,
)

logger = logging.getLogger(__name__)

# A predicate no statement uses: "any predicate but this one" matches every edge.
NO_PREDICATE = URIRef("urn:x-ontology-transactions:no-predicate")
ANY_EDGE = alternative(negated(NO_PREDICATE), inverse(negated(NO_PREDICATE)))


@dataclass(frozen=True)
class ReachableRow:
    node: URIRef


class ReachabilityAnalyzer:
    """Computes the undirected, arbitrary-length closure of a set of nodes."""

    def __init__(self, facade: GraphQueryFacade):
        self.facade = facade

    def reachable(self, anchors: Iterable[URIRef]) -> Set[URIRef]:
        """Return ``anchors`` plus every IRI connected to one of them.

        The closure is one property path query; the store keeps the visited
        set, so cycles terminate. Literals and blank nodes are traversed but
        never returned.

        Raises:
            StoreError: If the store cannot evaluate the query
        """
        anchors = {a for a in anchors if isinstance(a, URIRef)}
        if not anchors:
            return set()

        start, node = variables("start", "node")
        query = select(node).where(
            Values(start, sorted(anchors)),
            Triple(start, zero_or_more(ANY_EDGE), node),
            Filter(IsIRI(node)),
        ).distinct_rows()

        reachable = set(anchors)
        reachable.update(row.node for row in self.facade.evaluate(query, ReachableRow))

        logger.debug(f"{len(anchors)} affected nodes reach {len(reachable)} nodes")
        return reachable
