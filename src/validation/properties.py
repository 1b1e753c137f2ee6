"""
Validators for property characteristics and property relations.

Each validator issues one existence query over the anchor set and reports the
first counterexample. The transitive validator is the exception: it runs one
query per (anchor, transitive predicate) pair, because the closure check has
to follow that predicate's own chain.
"""

from dataclasses import dataclass
from typing import List, Optional

from rdflib import OWL, RDF, RDFS, URIRef
from rdflib.term import Identifier

from triplestore import (
    Filter, Not, NotExists, SameTerm, Triple, UnionGroup, Values, one_or_more,
    select, variables,
)

from .base import SAME_AS, ConstraintValidator
from .domain import AxiomKind, Violation


# -------------------- Row types --------------------

@dataclass(frozen=True)
class ConflictingValuesRow:
    subject: URIRef
    predicate: URIRef
    first: Identifier
    second: Identifier


@dataclass(frozen=True)
class SharedValueRow:
    subject: URIRef
    other: URIRef
    predicate: URIRef
    value: Identifier


@dataclass(frozen=True)
class MissingEdgeRow:
    subject: URIRef
    predicate: URIRef
    object: Identifier


@dataclass(frozen=True)
class RelatedPropertyRow:
    subject: URIRef
    predicate: URIRef
    related: URIRef
    object: Identifier


@dataclass(frozen=True)
class TransitiveEdgeRow:
    subject: URIRef
    predicate: URIRef


@dataclass(frozen=True)
class MissingShortcutRow:
    subject: URIRef
    middle: Identifier
    end: Identifier


# -------------------- Validators --------------------

class FunctionalValidator(ConstraintValidator):
    """A functional property has at most one value per subject, up to owl:sameAs."""

    axiom = AxiomKind.FUNCTIONAL

    def _find_violation(self, anchors: List[URIRef]) -> Optional[Violation]:
        subject, predicate, first, second = variables("subject", "predicate", "first", "second")
        query = select(subject, predicate, first, second).where(
            Values(subject, anchors),
            Triple(predicate, RDF.type, OWL.FunctionalProperty),
            Triple(subject, predicate, first),
            Triple(subject, predicate, second),
            Filter(Not(SameTerm(first, second))),
            Filter(NotExists(Triple(first, SAME_AS, second))),
        )

        row = self.facade.first(query, ConflictingValuesRow)
        if row is None:
            return None
        return Violation(
            axiom=self.axiom,
            predicate=row.predicate,
            subject=row.subject,
            related=(row.first, row.second),
            message=(f"There are multiple distinct values for functional property {row.predicate} "
                     f"(from {row.subject}): {row.first}, {row.second}"),
        )


class InverseFunctionalValidator(ConstraintValidator):
    """An inverse functional property has at most one subject per value, up to owl:sameAs."""

    axiom = AxiomKind.INVERSE_FUNCTIONAL

    def _find_violation(self, anchors: List[URIRef]) -> Optional[Violation]:
        subject, other, predicate, value = variables("subject", "other", "predicate", "value")
        query = select(subject, other, predicate, value).where(
            Values(subject, anchors),
            Triple(predicate, RDF.type, OWL.InverseFunctionalProperty),
            Triple(subject, predicate, value),
            Triple(other, predicate, value),
            Filter(Not(SameTerm(subject, other))),
            Filter(NotExists(Triple(subject, SAME_AS, other))),
        )

        row = self.facade.first(query, SharedValueRow)
        if row is None:
            return None
        return Violation(
            axiom=self.axiom,
            predicate=row.predicate,
            subject=row.subject,
            related=(row.other, row.value),
            message=(f"Inverse functional property {row.predicate} has multiple distinct pre-images "
                     f"({row.subject}, {row.other}) for image {row.value}"),
        )


class SymmetricValidator(ConstraintValidator):
    axiom = AxiomKind.SYMMETRIC

    def _find_violation(self, anchors: List[URIRef]) -> Optional[Violation]:
        subject, predicate, obj = variables("subject", "predicate", "object")
        query = select(subject, predicate, obj).where(
            Values(subject, anchors),
            Triple(predicate, RDF.type, OWL.SymmetricProperty),
            Triple(subject, predicate, obj),
            Filter(NotExists(Triple(obj, predicate, subject))),
        )

        row = self.facade.first(query, MissingEdgeRow)
        if row is None:
            return None
        return Violation(
            axiom=self.axiom,
            predicate=row.predicate,
            subject=row.subject,
            related=(row.object,),
            message=(f"Symmetric property {row.predicate} maps {row.subject} to {row.object}, "
                     f"but does not map inversely"),
        )


class TransitiveValidator(ConstraintValidator):
    """Every two-hop chain of a transitive property needs its direct edge."""

    axiom = AxiomKind.TRANSITIVE

    def _find_violation(self, anchors: List[URIRef]) -> Optional[Violation]:
        subject, predicate, obj = variables("subject", "predicate", "object")
        edges_query = select(subject, predicate).where(
            Values(subject, anchors),
            Triple(predicate, RDF.type, OWL.TransitiveProperty),
            Triple(subject, predicate, obj),
        ).distinct_rows()

        edges = self.facade.evaluate(edges_query, TransitiveEdgeRow)
        for edge in sorted(edges, key=lambda e: (str(e.subject), str(e.predicate))):
            violation = self._check_closure(edge.subject, edge.predicate)
            if violation is not None:
                return violation
        return None

    def _check_closure(self, anchor: URIRef, predicate: URIRef) -> Optional[Violation]:
        subject, middle, end = variables("subject", "middle", "end")
        chain = one_or_more(predicate)
        query = select(subject, middle, end).where(
            Values(subject, [anchor]),
            Triple(subject, chain, middle),
            Triple(middle, chain, end),
            Filter(NotExists(Triple(subject, predicate, end))),
        )

        row = self.facade.first(query, MissingShortcutRow)
        if row is None:
            return None
        return Violation(
            axiom=self.axiom,
            predicate=predicate,
            subject=anchor,
            related=(row.middle, row.end),
            message=(f"Transitive property {predicate} violates transitivity. No edge exists between "
                     f"{anchor} and {row.end}, but the latter is reachable via {row.middle}"),
        )


class InverseOfValidator(ConstraintValidator):
    """Every edge of a property needs the reverse edge of each of its inverses.

    owl:inverseOf is read in both directions, so declaring it on either
    property constrains both.
    """

    axiom = AxiomKind.INVERSE_OF

    def _find_violation(self, anchors: List[URIRef]) -> Optional[Violation]:
        subject, predicate, inverse_property, obj = variables("subject", "predicate", "related", "object")
        query = select(subject, predicate, inverse_property, obj).where(
            Values(subject, anchors),
            Triple(subject, predicate, obj),
            UnionGroup(
                [Triple(predicate, OWL.inverseOf, inverse_property)],
                [Triple(inverse_property, OWL.inverseOf, predicate)],
            ),
            Filter(NotExists(Triple(obj, inverse_property, subject))),
        )

        row = self.facade.first(query, RelatedPropertyRow)
        if row is None:
            return None
        return Violation(
            axiom=self.axiom,
            predicate=row.predicate,
            subject=row.subject,
            related=(row.object, row.related),
            message=(f"Missing inverse mapping from {row.object} to {row.subject} by {row.related} "
                     f"(inverse of {row.predicate})"),
        )


class SubPropertyOfValidator(ConstraintValidator):
    """Every edge of a property is also an edge of each transitive super property."""

    axiom = AxiomKind.SUB_PROPERTY_OF

    def _find_violation(self, anchors: List[URIRef]) -> Optional[Violation]:
        subject, predicate, super_property, obj = variables("subject", "predicate", "related", "object")
        query = select(subject, predicate, super_property, obj).where(
            Values(subject, anchors),
            Triple(subject, predicate, obj),
            Triple(predicate, one_or_more(RDFS.subPropertyOf), super_property),
            Filter(NotExists(Triple(subject, super_property, obj))),
        )

        row = self.facade.first(query, RelatedPropertyRow)
        if row is None:
            return None
        return Violation(
            axiom=self.axiom,
            predicate=row.predicate,
            subject=row.subject,
            related=(row.object, row.related),
            message=(f"Superproperty {row.related} of {row.predicate} is missing value {row.object} "
                     f"(resource: {row.subject})"),
        )
