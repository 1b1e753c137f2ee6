"""
Validators for class restrictions (owl:Restriction nodes).

A restriction applies to an anchor when one of the anchor's types is a
transitive subclass of the restriction node. Type tests on values accept the
class itself and any of its transitive subclasses.

Cardinalities count owl:sameAs equivalence classes rather than nodes: of the
values that are linked by an undirected owl:sameAs chain, only the one with
the lowest string form is counted.
"""

import logging
from abc import abstractmethod
from dataclasses import dataclass
from typing import List, Optional

from rdflib import BNode, OWL, RDF, URIRef
from rdflib.term import Identifier

from triplestore import (
    Count, Filter, LessThan, NotExists, OptionalGroup, Str, Triple, Values,
    Path, Var, alternative, select, variables,
)

from .base import INSTANCE_OF, RESTRICTED_BY, SAME_AS, ConstraintValidator
from .domain import AxiomKind, Violation

logger = logging.getLogger(__name__)


# -------------------- Row types --------------------

@dataclass(frozen=True)
class ValueTypeRow:
    subject: URIRef
    predicate: URIRef
    value: Identifier
    target: URIRef


@dataclass(frozen=True)
class ValueCountRow:
    subject: Optional[URIRef]
    predicate: Optional[URIRef]
    target: Optional[URIRef]
    total: Optional[int]
    matching: Optional[int]


@dataclass(frozen=True)
class CardinalityGroupRow:
    subject: Optional[URIRef]
    predicate: Optional[URIRef]
    restriction: Optional[BNode]
    required: Optional[int]
    on_class: Optional[URIRef]


@dataclass(frozen=True)
class CardinalityRow:
    cardinality: Optional[int]


# -------------------- Value restrictions --------------------

class AllValuesFromValidator(ConstraintValidator):
    """Every value of a restricted property must be an instance of the target class."""

    axiom = AxiomKind.ALL_VALUES_FROM

    def _find_violation(self, anchors: List[URIRef]) -> Optional[Violation]:
        subject, predicate, value, target, restriction = variables(
            "subject", "predicate", "value", "target", "restriction"
        )
        query = select(subject, predicate, value, target).where(
            Values(subject, anchors),
            Triple(subject, RESTRICTED_BY, restriction),
            Triple(restriction, RDF.type, OWL.Restriction),
            Triple(restriction, OWL.onProperty, predicate),
            Triple(restriction, OWL.allValuesFrom, target),
            Triple(subject, predicate, value),
            Filter(NotExists(Triple(value, INSTANCE_OF, target))),
        )

        row = self.facade.first(query, ValueTypeRow)
        if row is None:
            return None
        return Violation(
            axiom=self.axiom,
            predicate=row.predicate,
            subject=row.subject,
            related=(row.value, row.target),
            message=(f"Value {row.value} of {row.predicate} (from {row.subject}) "
                     f"is not of required type {row.target}"),
        )


class SomeValuesFromValidator(ConstraintValidator):
    """A subject with values for a restricted property needs at least one of the target class.

    All (subject, property, class) groups are counted in one aggregate query;
    the first group with values but no matching value is reported.
    """

    axiom = AxiomKind.SOME_VALUES_FROM

    def _find_violation(self, anchors: List[URIRef]) -> Optional[Violation]:
        subject, predicate, target, restriction, value, match, total, matching = variables(
            "subject", "predicate", "target", "restriction", "value", "match", "total", "matching"
        )
        query = (
            select(subject, predicate, target,
                   Count(value, total, distinct=True),
                   Count(match, matching, distinct=True))
            .where(
                Values(subject, anchors),
                Triple(subject, RESTRICTED_BY, restriction),
                Triple(restriction, RDF.type, OWL.Restriction),
                Triple(restriction, OWL.onProperty, predicate),
                Triple(restriction, OWL.someValuesFrom, target),
                Triple(subject, predicate, value),
                OptionalGroup(
                    Triple(subject, predicate, match),
                    Triple(match, INSTANCE_OF, target),
                ),
            )
            .grouped_by(subject, predicate, target)
        )

        # an aggregate over no solutions yields a single unbound row
        groups = [row for row in self.facade.evaluate(query, ValueCountRow) if row.subject is not None]
        groups.sort(key=lambda g: (str(g.subject), str(g.predicate), str(g.target)))
        logger.debug(f"Counted {len(groups)} someValuesFrom groups")

        for group in groups:
            if (group.total or 0) > 0 and not group.matching:
                return Violation(
                    axiom=self.axiom,
                    predicate=group.predicate,
                    subject=group.subject,
                    related=(group.target,),
                    message=(f"At least one value mapped by {group.predicate} (from {group.subject}) "
                             f"must be of type {group.target}"),
                )
        return None


# -------------------- Cardinality restrictions --------------------

class CardinalityValidator(ConstraintValidator):
    """Shared grouping and equivalence-aware counting of the cardinality validators.

    owl:cardinality restrictions are exact and are checked by both the minimum
    and the maximum validator.
    """

    limit_path: Path

    def _find_violation(self, anchors: List[URIRef]) -> Optional[Violation]:
        for group in self._groups(anchors):
            violation = self._check(group)
            if violation is not None:
                return violation
        return None

    def _groups(self, anchors: List[URIRef]) -> List[CardinalityGroupRow]:
        subject, predicate, restriction, required, on_class = variables(
            "subject", "predicate", "restriction", "required", "on_class"
        )
        query = select(subject, predicate, restriction, required, on_class).where(
            Values(subject, anchors),
            Triple(subject, RESTRICTED_BY, restriction),
            Triple(restriction, RDF.type, OWL.Restriction),
            Triple(restriction, OWL.onProperty, predicate),
            Triple(restriction, self.limit_path, required),
            OptionalGroup(Triple(restriction, OWL.onClass, on_class)),
        ).distinct_rows()

        groups = [row for row in self.facade.evaluate(query, CardinalityGroupRow)
                  if row.subject is not None and row.required is not None]
        groups.sort(key=lambda g: (str(g.subject), str(g.predicate), g.required, str(g.on_class or "")))
        return groups

    def count_values(self, subject: URIRef, predicate: URIRef, on_class: Optional[URIRef] = None) -> int:
        """Count the values of ``subject`` via ``predicate`` up to owl:sameAs.

        With ``on_class`` only values that are instances of that class count.
        """
        anchor, value, other, cardinality = variables("anchor", "value", "other", "cardinality")

        def typed(node: Var) -> list:
            return [Triple(node, INSTANCE_OF, on_class)] if on_class is not None else []

        query = select(Count(value, cardinality, distinct=True)).where(
            Values(anchor, [subject]),
            Triple(anchor, predicate, value),
            *typed(value),
            Filter(NotExists(
                Triple(anchor, predicate, other),
                *typed(other),
                Triple(other, SAME_AS, value),
                Filter(LessThan(Str(other), Str(value))),
            )),
        )

        row = self.facade.first(query, CardinalityRow)
        return row.cardinality if row is not None and row.cardinality is not None else 0

    @abstractmethod
    def _check(self, group: CardinalityGroupRow) -> Optional[Violation]:
        pass

    def _violation(self, group: CardinalityGroupRow, message: str) -> Violation:
        return Violation(
            axiom=self.axiom,
            predicate=group.predicate,
            subject=group.subject,
            related=(group.on_class,) if group.on_class is not None else (),
            message=message,
        )


class MinCardinalityValidator(CardinalityValidator):
    """At least n values; with owl:onClass, also at least n values of that class."""

    axiom = AxiomKind.MIN_CARDINALITY
    limit_path = alternative(OWL.minCardinality, OWL.cardinality)

    def _check(self, group: CardinalityGroupRow) -> Optional[Violation]:
        cardinality = self.count_values(group.subject, group.predicate)
        if cardinality < group.required:
            return self._violation(
                group,
                f"Property {group.predicate} of {group.subject} has only {cardinality} values, "
                f"but minimum cardinality is {group.required}",
            )

        if group.on_class is not None:
            qualified = self.count_values(group.subject, group.predicate, group.on_class)
            if qualified < group.required:
                return self._violation(
                    group,
                    f"Property {group.predicate} of {group.subject} requires at least {group.required} "
                    f"values of type {group.on_class} but only {qualified} of {cardinality} have this type",
                )
        return None


class MaxCardinalityValidator(CardinalityValidator):
    """At most n values; with owl:onClass, at most n values of that class."""

    axiom = AxiomKind.MAX_CARDINALITY
    limit_path = alternative(OWL.maxCardinality, OWL.cardinality)

    def _check(self, group: CardinalityGroupRow) -> Optional[Violation]:
        if group.on_class is None:
            cardinality = self.count_values(group.subject, group.predicate)
            if cardinality > group.required:
                return self._violation(
                    group,
                    f"Property {group.predicate} of {group.subject} has {cardinality} values, "
                    f"but maximum cardinality is {group.required}",
                )
            return None

        qualified = self.count_values(group.subject, group.predicate, group.on_class)
        if qualified > group.required:
            return self._violation(
                group,
                f"Property {group.predicate} of {group.subject} allows at most {group.required} "
                f"values of type {group.on_class}, but {qualified} have this type",
            )
        return None
