"""
Domain models for schema validation.

A Violation describes the first place where the graph breaks an axiom. It is
surfaced to callers through ValidationFailedError, which is a GraphError of
kind VALIDATION.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from rdflib.term import Identifier

from triplestore import ErrorKind, GraphError


class AxiomKind(str, Enum):
    """The axioms checked on commit, in the order they are checked."""
    FUNCTIONAL = "functional"
    INVERSE_FUNCTIONAL = "inverse_functional"
    SYMMETRIC = "symmetric"
    TRANSITIVE = "transitive"
    INVERSE_OF = "inverse_of"
    SUB_PROPERTY_OF = "sub_property_of"
    ALL_VALUES_FROM = "all_values_from"
    SOME_VALUES_FROM = "some_values_from"
    MIN_CARDINALITY = "min_cardinality"
    MAX_CARDINALITY = "max_cardinality"


@dataclass(frozen=True)
class Violation:
    """A structured record of a broken axiom."""

    axiom: AxiomKind
    predicate: Identifier                      # the offending property
    subject: Identifier                        # the node whose constraint failed
    related: Tuple[Identifier, ...] = ()       # values, classes or nodes involved
    message: str = ""

    def __str__(self) -> str:
        return self.message or f"{self.axiom.value} violated by {self.subject} via {self.predicate}"


class ValidationFailedError(GraphError):
    """Raised when a commit would leave the graph violating the schema."""

    def __init__(self, violation: Violation, message: Optional[str] = None):
        super().__init__(
            ErrorKind.VALIDATION,
            message or str(violation),
            axiom=violation.axiom,
            predicate=violation.predicate,
            subject=violation.subject,
            related=violation.related,
        )
        self.violation = violation
