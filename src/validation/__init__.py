"""
Schema Validation Module

This module decides whether the graph around a set of affected nodes complies
with the OWL Lite axioms stored next to it. The affected nodes are first
expanded to everything connected to them; then one validator per axiom kind
searches that anchor set for a counterexample.

Public Interface:
- ValidationService: Reachability plus the validators in their fixed order
- ReachabilityAnalyzer: Undirected closure of a node set
- ConstraintValidator and the ten validators
- AxiomKind, Violation, ValidationFailedError
"""

from .base import ConstraintValidator
from .domain import AxiomKind, ValidationFailedError, Violation
from .properties import (
    FunctionalValidator, InverseFunctionalValidator, InverseOfValidator,
    SubPropertyOfValidator, SymmetricValidator, TransitiveValidator,
)
from .reachability import ReachabilityAnalyzer
from .restrictions import (
    AllValuesFromValidator, MaxCardinalityValidator, MinCardinalityValidator,
    SomeValuesFromValidator,
)
from .service import ValidationService, default_validators

__all__ = [
    "ValidationService",
    "default_validators",
    "ReachabilityAnalyzer",
    "ConstraintValidator",
    "FunctionalValidator",
    "InverseFunctionalValidator",
    "SymmetricValidator",
    "TransitiveValidator",
    "InverseOfValidator",
    "SubPropertyOfValidator",
    "AllValuesFromValidator",
    "SomeValuesFromValidator",
    "MinCardinalityValidator",
    "MaxCardinalityValidator",
    "AxiomKind",
    "Violation",
    "ValidationFailedError",
]
