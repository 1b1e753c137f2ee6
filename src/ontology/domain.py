"""
Domain models for the ontology module.

These models represent the OWL Lite schema axioms that instance data is
validated against: property characteristics, property relations and class
restrictions.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Set, Union

from rdflib import BNode, OWL, URIRef


class PropertyCharacteristic(str, Enum):
    """Characteristics a property can be declared with (rdf:type of the property)."""
    FUNCTIONAL = "functional"
    INVERSE_FUNCTIONAL = "inverse_functional"
    SYMMETRIC = "symmetric"
    TRANSITIVE = "transitive"

    @property
    def owl_class(self) -> URIRef:
        return {
            PropertyCharacteristic.FUNCTIONAL: OWL.FunctionalProperty,
            PropertyCharacteristic.INVERSE_FUNCTIONAL: OWL.InverseFunctionalProperty,
            PropertyCharacteristic.SYMMETRIC: OWL.SymmetricProperty,
            PropertyCharacteristic.TRANSITIVE: OWL.TransitiveProperty,
        }[self]


class RestrictionKind(str, Enum):
    """Kinds of owl:Restriction supported on classes."""
    ALL_VALUES_FROM = "all_values_from"
    SOME_VALUES_FROM = "some_values_from"
    MIN_CARDINALITY = "min_cardinality"
    MAX_CARDINALITY = "max_cardinality"
    CARDINALITY = "cardinality"        # exact: both a minimum and a maximum

    @property
    def predicate(self) -> URIRef:
        return {
            RestrictionKind.ALL_VALUES_FROM: OWL.allValuesFrom,
            RestrictionKind.SOME_VALUES_FROM: OWL.someValuesFrom,
            RestrictionKind.MIN_CARDINALITY: OWL.minCardinality,
            RestrictionKind.MAX_CARDINALITY: OWL.maxCardinality,
            RestrictionKind.CARDINALITY: OWL.cardinality,
        }[self]

    @property
    def is_cardinality(self) -> bool:
        return self in (
            RestrictionKind.MIN_CARDINALITY,
            RestrictionKind.MAX_CARDINALITY,
            RestrictionKind.CARDINALITY,
        )


@dataclass
class Restriction:
    """A value-type or count constraint on a property, attached to a class by rdfs:subClassOf."""

    on_property: URIRef
    kind: RestrictionKind
    value: Union[URIRef, int]            # target class, or cardinality for count restrictions
    on_class: Optional[URIRef] = None    # qualifies cardinality restrictions to values of a class
    node: Optional[Union[URIRef, BNode]] = None  # the restriction node, once stored

    def __post_init__(self):
        if self.kind.is_cardinality:
            if isinstance(self.value, bool) or not isinstance(self.value, int) or self.value < 0:
                raise ValueError(f"{self.kind.value} needs a non-negative integer, got {self.value!r}")
        else:
            if not isinstance(self.value, URIRef):
                raise ValueError(f"{self.kind.value} needs a class IRI, got {self.value!r}")
            if self.on_class is not None:
                raise ValueError("owl:onClass only qualifies cardinality restrictions")

    @property
    def is_qualified(self) -> bool:
        return self.on_class is not None


@dataclass
class PropertyAxioms:
    """Everything the schema states about one property."""

    iri: URIRef
    characteristics: Set[PropertyCharacteristic] = field(default_factory=set)
    inverse_of: List[URIRef] = field(default_factory=list)        # declared in either direction
    super_properties: List[URIRef] = field(default_factory=list)  # transitive rdfs:subPropertyOf
