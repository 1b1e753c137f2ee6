"""
Ontology Schema Module

This module declares and reads the OWL Lite schema that instance data in the
triple store is validated against: classes, property characteristics, property
relations (owl:inverseOf, rdfs:subPropertyOf) and class restrictions.

Public Interface:
- OntologyStore: Writes schema axioms into a TripleStore and reads them back

Domain models:
- PropertyCharacteristic, PropertyAxioms
- RestrictionKind, Restriction
"""

from .domain import PropertyAxioms, PropertyCharacteristic, Restriction, RestrictionKind
from .store import OntologyStore

__all__ = [
    "OntologyStore",
    "PropertyAxioms",
    "PropertyCharacteristic",
    "Restriction",
    "RestrictionKind",
]
