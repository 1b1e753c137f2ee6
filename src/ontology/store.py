"""
Schema axioms stored alongside the instance data.

OntologyStore writes OWL Lite declarations (classes, property characteristics,
property relations and class restrictions) into a TripleStore and reads them
back as domain objects. The validators never use these objects; they query the
same statements directly, so schema and data are always evaluated together.
"""

import logging
from typing import Iterable, List, Optional, Union

from rdflib import BNode, Literal, OWL, RDF, RDFS, URIRef, XSD

from triplestore import TripleStore

from .domain import PropertyAxioms, PropertyCharacteristic, Restriction, RestrictionKind

logger = logging.getLogger(__name__)


class OntologyStore:
    """Reads and writes OWL Lite schema axioms in a triple store."""

    def __init__(self, store: TripleStore):
        self.store = store

    # -------------------- Writing --------------------

    def declare_class(self, class_iri: URIRef, parents: Iterable[URIRef] = ()):
        """Declare an owl:Class, optionally as a subclass of ``parents``."""
        self.store.add((class_iri, RDF.type, OWL.Class))
        for parent in parents:
            self.store.add((class_iri, RDFS.subClassOf, parent))
        logger.debug(f"Declared class {class_iri}")

    def declare_property(
        self,
        property_iri: URIRef,
        *characteristics: PropertyCharacteristic,
        inverse_of: Optional[URIRef] = None,
        super_properties: Iterable[URIRef] = (),
    ):
        """Declare an owl:ObjectProperty with its characteristics and relations.

        Args:
            property_iri: The property
            characteristics: Functional, inverse functional, symmetric and/or transitive
            inverse_of: Property declared as owl:inverseOf this one
            super_properties: Direct super properties (rdfs:subPropertyOf)
        """
        self.store.add((property_iri, RDF.type, OWL.ObjectProperty))
        for characteristic in characteristics:
            self.store.add((property_iri, RDF.type, PropertyCharacteristic(characteristic).owl_class))
        if inverse_of is not None:
            self.store.add((property_iri, OWL.inverseOf, inverse_of))
        for super_property in super_properties:
            self.store.add((property_iri, RDFS.subPropertyOf, super_property))
        logger.debug(f"Declared property {property_iri}")

    def add_restriction(self, class_iri: URIRef, restriction: Restriction) -> BNode:
        """Attach ``restriction`` to ``class_iri`` through a fresh restriction node.

        Returns:
            The restriction node; it is also recorded on ``restriction.node``
        """
        node = BNode()
        self.store.add((node, RDF.type, OWL.Restriction))
        self.store.add((node, OWL.onProperty, restriction.on_property))
        if restriction.kind.is_cardinality:
            value = Literal(restriction.value, datatype=XSD.nonNegativeInteger)
        else:
            value = restriction.value
        self.store.add((node, restriction.kind.predicate, value))
        if restriction.on_class is not None:
            self.store.add((node, OWL.onClass, restriction.on_class))
        self.store.add((class_iri, RDFS.subClassOf, node))

        restriction.node = node
        logger.debug(f"Added {restriction.kind.value} restriction on {restriction.on_property} to {class_iri}")
        return node

    # -------------------- Reading --------------------

    def get_property_axioms(self, property_iri: URIRef) -> Optional[PropertyAxioms]:
        """Collect what the schema states about a property, or None if it is unknown."""
        types = set(self.store.objects(property_iri, RDF.type))
        if not types:
            return None

        characteristics = {c for c in PropertyCharacteristic if c.owl_class in types}

        inverse_of: List[URIRef] = []
        for other in self.store.objects(property_iri, OWL.inverseOf) + self.store.subjects(OWL.inverseOf, property_iri):
            if other not in inverse_of:
                inverse_of.append(other)

        super_properties = [
            p for p in self.store.transitive_objects(property_iri, RDFS.subPropertyOf)
            if p != property_iri
        ]

        return PropertyAxioms(
            iri=property_iri,
            characteristics=characteristics,
            inverse_of=inverse_of,
            super_properties=super_properties,
        )

    def get_superclasses(self, class_iri: URIRef) -> List[URIRef]:
        """All named classes ``class_iri`` is a transitive subclass of (itself excluded)."""
        return [
            c for c in self.store.transitive_objects(class_iri, RDFS.subClassOf)
            if c != class_iri and isinstance(c, URIRef)
        ]

    def get_restrictions(self, class_iri: URIRef) -> List[Restriction]:
        """Restrictions on ``class_iri`` and on every class it inherits from."""
        restrictions = []
        for cls in [class_iri] + self.get_superclasses(class_iri):
            for node in self.store.objects(cls, RDFS.subClassOf):
                if (node, RDF.type, OWL.Restriction) in self.store:
                    restrictions.append(self._read_restriction(node))
        return restrictions

    def _read_restriction(self, node: Union[URIRef, BNode]) -> Restriction:
        on_property = self._single(node, OWL.onProperty)
        for kind in RestrictionKind:
            value = self._single(node, kind.predicate)
            if value is None:
                continue
            if kind.is_cardinality:
                value = int(value.toPython()) if isinstance(value, Literal) else value
            return Restriction(
                on_property=on_property,
                kind=kind,
                value=value,
                on_class=self._single(node, OWL.onClass),
                node=node,
            )
        raise ValueError(f"Restriction node {node} has no supported constraint")

    def _single(self, subject, predicate):
        values = self.store.objects(subject, predicate)
        return values[0] if values else None
