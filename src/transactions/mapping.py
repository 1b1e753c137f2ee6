"""
Object mapping between the triple store and rdflib Resources.

A Resource is a node bound to the store's graph; statements added to or
removed from it go straight into the store and are part of the pending
changes until the next commit or rollback.
"""

import logging
import uuid
from typing import List, Optional

from rdflib import Graph, RDF, RDFS, URIRef
from rdflib.resource import Resource

from triplestore import TripleStore

logger = logging.getLogger(__name__)


class ObjectMapper:
    """Creates and looks up typed resources in a TripleStore."""

    def __init__(self, store: TripleStore, namespace: str = "urn:uuid:"):
        self.store = store
        self.namespace = namespace

    def _resource(self, iri: URIRef) -> Resource:
        return Resource(self.store.graph, iri)

    def _types(self, rdf_type: URIRef) -> List[URIRef]:
        """``rdf_type`` and all of its transitive subclasses."""
        return self.store.transitive_subjects(RDFS.subClassOf, rdf_type)

    def mint_iri(self) -> URIRef:
        return URIRef(f"{self.namespace}{uuid.uuid4()}")

    def create(self, rdf_type: URIRef, iri: Optional[URIRef] = None) -> Resource:
        """Create an instance of ``rdf_type``; a fresh IRI is minted unless one is given."""
        iri = iri if iri is not None else self.mint_iri()
        self.store.add((iri, RDF.type, rdf_type))
        logger.debug(f"Created {iri} of type {rdf_type}")
        return self._resource(iri)

    def persist(self, resource: Resource) -> Resource:
        """Copy the statements of a resource built on another graph into the store.

        Returns:
            The same node, bound to the store
        """
        if resource.graph is not self.store.graph:
            source: Graph = resource.graph
            for triple in source.triples((resource.identifier, None, None)):
                self.store.add(triple)
            logger.debug(f"Persisted {resource.identifier}")
        return self._resource(resource.identifier)

    def find_by_id(self, rdf_type: URIRef, iri: URIRef) -> Optional[Resource]:
        """Return the resource if it is an instance of ``rdf_type`` or one of its subclasses."""
        for candidate in self._types(rdf_type):
            if (iri, RDF.type, candidate) in self.store:
                return self._resource(iri)
        return None

    def find_all(self, rdf_type: URIRef) -> List[Resource]:
        """All instances of ``rdf_type`` and of its subclasses, ordered by IRI."""
        instances = set()
        for candidate in self._types(rdf_type):
            instances.update(self.store.subjects(RDF.type, candidate))
        return [self._resource(iri) for iri in sorted(instances)]
