"""
Unit tests for the declarative query model.

HOW TO RUN:
From the project root, run:
    pytest src/triplestore/test_query.py

Or from the src directory:
    python -m pytest triplestore/test_query.py
"""

import pytest
from rdflib import BNode, Literal, OWL, RDF, URIRef

from .errors import ErrorKind, StoreError
from .query import (
    Count, Filter, IsIRI, LessThan, Minus, Not, NotExists, OptionalGroup,
    SameTerm, Str, Triple, UnionGroup, Values, Var, alternative, inverse,
    negated, one_or_more, select, sequence, variables, zero_or_more,
)

EX = "http://example.org/"
ALICE = URIRef(EX + "alice")
BOB = URIRef(EX + "bob")
KNOWS = URIRef(EX + "knows")


def test_simple_select_rendering():
    """A VALUES-anchored triple query renders to the expected SPARQL."""
    print("Testing simple SELECT rendering...")

    subject, value = variables("subject", "value")
    query = select(subject, value).where(
        Values(subject, [ALICE, BOB]),
        Triple(subject, KNOWS, value),
    ).limited(1)

    sparql = query.to_sparql()

    assert sparql.startswith("SELECT ?subject ?value WHERE {")
    assert f"VALUES ?subject {{ <{ALICE}> <{BOB}> }}" in sparql
    assert f"?subject <{KNOWS}> ?value ." in sparql
    assert sparql.endswith("LIMIT 1")
    assert query.columns == ["subject", "value"]

    print("✓ Simple SELECT rendering working correctly")


def test_builder_returns_copies():
    """Builder methods never mutate the original query."""
    s, o = variables("s", "o")
    base = select(s).where(Triple(s, KNOWS, o))
    limited = base.limited(5)
    distinct = base.distinct_rows()

    assert base.limit is None
    assert limited.limit == 5
    assert not base.distinct
    assert distinct.to_sparql().startswith("SELECT DISTINCT ?s")


def test_path_rendering():
    """Property paths render with explicit grouping."""
    print("Testing property path rendering...")

    same_as = one_or_more(alternative(OWL.sameAs, inverse(OWL.sameAs)))
    assert same_as.render() == f"((<{OWL.sameAs}>|^(<{OWL.sameAs}>)))+"

    type_of = sequence(RDF.type, zero_or_more(URIRef(EX + "sub")))
    assert type_of.render() == f"(<{RDF.type}>/(<{EX}sub>)*)"

    assert negated(KNOWS).render() == f"!(<{KNOWS}>)"

    print("✓ Property path rendering working correctly")


def test_filter_and_group_patterns():
    """Filters, optional, union, minus and NOT EXISTS render inside the group."""
    a, b = variables("a", "b")
    query = select(a, b).where(
        Triple(a, KNOWS, b),
        Filter(Not(SameTerm(a, b))),
        Filter(IsIRI(b)),
        Filter(LessThan(Str(a), Str(b))),
        Filter(NotExists(Triple(b, KNOWS, a))),
        OptionalGroup(Triple(b, RDF.type, Var("kind"))),
        UnionGroup([Triple(a, RDF.type, OWL.Thing)], [Triple(a, RDF.type, OWL.Class)]),
        Minus(Triple(a, OWL.sameAs, b)),
    )

    sparql = query.to_sparql()

    assert "FILTER(!(sameTerm(?a, ?b)))" in sparql
    assert "FILTER(isIRI(?b))" in sparql
    assert "FILTER((STR(?a) < STR(?b)))" in sparql
    assert f"FILTER(NOT EXISTS {{ ?b <{KNOWS}> ?a . }})" in sparql
    assert "OPTIONAL {" in sparql
    assert "} UNION {" in sparql
    assert "MINUS {" in sparql


def test_literals_are_escaped():
    """Literal values are rendered through rdflib, quotes included."""
    value = Var("value")
    query = select(value).where(Values(value, [Literal('say "hi"')]))

    assert '"say \\"hi\\""' in query.to_sparql()


def test_count_aggregate_rendering():
    """COUNT aggregates render with alias and grouping."""
    subject, value, total = variables("subject", "value", "total")
    query = (select(subject, Count(value, total, distinct=True))
             .where(Triple(subject, KNOWS, value))
             .grouped_by(subject))

    sparql = query.to_sparql()

    assert "(COUNT(DISTINCT ?value) AS ?total)" in sparql
    assert sparql.endswith("GROUP BY ?subject")
    assert query.columns == ["subject", "total"]


def test_invalid_variable_name():
    """Variable names are validated on construction."""
    with pytest.raises(StoreError) as excinfo:
        Var("not a name")
    assert excinfo.value.kind == ErrorKind.MALFORMED_QUERY


def test_blank_nodes_are_rejected():
    """Blank nodes cannot be referenced by identity."""
    s = Var("s")
    query = select(s).where(Values(s, [BNode()]))

    with pytest.raises(StoreError) as excinfo:
        query.to_sparql()
    assert excinfo.value.kind == ErrorKind.MALFORMED_QUERY


def test_invalid_iri_is_rejected():
    """IRIs that cannot be serialized never reach the store."""
    s, o = variables("s", "o")
    query = select(s).where(Triple(s, URIRef(EX + "bad iri>"), o))

    with pytest.raises(StoreError) as excinfo:
        query.to_sparql()
    assert excinfo.value.kind == ErrorKind.MALFORMED_QUERY


def test_unbound_projection_is_rejected():
    """Projected variables must be bound by some pattern."""
    s, o, ghost = variables("s", "o", "ghost")
    query = select(s, ghost).where(Triple(s, KNOWS, o))

    with pytest.raises(StoreError) as excinfo:
        query.validate()
    assert "ghost" in excinfo.value.context["variables"]


def test_minus_does_not_bind():
    """Variables that only occur inside MINUS are not bound."""
    s, o = variables("s", "o")
    query = select(s, o).where(Triple(s, KNOWS, Var("x")), Minus(Triple(s, OWL.sameAs, o)))

    with pytest.raises(StoreError):
        query.validate()


def test_ungrouped_projection_is_rejected():
    """Aggregation requires every plain projected variable to be grouped."""
    s, o, n = variables("s", "o", "n")
    query = select(s, Count(o, n)).where(Triple(s, KNOWS, o))

    with pytest.raises(StoreError) as excinfo:
        query.validate()
    assert excinfo.value.context["variables"] == ["s"]


def test_alias_collision_is_rejected():
    s, o = variables("s", "o")
    query = select(s, Count(o, s)).where(Triple(s, KNOWS, o)).grouped_by(s)

    with pytest.raises(StoreError):
        query.validate()


def test_duplicate_columns_and_negative_limit():
    s, o = variables("s", "o")

    with pytest.raises(StoreError):
        select(s, s).where(Triple(s, KNOWS, o)).validate()

    with pytest.raises(StoreError):
        select(s).where(Triple(s, KNOWS, o)).limited(-1).validate()

    with pytest.raises(StoreError):
        select().validate()


def test_degenerate_paths_are_rejected():
    with pytest.raises(StoreError):
        alternative(KNOWS)
    with pytest.raises(StoreError):
        sequence(KNOWS)
    with pytest.raises(StoreError):
        negated()
    with pytest.raises(StoreError):
        UnionGroup([Triple(Var("s"), KNOWS, Var("o"))])
