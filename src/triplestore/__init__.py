"""
Triple Store & Query Module

This module provides the transactional RDF store the validation layer runs on,
and a declarative, validated query model for reading it.

Public Interface:
- TripleStore: In-memory rdflib store with commit/rollback
- GraphQueryFacade: Evaluates queries and returns typed rows
- select, Var, variables and the pattern/path/expression nodes of the query model
- ErrorKind, GraphError, StoreError: Tagged error kinds
"""

from .errors import ErrorKind, GraphError, StoreError
from .facade import GraphQueryFacade
from .query import (
    Count, Filter, IsIRI, LessThan, Minus, Not, NotExists, OptionalGroup,
    Path, SameTerm, SelectQuery, Str, Triple, UnionGroup, Values, Var,
    alternative, inverse, negated, one_or_more, select, sequence,
    variables, zero_or_more,
)
from .store import TripleStore

__all__ = [
    "ErrorKind", "GraphError", "StoreError",
    "GraphQueryFacade", "TripleStore",
    "Count", "Filter", "IsIRI", "LessThan", "Minus", "Not", "NotExists",
    "OptionalGroup", "Path", "SameTerm", "SelectQuery", "Str", "Triple", "UnionGroup",
    "Values", "Var", "alternative", "inverse", "negated", "one_or_more",
    "select", "sequence", "variables", "zero_or_more",
]
