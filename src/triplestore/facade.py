"""
Typed query execution over the triple store.

Every query shape has its own row dataclass whose field names are the query's
result columns, so callers read ``row.subject`` instead of ``row[3]``.
"""

import logging
from dataclasses import fields, is_dataclass
from typing import List, Optional, Type, TypeVar, Union, get_args, get_origin

from rdflib import Literal

from .errors import ErrorKind, StoreError
from .query import SelectQuery
from .store import TripleStore

logger = logging.getLogger(__name__)

RowT = TypeVar("RowT")


def _is_int(field_type) -> bool:
    if field_type is int:
        return True
    return get_origin(field_type) is Union and int in get_args(field_type)


def _convert(value, field_type):
    if value is None:
        return None
    if _is_int(field_type):
        return int(value.toPython()) if isinstance(value, Literal) else int(value)
    return value


class GraphQueryFacade:
    """Evaluates declarative queries against a TripleStore and returns typed rows."""

    def __init__(self, store: TripleStore, log_queries: bool = False):
        self.store = store
        self.log_queries = log_queries

    def evaluate(self, query: SelectQuery, row_type: Type[RowT]) -> List[RowT]:
        """Evaluate ``query`` and build one ``row_type`` instance per solution.

        Args:
            query: The query to evaluate
            row_type: Dataclass whose field names are columns of the query

        Returns:
            Rows in the order produced by the store; unbound columns are None

        Raises:
            StoreError: If the query or row type is malformed or evaluation fails
        """
        if not is_dataclass(row_type):
            raise StoreError(
                ErrorKind.MALFORMED_QUERY,
                f"Row type {row_type!r} must be a dataclass",
            )

        row_fields = fields(row_type)
        columns = set(query.columns)
        missing = [f.name for f in row_fields if f.name not in columns]
        if missing:
            raise StoreError(
                ErrorKind.MALFORMED_QUERY,
                f"{row_type.__name__} expects columns the query does not project: {', '.join(missing)}",
                columns=missing,
            )

        sparql = query.to_sparql()
        if self.log_queries:
            logger.debug(f"Evaluating query for {row_type.__name__}: {sparql}")

        rows = []
        for solution in self.store.query(sparql):
            bindings = solution.asdict()
            rows.append(row_type(**{
                f.name: _convert(bindings.get(f.name), f.type) for f in row_fields
            }))
        return rows

    def first(self, query: SelectQuery, row_type: Type[RowT]) -> Optional[RowT]:
        """Return the first row of ``query`` or None if it has no solutions."""
        rows = self.evaluate(query.limited(1), row_type)
        return rows[0] if rows else None
