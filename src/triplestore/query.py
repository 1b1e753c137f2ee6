"""
Declarative query model rendered to SPARQL.

Queries are built from immutable terms, property paths, graph patterns and
filter expressions. Nothing is concatenated by hand: every IRI and literal is
rendered through rdflib, blank nodes are refused, and ``SelectQuery.validate``
checks the shape of a query (projection, grouping, limit) before it is ever
submitted to the store.

Example:
    subject, value = variables("subject", "value")
    query = (select(subject, value)
             .where(Values(subject, anchors),
                    Triple(subject, FOAF.knows, value))
             .limited(1))
"""

import re
from dataclasses import dataclass, replace
from typing import Iterable, List, Optional, Sequence, Set, Tuple, Union

from rdflib import BNode, Literal, URIRef

from .errors import ErrorKind, StoreError

_VARIABLE_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _malformed(message: str, **context) -> StoreError:
    return StoreError(ErrorKind.MALFORMED_QUERY, message, **context)


# ---------------------------------------------------------------------------
# Terms
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Var:
    """A query variable."""

    name: str

    def __post_init__(self):
        if not _VARIABLE_NAME.match(self.name):
            raise _malformed(f"Invalid variable name: {self.name!r}", variable=self.name)

    def render(self) -> str:
        return f"?{self.name}"


Term = Union[Var, URIRef, Literal]


def variables(*names: str) -> Tuple[Var, ...]:
    """Create several variables at once: ``s, p, o = variables("s", "p", "o")``."""
    return tuple(Var(name) for name in names)


def render_term(term) -> str:
    """Render a variable, IRI or literal as SPARQL."""
    if isinstance(term, Var):
        return term.render()
    # BNode, URIRef and Literal are all str subclasses; blank nodes first.
    if isinstance(term, BNode):
        raise _malformed(
            f"Blank node {term!r} cannot be referenced by identity in a query",
            term=term,
        )
    if isinstance(term, (URIRef, Literal)):
        try:
            return term.n3()
        except Exception as e:
            raise _malformed(f"Cannot render term {term!r}: {e}", term=term) from e
    raise _malformed(f"Unsupported query term: {term!r}", term=term)


# ---------------------------------------------------------------------------
# Property paths
# ---------------------------------------------------------------------------

class Path:
    """Base class of property path expressions."""

    def render(self) -> str:
        raise NotImplementedError


PathLike = Union[URIRef, Path]


def _render_path(path: PathLike) -> str:
    if isinstance(path, Path):
        return path.render()
    if isinstance(path, URIRef):
        return render_term(path)
    raise _malformed(f"Property paths accept only IRIs, got {path!r}", term=path)


@dataclass(frozen=True)
class _Modified(Path):
    path: PathLike
    modifier: str

    def render(self) -> str:
        return f"({_render_path(self.path)}){self.modifier}"


@dataclass(frozen=True)
class _Inverse(Path):
    path: PathLike

    def render(self) -> str:
        return f"^({_render_path(self.path)})"


@dataclass(frozen=True)
class _Joined(Path):
    paths: Tuple[PathLike, ...]
    separator: str

    def render(self) -> str:
        return "(" + self.separator.join(_render_path(p) for p in self.paths) + ")"


@dataclass(frozen=True)
class _Negated(Path):
    iris: Tuple[URIRef, ...]

    def render(self) -> str:
        return "!(" + "|".join(render_term(iri) for iri in self.iris) + ")"


def one_or_more(path: PathLike) -> Path:
    return _Modified(path, "+")


def zero_or_more(path: PathLike) -> Path:
    return _Modified(path, "*")


def inverse(path: PathLike) -> Path:
    return _Inverse(path)


def alternative(*paths: PathLike) -> Path:
    if len(paths) < 2:
        raise _malformed("An alternative path needs at least two branches")
    return _Joined(tuple(paths), "|")


def sequence(*paths: PathLike) -> Path:
    if len(paths) < 2:
        raise _malformed("A sequence path needs at least two steps")
    return _Joined(tuple(paths), "/")


def negated(*iris: URIRef) -> Path:
    """Any single forward edge whose predicate is none of ``iris``."""
    if not iris:
        raise _malformed("A negated property set needs at least one IRI")
    return _Negated(tuple(iris))


# ---------------------------------------------------------------------------
# Filter expressions
# ---------------------------------------------------------------------------

class Expression:
    """Base class of filter expressions."""

    def render(self) -> str:
        raise NotImplementedError


Operand = Union[Term, Expression]


def _render_operand(operand: Operand) -> str:
    if isinstance(operand, Expression):
        return operand.render()
    return render_term(operand)


@dataclass(frozen=True)
class SameTerm(Expression):
    left: Operand
    right: Operand

    def render(self) -> str:
        return f"sameTerm({_render_operand(self.left)}, {_render_operand(self.right)})"


@dataclass(frozen=True)
class Not(Expression):
    operand: Expression

    def render(self) -> str:
        return f"!({self.operand.render()})"


@dataclass(frozen=True)
class IsIRI(Expression):
    operand: Operand

    def render(self) -> str:
        return f"isIRI({_render_operand(self.operand)})"


@dataclass(frozen=True)
class Str(Expression):
    operand: Operand

    def render(self) -> str:
        return f"STR({_render_operand(self.operand)})"


@dataclass(frozen=True)
class LessThan(Expression):
    left: Operand
    right: Operand

    def render(self) -> str:
        return f"({_render_operand(self.left)} < {_render_operand(self.right)})"


@dataclass(frozen=True)
class NotExists(Expression):
    patterns: Tuple["Pattern", ...]

    def __init__(self, *patterns: "Pattern"):
        object.__setattr__(self, "patterns", tuple(patterns))

    def render(self) -> str:
        return f"NOT EXISTS {_render_group(self.patterns)}"


# ---------------------------------------------------------------------------
# Graph patterns
# ---------------------------------------------------------------------------

class Pattern:
    """Base class of graph patterns."""

    def render(self) -> str:
        raise NotImplementedError

    def bound_variables(self) -> Set[str]:
        """Names of the variables this pattern can bind."""
        return set()


def _render_group(patterns: Sequence[Pattern]) -> str:
    body = " ".join(p.render() for p in patterns)
    return "{ " + body + " }"


def _bound_by(patterns: Iterable[Pattern]) -> Set[str]:
    names: Set[str] = set()
    for pattern in patterns:
        names |= pattern.bound_variables()
    return names


@dataclass(frozen=True)
class Triple(Pattern):
    subject: Term
    predicate: Union[Term, Path]
    object: Term

    def render(self) -> str:
        if isinstance(self.predicate, Path):
            predicate = self.predicate.render()
        else:
            predicate = render_term(self.predicate)
        return f"{render_term(self.subject)} {predicate} {render_term(self.object)} ."

    def bound_variables(self) -> Set[str]:
        return {t.name for t in (self.subject, self.predicate, self.object) if isinstance(t, Var)}


@dataclass(frozen=True)
class Values(Pattern):
    """Successively binds ``variable`` to each of ``values``."""

    variable: Var
    values: Tuple[Union[URIRef, Literal], ...]

    def __init__(self, variable: Var, values: Iterable[Union[URIRef, Literal]]):
        object.__setattr__(self, "variable", variable)
        object.__setattr__(self, "values", tuple(values))

    def render(self) -> str:
        rendered = " ".join(render_term(v) for v in self.values)
        return f"VALUES {self.variable.render()} {{ {rendered} }}"

    def bound_variables(self) -> Set[str]:
        return {self.variable.name}


@dataclass(frozen=True)
class Filter(Pattern):
    expression: Expression

    def render(self) -> str:
        return f"FILTER({self.expression.render()})"


@dataclass(frozen=True)
class OptionalGroup(Pattern):
    patterns: Tuple[Pattern, ...]

    def __init__(self, *patterns: Pattern):
        object.__setattr__(self, "patterns", tuple(patterns))

    def render(self) -> str:
        return f"OPTIONAL {_render_group(self.patterns)}"

    def bound_variables(self) -> Set[str]:
        return _bound_by(self.patterns)


@dataclass(frozen=True)
class UnionGroup(Pattern):
    branches: Tuple[Tuple[Pattern, ...], ...]

    def __init__(self, *branches: Sequence[Pattern]):
        if len(branches) < 2:
            raise _malformed("A union needs at least two branches")
        object.__setattr__(self, "branches", tuple(tuple(b) for b in branches))

    def render(self) -> str:
        return " UNION ".join(_render_group(b) for b in self.branches)

    def bound_variables(self) -> Set[str]:
        names: Set[str] = set()
        for branch in self.branches:
            names |= _bound_by(branch)
        return names


@dataclass(frozen=True)
class Minus(Pattern):
    patterns: Tuple[Pattern, ...]

    def __init__(self, *patterns: Pattern):
        object.__setattr__(self, "patterns", tuple(patterns))

    def render(self) -> str:
        return f"MINUS {_render_group(self.patterns)}"


# ---------------------------------------------------------------------------
# Aggregates and SELECT queries
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Count:
    """``(COUNT([DISTINCT] ?variable) AS ?alias)``."""

    variable: Var
    alias: Var
    distinct: bool = False

    def render(self) -> str:
        distinct = "DISTINCT " if self.distinct else ""
        return f"(COUNT({distinct}{self.variable.render()}) AS {self.alias.render()})"


Projection = Union[Var, Count]


@dataclass(frozen=True)
class SelectQuery:
    """An immutable SELECT query. Builder methods return modified copies."""

    projection: Tuple[Projection, ...]
    patterns: Tuple[Pattern, ...] = ()
    group_by: Tuple[Var, ...] = ()
    distinct: bool = False
    limit: Optional[int] = None

    def where(self, *patterns: Pattern) -> "SelectQuery":
        return replace(self, patterns=self.patterns + tuple(patterns))

    def grouped_by(self, *group_variables: Var) -> "SelectQuery":
        return replace(self, group_by=self.group_by + tuple(group_variables))

    def limited(self, limit: int) -> "SelectQuery":
        return replace(self, limit=limit)

    def distinct_rows(self) -> "SelectQuery":
        return replace(self, distinct=True)

    @property
    def columns(self) -> List[str]:
        """Names of the result columns, in projection order."""
        return [p.alias.name if isinstance(p, Count) else p.name for p in self.projection]

    def validate(self) -> None:
        """Check the query is well formed.

        Raises:
            StoreError: with kind MALFORMED_QUERY describing the first problem found
        """
        if not self.projection:
            raise _malformed("A SELECT query needs at least one projected column")

        columns = self.columns
        duplicates = sorted({c for c in columns if columns.count(c) > 1})
        if duplicates:
            raise _malformed(f"Duplicate result columns: {', '.join(duplicates)}", columns=duplicates)

        bound = _bound_by(self.patterns)
        plain = [p for p in self.projection if isinstance(p, Var)]
        aggregates = [p for p in self.projection if isinstance(p, Count)]

        unbound = [v.name for v in plain if v.name not in bound]
        unbound += [a.variable.name for a in aggregates if a.variable.name not in bound]
        unbound += [v.name for v in self.group_by if v.name not in bound]
        if unbound:
            raise _malformed(
                f"Variables are never bound by the query patterns: {', '.join(unbound)}",
                variables=unbound,
            )

        clashing = [a.alias.name for a in aggregates if a.alias.name in bound]
        if clashing:
            raise _malformed(
                f"Aggregate aliases collide with pattern variables: {', '.join(clashing)}",
                variables=clashing,
            )

        if aggregates or self.group_by:
            grouped = {v.name for v in self.group_by}
            ungrouped = [v.name for v in plain if v.name not in grouped]
            if ungrouped:
                raise _malformed(
                    f"Projected variables must be grouped when aggregating: {', '.join(ungrouped)}",
                    variables=ungrouped,
                )

        if self.limit is not None and self.limit < 0:
            raise _malformed(f"LIMIT must not be negative, got {self.limit}", limit=self.limit)

    def to_sparql(self) -> str:
        """Validate and render the query as SPARQL text."""
        self.validate()

        parts = ["SELECT"]
        if self.distinct:
            parts.append("DISTINCT")
        parts.extend(p.render() for p in self.projection)
        parts.append("WHERE")
        parts.append(_render_group(self.patterns))
        if self.group_by:
            parts.append("GROUP BY " + " ".join(v.render() for v in self.group_by))
        if self.limit is not None:
            parts.append(f"LIMIT {self.limit}")
        return " ".join(parts)


def select(*projection: Projection) -> SelectQuery:
    """Start a SELECT query over the given variables and aggregates."""
    return SelectQuery(projection=tuple(projection))
