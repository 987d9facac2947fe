"""
Immutable SPARQL query specifications.

A :class:`QuerySpec` is a plain value; variations (restricting to a graph,
adding VALUES, paging) return new values through :func:`dataclasses.replace`
instead of mutating a shared builder.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable

from rdflib import URIRef
from rdflib.namespace import OWL, RDF, RDFS

PREFIXES = {
    "rdf": str(RDF),
    "rdfs": str(RDFS),
    "owl": str(OWL),
}


# Characters an IRIREF may not contain; rdflib refuses to serialize them.
_UNSAFE_IRI_CHARS = '<>" {}|\\^`'


def _escape_iri(value: str) -> str:
    return "".join(
        f"%{ord(ch):02X}" if ch in _UNSAFE_IRI_CHARS or ord(ch) <= 0x20 else ch
        for ch in value
    )


def _term(value: str) -> str:
    """Render a graph name or value: variables stay, URIs become <...>.

    Characters not allowed in an IRI are percent-encoded.
    """
    if value.startswith("?") or value.startswith("<"):
        return value
    return URIRef(_escape_iri(value)).n3()


@dataclass(frozen=True)
class QuerySpec:
    """A SELECT query reduced to the parts the probes need."""

    variables: tuple[str, ...] = ("*",)
    patterns: tuple[str, ...] = ()
    distinct: bool = False
    graph: str | None = None
    subquery: "QuerySpec | None" = None
    values: tuple[str, tuple[str, ...]] | None = None
    binds: tuple[str, ...] = ()
    filters: tuple[str, ...] = ()
    prefixes: tuple[str, ...] = ()
    limit: int | None = None
    offset: int | None = None

    def _head(self) -> str:
        keyword = "SELECT DISTINCT" if self.distinct else "SELECT"
        return f"{keyword} {' '.join(self.variables)}"

    def _where(self) -> str:
        parts: list[str] = []
        if self.subquery is not None:
            parts.append(f"{{ {self.subquery._select()} }}")
        if self.patterns:
            block = " . ".join(self.patterns)
            if self.graph is not None:
                block = f"GRAPH {_term(self.graph)} {{ {block} }}"
            parts.append(block)
        if self.values is not None:
            var, terms = self.values
            parts.append(f"VALUES {var} {{ {' '.join(_term(t) for t in terms)} }}")
        parts.extend(f"BIND({expr})" for expr in self.binds)
        parts.extend(f"FILTER ({expr})" for expr in self.filters)
        return " ".join(parts)

    def _select(self) -> str:
        text = f"{self._head()} WHERE {{ {self._where()} }}"
        if self.limit is not None:
            text += f" LIMIT {self.limit}"
        if self.offset is not None:
            text += f" OFFSET {self.offset}"
        return text

    def render(self) -> str:
        """Render the full query text, PREFIX declarations first."""
        lines = [f"PREFIX {name}: <{PREFIXES[name]}>" for name in self.prefixes]
        lines.append(self._select())
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.render()


def select(
    *variables: str,
    where: Iterable[str] = (),
    distinct: bool = False,
    filters: Iterable[str] = (),
    prefixes: Iterable[str] = (),
    limit: int | None = None,
    offset: int | None = None,
) -> QuerySpec:
    """Build a SELECT specification."""
    return QuerySpec(
        variables=tuple(variables) or ("*",),
        patterns=tuple(where),
        distinct=distinct,
        filters=tuple(filters),
        prefixes=tuple(prefixes),
        limit=limit,
        offset=offset,
    )


def in_graph(spec: QuerySpec, graph: str | None) -> QuerySpec:
    """Restrict the patterns of ``spec`` to ``graph`` (``None``: default graph)."""
    if graph is None:
        return spec
    return replace(spec, graph=graph)


def with_values(spec: QuerySpec, variable: str, terms: Iterable[str]) -> QuerySpec:
    return replace(spec, values=(variable, tuple(str(t) for t in terms)))


def with_binds(spec: QuerySpec, *expressions: str) -> QuerySpec:
    return replace(spec, binds=spec.binds + expressions)


def wrapping(spec: QuerySpec, *variables: str, distinct: bool = False) -> QuerySpec:
    """A query selecting ``variables`` over ``spec`` used as a subquery."""
    return QuerySpec(
        variables=tuple(variables) or ("*",),
        distinct=distinct,
        subquery=spec,
        prefixes=spec.prefixes,
    )


def paged(spec: QuerySpec, limit: int | None = None, offset: int | None = None) -> QuerySpec:
    return replace(spec, limit=limit, offset=offset)
