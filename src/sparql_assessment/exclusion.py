"""
Exclusion filter for named graphs that a triple store creates for itself.

Rules, first match wins:
  1. the URI scheme is not http/https -> excluded
  2. the host or the path is administrative -> excluded
  3. otherwise -> included
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable
from urllib.parse import urlsplit

from sparql_assessment.config import ADMIN_HOSTS, ADMIN_PATHS


@dataclass(frozen=True)
class GraphSelection:
    """Graphs a criterion iterates over, in discovery order.

    ``None`` stands for the default graph and comes last.
    """

    included: tuple[str | None, ...]
    notes: tuple[str, ...] = ()

    @property
    def named(self) -> tuple[str, ...]:
        return tuple(g for g in self.included if g is not None)


@dataclass(frozen=True)
class ExclusionFilter:
    admin_hosts: frozenset[str] = ADMIN_HOSTS
    admin_paths: frozenset[str] = ADMIN_PATHS
    exclude_default_graph: bool = False

    def reason(self, graph: str | None) -> str | None:
        """Why ``graph`` is excluded, or ``None`` if it is included."""
        if graph is None:
            if self.exclude_default_graph:
                return "The default graph is omitted."
            return None

        try:
            uri = urlsplit(str(graph))
        except ValueError:
            return f"{graph} is omitted because the URI cannot be parsed."

        if uri.scheme not in ("http", "https"):
            return f"{graph} is omitted because the URI does not start with http:// or https://."

        path = uri.path.rstrip("/")
        if uri.hostname in self.admin_hosts or any(
            path == p or path.startswith(p + "/") for p in self.admin_paths
        ):
            return (
                f"{graph} is omitted because the URI seems to be prepared "
                f"by the triple store as default."
            )

        return None

    def excluded(self, graph: str | None) -> bool:
        return self.reason(graph) is not None

    def select(self, graphs: Iterable[str], include_default: bool = True) -> GraphSelection:
        """Filter discovered ``graphs`` and append the default graph."""
        included: list[str | None] = []
        notes: list[str] = []
        candidates: list[str | None] = list(graphs)
        if include_default:
            candidates.append(None)
        for graph in candidates:
            why = self.reason(graph)
            if why is None:
                included.append(graph)
            else:
                notes.append(why)
        return GraphSelection(included=tuple(included), notes=tuple(notes))
