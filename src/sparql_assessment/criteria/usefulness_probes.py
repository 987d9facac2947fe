"""
Cached probes behind the usefulness metrics.

Each probe is keyed by its name and options, so a class list fetched for
the metadata metric is reused by any other metric asking for the same
graph.
"""

from __future__ import annotations

from typing import Iterable

from sparql_assessment.config import CLASSES_LIMIT, LINKS_LIMIT
from sparql_assessment.criteria.base import Criterion, graph_label
from sparql_assessment.models import Activity, ActivityType, MediaType, Outcome
from sparql_assessment.query import in_graph, select, with_binds, with_values, wrapping
from sparql_assessment.scoring import count_of
from sparql_assessment.utils import pluralize

CLASSES_QUERY = select(
    "?c",
    distinct=True,
    where=[
        "{ ?c a rdfs:Class . } UNION { [] a ?c . } UNION { [] rdfs:domain ?c . } "
        "UNION { [] rdfs:range ?c . } UNION { ?c rdfs:subClassOf [] . } "
        "UNION { [] rdfs:subClassOf ?c . }"
    ],
    prefixes=["rdfs"],
    limit=CLASSES_LIMIT,
)
CLASSES_HAVING_INSTANCE_QUERY = select("?c", distinct=True, where=["[] a ?c"])
LABELS_QUERY = select("?c", "?label", distinct=True, where=["?c rdfs:label ?label"], prefixes=["rdfs"])
GRAPHS_QUERY = select("?g", distinct=True, where=["GRAPH ?g { ?s ?p ?o }"])
PROPERTIES_QUERY = select("?p", distinct=True, where=["?s ?p ?o"])
COUNT_QUERY = select("(COUNT(*) AS ?count)", where=["?s ?p ?o"])
LINKS_QUERY = select(
    "?o",
    distinct=True,
    where=["?s ?p ?o"],
    filters=["?p IN (owl:sameAs, rdfs:seeAlso) && isURI(?o)"],
    prefixes=["rdfs", "owl"],
    limit=LINKS_LIMIT,
)

PREFIX_BIND = (
    'IF(CONTAINS(STR(?p), "#"), REPLACE(STR(?p), "#[^#]*$", "#"), '
    'REPLACE(STR(?p), "/[^/]*$", "/")) AS ?prefix'
)


def _found(act: Activity, noun: str, found: str, missing: str, graph: str | None) -> str:
    if act.result:
        text = f"{pluralize(len(act.result), noun)} {found}"
    elif act.completed:
        text = missing
    else:
        text = "Failed to complete the query"
    return f"{text} on {graph_label(graph)}."


class UsefulnessProbes(Criterion):
    """Probe methods shared by the usefulness metrics."""

    def graphs(self) -> Activity:
        if not self.endpoint.graph_keyword_supported():
            return self.endpoint.graph_keyword_support()

        def build() -> Activity:
            act = self.prober.query(GRAPHS_QUERY, type=ActivityType.GRAPHS)
            if act.result:
                act.comment = f"{pluralize(len(act.result), 'graph')} found."
            elif act.completed:
                act.comment = "No graphs found."
            else:
                act.comment = "Failed to obtain the list of graphs."
            return act

        return self.cached("graphs", None, build)

    def classes(self, graph: str | None = None) -> Activity:
        def build() -> Activity:
            act = self.prober.query(in_graph(CLASSES_QUERY, graph), type=ActivityType.CLASSES)
            act.comment = _found(act, "class", "found", "No classes found", graph)
            return act

        return self.cached("classes", {"graph": graph}, build)

    def classes_having_instance(self, graph: str | None = None) -> Activity:
        def build() -> Activity:
            act = self.prober.query(
                in_graph(CLASSES_HAVING_INSTANCE_QUERY, graph),
                type=ActivityType.CLASSES_HAVING_INSTANCE,
            )
            act.comment = _found(act, "class", "having instances found", "No instances found", graph)
            return act

        return self.cached("classes_having_instance", {"graph": graph}, build)

    def labels_of_classes(self, classes: Iterable[str], graph: str | None = None) -> Activity:
        classes = tuple(str(c) for c in classes)
        if not classes:
            return Activity(
                type=ActivityType.LABELS_OF_CLASSES,
                result=[],
                comment="Classes empty.",
            ).finalize()

        def build() -> Activity:
            spec = with_values(in_graph(LABELS_QUERY, graph), "?c", classes)
            act = self.prober.query(spec, type=ActivityType.LABELS_OF_CLASSES)
            act.comment = _found(act, "label", "of classes found", "No labels found", graph)
            return act

        return self.cached("labels_of_classes", {"graph": graph, "classes": classes}, build)

    def vocabulary_prefixes(self, graph: str | None = None) -> Activity:
        def build() -> Activity:
            spec = with_binds(
                wrapping(in_graph(PROPERTIES_QUERY, graph), "?prefix", distinct=True),
                PREFIX_BIND,
            )
            act = self.prober.query(spec, type=ActivityType.VOCABULARY_PREFIXES)
            act.comment = _found(
                act, "candidate", "for vocabulary prefix found",
                "No candidates for vocabulary prefix found", graph,
            )
            return act

        return self.cached("vocabulary_prefixes", {"graph": graph}, build)

    def number_of_statements(self, graph: str | None = None) -> Activity:
        def build() -> Activity:
            act = self.prober.query(in_graph(COUNT_QUERY, graph), type=ActivityType.NUMBER_OF_STATEMENTS)
            count = count_of(act)
            if count is not None:
                act.comment = f"{pluralize(count, 'statement')} on {graph_label(graph)}."
            else:
                act.comment = "Failed to count the number of statements."
            return act

        return self.cached("number_of_statements", {"graph": graph}, build)

    def links(self, graph: str | None = None) -> Activity:
        def build() -> Activity:
            act = self.prober.query(in_graph(LINKS_QUERY, graph), type=ActivityType.LINKS)
            act.comment = _found(act, "link", "found", "No links found", graph)
            return act

        return self.cached("links", {"graph": graph}, build)

    def content_negotiation(self, uri: str, media: MediaType) -> Activity:
        def build() -> Activity:
            act = self.prober.fetch(
                uri, headers={"Accept": media.value}, type=ActivityType.CONTENT_NEGOTIATION
            )
            if act.response is not None:
                received = act.response.content_type or "no content type"
                act.comment = f"<{uri}> answered {act.response.status} with {received} for {media.value}."
            elif act.outcome is Outcome.MALFORMED_INPUT:
                act.comment = f"<{uri}> is not a valid HTTP URI."
            else:
                act.comment = f"Failed to request <{uri}> as {media.value}."
            return act

        return self.cached("content_negotiation", {"uri": uri, "media": media.value}, build)
