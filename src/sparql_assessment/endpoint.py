"""
Capability surface of the endpoint under assessment.

Everything here is computed once per run through the run cache and is
read-only afterwards: graph keyword support, resource URIs, and the
self-description documents.
"""

from __future__ import annotations

import logging
from typing import Iterable
from urllib.parse import urljoin

from sparql_assessment.cache import RunCache
from sparql_assessment.config import RDF_ACCEPT, SUBJECT_OFFSET, VIRTUOSO_SYSTEM_GRAPH, VOID_PATH
from sparql_assessment.description import ServiceDescription, VoidDescription, parse_rdf
from sparql_assessment.errors import MalformedInput
from sparql_assessment.models import Activity, ActivityType, Outcome
from sparql_assessment.probe import Prober
from sparql_assessment.query import select
from sparql_assessment.utils import pluralize

logger = logging.getLogger(__name__)

ALIVE_QUERY = select("*", where=["?s ?p ?o"], limit=1)
GRAPH_KEYWORD_QUERY = select("*", where=["GRAPH ?g { ?s ?p ?o }"], limit=1)
SUBJECT_QUERY = select(
    "?s",
    where=["GRAPH ?g { ?s ?p ?o }"],
    filters=[f"isURI(?s) && ?g NOT IN (<{VIRTUOSO_SYSTEM_GRAPH}>)"],
    limit=1,
    offset=SUBJECT_OFFSET,
)


class Endpoint:
    """The remote SPARQL endpoint as seen by the criteria."""

    def __init__(
        self,
        url: str,
        prober: Prober,
        cache: RunCache,
        resource_uris: Iterable[str] = (),
    ) -> None:
        self.url = url
        self.prober = prober
        self.cache = cache
        self._resource_uris = tuple(resource_uris)

    def _cached(self, name: str, build) -> Activity:
        return self.cache.memoize(name, None, lambda: build().finalize())

    # ------------------------------------------------------------------
    # Probes
    # ------------------------------------------------------------------

    def alive(self) -> Activity:
        def build() -> Activity:
            act = self.prober.query(ALIVE_QUERY, type=ActivityType.ALIVE)
            act.comment = "The endpoint is alive." if act.completed else "The endpoint is down."
            return act

        return self._cached("alive", build)

    def graph_keyword_support(self) -> Activity:
        def build() -> Activity:
            act = self.prober.query(GRAPH_KEYWORD_QUERY, type=ActivityType.GRAPH_KEYWORD_SUPPORT)
            act.comment = (
                "The endpoint supports GRAPH keyword."
                if act.completed
                else "The endpoint does not support GRAPH keyword."
            )
            return act

        return self._cached("graph_keyword_support", build)

    def graph_keyword_supported(self) -> bool:
        return self.graph_keyword_support().completed

    def subject_uri(self) -> Activity:
        """Pick one subject URI from the data, skipping the first few."""
        def build() -> Activity:
            act = self.prober.query(SUBJECT_QUERY, type=ActivityType.SUBJECT_URI)
            found = act.values("s")
            if found:
                act.comment = f"{found[0]} is found."
            elif act.completed:
                act.comment = "No subject URI found."
            else:
                act.comment = "Failed to search for a subject URI."
            return act

        return self._cached("subject_uri", build)

    def resource_uris(self) -> tuple[str, ...]:
        """Configured resource URIs, else one subject URI found in the data."""
        if self._resource_uris:
            return self._resource_uris
        return tuple(str(s) for s in self.subject_uri().values("s")[:1])

    def void(self) -> Activity:
        """Fetch and parse the VoID document at ``/.well-known/void``."""
        def build() -> Activity:
            act = self.prober.fetch(
                urljoin(self.url, VOID_PATH),
                headers={"Accept": RDF_ACCEPT},
                type=ActivityType.VOID,
            )
            _parse_into(act, VoidDescription, "VoID")
            return act

        return self._cached("void", build)

    def service_description(self) -> Activity:
        """Fetch and parse the service description served at the endpoint URL."""
        def build() -> Activity:
            act = self.prober.fetch(
                self.url,
                headers={"Accept": RDF_ACCEPT},
                type=ActivityType.SERVICE_DESCRIPTION,
            )
            _parse_into(act, ServiceDescription, "Service description")
            return act

        return self._cached("service_description", build)

    def self_description_document(self) -> VoidDescription | None:
        return self.void().result


def _parse_into(act: Activity, kind, label: str) -> None:
    """Replace the raw body in ``act.result`` by a parsed description."""
    if not act.completed:
        act.comment = f"{label} is not available."
        return

    try:
        graph = parse_rdf(act.result, act.response.content_type if act.response else None,
                          base=act.request.url if act.request else None)
    except MalformedInput as exc:
        act.result = None
        act.outcome = Outcome.MALFORMED_INPUT
        act.errors.append(str(exc))
        act.trace.append(f"{label} could not be parsed")
        act.comment = f"{label} could not be parsed."
        return

    act.result = kind.from_graph(graph)
    act.comment = f"{label} found ({pluralize(len(graph), 'statement')})."
    logger.debug("%s: %d statements", label, len(graph))
