"""
Linked Data rules: URIs as names, HTTP URIs, useful dereferencing, links.

The first two rules look for counter-examples and hold when none is found.
A probe that could not be completed never counts as conformance.
"""

from __future__ import annotations

from sparql_assessment import scoring
from sparql_assessment.config import VIRTUOSO_SYSTEM_GRAPH
from sparql_assessment.criteria.base import Criterion
from sparql_assessment.models import Activity, ActivityType, Measurement, Outcome
from sparql_assessment.query import select
from sparql_assessment.utils import pluralize

_NOT_SYSTEM_GRAPH = f"?g NOT IN (<{VIRTUOSO_SYSTEM_GRAPH}>)"

NON_URI_SUBJECTS_QUERY = select(
    "*",
    where=["GRAPH ?g { ?s ?p ?o }"],
    filters=[f"!isURI(?s) && !isBLANK(?s) && {_NOT_SYSTEM_GRAPH}"],
    limit=1,
)
NON_HTTP_SUBJECTS_QUERY = select(
    "*",
    where=["GRAPH ?g { ?s ?p ?o }"],
    filters=[f'!regex(STR(?s), "^https?://", "i") && !isBLANK(?s) && {_NOT_SYSTEM_GRAPH}'],
    limit=1,
)
SAME_AS_QUERY = select("*", where=["GRAPH ?g { ?s owl:sameAs ?o }"], prefixes=["owl"], limit=1)
SEE_ALSO_QUERY = select("*", where=["GRAPH ?g { ?s rdfs:seeAlso ?o }"], prefixes=["rdfs"], limit=1)


class LinkedDataRules(Criterion):
    MEASUREMENT_NAMES = {
        "subject_is_uri": "linked_data_rules.subject_is_uri",
        "subject_is_http_uri": "linked_data_rules.subject_is_http_uri",
        "uri_provides_info": "linked_data_rules.uri_provides_info",
        "contains_links": "linked_data_rules.contains_links",
    }

    # ------------------------------------------------------------------
    # Probes
    # ------------------------------------------------------------------

    def _counter_examples(self, name: str, spec, type: ActivityType, what: str) -> Activity:
        def build() -> Activity:
            act = self.prober.query(spec, type=type)
            if act.completed:
                act.comment = f"{pluralize(len(act.result), what)} found."
            else:
                act.comment = "An error occurred in searching."
            return act

        return self.cached(name, None, build)

    def non_uri_subjects(self) -> Activity:
        return self._counter_examples(
            "non_uri_subjects", NON_URI_SUBJECTS_QUERY,
            ActivityType.NON_URI_SUBJECTS, "non-URI subject",
        )

    def non_http_subjects(self) -> Activity:
        return self._counter_examples(
            "non_http_subjects", NON_HTTP_SUBJECTS_QUERY,
            ActivityType.NON_HTTP_SUBJECTS, "non-HTTP-URI subject",
        )

    def same_as(self) -> Activity:
        return self._counter_examples(
            "same_as", SAME_AS_QUERY, ActivityType.SAME_AS, "owl:sameAs statement",
        )

    def see_also(self) -> Activity:
        return self._counter_examples(
            "see_also", SEE_ALSO_QUERY, ActivityType.SEE_ALSO, "rdfs:seeAlso statement",
        )

    def dereference(self, uri: str) -> Activity:
        def build() -> Activity:
            act = self.prober.fetch(uri, type=ActivityType.DEREFERENCE)
            if act.outcome is Outcome.MALFORMED_INPUT:
                act.comment = f"Invalid URI: {uri}"
            elif act.response is None:
                act.comment = f"Failed to request {uri}."
            elif not act.response.ok:
                act.comment = f"{uri} does not return 200 HTTP response."
            elif not scoring.provides_information(act):
                act.comment = f"{uri} returns empty data."
            else:
                act.comment = f"{uri} returns any data."
            return act

        return self.cached("dereference", {"uri": uri}, build)

    # ------------------------------------------------------------------
    # Metrics
    # ------------------------------------------------------------------

    def _conformance(self, method: str, act: Activity, holds: str, fails: str) -> Measurement:
        value = scoring.no_counter_examples(act)
        if not act.completed:
            comment = "An error occurred in searching."
        else:
            comment = holds if value else fails
        return self.measurement(method, value, comment, [act])

    def subject_is_uri(self) -> Measurement:
        return self._conformance(
            "subject_is_uri", self.non_uri_subjects(),
            "URIs are used as names.", "URIs are not used as names.",
        )

    def subject_is_http_uri(self) -> Measurement:
        return self._conformance(
            "subject_is_http_uri", self.non_http_subjects(),
            "HTTP URIs are used.", "HTTP URIs are not used.",
        )

    def uri_provides_info(self) -> Measurement:
        subject = self.endpoint.subject_uri()
        activities = [subject]
        found = subject.values("s")
        if not found:
            return self.measurement(
                "uri_provides_info", False, "The endpoint does not find any URI.", activities
            )

        uri = str(found[0])
        act = self.dereference(uri)
        activities.append(act)
        value = scoring.provides_information(act)
        if act.outcome is Outcome.MALFORMED_INPUT:
            comment = "An error occurred in searching."
        elif value:
            comment = f"{uri} provides useful information."
        else:
            comment = f"{uri} does not provide useful information."
        return self.measurement("uri_provides_info", value, comment, activities)

    def contains_links(self) -> Measurement:
        same_as = self.same_as()
        activities = [same_as]
        if scoring.has_matches(same_as):
            value = True
        else:
            see_also = self.see_also()
            activities.append(see_also)
            value = scoring.has_matches(see_also)

        comment = (
            f"{self.endpoint.url} includes links to other URIs."
            if value
            else f"{self.endpoint.url} does not include links to other URIs."
        )
        return self.measurement("contains_links", value, comment, activities)
