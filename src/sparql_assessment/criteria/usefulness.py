"""
Usefulness: metadata, vocabularies, size, links and content negotiation.
"""

from __future__ import annotations

from sparql_assessment import scoring
from sparql_assessment.criteria.usefulness_probes import UsefulnessProbes
from sparql_assessment.exclusion import GraphSelection
from sparql_assessment.models import Activity, Measurement, MediaType
from sparql_assessment.utils import pluralize
from sparql_assessment.vocabulary import (
    PrefixDirectory,
    StaticPrefixDirectory,
    StaticVocabularyRegistry,
    VocabularyRegistry,
    is_junk_prefix,
    used_elsewhere,
)

_FORMAT_LABELS = {
    MediaType.HTML: "HTML",
    MediaType.RDFXML: "RDF/XML",
    MediaType.TURTLE: "Turtle",
}


class Usefulness(UsefulnessProbes):
    MEASUREMENT_NAMES = {
        "metadata": "usefulness.metadata",
        "ontology": "usefulness.ontology",
        "links_to_other_datasets": "usefulness.links_to_other_datasets",
        "data_entry": "usefulness.data_entry",
        "html_format_supported": "usefulness.html_format_supported",
        "rdfxml_format_supported": "usefulness.rdfxml_format_supported",
        "turtle_format_supported": "usefulness.turtle_format_supported",
        "content_negotiation_supported": "usefulness.content_negotiation_supported",
    }

    def __init__(
        self,
        *args,
        vocabulary_registry: VocabularyRegistry | None = None,
        prefix_directory: PrefixDirectory | None = None,
        **kwargs,
    ) -> None:
        super().__init__(*args, **kwargs)
        self.vocabulary_registry = vocabulary_registry or StaticVocabularyRegistry()
        self.prefix_directory = prefix_directory or StaticPrefixDirectory()

    def _graphs_to_visit(self) -> tuple[list[Activity], GraphSelection]:
        """Discovery Activities plus the graphs to iterate over."""
        activities = [self.endpoint.graph_keyword_support()]
        graphs = None
        if self.endpoint.graph_keyword_supported():
            graphs = self.graphs()
            activities.append(graphs)
        return activities, self.graph_selection(graphs)

    # ------------------------------------------------------------------
    # Metrics
    # ------------------------------------------------------------------

    def metadata(self) -> Measurement:
        activities, selection = self._graphs_to_visit()
        for graph in selection.included:
            activities.extend(self._metadata_on_graph(graph))

        score = scoring.metadata_score(activities)
        return self.measurement(
            "metadata", score, f"Metadata score is {round(score, 2)}.", activities, selection.notes
        )

    def _metadata_on_graph(self, graph: str | None) -> list[Activity]:
        classes = self.classes(graph)
        return [
            self.classes_having_instance(graph),
            classes,
            self.labels_of_classes((str(c) for c in classes.values("c")), graph),
        ]

    def ontology(self) -> Measurement:
        activities, selection = self._graphs_to_visit()
        candidates: list[str] = []
        for graph in selection.included:
            act = self.vocabulary_prefixes(graph)
            activities.append(act)
            for prefix in act.values("prefix"):
                prefix = str(prefix)
                if prefix not in candidates and not is_junk_prefix(prefix):
                    candidates.append(prefix)

        in_registry = [p for p in candidates if p in self.vocabulary_registry]
        elsewhere = [
            p for p in candidates
            if used_elsewhere(self.prefix_directory, p, self.endpoint.url)
        ]
        score = scoring.ontology_score(len(candidates), len(in_registry), len(elsewhere))

        if candidates:
            comment = (
                f"{pluralize(len(candidates), 'vocabulary prefix')} found: "
                f"{len(in_registry)} in the vocabulary registry, "
                f"{len(elsewhere)} used by other endpoints. Ontology score is {round(score, 2)}."
            )
        else:
            comment = "No vocabulary prefixes found."
        return self.measurement("ontology", score, comment, activities, selection.notes)

    def links_to_other_datasets(self) -> Measurement:
        activities, selection = self._graphs_to_visit()
        links = [self.links(graph) for graph in selection.included]
        activities.extend(links)

        hosts = scoring.external_hosts(links, self.endpoint.url)
        if hosts:
            comment = f"Links to {pluralize(len(hosts), 'dataset')} found: {', '.join(hosts)}."
        elif any(act.completed for act in links):
            comment = "No links to other datasets found."
        else:
            comment = "Failed to search for links to other datasets."
        return self.measurement(
            "links_to_other_datasets", len(hosts), comment, activities, selection.notes
        )

    def data_entry(self) -> Measurement:
        void = self.endpoint.void()
        activities = [void]
        if void.result is not None and void.result.triples is not None:
            count = void.result.triples
            return self.measurement(
                "data_entry", count,
                f"{pluralize(count, 'statement')} declared in the VoID description.", activities,
            )

        description = self.endpoint.service_description()
        activities.append(description)
        if description.result is not None and description.result.triples is not None:
            count = description.result.triples
            return self.measurement(
                "data_entry", count,
                f"{pluralize(count, 'statement')} declared in the service description.", activities,
            )

        discovery, selection = self._graphs_to_visit()
        activities.extend(discovery)
        counts = [self.number_of_statements(graph) for graph in selection.included]
        activities.extend(counts)

        total = scoring.total_statements(counts)
        if total is None:
            return self.measurement(
                "data_entry", 0, "Failed to count the number of statements.",
                activities, selection.notes,
            )
        comment = f"{pluralize(total, 'statement')} in the dataset."
        failed = sum(1 for act in counts if scoring.count_of(act) is None)
        if failed:
            comment += f" {pluralize(failed, 'graph')} could not be counted."
        return self.measurement("data_entry", total, comment, activities, selection.notes)

    def _format_supported(self, method: str, media: MediaType) -> Measurement:
        label = _FORMAT_LABELS[media]
        uris = self.endpoint.resource_uris()
        if not uris:
            activities = [self.endpoint.subject_uri()]
            return self.measurement(
                method, False, "No resource URI to negotiate content for.", activities
            )

        activities = [self.content_negotiation(uri, media) for uri in uris]
        supported = scoring.negotiation_supported(activities, media)
        comment = (
            f"{label} is available through content negotiation."
            if supported
            else f"{label} is not available through content negotiation."
        )
        return self.measurement(method, supported, comment, activities)

    def html_format_supported(self) -> Measurement:
        return self._format_supported("html_format_supported", MediaType.HTML)

    def rdfxml_format_supported(self) -> Measurement:
        return self._format_supported("rdfxml_format_supported", MediaType.RDFXML)

    def turtle_format_supported(self) -> Measurement:
        return self._format_supported("turtle_format_supported", MediaType.TURTLE)

    def content_negotiation_supported(self) -> Measurement:
        """Supported when an RDF serialization (RDF/XML or Turtle) can be negotiated."""
        rdfxml = self.rdfxml_format_supported()
        turtle = self.turtle_format_supported()
        supported = bool(rdfxml.value or turtle.value)
        comment = (
            "RDF can be obtained through content negotiation."
            if supported
            else "Neither RDF/XML nor Turtle can be obtained through content negotiation."
        )
        return self.measurement(
            "content_negotiation_supported", supported, comment,
            [*rdfxml.activities, *turtle.activities],
        )
