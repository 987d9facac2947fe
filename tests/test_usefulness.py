from __future__ import annotations

import pytest
from conftest import ENDPOINT_URL, ok, rows
from rdflib import Literal, URIRef

from sparql_assessment.errors import TransportFailure
from sparql_assessment.models import ActivityType
from sparql_assessment.vocabulary import StaticPrefixDirectory, StaticVocabularyRegistry

G1 = "https://example.org/g1"
G2 = "https://example.org/g2"

GRAPHS = "SELECT DISTINCT ?g WHERE"
GRAPH_KEYWORD = ("SELECT * WHERE { GRAPH ?g", "} } LIMIT 1")


@pytest.fixture
def usefulness(make_assessment):
    return make_assessment().criterion("usefulness")


def test_labels_of_no_classes_skips_the_probe(usefulness, query_service) -> None:
    act = usefulness.labels_of_classes([])

    assert act.type is ActivityType.LABELS_OF_CLASSES
    assert act.result == []
    assert act.comment == "Classes empty."
    assert act.finalized
    assert query_service.calls == []


def test_metadata_divides_by_discovered_graphs_plus_default(usefulness, query_service) -> None:
    query_service.on(GRAPHS, rows("g", G1, G2))
    query_service.on(("rdfs:Class", f"<{G1}>"), rows("c", "https://example.org/A"))
    query_service.on(f"GRAPH <{G1}> {{ [] a ?c }}", rows("c", "https://example.org/A"))
    query_service.on(
        ("rdfs:label", f"<{G1}>"),
        [{"c": URIRef("https://example.org/A"), "label": Literal("A")}],
    )

    m = usefulness.metadata()

    assert m.name == "usefulness.metadata"
    assert m.value == pytest.approx(100 / 3)
    assert m.comment == "Metadata score is 33.33."
    types = [act.type for act in m.activities]
    assert types[:2] == [ActivityType.GRAPH_KEYWORD_SUPPORT, ActivityType.GRAPHS]
    # three probes for each of g1, g2 and the default graph
    assert len(m.activities) == 2 + 3 * 3


def test_metadata_is_zero_when_graph_discovery_fails(usefulness, query_service) -> None:
    query_service.on(GRAPHS, TransportFailure("HTTP 500 Internal Server Error"))
    query_service.on("WHERE { [] a ?c }", rows("c", "https://example.org/A"))

    m = usefulness.metadata()

    assert m.value == 0.0
    graphs = next(act for act in m.activities if act.type is ActivityType.GRAPHS)
    assert graphs.comment == "Failed to obtain the list of graphs."


def test_metadata_without_graph_keyword_uses_default_graph(usefulness, query_service) -> None:
    query_service.on(GRAPH_KEYWORD, TransportFailure("HTTP 400 Bad Request"))
    query_service.on("WHERE { [] a ?c }", rows("c", "https://example.org/A"))

    m = usefulness.metadata()

    assert m.value == 50.0
    assert [act.type for act in m.activities] == [
        ActivityType.GRAPH_KEYWORD_SUPPORT,
        ActivityType.CLASSES_HAVING_INSTANCE,
        ActivityType.CLASSES,
        ActivityType.LABELS_OF_CLASSES,
    ]
    assert m.activities[-1].comment == "Classes empty."
    assert query_service.calls_matching(GRAPHS) == []


def test_excluded_graphs_are_noted_in_the_comment(usefulness, query_service) -> None:
    system = "http://www.openlinksw.com/schemas/virtrdf#"
    query_service.on(GRAPHS, rows("g", G1, system))

    m = usefulness.metadata()

    assert f"{system} is omitted because" in m.comment
    assert query_service.calls_matching(f"<{system}>") == []
    graphs = next(act for act in m.activities if act.type is ActivityType.GRAPHS)
    assert len(graphs.result) == 2


def test_ontology_counts_known_vocabularies(make_assessment, query_service) -> None:
    registry = StaticVocabularyRegistry(["http://xmlns.com/foaf/0.1/"])
    usefulness = make_assessment(vocabulary_registry=registry).criterion("usefulness")
    query_service.on("?prefix", rows(
        "prefix",
        "http://xmlns.com/foaf/0.1/",
        "http://purl.org/dc/terms/",
        "http://www.w3.org/2000/01/rdf-schema#",
        "http://localhost:8890/schema/",
    ))

    m = usefulness.ontology()

    assert m.value == 25.0
    assert m.comment.startswith("2 vocabulary prefixes found: 1 in the vocabulary registry")


def test_ontology_counts_prefixes_used_by_other_endpoints(make_assessment, query_service) -> None:
    directory = StaticPrefixDirectory({
        "https://other.example/sparql": ["http://purl.org/dc/terms/"],
        ENDPOINT_URL: ["http://xmlns.com/foaf/0.1/"],
    })
    registry = StaticVocabularyRegistry(["http://xmlns.com/foaf/0.1"])
    usefulness = make_assessment(
        vocabulary_registry=registry, prefix_directory=directory
    ).criterion("usefulness")
    query_service.on("?prefix", rows("prefix", "http://xmlns.com/foaf/0.1/", "http://purl.org/dc/terms/"))

    m = usefulness.ontology()

    assert m.value == 50.0


def test_ontology_without_candidates_scores_zero(usefulness) -> None:
    m = usefulness.ontology()

    assert m.value == 0.0
    assert m.comment == "No vocabulary prefixes found."


def test_data_entry_prefers_void(usefulness, http_service, query_service) -> None:
    http_service.route("https://example.org/.well-known/void", ok(
        "https://example.org/.well-known/void",
        "@prefix void: <http://rdfs.org/ns/void#> .\n"
        "<https://example.org/void#ds> a void:Dataset ; void:triples 1234 .\n",
        content_type="text/turtle",
    ))

    m = usefulness.data_entry()

    assert m.value == 1234
    assert m.comment == "1234 statements declared in the VoID description."
    assert [act.type for act in m.activities] == [ActivityType.VOID]
    assert query_service.calls == []


def test_data_entry_sums_counts_per_graph(usefulness, query_service) -> None:
    query_service.on(GRAPHS, rows("g", G1))
    query_service.on(("COUNT(*)", f"<{G1}>"), [{"count": Literal(10)}])
    query_service.on("COUNT(*)", [{"count": Literal(5)}])

    m = usefulness.data_entry()

    assert m.value == 15
    assert m.comment == "15 statements in the dataset."
    types = [act.type for act in m.activities]
    assert types[:2] == [ActivityType.VOID, ActivityType.SERVICE_DESCRIPTION]
    assert types.count(ActivityType.NUMBER_OF_STATEMENTS) == 2


def test_data_entry_when_nothing_can_be_counted(usefulness, query_service) -> None:
    query_service.on("COUNT(*)", TransportFailure("timed out"))

    m = usefulness.data_entry()

    assert m.value == 0
    assert m.comment == "Failed to count the number of statements."


def _negotiating(url: str, headers: dict):
    if headers.get("Accept") == "text/turtle":
        return ok(url, "<urn:a> <urn:b> <urn:c> .", content_type="text/turtle; charset=utf-8")
    return ok(url, "<html><body>resource</body></html>", content_type="text/html")


def test_content_negotiation(make_assessment, http_service) -> None:
    resource = "https://example.org/resource/1"
    usefulness = make_assessment(resource_uris=[resource]).criterion("usefulness")
    http_service.route(resource, _negotiating)

    assert usefulness.html_format_supported().value is True
    assert usefulness.turtle_format_supported().value is True
    rdfxml = usefulness.rdfxml_format_supported()
    assert rdfxml.value is False
    assert rdfxml.comment == "RDF/XML is not available through content negotiation."

    m = usefulness.content_negotiation_supported()
    assert m.value is True
    assert len(m.activities) == 2
    # each representation was requested once
    assert [headers["Accept"] for _, headers in http_service.calls] == [
        "text/html", "text/turtle", "application/rdf+xml",
    ]


def test_format_support_without_resource_uri(usefulness, http_service) -> None:
    m = usefulness.html_format_supported()

    assert m.value is False
    assert m.comment == "No resource URI to negotiate content for."
    assert http_service.calls == []


def test_links_to_other_datasets_counts_hosts(usefulness, query_service) -> None:
    query_service.on("owl:sameAs, rdfs:seeAlso", rows(
        "o",
        "http://dbpedia.org/resource/X",
        "https://www.wikidata.org/entity/Q1",
        "https://example.org/resource/2",
        "http://dbpedia.org/resource/Y",
    ))

    m = usefulness.links_to_other_datasets()

    assert m.value == 2
    assert m.comment == "Links to 2 datasets found: dbpedia.org, www.wikidata.org."


def test_probes_are_shared_between_metrics(usefulness, query_service) -> None:
    query_service.on(GRAPHS, rows("g", G1))

    usefulness.metadata()
    usefulness.ontology()
    usefulness.links_to_other_datasets()
    usefulness.metadata()

    assert len(query_service.calls_matching(GRAPHS)) == 1
    assert len(query_service.calls_matching("rdfs:Class")) == 2


def test_ontology_with_four_candidates(make_assessment, query_service) -> None:
    usefulness = make_assessment(
        vocabulary_registry=StaticVocabularyRegistry(["http://xmlns.com/foaf/0.1/"]),
        prefix_directory=StaticPrefixDirectory(
            {"https://other.example/sparql": ["http://purl.org/dc/terms/"]}
        ),
    ).criterion("usefulness")
    query_service.on("?prefix", rows(
        "prefix",
        "http://xmlns.com/foaf/0.1/",
        "http://purl.org/dc/terms/",
        "https://example.org/ontology#",
        "https://example.org/vocab/",
    ))

    assert usefulness.ontology().value == 25.0


def test_metadata_with_graph_name_containing_a_space(usefulness, query_service) -> None:
    query_service.on(GRAPHS, rows("g", "https://example.org/my graph"))
    query_service.on("GRAPH <https://example.org/my%20graph> { [] a ?c }", rows("c", "https://example.org/A"))

    m = usefulness.metadata()

    assert m.value == 25.0
    assert query_service.calls_matching("<https://example.org/my%20graph>")
