from __future__ import annotations

import json

import pytest
from rdflib import URIRef

from sparql_assessment.errors import FrozenActivityError
from sparql_assessment.models import Activity, ActivityType, Measurement, Outcome, Request, Response


def test_finalized_activity_rejects_changes() -> None:
    act = Activity(type=ActivityType.GRAPHS, result=[], comment="No graphs found.")
    act.trace.append("POST: 0 results")
    act.finalize()

    with pytest.raises(FrozenActivityError):
        act.comment = "changed"
    with pytest.raises(AttributeError):
        act.result = None
    assert act.trace == ("POST: 0 results",)
    assert act.finalized


def test_absent_result_differs_from_empty_result() -> None:
    assert not Activity(result=None).completed
    assert Activity(result=[]).completed


def test_values_extracts_one_variable() -> None:
    act = Activity(result=[{"g": URIRef("https://example.org/g1")}, {"x": URIRef("urn:x")}])

    assert act.values("g") == [URIRef("https://example.org/g1")]
    assert Activity(result=None).values("g") == []


def test_headers_are_case_insensitive() -> None:
    response = Response(method="get", url="https://example.org/", status=200,
                        headers={"content-type": "text/turtle"})

    assert response.method == "GET"
    assert response.headers.get("Content-Type") == "text/turtle"
    assert response.headers.get("CONTENT-TYPE") == "text/turtle"
    assert response.content_type == "text/turtle"
    assert Request(method="post", url="https://example.org/").headers.get("Accept") is None


def test_activity_to_dict_is_json_ready() -> None:
    act = Activity(
        type=ActivityType.GRAPHS,
        request=Request(method="POST", url="https://example.org/sparql", body="SELECT"),
        result=[{"g": URIRef("https://example.org/g1")}],
        outcome=Outcome.SUCCESS,
    ).finalize()

    data = json.loads(json.dumps(act.to_dict()))

    assert data["type"] == "graphs"
    assert data["outcome"] == "success"
    assert data["result"] == [{"g": "https://example.org/g1"}]
    assert data["request"]["method"] == "POST"


def test_boolean_metric_rejects_numbers() -> None:
    with pytest.raises(TypeError):
        Measurement(name="linked_data_rules.subject_is_uri", value=1)


def test_numeric_metric_rejects_booleans() -> None:
    with pytest.raises(TypeError):
        Measurement(name="usefulness.metadata", value=True)


def test_numeric_metric_value_is_coerced_to_its_type() -> None:
    m = Measurement(name="usefulness.metadata", value=0, activities=[Activity()])

    assert m.value == 0.0 and isinstance(m.value, float)
    assert isinstance(m.activities, tuple)
    with pytest.raises(AttributeError):
        m.value = 1.0


def test_activity_types_are_closed() -> None:
    assert {t.value for t in ActivityType} == {
        "alive", "graph_keyword_support", "graphs", "classes", "classes_having_instance",
        "labels_of_classes", "vocabulary_prefixes", "number_of_statements", "links",
        "content_negotiation", "void", "service_description", "base_query", "heavy_query",
        "non_uri_subjects", "non_http_subjects", "subject_uri", "dereference", "same_as",
        "see_also",
    }
