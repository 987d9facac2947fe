"""Fake transports shared by the test suite."""

from __future__ import annotations

from typing import Callable, Iterable

import pytest
from rdflib import Literal, URIRef

from sparql_assessment.assessment import Assessment
from sparql_assessment.errors import TransportFailure
from sparql_assessment.models import Request, Response
from sparql_assessment.probe import Prober
from sparql_assessment.transport import Exchange

ENDPOINT_URL = "https://example.org/sparql"

MALFORMED = object()


def rows(variable: str, *values) -> list[dict]:
    """Binding rows for one variable; strings become URIs."""
    return [
        {variable: v if isinstance(v, (URIRef, Literal)) else URIRef(v)}
        for v in values
    ]


class FakeQueryService:
    """Answers queries from rules matched on substrings of the query text.

    The first rule whose needles all occur in the query (and whose method
    matches, when given) wins. Unmatched queries return no rows.
    """

    def __init__(self) -> None:
        self.rules: list[tuple[tuple[str, ...], str | None, object]] = []
        self.calls: list[tuple[str, str]] = []

    def on(self, needles: str | Iterable[str], answer, method: str | None = None):
        if isinstance(needles, str):
            needles = (needles,)
        self.rules.append((tuple(needles), method, answer))
        return self

    def calls_matching(self, needle: str) -> list[tuple[str, str]]:
        return [call for call in self.calls if needle in call[0]]

    def execute(self, endpoint: str, query: str, method: str, timeout: float) -> Exchange:
        self.calls.append((query, method))
        request = Request(method=method, url=endpoint, body=query)
        answer: object = []
        for needles, rule_method, rule_answer in self.rules:
            if all(n in query for n in needles) and rule_method in (None, method):
                answer = rule_answer
                break

        if isinstance(answer, TransportFailure):
            raise TransportFailure(str(answer), request)
        if isinstance(answer, Exception):
            raise answer
        response = Response(
            method=method,
            url=endpoint,
            status=200,
            reason="OK",
            headers={"Content-Type": "application/sparql-results+json"},
            body="{}",
        )
        if answer is MALFORMED:
            return Exchange(request=request, response=response, result=None)
        return Exchange(request=request, response=response, result=answer)


class FakeHttpService:
    """Serves fixed responses per URL; unknown URLs answer 404."""

    def __init__(self) -> None:
        self.routes: dict[str, Callable[[str, dict], Response] | Response | Exception] = {}
        self.calls: list[tuple[str, dict]] = []

    def route(self, url: str, answer) -> "FakeHttpService":
        self.routes[url] = answer
        return self

    def get(self, url: str, headers, timeout: float) -> Response:
        self.calls.append((url, dict(headers)))
        answer = self.routes.get(url)
        if answer is None:
            return Response(method="GET", url=url, status=404, reason="Not Found")
        if isinstance(answer, Exception):
            raise answer
        if callable(answer):
            return answer(url, dict(headers))
        return answer


def ok(url: str, body: str, content_type: str = "text/html", status: int = 200) -> Response:
    return Response(
        method="GET", url=url, status=status, reason="OK",
        headers={"Content-Type": content_type}, body=body,
    )


def redirect(url: str, location: str, status: int = 302) -> Response:
    return Response(
        method="GET", url=url, status=status, reason="Found", headers={"Location": location}
    )


@pytest.fixture
def query_service() -> FakeQueryService:
    return FakeQueryService()


@pytest.fixture
def http_service() -> FakeHttpService:
    return FakeHttpService()


@pytest.fixture
def prober(query_service, http_service) -> Prober:
    return Prober(ENDPOINT_URL, query_service=query_service, http_service=http_service)


@pytest.fixture
def make_assessment(query_service, http_service):
    def build(**kwargs) -> Assessment:
        return Assessment(
            ENDPOINT_URL, query_service=query_service, http_service=http_service, **kwargs
        )

    return build
