"""
Default transports to the remote service.

The probe layer only depends on the two protocols below. The SPARQL
transport is built on SPARQLWrapper, the HTTP transport on a
``requests.Session``. Both report failures by raising
:class:`~sparql_assessment.errors.TransportFailure`.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Protocol
from urllib.error import HTTPError, URLError

import requests
from rdflib import BNode, Literal, URIRef
from rdflib.term import Identifier
from SPARQLWrapper import JSON, POST, GET, SPARQLWrapper
from SPARQLWrapper.SPARQLExceptions import SPARQLWrapperException

from sparql_assessment.config import USER_AGENT
from sparql_assessment.errors import TransportFailure
from sparql_assessment.models import Binding, Request, Response

logger = logging.getLogger(__name__)

SPARQL_RESULTS_JSON = "application/sparql-results+json"


@dataclass(frozen=True)
class Exchange:
    """One completed round trip.

    ``result`` is a list of binding rows for SELECT, a bool for ASK, or
    ``None`` when the body could not be understood.
    """

    request: Request
    response: Response | None
    result: list[Binding] | bool | None


class QueryService(Protocol):
    def execute(self, endpoint: str, query: str, method: str, timeout: float) -> Exchange:
        ...


class HttpService(Protocol):
    def get(self, url: str, headers: Mapping[str, str], timeout: float) -> Response:
        ...


# ---------------------------------------------------------------------------
# SPARQL results
# ---------------------------------------------------------------------------


def to_term(value: Mapping[str, str]) -> Identifier:
    """Convert one SPARQL JSON result term into an rdflib term."""
    kind = value.get("type")
    if kind == "uri":
        return URIRef(value["value"])
    if kind == "bnode":
        return BNode(value["value"])
    lang = value.get("xml:lang")
    if lang:
        return Literal(value["value"], lang=lang)
    return Literal(value["value"], datatype=value.get("datatype"))


def parse_results(payload: Any) -> list[Binding] | bool | None:
    """Extract rows (or the ASK boolean) from a SPARQL JSON results document."""
    if not isinstance(payload, dict):
        return None
    if isinstance(payload.get("boolean"), bool):
        return payload["boolean"]
    results = payload.get("results")
    if not isinstance(results, dict) or not isinstance(results.get("bindings"), list):
        return None
    try:
        return [
            {name: to_term(term) for name, term in row.items()}
            for row in results["bindings"]
        ]
    except (KeyError, TypeError, AttributeError):
        logger.debug("Malformed binding in SPARQL results")
        return None


class SPARQLWrapperQueryService:
    """Query Service backed by SPARQLWrapper with JSON results."""

    def execute(self, endpoint: str, query: str, method: str, timeout: float) -> Exchange:
        method = method.upper()
        sparql = SPARQLWrapper(endpoint, agent=USER_AGENT)
        sparql.setMethod(POST if method == "POST" else GET)
        sparql.setReturnFormat(JSON)
        sparql.setTimeout(int(timeout))
        sparql.setQuery(query)

        request = Request(
            method=method,
            url=endpoint,
            headers={"Accept": SPARQL_RESULTS_JSON, "User-Agent": USER_AGENT},
            body=query,
        )

        try:
            raw = sparql.query()
            body = raw.response.read().decode("utf-8", errors="replace")
        except HTTPError as exc:
            response = Response(
                method=method,
                url=endpoint,
                status=exc.code,
                reason=str(exc.reason),
                headers=dict(exc.headers or {}),
            )
            raise TransportFailure(f"HTTP {exc.code} {exc.reason}", request, response) from exc
        except SPARQLWrapperException as exc:
            raise TransportFailure(str(exc).strip().splitlines()[0], request) from exc
        except (URLError, OSError) as exc:
            raise TransportFailure(f"{type(exc).__name__}: {exc}", request) from exc

        info = raw.response
        response = Response(
            method=method,
            url=info.geturl() if hasattr(info, "geturl") else endpoint,
            status=getattr(info, "status", None) or info.getcode(),
            reason=getattr(info, "reason", "") or "",
            headers=dict(raw.info()),
            body=body,
        )

        try:
            payload = json.loads(body)
        except ValueError:
            logger.debug("Non-JSON body from %s", endpoint)
            payload = None

        return Exchange(request=request, response=response, result=parse_results(payload))


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------


class RequestsHttpService:
    """HTTP Resource Service backed by ``requests``; never follows redirects."""

    def __init__(self, session: requests.Session | None = None) -> None:
        self.session = session or requests.Session()
        self.session.headers.setdefault("User-Agent", USER_AGENT)

    def get(self, url: str, headers: Mapping[str, str], timeout: float) -> Response:
        try:
            resp = self.session.get(
                url, headers=dict(headers), timeout=timeout, allow_redirects=False
            )
        except requests.RequestException as exc:
            request = Request(method="GET", url=url, headers=dict(headers))
            raise TransportFailure(f"{type(exc).__name__}: {exc}", request) from exc

        return Response(
            method="GET",
            url=resp.url or url,
            status=resp.status_code,
            reason=resp.reason or "",
            headers=resp.headers,
            body=resp.text,
        )
