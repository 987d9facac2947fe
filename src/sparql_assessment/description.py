"""
Endpoint self-description documents: VoID and SPARQL service description.

Both are RDF documents parsed with rdflib. Parsing failures are reported as
:class:`~sparql_assessment.errors.MalformedInput`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from rdflib import Graph, Literal, Namespace, URIRef
from rdflib.namespace import DCTERMS, RDF, VOID

from sparql_assessment.errors import MalformedInput

SD = Namespace("http://www.w3.org/ns/sparql-service-description#")

# Content-Type (without parameters) -> rdflib parser name
_FORMATS = {
    "text/turtle": "turtle",
    "application/x-turtle": "turtle",
    "application/rdf+xml": "xml",
    "application/xml": "xml",
    "text/xml": "xml",
    "application/n-triples": "nt",
    "text/n3": "n3",
    "application/ld+json": "json-ld",
    "application/json": "json-ld",
    "application/trig": "trig",
    "application/n-quads": "nquads",
}


def rdf_format(content_type: str | None) -> str:
    """Map a Content-Type header to an rdflib format name (Turtle by default)."""
    mime = (content_type or "").split(";")[0].strip().lower()
    return _FORMATS.get(mime, "turtle")


def parse_rdf(body: str, content_type: str | None, base: str | None = None) -> Graph:
    """Parse an RDF document body into a Graph."""
    graph = Graph()
    try:
        graph.parse(data=body, format=rdf_format(content_type), publicID=base)
    except Exception as exc:
        raise MalformedInput(f"rdflib failed to parse {rdf_format(content_type)}: {exc}") from exc
    return graph


def _values(graph: Graph, predicate: URIRef) -> list[str]:
    seen: list[str] = []
    for obj in graph.objects(None, predicate):
        value = str(obj)
        if value not in seen:
            seen.append(value)
    return seen


def _declared_triples(graph: Graph) -> int | None:
    """Largest ``void:triples`` value in ``graph`` (the whole dataset)."""
    counts = []
    for obj in graph.objects(None, VOID.triples):
        if isinstance(obj, Literal):
            try:
                counts.append(int(obj.toPython()))
            except (TypeError, ValueError):
                continue
    return max(counts) if counts else None


@dataclass(frozen=True)
class VoidDescription:
    """What a VoID document declares about the dataset."""

    publishers: tuple[str, ...] = ()
    licenses: tuple[str, ...] = ()
    triples: int | None = None

    @classmethod
    def from_graph(cls, graph: Graph) -> "VoidDescription":
        return cls(
            publishers=tuple(_values(graph, DCTERMS.publisher)),
            licenses=tuple(_values(graph, DCTERMS.license)),
            triples=_declared_triples(graph),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "publishers": list(self.publishers),
            "licenses": list(self.licenses),
            "triples": self.triples,
        }


@dataclass(frozen=True)
class ServiceDescription:
    """SPARQL 1.1 service description of the endpoint."""

    supported_languages: tuple[str, ...] = ()
    features: tuple[str, ...] = ()
    triples: int | None = None

    @classmethod
    def from_graph(cls, graph: Graph) -> "ServiceDescription":
        languages: list[str] = []
        for service in graph.subjects(RDF.type, SD.Service):
            for language in graph.objects(service, SD.supportedLanguage):
                value = str(language)
                name = value.split("#", 1)[1] if "#" in value else value
                if name not in languages:
                    languages.append(name)
        return cls(
            supported_languages=tuple(languages),
            features=tuple(_values(graph, SD.feature)),
            triples=_declared_triples(graph),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "supported_languages": list(self.supported_languages),
            "features": list(self.features),
            "triples": self.triples,
        }
