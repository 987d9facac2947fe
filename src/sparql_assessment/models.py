"""
Data classes for the assessment engine: the Activity audit record and the
Measurement verdict.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

from rdflib.term import Identifier
from requests.structures import CaseInsensitiveDict

from sparql_assessment.errors import FrozenActivityError

Binding = dict[str, Identifier]


class ActivityType(str, Enum):
    """What a probe was about. Exactly one per Activity."""

    ALIVE = "alive"
    GRAPH_KEYWORD_SUPPORT = "graph_keyword_support"
    GRAPHS = "graphs"
    CLASSES = "classes"
    CLASSES_HAVING_INSTANCE = "classes_having_instance"
    LABELS_OF_CLASSES = "labels_of_classes"
    VOCABULARY_PREFIXES = "vocabulary_prefixes"
    NUMBER_OF_STATEMENTS = "number_of_statements"
    LINKS = "links"
    CONTENT_NEGOTIATION = "content_negotiation"
    VOID = "void"
    SERVICE_DESCRIPTION = "service_description"
    BASE_QUERY = "base_query"
    HEAVY_QUERY = "heavy_query"
    NON_URI_SUBJECTS = "non_uri_subjects"
    NON_HTTP_SUBJECTS = "non_http_subjects"
    SUBJECT_URI = "subject_uri"
    DEREFERENCE = "dereference"
    SAME_AS = "same_as"
    SEE_ALSO = "see_also"


class Outcome(str, Enum):
    """How a probe ended."""

    SUCCESS = "success"
    EXHAUSTED = "exhausted"
    MALFORMED_INPUT = "malformed_input"
    SKIPPED = "skipped"


class MediaType(str, Enum):
    """Representations requested through content negotiation."""

    HTML = "text/html"
    RDFXML = "application/rdf+xml"
    TURTLE = "text/turtle"


def _headers(values: Mapping[str, str] | None) -> CaseInsensitiveDict:
    return CaseInsensitiveDict(values or {})


@dataclass(frozen=True)
class Request:
    """HTTP request as sent by a transport."""

    method: str
    url: str
    headers: CaseInsensitiveDict = field(default_factory=CaseInsensitiveDict)
    body: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "method", self.method.upper())
        object.__setattr__(self, "headers", _headers(self.headers))

    def to_dict(self) -> dict[str, Any]:
        return {
            "method": self.method,
            "url": self.url,
            "headers": dict(self.headers),
            "body": self.body,
        }


@dataclass(frozen=True)
class Response:
    """HTTP response as received by a transport."""

    method: str
    url: str
    status: int
    reason: str = ""
    headers: CaseInsensitiveDict = field(default_factory=CaseInsensitiveDict)
    body: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "method", self.method.upper())
        object.__setattr__(self, "headers", _headers(self.headers))

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def content_type(self) -> str:
        return self.headers.get("Content-Type") or ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "method": self.method,
            "url": self.url,
            "status": self.status,
            "reason": self.reason,
            "headers": dict(self.headers),
            "body": self.body,
        }


@dataclass(eq=False)
class Activity:
    """Audit record of one probe execution.

    Populated while the probe and its fallbacks run, then frozen by
    :meth:`finalize`. ``result is None`` means the probe could not be
    completed; an empty list is a completed probe with zero matches.
    """

    type: ActivityType | None = None
    request: Request | None = None
    response: Response | None = None
    result: Any = None
    elapsed_time: float = 0.0
    trace: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    comment: str = ""
    outcome: Outcome = Outcome.SKIPPED
    _frozen: bool = field(default=False, init=False, repr=False)

    def __setattr__(self, name: str, value: Any) -> None:
        if getattr(self, "_frozen", False):
            raise FrozenActivityError(
                f"Activity {self.type} is finalized; cannot set {name!r}"
            )
        object.__setattr__(self, name, value)

    def finalize(self) -> "Activity":
        """Freeze the record and return it."""
        if not self._frozen:
            for name in ("trace", "warnings", "errors"):
                object.__setattr__(self, name, tuple(getattr(self, name)))
            object.__setattr__(self, "_frozen", True)
        return self

    @property
    def finalized(self) -> bool:
        return self._frozen

    @property
    def completed(self) -> bool:
        return self.result is not None

    def values(self, variable: str) -> list[Identifier]:
        """Values bound to ``variable`` across the result rows."""
        if not isinstance(self.result, list):
            return []
        return [row[variable] for row in self.result if variable in row]

    def to_dict(self) -> dict[str, Any]:
        result = self.result
        if isinstance(result, list):
            result = [{k: str(v) for k, v in row.items()} for row in result]
        elif hasattr(result, "to_dict"):
            result = result.to_dict()
        return {
            "type": self.type.value if self.type else None,
            "outcome": self.outcome.value,
            "request": self.request.to_dict() if self.request else None,
            "response": self.response.to_dict() if self.response else None,
            "result": result,
            "elapsed_time": self.elapsed_time,
            "trace": list(self.trace),
            "warnings": list(self.warnings),
            "errors": list(self.errors),
            "comment": self.comment,
        }


# Value type of every metric; booleans never carry numbers and vice versa.
METRIC_TYPES: dict[str, type] = {
    "usefulness.metadata": float,
    "usefulness.ontology": float,
    "usefulness.links_to_other_datasets": int,
    "usefulness.data_entry": int,
    "usefulness.html_format_supported": bool,
    "usefulness.rdfxml_format_supported": bool,
    "usefulness.turtle_format_supported": bool,
    "usefulness.content_negotiation_supported": bool,
    "performance.execution_time": float,
    "linked_data_rules.subject_is_uri": bool,
    "linked_data_rules.subject_is_http_uri": bool,
    "linked_data_rules.uri_provides_info": bool,
    "linked_data_rules.contains_links": bool,
}


@dataclass(frozen=True)
class Measurement:
    """Scored, user-facing verdict for one quality question."""

    name: str
    value: bool | int | float
    comment: str = ""
    activities: tuple[Activity, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "activities", tuple(self.activities))
        kind = METRIC_TYPES.get(self.name)
        if kind is bool:
            if not isinstance(self.value, bool):
                raise TypeError(f"{self.name} expects a boolean, got {self.value!r}")
        elif kind is not None:
            if isinstance(self.value, bool) or not isinstance(self.value, (int, float)):
                raise TypeError(f"{self.name} expects a number, got {self.value!r}")
            object.__setattr__(self, "value", kind(self.value))

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "value": self.value,
            "comment": self.comment,
            "activities": [act.to_dict() for act in self.activities],
        }
