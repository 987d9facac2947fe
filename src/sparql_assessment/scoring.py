"""
Scoring engine: pure reductions from Activities to metric values.

No I/O here. Anything that would divide by a count of zero eligible items
scores 0 instead.
"""

from __future__ import annotations

from typing import Iterable, Sequence
from urllib.parse import urlsplit

from sparql_assessment.models import Activity, ActivityType, MediaType, Outcome

METADATA_WEIGHT = 50
ONTOLOGY_WEIGHT = 50


def _nonempty(act: Activity) -> bool:
    return isinstance(act.result, list) and len(act.result) > 0


def metadata_score(activities: Sequence[Activity]) -> float:
    """``50 × (#graphs with classes having instances + #graphs with labels) / (N+1)``.

    N is the number of graphs the discovery probe returned (0 when there
    is no discovery Activity, i.e. the GRAPH keyword is unsupported); the
    ``+1`` is the default graph. A failed discovery probe scores 0.
    """
    graphs = next((a for a in activities if a.type is ActivityType.GRAPHS), None)
    if graphs is not None and not isinstance(graphs.result, list):
        return 0.0
    n = len(graphs.result) if graphs is not None else 0

    total = 0
    for act in activities:
        if act.type in (ActivityType.CLASSES_HAVING_INSTANCE, ActivityType.LABELS_OF_CLASSES):
            if _nonempty(act):
                total += METADATA_WEIGHT

    return total / (n + 1)


def ontology_score(candidates: int, in_registry: int, elsewhere: int) -> float:
    """``50 × (matched in registry + matched at other endpoints) / candidates``."""
    if candidates <= 0:
        return 0.0
    return ONTOLOGY_WEIGHT * (in_registry + elsewhere) / candidates


def count_of(act: Activity) -> int | None:
    """The ``?count`` of a COUNT probe, or ``None`` if it did not complete."""
    values = act.values("count")
    if not values:
        return None
    try:
        return int(values[0].toPython())
    except (TypeError, ValueError):
        return None


def total_statements(activities: Iterable[Activity]) -> int | None:
    """Sum of the counts that completed; ``None`` if none did."""
    counts = [c for c in (count_of(a) for a in activities) if c is not None]
    if not counts:
        return None
    return sum(counts)


def negotiation_supported(activities: Iterable[Activity], media: MediaType) -> bool:
    """True iff some attempt got a 200 whose Content-Type contains ``media``."""
    for act in activities:
        response = act.response
        if response is not None and response.status == 200 and media.value in response.content_type:
            return True
    return False


def execution_time_sample(base: Activity, heavy: Activity) -> float | None:
    """Heavy-probe time minus baseline time; ``None`` if either probe failed."""
    if not (base.completed and heavy.completed):
        return None
    return heavy.elapsed_time - base.elapsed_time


def mean_execution_time(samples: Iterable[float | None]) -> float:
    usable = [s for s in samples if s is not None]
    if not usable:
        return 0.0
    return sum(usable) / len(usable)


def no_counter_examples(act: Activity) -> bool:
    """Conformance holds iff the counter-example probe completed empty."""
    return isinstance(act.result, list) and len(act.result) == 0


def has_matches(act: Activity) -> bool:
    return _nonempty(act)


def provides_information(act: Activity) -> bool:
    """A dereferenced URI answered 2xx with a non-empty body."""
    return act.outcome is Outcome.SUCCESS and bool((act.result or "").strip())


def external_hosts(activities: Iterable[Activity], own_url: str) -> list[str]:
    """Distinct hosts of linked objects other than the endpoint's own host."""
    own = urlsplit(own_url).hostname
    hosts: list[str] = []
    for act in activities:
        for value in act.values("o"):
            host = urlsplit(str(value)).hostname
            if host and host != own and host not in hosts:
                hosts.append(host)
    return hosts
