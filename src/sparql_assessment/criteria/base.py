"""
Common shape of a criterion: cached probes in, Measurements out.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping

from sparql_assessment.cache import RunCache
from sparql_assessment.endpoint import Endpoint
from sparql_assessment.exclusion import ExclusionFilter, GraphSelection
from sparql_assessment.models import Activity, Measurement

logger = logging.getLogger(__name__)


def graph_label(graph: str | None) -> str:
    return f"graph <{graph}>" if graph else "default graph"


class Criterion:
    """Base class of the quality dimensions.

    ``MEASUREMENT_NAMES`` maps each metric method to its dotted name and
    fixes the order in which :meth:`metrics` yields them.
    """

    MEASUREMENT_NAMES: dict[str, str] = {}

    def __init__(
        self,
        endpoint: Endpoint,
        cache: RunCache,
        exclusion: ExclusionFilter | None = None,
    ) -> None:
        self.endpoint = endpoint
        self.cache = cache
        self.exclusion = exclusion or ExclusionFilter()

    @property
    def prober(self):
        return self.endpoint.prober

    def cached(
        self,
        name: str,
        params: Mapping[str, Any] | None,
        build: Callable[[], Activity],
    ) -> Activity:
        """Run ``build`` once per run for ``(name, params)`` and freeze its Activity."""
        return self.cache.memoize(name, params, lambda: build().finalize())

    def metrics(self) -> list[tuple[str, Callable[[], Measurement]]]:
        return [(name, getattr(self, method)) for method, name in self.MEASUREMENT_NAMES.items()]

    def measurement(
        self,
        method: str,
        value,
        comment: str,
        activities: list[Activity],
        notes: tuple[str, ...] = (),
    ) -> Measurement:
        if notes:
            comment = "\n".join([comment, *notes])
        name = self.MEASUREMENT_NAMES[method]
        logger.info("%s = %s", name, value)
        return Measurement(name=name, value=value, comment=comment, activities=activities)

    def graph_selection(self, graphs: Activity | None) -> GraphSelection:
        """Non-excluded graphs of an already finished discovery probe, then the default graph."""
        if graphs is None or not graphs.completed:
            return self.exclusion.select([])
        return self.exclusion.select(str(g) for g in graphs.values("g"))
