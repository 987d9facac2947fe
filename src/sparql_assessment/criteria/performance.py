"""
Performance: how long the endpoint takes for a moderately heavy query.
"""

from __future__ import annotations

from sparql_assessment import scoring
from sparql_assessment.config import HEAVY_QUERY_LIMIT, HEAVY_QUERY_OFFSETS
from sparql_assessment.criteria.base import Criterion
from sparql_assessment.models import Activity, ActivityType, Measurement
from sparql_assessment.query import paged, select
from sparql_assessment.utils import pluralize

BASE_QUERY = select("?s", where=["?s ?p ?o"], limit=1)
HEAVY_QUERY = select("?c", distinct=True, where=["[] a ?c"])


class Performance(Criterion):
    MEASUREMENT_NAMES = {
        "execution_time": "performance.execution_time",
    }

    # Timing probes are never cached: every sample must hit the endpoint.

    def base_query(self) -> Activity:
        act = self.prober.query(BASE_QUERY, type=ActivityType.BASE_QUERY)
        act.comment = f"Base query took {act.elapsed_time:.3f}s."
        return act.finalize()

    def heavy_query(self, offset: int = 0) -> Activity:
        act = self.prober.query(
            paged(HEAVY_QUERY, limit=HEAVY_QUERY_LIMIT, offset=offset),
            type=ActivityType.HEAVY_QUERY,
        )
        act.comment = f"Distinct classes (offset {offset}) took {act.elapsed_time:.3f}s."
        return act.finalize()

    def execution_time(self) -> Measurement:
        activities: list[Activity] = []
        samples: list[float | None] = []
        for offset in HEAVY_QUERY_OFFSETS:
            base = self.base_query()
            heavy = self.heavy_query(offset)
            activities.extend([base, heavy])
            samples.append(scoring.execution_time_sample(base, heavy))

        value = scoring.mean_execution_time(samples)
        usable = sum(1 for s in samples if s is not None)
        if not usable:
            comment = "Failed to measure the execution time."
        else:
            comment = (
                f"It takes {pluralize(round(value, 3), 'second')} (average) "
                f"to obtain distinct classes."
            )
            if usable < len(samples):
                comment += f" {pluralize(len(samples) - usable, 'sample')} failed."
        return self.measurement("execution_time", value, comment, activities)
