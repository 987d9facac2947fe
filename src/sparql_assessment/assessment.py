"""
One assessment run against one endpoint.

The run owns the cache, the prober and the endpoint capability surface, and
hands the same cache to every criterion. Metrics may be evaluated by a
small worker pool; results always come back in declaration order.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable

from sparql_assessment.cache import RunCache
from sparql_assessment.config import HTTP_TIMEOUT, MAX_REDIRECTS, QUERY_TIMEOUT
from sparql_assessment.criteria.base import Criterion
from sparql_assessment.criteria.linked_data_rules import LinkedDataRules
from sparql_assessment.criteria.performance import Performance
from sparql_assessment.criteria.usefulness import Usefulness
from sparql_assessment.endpoint import Endpoint
from sparql_assessment.exclusion import ExclusionFilter
from sparql_assessment.models import Measurement
from sparql_assessment.probe import Prober
from sparql_assessment.transport import HttpService, QueryService
from sparql_assessment.vocabulary import PrefixDirectory, VocabularyRegistry

logger = logging.getLogger(__name__)

CRITERIA: dict[str, type[Criterion]] = {
    "usefulness": Usefulness,
    "performance": Performance,
    "linked_data_rules": LinkedDataRules,
}

# Criteria whose metrics time the endpoint; never evaluated in the worker pool.
SERIAL_CRITERIA = frozenset({"performance"})


class Assessment:
    """Wiring for a single run; discard it when the run ends."""

    def __init__(
        self,
        url: str,
        query_service: QueryService | None = None,
        http_service: HttpService | None = None,
        resource_uris: Iterable[str] = (),
        vocabulary_registry: VocabularyRegistry | None = None,
        prefix_directory: PrefixDirectory | None = None,
        exclusion: ExclusionFilter | None = None,
        query_timeout: float = QUERY_TIMEOUT,
        http_timeout: float = HTTP_TIMEOUT,
        max_redirects: int = MAX_REDIRECTS,
        prober: Prober | None = None,
    ) -> None:
        self.cache = RunCache()
        self.prober = prober or Prober(
            url,
            query_service=query_service,
            http_service=http_service,
            query_timeout=query_timeout,
            http_timeout=http_timeout,
            max_redirects=max_redirects,
        )
        self.endpoint = Endpoint(url, self.prober, self.cache, resource_uris=resource_uris)
        self.exclusion = exclusion or ExclusionFilter()
        self.vocabulary_registry = vocabulary_registry
        self.prefix_directory = prefix_directory
        self._criteria: dict[str, Criterion] = {}

    def criterion(self, name: str) -> Criterion:
        """The criterion instance of this run (created on first use)."""
        if name not in CRITERIA:
            raise KeyError(f"Unknown criterion {name!r}; choose from {', '.join(CRITERIA)}")
        if name not in self._criteria:
            kwargs = {}
            if name == "usefulness":
                kwargs = {
                    "vocabulary_registry": self.vocabulary_registry,
                    "prefix_directory": self.prefix_directory,
                }
            self._criteria[name] = CRITERIA[name](
                self.endpoint, self.cache, exclusion=self.exclusion, **kwargs
            )
        return self._criteria[name]

    def run(
        self,
        criteria: Iterable[str] | None = None,
        max_workers: int = 1,
    ) -> list[Measurement]:
        """Evaluate every metric of the selected criteria, in declaration order.

        With ``max_workers > 1`` the metrics of ``SERIAL_CRITERIA`` still run
        sequentially, after the pooled ones have finished.
        """
        tasks = []
        for name in criteria or CRITERIA:
            tasks.extend((name, metric) for _, metric in self.criterion(name).metrics())

        logger.info(
            "Assessing %s: %d metrics, %d worker(s)", self.endpoint.url, len(tasks), max_workers
        )
        if max_workers <= 1:
            return [metric() for _, metric in tasks]

        # timing metrics run one at a time once the pool has drained
        results: list[Measurement | None] = [None] * len(tasks)
        pooled = [i for i, (name, _) in enumerate(tasks) if name not in SERIAL_CRITERIA]
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            for i, measurement in zip(pooled, pool.map(lambda i: tasks[i][1](), pooled)):
                results[i] = measurement
        for i, (name, metric) in enumerate(tasks):
            if name in SERIAL_CRITERIA:
                results[i] = metric()
        return results
