"""
Probe layer: one logical probe, several transport strategies.

Query probes try POST, then GET, and stop at the first strategy that yields
a well-formed result (an empty one included). HTTP probes issue GET and
follow redirects by hand up to a hop limit. Failure is an outcome recorded
on the returned Activity, never an exception.
"""

from __future__ import annotations

import builtins
import logging
import time
from typing import Callable, Iterable, Mapping
from urllib.parse import urljoin, urlsplit

from sparql_assessment.config import HTTP_TIMEOUT, MAX_REDIRECTS, QUERY_METHODS, QUERY_TIMEOUT
from sparql_assessment.errors import MalformedInput, TransportFailure
from sparql_assessment.models import Activity, ActivityType, Outcome, Request
from sparql_assessment.query import QuerySpec
from sparql_assessment.transport import (
    HttpService,
    QueryService,
    RequestsHttpService,
    SPARQLWrapperQueryService,
)
from sparql_assessment.utils import pluralize

logger = logging.getLogger(__name__)

_REDIRECT_STATUSES = {301, 302, 303, 307, 308}


def check_uri(uri: str) -> str:
    """Return ``uri`` if it is an absolute http(s) URI, else raise MalformedInput."""
    try:
        parts = urlsplit(str(uri))
    except ValueError as exc:
        raise MalformedInput(f"Invalid URI: {uri}") from exc
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise MalformedInput(f"Invalid URI: {uri}")
    return str(uri)


def _describe(result) -> str:
    if isinstance(result, bool):
        return str(result).lower()
    return pluralize(len(result), "result")


class Prober:
    """Issues probes against one endpoint.

    Parameters
    ----------
    endpoint_url:
        SPARQL endpoint the query probes are sent to.
    query_service, http_service:
        Transports; default to SPARQLWrapper and requests.
    clock:
        Monotonic clock used for ``elapsed_time``.
    """

    def __init__(
        self,
        endpoint_url: str,
        query_service: QueryService | None = None,
        http_service: HttpService | None = None,
        query_timeout: float = QUERY_TIMEOUT,
        http_timeout: float = HTTP_TIMEOUT,
        max_redirects: int = MAX_REDIRECTS,
        methods: Iterable[str] = QUERY_METHODS,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self.endpoint_url = endpoint_url
        self.query_service = query_service or SPARQLWrapperQueryService()
        self.http_service = http_service or RequestsHttpService()
        self.query_timeout = query_timeout
        self.http_timeout = http_timeout
        self.max_redirects = max_redirects
        self.methods = tuple(methods)
        self.clock = clock

    # ------------------------------------------------------------------
    # Query probes
    # ------------------------------------------------------------------

    def query(
        self,
        query: QuerySpec | str,
        type: ActivityType | None = None,
        methods: Iterable[str] | None = None,
    ) -> Activity:
        """Run ``query`` with each method in turn until one succeeds."""
        text = str(query)
        activity = Activity(type=type)

        for method in tuple(methods or self.methods):
            started = self.clock()
            try:
                exchange = self.query_service.execute(
                    self.endpoint_url, text, method, self.query_timeout
                )
            except TransportFailure as exc:
                activity.elapsed_time = self.clock() - started
                activity.request = exc.request or activity.request
                activity.response = exc.response
                activity.trace.append(f"{method}: failed ({exc})")
                activity.errors.append(f"{method}: {exc}")
                logger.debug("%s %s failed: %s", method, self.endpoint_url, exc)
                continue
            except Exception as exc:
                reason = f"{builtins.type(exc).__name__}: {exc}"
                activity.elapsed_time = self.clock() - started
                activity.request = Request(method=method, url=self.endpoint_url, body=text)
                activity.response = None
                activity.trace.append(f"{method}: failed ({reason})")
                activity.errors.append(f"{method}: {reason}")
                logger.warning("%s %s raised %s", method, self.endpoint_url, reason)
                continue

            activity.elapsed_time = self.clock() - started
            activity.request = exchange.request
            activity.response = exchange.response

            if exchange.result is None:
                activity.trace.append(f"{method}: failed (malformed response)")
                activity.errors.append(f"{method}: malformed response")
                continue

            activity.result = exchange.result
            activity.outcome = Outcome.SUCCESS
            activity.trace.append(f"{method}: {_describe(exchange.result)}")
            logger.debug("%s %s: %s", method, self.endpoint_url, _describe(exchange.result))
            return activity

        activity.outcome = Outcome.EXHAUSTED
        return activity

    # ------------------------------------------------------------------
    # HTTP probes
    # ------------------------------------------------------------------

    def fetch(
        self,
        uri: str,
        headers: Mapping[str, str] | None = None,
        type: ActivityType | None = None,
        max_redirects: int | None = None,
    ) -> Activity:
        """GET ``uri`` following redirects; success means a final 2xx response."""
        headers = dict(headers or {})
        hops = self.max_redirects if max_redirects is None else max_redirects
        activity = Activity(type=type)

        try:
            url = check_uri(uri)
        except MalformedInput as exc:
            activity.request = Request(method="GET", url=str(uri), headers=headers)
            activity.trace.append(str(exc))
            activity.errors.append(str(exc))
            activity.outcome = Outcome.MALFORMED_INPUT
            return activity

        activity.request = Request(method="GET", url=url, headers=headers)
        started = self.clock()
        for _ in range(hops + 1):
            try:
                response = self.http_service.get(url, headers, self.http_timeout)
            except TransportFailure as exc:
                activity.elapsed_time = self.clock() - started
                activity.trace.append(f"GET {url}: failed ({exc})")
                activity.errors.append(str(exc))
                activity.outcome = Outcome.EXHAUSTED
                return activity
            except Exception as exc:
                reason = f"{builtins.type(exc).__name__}: {exc}"
                activity.elapsed_time = self.clock() - started
                activity.trace.append(f"GET {url}: failed ({reason})")
                activity.errors.append(reason)
                activity.outcome = Outcome.EXHAUSTED
                logger.warning("GET %s raised %s", url, reason)
                return activity

            activity.response = response
            location = response.headers.get("Location")
            if response.status in _REDIRECT_STATUSES and location:
                target = urljoin(url, location)
                activity.trace.append(f"GET {url}: {response.status} -> {target}")
                try:
                    url = check_uri(target)
                except MalformedInput as exc:
                    activity.elapsed_time = self.clock() - started
                    activity.trace.append(str(exc))
                    activity.errors.append(str(exc))
                    activity.outcome = Outcome.MALFORMED_INPUT
                    return activity
                continue

            activity.elapsed_time = self.clock() - started
            activity.trace.append(f"GET {url}: {response.status} {response.reason}".rstrip())
            if response.ok:
                activity.result = response.body if response.body is not None else ""
                activity.outcome = Outcome.SUCCESS
            else:
                activity.errors.append(f"{url} returned {response.status} {response.reason}".rstrip())
                activity.outcome = Outcome.EXHAUSTED
            return activity

        activity.elapsed_time = self.clock() - started
        activity.trace.append(f"Too many redirects (limit {hops})")
        activity.errors.append(f"Too many redirects (limit {hops})")
        activity.outcome = Outcome.EXHAUSTED
        return activity
