"""
Vocabulary collaborators used by the ontology metric.

A *registry* answers whether a namespace prefix belongs to a known
vocabulary (for example the Linked Open Vocabularies list). A *prefix
directory* tells which other endpoints use a prefix. Both are supplied by
the caller; file loaders for simple static lists are provided here.
"""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Iterable, Mapping, Protocol

from rdflib.namespace import OWL, RDF, RDFS, XSD

# Prefixes that carry no information about the dataset's own vocabulary.
JUNK_PREFIX_PATTERNS = (
    re.compile(r"^(?!https?://)"),
    re.compile(r"^https?://[^/]+/?$"),
    re.compile(r"^https?://(www\.)?openlinksw\.com/"),
    re.compile(r"^https?://(localhost|127\.0\.0\.1)([:/]|$)"),
)
JUNK_PREFIXES = frozenset(str(ns) for ns in (RDF, RDFS, OWL, XSD))


def is_junk_prefix(prefix: str) -> bool:
    if prefix in JUNK_PREFIXES:
        return True
    return any(pattern.search(prefix) for pattern in JUNK_PREFIX_PATTERNS)


class VocabularyRegistry(Protocol):
    def __contains__(self, prefix: object) -> bool:
        ...


class PrefixDirectory(Protocol):
    def endpoints_using(self, prefix: str) -> Iterable[str]:
        ...


def _normalize(prefix: str) -> str:
    return prefix.strip().rstrip("#/")


class StaticVocabularyRegistry:
    """Registry over a fixed set of namespace URIs.

    Matching ignores a trailing ``#`` or ``/`` so ``http://xmlns.com/foaf/0.1/``
    and ``http://xmlns.com/foaf/0.1`` are the same vocabulary.
    """

    def __init__(self, prefixes: Iterable[str] = ()) -> None:
        self._prefixes = {_normalize(p) for p in prefixes if p.strip()}

    def __contains__(self, prefix: object) -> bool:
        return isinstance(prefix, str) and _normalize(prefix) in self._prefixes

    def __len__(self) -> int:
        return len(self._prefixes)


class StaticPrefixDirectory:
    """Directory built from ``{endpoint_url: [prefix, ...]}``."""

    def __init__(self, usage: Mapping[str, Iterable[str]] | None = None) -> None:
        self._index: dict[str, set[str]] = {}
        for endpoint, prefixes in (usage or {}).items():
            for prefix in prefixes:
                self._index.setdefault(_normalize(prefix), set()).add(endpoint)

    def endpoints_using(self, prefix: str) -> Iterable[str]:
        return sorted(self._index.get(_normalize(prefix), ()))


def used_elsewhere(directory: PrefixDirectory, prefix: str, endpoint_url: str) -> bool:
    """True if an endpoint other than ``endpoint_url`` uses ``prefix``."""
    own = endpoint_url.rstrip("/")
    return any(url.rstrip("/") != own for url in directory.endpoints_using(prefix))


def load_vocabulary_registry(path: Path) -> StaticVocabularyRegistry:
    """Load one namespace URI per line; blank lines and ``#`` comments are skipped."""
    with open(path, encoding="utf-8") as f:
        lines = [line.strip() for line in f]
    return StaticVocabularyRegistry(line for line in lines if line and not line.startswith("#"))


def load_prefix_directory(path: Path) -> StaticPrefixDirectory:
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a JSON object of endpoint -> prefixes")
    return StaticPrefixDirectory(data)
