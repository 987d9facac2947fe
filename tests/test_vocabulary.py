from __future__ import annotations

import json

import pytest

from sparql_assessment.vocabulary import (
    StaticPrefixDirectory,
    StaticVocabularyRegistry,
    is_junk_prefix,
    load_prefix_directory,
    load_vocabulary_registry,
    used_elsewhere,
)


@pytest.mark.parametrize(
    "prefix",
    [
        "http://www.w3.org/1999/02/22-rdf-syntax-ns#",
        "http://www.w3.org/2002/07/owl#",
        "urn:example:",
        "http://example.org/",
        "http://www.openlinksw.com/schemas/virtrdf#",
        "http://localhost:8890/schema/",
    ],
)
def test_junk_prefixes(prefix: str) -> None:
    assert is_junk_prefix(prefix)


def test_vocabulary_prefix_is_not_junk() -> None:
    assert not is_junk_prefix("http://xmlns.com/foaf/0.1/")
    assert not is_junk_prefix("http://purl.org/dc/terms/")


def test_registry_ignores_trailing_separator() -> None:
    registry = StaticVocabularyRegistry(["http://xmlns.com/foaf/0.1/", "  "])

    assert "http://xmlns.com/foaf/0.1" in registry
    assert "http://xmlns.com/foaf/0.1#" in registry
    assert "http://purl.org/dc/terms/" not in registry
    assert len(registry) == 1


def test_used_elsewhere_ignores_own_endpoint() -> None:
    directory = StaticPrefixDirectory({
        "https://example.org/sparql/": ["http://xmlns.com/foaf/0.1/"],
        "https://other.example/sparql": ["http://purl.org/dc/terms/"],
    })

    assert not used_elsewhere(directory, "http://xmlns.com/foaf/0.1/", "https://example.org/sparql")
    assert used_elsewhere(directory, "http://purl.org/dc/terms", "https://example.org/sparql")


def test_loaders(tmp_path) -> None:
    vocabularies = tmp_path / "vocabularies.txt"
    vocabularies.write_text("# LOV extract\nhttp://xmlns.com/foaf/0.1/\n\nhttp://schema.org/\n")
    directory = tmp_path / "prefixes.json"
    directory.write_text(json.dumps({"https://other.example/sparql": ["http://schema.org/"]}))

    registry = load_vocabulary_registry(vocabularies)
    prefixes = load_prefix_directory(directory)

    assert len(registry) == 2
    assert "http://schema.org/" in registry
    assert list(prefixes.endpoints_using("http://schema.org/")) == ["https://other.example/sparql"]


def test_prefix_directory_must_be_an_object(tmp_path) -> None:
    path = tmp_path / "prefixes.json"
    path.write_text("[]")

    with pytest.raises(ValueError):
        load_prefix_directory(path)
