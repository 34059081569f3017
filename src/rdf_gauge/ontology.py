"""
Ontology Index

Read-only lookup answering whether an identifier is a known member of the
reference ontology. Built once and shared by every worker.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Protocol

from rdflib import Graph, URIRef
from rdflib.namespace import DCTERMS, OWL, RDF, RDFS, SKOS, XSD
from rdflib.util import guess_format

logger = logging.getLogger(__name__)

CORE_VOCABULARIES = (RDF, RDFS, OWL, XSD, SKOS, DCTERMS)


class ExistenceOracle(Protocol):
    def exists(self, iri: str) -> bool: ...


def core_vocabulary_terms() -> frozenset[str]:
    """IRIs of the terms declared by rdflib's core W3C vocabularies"""
    terms: set[str] = set()
    for vocabulary in CORE_VOCABULARIES:
        base = str(vocabulary._NS)
        names = list(getattr(vocabulary, "__annotations__", {}))
        names.extend(getattr(vocabulary, "_extras", []))
        terms.update(base + name for name in names if not name.startswith("_"))
    return frozenset(terms)


class OntologyIndex:
    """Immutable set of IRIs that exist in the reference ontology"""

    def __init__(self, iris: Iterable[str]):
        self._iris = frozenset(str(iri) for iri in iris)

    def exists(self, iri: str) -> bool:
        return iri in self._iris

    def __contains__(self, iri: object) -> bool:
        return str(iri) in self._iris

    def __len__(self) -> int:
        return len(self._iris)

    @classmethod
    def from_graph(cls, graph: Graph, include_core_vocabularies: bool = True) -> "OntologyIndex":
        """
        Index every IRI described by the graph

        An IRI is known when it is the subject of at least one triple.
        """
        iris = {str(s) for s in graph.subjects(unique=True) if isinstance(s, URIRef)}
        if include_core_vocabularies:
            iris |= core_vocabulary_terms()
        return cls(iris)

    @classmethod
    def from_files(
        cls,
        paths: Iterable[str | Path],
        include_core_vocabularies: bool = True,
    ) -> "OntologyIndex":
        """
        Load ontology files (format guessed from the extension) into one index

        Raises:
            FileNotFoundError: If a file does not exist
        """
        graph = load_graph(paths)
        index = cls.from_graph(graph, include_core_vocabularies=include_core_vocabularies)
        logger.info("Indexed %d known identifiers", len(index))
        return index


def load_graph(paths: Iterable[str | Path]) -> Graph:
    """Parse one or more RDF files into a single graph"""
    graph = Graph()
    for path in paths:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Ontology file does not exist: {path}")
        graph.parse(path.as_posix(), format=guess_format(path.name) or "turtle")
    return graph
