"""
Turtle Validation

Parses generated text as RDF Turtle with rdflib and normalizes the result into
a triple set of tagged terms (IdentifierRef / PlainLiteral / TypedLiteral /
LangLiteral).
"""

from __future__ import annotations

import logging

from rdflib import BNode, Graph, Literal, URIRef
from rdflib.namespace import XSD

from rdf_gauge.domain.value_objects import (
    IdentifierRef,
    Invalid,
    LangLiteral,
    PlainLiteral,
    Term,
    TripleSet,
    TypedLiteral,
    Valid,
    ValidationContext,
    ValidationOutcome,
)

logger = logging.getLogger(__name__)


class ValidationError(Exception):
    """Error raised by a validator that rejects generated output"""
    pass


def parse_graph(text: str, context: ValidationContext) -> Graph:
    """
    Parse Turtle text into an rdflib graph

    Relative IRIs resolve against the context URI.

    Raises:
        Exception: Whatever rdflib raises for malformed input (usually BadSyntax)
    """
    graph = Graph(bind_namespaces="core")
    for prefix, uri in context.namespaces.items():
        graph.bind(prefix, uri, override=True)
    graph.parse(data=text, format="turtle", publicID=context.uri)
    return graph


def namespace_map(graph: Graph, context: ValidationContext) -> dict[str, str]:
    """Prefixes declared in the context plus those bound while parsing"""
    namespaces = {prefix: str(uri) for prefix, uri in graph.namespaces() if prefix}
    namespaces.update(context.namespaces)
    return namespaces


def compact(iri: str, namespaces: dict[str, str]) -> str | None:
    """
    Compact an IRI to prefix:local using the longest matching namespace

    Returns:
        The qname, or None if the IRI lies outside every namespace
    """
    best: tuple[str, str] | None = None
    for prefix, uri in namespaces.items():
        if iri.startswith(uri) and len(iri) > len(uri):
            if best is None or len(uri) > len(best[1]):
                best = (prefix, uri)
    if best is None:
        return None
    prefix, uri = best
    return f"{prefix}:{iri[len(uri):]}"


def identifier(node, namespaces: dict[str, str]) -> IdentifierRef:
    if isinstance(node, BNode):
        return IdentifierRef(iri=f"_:{node}")
    iri = str(node)
    return IdentifierRef(iri=iri, qname=compact(iri, namespaces))


def normalize_term(node, namespaces: dict[str, str]) -> Term:
    """Map an rdflib node onto the tagged term variants"""
    if isinstance(node, Literal):
        value = str(node)
        if node.language:
            return LangLiteral(value=value, language=node.language)
        if node.datatype is not None and node.datatype != XSD.string:
            return TypedLiteral(value=value, datatype=identifier(node.datatype, namespaces))
        return PlainLiteral(value=value)
    if isinstance(node, (URIRef, BNode)):
        return identifier(node, namespaces)
    raise ValueError(f"Unsupported RDF node: {node!r}")


def to_triple_set(graph: Graph, namespaces: dict[str, str]) -> TripleSet:
    """Group a graph's triples by subject and predicate, in a stable order"""
    triples: TripleSet = {}
    for s, p, o in sorted(graph, key=lambda triple: tuple(node.n3() for node in triple)):
        subject = identifier(s, namespaces)
        predicate = identifier(p, namespaces)
        triples.setdefault(subject, {}).setdefault(predicate, []).append(
            normalize_term(o, namespaces)
        )
    return triples


def identifier_references(triples: TripleSet) -> set[IdentifierRef]:
    """
    Distinct namespaced identifiers used anywhere in a triple set

    Covers subjects, predicates, IRI objects and literal datatypes. Blank nodes
    and absolute IRIs outside the declared namespaces are not references.
    """
    refs: set[IdentifierRef] = set()
    for subject, predicates in triples.items():
        refs.add(subject)
        for predicate, objects in predicates.items():
            refs.add(predicate)
            for obj in objects:
                if isinstance(obj, IdentifierRef):
                    refs.add(obj)
                elif isinstance(obj, TypedLiteral):
                    refs.add(obj.datatype)
    return {ref for ref in refs if ref.qname is not None}


def validate_turtle(text: str, context: ValidationContext) -> ValidationOutcome:
    """
    Validate generated Turtle

    Args:
        text: Namespace preamble concatenated with the generated completion
        context: Expected namespace metadata

    Returns:
        Valid(triples) when the text parses, otherwise Invalid(reason) with
        the parser's message
    """
    try:
        graph = parse_graph(text, context)
    except Exception as e:
        logger.debug("Turtle parse failed: %s", e)
        return Invalid(reason=str(e))
    return Valid(triples=to_triple_set(graph, namespace_map(graph, context)))
