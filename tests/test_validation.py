"""
Tests for Turtle validation and triple set normalization
"""

from rdf_gauge.domain.constants import D3FEND_CONTEXT, D3FEND_NAMESPACES, D3FEND_URI
from rdf_gauge.domain.value_objects import (
    IdentifierRef,
    Invalid,
    LangLiteral,
    PlainLiteral,
    TypedLiteral,
    Valid,
)
from rdf_gauge.prompt_builder import render_prefixes
from rdf_gauge.validation import compact, identifier_references, parse_graph, validate_turtle

PREFIXES = render_prefixes(D3FEND_NAMESPACES)
RDF_TYPE = "http://www.w3.org/1999/02/22-rdf-syntax-ns#type"
RDFS_SUBCLASS = "http://www.w3.org/2000/01/rdf-schema#subClassOf"


class TestValidateTurtle:
    def test_valid_turtle(self):
        text = PREFIXES + 'd3f:AccountLocking rdf:type owl:Class ;\n    rdfs:label "Account Locking" .\n'
        outcome = validate_turtle(text, D3FEND_CONTEXT)

        assert isinstance(outcome, Valid)
        subject = IdentifierRef(iri=D3FEND_URI + "AccountLocking", qname="d3f:AccountLocking")
        assert list(outcome.triples) == [subject]
        predicates = outcome.triples[subject]
        assert predicates[IdentifierRef(iri=RDF_TYPE, qname="rdf:type")] == [
            IdentifierRef(iri="http://www.w3.org/2002/07/owl#Class", qname="owl:Class")
        ]

    def test_undeclared_prefix_is_invalid(self):
        text = PREFIXES + "d3f:AccountLocking mop:classDirectSubclasses d3f:Foo .\n"
        outcome = validate_turtle(text, D3FEND_CONTEXT)

        assert isinstance(outcome, Invalid)
        assert "mop" in outcome.reason

    def test_garbage_is_invalid(self):
        outcome = validate_turtle(PREFIXES + "Sure! Here is the Turtle you asked for:\n```", D3FEND_CONTEXT)
        assert isinstance(outcome, Invalid)
        assert outcome.reason

    def test_empty_completion_is_valid_and_empty(self):
        outcome = validate_turtle(PREFIXES, D3FEND_CONTEXT)
        assert isinstance(outcome, Valid)
        assert outcome.triples == {}

    def test_relative_iri_resolves_against_context(self):
        outcome = validate_turtle(PREFIXES + "<AccountLocking> a owl:Class .\n", D3FEND_CONTEXT)
        assert isinstance(outcome, Valid)
        (subject,) = outcome.triples
        assert subject.iri.startswith("http://d3fend.mitre.org/ontologies/")


class TestTermNormalization:
    def _objects(self, body: str) -> list:
        outcome = validate_turtle(PREFIXES + body, D3FEND_CONTEXT)
        assert isinstance(outcome, Valid)
        (predicates,) = outcome.triples.values()
        (objects,) = predicates.values()
        return objects

    def test_plain_literal(self):
        assert self._objects('d3f:X rdfs:label "Account Locking" .\n') == [PlainLiteral(value="Account Locking")]

    def test_xsd_string_is_plain(self):
        assert self._objects('d3f:X rdfs:label "a"^^xsd:string .\n') == [PlainLiteral(value="a")]

    def test_typed_literal(self):
        (obj,) = self._objects('d3f:X d3f:created "2020-01-01"^^xsd:date .\n')
        assert isinstance(obj, TypedLiteral)
        assert obj.value == "2020-01-01"
        assert obj.datatype.qname == "xsd:date"

    def test_integer_shorthand_is_typed(self):
        (obj,) = self._objects("d3f:X d3f:count 3 .\n")
        assert isinstance(obj, TypedLiteral)
        assert obj.datatype.qname == "xsd:integer"

    def test_lang_literal(self):
        assert self._objects('d3f:X rdfs:label "Verrouillage"@fr .\n') == [
            LangLiteral(value="Verrouillage", language="fr")
        ]

    def test_absolute_iri_outside_namespaces(self):
        (obj,) = self._objects("d3f:X rdfs:seeAlso <http://dbpedia.org/resource/Access_token> .\n")
        assert obj == IdentifierRef(iri="http://dbpedia.org/resource/Access_token", qname=None)

    def test_blank_node(self):
        outcome = validate_turtle(PREFIXES + "d3f:X rdfs:subClassOf [ a owl:Restriction ] .\n", D3FEND_CONTEXT)
        subject = IdentifierRef(iri=D3FEND_URI + "X", qname="d3f:X")
        (obj,) = outcome.triples[subject][IdentifierRef(iri=RDFS_SUBCLASS, qname="rdfs:subClassOf")]
        assert isinstance(obj, IdentifierRef)
        assert obj.is_blank
        assert obj in outcome.triples


class TestIdentifierReferences:
    def test_collects_namespaced_identifiers(self):
        text = PREFIXES + (
            "d3f:X rdf:type owl:Class ;\n"
            '    d3f:created "2020-01-01"^^xsd:date ;\n'
            "    rdfs:seeAlso <http://dbpedia.org/resource/X> ;\n"
            "    rdfs:subClassOf [ a owl:Restriction ] .\n"
        )
        outcome = validate_turtle(text, D3FEND_CONTEXT)
        refs = {ref.qname for ref in identifier_references(outcome.triples)}

        assert refs == {
            "d3f:X", "rdf:type", "owl:Class", "d3f:created", "xsd:date",
            "rdfs:seeAlso", "rdfs:subClassOf", "owl:Restriction",
        }

    def test_empty_triple_set(self):
        assert identifier_references({}) == set()


class TestCompact:
    def test_longest_namespace_wins(self):
        namespaces = {"ex": "http://example.org/", "exv": "http://example.org/vocab#"}
        assert compact("http://example.org/vocab#term", namespaces) == "exv:term"

    def test_outside_namespaces(self):
        assert compact("http://other.org/x", {"ex": "http://example.org/"}) is None

    def test_namespace_itself_is_not_compacted(self):
        assert compact("http://example.org/", {"ex": "http://example.org/"}) is None


class TestParseGraph:
    def test_counts_triples(self):
        graph = parse_graph(PREFIXES + "d3f:X a owl:Class ; rdfs:label \"x\" .\n", D3FEND_CONTEXT)
        assert len(graph) == 2
