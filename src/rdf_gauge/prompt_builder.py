"""
Prompt Builder

Builds the conversations sent to the generation backend.

Conversation layout:
- system: Turtle generator instructions
- user: @prefix declarations (the namespace preamble)
- user/assistant pairs: few-shot examples of the selected suite
- user: the qname of the entity to describe
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from rdflib import BNode, Graph, URIRef

from rdf_gauge.domain.constants import D3FEND_NAMESPACES
from rdf_gauge.domain.value_objects import Conversation, Message
from rdf_gauge.entity_loader import expand_qname
from rdf_gauge.validation import compact

SYSTEM_MESSAGE = Message(
    role="system",
    content=(
        "You are an RDF Turtle generator and creative wizard of the metaobject protocol on the "
        "Semantic Web. Your task is to materialize RDF Turtle for a single resource at a time, "
        "based on the prefixes provided by the user. Employ these prefixes to craft valid RDF "
        "Turtle descriptions of the requested resources for the user, weaving in relevant "
        "relationships, properties, and its semantics using OWL, the Web Ontology Language. "
        "Ensure that when your response is concatenated with the provided prefixes, it forms "
        "syntactically correct RDF Turtle that can be successfully parsed. While your creativity "
        "is valued, ensure you do not include predicates you do not fully understand in your "
        "responses, or repeat prefixes, or stray from RDF Turtle. No markdown or explanatory "
        "text should be included in your responses."
    ),
)

CORRECTION_TEMPLATE = (
    "Your response was not valid RDF Turtle. Please try again. "
    "The error message received was: {reason}"
)

_PREFIX_DECLARATION_RE = re.compile(r"^\s*(?:@prefix|PREFIX)\s+([^\s:]*):\s*<([^>]*)>\s*\.?\s*$")

_ACCESS_TOKEN_HEAD = """d3f:AccessToken rdf:type d3f:D3FENDThing, d3f:NetworkResource, d3f:DigitalArtifact, d3f:DigitalObject, d3f:Resource,
                         d3f:Artifact, owl:NamedIndividual, d3f:RemoteResource, owl:Class;
                skos:altLabel "Ticket", "Token";
                rdfs:subClassOf d3f:Credential;
                rdfs:seeAlso <http://dbpedia.org/resource/Access_token>;
                d3f:used-by d3f:T1550.001;
                d3f:may-be-created-by d3f:CopyToken, d3f:T1134.002, d3f:T1134.003, d3f:T1134.001;
"""

# Uses mop: without declaring it, so it teaches the model to emit unparsable output
_ACCESS_TOKEN_MOP = """                mop:classPrecedenceList (d3f:AccessToken d3f:Credential d3f:NetworkResource d3f:CapabilityFeature
                                         d3f:DigitalArtifact d3f:Resource d3f:DigitalObject d3f:OffensiveTechnique
                                         d3f:D3FENDCatalogThing d3f:Artifact d3f:Technique d3f:RemoteResource
                                         d3f:D3FENDThing d3f:ATTACKThing d3f:DefensiveTechnique
                                         d3f:InformationContentEntity owl:Class rdfs:Class);
                mop:classDirectSubclasses d3f:TicketGrantingTicket, d3f:KerberosTicket;
"""

_ACCESS_TOKEN_TAIL = """                d3f:contained-by d3f:SecurityToken;
                rdfs:label "Access Token";
                d3f:associated-with d3f:SecurityToken, d3f:CopyToken, d3f:T1134.002, d3f:T1550.001, d3f:T1528,
                                    d3f:T1134.003, d3f:T1134.001;
                d3f:may-be-contained-by d3f:SecurityToken;
                d3f:accessed-by d3f:T1528;
                d3f:definition "In computer systems, an access token contains the security credentials for a login session and identifies the user, the user's groups, the user's privileges, and, in some cases, a particular application. Typically one may be asked to enter the access token (e.g. 40 random characters) rather than the usual password (it therefore should be kept secret just like a password).";
                d3f:may-be-accessed-by d3f:T1528;
                d3f:created-by d3f:CopyToken, d3f:T1134.002, d3f:T1134.003, d3f:T1134.001.

"""


@dataclass(frozen=True)
class EvalSuite:
    """A named few-shot configuration evaluated across the entity list"""
    label: str
    description: str
    examples: tuple[Message, ...] = ()


SUITES: dict[str, EvalSuite] = {
    "zero-shot": EvalSuite(
        label="zero-shot",
        description="No examples",
    ),
    "one-shot-mistake": EvalSuite(
        label="one-shot-mistake",
        description="One example using an undeclared mop: prefix",
        examples=(
            Message(role="user", content="d3f:AccessToken"),
            Message(role="assistant", content=_ACCESS_TOKEN_HEAD + _ACCESS_TOKEN_MOP + _ACCESS_TOKEN_TAIL),
        ),
    ),
    "one-shot": EvalSuite(
        label="one-shot",
        description="One example",
        examples=(
            Message(role="user", content="d3f:AccessToken"),
            Message(role="assistant", content=_ACCESS_TOKEN_HEAD + _ACCESS_TOKEN_TAIL),
        ),
    ),
}


def get_suite(label: str) -> EvalSuite:
    if label not in SUITES:
        raise ValueError(f"Unknown suite: {label} (available: {list(SUITES)})")
    return SUITES[label]


def render_prefixes(namespaces: dict[str, str]) -> str:
    """Render Turtle @prefix declarations, one per line, sorted by prefix"""
    return "".join(f"@prefix {prefix}: <{uri}> .\n" for prefix, uri in sorted(namespaces.items()))


def prefixes_message(namespaces: dict[str, str]) -> Message:
    return Message(role="user", content=render_prefixes(namespaces))


def correction_message(reason: str) -> Message:
    """User message telling the backend its previous output did not parse"""
    return Message(role="user", content=CORRECTION_TEMPLATE.format(reason=reason))


def build_conversation(
    qname: str,
    suite: EvalSuite,
    namespaces: dict[str, str] | None = None,
) -> Conversation:
    """
    Build the conversation asking for one entity's description

    Args:
        qname: Entity to describe (e.g. d3f:AccountLocking)
        suite: Few-shot configuration
        namespaces: Prefix map offered to the model (D3FEND prefixes if not specified)

    Returns:
        Conversation ending with the user's qname request
    """
    if namespaces is None:
        namespaces = D3FEND_NAMESPACES
    return (
        SYSTEM_MESSAGE,
        prefixes_message(namespaces),
        *suite.examples,
        Message(role="user", content=qname),
    )


def build_suite_conversations(
    entities: list[str],
    suite: EvalSuite,
    namespaces: dict[str, str] | None = None,
) -> list[Conversation]:
    """One conversation per entity, index-aligned with the entity list"""
    return [build_conversation(qname, suite, namespaces) for qname in entities]


# -- Training examples --

def used_prefixes(graph: Graph, namespaces: dict[str, str]) -> dict[str, str]:
    """Subset of namespaces referenced by any IRI in the graph"""
    used: dict[str, str] = {}
    for triple in graph:
        for node in triple:
            if isinstance(node, BNode):
                continue
            iris = [str(node)]
            datatype = getattr(node, "datatype", None)
            if datatype is not None:
                iris.append(str(datatype))
            for iri in iris:
                qname = compact(iri, namespaces)
                if qname is not None:
                    prefix = qname.split(":", 1)[0]
                    used[prefix] = namespaces[prefix]
    return used


def serialize_description(
    graph: Graph,
    subject: URIRef,
    namespaces: dict[str, str],
) -> tuple[dict[str, str], str]:
    """
    Serialize the concise bounded description of a subject as Turtle

    rdflib invents a prefix (ns1, ns2, ...) for any IRI outside the namespace
    map, so the declarations are read back from the serialized header rather
    than from the map.

    Returns:
        (prefixes declared by the serialized Turtle, body without the header)
    """
    description = Graph(bind_namespaces="none")
    for triple in graph.cbd(subject):
        description.add(triple)
    for prefix, uri in used_prefixes(description, namespaces).items():
        description.bind(prefix, uri)

    prefixes: dict[str, str] = {}
    body = []
    for line in description.serialize(format="turtle").splitlines():
        match = _PREFIX_DECLARATION_RE.match(line)
        if match:
            prefixes[match.group(1)] = match.group(2)
        else:
            body.append(line)
    return prefixes, "\n".join(body).strip() + "\n\n"


def build_training_example(
    graph: Graph,
    qname: str,
    namespaces: dict[str, str] | None = None,
) -> Conversation:
    """
    Build a fine-tuning example for one entity of the reference ontology

    Returns:
        system, prefixes used by the description, qname, and the assistant
        message holding the description
    """
    if namespaces is None:
        namespaces = D3FEND_NAMESPACES
    subject = URIRef(expand_qname(qname, namespaces))
    if (subject, None, None) not in graph:
        raise KeyError(f"Entity is not described by the ontology: {qname}")
    prefixes, body = serialize_description(graph, subject, namespaces)
    return (
        SYSTEM_MESSAGE,
        prefixes_message(prefixes),
        Message(role="user", content=qname),
        Message(role="assistant", content=body),
    )
