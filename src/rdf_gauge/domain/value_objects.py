"""
Domain Value Objects

Defines immutable data structures representing conversations, model responses,
parsed RDF terms and validation outcomes.
"""

import re
from dataclasses import dataclass, field
from typing import Union

ROLES = ("system", "user", "assistant")


@dataclass(frozen=True)
class Message:
    """A single role-tagged message of a conversation"""
    role: str
    content: str

    def __post_init__(self):
        if self.role not in ROLES:
            raise ValueError(f"Invalid message role: {self.role}. Valid values: {list(ROLES)}")

    def to_dict(self) -> dict:
        return {"role": self.role, "content": self.content}


# Conversations are append-only: every retry builds a new, longer tuple
Conversation = tuple[Message, ...]

_PREFIX_LINE_RE = re.compile(r"^\s*(@prefix|PREFIX)\s", re.IGNORECASE)


def append_messages(conversation: Conversation, *messages: Message) -> Conversation:
    """Return a new conversation with messages appended"""
    return tuple(conversation) + tuple(messages)


def conversation_to_dicts(conversation: Conversation) -> list[dict]:
    return [m.to_dict() for m in conversation]


def conversation_from_dicts(data: list[dict]) -> Conversation:
    return tuple(Message(role=m["role"], content=m["content"]) for m in data)


def namespace_preamble(conversation: Conversation) -> str:
    """
    Find the namespace declarations embedded in a conversation

    The preamble is the first user message whose non-blank lines are all
    @prefix / PREFIX declarations.

    Returns:
        The message content, or an empty string if there is none
    """
    for message in conversation:
        if message.role != "user":
            continue
        lines = [line for line in message.content.splitlines() if line.strip()]
        if lines and all(_PREFIX_LINE_RE.match(line) for line in lines):
            return message.content
    return ""


@dataclass
class ModelResponse:
    """Model response"""
    candidates: list[Message]
    model_name: str
    latency_ms: int = 0
    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def output(self) -> str:
        """Content of the first candidate completion"""
        return self.candidates[0].content if self.candidates else ""


# -- RDF terms --

@dataclass(frozen=True)
class IdentifierRef:
    """Reference to a named resource; qname is None outside declared namespaces"""
    iri: str
    qname: str | None = None

    @property
    def is_blank(self) -> bool:
        return self.iri.startswith("_:")

    def __str__(self) -> str:
        return self.qname or self.iri


@dataclass(frozen=True)
class PlainLiteral:
    value: str


@dataclass(frozen=True)
class TypedLiteral:
    value: str
    datatype: IdentifierRef


@dataclass(frozen=True)
class LangLiteral:
    value: str
    language: str


Term = Union[IdentifierRef, PlainLiteral, TypedLiteral, LangLiteral]

# subject -> predicate -> objects
TripleSet = dict[IdentifierRef, dict[IdentifierRef, list[Term]]]


@dataclass(frozen=True)
class ValidationContext:
    """Namespace metadata the generated Turtle is parsed against"""
    uri: str
    prefix: str
    namespaces: dict[str, str] = field(default_factory=dict)


@dataclass
class Valid:
    """Successful validation carrying the parsed triple set"""
    triples: TripleSet


@dataclass
class Invalid:
    """Failed validation with a diagnostic usable verbatim in a prompt"""
    reason: str


ValidationOutcome = Union[Valid, Invalid]
