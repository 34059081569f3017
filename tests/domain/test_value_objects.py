"""Tests for domain entities and value objects"""

import pytest

from rdf_gauge.domain.entities import BackendFailure, RetryExhausted
from rdf_gauge.domain.value_objects import (
    IdentifierRef,
    Message,
    ModelResponse,
    append_messages,
    conversation_from_dicts,
    conversation_to_dicts,
    namespace_preamble,
)


class TestMessage:
    def test_construction(self):
        message = Message(role="user", content="d3f:AccountLocking")
        assert message.to_dict() == {"role": "user", "content": "d3f:AccountLocking"}

    def test_invalid_role_raises(self):
        with pytest.raises(ValueError, match="Invalid message role"):
            Message(role="tool", content="x")

    def test_frozen(self):
        message = Message(role="user", content="x")
        with pytest.raises(AttributeError):
            message.content = "y"


class TestConversation:
    def test_append_returns_new_conversation(self):
        original = (Message(role="system", content="s"),)
        extended = append_messages(original, Message(role="user", content="u"))
        assert len(original) == 1
        assert len(extended) == 2
        assert extended[-1].content == "u"

    def test_dict_conversion(self):
        data = [{"role": "system", "content": "s"}, {"role": "user", "content": "u"}]
        conversation = conversation_from_dicts(data)
        assert conversation_to_dicts(conversation) == data


class TestNamespacePreamble:
    def test_finds_prefix_message(self):
        prefixes = "@prefix d3f: <http://d3fend.mitre.org/ontologies/d3fend.owl#> .\n"
        conversation = (
            Message(role="system", content="@prefix ignored: <http://example.org/> ."),
            Message(role="user", content=prefixes),
            Message(role="user", content="d3f:AccountLocking"),
        )
        assert namespace_preamble(conversation) == prefixes

    def test_sparql_style_prefixes(self):
        prefixes = "PREFIX ex: <http://example.org/>\n\nPREFIX owl: <http://www.w3.org/2002/07/owl#>\n"
        conversation = (Message(role="user", content=prefixes),)
        assert namespace_preamble(conversation) == prefixes

    def test_no_preamble(self):
        conversation = (Message(role="user", content="d3f:AccountLocking"),)
        assert namespace_preamble(conversation) == ""


class TestModelResponse:
    def test_output_is_first_candidate(self):
        response = ModelResponse(
            candidates=[Message(role="assistant", content="first"), Message(role="assistant", content="second")],
            model_name="m1",
        )
        assert response.output == "first"
        assert response.input_tokens == 0  # default

    def test_output_without_candidates(self):
        assert ModelResponse(candidates=[], model_name="m1").output == ""


class TestIdentifierRef:
    def test_str_prefers_qname(self):
        ref = IdentifierRef(iri="http://example.org/a", qname="ex:a")
        assert str(ref) == "ex:a"
        assert str(IdentifierRef(iri="http://example.org/a")) == "http://example.org/a"

    def test_blank(self):
        assert IdentifierRef(iri="_:b0").is_blank
        assert not IdentifierRef(iri="http://example.org/a").is_blank


class TestOutcomeEntities:
    def test_exhausted_defaults(self):
        outcome = RetryExhausted(last_error="bad", attempts=3)
        assert outcome.conversation == ()

    def test_backend_failure_defaults(self):
        failure = BackendFailure(message="boom", kind="other")
        assert failure.status_code is None
        assert failure.attempts == 1
