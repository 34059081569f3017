"""
Model client tests

Covers BackendError classification, the create_client() factory branches and
the translation of each SDK's request and errors.
"""

from unittest.mock import MagicMock, patch

import anthropic
import httpx
import openai
import pytest
from google.genai import errors as genai_errors

from rdf_gauge.domain.value_objects import Message
from rdf_gauge.harness_config import GenerationConfig, HarnessConfig, LMStudioConfig
from rdf_gauge.infrastructure.model_clients.base import BackendError, ErrorKind
from rdf_gauge.infrastructure.model_clients.claude import ClaudeClient
from rdf_gauge.infrastructure.model_clients.factory import create_client
from rdf_gauge.infrastructure.model_clients.lmstudio import LMStudioClient
from rdf_gauge.infrastructure.model_clients.openai_chat import OpenAIClient
from rdf_gauge.infrastructure.model_clients.vertex_ai import VertexAIClient

CONVERSATION = (
    Message(role="system", content="You are an RDF Turtle generator."),
    Message(role="user", content="@prefix d3f: <http://d3fend.mitre.org/ontologies/d3fend.owl#> .\n"),
    Message(role="user", content="d3f:AccountLocking"),
)


def _status_response(status_code: int) -> httpx.Response:
    return httpx.Response(status_code, request=httpx.Request("POST", "https://api.example.com/v1"))


class TestBackendError:
    """BackendError classification"""

    def test_503_is_transient(self):
        error = BackendError("Service Unavailable", status_code=503)
        assert error.kind is ErrorKind.TRANSIENT
        assert error.is_transient

    @pytest.mark.parametrize("status_code", [None, 400, 429, 500, 502])
    def test_other_statuses(self, status_code):
        error = BackendError("failed", status_code=status_code)
        assert error.kind is ErrorKind.OTHER
        assert not error.is_transient

    def test_explicit_kind_wins(self):
        error = BackendError("connection reset", kind=ErrorKind.TRANSIENT)
        assert error.is_transient
        assert error.status_code is None


class TestCreateClientFactory:
    """create_client() factory branches"""

    @patch.dict("os.environ", {"LMSTUDIO_BASE_URL": "http://localhost:1234/v1"})
    def test_lmstudio_prefix(self):
        client = create_client("lmstudio/qwen2.5-7b", HarnessConfig())
        assert isinstance(client, LMStudioClient)
        assert client.api_model_name == "qwen2.5-7b"
        assert client.model_name == "lmstudio/qwen2.5-7b"

    @patch.dict("os.environ", {"ANTHROPIC_API_KEY": "test-key"})
    def test_claude_prefix(self):
        client = create_client("claude-haiku-4-5-20251001", HarnessConfig())
        assert isinstance(client, ClaudeClient)

    @patch("rdf_gauge.infrastructure.model_clients.vertex_ai.genai.Client")
    @patch.dict("os.environ", {"GCP_PROJECT_ID": "test-project"})
    def test_gemini_prefix(self, mock_genai_client):
        client = create_client("gemini-2.5-flash", HarnessConfig())
        assert isinstance(client, VertexAIClient)
        mock_genai_client.assert_called_once()

    @patch.dict("os.environ", {"OPENAI_API_KEY": "test-key"})
    def test_default_is_openai(self):
        client = create_client("gpt-4", HarnessConfig())
        assert type(client) is OpenAIClient

    @patch.dict("os.environ", {"OPENAI_API_KEY": "test-key"})
    def test_fine_tuned_model_is_openai(self):
        client = create_client("ft:gpt-3.5-turbo-0613:acme::8abc", HarnessConfig())
        assert type(client) is OpenAIClient
        assert client.api_model_name == "ft:gpt-3.5-turbo-0613:acme::8abc"

    @patch.dict("os.environ", {"OPENAI_API_KEY": "test-key"})
    def test_config_is_forwarded(self):
        config = HarnessConfig(generation=GenerationConfig(timeout_seconds=30, temperature=0.2))
        client = create_client("gpt-4", config)
        assert client.timeout_seconds == 30
        assert client.temperature == 0.2

    def test_lmstudio_config_is_forwarded(self):
        config = HarnessConfig(lmstudio=LMStudioConfig(base_url="http://gpu-box:1234/v1", api_key="k"))
        client = create_client("lmstudio/llama-3", config)
        assert client.base_url == "http://gpu-box:1234/v1"

    @patch.dict("os.environ", {}, clear=True)
    def test_missing_openai_key_raises(self):
        with pytest.raises(ValueError, match="OPENAI_API_KEY"):
            create_client("gpt-4", HarnessConfig())


class TestOpenAIClient:
    """OpenAIClient.generate()"""

    def _make_client(self, **kwargs) -> OpenAIClient:
        client = OpenAIClient("gpt-4", api_key="test-key", **kwargs)
        client.client = MagicMock()
        return client

    def test_generate_maps_choices(self):
        client = self._make_client()
        response = MagicMock()
        response.choices = [MagicMock(), MagicMock()]
        response.choices[0].message.content = "d3f:AccountLocking a owl:Class ."
        response.choices[1].message.content = None
        response.usage.prompt_tokens = 12
        response.usage.completion_tokens = 7
        client.client.chat.completions.create.return_value = response

        result = client.generate(CONVERSATION)

        assert [c.content for c in result.candidates] == ["d3f:AccountLocking a owl:Class .", ""]
        assert result.output == "d3f:AccountLocking a owl:Class ."
        assert result.model_name == "gpt-4"
        assert result.input_tokens == 12
        assert result.output_tokens == 7

    def test_request_params(self):
        client = self._make_client(temperature=0.0, num_candidates=2)
        client.client.chat.completions.create.return_value = MagicMock(choices=[], usage=None)

        client.generate(CONVERSATION)

        kwargs = client.client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4"
        assert kwargs["temperature"] == 0.0
        assert kwargs["n"] == 2
        assert kwargs["messages"][0] == {"role": "system", "content": "You are an RDF Turtle generator."}
        assert kwargs["messages"][-1] == {"role": "user", "content": "d3f:AccountLocking"}

    def test_temperature_omitted_by_default(self):
        client = self._make_client()
        client.client.chat.completions.create.return_value = MagicMock(choices=[], usage=None)

        client.generate(CONVERSATION)

        kwargs = client.client.chat.completions.create.call_args.kwargs
        assert "temperature" not in kwargs
        assert "n" not in kwargs

    def test_status_error_is_translated(self):
        client = self._make_client()
        client.client.chat.completions.create.side_effect = openai.APIStatusError(
            "Service Unavailable", response=_status_response(503), body=None
        )

        with pytest.raises(BackendError) as excinfo:
            client.generate(CONVERSATION)

        assert excinfo.value.status_code == 503
        assert excinfo.value.is_transient

    def test_bad_request_is_not_transient(self):
        client = self._make_client()
        client.client.chat.completions.create.side_effect = openai.APIStatusError(
            "Bad Request", response=_status_response(400), body=None
        )

        with pytest.raises(BackendError) as excinfo:
            client.generate(CONVERSATION)

        assert excinfo.value.status_code == 400
        assert excinfo.value.kind is ErrorKind.OTHER


class TestClaudeClient:
    """ClaudeClient request building and generate()"""

    def _make_client(self) -> ClaudeClient:
        client = ClaudeClient("claude-haiku-4-5-20251001", api_key="test-key")
        client.client = MagicMock()
        return client

    def test_split_system(self):
        system, messages = ClaudeClient._split_system(CONVERSATION)
        assert system == "You are an RDF Turtle generator."
        assert [m["role"] for m in messages] == ["user", "user"]

    def test_generate_joins_text_blocks(self):
        client = self._make_client()
        response = MagicMock()
        response.content = [
            MagicMock(type="text", text="d3f:AccountLocking "),
            MagicMock(type="tool_use", text="ignored"),
            MagicMock(type="text", text="a owl:Class ."),
        ]
        response.usage.input_tokens = 30
        response.usage.output_tokens = 8
        client.client.messages.create.return_value = response

        result = client.generate(CONVERSATION)

        assert result.output == "d3f:AccountLocking a owl:Class ."
        assert result.input_tokens == 30
        kwargs = client.client.messages.create.call_args.kwargs
        assert kwargs["system"] == "You are an RDF Turtle generator."
        assert kwargs["max_tokens"] == 4096
        assert all(m["role"] != "system" for m in kwargs["messages"])

    def test_status_error_is_translated(self):
        client = self._make_client()
        client.client.messages.create.side_effect = anthropic.APIStatusError(
            "Service Unavailable", response=_status_response(503), body=None
        )

        with pytest.raises(BackendError) as excinfo:
            client.generate(CONVERSATION)

        assert excinfo.value.is_transient

    @patch.dict("os.environ", {}, clear=True)
    def test_missing_api_key_raises(self):
        with pytest.raises(ValueError, match="ANTHROPIC_API_KEY"):
            ClaudeClient("claude-haiku-4-5-20251001")


class TestVertexAIClient:
    """VertexAIClient request building and generate()"""

    @patch("rdf_gauge.infrastructure.model_clients.vertex_ai.genai.Client")
    def _make_client(self, mock_genai_client) -> VertexAIClient:
        return VertexAIClient("gemini-2.5-flash", project_id="test-project", temperature=0.5)

    def test_build_request_maps_roles(self):
        client = self._make_client()
        conversation = CONVERSATION + (
            Message(role="assistant", content="d3f:AccountLocking a owl:Class ."),
            Message(role="user", content="Your response was not valid RDF Turtle."),
        )

        contents, config = client._build_request(conversation)

        assert [c.role for c in contents] == ["user", "user", "model", "user"]
        assert contents[-1].parts[0].text == "Your response was not valid RDF Turtle."
        assert "You are an RDF Turtle generator." in str(config.system_instruction)
        assert config.temperature == 0.5

    def test_generate_collects_candidates(self):
        client = self._make_client()
        part = MagicMock(text="d3f:AccountLocking a owl:Class .")
        candidate = MagicMock()
        candidate.content.parts = [part]
        response = MagicMock(candidates=[candidate])
        response.usage_metadata.prompt_token_count = 40
        response.usage_metadata.candidates_token_count = 9
        client.client.models.generate_content.return_value = response

        result = client.generate(CONVERSATION)

        assert result.output == "d3f:AccountLocking a owl:Class ."
        assert result.input_tokens == 40
        assert result.output_tokens == 9

    def test_api_error_is_translated(self):
        client = self._make_client()
        client.client.models.generate_content.side_effect = genai_errors.ServerError(
            503, {"error": {"code": 503, "message": "The model is overloaded.", "status": "UNAVAILABLE"}}
        )

        with pytest.raises(BackendError) as excinfo:
            client.generate(CONVERSATION)

        assert excinfo.value.status_code == 503
        assert excinfo.value.is_transient

    @patch.dict("os.environ", {}, clear=True)
    def test_missing_project_raises(self):
        with pytest.raises(ValueError, match="GCP_PROJECT_ID"):
            VertexAIClient("gemini-2.5-flash")
