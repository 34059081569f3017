"""
Vertex AI (Google GenAI SDK) model client
"""

import os
import time

from google import genai
from google.genai import errors as genai_errors
from google.genai.types import Content, GenerateContentConfig, HttpOptions, Part

from rdf_gauge.domain.value_objects import Conversation, Message, ModelResponse
from rdf_gauge.infrastructure.model_clients.base import BackendError, ModelClient

# GenAI names the assistant role "model"
_ROLE_MAP = {"user": "user", "assistant": "model"}


class VertexAIClient(ModelClient):
    """Model client using Google GenAI SDK (via Vertex AI)"""

    def __init__(
        self,
        model_name: str,
        project_id: str | None = None,
        location: str | None = None,
        timeout_seconds: int = 120,
        temperature: float | None = None,
    ):
        """
        Args:
            model_name: Model name (e.g. gemini-2.5-pro, gemini-2.5-flash)
            project_id: GCP project ID (falls back to environment variable if not specified)
            location: Region (default: global)
            timeout_seconds: Timeout in seconds (default: 120)
            temperature: Sampling temperature (backend default if not specified)
        """
        self.model_name = model_name
        self.project_id = project_id or os.environ.get("GCP_PROJECT_ID")
        self.location = location or "global"
        self.timeout_seconds = timeout_seconds
        self.temperature = temperature

        if not self.project_id:
            raise ValueError("GCP_PROJECT_ID is not set")

        # Timeout is configured via HttpOptions (milliseconds)
        self.client = genai.Client(
            vertexai=True,
            project=self.project_id,
            location=self.location,
            http_options=HttpOptions(timeout=timeout_seconds * 1000),
        )

    def _build_request(self, conversation: Conversation) -> tuple[list[Content], GenerateContentConfig]:
        system = "\n\n".join(m.content for m in conversation if m.role == "system")
        contents = [
            Content(role=_ROLE_MAP[m.role], parts=[Part(text=m.content)])
            for m in conversation
            if m.role != "system"
        ]
        config = GenerateContentConfig(
            system_instruction=system or None,
            temperature=self.temperature,
        )
        return contents, config

    def generate(self, conversation: Conversation) -> ModelResponse:
        """
        Send a conversation and retrieve the response

        Raises:
            BackendError: If the API call fails
        """
        contents, config = self._build_request(conversation)

        start_time = time.time()
        try:
            response = self.client.models.generate_content(
                model=self.model_name,
                contents=contents,
                config=config,
            )
        except genai_errors.APIError as e:
            raise BackendError(str(e), status_code=e.code) from e
        latency_ms = int((time.time() - start_time) * 1000)

        candidates = []
        for candidate in response.candidates or []:
            parts = candidate.content.parts if candidate.content and candidate.content.parts else []
            text = "".join(part.text or "" for part in parts)
            candidates.append(Message(role="assistant", content=text))

        # Retrieve token usage
        input_tokens = 0
        output_tokens = 0
        if getattr(response, "usage_metadata", None):
            input_tokens = getattr(response.usage_metadata, "prompt_token_count", 0) or 0
            output_tokens = getattr(response.usage_metadata, "candidates_token_count", 0) or 0

        return ModelResponse(
            candidates=candidates,
            model_name=self.model_name,
            latency_ms=latency_ms,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
        )
