"""
OpenAI chat completions model client
"""

import os
import time

import openai
from openai import OpenAI

from rdf_gauge.domain.value_objects import Conversation, Message, ModelResponse, conversation_to_dicts
from rdf_gauge.infrastructure.model_clients.base import BackendError, ModelClient


class OpenAIClient(ModelClient):
    """Client using the OpenAI chat completions API (including fine-tuned ft: models)"""

    def __init__(
        self,
        model_name: str,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout_seconds: int = 120,
        temperature: float | None = None,
        num_candidates: int = 1,
    ):
        """
        Args:
            model_name: Model name (e.g. gpt-4, ft:gpt-3.5-turbo-0613:org::id)
            api_key: OpenAI API key (falls back to OPENAI_API_KEY if not specified)
            base_url: API endpoint (OpenAI default if not specified)
            timeout_seconds: Per-call timeout in seconds (default: 120)
            temperature: Sampling temperature (backend default if not specified)
            num_candidates: Number of candidate completions to request (default: 1)
        """
        self.model_name = model_name
        self.api_model_name = model_name
        self.timeout_seconds = timeout_seconds
        self.temperature = temperature
        self.num_candidates = num_candidates

        api_key = api_key or os.environ.get("OPENAI_API_KEY")
        if not api_key:
            raise ValueError("OPENAI_API_KEY is not set")

        # Retries are owned by the harness, not by the SDK
        self.client = OpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout_seconds,
            max_retries=0,
        )

    def _request_params(self, conversation: Conversation) -> dict:
        params = {
            "model": self.api_model_name,
            "messages": conversation_to_dicts(conversation),
        }
        if self.temperature is not None:
            params["temperature"] = self.temperature
        if self.num_candidates > 1:
            params["n"] = self.num_candidates
        return params

    def generate(self, conversation: Conversation) -> ModelResponse:
        """
        Send a conversation and retrieve the response

        Args:
            conversation: Ordered role-tagged messages

        Returns:
            ModelResponse: Every candidate completion plus token usage

        Raises:
            BackendError: If the API call fails
        """
        start_time = time.time()
        try:
            response = self.client.chat.completions.create(**self._request_params(conversation))
        except openai.APIStatusError as e:
            raise BackendError(str(e), status_code=e.status_code) from e
        except openai.APIConnectionError as e:
            raise BackendError(str(e)) from e
        latency_ms = int((time.time() - start_time) * 1000)

        candidates = [
            Message(role="assistant", content=choice.message.content or "")
            for choice in response.choices
        ]

        # Retrieve token usage
        input_tokens = 0
        output_tokens = 0
        if response.usage:
            input_tokens = response.usage.prompt_tokens or 0
            output_tokens = response.usage.completion_tokens or 0

        return ModelResponse(
            candidates=candidates,
            model_name=self.model_name,
            latency_ms=latency_ms,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
        )
