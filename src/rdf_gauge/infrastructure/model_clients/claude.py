"""
Anthropic Claude model client
"""

import os
import time

from anthropic import Anthropic, APIConnectionError, APIStatusError

from rdf_gauge.domain.value_objects import Conversation, Message, ModelResponse
from rdf_gauge.infrastructure.model_clients.base import BackendError, ModelClient


class ClaudeClient(ModelClient):
    """Claude client using the Anthropic API"""

    def __init__(
        self,
        model_name: str,
        api_key: str | None = None,
        timeout_seconds: int = 120,
        temperature: float | None = None,
        max_tokens: int = 4096,
    ):
        """
        Args:
            model_name: Model name (e.g. claude-sonnet-4-5-20250514)
            api_key: Anthropic API key (falls back to environment variable if not specified)
            timeout_seconds: Per-call timeout in seconds (default: 120)
            temperature: Sampling temperature (backend default if not specified)
            max_tokens: Maximum number of output tokens (default: 4096)
        """
        self.model_name = model_name
        self.api_key = api_key or os.environ.get("ANTHROPIC_API_KEY")
        self.timeout_seconds = timeout_seconds
        self.temperature = temperature
        self.max_tokens = max_tokens

        if not self.api_key:
            raise ValueError("ANTHROPIC_API_KEY is not set")

        self.client = Anthropic(api_key=self.api_key, timeout=timeout_seconds, max_retries=0)

    @staticmethod
    def _split_system(conversation: Conversation) -> tuple[str, list[dict]]:
        """The Messages API takes system text separately from the dialogue"""
        system = "\n\n".join(m.content for m in conversation if m.role == "system")
        messages = [
            {"role": m.role, "content": m.content}
            for m in conversation
            if m.role != "system"
        ]
        return system, messages

    def generate(self, conversation: Conversation) -> ModelResponse:
        """
        Send a conversation and retrieve the response

        Raises:
            BackendError: If the API call fails
        """
        system, messages = self._split_system(conversation)
        params = {
            "model": self.model_name,
            "max_tokens": self.max_tokens,
            "messages": messages,
        }
        if system:
            params["system"] = system
        if self.temperature is not None:
            params["temperature"] = self.temperature

        start_time = time.time()
        try:
            response = self.client.messages.create(**params)
        except APIStatusError as e:
            raise BackendError(str(e), status_code=e.status_code) from e
        except APIConnectionError as e:
            raise BackendError(str(e)) from e
        latency_ms = int((time.time() - start_time) * 1000)

        text = "".join(
            block.text for block in response.content if getattr(block, "type", "") == "text"
        )

        # Retrieve token usage
        input_tokens = getattr(response.usage, "input_tokens", 0) or 0
        output_tokens = getattr(response.usage, "output_tokens", 0) or 0

        return ModelResponse(
            candidates=[Message(role="assistant", content=text)],
            model_name=self.model_name,
            latency_ms=latency_ms,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
        )
