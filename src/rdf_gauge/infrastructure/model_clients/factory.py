"""
Model client factory

Creates the appropriate client instance based on the model name.
"""

from __future__ import annotations

from rdf_gauge.harness_config import HarnessConfig, load_config
from rdf_gauge.infrastructure.model_clients.base import ModelClient
from rdf_gauge.infrastructure.model_clients.claude import ClaudeClient
from rdf_gauge.infrastructure.model_clients.lmstudio import LMStudioClient
from rdf_gauge.infrastructure.model_clients.openai_chat import OpenAIClient
from rdf_gauge.infrastructure.model_clients.vertex_ai import VertexAIClient


def create_client(model_name: str, config: HarnessConfig | None = None) -> ModelClient:
    """
    Create the appropriate client based on the model name

    Args:
        model_name: Model name
        config: HarnessConfig (loads from env if not provided)

    Returns:
        ModelClient: The appropriate client instance
    """
    if config is None:
        config = load_config()

    timeout = config.generation.timeout_seconds
    temperature = config.generation.temperature

    if model_name.startswith("lmstudio/"):
        return LMStudioClient(
            model_name,
            base_url=config.lmstudio.base_url,
            api_key=config.lmstudio.api_key,
            timeout_seconds=timeout,
            temperature=temperature,
        )
    elif model_name.startswith("claude"):
        return ClaudeClient(model_name, timeout_seconds=timeout, temperature=temperature)
    elif model_name.startswith("gemini"):
        return VertexAIClient(model_name, timeout_seconds=timeout, temperature=temperature)
    else:
        return OpenAIClient(model_name, timeout_seconds=timeout, temperature=temperature)
