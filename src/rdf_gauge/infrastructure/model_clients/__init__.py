"""
Model client package

Provides a unified conversation interface to each LLM provider.
"""

from rdf_gauge.infrastructure.model_clients.base import BackendError, ErrorKind, ModelClient
from rdf_gauge.infrastructure.model_clients.factory import create_client
from rdf_gauge.domain.value_objects import ModelResponse

__all__ = ["BackendError", "ErrorKind", "ModelClient", "ModelResponse", "create_client"]
