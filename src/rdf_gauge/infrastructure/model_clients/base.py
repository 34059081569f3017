"""
Model client base class and backend error

Defines the abstract base class inherited by all model clients and the
BackendError every client raises when the provider call fails.
"""

from abc import ABC, abstractmethod
from enum import Enum

from rdf_gauge.domain.constants import TRANSIENT_STATUS_CODES
from rdf_gauge.domain.value_objects import Conversation, ModelResponse


class ErrorKind(str, Enum):
    """Classification attached where the backend error is raised"""
    TRANSIENT = "transient"
    OTHER = "other"


class BackendError(Exception):
    """Error raised when a generation backend call fails"""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        kind: ErrorKind | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        if kind is None:
            kind = ErrorKind.TRANSIENT if status_code in TRANSIENT_STATUS_CODES else ErrorKind.OTHER
        self.kind = kind

    @property
    def is_transient(self) -> bool:
        return self.kind is ErrorKind.TRANSIENT


class ModelClient(ABC):
    """Abstract base class for model clients"""

    model_name: str

    @abstractmethod
    def generate(self, conversation: Conversation) -> ModelResponse:
        """Send a conversation and retrieve the candidate completions"""
        pass
