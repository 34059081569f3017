"""
Domain Layer

Defines constants, entities, and value objects that form the core of the business logic.
Has no dependencies on external libraries.
"""

from rdf_gauge.domain.constants import (
    D3FEND_CONTEXT,
    D3FEND_NAMESPACES,
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_MODELS,
    REPORT_COLUMNS,
    TRANSIENT_STATUS_CODES,
)
from rdf_gauge.domain.entities import (
    BackendFailure,
    HealthCheckResult,
    ReportRow,
    RetryExhausted,
    RetryOutcome,
    RetrySuccess,
    RunSlot,
    RunStats,
)
from rdf_gauge.domain.value_objects import (
    Conversation,
    IdentifierRef,
    Invalid,
    LangLiteral,
    Message,
    ModelResponse,
    PlainLiteral,
    Term,
    TripleSet,
    TypedLiteral,
    Valid,
    ValidationContext,
    ValidationOutcome,
)

__all__ = [
    # constants
    "D3FEND_CONTEXT",
    "D3FEND_NAMESPACES",
    "DEFAULT_MAX_ATTEMPTS",
    "DEFAULT_MODELS",
    "REPORT_COLUMNS",
    "TRANSIENT_STATUS_CODES",
    # entities
    "BackendFailure",
    "HealthCheckResult",
    "ReportRow",
    "RetryExhausted",
    "RetryOutcome",
    "RetrySuccess",
    "RunSlot",
    "RunStats",
    # value objects
    "Conversation",
    "IdentifierRef",
    "Invalid",
    "LangLiteral",
    "Message",
    "ModelResponse",
    "PlainLiteral",
    "Term",
    "TripleSet",
    "TypedLiteral",
    "Valid",
    "ValidationContext",
    "ValidationOutcome",
]
