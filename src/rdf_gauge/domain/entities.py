"""
Domain Entities

Defines the primary data structures used in the evaluation process.
"""

from dataclasses import dataclass, field
from typing import Optional, Union

from rdf_gauge.domain.value_objects import Conversation, ModelResponse, TripleSet


@dataclass
class RetrySuccess:
    """Terminal result of the retry loop when the output validated"""
    response: ModelResponse
    triples: TripleSet
    retries_remaining: int       # max_attempts - attempts
    attempts: int                # 1-based attempt that validated
    conversation: Conversation   # includes the accepted assistant reply


@dataclass
class RetryExhausted:
    """Terminal result of the retry loop when every attempt failed validation"""
    last_error: str
    attempts: int
    conversation: Conversation = ()


@dataclass
class BackendFailure:
    """Failure descriptor recorded when the backend itself failed"""
    message: str
    kind: str
    status_code: int | None = None
    attempts: int = 1


RetryOutcome = Union[RetrySuccess, RetryExhausted]
# One slot of an evaluation run; None marks a slot without any recorded outcome
RunSlot = Optional[Union[RetrySuccess, RetryExhausted, BackendFailure]]


@dataclass
class RunStats:
    """Aggregate reliability statistics of one evaluation run"""
    success: float
    failure_rate: float
    first_try: int
    second_try: int
    third_try: int
    hallucinations: float
    total: int = 0
    retry_distribution: dict[int, int] = field(default_factory=dict)


@dataclass
class ReportRow:
    """One row per (test, model, entity)"""
    qname: str
    retries_remaining: int
    model: str
    num_triples: int
    num_predicates: int
    num_known_predicates: int
    test: str


@dataclass
class HealthCheckResult:
    """Health check result"""
    model_name: str
    success: bool
    latency_ms: int | None
    error: str | None
    valid_turtle: bool | None = None  # None when the model did not answer
