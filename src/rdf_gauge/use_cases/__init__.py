"""
Use Cases Layer

Aggregates business logic and provides use cases called from the runner.
"""

from rdf_gauge.use_cases.evaluation import (
    evaluate,
    evaluate_model,
    run_all_evaluations,
)
from rdf_gauge.use_cases.generation import run_with_retries
from rdf_gauge.use_cases.health_check import (
    HEALTH_CHECK_ENTITY,
    health_check_conversation,
    health_check_model,
    run_health_check,
)

__all__ = [
    # evaluation
    "evaluate",
    "evaluate_model",
    "run_all_evaluations",
    # generation
    "run_with_retries",
    # health_check
    "HEALTH_CHECK_ENTITY",
    "health_check_conversation",
    "health_check_model",
    "run_health_check",
]
