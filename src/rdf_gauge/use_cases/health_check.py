"""
Health Check

Sends every model one real generation request before an evaluation batch and
drops the models that cannot answer it.
"""

import logging
from typing import Callable

from rdf_gauge.domain.constants import D3FEND_CONTEXT
from rdf_gauge.domain.entities import HealthCheckResult
from rdf_gauge.domain.value_objects import Conversation, Valid, ValidationContext, namespace_preamble
from rdf_gauge.infrastructure.model_clients.base import ModelClient
from rdf_gauge.prompt_builder import SUITES, build_conversation
from rdf_gauge.validation import validate_turtle

logger = logging.getLogger(__name__)

# Entity requested by the health check ping
HEALTH_CHECK_ENTITY = "owl:Thing"


def health_check_conversation(context: ValidationContext = D3FEND_CONTEXT) -> Conversation:
    """Zero-shot generation prompt for HEALTH_CHECK_ENTITY"""
    return build_conversation(HEALTH_CHECK_ENTITY, SUITES["zero-shot"], context.namespaces)


def health_check_model(
    model_name: str,
    create_client_fn: Callable[[str], ModelClient],
    context: ValidationContext = D3FEND_CONTEXT,
) -> HealthCheckResult:
    """
    Ping one model with the zero-shot prompt.

    A model is available when it answers with non-empty output. Whether the
    answer parses is recorded but does not decide availability.
    """
    conversation = health_check_conversation(context)
    try:
        client = create_client_fn(model_name)
        response = client.generate(conversation)
    except Exception as e:
        logger.debug("Health check of %s failed", model_name, exc_info=True)
        return HealthCheckResult(model_name=model_name, success=False, latency_ms=None, error=str(e))

    if not response.output:
        return HealthCheckResult(
            model_name=model_name,
            success=False,
            latency_ms=response.latency_ms,
            error=f"{model_name} returned an empty response",
        )

    outcome = validate_turtle(namespace_preamble(conversation) + response.output, context)
    return HealthCheckResult(
        model_name=model_name,
        success=True,
        latency_ms=response.latency_ms,
        error=None,
        valid_turtle=isinstance(outcome, Valid),
    )


def run_health_check(
    models: list[str],
    create_client_fn: Callable[[str], ModelClient] | None = None,
    context: ValidationContext = D3FEND_CONTEXT,
) -> tuple[list[str], list[HealthCheckResult]]:
    """
    Check every model and keep the available ones, in input order.

    Uses the model client factory if create_client_fn is not specified.

    Returns:
        (available model names, every check result)
    """
    if create_client_fn is None:
        from rdf_gauge.infrastructure.model_clients.factory import create_client
        create_client_fn = create_client

    print("=== Model Health Check ===\n")
    results = [health_check_model(name, create_client_fn, context) for name in models]

    for result in results:
        if result.success:
            turtle = "valid Turtle" if result.valid_turtle else "invalid Turtle"
            print(f"  {result.model_name:<40} OK ({result.latency_ms}ms, {turtle})")
        else:
            print(f"  {result.model_name:<40} FAILED")
            print(f"    Error: {(result.error or 'Unknown error')[:100]}")
    print()

    return [r.model_name for r in results if r.success], results
