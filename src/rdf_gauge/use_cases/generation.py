"""
Self-correcting Generation

Prompts the backend, validates the completion as Turtle, and on failure feeds
the parser's message back to the backend with exponential backoff.
"""

import logging
import time
from typing import Callable

from rdf_gauge.domain.constants import DEFAULT_INITIAL_DELAY_MS, DEFAULT_MAX_ATTEMPTS
from rdf_gauge.domain.entities import RetryExhausted, RetryOutcome, RetrySuccess
from rdf_gauge.domain.value_objects import (
    Conversation,
    Invalid,
    ValidationContext,
    ValidationOutcome,
    append_messages,
    namespace_preamble,
)
from rdf_gauge.infrastructure.model_clients.base import BackendError, ModelClient
from rdf_gauge.prompt_builder import correction_message
from rdf_gauge.validation import ValidationError, validate_turtle

logger = logging.getLogger(__name__)

Validator = Callable[[str, ValidationContext], ValidationOutcome]


def run_with_retries(
    model_client: ModelClient,
    conversation: Conversation,
    context: ValidationContext,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    initial_delay_ms: int = DEFAULT_INITIAL_DELAY_MS,
    validator: Validator = validate_turtle,
) -> RetryOutcome:
    """
    Generate Turtle for one conversation, retrying on invalid output.

    Each failed attempt sleeps for the current delay (doubling every time) and
    continues with a new conversation extended by the rejected completion and
    a corrective user message quoting the validation error.

    Args:
        model_client: Generation backend
        conversation: Prompt conversation (not modified)
        context: Namespace metadata for validation
        max_attempts: Maximum number of backend calls (default: 3)
        initial_delay_ms: Delay before the second attempt (default: 250)
        validator: Validation function (default: validate_turtle)

    Returns:
        RetrySuccess, or RetryExhausted carrying the last validation error

    Raises:
        ValueError: If max_attempts is less than 1
        BackendError: If the backend call fails (not retried here)
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1.")

    preamble = namespace_preamble(conversation)
    delay_ms = initial_delay_ms
    last_error = ""

    for attempt in range(1, max_attempts + 1):
        response = model_client.generate(conversation)
        if not response.candidates:
            raise BackendError(f"{response.model_name} returned no completions")
        completion = response.candidates[0]

        try:
            outcome = validator(preamble + completion.content, context)
        except ValidationError as e:
            outcome = Invalid(reason=str(e))

        if not isinstance(outcome, Invalid):
            return RetrySuccess(
                response=response,
                triples=outcome.triples,
                retries_remaining=max_attempts - attempt,
                attempts=attempt,
                conversation=append_messages(conversation, completion),
            )

        last_error = outcome.reason
        logger.debug("Attempt %d/%d for %s invalid: %s", attempt, max_attempts, response.model_name, last_error)
        if attempt == max_attempts:
            return RetryExhausted(
                last_error=last_error,
                attempts=attempt,
                conversation=append_messages(conversation, completion),
            )

        time.sleep(delay_ms / 1000)
        delay_ms *= 2
        conversation = append_messages(conversation, completion, correction_message(last_error))

    # Unreachable: the loop always returns on its final attempt
    raise AssertionError("retry loop exited without an outcome")
