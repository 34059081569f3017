"""
Evaluation Execution

Fans the retry loop out across the entity list for one model, and across
suites x models for a full comparison.
"""

import logging
import random
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable

from rdf_gauge.domain.constants import D3FEND_CONTEXT
from rdf_gauge.domain.entities import BackendFailure, RunSlot
from rdf_gauge.domain.value_objects import Conversation, ValidationContext
from rdf_gauge.harness_config import HarnessConfig, load_config
from rdf_gauge.infrastructure.model_clients.base import BackendError, ErrorKind, ModelClient
from rdf_gauge.prompt_builder import EvalSuite, build_suite_conversations
from rdf_gauge.use_cases.generation import run_with_retries

logger = logging.getLogger(__name__)


def _evaluate_conversation(
    model_client: ModelClient,
    conversation: Conversation,
    context: ValidationContext,
    config: HarnessConfig,
) -> RunSlot:
    """
    Evaluate one conversation, retrying the whole retry loop on transient errors.

    Every retry loop invocation is preceded by a random jitter sleep.

    Returns:
        The retry loop outcome, or a BackendFailure once the backend failed
        non-transiently or the transient retries ran out
    """
    max_outer_attempts = config.evaluation.outer_retries + 1
    for outer_attempt in range(1, max_outer_attempts + 1):
        time.sleep(random.uniform(0, config.evaluation.jitter_seconds))
        try:
            return run_with_retries(
                model_client,
                conversation,
                context,
                max_attempts=config.generation.max_attempts,
                initial_delay_ms=config.generation.initial_delay_ms,
            )
        except BackendError as e:
            if e.is_transient and outer_attempt < max_outer_attempts:
                logger.warning(
                    "Transient backend error (%s), retrying %d/%d: %s",
                    e.status_code, outer_attempt, config.evaluation.outer_retries, e,
                )
                time.sleep(config.evaluation.outer_delay_seconds)
                continue
            return BackendFailure(
                message=str(e),
                kind=e.kind.value,
                status_code=e.status_code,
                attempts=outer_attempt,
            )
        except Exception as e:
            logger.exception("Unexpected error during evaluation")
            return BackendFailure(message=str(e), kind=ErrorKind.OTHER.value, attempts=outer_attempt)

    raise AssertionError("outer retry loop exited without an outcome")


def evaluate(
    model_client: ModelClient,
    conversations: list[Conversation],
    context: ValidationContext = D3FEND_CONTEXT,
    config: HarnessConfig | None = None,
) -> list[RunSlot]:
    """
    Evaluate every conversation concurrently.

    Args:
        model_client: Generation backend shared by all workers
        conversations: One conversation per entity
        context: Namespace metadata for validation
        config: HarnessConfig (loads from env if not provided)

    Returns:
        list[RunSlot]: results[i] belongs to conversations[i]
    """
    if config is None:
        config = load_config()

    results: list[RunSlot] = [None] * len(conversations)
    if not conversations:
        return results

    with ThreadPoolExecutor(max_workers=config.evaluation.max_workers) as executor:
        futures = {
            executor.submit(_evaluate_conversation, model_client, conversation, context, config): index
            for index, conversation in enumerate(conversations)
        }

        for completed, future in enumerate(as_completed(futures), start=1):
            index = futures[future]
            results[index] = future.result()
            logger.info(
                "[%d/%d] %s | slot %d | %s",
                completed, len(conversations), model_client.model_name,
                index, type(results[index]).__name__,
            )

    return results


def evaluate_model(
    model_client: ModelClient,
    suite: EvalSuite,
    entities: list[str],
    context: ValidationContext = D3FEND_CONTEXT,
    config: HarnessConfig | None = None,
) -> list[RunSlot]:
    """Evaluate one model on one suite across the entity list"""
    conversations = build_suite_conversations(entities, suite, context.namespaces)
    return evaluate(model_client, conversations, context, config)


def run_all_evaluations(
    suites: list[EvalSuite],
    models: list[str],
    entities: list[str],
    create_client_fn: Callable[[str], ModelClient],
    context: ValidationContext = D3FEND_CONTEXT,
    config: HarnessConfig | None = None,
) -> dict[str, dict[str, list[RunSlot]]]:
    """
    Evaluate every suite x model combination on the same entity list.

    Returns:
        {suite label: {model name: run}}, every run index-aligned with entities
    """
    if config is None:
        config = load_config()

    runs: dict[str, dict[str, list[RunSlot]]] = {}
    for suite in suites:
        runs[suite.label] = {}
        for model_name in models:
            logger.info("Evaluating %s on %s (%d entities)", model_name, suite.label, len(entities))
            client = create_client_fn(model_name)
            runs[suite.label][model_name] = evaluate_model(client, suite, entities, context, config)
    return runs
