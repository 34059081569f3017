"""
Run Statistics

Success rate, retry distribution and hallucination score of one evaluation run.
"""

from __future__ import annotations

import logging
from collections import Counter

import pandas as pd

from rdf_gauge.domain.entities import RetrySuccess, RunSlot, RunStats
from rdf_gauge.domain.value_objects import TripleSet
from rdf_gauge.ontology import ExistenceOracle
from rdf_gauge.validation import identifier_references

logger = logging.getLogger(__name__)


def validity_ratio(triples: TripleSet, oracle: ExistenceOracle) -> float | None:
    """
    Share of referenced identifiers that exist in the reference ontology

    Returns:
        |known| / |references|, or None when the triple set references nothing
    """
    refs = identifier_references(triples)
    if not refs:
        return None
    known = [ref for ref in refs if oracle.exists(ref.iri)]
    return len(known) / len(refs)


def hallucination_score(run: list[RunSlot], oracle: ExistenceOracle) -> float:
    """
    Validity of referenced identifiers across a run, penalized by failures

    penalty = mean_ratio * failures / attempts
    score   = (sum(ratios) - penalty) / attempts

    Failed slots and successes without references contribute no ratio; they
    only count towards failures through the penalty term.

    Returns:
        Score in roughly [-1, 1]; 1.0 when every slot succeeded with only
        known identifiers. 0.0 for an empty run.
    """
    total_attempts = len(run)
    if total_attempts == 0:
        return 0.0

    ratios = []
    for slot in run:
        if isinstance(slot, RetrySuccess):
            ratio = validity_ratio(slot.triples, oracle)
            if ratio is not None:
                ratios.append(ratio)

    total_successes = len(ratios)
    total_failures = total_attempts - total_successes
    avg_validity = sum(ratios) / total_successes if total_successes else 0.0
    penalty = avg_validity * total_failures / total_attempts
    score = sum(ratios) - penalty
    return score / total_attempts


def compute_stats(run: list[RunSlot], oracle: ExistenceOracle) -> RunStats:
    """
    Aggregate reliability statistics of one run

    Args:
        run: Evaluation run (one slot per entity)
        oracle: Existence lookup into the reference ontology

    Returns:
        RunStats
    """
    total = len(run)
    successes = [slot for slot in run if isinstance(slot, RetrySuccess)]
    distribution = Counter(slot.attempts for slot in successes)

    if total == 0:
        logger.warning("Computing statistics of an empty run")
        success = 0.0
    else:
        success = len(successes) / total

    return RunStats(
        success=success,
        failure_rate=(1.0 - success) if total else 0.0,
        first_try=distribution.get(1, 0),
        second_try=distribution.get(2, 0),
        third_try=distribution.get(3, 0),
        hallucinations=hallucination_score(run, oracle),
        total=total,
        retry_distribution=dict(sorted(distribution.items())),
    )


def summarize_runs(
    runs: dict[str, dict[str, list[RunSlot]]],
    oracle: ExistenceOracle,
) -> pd.DataFrame:
    """
    One statistics row per test x model

    Returns:
        pd.DataFrame with test, model and the RunStats fields
    """
    rows = []
    for test, models in runs.items():
        for model, run in models.items():
            stats = compute_stats(run, oracle)
            rows.append({
                "test": test,
                "model": model,
                "total": stats.total,
                "success": stats.success,
                "failure_rate": stats.failure_rate,
                "first_try": stats.first_try,
                "second_try": stats.second_try,
                "third_try": stats.third_try,
                "hallucinations": stats.hallucinations,
            })
    return pd.DataFrame(rows)
