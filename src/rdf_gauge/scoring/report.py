"""
Report Flattening

Re-parses the stored output of every run and flattens it into one row per
(test, model, entity).
"""

from __future__ import annotations

import pandas as pd
from rdflib import Graph

from rdf_gauge.domain.constants import D3FEND_CONTEXT, REPORT_COLUMNS
from rdf_gauge.domain.entities import ReportRow, RetrySuccess, RunSlot
from rdf_gauge.domain.value_objects import ValidationContext, namespace_preamble
from rdf_gauge.ontology import ExistenceOracle
from rdf_gauge.validation import compact, namespace_map, parse_graph


def report_graph(slot: RunSlot, context: ValidationContext = D3FEND_CONTEXT) -> Graph | None:
    """
    Graph of a slot's accepted Turtle

    Returns:
        The re-parsed graph, or None for slots without a validated result
    """
    if not isinstance(slot, RetrySuccess):
        return None
    conversation = slot.conversation
    return parse_graph(namespace_preamble(conversation) + conversation[-1].content, context)


def to_jsonld(slot: RunSlot, context: ValidationContext = D3FEND_CONTEXT) -> str | None:
    """Render a slot's accepted Turtle as JSON-LD"""
    graph = report_graph(slot, context)
    if graph is None:
        return None
    return graph.serialize(format="json-ld")


def _report_row(
    test: str,
    model: str,
    qname: str,
    slot: RunSlot,
    oracle: ExistenceOracle,
    context: ValidationContext,
) -> ReportRow:
    row = ReportRow(
        qname=qname,
        retries_remaining=slot.retries_remaining if isinstance(slot, RetrySuccess) else 0,
        model=model,
        num_triples=0,
        num_predicates=0,
        num_known_predicates=0,
        test=test,
    )
    graph = report_graph(slot, context)
    if graph is None:
        return row

    namespaces = namespace_map(graph, context)
    predicates = {str(p) for p in graph.predicates(unique=True)}
    qualified = [p for p in predicates if compact(p, namespaces) is not None]
    known = [p for p in qualified if oracle.exists(p)]

    row.num_triples = len(graph)
    row.num_predicates = len(qualified)
    row.num_known_predicates = len(known)
    return row


def dataset_for_model(
    test: str,
    model: str,
    entities: list[str],
    run: list[RunSlot],
    oracle: ExistenceOracle,
    context: ValidationContext = D3FEND_CONTEXT,
) -> list[ReportRow]:
    """
    Rows of one run, index-aligned with the entity list

    Raises:
        ValueError: If the run does not have exactly one slot per entity
    """
    if len(run) != len(entities):
        raise ValueError(
            f"Run for {model} on {test} has {len(run)} slots but there are {len(entities)} entities"
        )
    return [
        _report_row(test, model, qname, slot, oracle, context)
        for qname, slot in zip(entities, run)
    ]


def flatten(
    runs: dict[str, dict[str, list[RunSlot]]],
    entities: list[str],
    oracle: ExistenceOracle,
    context: ValidationContext = D3FEND_CONTEXT,
) -> list[ReportRow]:
    """
    Flatten {test: {model: run}} into report rows

    retries_remaining is 0 both for an entity accepted on the last allowed
    attempt and for an entity without a validated result. The two are told
    apart by num_triples unless the accepted completion was empty.

    Args:
        runs: Runs keyed by test label and model
        entities: The entity list shared by every run
        oracle: Existence lookup into the reference ontology
        context: Namespace metadata used to re-parse stored output

    Returns:
        list[ReportRow] in test, model, entity order
    """
    rows: list[ReportRow] = []
    for test, models in runs.items():
        for model, run in models.items():
            rows.extend(dataset_for_model(test, model, entities, run, oracle, context))
    return rows


def report_frame(rows: list[ReportRow]) -> pd.DataFrame:
    """Report rows as a DataFrame with the stable column order"""
    return pd.DataFrame(
        [{column: getattr(row, column) for column in REPORT_COLUMNS} for row in rows],
        columns=REPORT_COLUMNS,
    )
