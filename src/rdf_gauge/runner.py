"""
rdf-gauge CLI Runner

Minimal CLI for running the Turtle generation evaluation.

Usage:
    python -m rdf_gauge.runner --entities data/entities_demo.json --ontology d3fend.ttl
    python -m rdf_gauge.runner --entities data/entities_demo.json --ontology d3fend.ttl --models gpt-4,claude-haiku-4-5-20251001 --suites zero-shot,one-shot

Export fine-tuning examples instead of evaluating:
    python -m rdf_gauge.runner --entities data/entities_demo.json --ontology d3fend.ttl --training-jsonl results/d3fend.jsonl

Rebuild the reports of a stored run (optionally for a subset of suites):
    python -m rdf_gauge.runner --entities data/entities_demo.json --ontology d3fend.ttl --report-from results/20240101_120000 --suites zero-shot,one-shot
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime
from functools import partial
from pathlib import Path

from dotenv import load_dotenv

from rdf_gauge.domain.constants import D3FEND_CONTEXT, DEFAULT_MODELS
from rdf_gauge.domain.entities import RunSlot
from rdf_gauge.entity_loader import load_entities
from rdf_gauge.harness_config import load_config
from rdf_gauge.infrastructure.model_clients.factory import create_client
from rdf_gauge.infrastructure.storage import (
    export_csv,
    find_run_files,
    load_evals_report,
    model_directory_name,
    save_run,
    write_jsonl,
)
from rdf_gauge.ontology import OntologyIndex, load_graph
from rdf_gauge.prompt_builder import SUITES, build_training_example, get_suite
from rdf_gauge.scoring.report import flatten
from rdf_gauge.scoring.stats import compute_stats, summarize_runs
from rdf_gauge.use_cases.evaluation import run_all_evaluations
from rdf_gauge.use_cases.health_check import run_health_check


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="rdf-gauge: Evaluate RDF Turtle generation reliability and hallucinations",
    )
    parser.add_argument(
        "--entities",
        required=True,
        help="Path to the entity list JSON file",
    )
    parser.add_argument(
        "--ontology",
        required=True,
        nargs="+",
        help="Reference ontology file(s) used to detect hallucinated identifiers",
    )
    parser.add_argument(
        "--models",
        default=None,
        help="Comma-separated list of model names (default: uses DEFAULT_MODELS)",
    )
    parser.add_argument(
        "--suites",
        default=",".join(SUITES),
        help=f"Comma-separated list of few-shot suites, also the tests selected by --report-from (default: {','.join(SUITES)})",
    )
    parser.add_argument(
        "--output-dir",
        default="results",
        help="Directory for run files and CSV output (default: results)",
    )
    parser.add_argument(
        "--training-jsonl",
        default=None,
        help="Write fine-tuning examples for the entities to this JSONL file and exit",
    )
    parser.add_argument(
        "--report-from",
        default=None,
        help="Rebuild the CSV reports from a stored run directory (results/<run_id>) instead of evaluating",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Logging level (default: WARNING)",
    )
    return parser.parse_args(argv)


def export_training_data(entities: list[str], ontology_paths: list[str], output_path: str) -> Path:
    """Write one training example per entity described by the ontology"""
    graph = load_graph(ontology_paths)
    examples = []
    for qname in entities:
        try:
            examples.append(build_training_example(graph, qname, D3FEND_CONTEXT.namespaces))
        except KeyError as e:
            print(f"  SKIP {qname}: {e}")
    return write_jsonl(examples, output_path)


def print_stats(runs: dict[str, dict[str, list[RunSlot]]], oracle: OntologyIndex) -> None:
    print("=== Run Statistics ===\n")
    print(f"  {'Suite':<18} {'Model':<40} {'success':>8} {'1st':>5} {'2nd':>5} {'3rd':>5} {'halluc.':>8}")
    print(f"  {'-'*18} {'-'*40} {'-'*8} {'-'*5} {'-'*5} {'-'*5} {'-'*8}")
    for test, model_runs in runs.items():
        for model, run in model_runs.items():
            stats = compute_stats(run, oracle)
            print(
                f"  {test:<18} {model:<40} "
                f"{stats.success:>8.3f} "
                f"{stats.first_try:>5} "
                f"{stats.second_try:>5} "
                f"{stats.third_try:>5} "
                f"{stats.hallucinations:>8.3f}"
            )
    print()


def write_reports(
    runs: dict[str, dict[str, list[RunSlot]]],
    entities: list[str],
    oracle: OntologyIndex,
    output_dir: Path,
    run_id: str,
) -> tuple[Path, Path]:
    """
    Write report_<run_id>.csv (one row per test x model x entity) and
    summary_<run_id>.csv (one row per test x model)

    Returns:
        (report path, summary path)
    """
    report_path = export_csv(flatten(runs, entities, oracle, D3FEND_CONTEXT), output_dir / f"report_{run_id}.csv")
    summary_path = output_dir / f"summary_{run_id}.csv"
    summarize_runs(runs, oracle).to_csv(summary_path, index=False)

    print("=== Output ===\n")
    print(f"  Report:  {report_path}")
    print(f"  Summary: {summary_path}")
    print()
    return report_path, summary_path


def _split(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def main(argv: list[str] | None = None) -> None:
    load_dotenv()
    args = parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    entity_list = load_entities(args.entities)
    entities = entity_list.entities

    if args.training_jsonl:
        print(f"\n=== Exporting training data ({len(entities)} entities) ===\n")
        path = export_training_data(entities, args.ontology, args.training_jsonl)
        print(f"  Training data: {path}\n")
        return

    output_dir = Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    print("\n=== Loading reference ontology ===\n")
    oracle = OntologyIndex.from_files(args.ontology)
    print(f"  Known identifiers: {len(oracle)}")
    print(f"  Entities: {len(entities)}")

    if args.report_from:
        # Re-report stored runs; --suites selects the tests to include
        run_dir = Path(args.report_from)
        print(f"  Stored runs: {run_dir}")
        print()
        runs = load_evals_report(find_run_files(run_dir, _split(args.suites)), D3FEND_CONTEXT)
        if not runs:
            print("ERROR: No stored runs found. Exiting.")
            sys.exit(1)
        print_stats(runs, oracle)
        write_reports(runs, entities, oracle, output_dir, run_dir.name)
        return

    # Load config
    config = load_config()
    make_client = partial(create_client, config=config)

    models = _split(args.models) if args.models else DEFAULT_MODELS
    suites = [get_suite(label) for label in _split(args.suites)]
    run_id = datetime.now().strftime("%Y%m%d_%H%M%S")

    print(f"  Models: {models}")
    print(f"  Suites: {[s.label for s in suites]}")
    print(f"  Run ID: {run_id}")
    print()

    # Step 1: Health check
    available_models, _ = run_health_check(models, make_client)
    if not available_models:
        print("ERROR: No models available. Exiting.")
        sys.exit(1)

    # Step 2: Run evaluations
    print(f"=== Running Evaluations ({len(suites) * len(available_models) * len(entities)} total) ===\n")
    runs = run_all_evaluations(
        suites,
        available_models,
        entities,
        make_client,
        context=D3FEND_CONTEXT,
        config=config,
    )

    # Step 3: Persist runs
    print("=== Saving Runs ===\n")
    for test, model_runs in runs.items():
        for model, run in model_runs.items():
            path = save_run(run, output_dir / run_id / test / model_directory_name(model))
            print(f"  {test} / {model}: {path}")
    print()

    # Step 4: Statistics and CSV
    print_stats(runs, oracle)
    write_reports(runs, entities, oracle, output_dir, run_id)


if __name__ == "__main__":
    main()
