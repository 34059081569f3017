"""
Result Storage

Persists evaluation runs as JSON, exports reports as CSV and training data
as JSONL.
"""

from __future__ import annotations

import json
import logging
import uuid
from pathlib import Path

from rdf_gauge.domain.constants import D3FEND_CONTEXT
from rdf_gauge.domain.entities import (
    BackendFailure,
    ReportRow,
    RetryExhausted,
    RetrySuccess,
    RunSlot,
)
from rdf_gauge.domain.value_objects import (
    Conversation,
    ModelResponse,
    Valid,
    ValidationContext,
    conversation_from_dicts,
    conversation_to_dicts,
    namespace_preamble,
)
from rdf_gauge.scoring.report import report_frame
from rdf_gauge.validation import validate_turtle

logger = logging.getLogger(__name__)


def slot_to_dict(slot: RunSlot) -> dict | None:
    """Serializable form of a run slot (triple sets are re-derived on load)"""
    if slot is None:
        return None
    if isinstance(slot, RetrySuccess):
        return {
            "status": "success",
            "model_name": slot.response.model_name,
            "latency_ms": slot.response.latency_ms,
            "input_tokens": slot.response.input_tokens,
            "output_tokens": slot.response.output_tokens,
            "retries_remaining": slot.retries_remaining,
            "attempts": slot.attempts,
            "messages": conversation_to_dicts(slot.conversation),
        }
    if isinstance(slot, RetryExhausted):
        return {
            "status": "exhausted",
            "last_error": slot.last_error,
            "attempts": slot.attempts,
            "messages": conversation_to_dicts(slot.conversation),
        }
    if isinstance(slot, BackendFailure):
        return {
            "status": "failure",
            "message": slot.message,
            "kind": slot.kind,
            "status_code": slot.status_code,
            "attempts": slot.attempts,
        }
    raise TypeError(f"Unsupported run slot: {type(slot).__name__}")


def slot_from_dict(data: dict | None, context: ValidationContext = D3FEND_CONTEXT) -> RunSlot:
    """
    Rebuild a run slot

    A success's triple set is re-derived by parsing its stored conversation.

    Raises:
        ValueError: If a stored success no longer parses, or the status is unknown
    """
    if data is None:
        return None
    status = data.get("status")
    if status == "success":
        conversation = conversation_from_dicts(data["messages"])
        completion = conversation[-1]
        outcome = validate_turtle(namespace_preamble(conversation) + completion.content, context)
        if not isinstance(outcome, Valid):
            raise ValueError(f"Stored success does not parse: {outcome.reason}")
        return RetrySuccess(
            response=ModelResponse(
                candidates=[completion],
                model_name=data.get("model_name", ""),
                latency_ms=data.get("latency_ms", 0),
                input_tokens=data.get("input_tokens", 0),
                output_tokens=data.get("output_tokens", 0),
            ),
            triples=outcome.triples,
            retries_remaining=data["retries_remaining"],
            attempts=data["attempts"],
            conversation=conversation,
        )
    if status == "exhausted":
        return RetryExhausted(
            last_error=data["last_error"],
            attempts=data["attempts"],
            conversation=conversation_from_dicts(data.get("messages", [])),
        )
    if status == "failure":
        return BackendFailure(
            message=data["message"],
            kind=data["kind"],
            status_code=data.get("status_code"),
            attempts=data.get("attempts", 1),
        )
    raise ValueError(f"Unknown run slot status: {status!r}")


def save_run(run: list[RunSlot], directory: str | Path) -> Path:
    """
    Write one run to <directory>/<uuid>.json

    Returns:
        Path of the written file
    """
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"{uuid.uuid4()}.json"
    with open(path, "w", encoding="utf-8") as f:
        json.dump([slot_to_dict(slot) for slot in run], f, ensure_ascii=False, indent=2)
    logger.info("Saved run with %d slots to %s", len(run), path)
    return path


def load_run(path: str | Path, context: ValidationContext = D3FEND_CONTEXT) -> list[RunSlot]:
    """
    Read a run written by save_run

    Raises:
        FileNotFoundError: If the file does not exist
    """
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return [slot_from_dict(item, context) for item in data]


def model_directory_name(model_name: str) -> str:
    """Directory name of a model's runs (model names may contain / and :)"""
    return model_name.replace("/", "_").replace(":", "_")


def find_run_files(
    run_dir: str | Path,
    tests: list[str] | None = None,
) -> dict[str, dict[str, Path]]:
    """
    Locate the runs saved under <run_dir>/<test>/<model>/<uuid>.json

    Args:
        run_dir: Directory of one evaluation batch
        tests: Test labels to include (all stored tests if not specified)

    Returns:
        {test label: {model directory name: run file}} suitable for
        load_evals_report. When a model directory holds several runs the
        newest one is used.

    Raises:
        FileNotFoundError: If run_dir is not a directory
    """
    run_dir = Path(run_dir)
    if not run_dir.is_dir():
        raise FileNotFoundError(f"Run directory does not exist: {run_dir}")

    if tests is None:
        tests = sorted(p.name for p in run_dir.iterdir() if p.is_dir())

    paths: dict[str, dict[str, Path]] = {}
    for test in tests:
        test_dir = run_dir / test
        if not test_dir.is_dir():
            logger.warning("No stored runs for test %s in %s", test, run_dir)
            continue
        for model_dir in sorted(p for p in test_dir.iterdir() if p.is_dir()):
            files = sorted(model_dir.glob("*.json"), key=lambda p: p.stat().st_mtime)
            if not files:
                continue
            if len(files) > 1:
                logger.warning("%d runs in %s, using the newest", len(files), model_dir)
            paths.setdefault(test, {})[model_dir.name] = files[-1]
    return paths


def load_evals_report(
    paths: dict[str, dict[str, str | Path]],
    context: ValidationContext = D3FEND_CONTEXT,
) -> dict[str, dict[str, list[RunSlot]]]:
    """
    Load stored runs for a report

    Args:
        paths: {test label: {model name: run file}}

    Returns:
        {test label: {model name: run}}
    """
    return {
        test: {model: load_run(path, context) for model, path in models.items()}
        for test, models in paths.items()
    }


def write_jsonl(conversations: list[Conversation], file_path: str | Path) -> Path:
    """
    Write training examples, one {"messages": [...]} object per line

    Returns:
        Path of the written file
    """
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    with open(file_path, "w", encoding="utf-8") as f:
        for conversation in conversations:
            f.write(json.dumps({"messages": conversation_to_dicts(conversation)}, ensure_ascii=False))
            f.write("\n")
    return file_path


def export_csv(rows: list[ReportRow], file_path: str | Path) -> Path:
    """Export report rows to CSV with the stable column set"""
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    report_frame(rows).to_csv(file_path, index=False)
    return file_path
