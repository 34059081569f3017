"""
Scoring sub-package

Provides run statistics, hallucination scoring and report flattening.
"""

from rdf_gauge.scoring.report import (
    dataset_for_model,
    flatten,
    report_frame,
    report_graph,
    to_jsonld,
)
from rdf_gauge.scoring.stats import (
    compute_stats,
    hallucination_score,
    summarize_runs,
    validity_ratio,
)

__all__ = [
    # report
    "dataset_for_model",
    "flatten",
    "report_frame",
    "report_graph",
    "to_jsonld",
    # stats
    "compute_stats",
    "hallucination_score",
    "summarize_runs",
    "validity_ratio",
]
