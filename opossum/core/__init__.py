"""
Core analysis modules for oPOSSUM.

Includes:
- TFBS counts and values tables
- Fisher exact test, Z-score and Kolmogorov-Smirnov analyses
- Result combination, sorting and filtering
- File I/O and batch execution
"""

# Input tables
from .counts import CountsTable
from .values import ValuesTable

# Analyses
from .fisher import FisherScorer, fisher_score
from .zscore import ZscoreScorer, compute_zscore
from .ks import KSScorer

# Results
from .results import CombinedResultSet, ScoreResult, SortField, combine_results, sort_results

# Orchestration
from .analysis import AnalysisOutcome, run_analysis
from .batch import AnalysisJob, BatchRunner, JobStatus

# File I/O
from .io import CountsFile, read_counts, read_values, write_counts, write_results, write_values

__all__ = [
    # Tables
    "CountsTable",
    "ValuesTable",

    # Analyses
    "FisherScorer",
    "fisher_score",
    "ZscoreScorer",
    "compute_zscore",
    "KSScorer",

    # Results
    "CombinedResultSet",
    "ScoreResult",
    "SortField",
    "combine_results",
    "sort_results",

    # Orchestration
    "AnalysisOutcome",
    "run_analysis",
    "AnalysisJob",
    "BatchRunner",
    "JobStatus",

    # I/O
    "CountsFile",
    "read_counts",
    "read_values",
    "write_counts",
    "write_results",
    "write_values",
]
