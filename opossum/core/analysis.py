"""
Over-representation Analysis

Runs the Fisher, Z-score and (optionally) KS analyses for one target set
against one background set and combines their results. A failure in one
analysis is recorded and does not stop the others.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Hashable, List, Mapping, Optional, Union

from ..config import settings
from ..models.schemas import AnalysisParams
from .counts import CountsTable
from .exceptions import OPOSSUMError
from .fisher import FisherScorer
from .ks import KSScorer
from .results import CombinedResultSet, combine_results
from .values import ValuesTable
from .zscore import ZscoreScorer

logger = logging.getLogger(__name__)


@dataclass
class AnalysisOutcome:
    """Combined results of one analysis run."""
    results: CombinedResultSet
    succeeded: List[str] = field(default_factory=list)
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def complete(self) -> bool:
        return not self.errors

    @property
    def zero_background_ids(self) -> List[Hashable]:
        return self.results.zero_background_ids()

    def to_dict(self) -> Dict:
        return {
            "num_results": len(self.results),
            "succeeded": list(self.succeeded),
            "errors": dict(self.errors),
            "params": dict(self.results.params),
        }


def run_analysis(
    background: CountsTable,
    target: CountsTable,
    params: Union[AnalysisParams, Mapping],
    tf_widths: Optional[Mapping[Hashable, int]] = None,
    background_values: Optional[ValuesTable] = None,
    target_values: Optional[ValuesTable] = None,
) -> AnalysisOutcome:
    """
    Score TFBS over-representation of a target set against a background.

    Args:
        background: Background set TFBS counts
        target: Target set TFBS counts
        params: AnalysisParams (or a mapping of its fields)
        tf_widths: TF profile widths, required for the Z-score analysis
        background_values: Background site positions for the two-sample
            KS test; without them (and without ``params.ks_distribution``)
            the target is tested against ``settings.default_ks_distribution``
        target_values: Target site positions for the KS test

    Returns:
        AnalysisOutcome with the combined results of every analysis that
        succeeded and the error message of every one that failed
    """
    if not isinstance(params, AnalysisParams):
        params = AnalysisParams(**params)

    outcome_sets: Dict[str, CombinedResultSet] = {}
    errors: Dict[str, str] = {}

    def _run(name: str, func):
        logger.info(f"Computing {name} scores")
        try:
            outcome_sets[name] = func()
        except OPOSSUMError as e:
            logger.error(f"Error performing {name} analysis: {e}")
            errors[name] = str(e)

    if params.run_fisher:
        _run("fisher", lambda: FisherScorer().score(background, target))

    if params.run_zscore:
        _run("zscore", lambda: ZscoreScorer().score(
            background, target, params.bg_total_length, params.t_total_length, tf_widths
        ))

    if params.run_ks:
        if target_values is None:
            errors["ks"] = "No target values provided for KS analysis"
            logger.error(errors["ks"])
        elif background_values is not None and not params.ks_distribution:
            _run("ks", lambda: KSScorer().score_with_background_values(background_values, target_values))
        else:
            # named distribution, else the configured default when there is no background sample
            distribution = params.ks_distribution or settings.default_ks_distribution
            _run("ks", lambda: KSScorer().score_with_distribution(
                distribution, target_values, params.ks_distribution_args
            ))

    logger.info("Combining analysis results")
    combined = combine_results(
        fisher_results=outcome_sets.get("fisher"),
        zscore_results=outcome_sets.get("zscore"),
        ks_results=outcome_sets.get("ks"),
    )
    combined.params.setdefault("bg_seq_length", params.bg_total_length)
    combined.params.setdefault("t_seq_length", params.t_total_length)

    return AnalysisOutcome(results=combined, succeeded=list(outcome_sets), errors=errors)
