"""
Kolmogorov-Smirnov Analysis

Tests whether the positions of predicted sites for each TF (e.g. distances
to a ChIP-seq peak summit) are distributed differently in the target set
than in the background set, or than a named reference distribution.
"""

import logging
from typing import Sequence, Tuple, Union

import numpy as np
from scipy import stats

from .exceptions import UnknownDistributionError
from .results import CombinedResultSet, ScoreResult
from .tables import check_tf_universe
from .values import ValuesTable

logger = logging.getLogger(__name__)

BACKGROUND_DATA_LABEL = "data"

# R style cumulative distribution names
_DISTRIBUTION_ALIASES = {
    "punif": "uniform",
    "pnorm": "norm",
    "pexp": "expon",
    "normal": "norm",
    "exponential": "expon",
}


def resolve_distribution(name: str) -> str:
    """Map a reference distribution name onto a scipy.stats distribution name."""
    if not isinstance(name, str) or not name.strip():
        raise UnknownDistributionError(str(name))

    key = name.strip().lower()
    key = _DISTRIBUTION_ALIASES.get(key, key)

    if not isinstance(getattr(stats, key, None), stats.rv_continuous):
        raise UnknownDistributionError(name)

    return key


def p_value_to_score(p_value: float) -> float:
    """-ln(p), with p floored at the smallest positive double."""
    p_value = min(1.0, max(float(p_value), np.finfo(float).tiny))
    return -float(np.log(p_value))


class KSScorer:
    """
    Kolmogorov-Smirnov positional distribution analysis.

    TFs without observations (in either sample for the two-sample test)
    are left out of the results.
    """

    def score(
        self,
        background: Union[ValuesTable, str],
        target: ValuesTable,
        distribution_args: Sequence[float] = (),
    ) -> CombinedResultSet:
        """
        Run the two-sample test against background values, or the
        one-sample test when ``background`` names a distribution.
        """
        if isinstance(background, str):
            return self.score_with_distribution(background, target, distribution_args)
        return self.score_with_background_values(background, target)

    def score_with_background_values(self, background: ValuesTable, target: ValuesTable) -> CombinedResultSet:
        """
        Two-sample KS test of target vs. background values for every TF.

        Args:
            background: Background set values
            target: Target set values, with the same TF IDs in the same
                order as the background

        Returns:
            CombinedResultSet holding the KS fields of each result
        """
        check_tf_universe(background, target)

        background.freeze()
        target.freeze()

        results = CombinedResultSet()

        for tf_id in target.tf_ids:
            t_vals = target.all_values(tf_id)
            bg_vals = background.all_values(tf_id)

            if not t_vals or not bg_vals:
                logger.info(f"Skipping KS test for TF {tf_id}: no values")
                continue

            test = stats.ks_2samp(t_vals, bg_vals)

            results.add_result(ScoreResult(
                id=tf_id,
                ks_score=p_value_to_score(test.pvalue),
                ks_bg_distribution=BACKGROUND_DATA_LABEL,
            ))

        logger.info(f"Computed KS scores for {len(results)} TFs")

        return results

    def score_with_distribution(
        self,
        distribution: str,
        target: ValuesTable,
        distribution_args: Sequence[float] = (),
    ) -> CombinedResultSet:
        """
        One-sample KS test of target values against a named distribution.

        Args:
            distribution: scipy.stats distribution name ('uniform', 'norm',
                ...) or R style name ('punif', 'pnorm', ...)
            target: Target set values
            distribution_args: Shape/location/scale arguments passed to
                the distribution, e.g. (loc, scale) for 'uniform'

        Returns:
            CombinedResultSet holding the KS fields of each result
        """
        dist_name = resolve_distribution(distribution)
        args: Tuple[float, ...] = tuple(distribution_args or ())

        target.freeze()

        results = CombinedResultSet()

        for tf_id in target.tf_ids:
            t_vals = target.all_values(tf_id)

            if not t_vals:
                logger.info(f"Skipping KS test for TF {tf_id}: no values")
                continue

            test = stats.kstest(t_vals, dist_name, args=args)

            results.add_result(ScoreResult(
                id=tf_id,
                ks_score=p_value_to_score(test.pvalue),
                ks_bg_distribution=distribution,
            ))

        logger.info(f"Computed KS scores against '{distribution}' for {len(results)} TFs")

        return results
