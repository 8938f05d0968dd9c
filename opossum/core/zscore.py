"""
Z-score Analysis

Scores over-representation of each TF by comparing the number of binding
site nucleotides in the target set with the number expected from the
background site nucleotide rate, using a continuity-corrected normal
approximation to the binomial.
"""

import logging
from typing import Dict, Hashable, Mapping, Optional, Tuple

import numpy as np
from scipy import stats

from .counts import CountsTable
from .exceptions import InvalidParameterError, MissingWidthError, validate_positive_length
from .results import CombinedResultSet, ScoreResult
from .tables import check_tf_universe

logger = logging.getLogger(__name__)


def compute_zscore(
    t_hits: int,
    bg_hits: int,
    width: int,
    t_total_length: int,
    bg_total_length: int,
) -> Tuple[Optional[float], Optional[float]]:
    """
    Z-score and upper tail p-value for one TF.

    Args:
        t_hits: Total target sites for the TF
        bg_hits: Total background sites for the TF
        width: TF profile width in nucleotides
        t_total_length: Nucleotides searched in the target set
        bg_total_length: Nucleotides searched in the background set

    Returns:
        Tuple of (z, p_value); both None when the standard deviation is 0
        (background rate of exactly 0 or 1)
    """
    # site nucleotides
    n_t = width * t_hits
    n_b = width * bg_hits

    r_b = n_b / bg_total_length

    # target to background size ratio, may be > 1
    c = t_total_length / bg_total_length

    variance = t_total_length * r_b * (1 - r_b)
    if variance <= 0:
        return None, None

    s = np.sqrt(variance)

    # expected target site nucleotides
    n_e = n_b * c

    z = (n_t - n_e - 0.5) / s
    p_value = stats.norm.sf(z)

    return float(z), float(p_value)


class ZscoreScorer:
    """
    Z-score over-representation analysis.

    Unlike the Fisher analysis this counts every site, so a gene carrying
    many sites for a TF weighs more than one carrying a single site.
    """

    def score(
        self,
        background: CountsTable,
        target: CountsTable,
        bg_total_length: int,
        t_total_length: int,
        tf_widths: Mapping[Hashable, int],
    ) -> CombinedResultSet:
        """
        Compute Z-scores for every TF.

        Args:
            background: Background set TFBS counts
            target: Target set TFBS counts
            bg_total_length: Total nucleotides searched in the background set
            t_total_length: Total nucleotides searched in the target set
            tf_widths: Profile width (nucleotides) of every TF

        Returns:
            CombinedResultSet holding the Z-score fields of each result
        """
        validate_positive_length(bg_total_length, "bg_total_length")
        validate_positive_length(t_total_length, "t_total_length")

        check_tf_universe(background, target)

        widths = self._check_widths(target.tf_ids, tf_widths)

        background.freeze()
        target.freeze()

        results = CombinedResultSet()

        for tf_id in target.tf_ids:
            if not background.has_tf(tf_id):
                logger.info(f"TF ID {tf_id} does not exist in background set - excluding from analysis")
                continue

            width = widths[tf_id]

            t_hits = target.total_hits(tf_id)
            bg_hits = background.total_hits(tf_id)

            z, p_value = compute_zscore(t_hits, bg_hits, width, t_total_length, bg_total_length)
            if z is None:
                logger.info(f"Zero standard deviation for TF {tf_id}; Z-score left undefined")

            results.add_result(ScoreResult(
                id=tf_id,
                t_gene_hits=target.hit_entity_count(tf_id),
                bg_gene_hits=background.hit_entity_count(tf_id),
                t_tfbs_hits=t_hits,
                bg_tfbs_hits=bg_hits,
                t_tfbs_rate=width * t_hits / t_total_length,
                bg_tfbs_rate=width * bg_hits / bg_total_length,
                zscore=z,
                zscore_p_value=p_value,
            ))

        results.params["bg_seq_length"] = bg_total_length
        results.params["t_seq_length"] = t_total_length

        logger.info(f"Computed Z-scores for {len(results)} TFs")

        return results

    @staticmethod
    def _check_widths(tf_ids, tf_widths: Mapping[Hashable, int]) -> Dict[Hashable, int]:
        if tf_widths is None:
            raise MissingWidthError(list(tf_ids))

        missing = [tf_id for tf_id in tf_ids if tf_widths.get(tf_id) is None]
        if missing:
            raise MissingWidthError(missing)

        widths = {}
        for tf_id in tf_ids:
            width = tf_widths[tf_id]
            if isinstance(width, bool) or not isinstance(width, (int, np.integer)) or width <= 0:
                raise InvalidParameterError(f"width of TF {tf_id}", width, "positive integer")
            widths[tf_id] = int(width)

        return widths
