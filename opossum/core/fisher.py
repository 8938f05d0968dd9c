"""
Fisher Exact Test Analysis

Scores over-representation of each TF by the number of target genes with
at least one binding site, against the same proportion in the background
set, using the one-tailed Fisher exact test.
"""

import logging
import math

from scipy import stats

from .counts import CountsTable
from .exceptions import FisherAnalysisError
from .results import CombinedResultSet, ScoreResult
from .tables import check_tf_universe

logger = logging.getLogger(__name__)


def fisher_score(t_hits: int, t_no_hits: int, bg_hits: int, bg_no_hits: int) -> float:
    """
    -ln(p) of the one-tailed Fisher exact test for target enrichment.

    The 2x2 table is::

                    site     no site
        target      t_hits   t_no_hits
        background  bg_hits  bg_no_hits

    and p is the probability, under the hypergeometric null, of seeing at
    least ``t_hits`` target entities with a site (the "greater"
    alternative). The log survival function is used so that very small
    probabilities do not underflow to zero. An empty target or background
    set gives p = 1, i.e. a score of 0.

    Raises
    ------
    FisherAnalysisError
        If the tail probability cannot be computed for the table.
    """
    if t_hits <= 0:
        return 0.0

    t_total = t_hits + t_no_hits
    total = t_total + bg_hits + bg_no_hits
    total_hits = t_hits + bg_hits

    log_p = stats.hypergeom.logsf(t_hits - 1, total, t_total, total_hits)
    if math.isnan(log_p):
        raise FisherAnalysisError(
            f"No Fisher exact test probability for table "
            f"[[{t_hits}, {t_no_hits}], [{bg_hits}, {bg_no_hits}]]"
        )

    return max(0.0, -float(log_p))


class FisherScorer:
    """
    Fisher exact test over-representation analysis.

    Entities (genes/sequences) are counted as hit or not hit for each TF;
    the number of sites per entity does not matter here.
    """

    def score(self, background: CountsTable, target: CountsTable) -> CombinedResultSet:
        """
        Compute Fisher scores for every TF.

        Args:
            background: Background set TFBS counts
            target: Target set TFBS counts, with the same TF IDs in the
                same order as the background

        Returns:
            CombinedResultSet holding the Fisher fields of each result
        """
        check_tf_universe(background, target)

        background.freeze()
        target.freeze()

        results = CombinedResultSet()

        for tf_id in target.tf_ids:
            if not background.has_tf(tf_id):
                logger.info(f"TF ID {tf_id} does not exist in background set - excluding from analysis")
                continue

            t_hits = target.hit_entity_count(tf_id)
            t_no_hits = target.num_entities - t_hits
            bg_hits = background.hit_entity_count(tf_id)
            bg_no_hits = background.num_entities - bg_hits

            results.add_result(ScoreResult(
                id=tf_id,
                t_gene_hits=t_hits,
                t_gene_no_hits=t_no_hits,
                bg_gene_hits=bg_hits,
                bg_gene_no_hits=bg_no_hits,
                fisher_score=fisher_score(t_hits, t_no_hits, bg_hits, bg_no_hits),
            ))

        results.params["bg_num_entities"] = background.num_entities
        results.params["t_num_entities"] = target.num_entities

        logger.info(f"Computed Fisher scores for {len(results)} TFs")

        return results
