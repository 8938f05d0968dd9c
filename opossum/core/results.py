"""
Analysis Results

Per-TF score records produced by the Fisher, Z-score and KS analyses,
the result set that holds them, and the combination of several result
sets into one sortable, filterable list.
"""

import logging
import math
from dataclasses import asdict, dataclass, fields, replace
from enum import Enum
from operator import attrgetter
from typing import Any, Dict, Hashable, Iterator, List, Optional

import pandas as pd
from pydantic import ValidationError as PydanticValidationError

from ..models.schemas import ResultListParams
from .exceptions import DuplicateResultError, InvalidParameterError, InvalidSortFieldError
from .tables import id_sort_key

logger = logging.getLogger(__name__)


# =============================================================================
# Result record
# =============================================================================

@dataclass(frozen=True)
class ScoreResult:
    """Scores and supporting counts for one TF (or TF cluster).

    Fields not produced by any of the analyses that ran are None. Fisher
    and KS scores are -ln(p), so larger means more significant, the same
    direction as the Z-score.
    """
    id: Hashable

    # Fisher analysis: entities with / without a site
    t_gene_hits: Optional[int] = None
    t_gene_no_hits: Optional[int] = None
    bg_gene_hits: Optional[int] = None
    bg_gene_no_hits: Optional[int] = None
    fisher_score: Optional[float] = None

    # Z-score analysis: total sites and site nucleotide rates
    t_tfbs_hits: Optional[int] = None
    bg_tfbs_hits: Optional[int] = None
    t_tfbs_rate: Optional[float] = None
    bg_tfbs_rate: Optional[float] = None
    zscore: Optional[float] = None
    zscore_p_value: Optional[float] = None

    # KS analysis
    ks_score: Optional[float] = None
    ks_bg_distribution: Optional[str] = None

    @property
    def fisher_p_value(self) -> Optional[float]:
        """Historical name of ``fisher_score`` (-ln p, not p)."""
        return self.fisher_score

    @property
    def ks_p_value(self) -> Optional[float]:
        """Historical name of ``ks_score`` (-ln p, not p)."""
        return self.ks_score

    @property
    def fisher_probability(self) -> Optional[float]:
        if self.fisher_score is None:
            return None
        return math.exp(-self.fisher_score)

    @property
    def ks_probability(self) -> Optional[float]:
        if self.ks_score is None:
            return None
        return math.exp(-self.ks_score)

    @property
    def has_zero_background(self) -> bool:
        """True if the TF was never seen in the background set."""
        return self.bg_gene_hits == 0 or self.bg_tfbs_hits == 0

    def merge(self, other: "ScoreResult") -> "ScoreResult":
        """New result with the fields ``other`` defines filled in."""
        if other.id != self.id:
            raise ValueError(f"Cannot merge results for different IDs: {self.id} and {other.id}")
        updates = {
            f.name: getattr(other, f.name)
            for f in fields(other)
            if f.name != "id" and getattr(other, f.name) is not None
        }
        return replace(self, **updates)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# =============================================================================
# Sorting
# =============================================================================

class SortField(str, Enum):
    """Fields a result list can be sorted on."""
    ID = "id"
    ZSCORE = "zscore"
    ZSCORE_P_VALUE = "zscore_p_value"
    FISHER_SCORE = "fisher_score"
    KS_SCORE = "ks_score"
    T_GENE_HITS = "t_gene_hits"
    T_GENE_NO_HITS = "t_gene_no_hits"
    BG_GENE_HITS = "bg_gene_hits"
    BG_GENE_NO_HITS = "bg_gene_no_hits"
    T_TFBS_HITS = "t_tfbs_hits"
    BG_TFBS_HITS = "bg_tfbs_hits"
    T_TFBS_RATE = "t_tfbs_rate"
    BG_TFBS_RATE = "bg_tfbs_rate"

    @classmethod
    def parse(cls, name) -> "SortField":
        if isinstance(name, cls):
            return name
        key = str(name).strip().lower()
        key = _SORT_ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            raise InvalidSortFieldError(name, [f.value for f in cls] + sorted(_SORT_ALIASES)) from None

    @property
    def accessor(self):
        return attrgetter(self.value)

    @property
    def descending(self) -> bool:
        """Whether the most significant results come first in descending order.

        IDs and p-values read best ascending; scores, hit counts and rates
        descending.
        """
        return self not in (SortField.ID, SortField.ZSCORE_P_VALUE)


_SORT_ALIASES = {
    "fisher": "fisher_score",
    "fisher_p_value": "fisher_score",
    "z_score": "zscore",
    "z-score": "zscore",
    "ks": "ks_score",
    "ks_p_value": "ks_score",
}


def sort_results(results: List[ScoreResult], sort_by=SortField.ID, reverse: bool = False) -> List[ScoreResult]:
    """
    Sort results on one field.

    Numeric fields sort numerically; results where the field is missing
    always come last, whatever the direction. Ties are broken by ID.
    """
    field = SortField.parse(sort_by)

    if field is SortField.ID:
        return sorted(results, key=lambda r: id_sort_key(r.id), reverse=reverse)

    get = field.accessor
    present = [r for r in results if get(r) is not None]
    missing = [r for r in results if get(r) is None]

    if reverse:
        present.sort(key=lambda r: (-get(r), id_sort_key(r.id)))
    else:
        present.sort(key=lambda r: (get(r), id_sort_key(r.id)))
    missing.sort(key=lambda r: id_sort_key(r.id))

    return present + missing


# =============================================================================
# Result set
# =============================================================================

class CombinedResultSet:
    """
    Collection of ScoreResults keyed by TF ID.

    ``params`` holds reporting context such as the total background and
    target sequence lengths; it takes no part in the scoring.
    """

    def __init__(self, results: Optional[List[ScoreResult]] = None, params: Optional[Dict[str, Any]] = None):
        self._results: Dict[Hashable, ScoreResult] = {}
        self.params: Dict[str, Any] = dict(params or {})

        for result in results or []:
            self.add_result(result)

    def add_result(self, result: ScoreResult) -> ScoreResult:
        if not isinstance(result, ScoreResult):
            raise TypeError(f"Expected ScoreResult, got {type(result).__name__}")
        if result.id in self._results:
            raise DuplicateResultError(result.id)
        self._results[result.id] = result
        return result

    def get_result(self, result_id) -> Optional[ScoreResult]:
        result = self._results.get(result_id)
        if result is None:
            logger.debug(f"No result with ID {result_id}")
        return result

    @property
    def ids(self) -> List[Hashable]:
        return list(self._results)

    def __len__(self) -> int:
        return len(self._results)

    def __contains__(self, result_id) -> bool:
        return result_id in self._results

    def __iter__(self) -> Iterator[ScoreResult]:
        return iter(list(self._results.values()))

    def zero_background_ids(self) -> List[Hashable]:
        """IDs of TFs with no background hits, whose scores may be inflated."""
        return [r.id for r in self._results.values() if r.has_zero_background]

    def get_list(
        self,
        sort_by=None,
        reverse: bool = False,
        num_results=None,
        zscore_cutoff: Optional[float] = None,
        fisher_cutoff: Optional[float] = None,
        ks_cutoff: Optional[float] = None,
    ) -> List[ScoreResult]:
        """
        Get a filtered and sorted list of results.

        Cutoffs are applied first, then the list is sorted, then truncated
        to the top ``num_results``. Results dropped by a cutoff or by the
        truncation are not part of the returned list.

        Args:
            sort_by: Field to sort on (SortField or name), default 'id'
            reverse: Sort in descending order
            num_results: Positive integer, or 'all'/None for no truncation
            zscore_cutoff: Keep results with Z-score >= cutoff
            fisher_cutoff: Keep results with Fisher score (-ln p) >= cutoff
            ks_cutoff: Keep results with KS score (-ln p) >= cutoff

        Returns:
            List of ScoreResult
        """
        try:
            options = ResultListParams(
                sort_by=None if sort_by is None else str(getattr(sort_by, "value", sort_by)),
                reverse=reverse,
                num_results=num_results,
                zscore_cutoff=zscore_cutoff,
                fisher_cutoff=fisher_cutoff,
                ks_cutoff=ks_cutoff,
            )
        except PydanticValidationError as e:
            first = e.errors()[0]
            param = str(first["loc"][0]) if first.get("loc") else "get_list"
            raise InvalidParameterError(param, first.get("input"), first["msg"]) from e

        sort_field = SortField.parse(options.sort_by or SortField.ID)

        cutoffs = [
            (SortField.ZSCORE, options.zscore_cutoff),
            (SortField.FISHER_SCORE, options.fisher_cutoff),
            (SortField.KS_SCORE, options.ks_cutoff),
        ]

        selected = []
        for result in self._results.values():
            include = True
            for field, cutoff in cutoffs:
                if cutoff is None:
                    continue
                value = field.accessor(result)
                if value is None or value < cutoff:
                    include = False
                    break
            if include:
                selected.append(result)

        selected = sort_results(selected, sort_field, options.reverse)

        if options.num_results is not None:
            selected = selected[:options.num_results]

        for result in selected:
            if result.has_zero_background:
                logger.warning(
                    f"TF {result.id} has no background hits; its significance may be overestimated"
                )

        return selected

    def to_dataframe(self) -> pd.DataFrame:
        """One row per result, ordered by ID."""
        columns = [f.name for f in fields(ScoreResult)]
        rows = [r.to_dict() for r in sort_results(list(self._results.values()))]
        return pd.DataFrame(rows, columns=columns)

    def __repr__(self) -> str:
        return f"CombinedResultSet(results={len(self)}, params={self.params})"


# =============================================================================
# Combination
# =============================================================================

def combine_results(
    fisher_results: Optional[CombinedResultSet] = None,
    zscore_results: Optional[CombinedResultSet] = None,
    ks_results: Optional[CombinedResultSet] = None,
) -> CombinedResultSet:
    """
    Merge per-analysis result sets into one, joined on TF ID.

    Every ID present in any input appears exactly once; fields supplied by
    an analysis that did not score the ID stay None.
    """
    sources = [
        ("Fisher", fisher_results),
        ("Z-score", zscore_results),
        ("KS", ks_results),
    ]
    sources = [(name, rs) for name, rs in sources if rs is not None]

    merged: Dict[Hashable, ScoreResult] = {}
    params: Dict[str, Any] = {}

    for name, result_set in sources:
        params.update(result_set.params)
        for result in result_set:
            if result.id in merged:
                merged[result.id] = merged[result.id].merge(result)
            else:
                merged[result.id] = ScoreResult(id=result.id).merge(result)

    for name, result_set in sources:
        absent = [rid for rid in merged if rid not in result_set]
        if absent:
            logger.info(f"{len(absent)} TF IDs have no {name} result")

    return CombinedResultSet(list(merged.values()), params=params)
