"""
TFBS Counts Table

Stores how many binding sites for each TF (or TF cluster) were found on
each gene/sequence of one sample set (target or background). Two such
tables, one per set, are the input of the Fisher and Z-score analyses.
"""

import logging
from typing import Dict, Hashable, Iterable, List, Optional, Tuple

import numpy as np
import pandas as pd

from .exceptions import InvalidParameterError
from .tables import IdRange, IdTable

logger = logging.getLogger(__name__)


def _check_count(count) -> int:
    if isinstance(count, bool) or not isinstance(count, (int, np.integer)):
        raise InvalidParameterError("count", count, "non-negative integer")
    if count < 0:
        raise InvalidParameterError("count", count, "non-negative integer")
    return int(count)


class CountsTable(IdTable):
    """
    Count of TFBS hits for every (entity, TF) pair.

    Reading a count for an unknown entity or TF returns 0; the membership
    queries (``has_entity``, ``has_tf``, ``exists``) are the only way to
    tell a recorded zero from a pair that was never mentioned.

    Example:
        >>> counts = CountsTable(entity_ids=["g1", "g2"], tf_ids=["MA0001"])
        >>> counts.set_count("g1", "MA0001", 3)
        >>> counts.total_hits("MA0001")
        3
        >>> counts.hit_entity_count("MA0001")
        1
    """

    def __init__(
        self,
        entity_ids: Optional[Iterable[Hashable]] = None,
        tf_ids: Optional[Iterable[Hashable]] = None,
    ):
        """
        Initialize a counts table.

        Args:
            entity_ids: Gene/sequence IDs to register up front
            tf_ids: TF IDs to register up front. When both lists are given
                every pair of the cross product starts with a count of 0.
        """
        super().__init__(entity_ids, tf_ids)
        self._counts: Dict[Tuple[Hashable, Hashable], int] = {}
        self._hit_entities: Dict[Hashable, Dict[Hashable, None]] = {}

    def set_count(self, entity_id, tf_id, count: int) -> None:
        """Record (or overwrite) the number of sites for a TF on an entity."""
        self._check_mutable()
        count = _check_count(count)
        self._register(entity_id, tf_id)

        self._counts[(entity_id, tf_id)] = count

        hits = self._hit_entities.setdefault(tf_id, {})
        if count > 0:
            hits[entity_id] = None
        else:
            hits.pop(entity_id, None)

    def set_counts(self, rows: Iterable[Tuple[Hashable, Hashable, int]]) -> None:
        """Bulk load counts from (entity ID, TF ID, count) rows."""
        for entity_id, tf_id, count in rows:
            self.set_count(entity_id, tf_id, count)

    def get_count(self, entity_id, tf_id) -> int:
        return self._counts.get((entity_id, tf_id), 0)

    def total_hits(self, tf_id) -> int:
        """Total number of sites for a TF over all entities."""
        return sum(
            self._counts[(entity_id, tf_id)]
            for entity_id in self._hit_entities.get(tf_id, ())
        )

    def entities_with_hit(self, tf_id) -> set:
        """Entities with at least one site for the TF."""
        return set(self._hit_entities.get(tf_id, ()))

    def hit_entity_count(self, tf_id) -> int:
        """Number of entities with at least one site for the TF."""
        return len(self._hit_entities.get(tf_id, ()))

    def no_hit_entity_count(self, tf_id) -> int:
        """Number of entities without any site for the TF."""
        return self.num_entities - self.hit_entity_count(tf_id)

    # oPOSSUM 2 names
    tfbs_count = total_hits
    tfbs_gene_count = hit_entity_count

    def subset(
        self,
        entity_ids: Optional[Iterable[Hashable]] = None,
        tf_ids: Optional[Iterable[Hashable]] = None,
        entity_range: Optional[IdRange] = None,
        tf_range: Optional[IdRange] = None,
    ) -> "CountsTable":
        """
        Get a new, independent counts table restricted to some entities/TFs.

        Explicit ID lists take precedence over ranges. Requested IDs that
        are not in this table are recorded on the new table as
        ``missing_entity_ids`` / ``missing_tf_ids``.

        Args:
            entity_ids: Explicit entity IDs to keep
            tf_ids: Explicit TF IDs to keep
            entity_range: (start, end) entity ID bounds, inclusive
            tf_range: (start, end) TF ID bounds, inclusive

        Returns:
            New CountsTable
        """
        sub_entities, sub_tfs, missing_entities, missing_tfs = self._subset_ids(
            entity_ids, tf_ids, entity_range, tf_range
        )

        subset = CountsTable(entity_ids=sub_entities, tf_ids=sub_tfs)
        for entity_id in sub_entities:
            for tf_id in sub_tfs:
                count = self.get_count(entity_id, tf_id)
                if count:
                    subset.set_count(entity_id, tf_id, count)

        subset.params = dict(self.params)
        subset.missing_entity_ids = missing_entities
        subset.missing_tf_ids = missing_tfs

        return subset

    def to_dataframe(self) -> pd.DataFrame:
        """Dense entity x TF count matrix."""
        data = np.zeros((self.num_entities, self.num_tfs), dtype=np.int64)
        entity_idx = {e: i for i, e in enumerate(self._entities)}
        tf_idx = {t: j for j, t in enumerate(self._tfs)}

        for (entity_id, tf_id), count in self._counts.items():
            data[entity_idx[entity_id], tf_idx[tf_id]] = count

        return pd.DataFrame(data, index=self.entity_ids, columns=self.tf_ids)

    @classmethod
    def from_dataframe(cls, df: pd.DataFrame) -> "CountsTable":
        """Build a counts table from an entity x TF count matrix."""
        counts = cls(entity_ids=list(df.index), tf_ids=list(df.columns))
        for entity_id, row in df.iterrows():
            for tf_id, count in row.items():
                if count:
                    counts.set_count(entity_id, tf_id, int(count))
        return counts
