"""
TFBS Values Table

Stores, for each (entity, TF) pair, the numeric observations made for the
predicted sites, typically the distance of each site from a reference
position such as a ChIP-seq peak summit. Used by the KS analysis.
"""

import logging
import math
from numbers import Real
from typing import Dict, Hashable, Iterable, List, Optional, Tuple

import pandas as pd

from .exceptions import InvalidParameterError
from .tables import IdRange, IdTable

logger = logging.getLogger(__name__)


def _check_value(value) -> float:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise InvalidParameterError("value", value, "real number")
    value = float(value)
    if math.isnan(value):
        raise InvalidParameterError("value", value, "real number")
    return value


class ValuesTable(IdTable):
    """
    Variable-length lists of observations per (entity, TF) pair.

    The list for a pair that was never recorded is empty, not an error.
    """

    def __init__(
        self,
        entity_ids: Optional[Iterable[Hashable]] = None,
        tf_ids: Optional[Iterable[Hashable]] = None,
    ):
        super().__init__(entity_ids, tf_ids)
        self._values: Dict[Tuple[Hashable, Hashable], List[float]] = {}
        self._value_entities: Dict[Hashable, Dict[Hashable, None]] = {}

    def append_value(self, entity_id, tf_id, value) -> int:
        """Append one observation; returns the number now held for the pair."""
        self._check_mutable()
        value = _check_value(value)
        self._register(entity_id, tf_id)

        values = self._values.setdefault((entity_id, tf_id), [])
        values.append(value)
        self._value_entities.setdefault(tf_id, {})[entity_id] = None

        return len(values)

    def set_values(self, entity_id, tf_id, values: Iterable) -> None:
        """Replace all observations for a pair."""
        self._check_mutable()
        checked = [_check_value(v) for v in values]
        self._register(entity_id, tf_id)

        self._values[(entity_id, tf_id)] = checked
        entities = self._value_entities.setdefault(tf_id, {})
        if checked:
            entities[entity_id] = None
        else:
            entities.pop(entity_id, None)

    def get_values(self, entity_id, tf_id) -> List[float]:
        return list(self._values.get((entity_id, tf_id), []))

    def all_values(self, tf_id) -> List[float]:
        """Every observation for the TF over all entities, as one flat list."""
        values = []
        for entity_id in self._value_entities.get(tf_id, ()):
            values.extend(self._values[(entity_id, tf_id)])
        return values

    def entities_with_values(self, tf_id) -> set:
        return set(self._value_entities.get(tf_id, ()))

    def subset(
        self,
        entity_ids: Optional[Iterable[Hashable]] = None,
        tf_ids: Optional[Iterable[Hashable]] = None,
        entity_range: Optional[IdRange] = None,
        tf_range: Optional[IdRange] = None,
    ) -> "ValuesTable":
        """Get a new values table restricted to some entities/TFs.

        Same selection rules as ``CountsTable.subset``.
        """
        sub_entities, sub_tfs, missing_entities, missing_tfs = self._subset_ids(
            entity_ids, tf_ids, entity_range, tf_range
        )

        subset = ValuesTable(entity_ids=sub_entities, tf_ids=sub_tfs)
        for entity_id in sub_entities:
            for tf_id in sub_tfs:
                values = self._values.get((entity_id, tf_id))
                if values:
                    subset.set_values(entity_id, tf_id, values)

        subset.params = dict(self.params)
        subset.missing_entity_ids = missing_entities
        subset.missing_tf_ids = missing_tfs

        return subset

    def to_dataframe(self) -> pd.DataFrame:
        """Long format table with one row per observation."""
        rows = [
            {"entity_id": entity_id, "tf_id": tf_id, "value": value}
            for (entity_id, tf_id), values in self._values.items()
            for value in values
        ]
        return pd.DataFrame(rows, columns=["entity_id", "tf_id", "value"])
