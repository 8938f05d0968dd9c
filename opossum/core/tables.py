"""
Shared bookkeeping for the counts and values tables.

Both tables record which entity (gene/sequence) IDs and TF (or TF cluster)
IDs they know about, in first-seen order, and both support freezing and
sub-setting by explicit ID lists or ID ranges.
"""

import logging
from typing import Any, Dict, Hashable, Iterable, List, Optional, Tuple

import numpy as np

from .exceptions import FrozenTableError, TFUniverseMismatchError

logger = logging.getLogger(__name__)

IdRange = Tuple[Optional[Hashable], Optional[Hashable]]


def id_sort_key(id_value) -> Tuple[int, int, str]:
    """Ordering key for entity/TF IDs.

    Integer-like IDs compare numerically ("9" < "10"), everything else
    compares as a string after all integer-like IDs.
    """
    if isinstance(id_value, (int, np.integer)) and not isinstance(id_value, bool):
        return (0, int(id_value), str(id_value))

    text = str(id_value)
    stripped = text[1:] if text[:1] in "+-" else text
    if stripped.isdigit():
        return (0, int(text), text)

    return (1, 0, text)


def check_tf_universe(background: "IdTable", target: "IdTable") -> None:
    """Check paired tables have the same TF IDs in the same order.

    Raises
    ------
    TFUniverseMismatchError
        Naming the first (1-based) position where the IDs differ.
    """
    bg_ids = background.tf_ids
    t_ids = target.tf_ids

    for idx, (bg_id, t_id) in enumerate(zip(bg_ids, t_ids)):
        if bg_id != t_id:
            raise TFUniverseMismatchError(idx + 1, bg_id, t_id)

    if len(bg_ids) != len(t_ids):
        position = min(len(bg_ids), len(t_ids)) + 1
        raise TFUniverseMismatchError(
            position,
            bg_ids[position - 1] if len(bg_ids) >= position else None,
            t_ids[position - 1] if len(t_ids) >= position else None,
            reason=(
                f"background has {len(bg_ids)} TFs, target has {len(t_ids)}"
                f" (first unmatched position {position})"
            ),
        )


def select_ids(
    all_ids: List[Hashable],
    ids: Optional[Iterable[Hashable]] = None,
    id_range: Optional[IdRange] = None,
    kind: str = "ID",
) -> Tuple[List[Hashable], List[Hashable]]:
    """Choose the IDs a subset should keep.

    Args:
        all_ids: IDs of the source table, in table order
        ids: Explicit IDs to keep; IDs not in the source are reported
        id_range: (start, end) bounds, either may be None; bounds outside
            the existing IDs are clamped to what is available
        kind: Label used in log messages

    Returns:
        Tuple of (selected IDs, requested IDs missing from the source)
    """
    if ids is not None:
        known = set(all_ids)
        selected, missing = [], []
        for id_value in ids:
            if id_value in known:
                selected.append(id_value)
            else:
                logger.warning(f"{kind} ID {id_value} not in super set, omitting from subset")
                missing.append(id_value)
        return selected, missing

    if id_range is None or (id_range[0] is None and id_range[1] is None):
        return list(all_ids), []

    start, end = id_range
    start_key = id_sort_key(start) if start is not None else None
    end_key = id_sort_key(end) if end is not None else None

    selected = []
    for id_value in all_ids:
        key = id_sort_key(id_value)
        if start_key is not None and key < start_key:
            continue
        if end_key is not None and key > end_key:
            continue
        selected.append(id_value)

    return selected, []


class IdTable:
    """
    Base class holding entity/TF ID membership.

    IDs are kept in insertion order. Once ``freeze()`` has been called the
    table is read-only; scorers freeze the tables they are given.
    """

    def __init__(
        self,
        entity_ids: Optional[Iterable[Hashable]] = None,
        tf_ids: Optional[Iterable[Hashable]] = None,
    ):
        self._entities: Dict[Hashable, None] = {}
        self._tfs: Dict[Hashable, None] = {}
        self._frozen = False

        self.params: Dict[str, Any] = {}
        self.missing_entity_ids: List[Hashable] = []
        self.missing_tf_ids: List[Hashable] = []

        for entity_id in entity_ids or []:
            self._entities.setdefault(entity_id, None)
        for tf_id in tf_ids or []:
            self._tfs.setdefault(tf_id, None)

    # ------------------------------------------------------------------
    # Membership
    # ------------------------------------------------------------------

    @property
    def entity_ids(self) -> List[Hashable]:
        return list(self._entities)

    @property
    def tf_ids(self) -> List[Hashable]:
        return list(self._tfs)

    @property
    def num_entities(self) -> int:
        return len(self._entities)

    @property
    def num_tfs(self) -> int:
        return len(self._tfs)

    def has_entity(self, entity_id) -> bool:
        return entity_id in self._entities

    def has_tf(self, tf_id) -> bool:
        return tf_id in self._tfs

    def exists(self, entity_id, tf_id) -> bool:
        """Whether both the entity and the TF are known to this table."""
        return self.has_entity(entity_id) and self.has_tf(tf_id)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self):
        """Make the table read-only and return it."""
        self._frozen = True
        return self

    def _check_mutable(self):
        if self._frozen:
            raise FrozenTableError(f"{type(self).__name__} is frozen and cannot be modified")

    def _register(self, entity_id, tf_id):
        if entity_id is None or tf_id is None:
            raise ValueError("Entity ID and TF ID must not be None")
        self._entities.setdefault(entity_id, None)
        self._tfs.setdefault(tf_id, None)

    def _subset_ids(self, entity_ids, tf_ids, entity_range, tf_range):
        sub_entities, missing_entities = select_ids(
            self.entity_ids, entity_ids, entity_range, kind="Entity"
        )
        sub_tfs, missing_tfs = select_ids(self.tf_ids, tf_ids, tf_range, kind="TF")
        return sub_entities, sub_tfs, missing_entities, missing_tfs

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(entities={self.num_entities}, "
            f"tfs={self.num_tfs}, frozen={self._frozen})"
        )
