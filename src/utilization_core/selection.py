# src/utilization_core/selection.py
"""
Row selection tracking for the utilization overview.

NO STREAMLIT IMPORTS ALLOWED IN THIS MODULE.

SelectionTracker is the only mutable piece of core state. It holds RowKeys,
not records, so a selection survives filter and sort changes even while a
key is hidden. A key leaves the set only through an explicit user action or
when it disappears from the input set (see prune()).
"""
from __future__ import annotations

import logging
from typing import AbstractSet, FrozenSet, Iterable, Iterator, Set

logger = logging.getLogger(__name__)


class SelectionTracker:
    """
    Set of selected RowKeys for one logical session.

    Never share an instance across sessions.
    """

    def __init__(self, keys: Iterable[str] = ()) -> None:
        self._keys: Set[str] = set(keys)

    def __contains__(self, key: object) -> bool:
        return key in self._keys

    def __len__(self) -> int:
        return len(self._keys)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._keys))

    def __repr__(self) -> str:
        return f"SelectionTracker(count={len(self._keys)})"

    @property
    def keys(self) -> FrozenSet[str]:
        """Immutable snapshot of the current selection."""
        return frozenset(self._keys)

    def toggle(self, key: str, included: bool) -> None:
        """Add (included=True) or remove (included=False) a single key."""
        if included:
            self._keys.add(key)
        else:
            self._keys.discard(key)

    def select_all_visible(self, visible_keys: Iterable[str]) -> None:
        """
        Replace the selection with exactly the visible keys.

        This is a replacement, not a union: keys selected earlier but not
        currently visible are dropped.
        """
        self._keys = set(visible_keys)

    def clear(self) -> None:
        self._keys.clear()

    def is_all_visible_selected(self, visible_keys: Iterable[str]) -> bool:
        """
        Header checkbox state.

        An empty visible set yields False so the "select all" box is never
        vacuously checked.
        """
        keys = list(visible_keys)
        if not keys:
            return False
        return all(key in self._keys for key in keys)

    def prune(self, existing_keys: AbstractSet[str]) -> FrozenSet[str]:
        """
        Drop selected keys that are no longer present in the input set.

        Args:
            existing_keys: RowKeys of the current input records

        Returns:
            The keys that were removed
        """
        removed = frozenset(k for k in self._keys if k not in existing_keys)
        if removed:
            self._keys -= removed
            logger.debug("Pruned %d stale selection key(s)", len(removed))
        return removed
