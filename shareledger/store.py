"""
store.py - In-memory Ledger Store

Key-value storage for the asset, shareholder, pending-balance and
shareholder-index record families plus the next-id counter. Records are
immutable values (frozen dataclasses, ints, tuples), so reads never hand out
anything a caller could mutate behind the store's back.

commit() is the only batch write: it checks every change's old_value against
the current record first and applies nothing if any of them is stale.
"""

from __future__ import annotations
from typing import Any, Dict, Iterable, List, Optional

from .core import COUNTER_KEY, RecordChange, RecordKey, StaleRecord


class LedgerStore:
    """
    Atomic key-value store keyed by RecordKey.

    Not durable: a production deployment substitutes a store with the same
    get/set/commit surface backed by real storage.
    """

    def __init__(self):
        self._records: Dict[RecordKey, Any] = {COUNTER_KEY: 1}

    def get(self, key: RecordKey, default: Any = None) -> Any:
        return self._records.get(key, default)

    def set(self, key: RecordKey, value: Any) -> None:
        """Write a single record. A value of None deletes it."""
        if value is None:
            self._records.pop(key, None)
        else:
            self._records[key] = value

    def __contains__(self, key: RecordKey) -> bool:
        return key in self._records

    def keys(self, family: Optional[str] = None) -> List[RecordKey]:
        """Keys in the store, optionally restricted to one family."""
        return [k for k in self._records if family is None or k.family == family]

    def find_stale(self, changes: Iterable[RecordChange]) -> Optional[RecordChange]:
        """Return the first change whose old_value no longer matches, or None."""
        for change in changes:
            if self._records.get(change.key) != change.old_value:
                return change
        return None

    def commit(self, changes: Iterable[RecordChange]) -> None:
        """
        Apply a batch of record changes atomically.

        Raises:
            StaleRecord: If any change's old_value differs from the stored
                         value. No record is written in that case.
        """
        changes = tuple(changes)
        stale = self.find_stale(changes)
        if stale is not None:
            raise StaleRecord(
                f"{stale.key!r} changed: expected {stale.old_value!r}, "
                f"found {self._records.get(stale.key)!r}"
            )
        for change in changes:
            self.set(change.key, change.new_value)

    def clone(self) -> LedgerStore:
        """Independent copy. Record values are immutable, so a shallow copy suffices."""
        cloned = LedgerStore.__new__(LedgerStore)
        cloned._records = dict(self._records)
        return cloned
