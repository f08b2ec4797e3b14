"""One-shot trigger bookkeeping."""

from __future__ import annotations

from typing import Dict, Iterator

from .definitions import CachedTriggerRecord

__all__ = ["TriggerCache"]


class TriggerCache:
    """Records which cache-marked triggers already fired.

    At most one :class:`CachedTriggerRecord` exists per trigger name; records
    are created lazily by :meth:`find` and only dropped by :meth:`clear`.
    """

    __slots__ = ("_records",)

    def __init__(self) -> None:
        self._records: Dict[str, CachedTriggerRecord] = {}

    def find(self, name: str) -> CachedTriggerRecord:
        record = self._records.get(name)
        if record is None:
            record = CachedTriggerRecord(name=name)
            self._records[name] = record
        return record

    def consume(self, name: str) -> bool:
        """Mark ``name`` done; return False if it already was."""
        record = self.find(name)
        if record.done:
            return False
        record.done = True
        return True

    def clear(self) -> None:
        self._records = {}

    def __contains__(self, name: object) -> bool:
        return name in self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[CachedTriggerRecord]:
        return iter(list(self._records.values()))
