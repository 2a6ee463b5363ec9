"""
Classify updated rows against a previous snapshot of the same activities.

Rows are matched by ID. A row without an ID is new, a row equal to its
previous snapshot is left alone, anything else is an update.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Optional

from .constants import FIRST_DATA_ROW
from .exceptions import CSVFormatError, RecordCountMismatchError, UnknownRecordError

__all__ = ["Outcome", "Reconciliation", "RecordSet", "reconcile"]

logger = logging.getLogger(__name__)


class Outcome(Enum):
    UNCHANGED = "unchanged"
    CREATE = "create"
    UPDATE = "update"


@dataclass(frozen=True)
class Reconciliation:
    """How one row of the updated file is to be handled."""

    row: int
    record: Any
    outcome: Outcome
    previous: Optional[Any] = None


class RecordSet:
    """Records in file order, indexed by ID.

    Only records that already have an ID are indexed; the same ID appearing
    twice means the file is broken.
    """

    def __init__(self, records: Iterable, source: str = ""):
        self.records = list(records)
        self.source = source
        self._by_id: Dict[int, Any] = {}
        for offset, record in enumerate(self.records):
            if not record.id:
                continue
            if record.id in self._by_id:
                raise CSVFormatError(
                    f"{source!r} has activity ID {record.id} more than once "
                    f"(again on row {FIRST_DATA_ROW + offset})"
                )
            self._by_id[record.id] = record

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator:
        return iter(self.records)

    def __getitem__(self, index: int):
        return self.records[index]

    def get(self, activity_id: int):
        return self._by_id.get(activity_id)


def reconcile(previous: RecordSet, updated: RecordSet) -> List[Reconciliation]:
    """Classify every row of ``updated`` against ``previous``.

    Args:
        previous: The snapshot the edits were made from (e.g. a download).
        updated: The edited copy.

    Returns:
        One Reconciliation per row of ``updated``, in file order.

    Raises:
        RecordCountMismatchError: If the two sets differ in length. The files
            are expected to be paired snapshots of the same rows.
        UnknownRecordError: If a row has an ID that isn't in ``previous``.
    """
    if len(previous) != len(updated):
        raise RecordCountMismatchError(
            f"{previous.source!r} has {len(previous)} activities, but "
            f"{updated.source!r} has {len(updated)}; for update, they should be the same"
        )

    results = []
    for offset, record in enumerate(updated):
        row = FIRST_DATA_ROW + offset
        if not record.id:
            results.append(Reconciliation(row, record, Outcome.CREATE))
            continue
        prev = previous.get(record.id)
        if prev is None:
            raise UnknownRecordError(
                f"activity ID {record.id} from {updated.source!r} not found in {previous.source!r}"
            )
        if record.same_as(prev):
            logger.debug("no change for ID %d", record.id)
            results.append(Reconciliation(row, record, Outcome.UNCHANGED, prev))
        else:
            results.append(Reconciliation(row, record, Outcome.UPDATE, prev))
    return results
