"""
Row-by-row driver for the bulk operations.

The runner walks rows in file order, hands each one to an operation-specific
handler and stops at the first failure. The failing row number is reported
together with the ``--start_row`` values needed to pick up where it stopped.
"""

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Callable, Sequence

from .constants import FIRST_DATA_ROW
from .exceptions import BatchError, ConfigurationError, StravaCliError

__all__ = ["BatchCursor", "BatchRunner", "resume_hint"]

logger = logging.getLogger(__name__)

# handler(item, dry_run) -> name of the action taken, e.g. "created"
Handler = Callable[[object, bool], str]


@dataclass
class BatchCursor:
    """Row currently being processed (1-based, header is row 1)."""

    row: int = FIRST_DATA_ROW


def resume_hint(row: int, flag: str = "--start_row") -> str:
    """Tell the user how to retry or skip ``row``.

    Nothing can have succeeded before the first data row, so no hint is given
    for it.
    """
    if row <= FIRST_DATA_ROW:
        return ""
    return (
        f"To retry this row, re-run with {flag} {row}; "
        f"to skip it, re-run with {flag} {row + 1}."
    )


class BatchRunner:
    """Run a handler over rows, stopping at the first error.

    Args:
        start_row: First row to process; earlier rows are skipped.
        dry_run: Passed through to the handler, which must not call Strava
            when it is set.
    """

    def __init__(self, start_row: int = FIRST_DATA_ROW, dry_run: bool = False):
        if start_row < FIRST_DATA_ROW:
            raise ConfigurationError(
                f"--start_row must be at least {FIRST_DATA_ROW} (row 1 is the header), got {start_row}"
            )
        self.start_row = start_row
        self.dry_run = dry_run
        self.cursor = BatchCursor(start_row)

    def run(
        self,
        items: Sequence,
        handler: Handler,
        verb: str = "process",
        describe: Callable[[object], str] = str,
    ) -> Counter:
        """Process ``items`` (one per data row, in file order).

        Returns:
            Counter of the action names returned by the handler.

        Raises:
            BatchError: When a row fails. No later rows are processed.
        """
        counts = Counter()
        for offset, item in enumerate(items):
            row = FIRST_DATA_ROW + offset
            if row < self.start_row:
                logger.debug("skipping row %d (before start row %d)", row, self.start_row)
                continue
            self.cursor.row = row
            try:
                action = handler(item, self.dry_run)
            except (StravaCliError, OSError) as e:
                raise BatchError(row, f"{verb} {describe(item)}", e, resume_hint(row)) from e
            counts[action] += 1
        return counts
