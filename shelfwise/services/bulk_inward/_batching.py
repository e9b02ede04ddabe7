"""
Chunked commits for bulk imports.

Rows that pass validation are staged as deferred writes. The accumulator
applies and commits them in chunks; each chunk is one transaction, the import
as a whole is not. A row only becomes ``Success`` once its chunk committed.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from ...utils.error_messages import ErrorMessages as EM

logger = logging.getLogger(__name__)

DEFAULT_MAX_OPERATIONS = 450
# placement upsert, product log, counter increment
OPERATIONS_PER_ROW = 3


class ChunkCommitError(RuntimeError):
    """A chunk could not be committed; its rows were marked and nothing in it persisted."""

    def __init__(self, reason: str, rows: int):
        super().__init__(f"Chunk of {rows} rows failed: {reason}")
        self.reason = reason
        self.rows = rows


@dataclass
class StagedWrite:
    result: object
    apply: Callable
    operations: int = OPERATIONS_PER_ROW


class WriteBatch:
    """Pending-writes accumulator with a ``flush_if_full`` / ``flush_remainder`` contract.

    ``apply`` callables receive the session and return the row's success
    message. With ``dry_run`` every chunk is applied and then rolled back, so
    rows are classified exactly as a real run would classify them.
    """

    def __init__(self, session, *, max_operations: int = DEFAULT_MAX_OPERATIONS, dry_run: bool = False):
        if max_operations < OPERATIONS_PER_ROW:
            raise ValueError(f"max_operations must be at least {OPERATIONS_PER_ROW}")
        self.session = session
        self.max_operations = max_operations
        self.dry_run = dry_run
        self.pending: list[StagedWrite] = []
        self.operation_count = 0
        self.committed_chunks = 0
        self.committed_rows = 0

    def __len__(self):
        return len(self.pending)

    @property
    def is_full(self) -> bool:
        return self.operation_count >= self.max_operations

    def stage(self, result, apply: Callable, operations: int = OPERATIONS_PER_ROW) -> None:
        self.pending.append(StagedWrite(result=result, apply=apply, operations=operations))
        self.operation_count += operations

    def flush_if_full(self) -> bool:
        if not self.is_full:
            return False
        self._flush()
        return True

    def flush_remainder(self) -> bool:
        if not self.pending:
            return False
        self._flush()
        return True

    def _flush(self) -> None:
        chunk, self.pending = self.pending, []
        self.operation_count = 0

        messages = []
        try:
            for staged in chunk:
                messages.append(staged.apply(self.session))
            if self.dry_run:
                self.session.rollback()
            else:
                self.session.commit()
        except Exception as exc:
            # driver errors such as OverflowError are not SQLAlchemyError subclasses
            self.session.rollback()
            reason = type(exc).__name__
            logger.exception(f"Bulk inward chunk of {len(chunk)} rows rolled back: {exc}")
            for staged in chunk:
                staged.result.error(EM.ROW_NOT_COMMITTED.format(reason=reason))
            raise ChunkCommitError(reason, len(chunk)) from exc

        for staged, message in zip(chunk, messages):
            staged.result.success(message)
        self.committed_chunks += 1
        self.committed_rows += len(chunk)
        logger.info(
            f"Bulk inward chunk {'validated' if self.dry_run else 'committed'}: "
            f"{len(chunk)} rows, chunk #{self.committed_chunks}"
        )
