"""Advisory operation results.

Some operations (cache writes, pool teardown) may fail without failing the
caller. They return an AdvisoryResult instead of raising; the failure is
logged when the result is built so callers are free to ignore it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AdvisoryResult:
    """Outcome of a best-effort operation."""

    operation: str
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, operation: str) -> AdvisoryResult:
        return cls(operation=operation)

    @classmethod
    def failure(cls, operation: str, error: BaseException | str) -> AdvisoryResult:
        message = str(error)
        logger.warning(f"Advisory operation failed: {operation}: {message}")
        return cls(operation=operation, error=message)
