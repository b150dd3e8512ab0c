"""Fail-soft diagnostics for authored content.

Content mistakes (bad tokens, references to fields a character does not
have, sources that blow up while being processed) are never raised. They are
collected here as structured records and logged, so a single broken item can
only ever cost its own bonus.
"""

from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum

import structlog

logger = structlog.get_logger(__name__)


class DiagnosticKind(Enum):
    """Categories of content error."""

    UNRECOGNIZED_TOKEN = "unrecognized_token"
    DANGLING_REFERENCE = "dangling_reference"
    SOURCE_FAILURE = "source_failure"


@dataclass(frozen=True)
class Diagnostic:
    """A single reported content problem.

    Attributes:
        kind: Error category
        message: Human readable explanation for content authors
        token: Offending data-code fragment, if any
        source: Identity of the source that produced it (item id, module id, ...)
    """

    kind: DiagnosticKind
    message: str
    token: str | None = None
    source: str | None = None


class Diagnostics:
    """Collector for diagnostics raised during parsing and recomputation."""

    def __init__(self, *, log: bool = True) -> None:
        """
        Initialize an empty collector.

        Args:
            log: Also emit each record through structlog as it is reported
        """
        self.records: list[Diagnostic] = []
        self._log = log

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self.records)

    def report(
        self,
        kind: DiagnosticKind,
        message: str,
        *,
        token: str | None = None,
        source: str | None = None,
        exc_info: bool = False,
    ) -> Diagnostic:
        """
        Record a diagnostic and log it.

        Args:
            kind: Error category
            message: Explanation for content authors
            token: Offending token, if any
            source: Source identity, if known
            exc_info: Attach the active exception to the log entry

        Returns:
            The recorded Diagnostic
        """
        diagnostic = Diagnostic(kind=kind, message=message, token=token, source=source)
        self.records.append(diagnostic)

        if self._log:
            if kind is DiagnosticKind.SOURCE_FAILURE:
                logger.error(
                    kind.value,
                    message=message,
                    token=token,
                    source=source,
                    exc_info=exc_info,
                )
            else:
                logger.warning(kind.value, message=message, token=token, source=source)

        return diagnostic

    def of_kind(self, kind: DiagnosticKind) -> list[Diagnostic]:
        """Get all records of one category."""
        return [record for record in self.records if record.kind is kind]

    def for_source(self, source: str) -> list[Diagnostic]:
        """Get all records tagged with a source identity."""
        return [record for record in self.records if record.source == source]

    def clear(self) -> None:
        """Drop all collected records."""
        self.records.clear()
