"""Aggregation of cargo messages into per-file diagnostics."""

import logging
import os
from collections.abc import Iterable, Mapping
from pathlib import Path
from types import MappingProxyType

from cargodiag.models import (
    FileDiagnosticSet,
    Level,
    Message,
    MessageRecord,
    PositionedDiagnostic,
    Range,
    Severity,
    Span,
    StreamRecord,
)
from cargodiag.sink import DiagnosticSink, publish

logger = logging.getLogger(__name__)

SEVERITIES = {
    Level.ERROR.value: Severity.ERROR,
    Level.WARNING.value: Severity.WARNING,
    Level.NOTE.value: Severity.INFORMATION,
    Level.HELP.value: Severity.HINT,
}


def severity_for(level: str) -> Severity:
    """Map a message level to a severity; unknown levels are errors."""
    return SEVERITIES.get(level, Severity.ERROR)


def format_message(message: Message, span: Span) -> str:
    """Compose the displayed text for a message placed at ``span``."""
    text = f"{message.level}: {message.message}"
    if span.label:
        text += f"\nlabel: {span.label}"
    return text


def resolve_path(workspace_root: str | Path, file_name: str) -> Path:
    """Join a span's file name onto the workspace root.

    Registry and std sources come with absolute file names, which the join
    keeps as they are.
    """
    root = Path(workspace_root)
    if not root.is_absolute():
        root = root.absolute()
    return Path(os.path.normpath(root / file_name))


class Diagnosis:
    """Diagnostics collected during a single aggregation pass.

    A Diagnosis starts empty and is fed by one or more calls to
    :meth:`add_cargo_diagnostics`. Within a file, a diagnostic equal to one
    already collected (same code, text, range and severity) is dropped, and
    the first one found is kept.
    """

    def __init__(self) -> None:
        self._diagnostics: FileDiagnosticSet = {}
        self._seen: dict[Path, set[tuple]] = {}

    @property
    def diagnostics(self) -> Mapping[Path, list[PositionedDiagnostic]]:
        """Read-only view of the diagnostics collected so far, keyed by file."""
        return MappingProxyType(self._diagnostics)

    def add(self, diagnostic: PositionedDiagnostic) -> bool:
        """Add a diagnostic unless an equal one is already present.

        Returns:
            True if the diagnostic was added.
        """
        seen = self._seen.setdefault(diagnostic.path, set())
        key = diagnostic.dedup_key
        if key in seen:
            logger.debug(f"Dropping duplicate diagnostic at {diagnostic.path}:{diagnostic.range}")
            return False

        seen.add(key)
        self._diagnostics.setdefault(diagnostic.path, []).append(diagnostic)
        return True

    def add_cargo_diagnostics(
        self, workspace_root: str | Path, records: Iterable[StreamRecord]
    ) -> None:
        """Collect diagnostics from decoded cargo records.

        Records without a compiler message are ignored, and so are messages
        without spans. A message with several spans is placed once per span.
        """
        for record in records:
            if not isinstance(record, MessageRecord):
                continue
            message = record.message
            for span in message.spans:
                self.add_cargo_message(workspace_root, Range.from_span(span), span, message)

    def add_cargo_message(
        self,
        workspace_root: str | Path,
        range: Range,
        span: Span,
        message: Message,
    ) -> None:
        """Place ``message`` and all of its children at ``span``.

        Children carry no location of their own; every node of the tree is
        recorded with the range, file and label of the outer span, in
        depth-first pre-order.
        """
        path = resolve_path(workspace_root, span.file_name)
        stack = [message]
        while stack:
            current = stack.pop()
            self.add(
                PositionedDiagnostic(
                    path=path,
                    range=range,
                    message=format_message(current, span),
                    severity=severity_for(current.level),
                    code=current.code.code if current.code is not None else None,
                )
            )
            stack.extend(reversed(current.children))

    def finish(self, sink: DiagnosticSink) -> None:
        """Publish the collected diagnostics, one file at a time."""
        publish(self._diagnostics, sink)


def aggregate(workspace_root: str | Path, records: Iterable[StreamRecord]) -> FileDiagnosticSet:
    """Run one aggregation pass over ``records``.

    Args:
        workspace_root: Directory that span file names are relative to.
        records: Decoded cargo records, consumed once in order.

    Returns:
        Mapping from absolute file path to its diagnostics in discovery order.
    """
    diagnosis = Diagnosis()
    diagnosis.add_cargo_diagnostics(workspace_root, records)
    return dict(diagnosis.diagnostics)
