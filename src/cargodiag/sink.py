"""Publication of finished diagnostic sets."""

import logging
from collections.abc import Iterator, Sequence
from pathlib import Path
from typing import Protocol

from cargodiag.exceptions import CollectionDisposedError
from cargodiag.models import FileDiagnosticSet, PositionedDiagnostic

logger = logging.getLogger(__name__)


class DiagnosticSink(Protocol):
    """Anything that can display per-file diagnostics."""

    def set(self, path: Path, diagnostics: Sequence[PositionedDiagnostic]) -> None: ...

    def clear(self) -> None: ...


class DiagnosticCollection:
    """In-process diagnostic collection keyed by absolute file path.

    A collection has a single owner that creates it at startup and disposes
    it at shutdown. ``set`` replaces everything stored for a file.
    """

    def __init__(self, name: str = "cargo") -> None:
        self.name = name
        self._entries: dict[Path, list[PositionedDiagnostic]] = {}
        self._disposed = False

    def set(self, path: Path, diagnostics: Sequence[PositionedDiagnostic]) -> None:
        self._check_open()
        self._entries[path] = list(diagnostics)

    def get(self, path: Path) -> list[PositionedDiagnostic]:
        return list(self._entries.get(path, []))

    def delete(self, path: Path) -> None:
        self._check_open()
        self._entries.pop(path, None)

    def clear(self) -> None:
        self._check_open()
        self._entries.clear()

    def dispose(self) -> None:
        self._entries.clear()
        self._disposed = True

    @property
    def disposed(self) -> bool:
        return self._disposed

    def _check_open(self) -> None:
        if self._disposed:
            raise CollectionDisposedError(self.name)

    def __iter__(self) -> Iterator[tuple[Path, list[PositionedDiagnostic]]]:
        return iter(list(self._entries.items()))

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, path: object) -> bool:
        return path in self._entries


def publish(diagnostics: FileDiagnosticSet, sink: DiagnosticSink) -> None:
    """Replace the sink's diagnostics for every file in the set.

    Files not present in ``diagnostics`` are left as they are; callers clear
    the sink first when stale entries must go.
    """
    for path, file_diagnostics in diagnostics.items():
        sink.set(path, file_diagnostics)
    logger.debug(f"Published diagnostics for {len(diagnostics)} files")
