"""Data models for cargo build messages, workspace metadata and diagnostics.

Records decoded from cargo's JSON output are pydantic models so that a
record of the wrong shape fails validation instead of half-populating an
object. Everything cargodiag produces itself is a frozen dataclass.
"""

from dataclasses import dataclass
from enum import Enum, IntEnum
from pathlib import Path

from pydantic import BaseModel, Field


class Level(str, Enum):
    """Message levels emitted by rustc."""

    ERROR = "error"
    WARNING = "warning"
    NOTE = "note"
    HELP = "help"


class Code(BaseModel):
    """Structured diagnostic code, e.g. ``E0308``."""

    code: str
    explanation: str | None = None


class Span(BaseModel):
    """A source location attached to a message.

    Attributes:
        file_name: Path relative to the workspace root.
        line_start: First line (1-based).
        line_end: Last line (1-based, inclusive).
        column_start: First column (1-based).
        column_end: Last column (1-based).
        byte_start: Byte offset of the start in the file.
        byte_end: Byte offset of the end in the file.
        is_primary: Whether this is the main location of the message.
        label: Optional annotation for this span.
    """

    file_name: str
    line_start: int
    line_end: int
    column_start: int
    column_end: int
    byte_start: int
    byte_end: int
    is_primary: bool
    label: str | None = None


class Message(BaseModel):
    """A compiler message and its nested sub-diagnostics.

    ``level`` is kept as a plain string: rustc occasionally emits levels
    outside of :class:`Level` (``failure-note``, ``error: internal compiler
    error``) and those still need to decode.
    """

    level: str
    message: str
    rendered: str | None = None
    code: Code | None = None
    spans: list[Span] = Field(default_factory=list)
    children: list["Message"] = Field(default_factory=list)


@dataclass(frozen=True)
class MessageRecord:
    """A stream record carrying a compiler message."""

    message: Message


@dataclass(frozen=True)
class OtherRecord:
    """A stream record with no diagnostic content (artifacts, build-finished, ...)."""

    reason: str | None = None


StreamRecord = MessageRecord | OtherRecord


class Severity(IntEnum):
    """Editor-facing diagnostic severity."""

    ERROR = 0
    WARNING = 1
    INFORMATION = 2
    HINT = 3


@dataclass(frozen=True)
class Position:
    """Zero-based line/character position."""

    line: int
    character: int


@dataclass(frozen=True)
class Range:
    """Zero-based range between two positions."""

    start: Position
    end: Position

    @classmethod
    def from_span(cls, span: Span) -> "Range":
        """Convert a span's 1-based coordinates to a zero-based range."""
        return cls(
            Position(span.line_start - 1, span.column_start - 1),
            Position(span.line_end - 1, span.column_end - 1),
        )

    def __str__(self) -> str:
        return (
            f"({self.start.line},{self.start.character})"
            f"-({self.end.line},{self.end.character})"
        )


@dataclass(frozen=True)
class PositionedDiagnostic:
    """A diagnostic placed in a file.

    Attributes:
        path: Absolute path of the file.
        range: Zero-based range within the file.
        message: Composed text, ``"<level>: <text>"`` plus an optional label line.
        severity: Severity derived from the message level.
        code: Diagnostic code of the originating message, if any.
        source: Producer of the diagnostic.
    """

    path: Path
    range: Range
    message: str
    severity: Severity
    code: str | None = None
    source: str = "cargo"

    @property
    def dedup_key(self) -> tuple[str | None, str, Range, Severity]:
        return (self.code, self.message, self.range, self.severity)


FileDiagnosticSet = dict[Path, list[PositionedDiagnostic]]


class Dependency(BaseModel):
    """A dependency declared by a package."""

    name: str
    source: str | None = None
    req: str | None = None
    kind: str | None = None


class Package(BaseModel):
    """A package in the workspace."""

    id: str
    name: str
    version: str
    description: str | None = None
    source: str | None = None
    dependencies: list[Dependency] = Field(default_factory=list)


class Node(BaseModel):
    """A node in the resolved dependency graph."""

    id: str
    dependencies: list[str] = Field(default_factory=list)
    features: list[str] = Field(default_factory=list)


class Resolve(BaseModel):
    """The resolved dependency graph of a workspace."""

    nodes: list[Node] = Field(default_factory=list)
    root: str | None = None


class Metadata(BaseModel):
    """Output of ``cargo metadata --format-version=1``."""

    packages: list[Package] = Field(default_factory=list)
    resolve: Resolve | None = None
    workspace_members: list[str] = Field(default_factory=list)
    target_directory: str
    version: int
    workspace_root: str


class SearchResult(BaseModel):
    """A crate returned by the crates.io search API."""

    name: str
    description: str | None = None
    max_version: str
    downloads: int = 0
    recent_downloads: int | None = None

