"""cargodiag - per-file editor diagnostics from cargo's JSON build messages."""

from cargodiag.cargo import add, build, check, find_cargo, metadata, rm, search
from cargodiag.config import Settings, load_settings
from cargodiag.decoder import decode_line, decode_stream
from cargodiag.diagnosis import Diagnosis, aggregate, severity_for
from cargodiag.exceptions import (
    CargodiagError,
    CargoError,
    CargoNotFoundError,
    CollectionDisposedError,
    SearchError,
)
from cargodiag.models import (
    Code,
    FileDiagnosticSet,
    Level,
    Message,
    MessageRecord,
    Metadata,
    OtherRecord,
    Position,
    PositionedDiagnostic,
    Range,
    SearchResult,
    Severity,
    Span,
    StreamRecord,
)
from cargodiag.sink import DiagnosticCollection, DiagnosticSink, publish
from cargodiag.tree import DependencyNode, PackageNode, TreeItem, WorkspaceTree
from cargodiag.workspace import CargoWorkspace

__version__ = "0.1.0"

__all__ = [
    # Decoding and aggregation
    "decode_line",
    "decode_stream",
    "aggregate",
    "severity_for",
    "Diagnosis",
    # Publication
    "publish",
    "DiagnosticSink",
    "DiagnosticCollection",
    # Cargo
    "find_cargo",
    "metadata",
    "check",
    "build",
    "add",
    "rm",
    "search",
    # Workspace
    "CargoWorkspace",
    "WorkspaceTree",
    "PackageNode",
    "DependencyNode",
    "TreeItem",
    # Configuration
    "Settings",
    "load_settings",
    # Models
    "Level",
    "Code",
    "Span",
    "Message",
    "MessageRecord",
    "OtherRecord",
    "StreamRecord",
    "Severity",
    "Position",
    "Range",
    "PositionedDiagnostic",
    "FileDiagnosticSet",
    "Metadata",
    "SearchResult",
    # Exceptions
    "CargodiagError",
    "CargoNotFoundError",
    "CargoError",
    "SearchError",
    "CollectionDisposedError",
]
