"""Wrappers around the cargo binary and the crates.io API."""

import json
import logging
import os
import shutil
import subprocess
import urllib.parse
import urllib.request
from pathlib import Path

from pydantic import ValidationError

from cargodiag.decoder import decode_stream
from cargodiag.exceptions import CargoError, CargoNotFoundError, SearchError
from cargodiag.models import Metadata, SearchResult, StreamRecord

logger = logging.getLogger(__name__)

CRATES_IO_SEARCH_URL = "https://crates.io/api/v1/crates"

USER_AGENT = "cargodiag"


def find_cargo(cargo_path: str | Path | None = None) -> str:
    """Find the cargo binary.

    Searches in order:
    1. The explicit ``cargo_path`` argument
    2. CARGO environment variable (set by cargo for build scripts and subcommands)
    3. ``cargo`` on PATH

    Returns:
        Path to the cargo binary.

    Raises:
        CargoNotFoundError: If the binary is not found.
    """
    if cargo_path is not None:
        return str(cargo_path)

    env_path = os.environ.get("CARGO")
    if env_path:
        return env_path

    binary = shutil.which("cargo")
    if binary is None:
        raise CargoNotFoundError(
            "cargo not found on PATH. "
            "Install with: curl https://sh.rustup.rs -sSf | sh"
        )
    return binary


def _run_cargo(
    cwd: str | Path,
    args: list[str],
    *,
    cargo_path: str | Path | None = None,
) -> subprocess.CompletedProcess[str]:
    """Run cargo with the given arguments in ``cwd``.

    The exit code is not checked here; callers decide which failures are
    fatal.

    Raises:
        CargoNotFoundError: If cargo is not found or cannot be executed.
    """
    cmd = [find_cargo(cargo_path), *args]

    try:
        return subprocess.run(
            cmd,
            cwd=str(cwd),
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
        )
    except OSError as e:
        raise CargoNotFoundError(f"Failed to execute cargo: {e}") from e


def metadata(cwd: str | Path, *, cargo_path: str | Path | None = None) -> Metadata:
    """Read the metadata of the workspace containing ``cwd``.

    Raises:
        CargoNotFoundError: If cargo is not found.
        CargoError: If cargo fails or prints something that is not metadata.
    """
    result = _run_cargo(
        cwd,
        ["metadata", "--no-deps", "--format-version=1"],
        cargo_path=cargo_path,
    )

    if result.returncode != 0:
        raise CargoError(
            f"cargo metadata failed with exit code {result.returncode}: {result.stderr.strip()}",
            stderr=result.stderr,
        )

    try:
        return Metadata.model_validate_json(result.stdout)
    except ValidationError as e:
        raise CargoError(
            f"Failed to parse cargo metadata: {e}",
            stderr=result.stderr,
        ) from e


def _run_with_messages(
    cwd: str | Path,
    name: str,
    args: list[str],
    cargo_path: str | Path | None,
) -> list[StreamRecord]:
    result = _run_cargo(cwd, args, cargo_path=cargo_path)

    # A failing build still reports its errors on stdout.
    if result.returncode != 0 and result.stdout == "":
        raise CargoError(
            f"cargo {name} failed with exit code {result.returncode}: {result.stderr.strip()}",
            stderr=result.stderr,
        )

    return list(decode_stream(result.stdout))


def check(
    cwd: str | Path,
    *,
    args: list[str] | None = None,
    cargo_path: str | Path | None = None,
) -> list[StreamRecord]:
    """Run ``cargo check`` and decode its messages.

    Args:
        cwd: Directory inside the workspace.
        args: Extra arguments (default: ``--all-targets``).
        cargo_path: Explicit cargo binary.

    Returns:
        Decoded records in the order cargo emitted them.

    Raises:
        CargoNotFoundError: If cargo is not found.
        CargoError: If cargo fails without producing any output.
    """
    if args is None:
        args = ["--all-targets"]
    return _run_with_messages(
        cwd,
        "check",
        ["check", "--message-format=json", *args],
        cargo_path,
    )


def build(
    cwd: str | Path,
    *,
    args: list[str] | None = None,
    cargo_path: str | Path | None = None,
) -> list[StreamRecord]:
    """Run ``cargo build`` and decode its messages.

    Raises:
        CargoNotFoundError: If cargo is not found.
        CargoError: If cargo fails without producing any output.
    """
    return _run_with_messages(
        cwd,
        "build",
        ["build", "--message-format=json", *(args or [])],
        cargo_path,
    )


def add(cwd: str | Path, name: str, *, cargo_path: str | Path | None = None) -> None:
    """Add a dependency to the package in ``cwd``.

    Raises:
        CargoError: If ``cargo add`` exits with a non-zero code.
    """
    result = _run_cargo(cwd, ["add", "--", name], cargo_path=cargo_path)
    if result.returncode != 0:
        logger.error(result.stderr)
        raise CargoError("`cargo add` returned with non-zero exit code", stderr=result.stderr)


def rm(cwd: str | Path, name: str, *, cargo_path: str | Path | None = None) -> None:
    """Remove a dependency from the package in ``cwd``.

    Raises:
        CargoError: If ``cargo rm`` exits with a non-zero code.
    """
    result = _run_cargo(cwd, ["rm", "--", name], cargo_path=cargo_path)
    if result.returncode != 0:
        logger.error(result.stderr)
        raise CargoError("`cargo rm` returned with non-zero exit code", stderr=result.stderr)


def search(name: str, *, per_page: int = 20, timeout: float = 30) -> list[SearchResult]:
    """Search crates.io for crates matching ``name``.

    Raises:
        SearchError: If the request fails or the response is not understood.
    """
    query = urllib.parse.urlencode({"per_page": per_page, "q": name})
    url = f"{CRATES_IO_SEARCH_URL}?{query}"
    request = urllib.request.Request(url, headers={"User-Agent": USER_AGENT})

    try:
        with urllib.request.urlopen(request, timeout=timeout) as response:
            data = json.loads(response.read())
    except (OSError, json.JSONDecodeError) as e:
        raise SearchError(f"Failed to search crates.io for '{name}': {e}") from e

    try:
        return [SearchResult.model_validate(crate) for crate in data.get("crates", [])]
    except (AttributeError, ValidationError) as e:
        raise SearchError(f"Unexpected crates.io response for '{name}': {e}") from e
