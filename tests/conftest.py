"""Pytest fixtures for cargodiag tests."""

import json
from typing import Any

import pytest


def make_span(
    file_name: str = "src/lib.rs",
    line_start: int = 3,
    column_start: int = 5,
    line_end: int = 3,
    column_end: int = 10,
    label: str | None = None,
    is_primary: bool = True,
) -> dict[str, Any]:
    return {
        "file_name": file_name,
        "byte_start": 40,
        "byte_end": 45,
        "line_start": line_start,
        "line_end": line_end,
        "column_start": column_start,
        "column_end": column_end,
        "is_primary": is_primary,
        "label": label,
        "text": [],
        "expansion": None,
        "suggested_replacement": None,
    }


def make_message(
    text: str = "mismatched types",
    level: str = "error",
    spans: list[dict[str, Any]] | None = None,
    children: list[dict[str, Any]] | None = None,
    code: str | None = None,
) -> dict[str, Any]:
    return {
        "message": text,
        "code": {"code": code, "explanation": None} if code else None,
        "level": level,
        "spans": spans if spans is not None else [],
        "children": children if children is not None else [],
        "rendered": f"{level}: {text}\n",
    }


def compiler_message(message: dict[str, Any]) -> str:
    """Wrap a message the way cargo does and serialize it to one line."""
    return json.dumps(
        {
            "reason": "compiler-message",
            "package_id": "demo 0.1.0 (path+file:///ws)",
            "manifest_path": "/ws/Cargo.toml",
            "target": {"kind": ["lib"], "name": "demo"},
            "message": message,
        }
    )


@pytest.fixture
def cargo_check_output() -> str:
    """Output of a `cargo check` run with one error, one warning and status records."""
    error = make_message(
        "mismatched types",
        spans=[make_span(label="expected `u32`, found `&str`")],
        children=[make_message("try using a conversion method", level="help")],
        code="E0308",
    )
    warning = make_message(
        "unused variable: `x`",
        level="warning",
        spans=[make_span("src/main.rs", 7, 9, 7, 10)],
        children=[make_message("`#[warn(unused_variables)]` on by default", level="note")],
    )
    summary = make_message("aborting due to 1 previous error")
    lines = [
        json.dumps({"reason": "compiler-artifact", "package_id": "libc 0.2.150"}),
        json.dumps({"reason": "build-script-executed", "package_id": "demo 0.1.0"}),
        compiler_message(error),
        compiler_message(warning),
        compiler_message(summary),
        json.dumps({"reason": "build-finished", "success": False}),
    ]
    return "\n".join(lines) + "\n"


@pytest.fixture
def metadata_json() -> str:
    """Output of `cargo metadata --no-deps --format-version=1` for a two-member workspace."""
    return json.dumps(
        {
            "packages": [
                {
                    "id": "path+file:///ws/core#0.1.0",
                    "name": "core-lib",
                    "version": "0.1.0",
                    "description": "Core library",
                    "source": None,
                    "dependencies": [
                        {
                            "name": "serde",
                            "source": "registry+https://github.com/rust-lang/crates.io-index",
                            "req": "^1.0",
                            "kind": None,
                        },
                        {
                            "name": "proptest",
                            "source": "registry+https://github.com/rust-lang/crates.io-index",
                            "req": "^1.4",
                            "kind": "dev",
                        },
                    ],
                    "targets": [],
                    "features": {},
                    "manifest_path": "/ws/core/Cargo.toml",
                },
                {
                    "id": "path+file:///ws/cli#0.2.0",
                    "name": "cli",
                    "version": "0.2.0",
                    "description": None,
                    "source": None,
                    "dependencies": [],
                    "targets": [],
                    "features": {},
                    "manifest_path": "/ws/cli/Cargo.toml",
                },
            ],
            "workspace_members": ["path+file:///ws/cli#0.2.0", "path+file:///ws/core#0.1.0"],
            "workspace_default_members": ["path+file:///ws/cli#0.2.0"],
            "resolve": None,
            "target_directory": "/ws/target",
            "version": 1,
            "workspace_root": "/ws",
            "metadata": None,
        }
    )


@pytest.fixture(autouse=True)
def no_cargo_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the CARGO variable of an enclosing cargo run out of binary lookup."""
    monkeypatch.delenv("CARGO", raising=False)
