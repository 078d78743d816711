"""Configuration for cargodiag.

Settings come from defaults overridden by ``CARGODIAG_*`` environment
variables, e.g. ``CARGODIAG_AUTOMATIC_CHECK=false``.
"""

import logging
import os
from collections.abc import Mapping

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

ENV_PREFIX = "CARGODIAG_"


class Settings(BaseModel):
    """Runtime settings for a cargo workspace."""

    automatic_check: bool = Field(
        default=True,
        description="Run `cargo check` after saves and dependency changes",
    )
    cargo_path: str | None = Field(
        default=None,
        description="Explicit path to the cargo binary (PATH lookup if unset)",
    )
    check_args: list[str] = Field(
        default=["--all-targets"],
        description="Extra arguments passed to `cargo check`",
    )
    collection_name: str = Field(
        default="cargo",
        description="Name of the diagnostic collection",
    )


def _parse_bool(value: str) -> bool:
    return value.lower() in ("true", "1", "yes")


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Load settings, applying environment variable overrides.

    Args:
        environ: Environment to read from (defaults to ``os.environ``).

    Returns:
        Validated settings.
    """
    if environ is None:
        environ = os.environ

    overrides: dict[str, object] = {}
    for key in Settings.model_fields:
        env_var = f"{ENV_PREFIX}{key.upper()}"
        if env_var not in environ:
            continue
        value = environ[env_var]
        if key == "automatic_check":
            overrides[key] = _parse_bool(value)
        elif key == "check_args":
            overrides[key] = [arg.strip() for arg in value.split(",") if arg.strip()]
        else:
            overrides[key] = value
        logger.info(f"Environment override: {key} = {overrides[key]}")

    return Settings.model_validate(overrides)
