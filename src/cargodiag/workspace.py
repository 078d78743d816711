"""Editor integration: runs aggregation passes and owns the published state."""

import asyncio
import functools
import logging
from collections.abc import Callable
from pathlib import Path

from cargodiag import cargo
from cargodiag.config import Settings, load_settings
from cargodiag.diagnosis import Diagnosis
from cargodiag.models import FileDiagnosticSet, SearchResult, StreamRecord
from cargodiag.sink import DiagnosticCollection
from cargodiag.tree import WorkspaceTree

logger = logging.getLogger(__name__)

CargoCommand = Callable[[str | Path], list[StreamRecord]]


class CargoWorkspace:
    """A cargo workspace and the diagnostics published for it.

    The workspace is the only writer of its collection. Passes are
    serialized: a pass started while another is running waits for the
    earlier one to publish before it clears the collection.
    """

    def __init__(
        self,
        cwd: str | Path,
        settings: Settings | None = None,
        collection: DiagnosticCollection | None = None,
    ) -> None:
        self.cwd = Path(cwd)
        self.settings = settings if settings is not None else load_settings()
        self.collection = (
            collection
            if collection is not None
            else DiagnosticCollection(self.settings.collection_name)
        )
        self._lock = asyncio.Lock()

    async def run(self, name: str, command: CargoCommand) -> FileDiagnosticSet:
        """Run one aggregation pass and publish its result.

        Args:
            name: Display name of the command, e.g. "cargo check".
            command: Callable returning the decoded records for ``cwd``.

        Returns:
            The published diagnostics.

        Raises:
            CargoNotFoundError: If cargo is not found.
            CargoError: If cargo metadata fails or the command produced no output.
        """
        async with self._lock:
            self.collection.clear()
            diagnosis = Diagnosis()

            logger.info("Running 'cargo metadata'")
            metadata = await asyncio.to_thread(
                cargo.metadata, self.cwd, cargo_path=self.settings.cargo_path
            )

            logger.info(f"Running '{name}'")
            records = await asyncio.to_thread(command, self.cwd)

            logger.info("Processing build messages")
            diagnosis.add_cargo_diagnostics(metadata.workspace_root, records)
            diagnosis.finish(self.collection)

            logger.info(f"'{name}' reported diagnostics for {len(diagnosis.diagnostics)} files")
            return dict(diagnosis.diagnostics)

    async def check(self) -> FileDiagnosticSet:
        command = functools.partial(
            cargo.check,
            args=self.settings.check_args,
            cargo_path=self.settings.cargo_path,
        )
        return await self.run("cargo check", command)

    async def build(self) -> FileDiagnosticSet:
        command = functools.partial(cargo.build, cargo_path=self.settings.cargo_path)
        return await self.run("cargo build", command)

    async def on_save(self) -> FileDiagnosticSet | None:
        """Handle a saved document: check when automatic checks are enabled."""
        if not self.settings.automatic_check:
            return None
        return await self.check()

    async def add_dependency(self, name: str) -> None:
        logger.info(f"Adding dependency '{name}'")
        await asyncio.to_thread(cargo.add, self.cwd, name, cargo_path=self.settings.cargo_path)
        logger.info(f"Successfully added dependency '{name}'")

        if self.settings.automatic_check:
            await self.check()

    async def remove_dependency(self, name: str) -> None:
        logger.info(f"Removing dependency '{name}'")
        await asyncio.to_thread(cargo.rm, self.cwd, name, cargo_path=self.settings.cargo_path)
        logger.info(f"Successfully removed dependency '{name}'")

        if self.settings.automatic_check:
            await self.check()

    async def search(self, name: str) -> list[SearchResult]:
        return await asyncio.to_thread(cargo.search, name)

    async def load_tree(self) -> WorkspaceTree:
        metadata = await asyncio.to_thread(
            cargo.metadata, self.cwd, cargo_path=self.settings.cargo_path
        )
        return WorkspaceTree(metadata)

    def close(self) -> None:
        self.collection.dispose()
