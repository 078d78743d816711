"""Custom exceptions for cargodiag."""


class CargodiagError(Exception):
    """Base exception for all cargodiag errors."""

    pass


class CargoNotFoundError(CargodiagError):
    """Raised when the cargo binary is not found."""

    def __init__(self, message: str = "cargo not found on PATH") -> None:
        super().__init__(message)


class CargoError(CargodiagError):
    """Raised when a cargo invocation fails."""

    def __init__(self, message: str, stderr: str = "") -> None:
        super().__init__(message)
        self.stderr = stderr


class SearchError(CargodiagError):
    """Raised when the crates.io search request fails."""

    pass


class CollectionDisposedError(CargodiagError):
    """Raised when writing to a diagnostic collection after dispose()."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Diagnostic collection '{name}' has been disposed")
        self.name = name
