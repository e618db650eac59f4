# assetdir/errors.py
"""
Exception hierarchy.

Fatal conditions (bad files, failing generators, a missing default locale)
are raised. Duplicates and null productions are only logged and counted
in the LoadReport.
"""

from pathlib import Path
from typing import Optional


class AssetDirError(Exception):
    """Base class for all assetdir errors."""


class DecodeError(AssetDirError):
    """Raw bytes could not be turned into the target type."""


class EncodeError(AssetDirError):
    """A value could not be serialized."""


class AssetLoadError(AssetDirError):
    """A file aborted a reload."""

    def __init__(self, path: Path, cause: str):
        self.path = Path(path)
        self.cause = cause
        super().__init__(f"Found the following issue at '{self.path}': {cause}")


class ProductionError(AssetDirError):
    """A generator failed to produce its asset during reload."""

    def __init__(self, path: Path, identifier: str, cause: str):
        self.path = Path(path)
        self.identifier = identifier
        self.cause = cause
        super().__init__(f"Generator '{identifier}' at '{self.path}' failed: {cause}")


class FallbackMissingError(AssetDirError):
    """Neither the requested locale nor the default locale is loaded."""

    def __init__(self, directory: Path, default_locale: str, locale: Optional[str] = None):
        self.directory = Path(directory)
        self.default_locale = default_locale
        self.locale = locale
        super().__init__(
            f"Couldn't fallback to default locale: '{default_locale}' "
            f"(requested '{locale}') at: {self.directory}"
        )


class AssetNotFoundError(AssetDirError, KeyError):
    """Raised by ``get()`` when no asset has the identifier."""

    def __init__(self, identifier: str, kind: str = "asset"):
        self.identifier = identifier
        self.kind = kind
        super().__init__(f"'{identifier}' is not a valid {kind}")

    def __str__(self) -> str:
        return self.args[0]


class InvalidIdentifierError(AssetDirError, ValueError):
    """An identifier was empty or not a string."""


class IndexConsistencyError(AssetDirError):
    """An identifier listed by the index could not be resolved to an entry."""
