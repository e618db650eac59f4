# assetdir/loader.py
"""
Directory load pipeline shared by every manager.

One scan is:
1. list files under the root (see files.list_files for ordering)
2. read + decode each file into a Record (identifier, locale, value)
3. insert into an IndexBuilder, collisions recorded

Readers raise AssetLoadError for anything that should abort the reload.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Generic, List, Optional, Type, TypeVar

from .asset import Entry, IdentityGeneration, locale_of
from .codec import YamlCodec
from .errors import AssetLoadError, DecodeError
from .files import identifier_from_path, list_files
from .index import Duplicate, DuplicateLog, IndexBuilder

T = TypeVar("T")


@dataclass(frozen=True)
class Record(Generic[T]):
    """What a reader extracts from one file."""
    identifier: str
    locale: Optional[str]
    value: T


Reader = Callable[[Path], Record]


@dataclass
class LoadReport:
    """
    Summary of one reload.

    Attributes:
        directory: Root that was scanned
        files_scanned: Files matched by the suffix
        loaded: Records indexed by the load stage (after duplicates collapsed)
        produced: Assets indexed by the production stage (generator managers)
        duplicates: Identifier collisions, load and production stage
        null_productions: Files whose generator produced nothing
        elapsed: Wall time in seconds
    """
    directory: Path
    files_scanned: int = 0
    loaded: int = 0
    produced: int = 0
    duplicates: List[Duplicate] = field(default_factory=list)
    null_productions: List[Path] = field(default_factory=list)
    elapsed: float = 0.0

    @property
    def clean(self) -> bool:
        """True when nothing was overwritten or skipped."""
        return not self.duplicates and not self.null_productions

    def to_dict(self) -> Dict[str, Any]:
        return {
            "directory": str(self.directory),
            "files_scanned": self.files_scanned,
            "loaded": self.loaded,
            "produced": self.produced,
            "duplicates": [
                {"identifier": d.identifier, "locale": d.locale, "paths": [str(p) for p in d.paths]}
                for d in self.duplicates
            ],
            "null_productions": [str(p) for p in self.null_productions],
            "elapsed": self.elapsed,
        }


def read_bytes(path: Path) -> bytes:
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as e:
        raise AssetLoadError(path, f"cannot read file: {e}") from e


def require_identifier(identifier: Any, path: Path) -> str:
    """Return ``identifier`` if it is a non-empty string, else abort the load."""
    if not isinstance(identifier, str) or not identifier.strip():
        raise AssetLoadError(path, "'identifier' cannot be null or empty")
    return identifier


def decode_file(codec: YamlCodec, path: Path, target: Type[T]) -> T:
    data = read_bytes(path)
    try:
        return codec.decode(data, target)
    except DecodeError as e:
        raise AssetLoadError(path, str(e)) from e
    except Exception as e:
        # Raised by the record type itself (__post_init__, from_dict)
        raise AssetLoadError(path, repr(e)) from e


def asset_reader(codec: YamlCodec, target: Type[T]) -> Reader:
    """Reader for self-identified records (assets and AssetGenerators)."""
    def read(path: Path) -> Record[T]:
        value = decode_file(codec, path, target)
        identifier = require_identifier(getattr(value, "identifier", None), path)
        return Record(identifier=identifier, locale=locale_of(value), value=value)
    return read


def identity_reader(codec: YamlCodec, target: type, suffix: str) -> Reader:
    """Reader for IdentityGenerators: identifier comes from the file name."""
    def read(path: Path) -> Record[IdentityGeneration]:
        identifier = require_identifier(identifier_from_path(path, suffix), path)
        generator = decode_file(codec, path, target)
        return Record(
            identifier=identifier,
            locale=locale_of(generator),
            value=IdentityGeneration(identifier=identifier, generator=generator),
        )
    return read


def scan_directory(
    directory: Path,
    suffix: str,
    read: Reader,
    builder: IndexBuilder,
    logger: logging.Logger,
) -> int:
    """
    Load every matching file under ``directory`` into ``builder``.

    Returns:
        Number of files scanned

    Raises:
        AssetLoadError: A file could not be read or decoded
    """
    files = list_files(directory, suffix)
    logger.info(f"{directory} has this many files ({len(files)})")
    for path in files:
        logger.debug(f"Reading {path}")
        record = read(path)
        builder.insert(record.identifier, record.locale, Entry(path=path, value=record.value))
    return len(files)


def report_duplicates(kind: str, duplicates: DuplicateLog, report: LoadReport, logger: logging.Logger):
    """Log one error per collided identifier, then discard the log."""
    for duplicate in duplicates:
        logger.error(f"{kind} has duplicates for {duplicate.describe()}")
        report.duplicates.append(duplicate)
    duplicates.clear()

