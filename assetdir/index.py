# assetdir/index.py
"""
Identifier index with optional locale partitions.

An AssetIndex is an immutable snapshot. Managers never mutate one in place:
reload() fills an IndexBuilder and swaps the finished snapshot in, add()
derives a new snapshot with ``with_entry()``. Readers holding the old
snapshot keep seeing a consistent view.

Non-localized indexes keep a single partition. Localized indexes keep one
partition per lower-cased locale tag; a lookup for a locale without a
partition falls back to the default-locale partition, and fails with
FallbackMissingError when that is missing too.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Generic, Iterator, List, Optional, Set, Tuple, TypeVar

from .asset import Entry
from .errors import FallbackMissingError

T = TypeVar("T")

Partition = Dict[str, Entry]

# Partition key used by non-localized indexes
_FLAT = ""


def normalize_locale(locale: Optional[str], default_locale: str) -> str:
    """Resolve an optional locale tag to a partition key."""
    if not locale:
        locale = default_locale
    return locale.strip().lower()


@dataclass
class Duplicate:
    """Every file that claimed one identifier during a scan, in scan order."""
    identifier: str
    locale: Optional[str]
    paths: List[Path] = field(default_factory=list)

    def describe(self) -> str:
        where = f" ({self.locale})" if self.locale else ""
        joined = ", ".join(str(p) for p in self.paths)
        return f"'{self.identifier}'{where}: {{{joined}}}"


class DuplicateLog:
    """Collects identifier collisions for a single scan."""

    def __init__(self):
        self._duplicates: Dict[Tuple[str, str], Duplicate] = {}

    def record(self, identifier: str, locale: Optional[str], previous: Path, current: Path):
        key = (locale or _FLAT, identifier)
        duplicate = self._duplicates.get(key)
        if duplicate is None:
            duplicate = Duplicate(identifier=identifier, locale=locale, paths=[previous.absolute()])
            self._duplicates[key] = duplicate
        duplicate.paths.append(current.absolute())

    def __len__(self) -> int:
        return len(self._duplicates)

    def __iter__(self) -> Iterator[Duplicate]:
        return iter(self._duplicates.values())

    def clear(self):
        self._duplicates.clear()


class AssetIndex(Generic[T]):
    """
    Read-only identifier -> Entry mapping, optionally split by locale.

    Args:
        directory: Root the entries were loaded from (used in error messages)
        default_locale: Locale to fall back to; None for a non-localized index
        partitions: Partition key -> identifier -> Entry (taken over, not copied)
    """

    def __init__(
        self,
        directory: Path,
        default_locale: Optional[str] = None,
        partitions: Optional[Dict[str, Partition]] = None,
    ):
        self.directory = Path(directory)
        self.default_locale = default_locale.lower() if default_locale else None
        self._partitions: Dict[str, Partition] = partitions if partitions is not None else {}

    @property
    def localized(self) -> bool:
        return self.default_locale is not None

    def partition_key(self, locale: Optional[str]) -> str:
        if not self.localized:
            return _FLAT
        return normalize_locale(locale, self.default_locale)

    def lookup(self, identifier: str, locale: Optional[str] = None) -> Optional[Entry[T]]:
        """
        Find the entry for ``identifier``.

        Returns None for an unknown identifier.

        Raises:
            FallbackMissingError: Localized index without a partition for
                ``locale`` nor for the default locale
        """
        return self._partition_for(locale).get(identifier)

    def _partition_for(self, locale: Optional[str]) -> Partition:
        if not self.localized:
            return self._partitions.get(_FLAT, {})
        partition = self._partitions.get(self.partition_key(locale))
        if partition is not None:
            return partition
        partition = self._partitions.get(self.default_locale)
        if partition is None:
            raise FallbackMissingError(self.directory, self.default_locale, locale)
        return partition

    def peek(self, identifier: str, locale: Optional[str] = None) -> Optional[Entry[T]]:
        """Entry in exactly the partition for ``locale``, without fallback."""
        return self._partitions.get(self.partition_key(locale), {}).get(identifier)

    def lookup_any(self, identifier: str) -> Optional[Entry[T]]:
        """Entry from the default partition if present, else the first locale holding it."""
        if not self.localized:
            return self._partitions.get(_FLAT, {}).get(identifier)
        entry = self._partitions.get(self.default_locale, {}).get(identifier)
        if entry is not None:
            return entry
        for key in sorted(self._partitions):
            entry = self._partitions[key].get(identifier)
            if entry is not None:
                return entry
        return None

    def identifiers(self) -> Set[str]:
        """Distinct identifiers across every partition."""
        result: Set[str] = set()
        for partition in self._partitions.values():
            result.update(partition)
        return result

    def locales(self) -> List[str]:
        """Partition keys present in the index (empty for non-localized indexes)."""
        if not self.localized:
            return []
        return sorted(self._partitions)

    def entries(self) -> Iterator[Tuple[str, Entry[T]]]:
        """(partition key, entry) pairs, partitions in sorted order."""
        for key in sorted(self._partitions):
            for entry in self._partitions[key].values():
                yield key, entry

    def with_entry(self, identifier: str, locale: Optional[str], entry: Entry[T]) -> "AssetIndex[T]":
        """Copy of this index with one entry inserted or replaced."""
        key = self.partition_key(locale)
        partitions = dict(self._partitions)
        partition = dict(partitions.get(key, {}))
        partition[identifier] = entry
        partitions[key] = partition
        return AssetIndex(self.directory, self.default_locale, partitions)

    def __len__(self) -> int:
        return len(self.identifiers())

    def __contains__(self, identifier: object) -> bool:
        return any(identifier in p for p in self._partitions.values())


class IndexBuilder(Generic[T]):
    """
    Mutable index used while scanning a directory.

    Collisions are not rejected: the later entry replaces the earlier one
    and both paths go into ``duplicates``.
    """

    def __init__(self, directory: Path, default_locale: Optional[str] = None):
        self.directory = Path(directory)
        self.default_locale = default_locale.lower() if default_locale else None
        self.duplicates = DuplicateLog()
        self._partitions: Dict[str, Partition] = {}

    def partition_key(self, locale: Optional[str]) -> str:
        if self.default_locale is None:
            return _FLAT
        return normalize_locale(locale, self.default_locale)

    def insert(self, identifier: str, locale: Optional[str], entry: Entry[T]) -> Optional[Entry[T]]:
        """Insert ``entry``; returns the entry it replaced, if any."""
        key = self.partition_key(locale)
        partition = self._partitions.setdefault(key, {})
        previous = partition.get(identifier)
        partition[identifier] = entry
        if previous is not None:
            self.duplicates.record(identifier, key or None, previous.path, entry.path)
        return previous

    def __len__(self) -> int:
        return sum(len(p) for p in self._partitions.values())

    def build(self) -> AssetIndex[T]:
        return AssetIndex(self.directory, self.default_locale, self._partitions)
