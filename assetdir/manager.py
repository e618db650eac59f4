# assetdir/manager.py
"""
Directory-backed asset managers.

Three managers share one load pipeline (see loader.py):

- AssetManager: each file decodes straight into the asset
- GeneratorManager: each file decodes into an AssetGenerator, whose
  ``generate()`` produces the asset
- IdentityManager: each file decodes into an IdentityGenerator; the file
  name is the identifier passed to ``generate(identifier)``

Layout:
    directory/
        sword.yml                 # any depth is scanned on reload
        weapons/bow.yml
        fr_fr/sword.yml           # add() target for locale-aware managers

Every manager starts empty. ``reload()`` rebuilds the whole index from a
directory scan and swaps it in only once the scan (and production) has
succeeded. ``add()`` writes one file and inserts one entry without a
rescan. For generator managers ``add()`` updates the stored generators
only; produced assets are refreshed by the next ``reload()``, which runs
every generator again.
"""

import logging
import threading
import time
from pathlib import Path
from typing import Any, Dict, Generic, Iterator, List, Optional, Set, Type, TypeVar

from .asset import AssetGenerator, Entry, IdentityGeneration, IdentityGenerator, locale_of
from .codec import YamlCodec
from .errors import (
    AssetNotFoundError,
    EncodeError,
    IndexConsistencyError,
    InvalidIdentifierError,
    ProductionError,
)
from .files import normalize_suffix, write_file
from .index import AssetIndex, IndexBuilder
from .loader import (
    LoadReport,
    Reader,
    asset_reader,
    identity_reader,
    report_duplicates,
    scan_directory,
)

T = TypeVar("T")


def _check_identifier(identifier: Any) -> str:
    if not isinstance(identifier, str) or not identifier.strip():
        raise InvalidIdentifierError(f"identifier must be a non-empty string, got {identifier!r}")
    return identifier


class BaseManager(Generic[T]):
    """
    Index, lookup and write-back shared by all managers.

    Subclasses implement ``_load()`` (build fresh indexes) and
    ``_install()`` (make them visible).

    Args:
        directory: Root directory of the records
        stored_class: Type each file decodes into
        suffix: File suffix to scan for and write with
        default_locale: Enables locale partitions when set
        fail_on_null_field: Reject records with missing or null fields
        logger: Where diagnostics go; the module logger when omitted
    """

    def __init__(
        self,
        directory: Path | str,
        stored_class: type,
        suffix: str = ".yml",
        default_locale: Optional[str] = None,
        fail_on_null_field: bool = False,
        logger: Optional[logging.Logger] = None,
    ):
        self.directory = Path(directory)
        self.stored_class = stored_class
        self.suffix = normalize_suffix(suffix)
        self.default_locale = default_locale.lower() if default_locale else None
        self.codec = YamlCodec(strict=fail_on_null_field)
        self.logger = logger or logging.getLogger(__name__)
        self.last_report: Optional[LoadReport] = None
        self._lock = threading.RLock()
        self._index: AssetIndex[T] = self._empty_index()

    @property
    def localized(self) -> bool:
        return self.default_locale is not None

    @property
    def fail_on_null_field(self) -> bool:
        return self.codec.strict

    @property
    def loaded(self) -> bool:
        """True once a reload has completed."""
        return self.last_report is not None

    @property
    def name(self) -> str:
        return getattr(self.stored_class, "__qualname__", str(self.stored_class))

    def _empty_index(self) -> AssetIndex:
        return AssetIndex(self.directory, self.default_locale)

    def _builder(self) -> IndexBuilder:
        return IndexBuilder(self.directory, self.default_locale)

    # -- reload ------------------------------------------------------------

    def reload(self) -> LoadReport:
        """
        Rebuild the index from a full directory scan.

        All or nothing: if any file fails, the previously visible index
        stays in place and the error propagates.

        Returns:
            LoadReport describing the scan

        Raises:
            AssetLoadError: A file could not be decoded or has no identifier
            ProductionError: A generator failed (generator managers)
        """
        with self._lock:
            start = time.time()
            report = LoadReport(directory=self.directory)
            indexes = self._load(report)
            report.elapsed = time.time() - start
            self._install(*indexes)
            self.last_report = report
            self.logger.info(
                f"{self.name} loaded with identifiers: [{','.join(sorted(self._stored_identifiers()))}]"
            )
            return report

    def _stored_identifiers(self) -> Set[str]:
        """Identifiers of the records read from disk."""
        return self.identifiers()

    def _load(self, report: LoadReport) -> tuple:
        raise NotImplementedError

    def _install(self, *indexes: AssetIndex):
        raise NotImplementedError

    def _scan(self, read: Reader, report: LoadReport) -> AssetIndex:
        builder = self._builder()
        report.files_scanned = scan_directory(self.directory, self.suffix, read, builder, self.logger)
        report.loaded = len(builder)
        report_duplicates(self.name, builder.duplicates, report, self.logger)
        return builder.build()

    # -- lookup ------------------------------------------------------------

    def fetch(self, identifier: str, locale: Optional[str] = None) -> Optional[Entry[T]]:
        """
        Entry for ``identifier``, or None if unknown.

        ``locale`` is ignored by non-localized managers. For localized ones it
        defaults to the default locale and falls back to it when the
        requested locale has no partition.

        Raises:
            FallbackMissingError: Neither ``locale`` nor the default locale
                has a partition
        """
        return self._index.lookup(identifier, locale)

    def get(self, identifier: str, locale: Optional[str] = None) -> Entry[T]:
        """Like ``fetch()`` but raises AssetNotFoundError instead of returning None."""
        entry = self.fetch(identifier, locale)
        if entry is None:
            raise AssetNotFoundError(identifier, self.name)
        return entry

    def identifiers(self) -> Set[str]:
        """Distinct identifiers across all locales."""
        return self._index.identifiers()

    def locales(self) -> List[str]:
        """Loaded locale partitions (empty for non-localized managers)."""
        return self._index.locales()

    def __iter__(self) -> Iterator[T]:
        """
        Values in identifier order.

        Reads one snapshot; localized managers yield the default-locale value
        when there is one, otherwise the first locale holding the identifier.
        """
        for _, value in self._items(self._index):
            yield value

    def _items(self, index: AssetIndex) -> Iterator[tuple]:
        for identifier in sorted(index.identifiers()):
            entry = index.lookup_any(identifier)
            if entry is None:
                raise IndexConsistencyError(f"'{identifier}' is listed but has no entry in {self.directory}")
            yield identifier, entry.value

    def __len__(self) -> int:
        return len(self._index)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._index

    def size(self) -> int:
        return len(self)

    def is_empty(self) -> bool:
        return len(self) == 0

    def as_map(self) -> Dict[str, T]:
        """identifier -> value, following iteration order."""
        return dict(self._items(self._index))

    # -- write-back ----------------------------------------------------------

    def _target_path(self, identifier: str, locale: Optional[str], previous: Optional[Entry]) -> Path:
        # Overwrite in place when the identifier already has a file
        if previous is not None:
            return previous.path
        if self.localized:
            key = self._index.partition_key(locale)
            return self.directory / key / f"{identifier}{self.suffix}"
        return self.directory / f"{identifier}{self.suffix}"

    def _persist(self, index: AssetIndex, identifier: str, locale: Optional[str],
                 payload: Any, value: Any) -> Optional[AssetIndex]:
        """
        Write ``payload`` for ``identifier`` and return ``index`` with the new entry.

        Returns None (and leaves ``index`` alone) when encoding or writing fails.
        """
        previous = index.peek(identifier, locale)
        path = self._target_path(identifier, locale, previous)
        try:
            write_file(path, self.codec.encode(payload))
        except (EncodeError, OSError) as e:
            self.logger.error(f"Failed to write '{identifier}' to {path}: {e}")
            return None
        if previous is not None:
            self.logger.info(f"{previous.path} ({identifier}) was replaced by {path}")
        else:
            self.logger.debug(f"Wrote {identifier} to {path}")
        return index.with_entry(identifier, locale, Entry(path=path, value=value))


class AssetManager(BaseManager[T]):
    """
    Loads each file directly into the asset type.

    Example:
        manager = AssetManager("data/weapons", Weapon)
        manager.reload()
        sword = manager.get("sword").value
    """

    def __init__(self, directory: Path | str, asset_class: Type[T], **kwargs):
        super().__init__(directory, asset_class, **kwargs)

    @property
    def asset_class(self) -> Type[T]:
        return self.stored_class

    def _load(self, report: LoadReport) -> tuple:
        return (self._scan(asset_reader(self.codec, self.stored_class), report),)

    def _install(self, index: AssetIndex):
        self._index = index

    def add(self, element: T) -> bool:
        """
        Write ``element`` to disk and index it.

        The index is only updated after the file is written.

        Returns:
            False if the element could not be encoded or written

        Raises:
            InvalidIdentifierError: The element has no usable identifier
        """
        identifier = _check_identifier(getattr(element, "identifier", None))
        with self._lock:
            updated = self._persist(self._index, identifier, locale_of(element), element, element)
            if updated is None:
                return False
            self._index = updated
            return True


class _GeneratingManager(BaseManager[T]):
    """Two-stage manager: stored generators, produced assets."""

    def __init__(self, directory: Path | str, generator_class: type, **kwargs):
        super().__init__(directory, generator_class, **kwargs)
        self._generators: AssetIndex = self._empty_index()

    @property
    def generator_class(self) -> type:
        return self.stored_class

    def generator_identifiers(self) -> Set[str]:
        """Identifiers of the stored generators (not the produced assets)."""
        return self._generators.identifiers()

    def _stored_identifiers(self) -> Set[str]:
        return self.generator_identifiers()

    def _install(self, generators: AssetIndex, produced: AssetIndex):
        self._generators = generators
        self._index = produced

    def get(self, identifier: str, locale: Optional[str] = None) -> Entry[T]:
        entry = self.fetch(identifier, locale)
        if entry is None:
            raise AssetNotFoundError(identifier, f"{self.name} generation")
        return entry

    def _produce(self, generators: AssetIndex, report: LoadReport) -> AssetIndex:
        builder = self._builder()
        for key, entry in generators.entries():
            produced = self._generate(entry, report)
            if produced is None:
                continue
            identifier, value = produced
            self.logger.debug(f"loaded generation: {identifier}")
            builder.insert(identifier, key or None, Entry(path=entry.path, value=value))
        report.produced = len(builder)
        report_duplicates(f"{self.name} generations", builder.duplicates, report, self.logger)
        index = builder.build()
        self.logger.info(f"{self.name} loaded with generations: [{','.join(sorted(index.identifiers()))}]")
        return index

    def _generate(self, entry: Entry, report: LoadReport) -> Optional[tuple]:
        raise NotImplementedError


class GeneratorManager(_GeneratingManager[T]):
    """
    Loads AssetGenerators and exposes what they produce.

    A generator stored as ``g1`` that produces an asset ``a1`` is found with
    ``fetch("a1")``; the generator itself is never returned.
    """

    def _load(self, report: LoadReport) -> tuple:
        generators = self._scan(asset_reader(self.codec, self.stored_class), report)
        return generators, self._produce(generators, report)

    def _generate(self, entry: Entry, report: LoadReport) -> Optional[tuple]:
        generator: AssetGenerator[T] = entry.value
        try:
            value = generator.generate()
        except Exception as e:
            raise ProductionError(entry.path, generator.identifier, repr(e)) from e
        identifier = getattr(value, "identifier", None)
        if not isinstance(identifier, str) or not identifier.strip():
            raise ProductionError(entry.path, generator.identifier, "produced asset has no identifier")
        return identifier, value

    def add(self, element: AssetGenerator[T]) -> bool:
        """
        Write a generator to disk and index it.

        The produced asset appears after the next ``reload()``.

        Returns:
            False if the generator could not be encoded or written
        """
        identifier = _check_identifier(getattr(element, "identifier", None))
        with self._lock:
            updated = self._persist(self._generators, identifier, locale_of(element), element, element)
            if updated is None:
                return False
            self._generators = updated
            return True


class IdentityManager(_GeneratingManager[T]):
    """
    Loads IdentityGenerators named by their file.

    ``npc1.yml`` holds only generator settings; after ``reload()``,
    ``fetch("npc1")`` returns ``generator.generate("npc1")``.

    A generator that returns None is logged ("asset is null for file ...")
    and skipped; the reload carries on.
    """

    def _load(self, report: LoadReport) -> tuple:
        generators = self._scan(identity_reader(self.codec, self.stored_class, self.suffix), report)
        return generators, self._produce(generators, report)

    def _generate(self, entry: Entry, report: LoadReport) -> Optional[tuple]:
        generation: IdentityGeneration[T] = entry.value
        try:
            value = generation.asset()
        except Exception as e:
            raise ProductionError(entry.path, generation.identifier, repr(e)) from e
        if value is None:
            self.logger.error(f"asset is null for file {entry.path}")
            report.null_productions.append(entry.path)
            return None
        return generation.identifier, value

    def add(self, element: IdentityGeneration[T]) -> bool:
        """
        Write the wrapped generator to ``<identifier><suffix>`` and index it.

        Only the generator is stored; the identifier comes back from the
        file name on the next ``reload()``.

        Returns:
            False if the generator could not be encoded or written
        """
        identifier = _check_identifier(getattr(element, "identifier", None))
        generator: IdentityGenerator[T] = element.generator
        with self._lock:
            updated = self._persist(self._generators, identifier, locale_of(generator), generator, element)
            if updated is None:
                return False
            self._generators = updated
            return True
