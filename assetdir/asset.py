# assetdir/asset.py
"""
Asset capabilities and the provenance entry.

A data asset is anything with a non-empty ``identifier``. Assets may also
carry a ``locale`` tag. Generators are records whose purpose is to produce
another asset:

- AssetGenerator: self-identified, ``generate()`` takes no arguments
- IdentityGenerator: identified from outside, ``generate(identifier)``

Entry pairs a resolved value with the file it came from.

Records are normally dataclasses:

    @dataclass
    class Weapon(DataAsset, Localizable):
        identifier: str
        damage: int = 0
        locale: Optional[str] = None
"""

import functools
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Generic, Optional, TypeVar, Union

T = TypeVar("T")


@functools.total_ordering
class Identifiable:
    """
    Something named by a case-sensitive identifier string.

    Subclasses provide ``identifier`` (usually as a dataclass field).
    Identifiables order by identifier, so ``sorted(assets)`` works.
    """

    identifier: str

    def __lt__(self, other: Any) -> bool:
        if not isinstance(other, Identifiable):
            return NotImplemented
        return self.identifier < other.identifier


class DataAsset(Identifiable):
    """The unit of storage."""


class Localizable:
    """
    Mixin for records that carry an optional locale tag.

    ``None`` means locale-agnostic; managers file such records under
    their default locale.
    """

    locale: Optional[str] = None

    def is_localizable(self) -> bool:
        return self.locale is not None

    def matches_locale(self, other: Union[str, "Localizable", None]) -> bool:
        """Case-insensitive locale match. Never matches when own locale is unset."""
        if isinstance(other, Localizable):
            other = other.locale
        if self.locale is None or other is None:
            return False
        return self.locale.lower() == other.lower()


def locale_of(value: Any) -> Optional[str]:
    """Locale tag of a value, or None when it is not Localizable."""
    if isinstance(value, Localizable):
        return value.locale
    return None


class AssetGenerator(DataAsset, ABC, Generic[T]):
    """
    A stored record that produces the real asset.

    The generator's own identifier and locale decide where it is indexed
    during loading; the produced asset is indexed under its own identifier.
    """

    @abstractmethod
    def generate(self) -> T:
        pass


class IdentityGenerator(ABC, Generic[T]):
    """
    A stored record that produces an asset for an identifier given from outside.

    Returning None means the generator cannot build a value for that identifier.
    """

    @abstractmethod
    def generate(self, identifier: str) -> Optional[T]:
        pass


@dataclass(frozen=True)
class IdentityGeneration(Identifiable, Generic[T]):
    """An identifier paired with the IdentityGenerator that builds its asset."""
    identifier: str
    generator: IdentityGenerator[T]

    def asset(self) -> Optional[T]:
        return self.generator.generate(self.identifier)


@dataclass(frozen=True)
class Entry(Generic[T]):
    """
    Provenance pair: source file and the resolved value.

    Attributes:
        path: File the value was loaded from (or written to)
        value: The decoded or produced value
    """
    path: Path
    value: T
