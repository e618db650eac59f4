# assetdir/factory.py
"""
Manager factory.

A ManagerFactory carries the configuration (default locale, suffix, strict
decoding) into every manager it creates. Create one and pass it to whatever
needs managers:

    factory = ManagerFactory(StoreConfig(default_locale="en_us"))
    weapons = factory.asset_manager(Weapon, "data/weapons", localized=True)
    npcs = factory.identity_manager(NpcTemplate, "data/npcs")

``unloaded_*`` methods return empty managers for callers that want to
delay the first scan; the others reload before returning.
"""

import logging
from pathlib import Path
from typing import Optional, Type, TypeVar

from .config import StoreConfig
from .manager import AssetManager, BaseManager, GeneratorManager, IdentityManager

T = TypeVar("T")


class ManagerFactory:
    """
    Builds managers sharing one StoreConfig.

    Args:
        config: Settings for every manager (defaults when omitted)
    """

    def __init__(self, config: Optional[StoreConfig] = None):
        self.config = config or StoreConfig()

    @property
    def default_locale(self) -> str:
        return self.config.default_locale

    def _options(self, localized: bool, logger: Optional[logging.Logger],
                 fail_on_null_field: Optional[bool]) -> dict:
        strict = self.config.fail_on_null_field if fail_on_null_field is None else fail_on_null_field
        return {
            "suffix": self.config.suffix,
            "default_locale": self.default_locale if localized else None,
            "fail_on_null_field": strict,
            "logger": logger,
        }

    @staticmethod
    def _loaded(manager: BaseManager) -> BaseManager:
        manager.reload()
        return manager

    def unloaded_asset_manager(
        self,
        asset_class: Type[T],
        directory: Path | str,
        logger: Optional[logging.Logger] = None,
        fail_on_null_field: Optional[bool] = None,
        localized: bool = False,
    ) -> AssetManager[T]:
        """
        Asset manager that has not scanned its directory yet.

        Args:
            asset_class: Type each file decodes into
            directory: Root directory of the records
            logger: Diagnostics sink (module logger when omitted)
            fail_on_null_field: Override the configured strictness
            localized: Partition by locale, falling back to the default locale
        """
        return AssetManager(directory, asset_class, **self._options(localized, logger, fail_on_null_field))

    def asset_manager(self, asset_class: Type[T], directory: Path | str,
                      logger: Optional[logging.Logger] = None,
                      fail_on_null_field: Optional[bool] = None,
                      localized: bool = False) -> AssetManager[T]:
        """Asset manager, already reloaded."""
        return self._loaded(self.unloaded_asset_manager(
            asset_class, directory, logger, fail_on_null_field, localized))

    def unloaded_generator_manager(
        self,
        generator_class: type,
        directory: Path | str,
        logger: Optional[logging.Logger] = None,
        fail_on_null_field: Optional[bool] = None,
        localized: bool = False,
    ) -> GeneratorManager:
        """Generator manager that has not scanned its directory yet."""
        return GeneratorManager(directory, generator_class, **self._options(localized, logger, fail_on_null_field))

    def generator_manager(self, generator_class: type, directory: Path | str,
                          logger: Optional[logging.Logger] = None,
                          fail_on_null_field: Optional[bool] = None,
                          localized: bool = False) -> GeneratorManager:
        """Generator manager, already reloaded."""
        return self._loaded(self.unloaded_generator_manager(
            generator_class, directory, logger, fail_on_null_field, localized))

    def unloaded_identity_manager(
        self,
        generator_class: type,
        directory: Path | str,
        logger: Optional[logging.Logger] = None,
        fail_on_null_field: Optional[bool] = None,
        localized: bool = False,
    ) -> IdentityManager:
        """Identity manager that has not scanned its directory yet."""
        return IdentityManager(directory, generator_class, **self._options(localized, logger, fail_on_null_field))

    def identity_manager(self, generator_class: type, directory: Path | str,
                         logger: Optional[logging.Logger] = None,
                         fail_on_null_field: Optional[bool] = None,
                         localized: bool = False) -> IdentityManager:
        """Identity manager, already reloaded."""
        return self._loaded(self.unloaded_identity_manager(
            generator_class, directory, logger, fail_on_null_field, localized))
