# assetdir - Directory-backed store of typed YAML records
#
# Loads one record per file, indexes records by identifier (optionally split
# by locale) and writes them back. Generator managers load records that
# produce the real asset instead of being it.
#
# Core concepts:
# - DataAsset: A record with a non-empty identifier
# - Entry: A value paired with the file it came from
# - AssetManager: Files decode straight into assets
# - GeneratorManager: Files decode into AssetGenerators
# - IdentityManager: Files decode into IdentityGenerators named by the file
# - ManagerFactory: Builds managers sharing one StoreConfig

from .asset import (
    AssetGenerator,
    DataAsset,
    Entry,
    Identifiable,
    IdentityGeneration,
    IdentityGenerator,
    Localizable,
)
from .codec import YamlCodec
from .config import StoreConfig, load_config
from .errors import (
    AssetDirError,
    AssetLoadError,
    AssetNotFoundError,
    DecodeError,
    EncodeError,
    FallbackMissingError,
    IndexConsistencyError,
    InvalidIdentifierError,
    ProductionError,
)
from .factory import ManagerFactory
from .index import AssetIndex, Duplicate
from .loader import LoadReport
from .manager import AssetManager, BaseManager, GeneratorManager, IdentityManager

__all__ = [
    # Records
    "Identifiable",
    "DataAsset",
    "Localizable",
    "AssetGenerator",
    "IdentityGenerator",
    "IdentityGeneration",
    "Entry",
    # Managers
    "BaseManager",
    "AssetManager",
    "GeneratorManager",
    "IdentityManager",
    "ManagerFactory",
    "AssetIndex",
    "Duplicate",
    "LoadReport",
    # Config / codec
    "StoreConfig",
    "load_config",
    "YamlCodec",
    # Errors
    "AssetDirError",
    "AssetLoadError",
    "AssetNotFoundError",
    "DecodeError",
    "EncodeError",
    "FallbackMissingError",
    "IndexConsistencyError",
    "InvalidIdentifierError",
    "ProductionError",
]

__version__ = "0.1.0"
