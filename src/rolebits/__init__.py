from .config import AreaConfig, LogLevel, RoleBitsConfig, load_config_from_env
from .exceptions import (
    ConfigurationError,
    MalformedKeyError,
    RoleBitsError,
    UnknownAreaError,
    error_registry,
    register_error,
)
from .logging import (
    RoleBitsFormatter,
    RoleBitsLoggerAdapter,
    get_area_logger,
    safe_preview,
    setup_logging,
)
from .permissions import (
    DEFAULT_IMPLICATIONS,
    CatalogRegistry,
    LevelNameCache,
    Levels,
    PermissionArea,
    PermissionCatalog,
    composite_key,
    expand_levels,
    split_composite_key,
)

__all__ = [
    'AreaConfig',
    'LogLevel',
    'RoleBitsConfig',
    'load_config_from_env',
    'ConfigurationError',
    'MalformedKeyError',
    'RoleBitsError',
    'UnknownAreaError',
    'error_registry',
    'register_error',
    'RoleBitsFormatter',
    'RoleBitsLoggerAdapter',
    'get_area_logger',
    'safe_preview',
    'setup_logging',
    'DEFAULT_IMPLICATIONS',
    'CatalogRegistry',
    'LevelNameCache',
    'Levels',
    'PermissionArea',
    'PermissionCatalog',
    'composite_key',
    'expand_levels',
    'split_composite_key',
]
