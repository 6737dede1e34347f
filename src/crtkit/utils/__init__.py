"""Utility functions for crtkit."""

from crtkit.utils.logging import configure_logging, get_logger, get_logger_with_context
from crtkit.utils.errors import (
    CrtError,
    NotFoundError,
    BadParamError,
    MissingAuthConfigError,
    ProviderError,
    ConfigurationError,
    validate_image_reference,
    safe_get,
)
from crtkit.utils.images import clean_image_id, short_image_id, split_repo_tag
from crtkit.utils.archive import extract_archive
from crtkit.utils.config import (
    CrtkitConfig,
    RuntimeSettings,
    RegistryConfig,
    OutputConfig,
    load_config,
    get_config,
    set_config,
)

__all__ = [
    # Logging
    "configure_logging",
    "get_logger",
    "get_logger_with_context",
    # Errors
    "CrtError",
    "NotFoundError",
    "BadParamError",
    "MissingAuthConfigError",
    "ProviderError",
    "ConfigurationError",
    "validate_image_reference",
    "safe_get",
    # Images
    "clean_image_id",
    "short_image_id",
    "split_repo_tag",
    # Archives
    "extract_archive",
    # Config
    "CrtkitConfig",
    "RuntimeSettings",
    "RegistryConfig",
    "OutputConfig",
    "load_config",
    "get_config",
    "set_config",
]
