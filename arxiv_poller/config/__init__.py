"""Configuration package exports."""

from .loader import ConfigLocator, load_config, save_config
from .models import (
    DEFAULT_API_URL,
    MAX_PAGE_SIZE,
    PollerConfig,
    SortBy,
    SortOrder,
    format_duration,
    parse_duration,
)

__all__ = [
    "ConfigLocator",
    "DEFAULT_API_URL",
    "MAX_PAGE_SIZE",
    "PollerConfig",
    "SortBy",
    "SortOrder",
    "format_duration",
    "load_config",
    "parse_duration",
    "save_config",
]
