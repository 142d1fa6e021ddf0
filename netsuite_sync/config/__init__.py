"""Configuration package for runtime settings and startup validation."""

from .settings import DEFAULT_PAGINATED_TABLES, AppSettings, SettingsLoadError, config_load_settings

__all__ = ["AppSettings", "DEFAULT_PAGINATED_TABLES", "SettingsLoadError", "config_load_settings"]
