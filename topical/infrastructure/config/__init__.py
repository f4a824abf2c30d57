from .settings import TopicalSettings, get_settings, reset_settings

__all__ = ["TopicalSettings", "get_settings", "reset_settings"]
