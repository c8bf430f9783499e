from .config import Settings, get_settings
from .principal import Principal

__all__ = ["Settings", "get_settings", "Principal"]
