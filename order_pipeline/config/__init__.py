"""Configuration package for the order pipeline."""
from .settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
