"""Configuration module for simpleconvert settings and defaults."""

from .config import ConversionConfig
from . import default_config

__all__ = ["ConversionConfig", "default_config"]
