"""
Configuration module for transl.

Exports the main components for convenient imports.
"""

from .loader import load_config
from .schema import AppConfig, LoggingConfig, TranslatorConfig

__all__ = [
    "load_config",
    "AppConfig",
    "LoggingConfig",
    "TranslatorConfig",
]
