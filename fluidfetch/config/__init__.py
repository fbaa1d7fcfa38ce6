"""
fluidfetch Configuration Package
================================

Type-safe, immutable settings loaded from environment variables and an
optional YAML file.
"""

from fluidfetch.config.settings import FluidsSettings, load_settings

__all__ = [
    "FluidsSettings",
    "load_settings",
]
