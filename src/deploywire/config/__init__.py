"""
deploywire configuration.

Settings are read from DEPLOYWIRE_* environment variables and an optional
.env file.
"""

from deploywire.config.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
]
