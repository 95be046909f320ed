"""Core configuration, factory and preference components."""

from promptforge.core.config import Settings, get_settings
from promptforge.core.factory import ComponentFactory
from promptforge.core.preferences import PreferencesRepository, UserPreferences

__all__ = [
    "Settings",
    "get_settings",
    "ComponentFactory",
    "PreferencesRepository",
    "UserPreferences",
]
