"""Client-local user preferences.

Holds what a single user configures in the UI: provider API keys, the
selected provider and model, a free-text custom instruction, and any
customized instruction tables. Preferences are persisted as JSON on the
client's machine and passed explicitly into composition and gateway calls;
nothing in the template engine reads them implicitly.
"""

import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from promptforge.strategies.template_engine.instructions import (
    DEFAULT_INSTRUCTION_TABLES,
    InstructionOverrides,
    InstructionTables,
)
from promptforge.strategies.template_engine.models import GatewayProvider

logger = logging.getLogger(__name__)

DEFAULT_PREFERENCES_PATH = Path.home() / ".promptforge" / "preferences.json"


class UserPreferences(BaseModel):
    """Settings a user edits in the settings dialogs."""

    selected_provider: GatewayProvider = Field(default=GatewayProvider.GOOGLE)
    selected_model: str | None = Field(default=None, description="None uses the gateway default")
    api_keys: dict[GatewayProvider, str] = Field(default_factory=dict)
    custom_instruction: str = Field(default="")
    instruction_overrides: InstructionOverrides = Field(default_factory=InstructionOverrides)

    def api_key_for(self, provider: GatewayProvider | None = None) -> str | None:
        """Return the stored key for ``provider`` (default: the selected one)."""
        return self.api_keys.get(provider or self.selected_provider) or None

    def instruction_tables(
        self,
        base: InstructionTables = DEFAULT_INSTRUCTION_TABLES,
    ) -> InstructionTables:
        """Return ``base`` shadowed by the customized categories."""
        return base.with_overrides(self.instruction_overrides)


class PreferencesRepository:
    """Load/save lifecycle for ``UserPreferences`` stored in a JSON file.

    Example:
        ```python
        repo = PreferencesRepository(Path("~/.promptforge/preferences.json").expanduser())
        prefs = repo.load()
        repo.save(prefs.model_copy(update={"custom_instruction": "Be terse."}))
        ```
    """

    def __init__(self, path: Path | str = DEFAULT_PREFERENCES_PATH) -> None:
        """Initialize the repository.

        Args:
            path: Location of the preferences file.
        """
        self._path = Path(path)

    @property
    def path(self) -> Path:
        """Return the preferences file path."""
        return self._path

    def load(self) -> UserPreferences:
        """Load preferences, falling back to defaults.

        A missing file yields defaults silently; an unreadable or invalid
        file is logged and also yields defaults.

        Returns:
            The stored preferences or defaults.
        """
        if not self._path.exists():
            return UserPreferences()

        try:
            return UserPreferences.model_validate_json(self._path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, ValidationError) as e:
            logger.error(f"Failed to read preferences from {self._path}: {e}")
            return UserPreferences()

    def save(self, preferences: UserPreferences) -> None:
        """Persist preferences, replacing the file atomically.

        Args:
            preferences: The preferences to store.
        """
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp_path.write_text(preferences.model_dump_json(indent=2), encoding="utf-8")
        tmp_path.replace(self._path)
        logger.info(f"Saved preferences to {self._path}")

    def update(self, **changes: Any) -> UserPreferences:
        """Apply field changes to the stored preferences and save them.

        Args:
            **changes: Field values to replace.

        Returns:
            The updated preferences.
        """
        current = self.load()
        updated = UserPreferences.model_validate({**current.model_dump(), **changes})
        self.save(updated)
        return updated

    def clear_api_keys(self) -> UserPreferences:
        """Forget every stored API key."""
        return self.update(api_keys={})

    def reset_instruction_overrides(self) -> UserPreferences:
        """Drop customized instruction tables, reverting to the built-ins."""
        return self.update(instruction_overrides=InstructionOverrides())
