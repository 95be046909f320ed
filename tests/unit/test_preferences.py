"""Unit tests for client-local preferences."""

import pytest

from promptforge.core.preferences import PreferencesRepository, UserPreferences
from promptforge.strategies.template_engine import (
    DEFAULT_INSTRUCTION_TABLES,
    GatewayProvider,
    IncompleteInstructionTableError,
    InstructionOverrides,
    Methodology,
)


class TestPreferencesRepository:
    """Test suite for PreferencesRepository."""

    @pytest.fixture
    def repo(self, tmp_path):
        """Create a repository backed by a temporary file."""
        return PreferencesRepository(tmp_path / "prefs" / "preferences.json")

    def test_missing_file_yields_defaults(self, repo):
        """Test that a fresh install starts with defaults."""
        prefs = repo.load()

        assert prefs == UserPreferences()
        assert prefs.selected_provider == GatewayProvider.GOOGLE
        assert prefs.api_key_for() is None

    def test_save_and_load(self, repo):
        """Test that saved preferences are read back."""
        prefs = UserPreferences(
            selected_provider=GatewayProvider.OPENROUTER,
            selected_model="anthropic/claude-3-haiku",
            api_keys={GatewayProvider.OPENROUTER: "sk-or-1"},
            custom_instruction="Keep it short.",
        )
        repo.save(prefs)

        loaded = repo.load()
        assert loaded == prefs
        assert loaded.api_key_for() == "sk-or-1"
        assert loaded.api_key_for(GatewayProvider.GOOGLE) is None
        assert not repo.path.with_suffix(".json.tmp").exists()

    def test_corrupt_file_yields_defaults(self, repo):
        """Test that unreadable JSON is logged and ignored."""
        repo.path.parent.mkdir(parents=True)
        repo.path.write_text("{not json", encoding="utf-8")

        assert repo.load() == UserPreferences()

    def test_undecodable_file_yields_defaults(self, repo):
        """Test that bytes that are not UTF-8 are logged and ignored."""
        repo.path.parent.mkdir(parents=True)
        repo.path.write_bytes(b"\xff\xfe{bad")

        assert repo.load() == UserPreferences()

    def test_invalid_values_yield_defaults(self, repo):
        """Test that JSON with unknown providers is ignored."""
        repo.path.parent.mkdir(parents=True)
        repo.path.write_text('{"selected_provider": "cohere"}', encoding="utf-8")

        assert repo.load() == UserPreferences()

    def test_update_merges_changes(self, repo):
        """Test that update keeps untouched fields."""
        repo.update(custom_instruction="Use examples.")
        updated = repo.update(selected_provider=GatewayProvider.DEEPSEEK)

        assert updated.custom_instruction == "Use examples."
        assert updated.selected_provider == GatewayProvider.DEEPSEEK
        assert repo.load() == updated

    def test_clear_api_keys(self, repo):
        """Test that every stored key is forgotten."""
        repo.update(api_keys={GatewayProvider.OPENAI: "sk-1", GatewayProvider.GOOGLE: "g-1"})

        cleared = repo.clear_api_keys()

        assert cleared.api_keys == {}
        assert repo.load().api_keys == {}

    def test_reset_instruction_overrides(self, repo):
        """Test that customized tables revert to the built-ins."""
        custom = {m: f"Custom {m.value}" for m in Methodology}
        repo.update(instruction_overrides=InstructionOverrides(methodologies=custom))
        assert repo.load().instruction_tables().lookup("methodologies", Methodology.DRY) == "Custom DRY"

        reset = repo.reset_instruction_overrides()

        assert reset.instruction_overrides.is_empty()
        assert reset.instruction_tables().to_dict() == DEFAULT_INSTRUCTION_TABLES.to_dict()


class TestUserPreferences:
    """Test suite for UserPreferences."""

    def test_blank_key_counts_as_missing(self):
        """Test that an empty stored key is not returned."""
        prefs = UserPreferences(api_keys={GatewayProvider.GOOGLE: ""})
        assert prefs.api_key_for() is None

    def test_incomplete_overrides_fail_when_applied(self):
        """Test that a partial category is rejected when tables are built."""
        prefs = UserPreferences(
            instruction_overrides=InstructionOverrides(methodologies={Methodology.TDD: "Tests first."})
        )
        with pytest.raises(IncompleteInstructionTableError):
            prefs.instruction_tables()
