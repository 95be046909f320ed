"""Unit tests for the enhancement instruction tables."""

import pytest

from promptforge.strategies.template_engine import (
    CATEGORIES,
    DEFAULT_INSTRUCTION_TABLES,
    Domain,
    IncompleteInstructionTableError,
    InstructionLookupError,
    InstructionOverrides,
    InstructionTables,
    Methodology,
    RoleType,
)


def _table_kwargs(**replacements):
    kwargs = {category: dict(getattr(DEFAULT_INSTRUCTION_TABLES, category)) for category in CATEGORIES}
    kwargs.update(replacements)
    return kwargs


class TestInstructionTables:
    """Test suite for InstructionTables."""

    def test_defaults_cover_every_member(self):
        """Test that every enum member (except the role sentinel) has text."""
        for category, enum_cls in CATEGORIES.items():
            table = getattr(DEFAULT_INSTRUCTION_TABLES, category)
            for member in enum_cls:
                if member is RoleType.NONE:
                    assert member not in table
                else:
                    assert table[member].strip()

    def test_incomplete_table_rejected_at_construction(self):
        """Test that a missing entry is reported with its value."""
        domains = dict(DEFAULT_INSTRUCTION_TABLES.domains)
        del domains[Domain.META]

        with pytest.raises(IncompleteInstructionTableError, match="Meta"):
            InstructionTables(**_table_kwargs(domains=domains))

    def test_lookup_accepts_enum_or_value(self):
        """Test that lookups work with members and their string values."""
        by_member = DEFAULT_INSTRUCTION_TABLES.lookup("domains", Domain.CODE)
        by_value = DEFAULT_INSTRUCTION_TABLES.lookup("domains", "Code")
        assert by_member == by_value
        assert by_member.startswith("This prompt is related to code.")

    def test_lookup_unknown_value_raises(self):
        """Test that an unknown value fails fast."""
        with pytest.raises(InstructionLookupError):
            DEFAULT_INSTRUCTION_TABLES.lookup("domains", "Astrology")

    def test_lookup_role_sentinel_raises(self):
        """Test that the None role has no instruction."""
        with pytest.raises(InstructionLookupError):
            DEFAULT_INSTRUCTION_TABLES.lookup("roles", RoleType.NONE)

    def test_lookup_unknown_category_raises(self):
        """Test that only the five categories can be looked up."""
        with pytest.raises(InstructionLookupError):
            DEFAULT_INSTRUCTION_TABLES.lookup("tones", "Friendly")

    def test_instruction_lookup_error_is_key_error(self):
        """Test that lookup failures can be handled as KeyError."""
        assert issubclass(InstructionLookupError, KeyError)
        assert issubclass(IncompleteInstructionTableError, ValueError)

    def test_to_dict_uses_enum_values(self):
        """Test serialization to plain strings."""
        data = DEFAULT_INSTRUCTION_TABLES.to_dict()
        assert set(data) == set(CATEGORIES)
        assert "Creative Writing" in data["domains"]
        assert "None" not in data["roles"]
        assert len(data["methodologies"]) == len(Methodology)


class TestInstructionOverrides:
    """Test suite for applying customized categories."""

    def test_no_overrides_returns_same_tables(self):
        """Test that None or empty overrides keep the built-ins."""
        assert DEFAULT_INSTRUCTION_TABLES.with_overrides(None) is DEFAULT_INSTRUCTION_TABLES
        merged = DEFAULT_INSTRUCTION_TABLES.with_overrides(InstructionOverrides())
        assert merged.to_dict() == DEFAULT_INSTRUCTION_TABLES.to_dict()
        assert InstructionOverrides().is_empty()

    def test_customized_category_shadows_builtin(self):
        """Test that a full customized category replaces the built-in one."""
        custom_roles = {
            RoleType.ARCHITECT: "Think in systems.",
            RoleType.DEVELOPER: "Think in code.",
            RoleType.TESTER: "Think in failures.",
        }
        overrides = InstructionOverrides(roles=custom_roles)
        merged = DEFAULT_INSTRUCTION_TABLES.with_overrides(overrides)

        assert not overrides.is_empty()
        assert merged.lookup("roles", RoleType.TESTER) == "Think in failures."
        assert merged.domains == DEFAULT_INSTRUCTION_TABLES.domains

    def test_partial_category_is_not_merged_per_key(self):
        """Test that a customized category missing keys is rejected."""
        overrides = InstructionOverrides(roles={RoleType.ARCHITECT: "Only this one."})
        with pytest.raises(IncompleteInstructionTableError, match="Developer"):
            DEFAULT_INSTRUCTION_TABLES.with_overrides(overrides)

    def test_empty_customized_category_is_rejected(self):
        """Test that an empty dict counts as customized, not as unset."""
        overrides = InstructionOverrides(methodologies={})
        with pytest.raises(IncompleteInstructionTableError):
            DEFAULT_INSTRUCTION_TABLES.with_overrides(overrides)

    def test_overrides_parse_string_keys(self):
        """Test that JSON-style string keys validate into enum members."""
        overrides = InstructionOverrides.model_validate(
            {"roles": {"Architect": "A", "Developer": "D", "Tester": "T"}}
        )
        assert overrides.roles == {RoleType.ARCHITECT: "A", RoleType.DEVELOPER: "D", RoleType.TESTER: "T"}
