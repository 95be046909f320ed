"""Unit tests for the enhancement prompt composer."""

import pytest

from promptforge.strategies.template_engine import (
    CLOSING_DIRECTIVE,
    DEFAULT_INSTRUCTION_TABLES,
    Domain,
    InstructionLookupError,
    InstructionOverrides,
    Methodology,
    ModelType,
    ProviderType,
    RoleType,
    TemplateAttributes,
    build_enhancement_request,
    compose_enhancement_instruction,
)

T = DEFAULT_INSTRUCTION_TABLES


class TestComposeEnhancementInstruction:
    """Test suite for compose_enhancement_instruction."""

    @pytest.fixture
    def code_attributes(self):
        """Attributes of a code template written for Claude by a developer."""
        return TemplateAttributes(
            domain=Domain.CODE,
            provider_type=ProviderType.ANTHROPIC,
            model_type=ModelType.CLAUDE_SONNET_3_5,
            role_type=RoleType.DEVELOPER,
            methodologies=[Methodology.TDD, Methodology.DRY],
        )

    def test_full_scenario(self, code_attributes):
        """Test that all five segments are joined in order before the directive."""
        expected = " ".join(
            [
                T.domains[Domain.CODE],
                T.providers[ProviderType.ANTHROPIC],
                T.models[ModelType.CLAUDE_SONNET_3_5],
                T.roles[RoleType.DEVELOPER],
                T.methodologies[Methodology.TDD],
                T.methodologies[Methodology.DRY],
            ]
        )
        assert compose_enhancement_instruction(code_attributes) == f"{expected}\n\n{CLOSING_DIRECTIVE}"

    def test_deterministic(self, code_attributes):
        """Test that identical inputs produce identical output."""
        assert compose_enhancement_instruction(code_attributes, "Be brief.") == (
            compose_enhancement_instruction(code_attributes, "Be brief.")
        )

    def test_role_none_omits_role_segment(self):
        """Test that the None role contributes nothing."""
        attributes = TemplateAttributes(
            domain=Domain.GENERAL,
            provider_type=ProviderType.OPENAI,
            model_type=ModelType.GPT_4,
            role_type=RoleType.NONE,
        )
        instruction = compose_enhancement_instruction(attributes)

        assert instruction == (
            f"{T.domains[Domain.GENERAL]} {T.providers[ProviderType.OPENAI]} "
            f"{T.models[ModelType.GPT_4]}\n\n{CLOSING_DIRECTIVE}"
        )
        for role_text in T.roles.values():
            assert role_text not in instruction

    def test_methodologies_follow_stored_order(self, code_attributes):
        """Test that methodology clauses keep insertion order."""
        reversed_attributes = code_attributes.model_copy(
            update={"methodologies": [Methodology.DRY, Methodology.TDD]}
        )
        instruction = compose_enhancement_instruction(reversed_attributes)
        assert instruction.index(T.methodologies[Methodology.DRY]) < instruction.index(
            T.methodologies[Methodology.TDD]
        )

    def test_custom_instruction_appended_after_space(self, code_attributes):
        """Test that custom text comes after the segments and before the directive."""
        instruction = compose_enhancement_instruction(code_attributes, "Use British spelling.")
        body, directive = instruction.split("\n\n")

        assert body.endswith(f"{T.methodologies[Methodology.DRY]} Use British spelling.")
        assert directive == CLOSING_DIRECTIVE

    @pytest.mark.parametrize("custom", [None, "", "   ", "\n\t"])
    def test_blank_custom_instruction_omitted(self, code_attributes, custom):
        """Test that empty or whitespace-only custom text is ignored."""
        assert compose_enhancement_instruction(code_attributes, custom) == (
            compose_enhancement_instruction(code_attributes)
        )

    def test_unknown_domain_raises(self):
        """Test that a value outside the tables fails fast."""
        attributes = TemplateAttributes.model_construct(
            domain="Astrology",
            provider_type=ProviderType.OPENAI,
            model_type=ModelType.GPT_4,
            role_type=RoleType.NONE,
            methodologies=[],
        )
        with pytest.raises(InstructionLookupError):
            compose_enhancement_instruction(attributes)

    def test_customized_tables_are_used(self, code_attributes):
        """Test that overridden categories supply the clause text."""
        tables = T.with_overrides(
            InstructionOverrides(
                providers={member: f"Target {member.value}." for member in ProviderType},
            )
        )
        instruction = compose_enhancement_instruction(code_attributes, tables=tables)

        assert "Target Anthropic." in instruction
        assert T.providers[ProviderType.ANTHROPIC] not in instruction


class TestBuildEnhancementRequest:
    """Test suite for build_enhancement_request."""

    def test_wraps_prompt_and_instruction(self):
        """Test the outbound text layout."""
        attributes = TemplateAttributes()
        request = build_enhancement_request("Write a poem about {{topic}}", attributes)

        assert request.prompt == "Write a poem about {{topic}}"
        assert request.instruction == compose_enhancement_instruction(attributes)
        assert request.to_prompt() == (
            "Please enhance the following prompt while maintaining its core intent and purpose: "
            f"Original Prompt: Write a poem about {{{{topic}}}} "
            f"Enhancement Instructions: {request.instruction}"
        )

    def test_attributes_from_template_like_object(self):
        """Test that attributes read from an object with string values."""

        class Row:
            domain = "Marketing"
            provider_type = "Gemini"
            model_type = "Gemini-Pro"
            role_type = "None"
            methodologies = ["BDD"]

        attributes = TemplateAttributes.model_validate(Row())
        instruction = build_enhancement_request("x", attributes).instruction

        assert instruction.startswith(T.domains[Domain.MARKETING])
        assert T.methodologies[Methodology.BDD] in instruction
