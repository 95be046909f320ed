"""Enhancement instruction tables.

Five static lookup tables map each template attribute to the instruction
clause it contributes to an enhancement request. The built-in tables can be
shadowed per category by a user-customized copy; a customized category
replaces the built-in one wholesale, there is no per-key merge.

Every table must cover every member of its enum. This is checked when an
``InstructionTables`` instance is constructed, so adding an enum member
without a matching instruction fails at import time rather than producing a
silently incomplete instruction later.
"""

import enum
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, Field

from promptforge.strategies.template_engine.models import (
    Domain,
    Methodology,
    ModelType,
    ProviderType,
    RoleType,
)

logger = logging.getLogger(__name__)


class IncompleteInstructionTableError(ValueError):
    """Raised when an instruction table is missing entries for enum members."""


class InstructionLookupError(KeyError):
    """Raised when an attribute value has no instruction in its table."""


# Categories in composition order, with the enum each one is keyed by.
CATEGORIES: dict[str, type[enum.Enum]] = {
    "domains": Domain,
    "providers": ProviderType,
    "models": ModelType,
    "roles": RoleType,
    "methodologies": Methodology,
}

# Members that intentionally carry no instruction text.
_SENTINELS: dict[str, set[enum.Enum]] = {
    "roles": {RoleType.NONE},
}


def _required_keys(category: str) -> set[enum.Enum]:
    return set(CATEGORIES[category]) - _SENTINELS.get(category, set())


@dataclass(frozen=True)
class InstructionTables:
    """The five attribute -> instruction mappings.

    Attributes:
        domains: Instruction per template domain.
        providers: Instruction per target provider.
        models: Instruction per target model.
        roles: Instruction per role (the None sentinel has no entry).
        methodologies: Instruction per methodology.
    """

    domains: Mapping[Domain, str]
    providers: Mapping[ProviderType, str]
    models: Mapping[ModelType, str]
    roles: Mapping[RoleType, str]
    methodologies: Mapping[Methodology, str]

    def __post_init__(self) -> None:
        for category in CATEGORIES:
            table = getattr(self, category)
            missing = _required_keys(category) - set(table)
            if missing:
                names = sorted(member.value for member in missing)
                raise IncompleteInstructionTableError(
                    f"Instruction table '{category}' is missing entries for: {', '.join(names)}"
                )

    def lookup(self, category: str, key: Any) -> str:
        """Return the instruction for ``key`` in ``category``.

        Args:
            category: One of the names in ``CATEGORIES``.
            key: The attribute value (enum member or its string value).

        Returns:
            The instruction text.

        Raises:
            InstructionLookupError: If the category or key is unknown.
        """
        if category not in CATEGORIES:
            raise InstructionLookupError(f"Unknown instruction category: {category!r}")
        try:
            return getattr(self, category)[key]
        except (KeyError, TypeError) as e:
            raise InstructionLookupError(
                f"No {category} instruction for value {key!r}"
            ) from e

    def with_overrides(self, overrides: "InstructionOverrides | None") -> "InstructionTables":
        """Return tables where each customized category shadows the built-in one.

        Args:
            overrides: User-customized categories; ``None`` categories fall
                back to these tables.

        Returns:
            A new, validated ``InstructionTables``.

        Raises:
            IncompleteInstructionTableError: If a customized category does not
                cover every enum member.
        """
        if overrides is None:
            return self

        merged = {}
        for category in CATEGORIES:
            custom = getattr(overrides, category)
            merged[category] = getattr(self, category) if custom is None else custom
        return InstructionTables(**merged)

    def to_dict(self) -> dict[str, dict[str, str]]:
        """Serialize to plain strings, keyed by category then enum value."""
        return {
            category: {key.value: text for key, text in getattr(self, category).items()}
            for category in CATEGORIES
        }


class InstructionOverrides(BaseModel):
    """User-customized instruction categories.

    A category left as ``None`` uses the built-in table.
    """

    domains: dict[Domain, str] | None = Field(default=None)
    providers: dict[ProviderType, str] | None = Field(default=None)
    models: dict[ModelType, str] | None = Field(default=None)
    roles: dict[RoleType, str] | None = Field(default=None)
    methodologies: dict[Methodology, str] | None = Field(default=None)

    def is_empty(self) -> bool:
        """Return True when no category is customized."""
        return all(getattr(self, category) is None for category in CATEGORIES)


DEFAULT_INSTRUCTION_TABLES = InstructionTables(
    domains={
        Domain.CODE: (
            "This prompt is related to code. Focus on improving the prompt's ability to elicit "
            "correct, efficient, and maintainable code from an AI. Consider aspects like code "
            "structure, best practices, and testability when refining the prompt."
        ),
        Domain.GENERAL: (
            "This prompt is for a general-purpose task. Improve the prompt's clarity, conciseness, "
            "and relevance to its intended context. Ensure the prompt is well-structured and "
            "effectively guides the AI towards the desired outcome."
        ),
        Domain.MARKETING: (
            "This prompt is for marketing. Improve the prompt's ability to elicit persuasive, "
            "clear, and engaging marketing content from an AI. Tailor the prompt to the specific "
            "marketing channel and target audience."
        ),
        Domain.EDUCATION: (
            "This prompt is for education. Improve the prompt's ability to elicit clear, accurate, "
            "and pedagogically effective educational content from an AI. Tailor the prompt to the "
            "specific age group and knowledge level of the learners."
        ),
        Domain.CREATIVE_WRITING: (
            "This prompt is for creative writing. Improve the prompt's ability to elicit original, "
            "vivid, and engaging creative writing from an AI. Focus on aspects like narrative "
            "structure, character development, and style."
        ),
        Domain.META: (
            "This prompt is a meta-prompt, designed to generate other prompts. Improve the "
            "clarity, structure, and effectiveness of this meta-prompt. Ensure it provides "
            "sufficient context and instructions to generate high-quality prompts for the "
            "intended purpose."
        ),
    },
    providers={
        ProviderType.OPENAI: (
            "This prompt will be used with OpenAI models. Consider the model's capabilities "
            "when refining the prompt."
        ),
        ProviderType.ANTHROPIC: (
            "This prompt will be used with Anthropic Claude models. Consider the model's "
            "conversational abilities and focus on natural language."
        ),
        ProviderType.REPLIT: (
            "This prompt is for Replit models. Consider the Replit environment and focus on "
            "code-related instructions."
        ),
        ProviderType.DEEPSEEK: (
            "This prompt is for Deepseek models. Focus on code-related instructions and leverage "
            "its ability to understand and generate code."
        ),
        ProviderType.GEMINI: (
            "This prompt will be used with Google Gemini models. Consider the model's strengths "
            "in reasoning and problem-solving."
        ),
    },
    models={
        ModelType.CLAUDE_SONNET_3_5: (
            "Leverage Claude Sonnet 3.5's advanced capabilities in contextual understanding, "
            "creative writing, and complex reasoning."
        ),
        ModelType.GPT_3_5_TURBO: (
            "Optimize for GPT-3.5 Turbo's strengths in general-purpose tasks while being mindful "
            "of its limitations."
        ),
        ModelType.GPT_4: "Leverage GPT-4's advanced reasoning and deeper context understanding capabilities.",
        ModelType.GPT_4_TURBO: (
            "Utilize GPT-4-Turbo's enhanced speed and up-to-date knowledge while maintaining "
            "high accuracy."
        ),
        ModelType.CLAUDE_SONNET: "Optimize for Claude Sonnet's nuanced understanding and creative capabilities.",
        ModelType.CLAUDE_HAIKU: "Focus on concise, efficient responses suited for Claude Haiku's quick processing.",
        ModelType.CLAUDE_OPUS: "Leverage Claude Opus's advanced reasoning and extended context capabilities.",
        ModelType.REPLIT_CODE: "Optimize for Replit Code's specialized code generation and completion features.",
        ModelType.REPLIT_CHAT: "Utilize Replit Chat's conversational abilities within the development context.",
        ModelType.DEEPSEEK_CODER: (
            "Leverage Deepseek Coder's specialized code understanding and generation capabilities."
        ),
        ModelType.GEMINI_PRO: "Optimize for Gemini Pro's strong reasoning and problem-solving capabilities.",
    },
    roles={
        RoleType.ARCHITECT: (
            "Focus on improving the prompt's effectiveness for eliciting high-level design, "
            "architecture, and technical decision-making guidance."
        ),
        RoleType.DEVELOPER: (
            "Focus on improving the prompt's effectiveness for eliciting implementation details, "
            "code structure, algorithms, and data structures."
        ),
        RoleType.TESTER: (
            "Focus on improving the prompt's effectiveness for eliciting information related to "
            "testing strategies and identifying potential issues."
        ),
    },
    methodologies={
        Methodology.TDD: "Refine the prompt to elicit a focus on writing tests before implementing code.",
        Methodology.BDD: "Refine the prompt to elicit a focus on defining behavior from the user's perspective.",
        Methodology.REFACTORING: (
            "Refine the prompt to elicit a focus on improving code structure and maintainability."
        ),
        Methodology.CODE_REVIEW: "Refine the prompt to elicit constructive feedback on code quality.",
        Methodology.ATOMIC_DESIGN: (
            "Refine the prompt to elicit a focus on breaking down the UI into small, reusable "
            "components."
        ),
        Methodology.SOLID_PRINCIPLES: (
            "Refine the prompt to elicit adherence to SOLID principles of object-oriented design."
        ),
        Methodology.DRY: "Refine the prompt to elicit a focus on eliminating code duplication.",
    },
)
