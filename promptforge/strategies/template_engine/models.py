"""Template engine domain models.

Closed categories used to classify templates, plus the small value objects
shared by the placeholder and composition strategies. These models live here
to avoid circular imports with the API and database layers.
"""

import enum

from pydantic import BaseModel, ConfigDict, Field


class Domain(str, enum.Enum):
    """Subject area a template is written for."""

    CODE = "Code"
    GENERAL = "General"
    MARKETING = "Marketing"
    EDUCATION = "Education"
    CREATIVE_WRITING = "Creative Writing"
    META = "Meta"


class ProviderType(str, enum.Enum):
    """Model vendor the template targets."""

    OPENAI = "OpenAI"
    ANTHROPIC = "Anthropic"
    REPLIT = "Replit"
    DEEPSEEK = "Deepseek"
    GEMINI = "Gemini"


class ModelType(str, enum.Enum):
    """Specific model the template targets."""

    CLAUDE_SONNET_3_5 = "Claude-Sonnet-3.5"
    GPT_3_5_TURBO = "GPT-3.5-Turbo"
    GPT_4 = "GPT-4"
    GPT_4_TURBO = "GPT-4-Turbo"
    CLAUDE_SONNET = "Claude-Sonnet"
    CLAUDE_HAIKU = "Claude-Haiku"
    CLAUDE_OPUS = "Claude-Opus"
    REPLIT_CODE = "Replit-Code"
    REPLIT_CHAT = "Replit-Chat"
    DEEPSEEK_CODER = "Deepseek-Coder"
    GEMINI_PRO = "Gemini-Pro"


class RoleType(str, enum.Enum):
    """Perspective the enhanced prompt should be written for.

    NONE is a sentinel: it has no instruction text and contributes nothing
    to the composed instruction.
    """

    ARCHITECT = "Architect"
    DEVELOPER = "Developer"
    TESTER = "Tester"
    NONE = "None"


class Methodology(str, enum.Enum):
    """Engineering practice tag, one instruction clause each."""

    TDD = "TDD"
    BDD = "BDD"
    REFACTORING = "Refactoring"
    CODE_REVIEW = "Code Review"
    ATOMIC_DESIGN = "Atomic Design"
    SOLID_PRINCIPLES = "SOLID Principles"
    DRY = "DRY"


class GatewayProvider(str, enum.Enum):
    """Upstream LLM API an enhancement request is forwarded to."""

    GOOGLE = "google"
    ANTHROPIC = "anthropic"
    OPENAI = "openai"
    DEEPSEEK = "deepseek"
    OPENROUTER = "openrouter"


class DynamicField(BaseModel):
    """A user-supplied value for one placeholder, keyed by name."""

    name: str = Field(description="Placeholder identifier, exactly as written between the braces")
    value: str = Field(default="", description="Substitution value; blank keeps the token")


class TemplateAttributes(BaseModel):
    """Classification attributes that drive instruction composition."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    domain: Domain = Domain.GENERAL
    provider_type: ProviderType = ProviderType.OPENAI
    model_type: ModelType = ModelType.GPT_4
    role_type: RoleType = RoleType.NONE
    methodologies: list[Methodology] = Field(
        default_factory=list,
        description="Selected methodologies in insertion order",
    )
