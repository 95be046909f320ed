"""API request and response schemas.

Pydantic v2 models for API serialization/deserialization.
"""

from typing import Any

from pydantic import BaseModel, Field

from promptforge.strategies.template_engine import (
    GatewayProvider,
    InstructionOverrides,
    TemplateAttributes,
)


# =============================================================================
# Error Schemas
# =============================================================================


class ErrorResponse(BaseModel):
    """Standard error response."""

    detail: str = Field(description="Error message")
    error_code: str | None = Field(default=None, description="Application-specific error code")
    extra: dict[str, Any] | None = Field(default=None, description="Additional error context")


# =============================================================================
# Template Schemas
# =============================================================================


class ReorderItem(BaseModel):
    """New list position for one template."""

    id: int
    order: int = Field(ge=0)


class RenderRequest(BaseModel):
    """Field values to substitute into a template."""

    fields: dict[str, str] = Field(
        default_factory=dict,
        description="Placeholder name -> value; blank values keep the token",
    )


class RenderResponse(BaseModel):
    """Result of rendering a template."""

    placeholders: list[str] = Field(description="Distinct placeholders in first-occurrence order")
    prompt: str = Field(description="The rendered prompt")
    unresolved: list[str] = Field(description="Placeholders still present in the rendered prompt")


class TemplateEnhanceRequest(BaseModel):
    """Render a stored template and send it for enhancement."""

    fields: dict[str, str] = Field(default_factory=dict)
    provider: GatewayProvider | None = Field(
        default=None,
        description="Upstream provider; defaults to the configured one",
    )
    model: str | None = Field(default=None, description="Provider-side model id")
    custom_instruction: str | None = Field(default=None)
    instruction_overrides: InstructionOverrides | None = Field(default=None)


class TemplateEnhanceResponse(BaseModel):
    """Enhancement result for a stored template."""

    template_id: int
    prompt: str = Field(description="The rendered prompt that was enhanced")
    instruction: str = Field(description="The composed enhancement instruction")
    enhanced_prompt: str = Field(description="Model output with placeholders restored")


# =============================================================================
# Enhancement Schemas
# =============================================================================


class EnhanceRequest(BaseModel):
    """Raw enhancement proxy request."""

    prompt: str = Field(min_length=1, description="Full text to send upstream")
    provider: GatewayProvider | None = Field(default=None)
    model: str | None = Field(default=None)


class EnhanceResponse(BaseModel):
    """Raw enhancement proxy response."""

    enhanced_prompt: str


class InstructionRequest(BaseModel):
    """Compose an enhancement instruction without calling a model."""

    attributes: TemplateAttributes = Field(default_factory=TemplateAttributes)
    custom_instruction: str | None = Field(default=None)
    instruction_overrides: InstructionOverrides | None = Field(default=None)
    prompt: str | None = Field(
        default=None,
        description="When given, the full outbound enhancement prompt is returned too",
    )


class InstructionResponse(BaseModel):
    """A composed enhancement instruction."""

    instruction: str
    enhancement_prompt: str | None = None


class InstructionTablesResponse(BaseModel):
    """The built-in instruction tables, keyed by enum value."""

    domains: dict[str, str]
    providers: dict[str, str]
    models: dict[str, str]
    roles: dict[str, str]
    methodologies: dict[str, str]


class ModelEntry(BaseModel):
    """One model offered by a provider."""

    id: str
    display_name: str


class ModelListResponse(BaseModel):
    """Models available from a provider."""

    provider: GatewayProvider
    models: list[ModelEntry]
