"""Database models using SQLModel.

Defines the single persistent entity of the prompt manager:
- Template: a parameterized prompt with its classification attributes
"""

import datetime

from pydantic import field_validator, model_validator
from sqlalchemy import JSON, Column, DateTime, Enum as SQLEnum, Text, func
from sqlmodel import Field, SQLModel

from promptforge.strategies.template_engine.models import (
    Domain,
    Methodology,
    ModelType,
    ProviderType,
    RoleType,
)


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def _enum_column(enum_cls: type, name: str, default: object) -> Column:
    """Store enum values (not member names) so rows read naturally."""
    return Column(
        SQLEnum(
            enum_cls,
            name=name,
            values_callable=lambda members: [m.value for m in members],
            validate_strings=True,
        ),
        nullable=False,
        default=default,
    )


# =============================================================================
# Shared Models (for API requests/responses, not database tables)
# =============================================================================


class TemplateBase(SQLModel):
    """Base template fields."""

    name: str = Field(min_length=1, max_length=255)
    content: str = Field(default="")
    is_core: bool = Field(default=False)
    domain: Domain = Field(default=Domain.GENERAL)
    provider_type: ProviderType = Field(default=ProviderType.OPENAI)
    model_type: ModelType = Field(default=ModelType.GPT_4)
    role_type: RoleType = Field(default=RoleType.NONE)
    methodologies: list[Methodology] = Field(default_factory=list)

    @field_validator("methodologies")
    @classmethod
    def dedupe_methodologies(cls, v: list[Methodology]) -> list[Methodology]:
        """Keep the first occurrence of each methodology, in insertion order."""
        return list(dict.fromkeys(v))


# =============================================================================
# Database Models
# =============================================================================


class Template(TemplateBase, table=True):
    """Prompt template stored in the relational store.

    ``order`` is the user-defined list position; new templates are
    appended at the end.
    """

    __tablename__ = "templates"

    id: int | None = Field(default=None, primary_key=True)
    content: str = Field(default="", sa_column=Column(Text, nullable=False))
    domain: Domain = Field(
        default=Domain.GENERAL,
        sa_column=_enum_column(Domain, "template_domain", Domain.GENERAL),
    )
    provider_type: ProviderType = Field(
        default=ProviderType.OPENAI,
        sa_column=_enum_column(ProviderType, "template_provider_type", ProviderType.OPENAI),
    )
    model_type: ModelType = Field(
        default=ModelType.GPT_4,
        sa_column=_enum_column(ModelType, "template_model_type", ModelType.GPT_4),
    )
    role_type: RoleType = Field(
        default=RoleType.NONE,
        sa_column=_enum_column(RoleType, "template_role_type", RoleType.NONE),
    )
    methodologies: list[Methodology] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False, default=list),
    )
    order: int = Field(default=0, index=True)
    created_at: datetime.datetime = Field(
        default_factory=_utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False, server_default=func.now()),
    )
    updated_at: datetime.datetime = Field(
        default_factory=_utcnow,
        sa_column=Column(
            DateTime(timezone=True),
            nullable=False,
            server_default=func.now(),
            onupdate=func.now(),
        ),
    )


# =============================================================================
# Request/Response Models
# =============================================================================


class TemplateCreate(TemplateBase):
    """Template creation model."""


class TemplateUpdate(SQLModel):
    """Template update model; only provided fields are changed."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    content: str | None = None
    is_core: bool | None = None
    domain: Domain | None = None
    provider_type: ProviderType | None = None
    model_type: ModelType | None = None
    role_type: RoleType | None = None
    methodologies: list[Methodology] | None = None

    @field_validator("methodologies")
    @classmethod
    def dedupe_methodologies(cls, v: list[Methodology] | None) -> list[Methodology] | None:
        """Keep the first occurrence of each methodology, in insertion order."""
        return None if v is None else list(dict.fromkeys(v))

    @model_validator(mode="after")
    def reject_explicit_nulls(self) -> "TemplateUpdate":
        """Refuse null for a provided field; every column is NOT NULL."""
        nulls = sorted(name for name in self.model_fields_set if getattr(self, name) is None)
        if nulls:
            raise ValueError(f"Fields cannot be null: {', '.join(nulls)}")
        return self


class TemplateRead(TemplateBase):
    """Template response model."""

    id: int
    order: int
    created_at: datetime.datetime
    updated_at: datetime.datetime


class TemplateListResponse(SQLModel):
    """Response for listing templates."""

    templates: list[TemplateRead]
    total: int
