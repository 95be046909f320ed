"""Template engine strategies.

Implements placeholder extraction, substitution and preservation, and the
composition of enhancement instructions from the instruction tables.
"""

from promptforge.strategies.template_engine.composer import (
    CLOSING_DIRECTIVE,
    EnhancementRequest,
    build_enhancement_request,
    compose_enhancement_instruction,
)
from promptforge.strategies.template_engine.instructions import (
    CATEGORIES,
    DEFAULT_INSTRUCTION_TABLES,
    IncompleteInstructionTableError,
    InstructionLookupError,
    InstructionOverrides,
    InstructionTables,
)
from promptforge.strategies.template_engine.models import (
    Domain,
    DynamicField,
    GatewayProvider,
    Methodology,
    ModelType,
    ProviderType,
    RoleType,
    TemplateAttributes,
)
from promptforge.strategies.template_engine.placeholders import (
    derive_dynamic_fields,
    extract_placeholders,
    fields_to_mapping,
    find_unresolved,
    preserve_placeholders,
    render_template,
)

__all__ = [
    "CATEGORIES",
    "CLOSING_DIRECTIVE",
    "DEFAULT_INSTRUCTION_TABLES",
    "Domain",
    "DynamicField",
    "EnhancementRequest",
    "GatewayProvider",
    "IncompleteInstructionTableError",
    "InstructionLookupError",
    "InstructionOverrides",
    "InstructionTables",
    "Methodology",
    "ModelType",
    "ProviderType",
    "RoleType",
    "TemplateAttributes",
    "build_enhancement_request",
    "compose_enhancement_instruction",
    "derive_dynamic_fields",
    "extract_placeholders",
    "fields_to_mapping",
    "find_unresolved",
    "preserve_placeholders",
    "render_template",
]
