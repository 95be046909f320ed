"""Enhancement prompt composer.

Turns a template's classification attributes into a single instruction
string for the upstream model, and wraps a rendered prompt together with
that instruction into the text actually sent for enhancement.
"""

import logging
from dataclasses import dataclass

from promptforge.strategies.template_engine.instructions import (
    DEFAULT_INSTRUCTION_TABLES,
    InstructionTables,
)
from promptforge.strategies.template_engine.models import RoleType, TemplateAttributes

logger = logging.getLogger(__name__)

CLOSING_DIRECTIVE = (
    "IMPORTANT: Return only the enhanced version of the prompt. Do not include any "
    "commentary, explanations, or formatting markers. Do not prefix with phrases like "
    '"Enhanced Prompt:" or add any other labels.'
)

ENHANCEMENT_PREAMBLE = (
    "Please enhance the following prompt while maintaining its core intent and purpose:"
)


def compose_enhancement_instruction(
    attributes: TemplateAttributes,
    custom_instruction: str | None = None,
    tables: InstructionTables = DEFAULT_INSTRUCTION_TABLES,
) -> str:
    """Compose the enhancement instruction for a template.

    Segments are joined with single spaces in a fixed order: domain,
    provider, model, role (skipped for the None sentinel), then one clause per
    methodology in stored order. A non-blank custom instruction follows, and
    the closing directive ends the text after a blank line.

    Args:
        attributes: The template's classification attributes.
        custom_instruction: Optional free-text instruction from the user.
        tables: Instruction tables to look clauses up in.

    Returns:
        The composed instruction.

    Raises:
        InstructionLookupError: If any attribute value has no table entry.
    """
    segments = [
        tables.lookup("domains", attributes.domain),
        tables.lookup("providers", attributes.provider_type),
        tables.lookup("models", attributes.model_type),
    ]
    if attributes.role_type != RoleType.NONE:
        segments.append(tables.lookup("roles", attributes.role_type))
    segments.extend(tables.lookup("methodologies", m) for m in attributes.methodologies)

    instruction = " ".join(segments)
    if custom_instruction and custom_instruction.strip():
        instruction += f" {custom_instruction}"

    return f"{instruction}\n\n{CLOSING_DIRECTIVE}"


@dataclass(frozen=True)
class EnhancementRequest:
    """One outbound enhancement call; never persisted.

    Attributes:
        prompt: The rendered template text.
        instruction: The composed enhancement instruction.
    """

    prompt: str
    instruction: str

    def to_prompt(self) -> str:
        """Return the full text sent to the model gateway."""
        return (
            f"{ENHANCEMENT_PREAMBLE} Original Prompt: {self.prompt} "
            f"Enhancement Instructions: {self.instruction}"
        )


def build_enhancement_request(
    prompt: str,
    attributes: TemplateAttributes,
    custom_instruction: str | None = None,
    tables: InstructionTables = DEFAULT_INSTRUCTION_TABLES,
) -> EnhancementRequest:
    """Compose the instruction for ``attributes`` and pair it with ``prompt``."""
    instruction = compose_enhancement_instruction(attributes, custom_instruction, tables)
    logger.debug(
        f"Composed enhancement instruction: domain={attributes.domain.value}, "
        f"methodologies={len(attributes.methodologies)}, chars={len(instruction)}"
    )
    return EnhancementRequest(prompt=prompt, instruction=instruction)
