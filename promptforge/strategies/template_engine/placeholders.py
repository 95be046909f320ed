"""Placeholder strategies for template content.

Templates mark substitution points with ``{{identifier}}`` tokens, where the
identifier is any run of characters other than ``}``. Whitespace inside the
braces belongs to the identifier, so ``{{ name }}`` and ``{{name}}`` are two
different placeholders as far as extraction and substitution are concerned.
"""

import logging
import re
from collections.abc import Iterable, Mapping

from promptforge.strategies.template_engine.models import DynamicField

logger = logging.getLogger(__name__)

PLACEHOLDER_PATTERN = re.compile(r"\{\{([^}]+)\}\}")


def extract_placeholders(content: str) -> list[str]:
    """Return the distinct placeholder identifiers in first-occurrence order.

    Args:
        content: Template text.

    Returns:
        Identifiers without their braces, each listed once.

    Example:
        >>> extract_placeholders("Hi {{name}}, your {{name}} order of {{item}} is ready")
        ['name', 'item']
    """
    seen: dict[str, None] = {}
    for match in PLACEHOLDER_PATTERN.finditer(content):
        seen.setdefault(match.group(1), None)
    return list(seen)


def render_template(content: str, fields: Mapping[str, str]) -> str:
    """Substitute field values into template content.

    Identifiers are looked up literally and never compiled into a pattern, so
    regex metacharacters in a placeholder name are harmless. The content is
    scanned once, which keeps the result independent of field order and stops
    a value that contains ``{{other}}`` from being substituted again.

    Unmapped identifiers and blank values leave the token in place.

    Args:
        content: Template text.
        fields: Mapping of identifier to replacement value.

    Returns:
        The rendered text.
    """

    def _substitute(match: re.Match[str]) -> str:
        value = fields.get(match.group(1))
        if not value:
            return match.group(0)
        return value

    return PLACEHOLDER_PATTERN.sub(_substitute, content)


def find_unresolved(content: str) -> list[str]:
    """Return identifiers still present as tokens in rendered text."""
    return extract_placeholders(content)


def derive_dynamic_fields(
    content: str,
    values: Mapping[str, str] | None = None,
) -> list[DynamicField]:
    """Build one dynamic field per placeholder found in the content.

    Values are carried over by name from ``values``; names that no longer
    appear in the content are dropped and new names start blank.

    Args:
        content: Template text.
        values: Previously entered values, keyed by identifier.

    Returns:
        Fields in placeholder order.
    """
    values = values or {}
    return [
        DynamicField(name=name, value=values.get(name, ""))
        for name in extract_placeholders(content)
    ]


def fields_to_mapping(fields: Iterable[DynamicField]) -> dict[str, str]:
    """Collapse dynamic fields into an identifier -> value mapping."""
    return {field.name: field.value for field in fields}


def preserve_placeholders(enhanced_text: str, original_content: str) -> str:
    """Restore canonical placeholder tokens in model-enhanced text.

    Models asked to rewrite a template tend to normalize ``{{name}}`` into
    ``{{ name }}``, ``[name]`` or ``<name>``. For every identifier of the
    original content, those variants (matched case-insensitively) are
    rewritten back to ``{{name}}``. Identifiers the model dropped entirely are
    not reinserted.

    Args:
        enhanced_text: Text returned by the model.
        original_content: The template content that was sent for enhancement.

    Returns:
        The enhanced text with canonical placeholder tokens.
    """
    result = enhanced_text
    for placeholder in extract_placeholders(original_content):
        escaped = re.escape(placeholder)
        variants = re.compile(
            rf"\{{\{{\s*{escaped}\s*\}}\}}|\[{escaped}\]|<{escaped}>",
            re.IGNORECASE,
        )
        canonical = f"{{{{{placeholder}}}}}"
        result, count = variants.subn(lambda _match: canonical, result)
        if count:
            logger.debug(f"Restored {count} occurrence(s) of placeholder '{placeholder}'")
    return result
