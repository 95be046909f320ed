"""Prompt template manager: storage, rendering and LLM-assisted enhancement."""

__version__ = "0.1.0"
