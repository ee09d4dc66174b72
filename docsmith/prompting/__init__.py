"""Prompt construction for README generation."""

from .builder import PromptBuilder, PromptFile

__all__ = ["PromptBuilder", "PromptFile"]
