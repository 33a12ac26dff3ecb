"""Prompt composition and auxiliary text agents."""

from .prompt_composer import PromptComposer, ModeDirective, MODE_DIRECTIVES
from .outfit_analyzer import OutfitAnalyzer

__all__ = [
    "PromptComposer",
    "ModeDirective",
    "MODE_DIRECTIVES",
    "OutfitAnalyzer",
]
