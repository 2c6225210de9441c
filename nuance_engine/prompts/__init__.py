"""
Nuance Engine Prompts
Repair directives and nuance constraint blocks for the text generator.
"""

from .nuance import build_nuance_prompt_block

__all__ = ["build_nuance_prompt_block"]
