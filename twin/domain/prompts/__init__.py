"""Prompt system for the Digital Twin.

- base_rules: Hardcoded rules for grounding, style, safety
- renderer: Business facts rendered from the context bundle
- assembler: Combines both at runtime into the final system prompt
"""

from twin.domain.prompts.assembler import PromptAssembler, render_system_prompt

__all__ = ["PromptAssembler", "render_system_prompt"]
