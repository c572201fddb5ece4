"""Assembles the Digital Twin system prompt from a context bundle."""

from twin.domain.models.context import ContextBundle
from twin.domain.prompts.base_rules import (
    APPOINTMENT_RULES,
    CONVERSATION_STYLE_RULES,
    DEFAULT_SECTION_ORDER,
    GROUNDING_RULES,
    NO_APPOINTMENT_RULES,
    SAFETY_RULES,
)
from twin.domain.prompts.renderer import (
    render_business_info,
    render_catalog,
    render_offers,
    render_persona,
)


class PromptAssembler:
    """Assembles system prompts from base rules + business facts.

    This class combines:
    1. Base rule sections (hardcoded Python rules)
    2. Business sections (rendered from the context bundle)

    Sections are emitted in ``section_order``; empty sections are skipped.
    """

    def __init__(self, section_order: list[str] | None = None):
        self.section_order = section_order or DEFAULT_SECTION_ORDER

    def assemble(self, bundle: ContextBundle) -> str:
        """Assemble the final system prompt.

        Args:
            bundle: Frozen context for the turn

        Returns:
            Assembled system prompt string
        """
        sections = self._build_sections(bundle)

        prompt_parts = []
        for section_key in self.section_order:
            content = sections.get(section_key)
            if content:
                prompt_parts.append(content)

        return "\n\n".join(prompt_parts)

    def _build_sections(self, bundle: ContextBundle) -> dict[str, str]:
        persona = bundle.persona
        return {
            "persona": render_persona(persona, bundle.profile.name),
            "business_info": render_business_info(bundle.profile),
            "offers": render_offers(bundle.offers),
            "catalog": render_catalog(bundle.products),
            "grounding": GROUNDING_RULES,
            "style": CONVERSATION_STYLE_RULES,
            "appointments": APPOINTMENT_RULES if persona.appointments_enabled else NO_APPOINTMENT_RULES,
            "safety": SAFETY_RULES,
        }


def render_system_prompt(bundle: ContextBundle) -> str:
    """Render the system prompt for a bundle with the default section order."""
    return PromptAssembler().assemble(bundle)
