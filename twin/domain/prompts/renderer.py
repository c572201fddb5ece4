"""Renderer for converting a context bundle into prompt sections.

Only display fields are rendered. Database ids and merchant codes never
reach the prompt text.
"""

from twin.domain.models.context import (
    BusinessProfile,
    OfferInfo,
    PersonaConfig,
    ProductInfo,
)


def render_persona(persona: PersonaConfig, business_name: str) -> str:
    """Render persona/identity section."""
    lines = [
        "## IDENTITY",
        f"You are {persona.display_name}, the digital twin of {business_name}.",
        f"Tone: {persona.tone}",
    ]
    if persona.greeting:
        lines.append(f"Preferred greeting: {persona.greeting}")
    if persona.instructions:
        lines.append("")
        lines.append("Owner instructions:")
        lines.append(persona.instructions.strip())
    return "\n".join(lines)


def render_business_info(profile: BusinessProfile) -> str:
    """Render business info section."""
    lines = ["## BUSINESS INFORMATION", f"Business Name: {profile.name}"]

    if profile.category:
        lines.append(f"Category: {profile.category}")
    if profile.description:
        lines.append(f"About: {profile.description}")
    if profile.address:
        lines.append(f"Address: {profile.address}")
    if profile.phone:
        lines.append(f"Phone: {profile.phone}")
    if profile.website:
        lines.append(f"Website: {profile.website}")
    if profile.hours:
        lines.append(f"Hours: {profile.hours}")
    if profile.rating:
        lines.append(f"Customer rating: {profile.rating:.1f} / 5")

    return "\n".join(lines)


def render_offer_line(offer: OfferInfo) -> str:
    """Render one offer as a single bullet line."""
    line = f"- {offer.title}"
    label = offer.discount_label
    if label:
        line += f" ({label})"
    if offer.description:
        line += f": {offer.description}"
    if offer.valid_until:
        line += f" [valid until {offer.valid_until.isoformat()}]"
    if offer.terms:
        line += f" Terms: {offer.terms}"
    return line


def render_offers(offers: tuple[OfferInfo, ...]) -> str:
    """Render active offers section."""
    if not offers:
        return "## CURRENT DEALS\nThere are no active deals right now. Do not invent any."

    lines = ["## CURRENT DEALS"]
    lines.extend(render_offer_line(offer) for offer in offers)
    return "\n".join(lines)


def render_product_line(product: ProductInfo) -> str:
    """Render one product as a single bullet line."""
    line = f"- {product.name}"
    if product.price_label:
        line += f" - {product.price_label}"
    if product.category:
        line += f" [{product.category}]"
    if product.description:
        line += f": {product.description}"
    return line


def render_catalog(products: tuple[ProductInfo, ...]) -> str:
    """Render catalog section."""
    if not products:
        return ""

    lines = ["## CATALOG"]
    lines.extend(render_product_line(product) for product in products)
    return "\n".join(lines)
