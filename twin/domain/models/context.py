"""Context bundle: the frozen business facts grounding one turn."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class _Snapshot(BaseModel):
    model_config = ConfigDict(frozen=True)


class BusinessProfile(_Snapshot):
    """Public-facing business information."""

    name: str
    category: str | None = None
    description: str | None = None
    address: str | None = None
    phone: str | None = None
    website: str | None = None
    hours: str | None = None
    rating: float | None = None


class PersonaConfig(_Snapshot):
    """How the Digital Twin presents itself."""

    display_name: str
    tone: str = "friendly and concise"
    greeting: str | None = None
    instructions: str | None = None
    appointments_enabled: bool = False


class ProductInfo(_Snapshot):
    """A catalog item as shown to customers."""

    name: str
    description: str | None = None
    price: Decimal | None = None
    currency: str = "USD"
    category: str | None = None

    @property
    def price_label(self) -> str | None:
        if self.price is None:
            return None
        return f"{self.price:.2f} {self.currency}"


class OfferInfo(_Snapshot):
    """An active deal as shown to customers."""

    title: str
    description: str | None = None
    discount_type: str = "percent"  # percent, amount, other
    discount_value: Decimal | None = None
    terms: str | None = None
    valid_until: date | None = None

    @property
    def discount_label(self) -> str | None:
        if self.discount_value is None:
            return None
        if self.discount_type == "percent":
            return f"{self.discount_value.normalize():f}% off"
        if self.discount_type == "amount":
            return f"{self.discount_value:.2f} off"
        return None


class ContextBundle(_Snapshot):
    """Snapshot of business facts bound to one business id.

    business_id is kept for tool routing only and is never rendered into
    prompt text.
    """

    business_id: int
    profile: BusinessProfile
    persona: PersonaConfig
    products: tuple[ProductInfo, ...] = ()
    offers: tuple[OfferInfo, ...] = ()
    assembled_at: datetime = Field(default_factory=datetime.utcnow)
