"""Built-in Digital Twin tools backed by the turn's context bundle."""

from decimal import Decimal

from pydantic import BaseModel, Field

from twin.domain.errors import ToolExecutionError
from twin.domain.models.context import ContextBundle
from twin.domain.tools.registry import ToolDeclaration, ToolRegistry
from twin.infrastructure.appointments import AppointmentRequest, AppointmentSubmitter


class ListOffersInput(BaseModel):
    """list_offers takes no arguments."""


class ListProductsInput(BaseModel):
    category: str | None = Field(default=None, max_length=100, description="Only products in this category")
    max_price: float | None = Field(default=None, ge=0, description="Only products at or below this price")
    limit: int = Field(default=10, ge=1, le=50, description="Maximum number of products to return")


class RequestAppointmentInput(BaseModel):
    customer_name: str = Field(min_length=1, max_length=100, description="Customer's name")
    contact: str = Field(min_length=3, max_length=255, description="Phone number or email to confirm with")
    preferred_time: str = Field(min_length=1, max_length=100, description="Preferred date and time, free text")
    notes: str | None = Field(default=None, max_length=500, description="Anything the business should know")


async def list_offers(args: ListOffersInput, context: ContextBundle) -> dict:
    offers = []
    for offer in context.offers:
        offers.append({
            "title": offer.title,
            "discount": offer.discount_label,
            "description": offer.description,
            "valid_until": offer.valid_until.isoformat() if offer.valid_until else None,
            "terms": offer.terms,
        })
    return {"business": context.profile.name, "count": len(offers), "offers": offers}


async def list_products(args: ListProductsInput, context: ContextBundle) -> dict:
    products = []
    for product in context.products:
        if args.category and (product.category or "").lower() != args.category.lower():
            continue
        if args.max_price is not None and (
            product.price is None or product.price > Decimal(str(args.max_price))
        ):
            continue
        products.append({
            "name": product.name,
            "price": product.price_label,
            "category": product.category,
            "description": product.description,
        })
        if len(products) >= args.limit:
            break
    return {"count": len(products), "products": products}


def make_request_appointment(submitter: AppointmentSubmitter):
    """Build the request_appointment handler around a workflow submitter."""

    async def request_appointment(args: RequestAppointmentInput, context: ContextBundle) -> dict:
        if not context.persona.appointments_enabled:
            raise ToolExecutionError("This business does not take appointment requests in chat")
        reference = await submitter.submit(
            AppointmentRequest(
                business_id=context.business_id,
                customer_name=args.customer_name,
                contact=args.contact,
                preferred_time=args.preferred_time,
                notes=args.notes,
            )
        )
        return {
            "status": "requested",
            "reference": reference,
            "note": "The business will confirm the appointment directly.",
        }

    return request_appointment


def build_default_registry(
    submitter: AppointmentSubmitter,
    default_timeout_seconds: float = 5.0,
) -> ToolRegistry:
    """Create and freeze the registry with the built-in tools."""
    registry = ToolRegistry(default_timeout_seconds=default_timeout_seconds)
    registry.register(
        ToolDeclaration(
            name="list_offers",
            description="List the business's currently active deals and discounts.",
            input_model=ListOffersInput,
            handler=list_offers,
            output_description="{count, offers: [{title, discount, description, valid_until, terms}]}",
        )
    )
    registry.register(
        ToolDeclaration(
            name="list_products",
            description="List products or menu items, optionally filtered by category or maximum price.",
            input_model=ListProductsInput,
            handler=list_products,
            output_description="{count, products: [{name, price, category, description}]}",
        )
    )
    registry.register(
        ToolDeclaration(
            name="request_appointment",
            description=(
                "Submit an appointment request for the business to confirm. "
                "Does not book the appointment."
            ),
            input_model=RequestAppointmentInput,
            handler=make_request_appointment(submitter),
            output_description="{status, reference, note}",
        )
    )
    return registry.freeze()
