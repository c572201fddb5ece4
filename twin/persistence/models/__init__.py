"""Database models."""

from twin.persistence.models.business import Business, BusinessPersona
from twin.persistence.models.catalog import Offer, Product

__all__ = [
    "Business",
    "BusinessPersona",
    "Offer",
    "Product",
]
