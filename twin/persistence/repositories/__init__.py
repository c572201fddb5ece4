"""Data access repositories."""

from twin.persistence.repositories.base import BaseRepository
from twin.persistence.repositories.business_repository import (
    BusinessPersonaRepository,
    BusinessRepository,
)
from twin.persistence.repositories.catalog_repository import OfferRepository, ProductRepository

__all__ = [
    "BaseRepository",
    "BusinessRepository",
    "BusinessPersonaRepository",
    "OfferRepository",
    "ProductRepository",
]
