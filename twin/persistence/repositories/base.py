"""Base repository with business-scoped queries."""

from typing import Generic, TypeVar, Type
from sqlalchemy.ext.asyncio import AsyncSession

from twin.persistence.database import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Base repository holding the model and session for business-scoped queries."""

    def __init__(self, model: Type[ModelType], session: AsyncSession):
        """Initialize repository with model and session."""
        self.model = model
        self.session = session
