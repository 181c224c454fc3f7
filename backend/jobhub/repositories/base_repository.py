"""
Base Repository Pattern Implementation

Provides abstract base repository with common database operations
and transaction management using SQLAlchemy async sessions.
"""

from abc import ABC, abstractmethod
from typing import TypeVar, Generic, Optional, Dict, Any, Type
from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError

from jobhub.core.database import DatabaseManager
from jobhub.core.exceptions import StorageError
from jobhub.utils.logger import get_logger

ModelType = TypeVar("ModelType")

logger = get_logger(__name__)


class BaseRepository(Generic[ModelType], ABC):
    """Abstract base repository providing common read operations."""

    def __init__(self, db_manager: DatabaseManager):
        self.db_manager = db_manager

    @property
    @abstractmethod
    def model(self) -> Type[ModelType]:
        """Return the SQLAlchemy model class."""
        pass

    def get_session(self):
        """Get a transactional database session context."""
        return self.db_manager.session()

    async def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        """Count entities with optional filters."""
        async with self.get_session() as session:
            try:
                query = select(func.count(self.model.id))

                # Apply filters
                if filters:
                    for field, value in filters.items():
                        if hasattr(self.model, field):
                            column = getattr(self.model, field)
                            if isinstance(value, list):
                                query = query.where(column.in_(value))
                            else:
                                query = query.where(column == value)

                result = await session.execute(query)
                return result.scalar() or 0

            except SQLAlchemyError as e:
                logger.error(f"Error counting {self.model.__name__}: {e}")
                raise StorageError(f"Could not count {self.model.__name__}: {e}") from e
