"""
Livestock repository interface (Abstract Base Class).

Defines the contract for livestock persistence independent of the
underlying storage mechanism. Implementations hold no business rules,
do no logging and let storage errors propagate unmodified.
"""

from abc import ABC, abstractmethod
from typing import Any, ContextManager, List, Mapping, Optional, Tuple

from ..domain.entities import Livestock


class ILivestockRepository(ABC):
    """Abstract repository interface for livestock records."""

    @abstractmethod
    async def create(self, values: Mapping[str, Any]) -> Livestock:
        """
        Insert a new record.

        Args:
            values: Field values validated against the contract schema

        Returns:
            The created entity, including its generated key
        """

    @abstractmethod
    async def find_by_id(self, livestock_id: str) -> Optional[Livestock]:
        """
        Find a record by its key.

        Returns:
            The entity, or None when no record has this key
        """

    @abstractmethod
    async def find_many(
        self,
        criteria: Mapping[str, Any],
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> Tuple[List[Livestock], int]:
        """
        Find records matching equality criteria.

        Args:
            criteria: Field name -> value; None values are ignored
            limit: Maximum number of records, or None for all
            offset: Number of matching records to skip

        Returns:
            Tuple of (page of entities, total number of matches)
        """

    @abstractmethod
    async def update(
        self, livestock_id: str, changes: Mapping[str, Any]
    ) -> Optional[Livestock]:
        """
        Apply field changes to a record.

        Returns:
            The updated entity, or None when no record has this key
        """

    @abstractmethod
    async def delete(self, livestock_id: str) -> bool:
        """
        Delete a record.

        Returns:
            True if a record was deleted, False if none had this key
        """

    @abstractmethod
    def transaction(self) -> ContextManager[None]:
        """
        Scope in which all writes commit together or not at all.

        Commits when the block exits normally; rolls back and re-raises
        on any exception.
        """
