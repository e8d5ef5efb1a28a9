"""
Business logic service layer.

Applies the livestock business rules on top of the repository: unique tag
numbers, valid dam references, the herd-status lifecycle and no-op update
detection. Every write runs inside a single repository transaction.
"""

from typing import (
    Any,
    Awaitable,
    Callable,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    TypeVar,
)

import structlog
from pydantic import BaseModel
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..domain.entities import (
    Livestock,
    can_transition,
    changed_fields,
    normalize_values,
)
from ..domain.exceptions import (
    DuplicateIdentifierException,
    InvalidStateTransitionException,
    LivestockNotFoundException,
    ReferencedEntityMissingException,
)
from ..repositories.livestock_repository import ILivestockRepository

logger = structlog.get_logger(__name__)

T = TypeVar("T")

ENTITY = "livestock"
UNIQUE_FIELD = "tag_number"
DAM_FIELD = "dam_id"
FEMALE = "female"


class LivestockService:
    """
    Livestock record management.

    Accepts contract-validated payloads, enforces business rules and
    orchestrates repository calls. Domain violations raise
    LivestockServiceException subclasses; persistence errors are logged
    with context and re-raised unmodified.
    """

    def __init__(self, repository: ILivestockRepository, retry_attempts: int = 3):
        """
        Initialize livestock service.

        Args:
            repository: Livestock repository bound to the current request
            retry_attempts: Attempts for transient (connection-level) database errors
        """
        self.repository = repository
        self.retry_attempts = retry_attempts

    async def create(self, payload: BaseModel) -> Livestock:
        """
        Create a record.

        Raises:
            DuplicateIdentifierException: If the tag number is taken
            ReferencedEntityMissingException: If the dam does not exist
        """
        values = normalize_values(payload.model_dump())

        async def operation() -> Livestock:
            with self.repository.transaction():
                await self._check_unique_tag(values.get(UNIQUE_FIELD))
                await self._check_dam(values.get(DAM_FIELD))
                return await self.repository.create(values)

        created = await self._run("create", None, operation)
        logger.info("Livestock created", livestock_id=created.id, type=created.type)
        return created

    async def create_batch(self, payloads: Sequence[BaseModel]) -> List[Livestock]:
        """
        Create several records atomically.

        Either every record is created or none is.

        Raises:
            DuplicateIdentifierException: If a tag number is taken or repeated in the batch
            ReferencedEntityMissingException: If a dam does not exist
        """
        rows = [normalize_values(payload.model_dump()) for payload in payloads]

        async def operation() -> List[Livestock]:
            created: List[Livestock] = []
            seen_tags = set()
            with self.repository.transaction():
                for values in rows:
                    tag = values.get(UNIQUE_FIELD)
                    if tag is not None:
                        if tag in seen_tags:
                            raise DuplicateIdentifierException(UNIQUE_FIELD, tag)
                        seen_tags.add(tag)
                    await self._check_unique_tag(tag)
                    await self._check_dam(values.get(DAM_FIELD))
                    created.append(await self.repository.create(values))
            return created

        created = await self._run("create_batch", None, operation)
        logger.info("Livestock batch created", count=len(created))
        return created

    async def get(self, livestock_id: str) -> Livestock:
        """
        Get a record by key.

        Raises:
            LivestockNotFoundException: If no record has this key
        """

        async def operation() -> Optional[Livestock]:
            return await self.repository.find_by_id(livestock_id)

        entity = await self._run("get", livestock_id, operation)
        if entity is None:
            raise LivestockNotFoundException(livestock_id)
        return entity

    async def list(self, query: BaseModel) -> Tuple[List[Livestock], int]:
        """
        List records matching a filter.

        Args:
            query: Contract filter with equality criteria, limit and offset

        Returns:
            Tuple of (page of entities, total number of matches)
        """
        criteria = query.model_dump(exclude={"limit", "offset"}, exclude_none=True)

        async def operation() -> Tuple[List[Livestock], int]:
            return await self.repository.find_many(
                criteria, limit=query.limit, offset=query.offset
            )

        return await self._run("list", None, operation)

    async def replace(self, livestock_id: str, payload: BaseModel) -> Livestock:
        """Replace every field of a record (PUT semantics)."""
        return await self._update(livestock_id, payload.model_dump(), "replace")

    async def patch(self, livestock_id: str, payload: BaseModel) -> Livestock:
        """Change only the fields present in the payload (PATCH semantics)."""
        return await self._update(
            livestock_id, payload.model_dump(exclude_unset=True), "patch"
        )

    async def delete(self, livestock_id: str) -> None:
        """
        Delete a record and detach it from its offspring, atomically.

        Raises:
            LivestockNotFoundException: If no record has this key
        """

        async def operation() -> bool:
            with self.repository.transaction():
                offspring, _ = await self.repository.find_many(
                    {DAM_FIELD: livestock_id}
                )
                for child in offspring:
                    await self.repository.update(child.id, {DAM_FIELD: None})
                return await self.repository.delete(livestock_id)

        deleted = await self._run("delete", livestock_id, operation)
        if not deleted:
            raise LivestockNotFoundException(livestock_id)
        logger.info("Livestock deleted", livestock_id=livestock_id)

    async def _update(
        self, livestock_id: str, values: Mapping[str, Any], operation_name: str
    ) -> Livestock:
        values = normalize_values(values)

        async def operation() -> Livestock:
            with self.repository.transaction():
                current = await self.repository.find_by_id(livestock_id)
                if current is None:
                    raise LivestockNotFoundException(livestock_id)

                changes = changed_fields(current, values)
                if not changes:
                    return current

                if "status" in changes and not can_transition(
                    current.status, changes["status"]
                ):
                    raise InvalidStateTransitionException(
                        current.status, changes["status"]
                    )
                if UNIQUE_FIELD in changes:
                    await self._check_unique_tag(
                        changes[UNIQUE_FIELD], exclude_id=livestock_id
                    )
                if DAM_FIELD in changes:
                    if changes[DAM_FIELD] == livestock_id:
                        raise ReferencedEntityMissingException(
                            DAM_FIELD, livestock_id, "an animal cannot be its own dam"
                        )
                    await self._check_dam(changes[DAM_FIELD])

                updated = await self.repository.update(livestock_id, changes)
                logger.info(
                    "Livestock updated",
                    livestock_id=livestock_id,
                    fields=sorted(changes),
                )
                return updated

        return await self._run(operation_name, livestock_id, operation)

    async def _check_unique_tag(
        self, tag: Optional[str], exclude_id: Optional[str] = None
    ) -> None:
        if tag is None:
            return
        matches, _ = await self.repository.find_many({UNIQUE_FIELD: tag}, limit=2)
        if any(match.id != exclude_id for match in matches):
            raise DuplicateIdentifierException(UNIQUE_FIELD, tag)

    async def _check_dam(self, dam_id: Optional[str]) -> None:
        if dam_id is None:
            return
        dam = await self.repository.find_by_id(dam_id)
        if dam is None:
            raise ReferencedEntityMissingException(DAM_FIELD, dam_id)
        if dam.sex != FEMALE:
            raise ReferencedEntityMissingException(
                DAM_FIELD, dam_id, "the referenced animal is not female"
            )

    async def _run(
        self,
        operation: str,
        key: Optional[str],
        func: Callable[[], Awaitable[T]],
    ) -> T:
        """
        Run a repository operation with retry for transient errors.

        Connection-level failures are retried; every persistence error that
        escapes is logged with its context and re-raised unmodified.
        """
        retrying = AsyncRetrying(
            retry=retry_if_exception_type(OperationalError),
            stop=stop_after_attempt(self.retry_attempts),
            wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
            reraise=True,
        )
        try:
            return await retrying(func)
        except SQLAlchemyError as e:
            logger.error(
                "Persistence error",
                operation=operation,
                entity=ENTITY,
                key=key,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise
