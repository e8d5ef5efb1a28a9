"""
Shared dependencies for the application.

Provides dependency injection functions used across routers. Repository and
service are built per request around the request's database session, so no
mutable state is shared between requests.
"""

from fastapi import Depends, Request
from fastapi.exceptions import RequestValidationError
from livestock_contracts.livestock import LivestockFilter
from pydantic import BaseModel, ValidationError
from sqlalchemy.orm import Session

from .config import settings
from .database import get_db
from .repositories.livestock_repository import ILivestockRepository
from .repositories.sqlalchemy_repository import SqlAlchemyLivestockRepository
from .services.livestock_service import LivestockService


def get_livestock_repository(db: Session = Depends(get_db)) -> ILivestockRepository:
    """Repository bound to the request's session."""
    return SqlAlchemyLivestockRepository(db)


def get_livestock_service(
    repository: ILivestockRepository = Depends(get_livestock_repository),
) -> LivestockService:
    """Livestock service for one request."""
    return LivestockService(repository, retry_attempts=settings.DB_RETRY_ATTEMPTS)


def get_livestock_filter(request: Request) -> BaseModel:
    """
    Validate list query parameters against the contract filter model.

    Raises:
        RequestValidationError: With field-level detail for invalid parameters
    """
    try:
        return LivestockFilter.model_validate(dict(request.query_params))
    except ValidationError as e:
        raise RequestValidationError(
            [{**error, "loc": ("query", *error["loc"])} for error in e.errors()]
        ) from e
