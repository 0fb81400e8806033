"""
Mutation gate for update/delete.

Two guards, always applied in this order: the entity must exist and be
active (``NotFoundError``), then the requester must be its author
(``AuthorizationError``).  A missing entity therefore never reports as
a permission problem, and vice versa.
"""
import uuid
from typing import TypeVar

from blog_platform.errors import AuthorizationError, NotFoundError
from blog_platform.models import DeletionStatus

T = TypeVar("T")


def ensure_exists(entity: T | None, message: str) -> T:
    if entity is None:
        raise NotFoundError(message)
    if getattr(entity, "deletion_status", DeletionStatus.ACTIVE) != DeletionStatus.ACTIVE:
        raise NotFoundError(message)
    return entity


def ensure_author(owner_id: uuid.UUID, user_id: uuid.UUID, message: str) -> None:
    if owner_id != user_id:
        raise AuthorizationError(message)
