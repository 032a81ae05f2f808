"""Caller identity and the authorization policy.

The identity provider signs a JWT whose ``sub`` is the user id and whose role
claim is either ``role`` or ``public_metadata.role``. A :class:`Caller` is
built per request and passed explicitly to whatever needs it.
"""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any, Optional

from jose import JWTError, jwt

from .config import settings
from .errors import Forbidden, Unauthorized
from .models import Role

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Caller:
    id: str
    role: Role = Role.TEACHER

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


class Operation(str, enum.Enum):
    LIST_STUDENTS = "students:list"
    CREATE_STUDENT = "students:create"
    UPDATE_STUDENT = "students:update"
    DELETE_STUDENT = "students:delete"
    LIST_LESSONS = "lessons:list"
    CREATE_LESSON = "lessons:create"
    UPDATE_LESSON = "lessons:update"
    DELETE_LESSON = "lessons:delete"
    ADMIN_LIST_STUDENTS = "admin:students:list"
    ADMIN_LIST_TEACHERS = "admin:teachers:list"
    ADMIN_LIST_LESSONS = "admin:lessons:list"


ADMIN_OPERATIONS = frozenset({
    Operation.ADMIN_LIST_STUDENTS,
    Operation.ADMIN_LIST_TEACHERS,
    Operation.ADMIN_LIST_LESSONS,
})

# Teacher-scoped operations an admin may run against any teacher's rows.
CROSS_TEACHER_OPERATIONS = frozenset({Operation.UPDATE_LESSON})


def _role_claim(payload: dict[str, Any]) -> Optional[str]:
    if payload.get("role"):
        return payload["role"]
    metadata = payload.get("public_metadata") or {}
    return metadata.get("role")


def resolve_caller(token: Optional[str]) -> Caller:
    """Build the caller from a bearer token or raise Unauthorized."""
    if not token:
        raise Unauthorized()
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE,
            options={"verify_aud": settings.JWT_AUDIENCE is not None},
        )
    except JWTError as exc:
        logger.warning("Rejected bearer token: %s", exc)
        raise Unauthorized() from exc

    user_id = payload.get("sub")
    if not user_id:
        raise Unauthorized()

    # missing claim means a freshly provisioned teacher
    role = _role_claim(payload) or Role.TEACHER.value
    try:
        return Caller(id=str(user_id), role=Role(role))
    except ValueError as exc:
        logger.warning("Unknown role %r for user %s", role, user_id)
        raise Unauthorized() from exc


def authorize(caller: Optional[Caller], operation: Operation,
              resource_owner_id: Optional[str] = None) -> None:
    """Return when the caller may perform the operation, raise otherwise."""
    if caller is None:
        raise Unauthorized()
    if operation in ADMIN_OPERATIONS:
        if not caller.is_admin:
            logger.warning("User %s denied %s: admin role required", caller.id, operation.value)
            raise Forbidden()
        return
    if resource_owner_id is None or resource_owner_id == caller.id:
        return
    if caller.is_admin and operation in CROSS_TEACHER_OPERATIONS:
        return
    logger.warning("User %s denied %s on a row owned by another teacher", caller.id, operation.value)
    raise Unauthorized()


def owner_scope(caller: Caller, operation: Operation) -> Optional[str]:
    """teacher_id predicate for the store; None leaves the query unscoped."""
    authorize(caller, operation)
    if caller.is_admin and operation in CROSS_TEACHER_OPERATIONS:
        return None
    return caller.id
