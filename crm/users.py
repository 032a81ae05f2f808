"""User provisioning from identity-provider events and the teacher roster."""
import logging
from typing import Any

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from . import crud
from .errors import MalformedPayload
from .models import Role
from .schemas import IdentityEvent

logger = logging.getLogger(__name__)


def parse_identity_event(payload: Any) -> IdentityEvent:
    if not isinstance(payload, dict):
        raise MalformedPayload()
    try:
        return IdentityEvent.model_validate(payload)
    except PydanticValidationError as exc:
        logger.warning("Malformed identity payload: %s", exc.errors())
        raise MalformedPayload() from exc


def provision(db: Session, payload: Any):
    """Insert the signed-up user as a teacher. A repeated id is a store error."""
    event = parse_identity_event(payload)
    data = event.data
    email = data.email_addresses[0].email_address
    logger.info("Identity event %s for user %s", event.type or "unknown", data.id)
    user = crud.create_user(db, data.id, email, full_name=data.full_name, role=Role.TEACHER.value)
    logger.info("Provisioned user %s (%s) as %s", user.id, email, user.role)
    return user


def list_teachers(db: Session):
    return crud.list_teachers(db)
