"""
Identity-provider callbacks. No caller identity: the provider is the caller.
"""
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from crm import schemas, users
from crm.errors import MalformedPayload
from services.api import deps

router = APIRouter(prefix="/webhooks", tags=["webhooks"])


@router.post("/identity", response_model=schemas.Success)
async def identity_created(request: Request, db: Session = Depends(deps.get_db)):
    """Store a newly signed-up user as a teacher.

    Body: {"data": {"id": ..., "email_addresses": [{"email_address": ...}]}}
    """
    try:
        payload = await request.json()
    except ValueError as exc:
        raise MalformedPayload() from exc
    # session work is blocking; keep it off the event loop
    await run_in_threadpool(users.provision, db, payload)
    return schemas.Success()
