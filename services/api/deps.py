"""
Request dependencies: database session, caller identity and role checks.
"""
from typing import Optional, Type

from fastapi import Depends, Response
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from crm import query
from crm.auth import Caller, Operation, authorize, resolve_caller
from crm.db import get_db  # noqa: F401  re-exported for dependency overrides

bearer_scheme = HTTPBearer(auto_error=False)


def get_caller(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Caller:
    """Identity of the current request; 401 without a valid bearer token."""
    return resolve_caller(credentials.credentials if credentials else None)


def require(operation: Operation):
    """Dependency factory: resolve the caller and check the operation's role."""
    def dependency(caller: Caller = Depends(get_caller)) -> Caller:
        authorize(caller, operation)
        return caller
    return dependency


def serialize(rows, schema: Type[BaseModel]) -> list[dict]:
    return [schema.model_validate(row).model_dump(mode="json") for row in rows]


def page_of(response: Response, rows: list, page: Optional[int], page_size: int) -> list:
    """Return one page when asked for, with its metadata in response headers."""
    if page is None:
        return rows
    result = query.paginate(rows, page=page, page_size=page_size)
    response.headers["X-Total-Count"] = str(result.total_items)
    response.headers["X-Page"] = str(result.page)
    response.headers["X-Total-Pages"] = str(result.total_pages)
    return result.items
