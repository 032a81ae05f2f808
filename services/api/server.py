"""FastAPI server for the tutoring CRM.

Endpoints:
  GET/POST/PUT/DELETE /students   - the signed-in teacher's students
  GET/POST/PUT/DELETE /lessons    - the signed-in teacher's lessons
  GET /lessons/schedule           - weekly grid of the teacher's lessons
  GET /admin/students|teachers|lessons - cross-teacher views (admin role)
  POST /webhooks/identity         - user provisioning from the identity provider
  GET  /health                    - liveness probe

On startup: creates missing tables.
"""
from __future__ import annotations

import logging

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from crm import models
from crm.db import engine
from crm.errors import CRMError, ValidationError
from crm.logging_config import setup_root_logging
from services.api.handlers import admin_handlers, lesson_handlers, student_handlers, webhook_handlers

logger = setup_root_logging('api')

app = FastAPI(title="Tutoring CRM API")

app.include_router(student_handlers.router)
app.include_router(lesson_handlers.router)
app.include_router(admin_handlers.router)
app.include_router(webhook_handlers.router)


@app.on_event("startup")
def on_startup():
    logger.info("Ensuring database schema")
    models.Base.metadata.create_all(bind=engine)


def _error_response(exc: CRMError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.to_dict()})


@app.exception_handler(CRMError)
async def crm_error_handler(request: Request, exc: CRMError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.warning("%s %s rejected (%s): %s", request.method, request.url.path, exc.code, exc.message)
    return _error_response(exc)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    fields = []
    for error in exc.errors():
        names = [str(part) for part in error.get("loc", ()) if isinstance(part, str)]
        name = names[-1] if names else "body"
        if name not in fields:
            fields.append(name)
    error = ValidationError(fields, f"Invalid fields: {', '.join(fields)}")
    logger.warning("%s %s rejected: %s", request.method, request.url.path, error.message)
    return _error_response(error)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"error": {"code": "internal_error", "message": "Internal Server Error", "details": None}},
    )


@app.get("/health")
def health():
    return {"status": "ok"}


if __name__ == '__main__':
    uvicorn.run('services.api.server:app', host='0.0.0.0', port=8080)
