# medsearch/presentation/errors.py
from __future__ import annotations

from typing import Any, Dict

from fastapi.responses import JSONResponse

from medsearch.domain.errors import (
    CatalogError,
    DatasetLoadFailed,
    EngineUnreachable,
    ImportBatchFailed,
    InitializationExhausted,
    QueryFailed,
    SchemaOperationFailed,
)


def describe(exc: BaseException) -> str:
    """Human-readable detail for an error kind."""
    if isinstance(exc, EngineUnreachable):
        return f"Elasticsearch is not accessible at {exc.url}" if exc.url else "Elasticsearch is not accessible"
    if isinstance(exc, SchemaOperationFailed):
        return f"Index {exc.operation} failed for '{exc.index}': {exc.reason}"
    if isinstance(exc, DatasetLoadFailed):
        return f"Could not read dataset {exc.path}: {exc.reason}"
    if isinstance(exc, ImportBatchFailed):
        if exc.batch_number is None:
            return f"Final refresh of '{exc.index}' failed: {exc.reason}"
        return f"Import batch {exc.batch_number} (records {exc.first} to {exc.last}) failed: {exc.reason}"
    if isinstance(exc, QueryFailed):
        return f"{exc.operation} query failed: {exc.reason}"
    if isinstance(exc, InitializationExhausted):
        base = f"Failed to initialize database after {exc.attempts} attempt(s)"
        return f"{base}: {describe(exc.last_error)}" if exc.last_error else base
    return str(exc) or exc.__class__.__name__


def error_response(message: str, exc: BaseException, **payload: Any) -> JSONResponse:
    """
    Uniform failure envelope: always HTTP 500, always carrying the
    endpoint's payload field(s) as empty collections.
    """
    code = exc.code if isinstance(exc, CatalogError) else "internal_error"
    content: Dict[str, Any] = {"error": message, "code": code, "details": describe(exc)}
    content.update(payload)
    return JSONResponse(status_code=500, content=content)
