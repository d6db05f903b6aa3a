# medsearch/domain/errors.py
from __future__ import annotations

from typing import Optional


class EngineError(Exception):
    """Raised by the engine adapter when Elasticsearch rejects a call or cannot be reached."""

    def __init__(self, operation: str, reason: str, status: Optional[int] = None):
        super().__init__(f"{operation}: {reason}")
        self.operation = operation
        self.reason = reason
        self.status = status


class CatalogError(Exception):
    """
    Base for the closed set of failures the service reports.
    Each kind carries a stable `code` plus structured fields; display
    strings are built at the HTTP boundary (see presentation/errors.py).
    """
    code = "catalog_error"


class EngineUnreachable(CatalogError):
    code = "engine_unreachable"

    def __init__(self, url: str):
        super().__init__(url)
        self.url = url


class SchemaOperationFailed(CatalogError):
    code = "schema_operation_failed"

    def __init__(self, index: str, operation: str, reason: str):
        super().__init__(index, operation, reason)
        self.index = index
        self.operation = operation  # "exists" | "delete" | "create"
        self.reason = reason


class DatasetLoadFailed(CatalogError):
    code = "dataset_load_failed"

    def __init__(self, path: str, reason: str):
        super().__init__(path, reason)
        self.path = path
        self.reason = reason


class ImportBatchFailed(CatalogError):
    code = "import_batch_failed"

    def __init__(
        self,
        index: str,
        reason: str,
        batch_number: Optional[int] = None,
        first: Optional[int] = None,
        last: Optional[int] = None,
    ):
        super().__init__(index, reason, batch_number)
        self.index = index
        self.reason = reason
        # batch_number None → the final refresh failed, not a batch
        self.batch_number = batch_number
        self.first = first
        self.last = last


class QueryFailed(CatalogError):
    code = "query_failed"

    def __init__(self, operation: str, reason: str):
        super().__init__(operation, reason)
        self.operation = operation  # "filters" | "autocomplete" | "search"
        self.reason = reason


class InitializationExhausted(CatalogError):
    code = "initialization_exhausted"

    def __init__(self, attempts: int, last_error: Optional[CatalogError] = None):
        super().__init__(attempts, last_error)
        self.attempts = attempts
        self.last_error = last_error
