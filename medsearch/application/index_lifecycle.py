# medsearch/application/index_lifecycle.py
from __future__ import annotations

import logging

from medsearch.domain.errors import EngineError, SchemaOperationFailed
from medsearch.domain.models import IndexSchema
from medsearch.domain.ports import SearchEnginePort

logger = logging.getLogger("medsearch.init")


class IndexLifecycleManager:
    def __init__(self, engine: SearchEnginePort):
        self.engine = engine

    async def ensure_index(self, name: str, schema: IndexSchema) -> None:
        """
        Drop `name` if present, then create it with `schema`.
        Existing documents are always discarded; there is no in-place
        mapping migration. Raises SchemaOperationFailed on any rejection.
        """
        try:
            exists = await self.engine.index_exists(name)
        except EngineError as e:
            raise SchemaOperationFailed(name, "exists", e.reason) from e
        logger.info("Index %s exists: %s", name, exists)

        if exists:
            logger.info("Index already exists, deleting... index=%s", name)
            try:
                await self.engine.delete_index(name)
            except EngineError as e:
                raise SchemaOperationFailed(name, "delete", e.reason) from e
            logger.info("Index deleted successfully. index=%s", name)

        try:
            await self.engine.create_index(name, schema.mappings())
        except EngineError as e:
            raise SchemaOperationFailed(name, "create", e.reason) from e
        logger.info("Index created successfully. index=%s fields=%d", name, len(schema.properties))
