# medsearch/application/catalog_queries.py
from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

from medsearch.application.initializer import CatalogInitializer
from medsearch.domain.errors import EngineError, EngineUnreachable, QueryFailed
from medsearch.domain.ports import SearchEnginePort
from medsearch.services.query_builder import (
    SearchParams,
    build_facets_body,
    build_search_body,
    build_suggest_body,
    parse_facets,
    parse_hits,
    parse_suggestions,
)

logger = logging.getLogger("medsearch.query")


class CatalogQueryService:
    """
    The three read operations behind /api/*.

    Each one first makes sure the index is servable: engine reachable,
    index present (otherwise a synchronous initialization run). Failures
    surface as CatalogError kinds, never as empty results.
    """

    def __init__(
        self,
        engine: SearchEnginePort,
        initializer: CatalogInitializer,
        index: str,
        *,
        facet_size: int = 1000,
        suggest_size: int = 10,
        engine_url: str = "",
    ):
        self.engine = engine
        self.initializer = initializer
        self.index = index
        self.facet_size = facet_size
        self.suggest_size = suggest_size
        self.engine_url = engine_url

    async def ensure_ready(self, operation: str) -> None:
        if not await self.engine.ping():
            raise EngineUnreachable(self.engine_url)
        try:
            exists = await self.engine.index_exists(self.index)
        except EngineError as e:
            raise QueryFailed(operation, e.reason) from e
        if not exists:
            logger.info("Index %s does not exist, initializing database... op=%s", self.index, operation)
            await self.initializer.initialize_or_raise()

    async def _search(self, operation: str, body: Dict[str, Any]) -> Dict[str, Any]:
        try:
            return await self.engine.search(self.index, body)
        except EngineError as e:
            raise QueryFailed(operation, e.reason) from e

    async def filters(self) -> Dict[str, List[str]]:
        await self.ensure_ready("filters")
        logger.info("Fetching categories and manufacturers for filters...")
        resp = await self._search("filters", build_facets_body(self.facet_size))
        facets = parse_facets(resp)
        if facets is None:
            raise QueryFailed("filters", "No aggregations in response")
        return facets

    async def autocomplete(self, prefix: Optional[str]) -> List[str]:
        await self.ensure_ready("autocomplete")
        prefix = (prefix or "").strip()
        if not prefix:
            return []
        resp = await self._search("autocomplete", build_suggest_body(prefix, self.suggest_size))
        return parse_suggestions(resp)

    async def search(self, params: SearchParams) -> Dict[str, Any]:
        await self.ensure_ready("search")
        body = build_search_body(params)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Executing search query: %s", json.dumps(body, ensure_ascii=False))
        resp = await self._search("search", body)
        return parse_hits(resp)

    async def readiness(self) -> Dict[str, Any]:
        """Observed engine state, without triggering initialization."""
        out: Dict[str, Any] = {"engine": False, "index_exists": False, "documents": None}
        if not await self.engine.ping():
            return out
        out["engine"] = True
        try:
            out["index_exists"] = await self.engine.index_exists(self.index)
            if out["index_exists"]:
                out["documents"] = await self.engine.count(self.index)
        except EngineError as e:
            out["error"] = e.reason
        return out
