# medsearch/infra/search/es_engine.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from elasticsearch import ApiError, AsyncElasticsearch, TransportError

from medsearch.config import Settings
from medsearch.domain.errors import EngineError
from medsearch.domain.ports import SearchEnginePort

logger = logging.getLogger("medsearch.engine")


def _reason(e: Exception) -> tuple[str, Optional[int]]:
    if isinstance(e, ApiError):
        return f"{e.message} ({e.meta.status})", e.meta.status
    return str(e) or e.__class__.__name__, None


class ElasticsearchEngine(SearchEnginePort):
    """
    Thin async adapter over `AsyncElasticsearch`.
    Every call maps client/transport errors to `EngineError`; callers never
    see elasticsearch exception types.
    """

    def __init__(self, client: AsyncElasticsearch, url: str = ""):
        self.es = client
        self.url = url

    @classmethod
    def from_settings(cls, settings: Settings) -> "ElasticsearchEngine":
        kwargs: Dict[str, Any] = {"request_timeout": settings.es_request_timeout}
        if settings.es_api_key:
            kwargs["api_key"] = settings.es_api_key
        elif settings.es_username and settings.es_password:
            kwargs["basic_auth"] = (settings.es_username, settings.es_password)
        return cls(AsyncElasticsearch(settings.es_url, **kwargs), url=settings.es_url)

    async def close(self) -> None:
        await self.es.close()

    # ──────────────────────────────────────────────────────────────
    #  Health
    # ──────────────────────────────────────────────────────────────
    async def ping(self) -> bool:
        try:
            ok = bool(await self.es.ping())
        except (ApiError, TransportError) as e:
            logger.error("Elasticsearch cluster is down: %s", _reason(e)[0])
            return False
        if ok:
            logger.debug("Elasticsearch is running at %s", self.url)
        else:
            logger.error("Elasticsearch ping failed at %s", self.url)
        return ok

    # ──────────────────────────────────────────────────────────────
    #  Index management
    # ──────────────────────────────────────────────────────────────
    async def index_exists(self, index: str) -> bool:
        try:
            return bool(await self.es.indices.exists(index=index))
        except (ApiError, TransportError) as e:
            raise EngineError("indices.exists", *_reason(e)) from e

    async def create_index(self, index: str, mappings: Dict[str, Any]) -> None:
        try:
            await self.es.indices.create(index=index, mappings=mappings)
        except (ApiError, TransportError) as e:
            raise EngineError("indices.create", *_reason(e)) from e

    async def delete_index(self, index: str) -> None:
        try:
            await self.es.indices.delete(index=index)
        except (ApiError, TransportError) as e:
            raise EngineError("indices.delete", *_reason(e)) from e

    async def refresh(self, index: str) -> None:
        try:
            await self.es.indices.refresh(index=index)
        except (ApiError, TransportError) as e:
            raise EngineError("indices.refresh", *_reason(e)) from e

    # ──────────────────────────────────────────────────────────────
    #  Documents
    # ──────────────────────────────────────────────────────────────
    async def bulk(self, operations: List[Dict[str, Any]], refresh: bool = False) -> Dict[str, Any]:
        try:
            resp = await self.es.bulk(operations=operations, refresh=refresh)
        except (ApiError, TransportError) as e:
            raise EngineError("bulk", *_reason(e)) from e
        return resp.body

    async def count(self, index: str) -> int:
        try:
            resp = await self.es.count(index=index)
        except (ApiError, TransportError) as e:
            raise EngineError("count", *_reason(e)) from e
        return int(resp.body.get("count", 0))

    async def search(self, index: str, body: Dict[str, Any]) -> Dict[str, Any]:
        try:
            resp = await self.es.search(index=index, **body)
        except (ApiError, TransportError) as e:
            raise EngineError("search", *_reason(e)) from e
        return resp.body
