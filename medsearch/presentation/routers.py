# medsearch/presentation/routers.py
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query

from medsearch.application.catalog_queries import CatalogQueryService
from medsearch.container import get_catalog_queries
from medsearch.domain.errors import CatalogError
from medsearch.presentation.errors import error_response
from medsearch.presentation.schemas import AutocompleteResponse, FiltersResponse, SearchResponse
from medsearch.services.query_builder import SearchParams

logger = logging.getLogger("medsearch.query")

MAX_PAGE_SIZE = 100

router = APIRouter(prefix="/api")


# ── FILTERS (facets) ──────────────────────────────────────────────
@router.get("/filters", response_model=FiltersResponse)
async def get_filters(uc: CatalogQueryService = Depends(get_catalog_queries)):
    try:
        return await uc.filters()
    except CatalogError as e:
        logger.error("Error in /api/filters: code=%s error=%r", e.code, e)
        return error_response("Failed to fetch filters", e, categories=[], manufacturers=[])
    except Exception as e:
        logger.exception("Unhandled error in /api/filters")
        return error_response("Failed to fetch filters", e, categories=[], manufacturers=[])


# ── AUTOCOMPLETE ──────────────────────────────────────────────────
@router.get("/autocomplete", response_model=AutocompleteResponse)
async def autocomplete(
    q: str | None = Query(None, description="Prefix typed so far"),
    uc: CatalogQueryService = Depends(get_catalog_queries),
):
    try:
        return {"suggestions": await uc.autocomplete(q)}
    except CatalogError as e:
        logger.error("Autocomplete error: code=%s error=%r", e.code, e)
        return error_response("Autocomplete failed", e, suggestions=[])
    except Exception as e:
        logger.exception("Unhandled autocomplete error")
        return error_response("Autocomplete failed", e, suggestions=[])


# ── SEARCH ────────────────────────────────────────────────────────
@router.get("/search", response_model=SearchResponse)
async def search(
    q: str | None = Query(None, description="Free text; matches everything when empty"),
    category: str | None = Query(None, description="Exact category"),
    manufacturer: str | None = Query(None, description="Exact manufacturer"),
    size: int = Query(10, description=f"Hits per page (1..{MAX_PAGE_SIZE})"),
    offset: int = Query(0, description="Hits to skip"),
    uc: CatalogQueryService = Depends(get_catalog_queries),
):
    params = SearchParams(
        q=q,
        category=category,
        manufacturer=manufacturer,
        size=min(max(size, 1), MAX_PAGE_SIZE),
        offset=max(offset, 0),
    )
    try:
        return await uc.search(params)
    except CatalogError as e:
        logger.error("Search error: code=%s error=%r", e.code, e)
        return error_response("Search failed", e, total=0, hits=[])
    except Exception as e:
        logger.exception("Unhandled search error")
        return error_response("Search failed", e, total=0, hits=[])
