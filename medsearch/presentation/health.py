# medsearch/presentation/health.py
from fastapi import APIRouter, Depends

from medsearch.application.catalog_queries import CatalogQueryService
from medsearch.container import get_catalog_queries
from medsearch.presentation.schemas import HealthResponse, ReadinessResponse

router = APIRouter()

@router.get("/health", response_model=HealthResponse)
async def health():
    # liveness only; independent of Elasticsearch
    return {"status": "ok"}

@router.get("/readyz", response_model=ReadinessResponse)
async def readyz(uc: CatalogQueryService = Depends(get_catalog_queries)):
    """
    Readiness: is the catalog servable right now?
    - Elasticsearch reachable
    - index present and its document count
    Never starts an initialization.
    """
    checks = await uc.readiness()
    ok = bool(checks["engine"] and checks["index_exists"] and checks.get("documents"))
    return {"ok": ok, "initializing": uc.initializer.in_flight, **checks}
