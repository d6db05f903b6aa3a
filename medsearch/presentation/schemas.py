# medsearch/presentation/schemas.py
from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional

# ── API payloads ──────────────────────────────────────────────────
class FiltersResponse(BaseModel):
    categories: List[str] = []
    manufacturers: List[str] = []

class AutocompleteResponse(BaseModel):
    suggestions: List[str] = []

class SearchHit(BaseModel):
    # extra columns from the source document pass through untouched
    model_config = ConfigDict(extra="allow")

    name: Optional[str] = None
    generic_name: Optional[str] = None
    manufacturer: Optional[str] = None
    category: Optional[str] = None
    price: Optional[float] = None
    dosage: Optional[str] = None
    description: Optional[str] = None
    score: Optional[float] = None

class SearchResponse(BaseModel):
    total: int = 0
    hits: List[SearchHit] = []

# ── Health ────────────────────────────────────────────────────────
class HealthResponse(BaseModel):
    status: str = "ok"

class ReadinessResponse(BaseModel):
    ok: bool
    engine: bool
    index_exists: bool
    documents: Optional[int] = Field(None, description="Indexed document count when the index exists")
    initializing: bool = False
    error: Optional[str] = None
