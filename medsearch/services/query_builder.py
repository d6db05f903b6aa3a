# medsearch/services/query_builder.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from medsearch.domain.models import SUGGEST_FIELD

FACET_FIELDS = {"categories": "category", "manufacturers": "manufacturer"}
TEXT_FIELDS = ["name", "generic_name", "description"]
SUGGESTION_NAME = "name_suggest"


@dataclass(frozen=True)
class SearchParams:
    q: Optional[str] = None
    category: Optional[str] = None
    manufacturer: Optional[str] = None
    size: int = 10
    offset: int = 0


def _clean(s: Optional[str]) -> Optional[str]:
    s = (s or "").strip()
    return s or None


# ── Facets ────────────────────────────────────────────────────────
def build_facets_body(size: int = 1000) -> Dict[str, Any]:
    return {
        "size": 0,
        "aggs": {name: {"terms": {"field": field, "size": size}} for name, field in FACET_FIELDS.items()},
    }


def parse_facets(resp: Dict[str, Any]) -> Optional[Dict[str, List[str]]]:
    """Bucket keys per facet, or None when the response carries no aggregations."""
    aggs = resp.get("aggregations")
    if not aggs:
        return None
    return {
        name: [b["key"] for b in (aggs.get(name) or {}).get("buckets", [])]
        for name in FACET_FIELDS
    }


# ── Autocomplete ──────────────────────────────────────────────────
def build_suggest_body(prefix: str, size: int = 10) -> Dict[str, Any]:
    return {
        "suggest": {
            SUGGESTION_NAME: {
                "prefix": prefix,
                "completion": {
                    "field": SUGGEST_FIELD,
                    "fuzzy": {"fuzziness": "AUTO"},
                    "size": size,
                },
            }
        }
    }


def parse_suggestions(resp: Dict[str, Any]) -> List[str]:
    entries = (resp.get("suggest") or {}).get(SUGGESTION_NAME) or []
    if not entries:
        return []
    return [opt["text"] for opt in entries[0].get("options", [])]


# ── Search ────────────────────────────────────────────────────────
def build_search_body(params: SearchParams) -> Dict[str, Any]:
    q = _clean(params.q)
    must: Dict[str, Any]
    if q:
        must = {"multi_match": {"query": q, "fields": list(TEXT_FIELDS), "fuzziness": "AUTO"}}
    else:
        must = {"match_all": {}}

    filters: List[Dict[str, Any]] = []
    category = _clean(params.category)
    manufacturer = _clean(params.manufacturer)
    if category:
        filters.append({"term": {"category": category}})
    if manufacturer:
        filters.append({"term": {"manufacturer": manufacturer}})

    body: Dict[str, Any] = {
        "query": {"bool": {"must": [must], "filter": filters}},
        "track_total_hits": True,
        "size": params.size,
    }
    if params.offset:
        body["from"] = params.offset
    return body


def parse_hits(resp: Dict[str, Any]) -> Dict[str, Any]:
    hits = resp.get("hits") or {}
    total = hits.get("total") or 0
    if isinstance(total, dict):
        total = total.get("value", 0)
    out = []
    for h in hits.get("hits", []):
        src = {k: v for k, v in (h.get("_source") or {}).items() if k != SUGGEST_FIELD}
        out.append({**src, "score": h.get("_score")})
    return {"total": int(total), "hits": out}
