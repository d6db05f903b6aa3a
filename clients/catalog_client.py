import requests
from typing import Optional, Dict, Any, List

class MedSearchClient:
    def __init__(self, base_url: str, timeout: int = 30):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        r = requests.get(f"{self.base_url}{path}", params=params or {}, timeout=self.timeout)
        r.raise_for_status(); return r.json()

    def health(self) -> Dict[str, Any]:
        return self._get("/health")

    def readiness(self) -> Dict[str, Any]:
        return self._get("/readyz")

    def filters(self) -> Dict[str, List[str]]:
        return self._get("/api/filters")

    def autocomplete(self, q: str) -> List[str]:
        return self._get("/api/autocomplete", {"q": q}).get("suggestions", [])

    def search(self, q: Optional[str] = None, *, category: Optional[str] = None,
               manufacturer: Optional[str] = None, size: Optional[int] = None,
               offset: Optional[int] = None) -> Dict[str, Any]:
        params: Dict[str, Any] = {}
        if q: params["q"] = q
        if category: params["category"] = category
        if manufacturer: params["manufacturer"] = manufacturer
        if size is not None: params["size"] = size
        if offset: params["offset"] = offset
        return self._get("/api/search", params)
