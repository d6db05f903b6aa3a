# tests/conftest.py
import asyncio
import os
from typing import Any, Dict, List, Optional

import pytest

os.environ.setdefault("INIT_ON_STARTUP", "0")

from medsearch.application.catalog_queries import CatalogQueryService
from medsearch.application.initializer import CatalogInitializer, RetryPolicy
from medsearch.domain.errors import DatasetLoadFailed, EngineError
from medsearch.domain.models import MedicineRecord
from medsearch.domain.ports import DatasetPort, SearchEnginePort


class FakeEngine(SearchEnginePort):
    """
    In-memory stand-in for Elasticsearch, just enough of it for the
    catalog: exact term filters, naive token matching, terms aggs and
    case-insensitive completion prefixes.
    """

    def __init__(self, up: bool = True):
        self.up = up
        self.indices: Dict[str, Dict[str, Any]] = {}
        self.calls: List[str] = []
        self.bulk_sizes: List[int] = []
        self.bulk_refresh: List[bool] = []
        self.searches: List[Dict[str, Any]] = []
        # op name -> reason; the op raises EngineError while present
        self.fail: Dict[str, str] = {}
        self.fail_bulk_at: Optional[int] = None
        self.item_errors_at: Optional[int] = None

    def _check(self, op: str) -> None:
        self.calls.append(op)
        if not self.up:
            raise EngineError(op, "connection refused")
        if op in self.fail:
            raise EngineError(op, self.fail[op], 400)

    def docs(self, index: str) -> List[Dict[str, Any]]:
        return self.indices.get(index, {}).get("docs", [])

    async def ping(self) -> bool:
        await asyncio.sleep(0)
        self.calls.append("ping")
        return self.up

    async def index_exists(self, index: str) -> bool:
        self._check("exists")
        return index in self.indices

    async def create_index(self, index: str, mappings: Dict[str, Any]) -> None:
        await asyncio.sleep(0)
        self._check("create")
        if index in self.indices:
            raise EngineError("create", "resource_already_exists_exception", 400)
        self.indices[index] = {"mappings": mappings, "docs": []}

    async def delete_index(self, index: str) -> None:
        self._check("delete")
        if index not in self.indices:
            raise EngineError("delete", "index_not_found_exception", 404)
        del self.indices[index]

    async def bulk(self, operations: List[Dict[str, Any]], refresh: bool = False) -> Dict[str, Any]:
        await asyncio.sleep(0)
        self._check("bulk")
        n = len(self.bulk_sizes) + 1
        if self.fail_bulk_at == n:
            raise EngineError("bulk", "es_rejected_execution_exception", 429)
        pairs = list(zip(operations[::2], operations[1::2]))
        self.bulk_sizes.append(len(pairs))
        self.bulk_refresh.append(refresh)
        if self.item_errors_at == n:
            return {"errors": True, "items": [
                {"index": {"status": 400, "error": {"type": "mapper_parsing_exception", "reason": "failed to parse field [price]"}}}
            ]}
        items = []
        for action, doc in pairs:
            index = action["index"]["_index"]
            self.indices.setdefault(index, {"mappings": {}, "docs": []})["docs"].append(dict(doc))
            items.append({"index": {"status": 201}})
        return {"errors": False, "items": items}

    async def refresh(self, index: str) -> None:
        self._check("refresh")

    async def count(self, index: str) -> int:
        self._check("count")
        return len(self.docs(index))

    async def search(self, index: str, body: Dict[str, Any]) -> Dict[str, Any]:
        await asyncio.sleep(0)
        self._check("search")
        if index not in self.indices:
            raise EngineError("search", "index_not_found_exception", 404)
        self.searches.append(body)
        docs = self.docs(index)
        if "aggs" in body:
            return {"hits": {"total": {"value": len(docs)}, "hits": []},
                    "aggregations": self._aggs(docs, body["aggs"])}
        if "suggest" in body:
            return {"suggest": self._suggest(docs, body["suggest"])}
        return {"hits": self._query(docs, body)}

    @staticmethod
    def _aggs(docs, aggs):
        out = {}
        for name, agg in aggs.items():
            field, size = agg["terms"]["field"], agg["terms"]["size"]
            counts: Dict[str, int] = {}
            for d in docs:
                if d.get(field):
                    counts[d[field]] = counts.get(d[field], 0) + 1
            ordered = sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))[:size]
            out[name] = {"buckets": [{"key": k, "doc_count": c} for k, c in ordered]}
        return out

    @staticmethod
    def _suggest(docs, suggest):
        out = {}
        for name, sugg in suggest.items():
            prefix = sugg["prefix"].lower()
            comp = sugg["completion"]
            options = []
            for d in docs:
                for text in d.get(comp["field"], {}).get("input", []):
                    if text.lower().startswith(prefix):
                        options.append({"text": text, "_score": 1.0, "_source": d})
            out[name] = [{"text": sugg["prefix"], "options": options[:comp["size"]]}]
        return out

    @staticmethod
    def _query(docs, body):
        bool_q = body["query"]["bool"]
        must = bool_q["must"][0]
        hits = []
        for d in docs:
            if not all(d.get(f) == v for t in bool_q["filter"] for f, v in t["term"].items()):
                continue
            if "match_all" in must:
                score = 1.0
            else:
                mm = must["multi_match"]
                text = " ".join(str(d.get(f, "")) for f in mm["fields"]).lower()
                score = float(sum(1 for tok in mm["query"].lower().split() if tok in text))
                if not score:
                    continue
            hits.append({"_index": "x", "_score": score, "_source": d})
        hits.sort(key=lambda h: -h["_score"])
        start = body.get("from", 0)
        return {"total": {"value": len(hits), "relation": "eq"},
                "hits": hits[start:start + body.get("size", 10)]}


class ListDataset(DatasetPort):
    def __init__(self, records: List[MedicineRecord], error: Optional[str] = None):
        self.records = records
        self.error = error
        self.loads = 0

    def load(self) -> List[MedicineRecord]:
        self.loads += 1
        if self.error:
            raise DatasetLoadFailed("memory://", self.error)
        return list(self.records)


def _rec(name, generic, manufacturer, category, price, dosage="", description=""):
    return MedicineRecord(name=name, generic_name=generic, manufacturer=manufacturer,
                          category=category, price=price, dosage=dosage, description=description)


SAMPLE_RECORDS = [
    _rec("Paracetamol", "Acetaminophen", "GSK", "Analgesic", 4.99, "500mg", "Relieves pain and fever"),
    _rec("Panadol", "Paracetamol", "GSK", "Analgesic", 6.49, "500mg", "Headache relief"),
    _rec("Ibuprofen", "Ibuprofen", "Pfizer", "NSAID", 5.25, "200mg", "Anti-inflammatory for pain"),
    _rec("Advil", "Ibuprofen", "Pfizer", "NSAID", 7.10, "200mg", "Muscle aches"),
    _rec("Amoxicillin", "Amoxicillin", "Sandoz", "Antibiotic", 12.30, "500mg", "Bacterial infections"),
    _rec("Azithromycin", "Azithromycin", "Pfizer", "Antibiotic", 15.40, "250mg", "Respiratory infections"),
    _rec("Cetirizine", "Cetirizine", "Bayer", "Antihistamine", 6.80, "10mg", "Allergy relief"),
]


@pytest.fixture
def records() -> List[MedicineRecord]:
    return list(SAMPLE_RECORDS)


@pytest.fixture
def engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def dataset(records) -> ListDataset:
    return ListDataset(records)


@pytest.fixture
def make_initializer(engine, dataset):
    def _make(eng=None, ds=None, *, attempts=3, batch_size=100, sleeps=None):
        async def _sleep(sec):
            if sleeps is not None:
                sleeps.append(sec)
        return CatalogInitializer(
            engine=eng or engine,
            dataset=ds or dataset,
            index="medicines",
            batch_size=batch_size,
            policy=RetryPolicy(max_attempts=attempts, delay_sec=5.0),
            engine_url="http://es.test:9200",
            sleep=_sleep,
        )
    return _make


@pytest.fixture
def make_service(engine, make_initializer):
    def _make(eng=None, initializer=None):
        eng = eng or engine
        return CatalogQueryService(
            engine=eng,
            initializer=initializer or make_initializer(eng),
            index="medicines",
            engine_url="http://es.test:9200",
        )
    return _make


@pytest.fixture
def seeded(engine, make_initializer):
    """Engine with the sample catalog already imported."""
    assert asyncio.run(make_initializer().initialize())
    return engine


@pytest.fixture
def make_dataset():
    return ListDataset
