# medsearch/application/bulk_import.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Sequence

from medsearch.domain.errors import EngineError, ImportBatchFailed
from medsearch.domain.models import MedicineRecord
from medsearch.domain.ports import SearchEnginePort

logger = logging.getLogger("medsearch.import")

DEFAULT_BATCH_SIZE = 100


@dataclass(frozen=True)
class ImportReport:
    batches: int
    documents: int


def iter_batches(records: Sequence[MedicineRecord], batch_size: int) -> Iterator[Sequence[MedicineRecord]]:
    if batch_size < 1:
        raise ValueError(f"batch_size must be >= 1, got {batch_size}")
    for start in range(0, len(records), batch_size):
        yield records[start:start + batch_size]


def build_operations(index: str, batch: Sequence[MedicineRecord]) -> List[Dict[str, Any]]:
    ops: List[Dict[str, Any]] = []
    for rec in batch:
        ops.append({"index": {"_index": index}})
        ops.append(rec.to_document())
    return ops


def _first_item_error(resp: Dict[str, Any]) -> str:
    for item in resp.get("items") or []:
        for action in item.values():
            err = (action or {}).get("error")
            if err:
                if isinstance(err, dict):
                    return f"{err.get('type', 'error')}: {err.get('reason', '')}".strip()
                return str(err)
    return "bulk response reported errors"


class BulkImporter:
    def __init__(self, engine: SearchEnginePort, index: str):
        self.engine = engine
        self.index = index

    async def import_all(self, records: Sequence[MedicineRecord], batch_size: int = DEFAULT_BATCH_SIZE) -> ImportReport:
        """
        Push `records` in consecutive batches, one bulk request each, with
        refresh so a batch is searchable before the next one starts.
        Stops at the first failing batch; earlier batches stay committed.
        """
        total = len(records)
        logger.info("Importing %d medicines into index=%s batch_size=%d", total, self.index, batch_size)

        batches = 0
        first = 0
        for batch_no, batch in enumerate(iter_batches(records, batch_size), start=1):
            last = first + len(batch)
            try:
                resp = await self.engine.bulk(build_operations(self.index, batch), refresh=True)
            except EngineError as e:
                raise ImportBatchFailed(self.index, e.reason, batch_no, first + 1, last) from e
            if resp.get("errors"):
                raise ImportBatchFailed(self.index, _first_item_error(resp), batch_no, first + 1, last)

            batches += 1
            logger.info("Imported batch of medicines %d to %d", first + 1, last)
            first = last

        try:
            await self.engine.refresh(self.index)
        except EngineError as e:
            raise ImportBatchFailed(self.index, e.reason) from e

        logger.info("Data import completed successfully. batches=%d documents=%d", batches, total)
        return ImportReport(batches=batches, documents=total)
