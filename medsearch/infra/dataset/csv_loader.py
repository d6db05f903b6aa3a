# medsearch/infra/dataset/csv_loader.py
from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import List

from pydantic import ValidationError

from medsearch.domain.errors import DatasetLoadFailed
from medsearch.domain.models import MedicineRecord
from medsearch.domain.ports import DatasetPort

logger = logging.getLogger("medsearch.import")

REQUIRED_COLUMNS = ("name",)


class CsvMedicineDataset(DatasetPort):
    """
    Reads the whole CSV into memory, in file order.
    Header row must name the record fields; unknown columns are ignored.
    """

    def __init__(self, path: Path | str, delimiter: str = ","):
        self.path = Path(path)
        self.delimiter = delimiter

    def load(self) -> List[MedicineRecord]:
        try:
            # utf-8-sig strips a BOM left by spreadsheet exports
            with self.path.open("r", encoding="utf-8-sig", newline="") as f:
                reader = csv.DictReader(f, delimiter=self.delimiter, restval="")
                header = reader.fieldnames or []
                missing = [c for c in REQUIRED_COLUMNS if c not in header]
                if missing:
                    raise DatasetLoadFailed(str(self.path), f"missing columns: {', '.join(missing)}")
                rows = list(reader)
        except OSError as e:
            raise DatasetLoadFailed(str(self.path), str(e)) from e
        except csv.Error as e:
            raise DatasetLoadFailed(str(self.path), f"malformed csv: {e}") from e

        records: List[MedicineRecord] = []
        for line_no, row in enumerate(rows, start=2):
            try:
                # surplus cells land under the None key
                records.append(MedicineRecord.model_validate({k: v for k, v in row.items() if k}))
            except ValidationError as e:
                raise DatasetLoadFailed(str(self.path), f"line {line_no}: {e.errors()[0]['msg']}") from e

        logger.info("CSV file read successfully. path=%s records=%d", self.path, len(records))
        return records
