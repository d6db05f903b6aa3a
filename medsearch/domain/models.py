# medsearch/domain/models.py
from __future__ import annotations

from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, field_validator

RECORD_FIELDS = (
    "name",
    "generic_name",
    "manufacturer",
    "category",
    "price",
    "dosage",
    "description",
)

SUGGEST_FIELD = "name_suggest"


class MedicineRecord(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", str_strip_whitespace=True)

    name: str
    generic_name: str = ""
    manufacturer: str = ""
    category: str = ""
    price: float | None = None
    dosage: str = ""
    description: str = ""

    @field_validator("price", mode="before")
    @classmethod
    def _blank_price(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    def suggest_inputs(self) -> List[str]:
        return [v for v in (self.name, self.generic_name) if v]

    def to_document(self) -> Dict[str, Any]:
        """Source document as indexed, with the completion input seeded from name + generic_name."""
        doc = self.model_dump()
        doc[SUGGEST_FIELD] = {"input": self.suggest_inputs(), "weight": 1}
        return doc


class IndexSchema(BaseModel):
    """Field-type declaration sent together with the index create request."""
    model_config = ConfigDict(frozen=True)

    properties: Dict[str, Dict[str, Any]]

    def mappings(self) -> Dict[str, Any]:
        return {"properties": {k: dict(v) for k, v in self.properties.items()}}


MEDICINE_SCHEMA = IndexSchema(
    properties={
        "name": {"type": "text"},
        "generic_name": {"type": "text"},
        "manufacturer": {"type": "keyword"},
        "category": {"type": "keyword"},
        "price": {"type": "float"},
        "dosage": {"type": "keyword"},
        "description": {"type": "text"},
        SUGGEST_FIELD: {"type": "completion"},
    }
)
