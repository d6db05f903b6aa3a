# medsearch/domain/ports.py
from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, Dict, List

from medsearch.domain.models import MedicineRecord


class SearchEnginePort(ABC):
    """
    Contract consumed from the external search engine.
    Implementations raise `EngineError` when the engine rejects a call.
    `ping` is the exception: it returns False instead of raising.
    """
    @abstractmethod
    async def ping(self) -> bool: ...

    @abstractmethod
    async def index_exists(self, index: str) -> bool: ...

    @abstractmethod
    async def create_index(self, index: str, mappings: Dict[str, Any]) -> None: ...

    @abstractmethod
    async def delete_index(self, index: str) -> None: ...

    @abstractmethod
    async def bulk(self, operations: List[Dict[str, Any]], refresh: bool = False) -> Dict[str, Any]: ...

    @abstractmethod
    async def refresh(self, index: str) -> None: ...

    @abstractmethod
    async def count(self, index: str) -> int: ...

    @abstractmethod
    async def search(self, index: str, body: Dict[str, Any]) -> Dict[str, Any]: ...


class DatasetPort(ABC):
    @abstractmethod
    def load(self) -> List[MedicineRecord]: ...
