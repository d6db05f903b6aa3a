# medsearch/config.py
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

ROOT_DIR = Path(__file__).resolve().parents[1]


def _coerce_bool(value: Optional[str], default: bool) -> bool:
    if value is None:
        return default
    lowered = value.strip().lower()
    if lowered in {"1", "true", "yes", "y"}:
        return True
    if lowered in {"0", "false", "no", "n"}:
        return False
    return default


def _coerce_int(value: Optional[str], default: int) -> int:
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _coerce_float(value: Optional[str], default: float) -> float:
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _coerce_log_level(value: Optional[str], default: str) -> str:
    if value is None:
        return default
    name = value.strip().upper()
    # getLevelName maps unknown names to a "Level x" string
    return name if isinstance(logging.getLevelName(name), int) else default


@dataclass(frozen=True)
class Settings:
    es_url: str = "http://localhost:9200"
    es_api_key: Optional[str] = None
    es_username: Optional[str] = None
    es_password: Optional[str] = None
    es_request_timeout: float = 30.0

    index_name: str = "medicines"
    dataset_path: Path = ROOT_DIR / "data" / "medicines.csv"
    batch_size: int = 100

    init_max_attempts: int = 3
    init_retry_delay_sec: float = 5.0
    init_on_startup: bool = True

    facet_size: int = 1000
    suggest_size: int = 10

    cors_allow_origins: str = "*"
    log_level: str = "INFO"
    port: int = 3001

    @property
    def allow_origins(self) -> List[str]:
        return [o.strip().rstrip("/") for o in self.cors_allow_origins.split(",") if o.strip()]

    @staticmethod
    def from_env() -> "Settings":
        load_dotenv()
        dataset = Path(os.environ.get("DATASET_PATH", str(ROOT_DIR / "data" / "medicines.csv")))
        if not dataset.is_absolute():
            dataset = ROOT_DIR / dataset
        return Settings(
            es_url=os.environ.get("ES_URL", "http://localhost:9200"),
            es_api_key=os.environ.get("ES_API_KEY") or None,
            es_username=os.environ.get("ES_USERNAME") or None,
            es_password=os.environ.get("ES_PASSWORD") or None,
            es_request_timeout=_coerce_float(os.environ.get("ES_REQUEST_TIMEOUT"), 30.0),
            index_name=os.environ.get("ES_INDEX", "medicines"),
            dataset_path=dataset,
            batch_size=max(1, _coerce_int(os.environ.get("IMPORT_BATCH_SIZE"), 100)),
            init_max_attempts=max(1, _coerce_int(os.environ.get("INIT_MAX_ATTEMPTS"), 3)),
            init_retry_delay_sec=_coerce_float(os.environ.get("INIT_RETRY_DELAY_SEC"), 5.0),
            init_on_startup=_coerce_bool(os.environ.get("INIT_ON_STARTUP"), True),
            facet_size=_coerce_int(os.environ.get("FACET_SIZE"), 1000),
            suggest_size=_coerce_int(os.environ.get("SUGGEST_SIZE"), 10),
            cors_allow_origins=os.environ.get("CORS_ALLOW_ORIGINS", "*"),
            log_level=_coerce_log_level(os.environ.get("LOG_LEVEL"), "INFO"),
            port=_coerce_int(os.environ.get("PORT"), 3001),
        )
