# medsearch/container.py
from functools import lru_cache

from medsearch.config import Settings
from medsearch.infra.dataset.csv_loader import CsvMedicineDataset
from medsearch.infra.search.es_engine import ElasticsearchEngine

from medsearch.application.initializer import CatalogInitializer, RetryPolicy
from medsearch.application.catalog_queries import CatalogQueryService


@lru_cache
def get_settings() -> Settings: return Settings.from_env()

@lru_cache
def _engine() -> ElasticsearchEngine: return ElasticsearchEngine.from_settings(get_settings())

@lru_cache
def _dataset() -> CsvMedicineDataset: return CsvMedicineDataset(get_settings().dataset_path)

@lru_cache
def get_initializer() -> CatalogInitializer:
    s = get_settings()
    return CatalogInitializer(
        engine=_engine(),
        dataset=_dataset(),
        index=s.index_name,
        batch_size=s.batch_size,
        policy=RetryPolicy(max_attempts=s.init_max_attempts, delay_sec=s.init_retry_delay_sec),
        engine_url=s.es_url,
    )

@lru_cache
def get_catalog_queries() -> CatalogQueryService:
    s = get_settings()
    return CatalogQueryService(
        engine=_engine(),
        initializer=get_initializer(),
        index=s.index_name,
        facet_size=s.facet_size,
        suggest_size=s.suggest_size,
        engine_url=s.es_url,
    )

async def close_engine() -> None:
    if _engine.cache_info().currsize:
        await _engine().close()
        _engine.cache_clear()
