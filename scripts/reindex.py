# /scripts/reindex.py
# Drop, recreate and reload the catalog index from the CSV dataset,
# outside the API process. Same retry policy as the server startup.
#
# Usage:
#   python scripts/reindex.py
#   python scripts/reindex.py --dataset data/medicines.csv --index medicines --attempts 1
from __future__ import annotations
import argparse, asyncio, logging, sys
from dataclasses import replace
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from medsearch.config import Settings
from medsearch.infra.dataset.csv_loader import CsvMedicineDataset
from medsearch.infra.search.es_engine import ElasticsearchEngine
from medsearch.application.initializer import CatalogInitializer, RetryPolicy


async def _run(settings: Settings) -> bool:
    engine = ElasticsearchEngine.from_settings(settings)
    try:
        init = CatalogInitializer(
            engine=engine,
            dataset=CsvMedicineDataset(settings.dataset_path),
            index=settings.index_name,
            batch_size=settings.batch_size,
            policy=RetryPolicy(settings.init_max_attempts, settings.init_retry_delay_sec),
            engine_url=settings.es_url,
        )
        ok = await init.initialize()
        if ok:
            print(f"[reindex] {settings.index_name}: {await engine.count(settings.index_name)} documents")
        return ok
    finally:
        await engine.close()


def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description="Rebuild the medicines index from CSV")
    ap.add_argument("--dataset", help="CSV path (default: DATASET_PATH)")
    ap.add_argument("--index", help="Index name (default: ES_INDEX)")
    ap.add_argument("--batch-size", type=int)
    ap.add_argument("--attempts", type=int)
    ap.add_argument("--delay", type=float, help="Seconds between attempts")
    args = ap.parse_args(argv)

    s = Settings.from_env()
    logging.basicConfig(level=s.log_level, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    overrides = {
        "dataset_path": Path(args.dataset).resolve() if args.dataset else None,
        "index_name": args.index,
        "batch_size": args.batch_size,
        "init_max_attempts": args.attempts,
        "init_retry_delay_sec": args.delay,
    }
    s = replace(s, **{k: v for k, v in overrides.items() if v is not None})

    ok = asyncio.run(_run(s))
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
