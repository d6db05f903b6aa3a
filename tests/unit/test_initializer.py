import asyncio

import pytest

from medsearch.application.initializer import CatalogInitializer, RetryPolicy
from medsearch.domain.errors import (
    DatasetLoadFailed,
    EngineUnreachable,
    InitializationExhausted,
    SchemaOperationFailed,
)


def test_first_attempt_success(engine, records, make_initializer):
    sleeps = []
    assert asyncio.run(make_initializer(sleeps=sleeps).initialize()) is True
    assert len(engine.docs("medicines")) == len(records)
    assert sleeps == []


def test_reinitialize_replaces_existing_documents(seeded, records, make_initializer):
    # stale doc that is not part of the dataset
    seeded.indices["medicines"]["docs"].append({"name": "Stale"})
    assert asyncio.run(make_initializer(seeded).initialize())
    names = [d["name"] for d in seeded.docs("medicines")]
    assert len(names) == len(records)
    assert "Stale" not in names


def test_unreachable_engine_exhausts_three_attempts(engine, make_initializer):
    engine.up = False
    sleeps = []
    init = make_initializer(sleeps=sleeps)
    with pytest.raises(InitializationExhausted) as ei:
        asyncio.run(init.initialize_or_raise())
    assert ei.value.attempts == 3
    assert isinstance(ei.value.last_error, EngineUnreachable)
    assert ei.value.last_error.url == "http://es.test:9200"
    # fixed delay between attempts, none after the last one
    assert sleeps == [5.0, 5.0]
    assert engine.calls.count("ping") == 3


def test_initialize_reports_false_instead_of_raising(engine, make_initializer):
    engine.up = False
    assert asyncio.run(make_initializer().initialize()) is False


def test_retry_redoes_full_sequence(engine, dataset):
    engine.fail["create"] = "mapper_parsing_exception"

    async def heal(_sec):
        engine.fail.clear()

    init = CatalogInitializer(engine, dataset, "medicines", policy=RetryPolicy(3, 5.0), sleep=heal)
    report = asyncio.run(init.initialize_or_raise())

    assert report.documents == len(dataset.records)
    assert engine.calls.count("ping") == 2
    assert engine.calls.count("create") == 2
    assert dataset.loads == 2


def test_schema_failure_is_last_error(engine, make_initializer):
    engine.fail["create"] = "illegal_argument_exception"
    with pytest.raises(InitializationExhausted) as ei:
        asyncio.run(make_initializer(attempts=2).initialize_or_raise())
    assert isinstance(ei.value.last_error, SchemaOperationFailed)
    assert ei.value.attempts == 2


def test_unreadable_dataset_leaves_index_untouched(seeded, make_initializer, make_dataset):
    before = list(seeded.docs("medicines"))
    init = make_initializer(seeded, make_dataset([], error="No such file"), attempts=1)
    with pytest.raises(InitializationExhausted) as ei:
        asyncio.run(init.initialize_or_raise())
    assert isinstance(ei.value.last_error, DatasetLoadFailed)
    assert seeded.docs("medicines") == before


def test_concurrent_calls_share_one_run(engine, dataset, make_initializer):
    init = make_initializer()

    async def race():
        return await asyncio.gather(init.initialize(), init.initialize(), init.initialize_or_raise())

    a, b, report = asyncio.run(race())
    assert a is True and b is True
    assert report.documents == len(dataset.records)
    assert engine.calls.count("create") == 1
    assert dataset.loads == 1
    assert not init.in_flight


def test_new_run_after_previous_finished(engine, dataset, make_initializer):
    init = make_initializer()
    asyncio.run(init.initialize())
    asyncio.run(init.initialize())
    assert dataset.loads == 2
    assert engine.calls.count("create") == 2


def test_aclose_stops_shielded_run(engine, make_initializer):
    init = make_initializer()

    async def scenario():
        entered = asyncio.Event()

        async def stall(index, mappings):
            engine.calls.append("create")
            entered.set()
            await asyncio.Event().wait()

        engine.create_index = stall
        caller = asyncio.ensure_future(init.initialize())
        await entered.wait()

        # cancelling the caller leaves the shared run going
        caller.cancel()
        with pytest.raises(asyncio.CancelledError):
            await caller
        assert init.in_flight

        seen = len(engine.calls)
        await init.aclose()
        assert not init.in_flight
        for _ in range(5):
            await asyncio.sleep(0)
        return seen

    seen = asyncio.run(scenario())
    assert len(engine.calls) == seen
    assert "bulk" not in engine.calls


def test_aclose_without_run_is_noop(make_initializer):
    init = make_initializer()
    asyncio.run(init.aclose())
    assert not init.in_flight
