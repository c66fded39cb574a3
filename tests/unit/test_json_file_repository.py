"""Unit tests for JsonFileFeedbackRepository.

Each test uses its own ``tmp_path`` so nothing touches the real data/
directory.
"""

from __future__ import annotations

import asyncio
import itertools
import json
import os
import time

import pytest

from feedback_tracker.providers.feedback.json_file_repository import JsonFileFeedbackRepository
from feedback_tracker.services.feedback_store import FeedbackStore
from feedback_tracker.utils.errors import PersistenceError


# ─── Initialization ───────────────────────────────────────────────


async def test_initialize_creates_data_directory(json_repository, data_file):
    assert not data_file.parent.exists()
    await json_repository.initialize()
    assert data_file.parent.is_dir()
    assert json_repository.get_provider_name() == "json_file"


async def test_initialize_is_idempotent(json_repository):
    await json_repository.initialize()
    await json_repository.initialize()


# ─── Load ─────────────────────────────────────────────────────────


async def test_missing_file_loads_as_empty(json_repository):
    assert await json_repository.load() == []


async def test_blank_file_loads_as_empty(json_repository, data_file):
    data_file.parent.mkdir(parents=True)
    data_file.write_text("  \n", encoding="utf-8")
    assert await json_repository.load() == []


@pytest.mark.parametrize(
    "content",
    [
        "{not json",
        '{"id": "a"}',
        '[{"id": "a", "name": "x"}]',
    ],
    ids=["corrupt", "not-a-list", "invalid-record"],
)
async def test_bad_document_raises_persistence_error(json_repository, data_file, content):
    data_file.parent.mkdir(parents=True)
    data_file.write_text(content, encoding="utf-8")

    with pytest.raises(PersistenceError) as exc_info:
        await json_repository.load()
    assert exc_info.value.provider_name == "json_file"


async def test_corrupt_document_is_left_untouched(json_repository, data_file):
    data_file.parent.mkdir(parents=True)
    data_file.write_text("{not json", encoding="utf-8")

    with pytest.raises(PersistenceError):
        await json_repository.load()
    assert data_file.read_text(encoding="utf-8") == "{not json"


async def test_unreadable_path_raises_persistence_error(tmp_path):
    # A directory where the file should be is not the same as "missing".
    repo = JsonFileFeedbackRepository(data_file=tmp_path, timeout=2.0)
    with pytest.raises(PersistenceError) as exc_info:
        await repo.load()
    assert exc_info.value.message == "Failed to read feedback"
    assert isinstance(exc_info.value.__cause__, OSError)


async def test_slow_read_times_out(json_repository, monkeypatch):
    def _stall():
        time.sleep(0.5)
        return "[]"

    monkeypatch.setattr(json_repository, "_read_sync", _stall)
    monkeypatch.setattr(json_repository, "_timeout", 0.05)

    with pytest.raises(PersistenceError):
        await json_repository.load()


# ─── Save ─────────────────────────────────────────────────────────


async def test_save_then_load_preserves_order(json_repository, record_factory):
    records = [
        record_factory(feedback_id="b", votes=2),
        record_factory(feedback_id="a", votes=-1),
    ]
    await json_repository.save(records)

    assert await json_repository.load() == records


async def test_saved_document_uses_camel_case_and_indent(json_repository, data_file, record_factory):
    await json_repository.save([record_factory()])

    text = data_file.read_text(encoding="utf-8")
    payload = json.loads(text)
    assert isinstance(payload, list)
    assert set(payload[0]) == {"id", "name", "email", "message", "votes", "createdAt"}
    assert text.startswith("[\n  {")


async def test_save_creates_missing_directory(json_repository, data_file, record_factory):
    await json_repository.save([record_factory()])
    assert data_file.exists()


async def test_save_leaves_no_temp_files(json_repository, data_file, record_factory):
    await json_repository.save([record_factory()])
    await json_repository.save([])

    assert [p.name for p in data_file.parent.iterdir()] == ["feedback.json"]


async def test_save_empty_collection(json_repository, data_file, record_factory):
    await json_repository.save([record_factory()])
    await json_repository.save([])

    assert json.loads(data_file.read_text(encoding="utf-8")) == []
    assert await json_repository.load() == []


async def test_non_ascii_text_round_trips(json_repository, data_file, record_factory):
    record = record_factory(name="Zoë Ångström", message="Très bien, merci beaucoup !")
    await json_repository.save([record])

    assert "Zoë" in data_file.read_text(encoding="utf-8")
    assert (await json_repository.load())[0].name == "Zoë Ångström"


async def test_write_failure_raises_persistence_error(tmp_path, record_factory):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")
    repo = JsonFileFeedbackRepository(data_file=blocker / "feedback.json", timeout=2.0)

    with pytest.raises(PersistenceError) as exc_info:
        await repo.save([record_factory()])
    assert exc_info.value.message == "Failed to save feedback"


# ─── Write timeouts ───────────────────────────────────────────────


def _stall_first_write(repo: JsonFileFeedbackRepository, seconds: float) -> None:
    original = repo._write_sync
    calls = itertools.count()

    def _write(text, ticket):
        if next(calls) == 0:
            time.sleep(seconds)
        original(text, ticket)

    repo._write_sync = _write


async def test_timed_out_save_never_lands(data_file, record_factory):
    repo = JsonFileFeedbackRepository(data_file=data_file, timeout=0.1)
    _stall_first_write(repo, 0.3)

    with pytest.raises(PersistenceError):
        await repo.save([record_factory(feedback_id="late")])

    await asyncio.sleep(0.5)
    assert await repo.load() == []
    assert list(data_file.parent.iterdir()) == []


async def test_timed_out_save_does_not_overwrite_later_save(data_file, record_factory):
    repo = JsonFileFeedbackRepository(data_file=data_file, timeout=0.1)
    _stall_first_write(repo, 0.3)

    with pytest.raises(PersistenceError):
        await repo.save([record_factory(feedback_id="late")])
    await repo.save([record_factory(feedback_id="acknowledged")])

    await asyncio.sleep(0.5)
    assert [r.id for r in await repo.load()] == ["acknowledged"]


async def test_write_past_commit_point_counts_as_saved(data_file, record_factory, monkeypatch):
    real_replace = os.replace

    def _slow_replace(src, dst):
        time.sleep(0.3)
        real_replace(src, dst)

    monkeypatch.setattr(os, "replace", _slow_replace)
    repo = JsonFileFeedbackRepository(data_file=data_file, timeout=0.2)

    await repo.save([record_factory(feedback_id="slow")])

    assert [r.id for r in await repo.load()] == ["slow"]


async def test_failed_create_is_not_persisted_under_serialized_writes(data_file, id_factory, clock):
    repo = JsonFileFeedbackRepository(data_file=data_file, timeout=0.1)
    _stall_first_write(repo, 0.3)
    store = FeedbackStore(repo, id_factory=id_factory, clock=clock, serialize_writes=True)

    with pytest.raises(PersistenceError):
        await store.create("Ada", "ada@example.com", "The dashboard is lovely")
    await store.create("Bob", "bob@example.com", "Search could be faster")

    await asyncio.sleep(0.5)
    assert [r.name for r in await store.list()] == ["Bob"]
