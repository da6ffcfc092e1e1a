"""Tests for blob stores and the plan storage adapter."""

import json
import logging
import sqlite3
from pathlib import Path
from types import SimpleNamespace

import pytest

from strategic_planner.plans.factory import create_sample_plan
from strategic_planner.plans.models import PlanDocument
from strategic_planner.plans.storage import (
	STORAGE_KEY,
	FileBlobStore,
	MemoryBlobStore,
	PlanStorage,
	SqliteBlobStore,
	open_storage,
)

from tests.helpers import FailingBlobStore, make_plan


@pytest.fixture(params=["memory", "file", "sqlite"])
def blob_store(request, tmp_path: Path):
	if request.param == "memory":
		return MemoryBlobStore()
	if request.param == "file":
		return FileBlobStore(tmp_path / "storage")
	return SqliteBlobStore(tmp_path / "planner.db")


class TestBlobStores:

	def test_get_missing_returns_none(self, blob_store):
		assert blob_store.get("nothing") is None

	def test_put_overwrites(self, blob_store):
		blob_store.put("k", "one")
		blob_store.put("k", "two")
		assert blob_store.get("k") == "two"

	def test_delete(self, blob_store):
		blob_store.put("k", "v")
		blob_store.delete("k")
		blob_store.delete("k")
		assert blob_store.get("k") is None

	def test_file_store_leaves_no_temp_files(self, tmp_path: Path):
		store = FileBlobStore(tmp_path)
		store.put("plans", "{}")
		store.put("plans", "{\"a\": 1}")
		assert sorted(p.name for p in tmp_path.iterdir()) == ["plans.json"]

	def test_sqlite_store_survives_reopen(self, tmp_path: Path):
		SqliteBlobStore(tmp_path / "p.db").put("k", "v")
		assert SqliteBlobStore(tmp_path / "p.db").get("k") == "v"

	def test_sqlite_store_closes_connections(self, tmp_path: Path, monkeypatch):
		opened = []
		real_connect = sqlite3.connect

		def tracking_connect(*args, **kwargs):
			conn = real_connect(*args, **kwargs)
			opened.append(conn)
			return conn

		monkeypatch.setattr("strategic_planner.plans.storage.sqlite3.connect", tracking_connect)
		store = SqliteBlobStore(tmp_path / "p.db")
		store.put("k", "v")
		assert store.get("k") == "v"
		store.delete("k")

		assert len(opened) == 4
		for conn in opened:
			with pytest.raises(sqlite3.ProgrammingError):
				conn.execute("SELECT 1")


class TestPlanStorage:

	def test_load_without_data_is_empty(self, blob_store):
		document = PlanStorage(blob_store).load()
		assert document.plans == []
		assert document.current_plan_id is None

	def test_round_trip(self, blob_store):
		storage = PlanStorage(blob_store)
		plans = [make_plan("p1"), create_sample_plan()]

		assert storage.save(plans, "p1") is True
		document = storage.load()

		assert document == PlanDocument(plans=plans, current_plan_id="p1")

	def test_round_trip_with_null_pointer(self, blob_store):
		storage = PlanStorage(blob_store)
		storage.save([make_plan("p1")], None)
		assert storage.load().current_plan_id is None

	def test_load_is_idempotent(self, blob_store):
		storage = PlanStorage(blob_store)
		storage.save([make_plan("p1")], "p1")
		assert storage.load() == storage.load()

	def test_blob_uses_camel_case_schema(self):
		store = MemoryBlobStore()
		PlanStorage(store).save([make_plan("p1")], "p1")

		data = json.loads(store.get(STORAGE_KEY))

		assert data["currentPlanId"] == "p1"
		plan = data["plans"][0]
		assert plan["updatedAt"] == "2026-01-01T00:00:00+00:00"
		assert plan["swotItems"][0]["type"] == "strength"
		assert plan["strategicOptions"][0]["relatedStrengths"] == ["s1"]
		assert plan["objectives"][0]["kpis"][0]["objectiveId"] == "obj-1"

	def test_custom_key(self):
		store = MemoryBlobStore()
		PlanStorage(store, key="other").save([], None)
		assert store.get("other") is not None
		assert store.get(STORAGE_KEY) is None

	@pytest.mark.parametrize("raw", [
		"not json at all",
		"{\"plans\": [{\"name\": 3}]}",
		"[1, 2, 3]",
	])
	def test_corrupt_data_loads_empty(self, raw, caplog):
		store = MemoryBlobStore({STORAGE_KEY: raw})
		with caplog.at_level(logging.ERROR):
			document = PlanStorage(store).load()
		assert document.plans == []
		assert document.current_plan_id is None
		assert "corrupt" in caplog.text

	def test_corrupt_data_is_backed_up(self):
		store = MemoryBlobStore({STORAGE_KEY: "not json at all"})
		storage = PlanStorage(store)

		storage.load()

		assert storage.load_failed is True
		assert store.get(f"{STORAGE_KEY}.corrupt") == "not json at all"
		assert store.get(STORAGE_KEY) == "not json at all"

	def test_unknown_enum_values_load(self):
		raw = json.dumps({
			"plans": [{"id": "p1", "name": "Acme", "status": "paused", "swotItems": [{"id": "s1", "type": "rumour", "content": "x"}]}],
			"currentPlanId": "p1",
		})
		storage = PlanStorage(MemoryBlobStore({STORAGE_KEY: raw}))

		document = storage.load()

		assert storage.load_failed is False
		assert document.plans[0].status == "paused"
		assert document.plans[0].swot_items[0].type == "rumour"

	def test_unreadable_store_loads_empty(self, caplog):
		with caplog.at_level(logging.ERROR):
			document = PlanStorage(FailingBlobStore(fail_get=True)).load()
		assert document.plans == []
		assert "Error loading from storage" in caplog.text

	def test_failed_save_is_swallowed(self, caplog):
		with caplog.at_level(logging.ERROR):
			ok = PlanStorage(FailingBlobStore()).save([make_plan("p1")], "p1")
		assert ok is False
		assert "quota exceeded" in caplog.text


class TestOpenStorage:

	def _config(self, tmp_path: Path, backend: str):
		return SimpleNamespace(
			storage_backend=backend,
			storage_dir=tmp_path / "storage",
			db_path=tmp_path / "planner.db",
		)

	def test_file_backend(self, tmp_path: Path):
		storage = open_storage(self._config(tmp_path, "file"))
		assert isinstance(storage.blob_store, FileBlobStore)
		storage.save([], None)
		assert (tmp_path / "storage" / f"{STORAGE_KEY}.json").exists()

	def test_sqlite_backend(self, tmp_path: Path):
		storage = open_storage(self._config(tmp_path, "sqlite"))
		assert isinstance(storage.blob_store, SqliteBlobStore)
		assert (tmp_path / "planner.db").exists()

	def test_unknown_backend_raises(self, tmp_path: Path):
		with pytest.raises(ValueError, match="Unknown storage backend"):
			open_storage(self._config(tmp_path, "s3"))
