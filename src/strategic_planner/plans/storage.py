"""
Plan Storage - key-value blob persistence for the plan document.

The whole plan collection and the current-plan pointer are written as one
JSON blob under a fixed key. Storage failures never reach the caller:
a missing or corrupt blob loads as an empty document and a failed write
is logged and dropped.

Usage:
	storage = PlanStorage(FileBlobStore("data/storage"))
	document = storage.load()
	storage.save(document.plans, document.current_plan_id)
"""

import logging
import os
import sqlite3
import tempfile
from contextlib import closing
from datetime import datetime
from pathlib import Path
from typing import Optional, Protocol, Sequence

from pydantic import ValidationError

from .models import Plan, PlanDocument

logger = logging.getLogger(__name__)

STORAGE_KEY = "strategic-planner-pro"


class BlobStore(Protocol):
	"""Minimal key -> text store."""

	def get(self, key: str) -> Optional[str]: ...

	def put(self, key: str, value: str) -> None: ...

	def delete(self, key: str) -> None: ...


class MemoryBlobStore:
	"""Dict-backed blob store for tests and throwaway sessions."""

	def __init__(self, initial: Optional[dict[str, str]] = None):
		self._blobs: dict[str, str] = dict(initial or {})

	def get(self, key: str) -> Optional[str]:
		return self._blobs.get(key)

	def put(self, key: str, value: str) -> None:
		self._blobs[key] = value

	def delete(self, key: str) -> None:
		self._blobs.pop(key, None)


class FileBlobStore:
	"""One JSON file per key inside a directory."""

	def __init__(self, directory: str | Path):
		self.directory = Path(directory)
		self.directory.mkdir(parents=True, exist_ok=True)

	def _path(self, key: str) -> Path:
		return self.directory / f"{key}.json"

	def get(self, key: str) -> Optional[str]:
		path = self._path(key)
		if not path.exists():
			return None
		return path.read_text(encoding="utf-8")

	def put(self, key: str, value: str) -> None:
		"""Write to a temp file in the same directory, then swap it in."""
		fd, tmp_name = tempfile.mkstemp(dir=str(self.directory), prefix=f".{key}.", suffix=".tmp")
		try:
			with os.fdopen(fd, "w", encoding="utf-8") as f:
				f.write(value)
			os.replace(tmp_name, self._path(key))
		except BaseException:
			Path(tmp_name).unlink(missing_ok=True)
			raise

	def delete(self, key: str) -> None:
		self._path(key).unlink(missing_ok=True)


class SqliteBlobStore:
	"""SQLite-backed blob store (single ``blobs`` table)."""

	def __init__(self, db_path: str | Path):
		self.db_path = Path(db_path)
		self.db_path.parent.mkdir(parents=True, exist_ok=True)
		self._ensure_table()

	def _ensure_table(self) -> None:
		with closing(sqlite3.connect(str(self.db_path))) as conn, conn:
			conn.execute("""
				CREATE TABLE IF NOT EXISTS blobs (
					key TEXT PRIMARY KEY,
					value TEXT NOT NULL,
					updated_at TEXT NOT NULL
				)
			""")

	def _connect(self) -> sqlite3.Connection:
		conn = sqlite3.connect(str(self.db_path))
		conn.row_factory = sqlite3.Row
		return conn

	def get(self, key: str) -> Optional[str]:
		with closing(self._connect()) as conn, conn:
			row = conn.execute("SELECT value FROM blobs WHERE key = ?", (key,)).fetchone()
		return row["value"] if row else None

	def put(self, key: str, value: str) -> None:
		with closing(self._connect()) as conn, conn:
			conn.execute(
				"""
				INSERT INTO blobs (key, value, updated_at) VALUES (?, ?, ?)
				ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
				""",
				(key, value, datetime.now().isoformat()),
			)

	def delete(self, key: str) -> None:
		with closing(self._connect()) as conn, conn:
			conn.execute("DELETE FROM blobs WHERE key = ?", (key,))


class PlanStorage:
	"""Loads and saves the plan document through a blob store."""

	def __init__(self, blob_store: BlobStore, key: str = STORAGE_KEY):
		self.blob_store = blob_store
		self.key = key
		self.load_failed = False

	def load(self) -> PlanDocument:
		"""
		Load the stored document.

		Returns:
			The stored PlanDocument, or an empty one when nothing is stored
			or the stored blob cannot be read or parsed. In the latter two
			cases load_failed is set, and an unparsable blob is copied to
			``<key>.corrupt`` first.
		"""
		self.load_failed = False
		try:
			raw = self.blob_store.get(self.key)
		except Exception as e:
			logger.error(f"Error loading from storage: {e}")
			self.load_failed = True
			return PlanDocument()

		if raw is None:
			return PlanDocument()

		try:
			return PlanDocument.model_validate_json(raw)
		except ValidationError as e:
			logger.error(f"Stored plan data is corrupt, starting empty: {e}")
			self.load_failed = True
			self._backup(raw)
			return PlanDocument()

	def _backup(self, raw: str) -> None:
		backup_key = f"{self.key}.corrupt"
		try:
			self.blob_store.put(backup_key, raw)
		except Exception as e:
			logger.error(f"Could not back up corrupt plan data: {e}")
			return
		logger.warning(f"Corrupt plan data copied to '{backup_key}'")

	def save(self, plans: Sequence[Plan], current_plan_id: Optional[str]) -> bool:
		"""
		Write every plan and the current-plan pointer as one blob.

		Returns:
			True if the write went through. Failures are logged, never raised.
		"""
		try:
			document = PlanDocument(plans=list(plans), current_plan_id=current_plan_id)
			self.blob_store.put(self.key, document.model_dump_json(by_alias=True))
		except Exception as e:
			logger.error(f"Error saving to storage: {e}")
			return False
		logger.debug(f"Saved {len(plans)} plan(s) to '{self.key}'")
		return True


def open_storage(config) -> PlanStorage:
	"""
	Build the PlanStorage selected by ``config.storage_backend``.

	Raises:
		ValueError: If the backend name is unknown
	"""
	backend = config.storage_backend
	if backend == "file":
		store: BlobStore = FileBlobStore(config.storage_dir)
	elif backend == "sqlite":
		store = SqliteBlobStore(config.db_path)
	elif backend == "memory":
		store = MemoryBlobStore()
	else:
		raise ValueError(f"Unknown storage backend: {backend}")
	logger.info(f"Plan storage: {backend}")
	return PlanStorage(store)
