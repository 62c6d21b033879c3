"""
JSON file record store — one <collection>.json file per collection.

Usage in settings.py:
    DEPOT = {
        "RECORD_STORE": "depot.adapters.json_file.JsonFileRecordStore",
        "DATA_DIR": BASE_DIR / "data",
    }

Writes never modify a collection file in place. Each collection is first
written to a temporary file in the same directory and then swapped in
with os.replace(), so readers see either the old or the new document.
A multi-collection commit stages every temp file before the first swap
and puts the previous contents back if a later swap fails.

locked() takes an exclusive flock() on <DATA_DIR>/.depot.lock, so
engines in different processes (or different store instances) sharing a
data directory run their read-modify-write sections one at a time.
"""

from __future__ import annotations

import fcntl
import json
import logging
import os
import re
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Mapping

from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder

from depot.adapters.base import BaseRecordStore
from depot.conf import depot_settings
from depot.exceptions import StorageError
from depot.protocols.store import Record

logger = logging.getLogger('depot')

_COLLECTION_NAME = re.compile(r'^[A-Za-z0-9_\-]+$')


def default_data_dir() -> Path:
    """DEPOT['DATA_DIR'], or <BASE_DIR or cwd>/data."""
    configured = depot_settings.DATA_DIR
    if configured:
        return Path(configured).expanduser()
    base = getattr(settings, 'BASE_DIR', None) or os.getcwd()
    return Path(base) / 'data'


class JsonFileRecordStore(BaseRecordStore):
    """
    Record store backed by pretty-printed JSON files.

    All file access goes through one re-entrant lock, so a reader in this
    process never observes a multi-collection commit half applied. The
    lock file is never removed; flock() is released when its holder exits.
    """

    suffix = '.json'
    lock_name = '.depot.lock'

    def __init__(self, data_dir: str | Path | None = None):
        super().__init__()
        self.data_dir = Path(data_dir) if data_dir else default_data_dir()
        self._lock_depth = 0

    def path_for(self, collection: str) -> Path:
        if not _COLLECTION_NAME.match(collection or ''):
            raise StorageError(f"Invalid collection name: {collection!r}", collection=collection)
        return self.data_dir / f"{collection}{self.suffix}"

    # ══════════════════════════════════════════════════════════════
    # LOCK
    # ══════════════════════════════════════════════════════════════

    @contextmanager
    def locked(self) -> Iterator[None]:
        """
        Hold the data directory lock for the duration of the block.

        Re-entrant within a thread. Blocks until no other holder remains,
        whether it lives in this process or another one.
        """
        with self._lock:
            if self._lock_depth:
                self._lock_depth += 1
                try:
                    yield
                finally:
                    self._lock_depth -= 1
                return

            try:
                self.data_dir.mkdir(parents=True, exist_ok=True)
                fh = open(self.data_dir / self.lock_name, 'a+b')
            except OSError as e:
                raise StorageError(f"Cannot open lock file in {self.data_dir}") from e

            with fh:
                fcntl.flock(fh.fileno(), fcntl.LOCK_EX)
                self._lock_depth = 1
                try:
                    yield
                finally:
                    self._lock_depth = 0
                    fcntl.flock(fh.fileno(), fcntl.LOCK_UN)

    # ══════════════════════════════════════════════════════════════
    # READ
    # ══════════════════════════════════════════════════════════════

    def load_all(self, collection: str) -> list[Record]:
        path = self.path_for(collection)
        with self._lock:
            try:
                with path.open(encoding='utf-8') as fh:
                    data = json.load(fh)
            except FileNotFoundError:
                return []
            except (OSError, ValueError) as e:
                logger.error(
                    "store.read_failed",
                    extra={"collection": collection, "path": str(path), "error": str(e)},
                )
                raise StorageError(
                    f"Failed to read collection '{collection}'", collection=collection
                ) from e

        if not isinstance(data, list):
            raise StorageError(
                f"Collection '{collection}' is not a JSON array", collection=collection
            )
        return data

    # ══════════════════════════════════════════════════════════════
    # WRITE
    # ══════════════════════════════════════════════════════════════

    def save_many(self, changes: Mapping[str, list[Record]]) -> None:
        if not changes:
            return

        with self._lock:
            try:
                self.data_dir.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise StorageError(f"Cannot create data directory {self.data_dir}") from e

            # 1. Stage every collection to a temp file
            staged: list[tuple[Path, Path]] = []
            try:
                for collection, records in changes.items():
                    target = self.path_for(collection)
                    staged.append((self._write_temp(target, records), target))
            except (OSError, TypeError, ValueError) as e:
                self._discard(staged)
                logger.error(
                    "store.write_failed",
                    extra={"collections": sorted(changes), "error": str(e)},
                )
                raise StorageError(
                    "Failed to serialize collections", collections=sorted(changes)
                ) from e

            # 2. Swap them in, remembering what was there before
            swapped: list[tuple[Path, bytes | None]] = []
            try:
                for tmp, target in staged:
                    previous = target.read_bytes() if target.exists() else None
                    os.replace(tmp, target)
                    swapped.append((target, previous))
            except OSError as e:
                self._restore(swapped)
                self._discard(staged)
                logger.error(
                    "store.commit_failed",
                    extra={"collections": sorted(changes), "error": str(e)},
                )
                raise StorageError(
                    "Failed to commit collections", collections=sorted(changes)
                ) from e

        logger.debug("store.saved", extra={"collections": sorted(changes)})

    def _write_temp(self, target: Path, records: list[Record]) -> Path:
        fd, name = tempfile.mkstemp(
            prefix=f".{target.stem}.", suffix='.tmp', dir=self.data_dir
        )
        tmp = Path(name)
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as fh:
                json.dump(list(records), fh, cls=DjangoJSONEncoder, indent=2)
                fh.flush()
                os.fsync(fh.fileno())
        except BaseException:
            tmp.unlink(missing_ok=True)
            raise
        return tmp

    def _discard(self, staged: list[tuple[Path, Path]]) -> None:
        for tmp, _target in staged:
            try:
                tmp.unlink(missing_ok=True)
            except OSError:
                logger.warning("store.temp_cleanup_failed", extra={"path": str(tmp)})

    def _restore(self, swapped: list[tuple[Path, bytes | None]]) -> None:
        for target, previous in reversed(swapped):
            try:
                if previous is None:
                    target.unlink(missing_ok=True)
                else:
                    fd, name = tempfile.mkstemp(
                        prefix=f".{target.stem}.", suffix='.bak', dir=self.data_dir
                    )
                    with os.fdopen(fd, 'wb') as fh:
                        fh.write(previous)
                    os.replace(name, target)
            except OSError:
                logger.exception("store.restore_failed", extra={"path": str(target)})

    def __repr__(self) -> str:
        return f"<JsonFileRecordStore {self.data_dir}>"
