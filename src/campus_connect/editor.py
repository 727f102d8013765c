# Copyright 2025 Gowtham Rao <rao@ohdsi.org>
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Provides controllers that load a remote record and edit it field by field."""

import asyncio
import logging
from typing import Any, Generic

from .exceptions import CampusConnectError
from .store.base import RecordStore, RecordT

logger = logging.getLogger(__name__)


def error_message(error: CampusConnectError, fallback: str) -> str:
    """Prefer the server-supplied detail, else a generic fallback."""
    return error.detail or fallback


class RecordView(Generic[RecordT]):
    """Holds one remote record together with its loading and error state.

    Used on its own for read-only resources such as quality metrics, and as
    the base of `OptimisticFieldEditor`.
    """

    def __init__(
        self,
        store: RecordStore[RecordT],
        *,
        load_error: str = "Failed to load record",
    ) -> None:
        self.store = store
        self.load_error = load_error
        self.record_id: int | None = None
        self.data: RecordT | None = None
        self.loading = False
        self.error: str | None = None

    async def load(self, record_id: int | None) -> None:
        """Fetch the record and bind this view to `record_id`.

        Failures are reported through `error`; `data` keeps its previous value.
        """
        self.record_id = record_id
        if not record_id:
            self.loading = False
            return

        try:
            self.loading = True
            self.error = None
            self.data = await self.store.fetch_record(record_id)
        except CampusConnectError as e:
            logger.error("Error fetching record %s: %s", record_id, e)
            self.error = error_message(e, self.load_error)
        finally:
            self.loading = False

    async def refetch(self) -> None:
        await self.load(self.record_id)


class OptimisticFieldEditor(RecordView[RecordT]):
    """Edits a remote record one field at a time with immediate local feedback.

    Each update is written to the local copy before the backend call, then
    replaced by the server's version of the record. When the backend rejects
    the write, the whole record is reloaded rather than undone in memory.

    Updates on one instance run one at a time; later calls wait their turn.
    """

    def __init__(
        self,
        store: RecordStore[RecordT],
        *,
        load_error: str = "Failed to load record",
        save_error: str = "Failed to save changes",
    ) -> None:
        super().__init__(store, load_error=load_error)
        self.save_error = save_error
        self._pending = 0
        self._write_lock = asyncio.Lock()

    @property
    def saving(self) -> bool:
        """True while any update is in flight or waiting for its turn."""
        return self._pending > 0

    async def update_field(self, name: str, value: Any) -> None:
        """Optimistically set one field and persist it.

        On success `data` becomes exactly what the backend returned. On
        failure `error` is set and the record is reloaded from the backend.
        """
        if not self.record_id:
            logger.warning("Ignoring update of %r: no record loaded", name)
            return

        self._pending += 1
        try:
            async with self._write_lock:
                await self._apply(self.record_id, name, value)
        finally:
            self._pending -= 1

    async def _apply(self, record_id: int, name: str, value: Any) -> None:
        self.error = None
        if self.data is not None:
            self.data = self.data.model_copy(update={name: value})

        try:
            self.data = await self.store.patch_record(record_id, {name: value})
        except CampusConnectError as e:
            logger.error("Error updating %s on record %s: %s", name, record_id, e)
            message = error_message(e, self.save_error)
            await self.refetch()
            # The reload's own failure must not mask why the save failed.
            self.error = message
