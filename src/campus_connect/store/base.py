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
"""Defines the abstract base class for record stores."""

import abc
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

RecordT = TypeVar("RecordT", bound=BaseModel)


class RecordStore(abc.ABC, Generic[RecordT]):
    """Abstract Base Class for the backend that owns editable records.

    The editor only ever needs to read a whole record and to patch part of
    one. Implementations must raise the errors from
    `campus_connect.exceptions` so that callers can turn them into state.
    """

    @abc.abstractmethod
    async def fetch_record(self, record_id: int) -> RecordT:
        """Fetch the full record.

        Raises:
            NotFoundError: If no record has this identifier.
            TransportError: If the call cannot complete.

        """
        raise NotImplementedError

    @abc.abstractmethod
    async def patch_record(self, record_id: int, fields: dict[str, Any]) -> RecordT:
        """Apply a partial update and return the full updated record.

        Args:
            record_id: Identifier of the record to update.
            fields: Only the fields being changed.

        Raises:
            ValidationError: If the backend rejects a value.
            TransportError: If the call cannot complete.

        """
        raise NotImplementedError
