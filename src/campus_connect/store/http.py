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
"""Provides record stores backed by the CampusConnect REST API."""

from typing import Any

import pydantic

from ..client import ApiClient
from ..exceptions import TransportError
from ..models import Institution, QualityMetrics, Scholarship
from .base import RecordStore, RecordT


class HttpRecordStore(RecordStore[RecordT]):
    """A record store that reads and patches records over HTTP.

    Paths are templates with a ``{record_id}`` placeholder, relative to the
    versioned API base URL.
    """

    def __init__(
        self,
        api: ApiClient,
        model: type[RecordT],
        fetch_path: str,
        patch_path: str | None = None,
    ) -> None:
        self.api = api
        self.model = model
        self.fetch_path = fetch_path
        self.patch_path = patch_path

    def _parse(self, body: Any) -> RecordT:
        try:
            return self.model.model_validate(body)
        except pydantic.ValidationError as e:
            raise TransportError(
                f"Unexpected {self.model.__name__} payload from server"
            ) from e

    async def fetch_record(self, record_id: int) -> RecordT:
        body = await self.api.get(self.fetch_path.format(record_id=record_id))
        return self._parse(body)

    async def patch_record(self, record_id: int, fields: dict[str, Any]) -> RecordT:
        if self.patch_path is None:
            raise TransportError(f"{self.model.__name__} records are read-only")
        body = await self.api.patch(self.patch_path.format(record_id=record_id), fields)
        return self._parse(body)


def institution_store(api: ApiClient) -> HttpRecordStore[Institution]:
    """Store for the admin institution profile (tuition, admissions, basics)."""
    return HttpRecordStore(
        api,
        Institution,
        fetch_path="/institutions/complete/{record_id}",
        patch_path="/admin/institutions/{record_id}/ipeds-data",
    )


def scholarship_store(api: ApiClient) -> HttpRecordStore[Scholarship]:
    return HttpRecordStore(
        api,
        Scholarship,
        fetch_path="/scholarships/{record_id}",
        patch_path="/admin/scholarships/{record_id}",
    )


def quality_store(api: ApiClient) -> HttpRecordStore[QualityMetrics]:
    return HttpRecordStore(
        api,
        QualityMetrics,
        fetch_path="/admin/institution-data/{record_id}/quality",
    )
