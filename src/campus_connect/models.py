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
"""Defines the Pydantic data models for the application."""

from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field


class WarningLevel(str, Enum):
    NONE = "none"
    NORMAL = "normal"
    WARNING = "warning"
    URGENT = "urgent"


class TrialStatus(BaseModel):
    """Represents how much of the free trial window is left.

    Derived on every call from the account creation timestamp; never persisted.
    """

    days_remaining: int = Field(
        ..., ge=0, description="Whole days left in the trial, rounded up."
    )
    trial_end_date: datetime = Field(
        ..., description="Creation timestamp plus the trial length in calendar days."
    )
    has_expired: bool = Field(..., description="True once the trial window has elapsed.")
    warning_level: WarningLevel = Field(
        ..., description="How urgently the user should be reminded to subscribe."
    )

    @computed_field
    @property
    def is_in_trial(self) -> bool:
        """Whether premium features are still unlocked by the trial."""
        return not self.has_expired


class Institution(BaseModel):
    """A college profile as returned by the complete-institution endpoint.

    Only the identifying fields are declared; tuition, admissions and other
    IPEDS columns are kept as extra attributes so that a patch response is
    stored exactly as the server sent it.
    """

    model_config = ConfigDict(extra="allow")

    id: int
    ipeds_id: int | None = None
    name: str
    city: str | None = None
    state: str | None = None
    website: str | None = None
    student_faculty_ratio: float | None = None
    size_category: str | None = None
    primary_image_url: str | None = None


class Scholarship(BaseModel):
    """A scholarship listing editable from the scholarship dashboard."""

    model_config = ConfigDict(extra="allow")

    id: int
    title: str
    organization: str | None = None
    scholarship_type: str | None = None
    status: str | None = None
    amount_min: float | None = None
    amount_max: float | None = None
    is_renewable: bool = False
    deadline: str | None = None
    description: str | None = None
    website_url: str | None = None
    min_gpa: float | None = None
    verified: bool = False


class QualityMetrics(BaseModel):
    """Data completeness report for one institution."""

    model_config = ConfigDict(extra="allow")

    institution_id: int
    institution_name: str
    completeness_score: float
    data_source: str | None = None
    data_last_updated: str | None = None
    missing_fields: list[str] = Field(default_factory=list)
    verified_fields: list[str] = Field(default_factory=list)
    verification_count: int = 0
    has_website: bool = False
    has_tuition_data: bool = False
    has_room_board: bool = False
    has_admissions_data: bool = False


class SubscriptionStatus(BaseModel):
    """The account's current billing state, with timestamps in epoch seconds."""

    status: Literal["none", "trialing", "active", "past_due", "canceled"]
    plan_tier: Literal["free", "premium"]
    current_period_end: int | None = None
    trial_end: int | None = None
    cancel_at_period_end: bool = False


class BannerKind(str, Enum):
    SUBSCRIPTION_ENDING = "subscription_ending"
    TRIAL_ENDING = "trial_ending"
    TRIAL_EXPIRED = "trial_expired"
    PAYMENT_FAILED = "payment_failed"


class Banner(BaseModel):
    """A billing notice to display at the top of the admin dashboard."""

    kind: BannerKind
    title: str
    message: str
    action: str
