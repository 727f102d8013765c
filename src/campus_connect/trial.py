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
"""Trial window arithmetic for newly registered admin accounts."""

import logging
import math
from datetime import datetime, timedelta, timezone

from .config import settings
from .exceptions import ParseError
from .models import TrialStatus, WarningLevel

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 60 * 60 * 24

# (upper bound on days remaining, level), most urgent first
_WARNING_THRESHOLDS = (
    (1, WarningLevel.URGENT),
    (3, WarningLevel.WARNING),
    (7, WarningLevel.NORMAL),
)


def parse_timestamp(value: str | datetime) -> datetime:
    """Parse an ISO-8601 timestamp into an aware datetime.

    Naive values are taken to be UTC, which is how the backend stores them.

    Raises:
        ParseError: If the value is not a valid ISO-8601 timestamp.

    """
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(value.strip())
        except (AttributeError, ValueError) as e:
            raise ParseError(f"Invalid creation timestamp: {value!r}") from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _warning_level(days: int) -> WarningLevel:
    for upper_bound, level in _WARNING_THRESHOLDS:
        if days <= upper_bound:
            return level
    return WarningLevel.NONE


def calculate_trial_status(
    created_at: str | datetime,
    now: datetime | None = None,
    trial_days: int | None = None,
) -> TrialStatus:
    """Compute the trial status of an account created at `created_at`.

    The end date is found by adding whole calendar days on the creation
    timestamp's own wall clock, so a daylight-saving change inside the window
    does not shift the boundary. Days remaining are rounded up: half a day
    left still reads as one day.

    Args:
        created_at: ISO-8601 string or datetime of account creation.
        now: Reference time; defaults to the current UTC time.
        trial_days: Length of the window; defaults to the configured value.

    Returns:
        A freshly computed TrialStatus.

    Raises:
        ParseError: If `created_at` cannot be parsed or is too close to the
            end of the calendar to add the trial length.

    """
    created = parse_timestamp(created_at)
    now = parse_timestamp(now) if now is not None else datetime.now(timezone.utc)
    if trial_days is None:
        trial_days = settings.trial_days

    try:
        trial_end_date = created + timedelta(days=trial_days)
        remaining = trial_end_date.astimezone(timezone.utc) - now.astimezone(timezone.utc)
    except OverflowError as e:
        raise ParseError(f"Creation timestamp out of range: {created_at!r}") from e
    days = math.ceil(remaining.total_seconds() / SECONDS_PER_DAY)

    return TrialStatus(
        days_remaining=max(0, days),
        trial_end_date=trial_end_date,
        has_expired=days <= 0,
        warning_level=_warning_level(days),
    )


def format_trial_message(status: TrialStatus) -> str:
    """Render a short human-readable summary of a trial status."""
    if status.has_expired:
        return "Trial Expired"

    days = status.days_remaining
    if days == 0:
        return "Trial ends today!"
    if days == 1:
        return "Trial: 1 day remaining"
    return f"Trial: {days} days remaining"


def guard_trial(
    created_at: str | datetime | None, now: datetime | None = None
) -> TrialStatus | None:
    """Check the logged-in user's trial and log when it has run out.

    Returns None when the user's creation timestamp is not known yet.
    """
    if not created_at:
        return None

    status = calculate_trial_status(created_at, now=now)
    if status.has_expired:
        logger.warning("Trial has expired (ended %s)", status.trial_end_date.isoformat())
    return status
