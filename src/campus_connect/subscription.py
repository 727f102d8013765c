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
"""Chooses the billing banner shown above the admin dashboard."""

import logging
import math
from datetime import datetime, timezone

import pydantic

from .client import ApiClient
from .exceptions import TransportError
from .models import Banner, BannerKind, SubscriptionStatus
from .trial import SECONDS_PER_DAY

logger = logging.getLogger(__name__)

# Trial banners stay hidden until this many days are left.
TRIAL_BANNER_DAYS = 3

CHARGE_AMOUNTS = {"scholarship": "$19.99", "institution": "$39.99"}


def _now_seconds(now: datetime | None) -> float:
    return (now or datetime.now(timezone.utc)).timestamp()


def _format_date(epoch_seconds: int | None) -> str:
    if epoch_seconds is None:
        return "soon"
    moment = datetime.fromtimestamp(epoch_seconds, tz=timezone.utc)
    return f"{moment:%B} {moment.day}, {moment.year}"


def days_until(epoch_seconds: int, now: datetime | None = None) -> int:
    """Whole days until `epoch_seconds`, rounded up and never negative."""
    remaining = epoch_seconds - _now_seconds(now)
    return max(0, math.ceil(remaining / SECONDS_PER_DAY))


def select_banner(
    subscription: SubscriptionStatus,
    entity_type: str = "institution",
    now: datetime | None = None,
) -> Banner | None:
    """Decide which billing banner, if any, the account should see.

    Args:
        subscription: The account's current subscription.
        entity_type: "institution" or "scholarship"; sets the quoted charge.
        now: Reference time; defaults to the current UTC time.

    """
    if subscription.status == "active" and not subscription.cancel_at_period_end:
        return None
    if subscription.status == "none" or subscription.plan_tier == "free":
        return None

    if subscription.cancel_at_period_end:
        end_date = _format_date(subscription.current_period_end)
        return Banner(
            kind=BannerKind.SUBSCRIPTION_ENDING,
            title="Subscription Ending",
            message=(
                f"Your subscription will end on {end_date}. "
                "You'll lose access to premium features."
            ),
            action="Reactivate",
        )

    if subscription.status == "trialing" and subscription.trial_end is not None:
        days = days_until(subscription.trial_end, now)
        if days == 0:
            return Banner(
                kind=BannerKind.TRIAL_EXPIRED,
                title="Trial Expired",
                message="Subscribe now to regain access to all premium features.",
                action="Subscribe Now",
            )
        if days > TRIAL_BANNER_DAYS:
            return None
        charge = CHARGE_AMOUNTS.get(entity_type, CHARGE_AMOUNTS["institution"])
        return Banner(
            kind=BannerKind.TRIAL_ENDING,
            title=f"Trial Ending in {days} Day{'' if days == 1 else 's'}",
            message=(
                f"Your card will be charged {charge} on "
                f"{_format_date(subscription.trial_end)}"
            ),
            action="Manage Subscription",
        )

    if subscription.status == "past_due":
        return Banner(
            kind=BannerKind.PAYMENT_FAILED,
            title="Payment Failed",
            message="Please update your payment method to continue your subscription.",
            action="Update Payment",
        )

    return None


async def fetch_current_subscription(api: ApiClient) -> SubscriptionStatus:
    """Fetch the logged-in account's subscription from the backend."""
    body = await api.get("/admin/subscriptions/current")
    try:
        return SubscriptionStatus.model_validate(body)
    except pydantic.ValidationError as e:
        logger.error("Unexpected subscription payload: %s", e)
        raise TransportError("Unexpected subscription payload from server") from e
