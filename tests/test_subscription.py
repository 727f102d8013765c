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

from datetime import datetime, timedelta, timezone

import pytest
from pytest_httpx import HTTPXMock

from campus_connect.client import ApiClient
from campus_connect.config import Settings
from campus_connect.exceptions import TransportError
from campus_connect.models import BannerKind, SubscriptionStatus
from campus_connect.subscription import (
    days_until,
    fetch_current_subscription,
    select_banner,
)

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def epoch(moment: datetime) -> int:
    return int(moment.timestamp())


def trialing(days_left: float) -> SubscriptionStatus:
    return SubscriptionStatus(
        status="trialing",
        plan_tier="premium",
        trial_end=epoch(NOW + timedelta(days=days_left)),
    )


@pytest.mark.unit
class TestDaysUntil:
    def test_rounds_partial_days_up(self):
        assert days_until(epoch(NOW + timedelta(days=2, hours=1)), now=NOW) == 3

    def test_past_timestamps_clamp_to_zero(self):
        assert days_until(epoch(NOW - timedelta(days=4)), now=NOW) == 0


@pytest.mark.unit
class TestSelectBanner:
    def test_active_subscription_has_no_banner(self):
        subscription = SubscriptionStatus(status="active", plan_tier="premium")
        assert select_banner(subscription, now=NOW) is None

    def test_free_tier_has_no_banner(self):
        subscription = SubscriptionStatus(status="trialing", plan_tier="free")
        assert select_banner(subscription, now=NOW) is None

    def test_no_subscription_has_no_banner(self):
        subscription = SubscriptionStatus(status="none", plan_tier="premium")
        assert select_banner(subscription, now=NOW) is None

    def test_canceling_subscription_names_the_end_date(self):
        subscription = SubscriptionStatus(
            status="active",
            plan_tier="premium",
            cancel_at_period_end=True,
            current_period_end=epoch(datetime(2026, 3, 31, tzinfo=timezone.utc)),
        )

        banner = select_banner(subscription, now=NOW)

        assert banner.kind == BannerKind.SUBSCRIPTION_ENDING
        assert "March 31, 2026" in banner.message
        assert banner.action == "Reactivate"

    def test_canceling_without_period_end_says_soon(self):
        subscription = SubscriptionStatus(
            status="active", plan_tier="premium", cancel_at_period_end=True
        )

        banner = select_banner(subscription, now=NOW)

        assert "end on soon" in banner.message

    def test_trial_banner_hidden_early_in_trial(self):
        assert select_banner(trialing(10), now=NOW) is None
        assert select_banner(trialing(4), now=NOW) is None

    def test_trial_ending_quotes_institution_charge(self):
        banner = select_banner(trialing(2.5), now=NOW)

        assert banner.kind == BannerKind.TRIAL_ENDING
        assert banner.title == "Trial Ending in 3 Days"
        assert "$39.99" in banner.message

    def test_trial_ending_quotes_scholarship_charge(self):
        banner = select_banner(trialing(1), entity_type="scholarship", now=NOW)

        assert banner.title == "Trial Ending in 1 Day"
        assert "$19.99" in banner.message

    def test_elapsed_trial_shows_expired_banner(self):
        banner = select_banner(trialing(-1), now=NOW)

        assert banner.kind == BannerKind.TRIAL_EXPIRED
        assert banner.title == "Trial Expired"

    def test_trial_without_end_date_has_no_banner(self):
        subscription = SubscriptionStatus(status="trialing", plan_tier="premium")
        assert select_banner(subscription, now=NOW) is None

    def test_past_due_shows_payment_failed(self):
        subscription = SubscriptionStatus(status="past_due", plan_tier="premium")

        banner = select_banner(subscription, now=NOW)

        assert banner.kind == BannerKind.PAYMENT_FAILED
        assert banner.action == "Update Payment"


@pytest.mark.asyncio
async def test_fetch_current_subscription(httpx_mock: HTTPXMock):
    httpx_mock.add_response(
        method="GET",
        url="http://api.test/api/v1/admin/subscriptions/current",
        json={"status": "past_due", "plan_tier": "premium"},
    )

    async with ApiClient(Settings(api_url="http://api.test")) as api:
        subscription = await fetch_current_subscription(api)

    assert subscription.status == "past_due"


@pytest.mark.asyncio
async def test_fetch_current_subscription_rejects_unknown_status(httpx_mock: HTTPXMock):
    httpx_mock.add_response(
        method="GET",
        url="http://api.test/api/v1/admin/subscriptions/current",
        json={"status": "paused", "plan_tier": "premium"},
    )

    async with ApiClient(Settings(api_url="http://api.test")) as api:
        with pytest.raises(TransportError):
            await fetch_current_subscription(api)
