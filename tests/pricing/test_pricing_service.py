from __future__ import annotations

from datetime import timedelta

import pytest

from src.parking_system.parking_system.core.enums import Role
from src.parking_system.parking_system.core.exceptions import AuthorizationError, ValidationError
from src.parking_system.parking_system.pricing.service import PricingService


def test_default_rate_used_until_configured(pricing_repo):
    pricing_repo.config = None
    svc = PricingService(pricing_repo, default_hourly_rate=250)

    assert svc.get_config().hourly_rate == 250
    assert svc.get_config().is_tiered is False


def test_only_manager_can_change_pricing(pricing_service):
    with pytest.raises(AuthorizationError):
        pricing_service.update_config(current_role=Role.EMPLOYEE, hourly_rate=500)


def test_negative_or_non_numeric_rates_rejected(pricing_service):
    with pytest.raises(ValidationError):
        pricing_service.update_config(current_role=Role.MANAGER, hourly_rate=-1)
    with pytest.raises(ValidationError):
        pricing_service.update_config(current_role=Role.MANAGER, hourly_rate="abc")


def test_blank_optional_rates_mean_flat_pricing(pricing_service, pricing_repo, fixed_now):
    config = pricing_service.update_config(
        current_role=Role.MANAGER,
        hourly_rate="700",
        first_hour_rate="",
        additional_hour_rate=" ",
        daily_max=None,
        updated_by="Manager",
        now=fixed_now,
    )

    assert config.hourly_rate == 700
    assert config.first_hour_rate is None
    assert config.is_tiered is False
    assert pricing_repo.config.updated_at == fixed_now


def test_quote_uses_stored_rate(pricing_service, fixed_now):
    quote = pricing_service.quote(fixed_now, fixed_now + timedelta(hours=1, minutes=1))

    assert quote.duration_hours == 2
    assert quote.fee == 2000
    assert quote.exit_time == fixed_now + timedelta(hours=1, minutes=1)
    assert not quote.is_free


def test_free_parking_quote(pricing_service, fixed_now):
    pricing_service.update_config(current_role=Role.MANAGER, hourly_rate=0)

    quote = pricing_service.quote(fixed_now, fixed_now + timedelta(hours=5))
    assert quote.is_free
    assert quote.duration_hours == 5


def test_tiered_config_changes_fee(pricing_service, fixed_now):
    pricing_service.update_config(
        current_role=Role.MANAGER,
        hourly_rate=1000,
        first_hour_rate=3000,
        additional_hour_rate=500,
    )

    assert pricing_service.fee(fixed_now, fixed_now + timedelta(hours=3)) == 3000 + 2 * 500
