"""
Tests for the fee calculator

Run with: python -m pytest payments/tests/test_fees.py -v
"""

from decimal import Decimal

import pytest

from administration.models import PlatformSetting
from payments import fees


@pytest.mark.django_db
class TestCalculateFees:

    def test_default_split(self):
        result = fees.calculate_fees(Decimal("100"))
        assert result.platform_fee_amount == Decimal("4.00")
        assert result.processing_fee_amount == Decimal("3.00")
        assert result.net_amount == Decimal("93.00")
        assert result.is_custom_fee is False

    def test_parts_always_sum_to_gross(self):
        for gross in ("33.33", "0.01", "19.99", "1234.56", "7.77"):
            result = fees.calculate_fees(Decimal(gross))
            total = result.platform_fee_amount + result.processing_fee_amount + result.net_amount
            assert total == Decimal(gross)

    def test_rounds_each_fee_to_cents(self):
        result = fees.calculate_fees(Decimal("33.33"))
        assert result.platform_fee_amount == Decimal("1.33")
        assert result.processing_fee_amount == Decimal("1.00")
        assert result.net_amount == Decimal("31.00")

    def test_company_custom_fee_wins(self, company):
        company.custom_platform_fee_percentage = Decimal("0.0200")
        result = fees.calculate_fees(Decimal("100"), company)
        assert result.platform_fee_amount == Decimal("2.00")
        assert result.net_amount == Decimal("95.00")
        assert result.is_custom_fee is True

    def test_platform_setting_overrides_default(self):
        PlatformSetting.objects.create(key=fees.PLATFORM_FEE_KEY, value="5", category="fees")
        fees.clear_fee_settings_cache()
        result = fees.calculate_fees(Decimal("200"))
        assert result.platform_fee_amount == Decimal("10.00")

    def test_settings_are_cached_until_cleared(self):
        assert fees.get_fee_settings()["platform_fee"] == Decimal("0.04")
        PlatformSetting.objects.create(key=fees.PLATFORM_FEE_KEY, value="6", category="fees")
        assert fees.get_fee_settings()["platform_fee"] == Decimal("0.04")
        fees.clear_fee_settings_cache()
        assert fees.get_fee_settings()["platform_fee"] == Decimal("0.06")

    def test_malformed_setting_falls_back_to_default(self):
        PlatformSetting.objects.create(key=fees.PROCESSING_FEE_KEY, value="three", category="fees")
        assert fees.get_fee_settings()["processing_fee"] == Decimal("0.03")


class TestFeeHelpers:

    def test_to_cents_rounds_half_up(self):
        assert fees.to_cents(Decimal("2.675")) == Decimal("2.68")
        assert fees.to_cents(Decimal("2.674")) == Decimal("2.67")

    @pytest.mark.parametrize("fraction, expected", [
        (Decimal("0.04"), "4%"),
        (Decimal("0.075"), "7.5%"),
        (Decimal("0.1"), "10%"),
        (Decimal("0"), "0%"),
    ])
    def test_format_fee_percentage(self, fraction, expected):
        assert fees.format_fee_percentage(fraction) == expected

    @pytest.mark.parametrize("text, expected", [
        ("4%", Decimal("0.04")),
        ("4", Decimal("0.04")),
        (" 7.5 % ", Decimal("0.075")),
        ("abc", None),
        ("150", None),
        ("-1", None),
        (None, None),
    ])
    def test_parse_fee_percentage(self, text, expected):
        assert fees.parse_fee_percentage(text) == expected

    def test_valid_platform_fee_range(self):
        assert fees.is_valid_platform_fee_percentage("0")
        assert fees.is_valid_platform_fee_percentage(Decimal("0.5"))
        assert not fees.is_valid_platform_fee_percentage(Decimal("0.51"))
        assert not fees.is_valid_platform_fee_percentage("-0.01")
        assert not fees.is_valid_platform_fee_percentage("lots")

    def test_breakdown_as_dict(self):
        breakdown = fees.calculate_fees_with_percentage(
            Decimal("50"), Decimal("0.04"), Decimal("0.03"),
        )
        assert breakdown.as_dict() == {
            "gross_amount": "50.00",
            "platform_fee_amount": "2.00",
            "processing_fee_amount": "1.50",
            "net_amount": "46.50",
            "platform_fee_percentage": "4%",
            "processing_fee_percentage": "3%",
            "is_custom_fee": False,
        }
