"""
Fee Calculator
==============

Splits a gross payout into platform fee, processing fee and the net
amount the creator receives.

Defaults come from ``config.platform`` (4% platform, 3% processing) and
can be overridden at runtime through ``PlatformSetting`` rows in the
``fees`` category, stored as percentages ("5" means 5%). A company's
``custom_platform_fee_percentage`` (stored as a fraction, 0.05) wins over
the platform default.

All amounts are ``Decimal`` rounded half-up to cents and always satisfy
``platform_fee + processing_fee + net == gross``.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from django.core.cache import cache

from affiliatexchange.config import config

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")
FEE_SETTINGS_CACHE_KEY = "payments:fee_settings"
PLATFORM_FEE_KEY = "platform_fee_percentage"
PROCESSING_FEE_KEY = "stripe_processing_fee_percentage"
MAX_PLATFORM_FEE = Decimal("0.5")


@dataclass(frozen=True)
class FeeBreakdown:
    gross_amount: Decimal
    platform_fee_amount: Decimal
    processing_fee_amount: Decimal
    net_amount: Decimal
    platform_fee_percentage: Decimal
    processing_fee_percentage: Decimal
    is_custom_fee: bool = False

    def as_dict(self) -> dict:
        return {
            "gross_amount": str(self.gross_amount),
            "platform_fee_amount": str(self.platform_fee_amount),
            "processing_fee_amount": str(self.processing_fee_amount),
            "net_amount": str(self.net_amount),
            "platform_fee_percentage": format_fee_percentage(self.platform_fee_percentage),
            "processing_fee_percentage": format_fee_percentage(self.processing_fee_percentage),
            "is_custom_fee": self.is_custom_fee,
        }


def to_cents(value) -> Decimal:
    return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)


# ── Platform-wide settings ──────────────────────────────────────────

def get_fee_settings() -> dict:
    """
    Current ``{"platform_fee": Decimal, "processing_fee": Decimal}``
    as fractions, cached for ``config.platform.fee_cache_seconds``.
    """
    cached = cache.get(FEE_SETTINGS_CACHE_KEY)
    if cached is not None:
        return cached

    from administration.repositories import platform_setting_repo

    values = platform_setting_repo.values_for_category("fees")
    settings = {
        "platform_fee": _percent_setting(values.get(PLATFORM_FEE_KEY), config.platform.default_platform_fee),
        "processing_fee": _percent_setting(values.get(PROCESSING_FEE_KEY), config.platform.default_processing_fee),
    }
    cache.set(FEE_SETTINGS_CACHE_KEY, settings, config.platform.fee_cache_seconds)
    return settings


def clear_fee_settings_cache() -> None:
    cache.delete(FEE_SETTINGS_CACHE_KEY)


def _percent_setting(raw, default: Decimal) -> Decimal:
    if raw in (None, ""):
        return default
    try:
        return Decimal(str(raw)) / 100
    except InvalidOperation:
        logger.warning("Ignoring malformed fee setting %r", raw)
        return default


def get_company_platform_fee(company) -> tuple:
    """Return ``(fraction, is_custom)`` for ``company`` (may be None)."""
    custom = getattr(company, "custom_platform_fee_percentage", None)
    if custom is not None:
        return Decimal(custom), True
    return get_fee_settings()["platform_fee"], False


# ── Calculation ─────────────────────────────────────────────────────

def calculate_fees_with_percentage(gross, platform_fee, processing_fee=None, is_custom=False) -> FeeBreakdown:
    gross = to_cents(gross)
    if processing_fee is None:
        processing_fee = get_fee_settings()["processing_fee"]
    platform_amount = to_cents(gross * Decimal(platform_fee))
    processing_amount = to_cents(gross * Decimal(processing_fee))
    return FeeBreakdown(
        gross_amount=gross,
        platform_fee_amount=platform_amount,
        processing_fee_amount=processing_amount,
        net_amount=gross - platform_amount - processing_amount,
        platform_fee_percentage=Decimal(platform_fee),
        processing_fee_percentage=Decimal(processing_fee),
        is_custom_fee=is_custom,
    )


def calculate_fees(gross, company=None) -> FeeBreakdown:
    """Fee breakdown for a payout from ``company`` using current settings."""
    platform_fee, is_custom = get_company_platform_fee(company)
    return calculate_fees_with_percentage(gross, platform_fee, is_custom=is_custom)


# ── Formatting helpers ──────────────────────────────────────────────

def format_fee_percentage(fraction) -> str:
    """0.04 → "4%", 0.075 → "7.5%"."""
    percent = (Decimal(str(fraction)) * 100).normalize()
    if percent == percent.to_integral():
        percent = percent.quantize(Decimal(1))
    return f"{percent}%"


def parse_fee_percentage(value):
    """"4%" or "4" → Decimal("0.04"); None when unparseable or outside 0..100."""
    if value is None:
        return None
    text = str(value).strip().rstrip("%").strip()
    try:
        percent = Decimal(text)
    except InvalidOperation:
        return None
    if percent < 0 or percent > 100:
        return None
    return percent / 100


def is_valid_platform_fee_percentage(fraction) -> bool:
    try:
        fraction = Decimal(str(fraction))
    except InvalidOperation:
        return False
    return Decimal("0") <= fraction <= MAX_PLATFORM_FEE
