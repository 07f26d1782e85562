from decimal import Decimal, InvalidOperation
from typing import Dict, List, Optional

from django.conf import settings
from django.db import transaction
from django.db.models import Avg, Count, Max, Min

from termstake.base.logging import logger
from termstake.staking import errors
from termstake.staking.helpers import store_errors
from termstake.staking.models import AdminCredential, InterestRate
from termstake.staking.rewards import to_decimal

# InterestRate.rate column bounds
RATE_STEP = Decimal('0.0001')
MAX_RATE = Decimal('1000000')

PERIOD_LABELS = {
    30: '1 month',
    90: '3 months',
    180: '6 months',
    365: '1 year',
}


def get_period_label(period: int) -> str:
    return PERIOD_LABELS.get(period, f'{period} days')


@store_errors
def get_all_rates() -> List[InterestRate]:
    return list(InterestRate.objects.order_by('period'))


@store_errors
def get_rate(period: int) -> Optional[Decimal]:
    return InterestRate.objects.filter(period=period).values_list('rate', flat=True).first()


def _normalize_rate_table(new_rates: Dict) -> Dict[int, Decimal]:
    if not isinstance(new_rates, dict) or not new_rates:
        raise errors.InvalidRateTable('Rate table must be a non-empty mapping of period to rate')
    normalized = {}
    for period, rate in new_rates.items():
        try:
            period = int(str(period).strip())
        except ValueError:
            raise errors.InvalidRateTable(f'Invalid period: "{period}"')
        if period <= 0:
            raise errors.InvalidRateTable(f'Period must be positive: {period}')
        if rate is None or isinstance(rate, bool):
            raise errors.InvalidRateTable(f'Rate for {period} days must be a number')
        try:
            rate = to_decimal(rate)
        except (InvalidOperation, TypeError, ValueError):
            raise errors.InvalidRateTable(f'Rate for {period} days must be a number')
        if not rate.is_finite() or rate < 0:
            raise errors.InvalidRateTable(f'Rate for {period} days must be a non-negative number')
        if rate >= MAX_RATE or rate != rate.quantize(RATE_STEP):
            raise errors.InvalidRateTable(
                f'Rate for {period} days must be below {MAX_RATE} with at most 4 decimal places',
            )
        normalized[period] = rate
    missing = [p for p in settings.STAKING_MANDATORY_PERIODS if p not in normalized]
    if missing:
        raise errors.InvalidRateTable(f'Missing rates for periods: {", ".join(map(str, missing))}')
    return normalized


@store_errors
def replace_all_rates(new_rates: Dict) -> List[InterestRate]:
    """Replace the whole rate table, periods absent from ``new_rates`` are removed.

    Existing stakings keep the rate they snapshotted at creation.
    """
    normalized = _normalize_rate_table(new_rates)
    with transaction.atomic():
        InterestRate.objects.exclude(period__in=normalized.keys()).delete()
        for period, rate in normalized.items():
            InterestRate.objects.update_or_create(period=period, defaults={'rate': rate})
    logger.info('Interest rate table replaced: %s', {p: str(r) for p, r in normalized.items()})
    return get_all_rates()


@store_errors
def get_rate_stats() -> dict:
    return InterestRate.objects.aggregate(
        count=Count('id'),
        min_rate=Min('rate'),
        max_rate=Max('rate'),
        avg_rate=Avg('rate'),
    )


@store_errors
def authenticate_admin(password) -> None:
    if not AdminCredential.authenticate(password):
        logger.warning('Admin authentication failed')
        raise errors.AdminAuthenticationFailed('Invalid admin password')


@store_errors
def change_admin_password(current_password, new_password) -> None:
    authenticate_admin(current_password)
    if not new_password or len(new_password) < settings.STAKING_MIN_ADMIN_PASSWORD_LENGTH:
        raise errors.ValidationError(
            f'New password must be at least {settings.STAKING_MIN_ADMIN_PASSWORD_LENGTH} characters',
        )
    AdminCredential.set_password(new_password)
    logger.info('Admin password changed')


@store_errors
def get_admin_status() -> dict:
    return AdminCredential.get_status()
