"""Reward arithmetic for fixed-term stakings

All values are Decimal and every public result is rounded exactly once, to
8 fractional digits with half-up rounding.
"""
import datetime
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Optional, Union

from django.conf import settings
from django.utils import timezone

Number = Union[Decimal, int, float, str]

PRECISION = Decimal('1e-8')
DAYS_IN_YEAR = Decimal(365)
HUNDRED = Decimal(100)
DEFAULT_PENALTY_RATE = Decimal('0.5')


def to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def quantize(value: Decimal) -> Decimal:
    return value.quantize(PRECISION, rounding=ROUND_HALF_UP)


def compute_reward(principal: Number, annual_rate_percent: Number, period_days: Number) -> Decimal:
    """Simple interest of ``principal`` for ``period_days`` at an annual percent rate."""
    principal = to_decimal(principal)
    rate = to_decimal(annual_rate_percent)
    days = to_decimal(period_days)
    if principal < 0 or rate < 0 or days < 0:
        raise ValueError('Reward inputs must be non-negative')
    with localcontext() as ctx:
        ctx.prec = 50
        reward = principal * (rate / HUNDRED) * (days / DAYS_IN_YEAR)
    return quantize(reward)


def compute_early_withdrawal_penalty(reward: Number, penalty_rate: Number = DEFAULT_PENALTY_RATE) -> Decimal:
    """Reward kept after forfeiting ``penalty_rate`` of it."""
    reward = to_decimal(reward)
    penalty_rate = to_decimal(penalty_rate)
    if not Decimal(0) <= penalty_rate <= Decimal(1):
        raise ValueError('Penalty rate must be within [0, 1]')
    with localcontext() as ctx:
        ctx.prec = 50
        kept = reward * (1 - penalty_rate)
    return quantize(kept)


def compute_compound_reward(principal: Number, annual_rate_percent: Number, period_days: Number) -> Decimal:
    """Daily compounded reward, informational only."""
    principal = to_decimal(principal)
    rate = to_decimal(annual_rate_percent)
    days = int(to_decimal(period_days))
    if principal < 0 or rate < 0 or days < 0:
        raise ValueError('Reward inputs must be non-negative')
    with localcontext() as ctx:
        ctx.prec = 50
        daily_rate = rate / HUNDRED / DAYS_IN_YEAR
        reward = principal * ((1 + daily_rate) ** days) - principal
    return quantize(reward)


def compute_expected_returns(principal: Number, annual_rate_percent: Number, period_days: Number) -> dict:
    principal = to_decimal(principal)
    reward = compute_reward(principal, annual_rate_percent, period_days)
    roi = quantize(reward / principal * HUNDRED) if principal else Decimal(0)
    return {
        'principal': principal,
        'interest_rate': to_decimal(annual_rate_percent),
        'staking_period': int(to_decimal(period_days)),
        'reward': reward,
        'total': principal + reward,
        'roi': roi,
    }


def analyze_progress(start_date: datetime.datetime, end_date: datetime.datetime,
                     now: Optional[datetime.datetime] = None) -> dict:
    now = now or timezone.now()
    day = datetime.timedelta(days=1)
    total_days = max((end_date - start_date) // day, 0)
    elapsed_days = min(max((now - start_date) // day, 0), total_days)
    remaining = end_date - now
    remaining_days = max(-(-remaining // day), 0)
    progress = (
        (Decimal(elapsed_days) / Decimal(total_days) * HUNDRED).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)
        if total_days else Decimal(100)
    )
    if now >= end_date:
        state = 'expired'
    elif remaining <= datetime.timedelta(days=settings.STAKING_EXPIRING_SOON_DAYS):
        state = 'expiring_soon'
    else:
        state = 'active'
    return {
        'total_days': total_days,
        'elapsed_days': elapsed_days,
        'remaining_days': remaining_days,
        'progress_percent': progress,
        'state': state,
    }
