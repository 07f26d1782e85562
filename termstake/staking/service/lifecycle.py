"""Staking lifecycle: creation, maturity settlement and early cancellation

No database transaction or row lock is ever held across a settlement call.
Every status change goes through ``Staking.transition``, a conditional update
on the status read just before the payout, so a record is paid out at most
once even when sweeps, cancellations and reconciliation overlap.
"""
import datetime
import time
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from django.conf import settings
from django.db import DatabaseError
from django.utils import timezone

from termstake.base.logging import logger, report_event, report_exception
from termstake.base.metrics import metric_incr
from termstake.blockchain import hashes
from termstake.blockchain.settlement import SettlementClient
from termstake.staking import errors
from termstake.staking.helpers import store_errors
from termstake.staking.metrics import Metrics
from termstake.staking.models import Staking
from termstake.staking.rewards import PRECISION, compute_reward, to_decimal
from termstake.staking.service.rates import get_rate

MAX_PAGE_SIZE = 100

OUTCOME_COMPLETED = 'completed'
OUTCOME_FAILED = 'failed'
OUTCOME_SKIPPED = 'skipped'
OUTCOME_ORPHANED = 'orphaned'
OUTCOMES = (OUTCOME_COMPLETED, OUTCOME_FAILED, OUTCOME_SKIPPED, OUTCOME_ORPHANED)


@dataclass
class SettlementOutcome:
    staking_id: int
    outcome: str
    message: str = ''
    amount: Optional[Decimal] = None
    tx_hash: Optional[hashes.AnyHash] = None


@dataclass
class SweepReport:
    outcomes: List[SettlementOutcome] = field(default_factory=list)

    def add(self, outcome: SettlementOutcome) -> None:
        self.outcomes.append(outcome)

    def count(self, outcome: str) -> int:
        return sum(1 for o in self.outcomes if o.outcome == outcome)

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def completed(self) -> int:
        return self.count(OUTCOME_COMPLETED)

    @property
    def failed(self) -> int:
        return self.count(OUTCOME_FAILED)

    @property
    def skipped(self) -> int:
        return self.count(OUTCOME_SKIPPED)

    @property
    def orphaned(self) -> int:
        return self.count(OUTCOME_ORPHANED)

    def as_dict(self) -> dict:
        return {
            'total': self.total,
            **{outcome: self.count(outcome) for outcome in OUTCOMES},
            'results': [
                {
                    'staking_id': o.staking_id,
                    'outcome': o.outcome,
                    'message': o.message,
                    'amount': o.amount,
                    'tx_hash': str(o.tx_hash) if o.tx_hash else None,
                }
                for o in self.outcomes
            ],
        }


@dataclass
class CancellationResult:
    staking: Staking
    returned_amount: Decimal
    forfeited_reward: Decimal
    tx_hash: Optional[hashes.AnyHash]
    is_dry_run: bool = False


def _parse_amount(staked_amount) -> Decimal:
    if staked_amount is None or isinstance(staked_amount, bool):
        raise errors.InvalidAmount('Staked amount is required')
    try:
        amount = to_decimal(staked_amount)
    except (InvalidOperation, TypeError, ValueError):
        raise errors.InvalidAmount(f'Invalid staked amount: "{staked_amount}"')
    if not amount.is_finite() or amount <= 0:
        raise errors.InvalidAmount('Staked amount must be greater than zero')
    if amount != amount.quantize(PRECISION):
        raise errors.InvalidAmount('Staked amount supports at most 8 decimal places')
    return amount


def _parse_period(staking_period) -> int:
    if staking_period is None or isinstance(staking_period, bool):
        raise errors.InvalidStakingPeriod('Staking period is required')
    try:
        period = int(str(staking_period).strip())
    except ValueError:
        raise errors.InvalidStakingPeriod(f'Invalid staking period: "{staking_period}"')
    if period <= 0:
        raise errors.InvalidStakingPeriod('Staking period must be a positive number of days')
    return period


def validate_wallet_address(wallet_address) -> str:
    wallet_address = (wallet_address or '').strip() if isinstance(wallet_address, str) else ''
    if len(wallet_address) <= settings.STAKING_MIN_WALLET_ADDRESS_LENGTH:
        raise errors.InvalidWalletAddress('Invalid wallet address')
    return wallet_address


@store_errors
def create_staking(wallet_address, staked_amount, staking_period, transaction_hash=None,
                   now: Optional[datetime.datetime] = None) -> Staking:
    amount = _parse_amount(staked_amount)
    period = _parse_period(staking_period)
    rate = get_rate(period)
    if rate is None:
        raise errors.ConfigurationError(f'No interest rate is configured for {period} days')
    wallet_address = validate_wallet_address(wallet_address)
    transaction_hash = (transaction_hash or '').strip() or None
    if transaction_hash and Staking.objects.filter(transaction_hash=transaction_hash).exists():
        raise errors.DuplicateDepositHash('Deposit transaction is already used by another staking')

    start_date = now or timezone.now()
    staking = Staking.objects.create(
        wallet_address=wallet_address,
        staked_amount=amount,
        staking_period=period,
        interest_rate=rate,
        start_date=start_date,
        end_date=Staking.compute_end_date(start_date, period),
        expected_reward=compute_reward(amount, rate, period),
        transaction_hash=transaction_hash,
        created_at=start_date,
    )
    metric_incr(str(Metrics.STAKING_CREATED), labels=(period,))
    logger.info('Staking #%s created: %s for %s days at %s%%', staking.pk, amount, period, rate)
    return staking


@store_errors
def get_staking(staking_id) -> Staking:
    try:
        return Staking.objects.get(pk=staking_id)
    except (Staking.DoesNotExist, ValueError, TypeError):
        raise errors.NotFound(f'Staking {staking_id} was not found')


@store_errors
def list_stakings_by_wallet(wallet_address) -> List[Staking]:
    wallet_address = validate_wallet_address(wallet_address)
    return list(Staking.objects.filter(wallet_address=wallet_address).order_by('-created_at', '-id'))


@store_errors
def list_stakings(page: int = 1, limit: int = 20, status: Optional[str] = None) -> dict:
    if page < 1:
        raise errors.ValidationError('Page must be at least 1')
    if not 1 <= limit <= MAX_PAGE_SIZE:
        raise errors.ValidationError(f'Limit must be between 1 and {MAX_PAGE_SIZE}')
    stakings = Staking.objects.order_by('-created_at', '-id')
    if status:
        if status not in Staking.STATUS:
            raise errors.ValidationError(f'Unknown status: "{status}"')
        stakings = stakings.filter(status=status)
    total = stakings.count()
    offset = (page - 1) * limit
    return {
        'stakings': list(stakings[offset:offset + limit]),
        'pagination': {
            'page': page,
            'limit': limit,
            'total': total,
            'pages': -(-total // limit),
        },
    }


@store_errors
def find_upcoming_expirations(days: int = 3, now: Optional[datetime.datetime] = None) -> List[Staking]:
    now = now or timezone.now()
    return list(Staking.objects.filter(
        status=Staking.STATUS.active,
        end_date__gt=now,
        end_date__lte=now + datetime.timedelta(days=days),
    ).order_by('end_date', 'id'))


@store_errors
def preview_expired(now: Optional[datetime.datetime] = None) -> List[dict]:
    """What a sweep would pay right now, without contacting the settlement network."""
    now = now or timezone.now()
    preview = []
    for staking in Staking.objects.filter(status=Staking.STATUS.active, end_date__lte=now).order_by('end_date', 'id'):
        reward = compute_reward(staking.staked_amount, staking.interest_rate, staking.staking_period)
        preview.append({
            'staking_id': staking.pk,
            'wallet_address': staking.wallet_address,
            'staked_amount': staking.staked_amount,
            'reward': reward,
            'total': staking.staked_amount + reward,
            'end_date': staking.end_date,
        })
    return preview


def _report_orphaned_payout(staking_id, tx_hash, amount, reason):
    logger.error(
        'Payout of %s for staking #%s was confirmed (%r) but the record could not be settled: %s',
        amount, staking_id, tx_hash, reason,
    )
    report_event(
        'Confirmed staking payout without a settled record',
        level='error',
        staking_id=staking_id,
        tx_hash=str(tx_hash),
        amount=str(amount),
        reason=reason,
    )


def settle_expired_staking(staking_id, client: Optional[SettlementClient] = None,
                           now: Optional[datetime.datetime] = None) -> SettlementOutcome:
    """Pay principal and reward of one matured staking and mark it completed.

    The record is re-read right before the payout, the status write after a
    confirmed payout only succeeds if the record is still active.
    """
    client = client or SettlementClient()
    now = now or timezone.now()
    try:
        staking = Staking.objects.filter(pk=staking_id).first()
    except DatabaseError as e:
        return SettlementOutcome(staking_id, OUTCOME_FAILED, f'Ledger store failure: {e}')
    if staking is None:
        return SettlementOutcome(staking_id, OUTCOME_SKIPPED, 'Staking no longer exists')
    if staking.status != Staking.STATUS.active:
        return SettlementOutcome(staking_id, OUTCOME_SKIPPED, f'Staking is {staking.status}')
    if not staking.is_matured(now):
        return SettlementOutcome(staking_id, OUTCOME_SKIPPED, 'Staking has not matured yet')

    reward = compute_reward(staking.staked_amount, staking.interest_rate, staking.staking_period)
    amount = staking.staked_amount + reward
    try:
        result = client.broadcast_payout(staking.wallet_address, amount)
    except errors.SettlementError as e:
        logger.warning('Payout for staking #%s failed: %s', staking_id, e.message)
        return SettlementOutcome(staking_id, OUTCOME_FAILED, e.message or e.code, amount=amount)
    if not result.confirmed:
        logger.warning('Payout for staking #%s was not confirmed: %s', staking_id, result.error)
        return SettlementOutcome(staking_id, OUTCOME_FAILED, f'Payout not confirmed: {result.error}', amount=amount)

    try:
        settled = Staking.transition(
            staking_id,
            Staking.STATUS.active,
            Staking.STATUS.completed,
            actual_reward=reward,
            return_transaction_hash=hashes.to_db(result.tx_hash),
        )
    except DatabaseError as e:
        _report_orphaned_payout(staking_id, result.tx_hash, amount, f'store failure: {e}')
        return SettlementOutcome(staking_id, OUTCOME_ORPHANED, str(e), amount=amount, tx_hash=result.tx_hash)
    if not settled:
        _report_orphaned_payout(staking_id, result.tx_hash, amount, 'status changed during payout')
        return SettlementOutcome(
            staking_id, OUTCOME_ORPHANED, 'Status changed during payout', amount=amount, tx_hash=result.tx_hash,
        )

    logger.info('Staking #%s completed, paid %s (%r)', staking_id, amount, result.tx_hash)
    return SettlementOutcome(staking_id, OUTCOME_COMPLETED, amount=amount, tx_hash=result.tx_hash)


@store_errors
def sweep_expired(client: Optional[SettlementClient] = None, now: Optional[datetime.datetime] = None,
                  delay: Optional[float] = None) -> SweepReport:
    """Settle every matured active staking, one at a time.

    Per record failures are collected in the report and never abort the
    sweep, failed records stay active and are picked up by the next run.
    """
    client = client or SettlementClient()
    now = now or timezone.now()
    delay = settings.STAKING_SWEEP_DELAY if delay is None else delay
    report = SweepReport()

    staking_ids = list(
        Staking.objects.filter(status=Staking.STATUS.active, end_date__lte=now)
        .order_by('end_date', 'id')
        .values_list('id', flat=True)
    )
    for i, staking_id in enumerate(staking_ids):
        if i and delay:
            time.sleep(delay)
        try:
            outcome = settle_expired_staking(staking_id, client, now)
        except Exception as e:
            report_exception(staking_id=staking_id)
            outcome = SettlementOutcome(staking_id, OUTCOME_FAILED, f'Unexpected error: {e}')
        report.add(outcome)
        metric_incr(str(Metrics.SWEEP_OUTCOME), labels=(outcome.outcome,))

    if report.total:
        logger.info(
            'Expired stakings sweep: %s total, %s completed, %s failed, %s skipped, %s orphaned',
            report.total, report.completed, report.failed, report.skipped, report.orphaned,
        )
    return report


@store_errors
def cancel_staking(staking_id, wallet_address, client: Optional[SettlementClient] = None) -> CancellationResult:
    """Return the principal of an active staking to its owner, the reward is forfeited.

    Raises SettlementError when the payout fails, the staking then stays active.
    """
    staking = get_staking(staking_id)
    if staking.wallet_address != (wallet_address or '').strip():
        raise errors.NotOwner('Only the owner can cancel this staking')
    if staking.status != Staking.STATUS.active:
        raise errors.InvalidState(f'Staking is {staking.status} and cannot be cancelled')

    client = client or SettlementClient()
    amount = staking.staked_amount
    result = client.broadcast_payout(staking.wallet_address, amount)
    if not result.confirmed:
        raise errors.PayoutNotConfirmed(f'Payout not confirmed: {result.error}')

    try:
        cancelled = Staking.transition(
            staking.pk,
            Staking.STATUS.active,
            Staking.STATUS.cancelled,
            actual_reward=Decimal('0'),
            return_transaction_hash=hashes.to_db(result.tx_hash),
        )
    except DatabaseError as e:
        _report_orphaned_payout(staking.pk, result.tx_hash, amount, f'store failure: {e}')
        raise errors.StoreError(f'Ledger store failure: {e}') from e
    if not cancelled:
        _report_orphaned_payout(staking.pk, result.tx_hash, amount, 'status changed during cancellation payout')
        raise errors.InvalidState('Staking changed status while it was being cancelled')

    metric_incr(str(Metrics.STAKING_CANCELLED))
    logger.info('Staking #%s cancelled, returned %s (%r)', staking.pk, amount, result.tx_hash)
    expected_reward = staking.expected_reward
    staking.refresh_from_db()
    return CancellationResult(
        staking=staking,
        returned_amount=amount,
        forfeited_reward=expected_reward,
        tx_hash=result.tx_hash,
        is_dry_run=result.is_dry_run,
    )
