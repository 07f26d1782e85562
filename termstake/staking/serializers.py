from typing import Optional

from django.utils import timezone

from termstake.base.serializers import register_serializer
from termstake.blockchain.hashes import ConfirmedHash, UnconfirmedHash
from termstake.staking.models import InterestRate, Staking
from termstake.staking.rewards import analyze_progress
from termstake.staking.service.lifecycle import CancellationResult, SweepReport
from termstake.staking.service.rates import get_period_label
from termstake.staking.service.reconciliation import ReconciliationReport


@register_serializer(model=Staking)
def serialize_staking(staking: Staking, opts: Optional[dict] = None):
    opts = opts or {}
    return_hash = staking.return_hash
    data = {
        'id': staking.id,
        'wallet_address': staking.wallet_address,
        'staked_amount': staking.staked_amount,
        'staking_period': staking.staking_period,
        'interest_rate': staking.interest_rate,
        'start_date': staking.start_date,
        'end_date': staking.end_date,
        'expected_reward': staking.expected_reward,
        'actual_reward': staking.actual_reward,
        'transaction_hash': staking.transaction_hash,
        'return_transaction_hash': return_hash,
        'return_transaction_confirmed': return_hash.confirmed if return_hash else None,
        'status': staking.status,
        'created_at': staking.created_at,
        'updated_at': staking.updated_at,
    }
    if opts.get('level', 1) >= 2 and staking.status == Staking.STATUS.active:
        data['progress'] = analyze_progress(staking.start_date, staking.end_date, timezone.now())
    return data


@register_serializer(model=InterestRate)
def serialize_interest_rate(interest_rate: InterestRate, opts: Optional[dict] = None):
    return {
        'period': interest_rate.period,
        'rate': interest_rate.rate,
        'label': get_period_label(interest_rate.period),
        'updated_at': interest_rate.updated_at,
    }


@register_serializer(model=ConfirmedHash)
def serialize_confirmed_hash(tx_hash: ConfirmedHash, opts: Optional[dict] = None):
    return tx_hash.value


@register_serializer(model=UnconfirmedHash)
def serialize_unconfirmed_hash(tx_hash: UnconfirmedHash, opts: Optional[dict] = None):
    return None


@register_serializer(model=CancellationResult)
def serialize_cancellation_result(result: CancellationResult, opts: Optional[dict] = None):
    return {
        'staking_id': result.staking.id,
        'staking': result.staking,
        'returned_amount': result.returned_amount,
        'forfeited_reward': result.forfeited_reward,
        'transaction_hash': result.tx_hash,
        'is_dry_run': result.is_dry_run,
    }


@register_serializer(model=SweepReport)
def serialize_sweep_report(report: SweepReport, opts: Optional[dict] = None):
    return report.as_dict()


@register_serializer(model=ReconciliationReport)
def serialize_reconciliation_report(report: ReconciliationReport, opts: Optional[dict] = None):
    return report.as_dict()
