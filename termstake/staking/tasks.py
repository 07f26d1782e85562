"""Staking Tasks"""
from celery import shared_task

from termstake.base.parsers import parse_int
from termstake.staking.service.lifecycle import settle_expired_staking, sweep_expired
from termstake.staking.service.reconciliation import reconcile


@shared_task(name='staking.sweep_expired')
def sweep_expired_task() -> dict:
    return sweep_expired().as_dict()


@shared_task(name='staking.reconcile')
def reconcile_task() -> dict:
    return reconcile().as_dict()


@shared_task(name='staking.settle_single')
def settle_single_task(staking_id: int) -> dict:
    outcome = settle_expired_staking(parse_int(staking_id, required=True))
    return {
        'staking_id': outcome.staking_id,
        'outcome': outcome.outcome,
        'message': outcome.message,
        'amount': str(outcome.amount) if outcome.amount is not None else None,
        'tx_hash': str(outcome.tx_hash) if outcome.tx_hash else None,
    }
