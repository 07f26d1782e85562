from decimal import Decimal
from typing import Optional

from django.db.models import Count, Q, Sum

from termstake.blockchain.hashes import UNCONFIRMED_PREFIX
from termstake.staking.helpers import store_errors
from termstake.staking.models import Staking

ZERO = Decimal('0')


@store_errors
def get_staking_stats(wallet_address: Optional[str] = None) -> dict:
    stakings = Staking.objects.all()
    if wallet_address:
        stakings = stakings.filter(wallet_address=wallet_address)
    active = Q(status=Staking.STATUS.active)
    completed = Q(status=Staking.STATUS.completed)
    stats = stakings.aggregate(
        total_count=Count('id'),
        active_count=Count('id', filter=active),
        total_active_amount=Sum('staked_amount', filter=active),
        total_earned_rewards=Sum('actual_reward', filter=completed),
        unconfirmed_payout_count=Count('id', filter=Q(return_transaction_hash__startswith=UNCONFIRMED_PREFIX)),
    )
    return {
        'total_count': stats['total_count'],
        'active_count': stats['active_count'],
        'total_active_amount': stats['total_active_amount'] or ZERO,
        'total_earned_rewards': stats['total_earned_rewards'] or ZERO,
        'unconfirmed_payout_count': stats['unconfirmed_payout_count'],
    }


@store_errors
def get_user_stats(wallet_address: str) -> dict:
    stakings = Staking.objects.filter(wallet_address=wallet_address)
    stats = stakings.aggregate(
        total_count=Count('id'),
        active_count=Count('id', filter=Q(status=Staking.STATUS.active)),
        completed_count=Count('id', filter=Q(status=Staking.STATUS.completed)),
        cancelled_count=Count('id', filter=Q(status=Staking.STATUS.cancelled)),
        total_staked=Sum('staked_amount'),
        total_active_amount=Sum('staked_amount', filter=Q(status=Staking.STATUS.active)),
        total_expected_reward=Sum('expected_reward', filter=Q(status=Staking.STATUS.active)),
        total_earned_rewards=Sum('actual_reward', filter=Q(status=Staking.STATUS.completed)),
    )
    for key in ('total_staked', 'total_active_amount', 'total_expected_reward', 'total_earned_rewards'):
        stats[key] = stats[key] or ZERO
    stats['wallet_address'] = wallet_address
    return stats
