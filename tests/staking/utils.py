"""Staking Test Helpers """
import datetime
from decimal import Decimal
from typing import Optional

from django.utils import timezone

from termstake.blockchain.hashes import ConfirmedHash
from termstake.blockchain.settlement import PayoutResult, TransactionQueryResult
from termstake.staking import errors
from termstake.staking.models import Staking
from termstake.staking.rewards import compute_reward

OWNER = 'qcc1owneraddress0001'
OTHER_OWNER = 'qcc1otheraddress0002'


class FakeSettlementClient:
    """In-memory settlement network recording every call it receives."""

    def __init__(self, payout_error=None, confirmed=True, tx_hash=None, known_hashes=(), failing_hashes=(),
                 on_payout=None):
        self.payout_error = payout_error
        self.confirmed = confirmed
        self.tx_hash = tx_hash
        self.known_hashes = set(known_hashes)
        self.failing_hashes = set(failing_hashes)
        self.on_payout = on_payout
        self.payouts = []
        self.queries = []

    def broadcast_payout(self, to_address, amount):
        self.payouts.append((to_address, amount))
        if self.on_payout:
            self.on_payout(to_address, amount)
        if self.payout_error:
            raise self.payout_error
        if not self.confirmed:
            return PayoutResult(confirmed=False, raw_response={'error': 'rejected'}, error='rejected')
        tx_hash = self.tx_hash or ConfirmedHash(f'0xpayout{len(self.payouts)}')
        return PayoutResult(confirmed=True, tx_hash=tx_hash, raw_response={'txhash': str(tx_hash)})

    def query_transaction(self, tx_hash):
        self.queries.append(tx_hash)
        if tx_hash in self.failing_hashes:
            raise errors.SettlementTimeout('Settlement network timed out on get_transaction')
        if tx_hash in self.known_hashes:
            return TransactionQueryResult(found=True, data={'hash': tx_hash}, status_code=200)
        return TransactionQueryResult(found=False, status_code=404)


class StakingTestDataMixin:
    @staticmethod
    def create_staking_record(
        wallet_address: str = OWNER,
        staked_amount: Decimal = Decimal('1000'),
        staking_period: int = 30,
        interest_rate: Decimal = Decimal('3.0'),
        start_date: Optional[datetime.datetime] = None,
        status: str = Staking.STATUS.active,
        transaction_hash: Optional[str] = None,
        created_at: Optional[datetime.datetime] = None,
        **kwargs,
    ) -> Staking:
        start_date = start_date or timezone.now()
        return Staking.objects.create(
            wallet_address=wallet_address,
            staked_amount=staked_amount,
            staking_period=staking_period,
            interest_rate=interest_rate,
            start_date=start_date,
            end_date=start_date + datetime.timedelta(days=staking_period),
            expected_reward=compute_reward(staked_amount, interest_rate, staking_period),
            transaction_hash=transaction_hash,
            status=status,
            created_at=created_at or start_date,
            **kwargs,
        )

    @classmethod
    def create_matured_staking(cls, days_past_end: int = 1, **kwargs) -> Staking:
        period = kwargs.pop('staking_period', 30)
        start_date = timezone.now() - datetime.timedelta(days=period + days_past_end)
        return cls.create_staking_record(staking_period=period, start_date=start_date, **kwargs)
