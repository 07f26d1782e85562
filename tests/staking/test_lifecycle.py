"""Staking Lifecycle Tests"""
import datetime
from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest
from django.db import DatabaseError
from django.test import TestCase, override_settings
from django.utils import timezone

from termstake.blockchain.hashes import ConfirmedHash, UnconfirmedHash
from termstake.blockchain.settlement import SettlementClient
from termstake.staking import errors
from termstake.staking.models import Staking
from termstake.staking.service import lifecycle
from termstake.staking.service.rates import replace_all_rates

from .utils import OTHER_OWNER, OWNER, FakeSettlementClient, StakingTestDataMixin

TEST_PRIVATE_KEY = '9d61b19deffd5a60ba844af492ec2cc44449c5697b326919703bac031cae7f60'


class CreateStakingTest(TestCase):
    def test_create_snapshots_rate_and_dates(self):
        now = timezone.now()
        staking = lifecycle.create_staking(OWNER, Decimal('1000'), 30, transaction_hash='0xdeposit', now=now)

        assert staking.status == Staking.STATUS.active
        assert staking.interest_rate == Decimal('3.0')
        assert staking.start_date == now
        assert staking.end_date == now + datetime.timedelta(days=30)
        assert staking.expected_reward == Decimal('2.46575342')
        assert staking.actual_reward is None
        assert staking.return_transaction_hash is None
        assert staking.transaction_hash == '0xdeposit'

    def test_rate_change_does_not_touch_existing_stakings(self):
        staking = lifecycle.create_staking(OWNER, '1000', '365')
        replace_all_rates({30: 1, 90: 2, 180: 3, 365: 4})
        staking.refresh_from_db()
        assert staking.interest_rate == Decimal('15.0')
        assert lifecycle.create_staking(OWNER, '1000', 365).interest_rate == Decimal('4')

    def test_amount_must_be_positive(self):
        for amount in (Decimal('0'), Decimal('-5'), 'abc', None, Decimal('NaN')):
            with pytest.raises(errors.InvalidAmount):
                lifecycle.create_staking(OWNER, amount, 30)
        with pytest.raises(errors.InvalidAmount):
            lifecycle.create_staking(OWNER, Decimal('1.000000001'), 30)
        assert not Staking.objects.exists()

    def test_period_must_have_a_rate(self):
        with pytest.raises(errors.ConfigurationError):
            lifecycle.create_staking(OWNER, Decimal('10'), 45)
        with pytest.raises(errors.InvalidStakingPeriod):
            lifecycle.create_staking(OWNER, Decimal('10'), 'month')

    def test_wallet_address_must_be_longer_than_minimum(self):
        with pytest.raises(errors.InvalidWalletAddress):
            lifecycle.create_staking('a' * 10, Decimal('10'), 30)
        with pytest.raises(errors.InvalidWalletAddress):
            lifecycle.create_staking('', Decimal('10'), 30)
        assert lifecycle.create_staking('a' * 11, Decimal('10'), 30).wallet_address == 'a' * 11

    def test_deposit_hash_can_back_one_staking_only(self):
        lifecycle.create_staking(OWNER, Decimal('10'), 30, transaction_hash='0xdeposit')
        with pytest.raises(errors.DuplicateDepositHash):
            lifecycle.create_staking(OTHER_OWNER, Decimal('10'), 30, transaction_hash='0xdeposit')
        assert Staking.objects.count() == 1

    def test_validation_errors_share_a_base(self):
        with pytest.raises(errors.ValidationError):
            lifecycle.create_staking(OWNER, Decimal('0'), 30)


class SweepExpiredTest(StakingTestDataMixin, TestCase):
    def test_matured_staking_is_paid_and_completed(self):
        staking = self.create_matured_staking(staked_amount=Decimal('1000'), interest_rate=Decimal('3.0'))
        client = FakeSettlementClient(tx_hash=ConfirmedHash('0xabc'))

        report = lifecycle.sweep_expired(client=client)

        assert report.completed == 1
        assert report.total == 1
        assert client.payouts == [(OWNER, Decimal('1002.46575342'))]
        staking.refresh_from_db()
        assert staking.status == Staking.STATUS.completed
        assert staking.actual_reward == Decimal('2.46575342')
        assert staking.return_transaction_hash == '0xabc'
        assert staking.return_hash == ConfirmedHash('0xabc')

    def test_failed_settlement_leaves_record_for_retry(self):
        staking = self.create_matured_staking()
        failing = FakeSettlementClient(payout_error=errors.SettlementTimeout('timed out'))

        report = lifecycle.sweep_expired(client=failing)

        assert report.failed == 1
        assert report.outcomes[0].message == 'timed out'
        staking.refresh_from_db()
        assert staking.status == Staking.STATUS.active
        assert staking.actual_reward is None
        assert staking.return_transaction_hash is None

        working = FakeSettlementClient()
        report = lifecycle.sweep_expired(client=working)
        assert report.completed == 1
        staking.refresh_from_db()
        assert staking.status == Staking.STATUS.completed

    def test_unconfirmed_payout_is_a_failure(self):
        staking = self.create_matured_staking()
        report = lifecycle.sweep_expired(client=FakeSettlementClient(confirmed=False))
        assert report.failed == 1
        staking.refresh_from_db()
        assert staking.status == Staking.STATUS.active

    def test_sweep_pays_each_staking_once(self):
        self.create_matured_staking()
        client = FakeSettlementClient()
        lifecycle.sweep_expired(client=client)
        report = lifecycle.sweep_expired(client=client)
        assert report.total == 0
        assert len(client.payouts) == 1

    def test_unmatured_and_inactive_stakings_are_not_selected(self):
        self.create_staking_record()
        self.create_matured_staking(status=Staking.STATUS.invalid)
        self.create_matured_staking(status=Staking.STATUS.cancelled, actual_reward=Decimal('0'))
        client = FakeSettlementClient()
        report = lifecycle.sweep_expired(client=client)
        assert report.total == 0
        assert client.payouts == []

    def test_one_failure_does_not_stop_the_sweep(self):
        first = self.create_matured_staking(days_past_end=2)
        second = self.create_matured_staking(days_past_end=1, wallet_address=OTHER_OWNER)
        client = FakeSettlementClient()

        def fail_first(to_address, amount):
            client.payout_error = errors.SettlementError('down') if to_address == OWNER else None

        client.on_payout = fail_first
        report = lifecycle.sweep_expired(client=client)

        assert report.failed == 1
        assert report.completed == 1
        first.refresh_from_db()
        second.refresh_from_db()
        assert first.status == Staking.STATUS.active
        assert second.status == Staking.STATUS.completed

    @patch('termstake.staking.service.lifecycle.report_event')
    def test_status_change_during_payout_is_reported_as_orphaned(self, report_event_mock: MagicMock):
        staking = self.create_matured_staking()

        def cancel_concurrently(to_address, amount):
            Staking.objects.filter(pk=staking.pk).update(status=Staking.STATUS.cancelled, actual_reward=0)

        client = FakeSettlementClient(on_payout=cancel_concurrently)
        report = lifecycle.sweep_expired(client=client)

        assert report.orphaned == 1
        assert report.completed == 0
        report_event_mock.assert_called_once()
        staking.refresh_from_db()
        assert staking.status == Staking.STATUS.cancelled
        assert staking.return_transaction_hash is None

    def test_payout_without_hash_is_stored_as_unconfirmed(self):
        staking = self.create_matured_staking()
        lifecycle.sweep_expired(client=FakeSettlementClient(tx_hash=UnconfirmedHash('missing-hash')))
        staking.refresh_from_db()
        assert staking.status == Staking.STATUS.completed
        assert staking.return_transaction_hash == 'unconfirmed:missing-hash'
        assert staking.return_hash == UnconfirmedHash('missing-hash')

    @override_settings(
        SETTLEMENT_PRIVATE_KEY=TEST_PRIVATE_KEY,
        SETTLEMENT_POOL_ADDRESS='qcc1stakingpool',
        SETTLEMENT_ENABLE_REAL_TRANSACTIONS=False,
    )
    def test_dry_run_settlement(self):
        staking = self.create_matured_staking()
        report = lifecycle.sweep_expired(client=SettlementClient())
        assert report.completed == 1
        staking.refresh_from_db()
        assert staking.return_transaction_hash == 'unconfirmed:dry-run'

    @override_settings(SETTLEMENT_PRIVATE_KEY='', SETTLEMENT_POOL_ADDRESS='')
    def test_missing_settlement_configuration_fails_every_record(self):
        staking = self.create_matured_staking()
        report = lifecycle.sweep_expired(client=SettlementClient())
        assert report.failed == 1
        staking.refresh_from_db()
        assert staking.status == Staking.STATUS.active

    @patch('termstake.staking.service.lifecycle.report_event')
    def test_store_failure_after_payout_is_reported_as_orphaned(self, report_event_mock: MagicMock):
        staking = self.create_matured_staking()
        client = FakeSettlementClient(tx_hash=ConfirmedHash('0xpaid'))

        with patch.object(Staking, 'transition', side_effect=DatabaseError('db down')):
            outcome = lifecycle.settle_expired_staking(staking.pk, client)

        assert outcome.outcome == lifecycle.OUTCOME_ORPHANED
        assert outcome.tx_hash == ConfirmedHash('0xpaid')
        assert len(client.payouts) == 1
        report_event_mock.assert_called_once()
        assert report_event_mock.call_args.kwargs['level'] == 'error'
        staking.refresh_from_db()
        assert staking.status == Staking.STATUS.active

    def test_settle_single_skips_non_active_records(self):
        staking = self.create_matured_staking(status=Staking.STATUS.invalid)
        client = FakeSettlementClient()
        outcome = lifecycle.settle_expired_staking(staking.pk, client)
        assert outcome.outcome == lifecycle.OUTCOME_SKIPPED
        assert client.payouts == []
        assert lifecycle.settle_expired_staking(-1, client).outcome == lifecycle.OUTCOME_SKIPPED

    def test_settle_single_skips_unmatured_records(self):
        staking = self.create_staking_record()
        outcome = lifecycle.settle_expired_staking(staking.pk, FakeSettlementClient())
        assert outcome.outcome == lifecycle.OUTCOME_SKIPPED


class CancelStakingTest(StakingTestDataMixin, TestCase):
    def test_cancel_returns_principal_only(self):
        staking = self.create_staking_record(staked_amount=Decimal('500'))
        client = FakeSettlementClient(tx_hash=ConfirmedHash('0xrefund'))

        result = lifecycle.cancel_staking(staking.pk, OWNER, client=client)

        assert client.payouts == [(OWNER, Decimal('500'))]
        assert result.returned_amount == Decimal('500')
        assert result.forfeited_reward == staking.expected_reward
        assert result.tx_hash == ConfirmedHash('0xrefund')
        staking.refresh_from_db()
        assert staking.status == Staking.STATUS.cancelled
        assert staking.actual_reward == Decimal('0')
        assert staking.return_transaction_hash == '0xrefund'

    def test_only_owner_can_cancel(self):
        staking = self.create_staking_record()
        client = FakeSettlementClient()
        with pytest.raises(errors.NotOwner):
            lifecycle.cancel_staking(staking.pk, OTHER_OWNER, client=client)
        assert client.payouts == []
        staking.refresh_from_db()
        assert staking.status == Staking.STATUS.active

    def test_cancel_unknown_staking(self):
        with pytest.raises(errors.NotFound):
            lifecycle.cancel_staking(123456, OWNER, client=FakeSettlementClient())

    def test_terminal_stakings_cannot_be_cancelled(self):
        staking = self.create_matured_staking(status=Staking.STATUS.completed, actual_reward=Decimal('1'))
        client = FakeSettlementClient()
        with pytest.raises(errors.InvalidState):
            lifecycle.cancel_staking(staking.pk, OWNER, client=client)
        assert client.payouts == []

    def test_failed_payout_keeps_staking_active(self):
        staking = self.create_staking_record()
        with pytest.raises(errors.SettlementError):
            lifecycle.cancel_staking(staking.pk, OWNER, client=FakeSettlementClient(payout_error=errors.SettlementError()))
        with pytest.raises(errors.PayoutNotConfirmed):
            lifecycle.cancel_staking(staking.pk, OWNER, client=FakeSettlementClient(confirmed=False))
        staking.refresh_from_db()
        assert staking.status == Staking.STATUS.active
        assert staking.actual_reward is None

    @patch('termstake.staking.service.lifecycle.report_event')
    def test_store_failure_after_cancel_payout_is_reported(self, report_event_mock: MagicMock):
        staking = self.create_staking_record(staked_amount=Decimal('500'))
        client = FakeSettlementClient(tx_hash=ConfirmedHash('0xrefund'))

        with patch.object(Staking, 'transition', side_effect=DatabaseError('db down')):
            with pytest.raises(errors.StoreError):
                lifecycle.cancel_staking(staking.pk, OWNER, client=client)

        assert client.payouts == [(OWNER, Decimal('500'))]
        report_event_mock.assert_called_once()
        assert report_event_mock.call_args.kwargs['level'] == 'error'
        staking.refresh_from_db()
        assert staking.status == Staking.STATUS.active

    def test_cancelled_staking_is_never_swept(self):
        staking = self.create_matured_staking()
        lifecycle.cancel_staking(staking.pk, OWNER, client=FakeSettlementClient())
        client = FakeSettlementClient()
        assert lifecycle.sweep_expired(client=client).total == 0
        assert client.payouts == []


class StakingTransitionTest(StakingTestDataMixin, TestCase):
    def test_allowed_transition_moves_only_matching_status(self):
        staking = self.create_staking_record()
        assert Staking.transition(staking.pk, Staking.STATUS.active, Staking.STATUS.invalid)
        assert not Staking.transition(staking.pk, Staking.STATUS.active, Staking.STATUS.completed)
        staking.refresh_from_db()
        assert staking.status == Staking.STATUS.invalid

    def test_illegal_transitions_raise(self):
        illegal_moves = [
            (Staking.STATUS.completed, Staking.STATUS.active),
            (Staking.STATUS.cancelled, Staking.STATUS.invalid),
            (Staking.STATUS.invalid, Staking.STATUS.completed),
            (Staking.STATUS.active, Staking.STATUS.active),
        ]
        for from_status, to_status in illegal_moves:
            staking = self.create_staking_record(status=from_status)
            with pytest.raises(errors.InvalidState):
                Staking.transition(staking.pk, from_status, to_status)
            staking.refresh_from_db()
            assert staking.status == from_status


class QueryStakingsTest(StakingTestDataMixin, TestCase):
    def test_list_stakings_paginates(self):
        for _ in range(5):
            self.create_staking_record()
        self.create_staking_record(status=Staking.STATUS.invalid)

        page = lifecycle.list_stakings(page=2, limit=2)
        assert len(page['stakings']) == 2
        assert page['pagination'] == {'page': 2, 'limit': 2, 'total': 6, 'pages': 3}

        invalid = lifecycle.list_stakings(status=Staking.STATUS.invalid)
        assert invalid['pagination']['total'] == 1

    def test_list_stakings_validates_arguments(self):
        with pytest.raises(errors.ValidationError):
            lifecycle.list_stakings(page=0)
        with pytest.raises(errors.ValidationError):
            lifecycle.list_stakings(limit=101)
        with pytest.raises(errors.ValidationError):
            lifecycle.list_stakings(status='paid')

    def test_list_by_wallet(self):
        self.create_staking_record()
        self.create_staking_record(wallet_address=OTHER_OWNER)
        assert [s.wallet_address for s in lifecycle.list_stakings_by_wallet(OWNER)] == [OWNER]

    def test_get_staking(self):
        staking = self.create_staking_record()
        assert lifecycle.get_staking(staking.pk) == staking
        with pytest.raises(errors.NotFound):
            lifecycle.get_staking(staking.pk + 1)

    def test_upcoming_expirations_and_preview(self):
        now = timezone.now()
        soon = self.create_staking_record(start_date=now - datetime.timedelta(days=28))
        self.create_staking_record(start_date=now - datetime.timedelta(days=10))
        matured = self.create_matured_staking(staked_amount=Decimal('1000'))

        assert lifecycle.find_upcoming_expirations(days=3, now=now) == [soon]
        preview = lifecycle.preview_expired(now=now)
        assert [item['staking_id'] for item in preview] == [matured.pk]
        assert preview[0]['total'] == Decimal('1002.46575342')
