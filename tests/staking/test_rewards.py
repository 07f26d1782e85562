import datetime
from decimal import Decimal

import pytest
from django.utils import timezone

from termstake.staking.rewards import (
    analyze_progress,
    compute_compound_reward,
    compute_early_withdrawal_penalty,
    compute_expected_returns,
    compute_reward,
    to_decimal,
)


class TestComputeReward:
    def test_full_year(self):
        assert compute_reward(Decimal('1000'), Decimal('15'), 365) == Decimal('150.00000000')

    def test_partial_year_is_rounded_to_eight_places(self):
        assert compute_reward(Decimal('1000'), Decimal('3.0'), 30) == Decimal('2.46575342')
        assert compute_reward(Decimal('100'), Decimal('6.0'), 90) == Decimal('1.47945205')

    def test_rounding_is_half_up(self):
        assert compute_reward(Decimal('0.000000005'), Decimal('100'), 365) == Decimal('0.00000001')
        assert compute_reward(Decimal('0.000000015'), Decimal('100'), 365) == Decimal('0.00000002')

    def test_float_inputs_do_not_leak_binary_error(self):
        assert compute_reward(0.1, 10, 365) == Decimal('0.01000000')
        assert to_decimal(0.1) == Decimal('0.1')

    def test_zero_values(self):
        assert compute_reward(Decimal('0'), Decimal('15'), 365) == Decimal('0')
        assert compute_reward(Decimal('1000'), Decimal('0'), 365) == Decimal('0')

    def test_negative_inputs_are_rejected(self):
        with pytest.raises(ValueError):
            compute_reward(Decimal('-1'), Decimal('15'), 365)
        with pytest.raises(ValueError):
            compute_reward(Decimal('1'), Decimal('-15'), 365)
        with pytest.raises(ValueError):
            compute_reward(Decimal('1'), Decimal('15'), -1)


class TestEarlyWithdrawalPenalty:
    def test_default_keeps_half(self):
        assert compute_early_withdrawal_penalty(Decimal('10')) == Decimal('5.00000000')

    def test_custom_rate(self):
        assert compute_early_withdrawal_penalty(Decimal('2.46575342'), Decimal('0.25')) == Decimal('1.84931507')
        assert compute_early_withdrawal_penalty(Decimal('10'), 1) == Decimal('0')
        assert compute_early_withdrawal_penalty(Decimal('10'), 0) == Decimal('10')

    def test_rate_out_of_range(self):
        with pytest.raises(ValueError):
            compute_early_withdrawal_penalty(Decimal('10'), Decimal('1.5'))
        with pytest.raises(ValueError):
            compute_early_withdrawal_penalty(Decimal('10'), Decimal('-0.1'))


def test_compound_reward():
    assert compute_compound_reward(Decimal('1000'), Decimal('36.5'), 1) == Decimal('1.00000000')
    assert compute_compound_reward(Decimal('1000'), Decimal('36.5'), 2) == Decimal('2.00100000')


def test_expected_returns():
    returns = compute_expected_returns(Decimal('1000'), Decimal('15'), 365)
    assert returns['reward'] == Decimal('150')
    assert returns['total'] == Decimal('1150')
    assert returns['roi'] == Decimal('15')
    assert returns['staking_period'] == 365


class TestAnalyzeProgress:
    start = datetime.datetime(2024, 1, 1, tzinfo=datetime.timezone.utc)
    end = start + datetime.timedelta(days=30)

    def test_halfway(self):
        progress = analyze_progress(self.start, self.end, self.start + datetime.timedelta(days=15))
        assert progress['total_days'] == 30
        assert progress['elapsed_days'] == 15
        assert progress['remaining_days'] == 15
        assert progress['progress_percent'] == Decimal('50.00')
        assert progress['state'] == 'active'

    def test_expiring_soon(self):
        progress = analyze_progress(self.start, self.end, self.end - datetime.timedelta(days=2))
        assert progress['state'] == 'expiring_soon'
        assert progress['remaining_days'] == 2

    def test_expired(self):
        progress = analyze_progress(self.start, self.end, self.end + datetime.timedelta(hours=1))
        assert progress['state'] == 'expired'
        assert progress['remaining_days'] == 0
        assert progress['elapsed_days'] == 30
        assert progress['progress_percent'] == Decimal('100.00')

    def test_defaults_to_current_time(self):
        start = timezone.now() - datetime.timedelta(days=1)
        progress = analyze_progress(start, start + datetime.timedelta(days=365))
        assert progress['state'] == 'active'
        assert progress['elapsed_days'] == 1
