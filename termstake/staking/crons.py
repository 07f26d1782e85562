"""Staking Crons"""
from django_cron import Schedule

from termstake.base.crons import CronJob
from termstake.staking.service.lifecycle import sweep_expired
from termstake.staking.service.reconciliation import reconcile


class SweepExpiredStakingsCron(CronJob):
    schedule = Schedule(run_every_mins=10)
    code = 'staking_sweep_expired'

    def run(self):
        report = sweep_expired()
        return f'{report.completed} completed, {report.failed} failed, {report.orphaned} orphaned'


class ReconcileStakingsCron(CronJob):
    schedule = Schedule(run_at_times=['01:00'])
    code = 'staking_reconcile'

    def run(self):
        report = reconcile()
        return (
            f'{len(report.invalidated)} invalidated, {len(report.recovered)} recovered, '
            f'{len(report.purged)} purged, {len(report.errors)} errors'
        )
