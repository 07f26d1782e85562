from django.core.management.base import BaseCommand, CommandError

from termstake.staking.service.reconciliation import reconcile, scan_recent, scan_stale


class Command(BaseCommand):
    """
        Re-validate recorded deposit transactions against the settlement network.

        Run with:
            python manage.py reconcilestakings [--recent-only | --stale-only]
    """

    def add_arguments(self, parser):
        parser.add_argument('--recent-only', action='store_true', help='only check deposits of yesterday')
        parser.add_argument('--stale-only', action='store_true', help='only re-check invalid stakings')

    def handle(self, *args, **kwargs):
        recent_only = kwargs.get('recent_only')
        stale_only = kwargs.get('stale_only')
        if recent_only and stale_only:
            raise CommandError('--recent-only and --stale-only are mutually exclusive')

        if recent_only:
            report = scan_recent()
        elif stale_only:
            report = scan_stale()
        else:
            report = reconcile()

        for error in report.errors:
            self.stderr.write(f'  #{error["staking_id"]} {error["error"]}')
        summary = report.as_dict()
        summary.pop('errors')
        self.stdout.write(self.style.SUCCESS(
            ', '.join(f'{key}: {value}' for key, value in summary.items()) + f', errors: {len(report.errors)}'
        ))
