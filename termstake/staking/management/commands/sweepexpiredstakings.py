from django.core.management.base import BaseCommand

from termstake.staking.service.lifecycle import find_upcoming_expirations, preview_expired, sweep_expired


class Command(BaseCommand):
    """
        Settle every matured staking, paying principal and reward to its owner.

        Run with:
            python manage.py sweepexpiredstakings
        or list what would be paid without contacting the settlement network:
            python manage.py sweepexpiredstakings --dry-run
    """

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='only list matured stakings and their payouts',
        )
        parser.add_argument(
            '--upcoming',
            type=int,
            nargs='?',
            const=3,
            help='also list stakings maturing within the given number of days',
        )

    def handle(self, *args, **kwargs):
        if kwargs.get('upcoming'):
            upcoming = find_upcoming_expirations(days=kwargs['upcoming'])
            self.stdout.write(f'{len(upcoming)} stakings mature within {kwargs["upcoming"]} days')
            for staking in upcoming:
                self.stdout.write(f'  #{staking.pk} {staking.wallet_address} {staking.staked_amount} {staking.end_date}')

        if kwargs.get('dry_run'):
            preview = preview_expired()
            self.stdout.write(f'{len(preview)} matured stakings would be settled')
            for item in preview:
                self.stdout.write(
                    f'  #{item["staking_id"]} {item["wallet_address"]} '
                    f'{item["staked_amount"]} + {item["reward"]} = {item["total"]}'
                )
            return

        report = sweep_expired()
        for outcome in report.outcomes:
            self.stdout.write(f'  #{outcome.staking_id} {outcome.outcome} {outcome.message}')
        self.stdout.write(self.style.SUCCESS(
            f'{report.total} processed: {report.completed} completed, {report.failed} failed, '
            f'{report.skipped} skipped, {report.orphaned} orphaned'
        ))
