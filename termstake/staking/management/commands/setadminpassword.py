from getpass import getpass

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from termstake.staking.models import AdminCredential


class Command(BaseCommand):
    """
        Set the admin password guarding rate changes and manual settlement.

        Run with:
            python manage.py setadminpassword --password=<password>
        or simply:
            python manage.py setadminpassword
        and enter the password in the shell
    """

    def add_arguments(self, parser):
        parser.add_argument('--password', type=str, nargs='?', help='the new admin password')

    def handle(self, *args, **kwargs):
        password = kwargs.get('password')
        if not password:
            password = getpass('Enter new admin password: ')
            if password != getpass('Repeat password: '):
                raise CommandError('Passwords do not match')
        if len(password) < settings.STAKING_MIN_ADMIN_PASSWORD_LENGTH:
            raise CommandError(f'Password must be at least {settings.STAKING_MIN_ADMIN_PASSWORD_LENGTH} characters')
        AdminCredential.set_password(password)
        self.stdout.write(self.style.SUCCESS('Admin password updated'))
