from decimal import Decimal

from django.db import migrations

DEFAULT_RATES = {
    30: Decimal('3.0'),
    90: Decimal('6.0'),
    180: Decimal('10.0'),
    365: Decimal('15.0'),
}


def add_default_interest_rates(apps, schema_editor):
    InterestRate = apps.get_model('staking', 'InterestRate')
    for period, rate in DEFAULT_RATES.items():
        InterestRate.objects.get_or_create(period=period, defaults={'rate': rate})


class Migration(migrations.Migration):

    dependencies = [
        ('staking', '0001_initial'),
    ]

    operations = [
        migrations.RunPython(add_default_interest_rates, migrations.RunPython.noop),
    ]
