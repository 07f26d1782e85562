import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='AdminCredential',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('password', models.CharField(max_length=128)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Admin credential',
            },
        ),
        migrations.CreateModel(
            name='InterestRate',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('period', models.PositiveIntegerField(help_text='Days', unique=True)),
                ('rate', models.DecimalField(decimal_places=4, help_text='Annual percent', max_digits=10)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Interest rate',
                'ordering': ['period'],
            },
        ),
        migrations.CreateModel(
            name='Staking',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('wallet_address', models.CharField(db_index=True, max_length=255)),
                ('staked_amount', models.DecimalField(decimal_places=8, max_digits=30)),
                ('staking_period', models.PositiveIntegerField(help_text='Days')),
                ('interest_rate', models.DecimalField(decimal_places=4, help_text='Annual percent', max_digits=10)),
                ('start_date', models.DateTimeField()),
                ('end_date', models.DateTimeField(db_index=True)),
                ('expected_reward', models.DecimalField(decimal_places=8, max_digits=30)),
                ('actual_reward', models.DecimalField(blank=True, decimal_places=8, max_digits=30, null=True)),
                ('transaction_hash', models.CharField(blank=True, db_index=True, max_length=255, null=True)),
                ('return_transaction_hash', models.CharField(blank=True, max_length=255, null=True)),
                ('status', models.CharField(
                    choices=[
                        ('active', 'Active'),
                        ('completed', 'Completed'),
                        ('cancelled', 'Cancelled'),
                        ('invalid', 'Invalid'),
                    ],
                    db_index=True,
                    default='active',
                    max_length=16,
                )),
                ('created_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Staking',
                'verbose_name_plural': 'Stakings',
                'ordering': ['-created_at', '-id'],
            },
        ),
    ]
