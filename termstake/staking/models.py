import datetime

from django.contrib.auth.hashers import check_password, make_password
from django.db import models
from django.utils import timezone
from model_utils import Choices

from termstake.blockchain import hashes
from termstake.staking import errors


class Staking(models.Model):
    STATUS = Choices(
        ('active', 'Active'),
        ('completed', 'Completed'),
        ('cancelled', 'Cancelled'),
        ('invalid', 'Invalid'),
    )
    # Allowed status moves, completed and cancelled are terminal
    TRANSITIONS = {
        STATUS.active: {STATUS.completed, STATUS.cancelled, STATUS.invalid},
        STATUS.invalid: {STATUS.active},
    }

    wallet_address = models.CharField(max_length=255, db_index=True)
    staked_amount = models.DecimalField(max_digits=30, decimal_places=8)
    staking_period = models.PositiveIntegerField(help_text='Days')
    interest_rate = models.DecimalField(max_digits=10, decimal_places=4, help_text='Annual percent')
    start_date = models.DateTimeField()
    end_date = models.DateTimeField(db_index=True)
    expected_reward = models.DecimalField(max_digits=30, decimal_places=8)
    actual_reward = models.DecimalField(max_digits=30, decimal_places=8, null=True, blank=True)
    transaction_hash = models.CharField(max_length=255, null=True, blank=True, db_index=True)
    return_transaction_hash = models.CharField(max_length=255, null=True, blank=True)
    status = models.CharField(max_length=16, choices=STATUS, default=STATUS.active, db_index=True)
    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'Staking'
        verbose_name_plural = 'Stakings'
        ordering = ['-created_at', '-id']

    def __str__(self):
        return f'Staking#{self.pk} {self.wallet_address} {self.staked_amount} {self.status}'

    @property
    def return_hash(self):
        return hashes.from_db(self.return_transaction_hash)

    @property
    def total_return(self):
        return self.staked_amount + (self.actual_reward or 0)

    def is_matured(self, now=None) -> bool:
        return self.end_date <= (now or timezone.now())

    @classmethod
    def compute_end_date(cls, start_date: datetime.datetime, period: int) -> datetime.datetime:
        return start_date + datetime.timedelta(days=period)

    @classmethod
    def transition(cls, pk, from_status, to_status, **fields) -> bool:
        """Move one staking between statuses, only if it is still in ``from_status``.

        The conditional update is the single write path for status changes, a
        False result means another process already moved the record.
        """
        if to_status not in cls.TRANSITIONS.get(from_status, ()):
            raise errors.InvalidState(f'Cannot move staking from {from_status} to {to_status}')
        updated = cls.objects.filter(pk=pk, status=from_status).update(
            status=to_status,
            updated_at=timezone.now(),
            **fields,
        )
        return updated == 1

    @classmethod
    def purge_invalid(cls, pk) -> bool:
        deleted, _ = cls.objects.filter(pk=pk, status=cls.STATUS.invalid).delete()
        return deleted == 1


class InterestRate(models.Model):
    period = models.PositiveIntegerField(unique=True, help_text='Days')
    rate = models.DecimalField(max_digits=10, decimal_places=4, help_text='Annual percent')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'Interest rate'
        ordering = ['period']

    def __str__(self):
        return f'{self.period} days: {self.rate}%'


class AdminCredential(models.Model):
    """The single admin secret guarding rate changes and manual settlement."""

    password = models.CharField(max_length=128)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'Admin credential'

    @classmethod
    def get(cls):
        return cls.objects.order_by('pk').first()

    @classmethod
    def authenticate(cls, secret) -> bool:
        credential = cls.get()
        if not credential or not secret:
            return False
        return check_password(secret, credential.password)

    @classmethod
    def set_password(cls, new_password):
        credential = cls.get() or cls()
        credential.password = make_password(new_password)
        credential.save()
        return credential

    @classmethod
    def get_status(cls) -> dict:
        credential = cls.get()
        return {
            'has_password': credential is not None,
            'updated_at': credential.updated_at if credential else None,
        }
