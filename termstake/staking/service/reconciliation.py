"""Re-validation of recorded deposit transactions

Recent stakings whose deposit hash is unknown to the settlement network are
marked invalid. Invalid stakings get a second look after a cooldown: they are
restored when the deposit shows up, and purged once they are old enough.
"""
import datetime
import time
from dataclasses import dataclass, field
from typing import List, Optional

from django.conf import settings
from django.db import DatabaseError
from django.utils import timezone

from termstake.base.calendar import get_previous_day_bounds
from termstake.base.logging import logger
from termstake.base.metrics import metric_incr
from termstake.blockchain.settlement import SettlementClient
from termstake.staking import errors
from termstake.staking.helpers import store_errors
from termstake.staking.metrics import Metrics
from termstake.staking.models import Staking

VALID = 'valid'
INVALIDATED = 'invalidated'
RECOVERED = 'recovered'
PURGED = 'purged'
STILL_INVALID = 'still_invalid'
CHANGED = 'changed'
ERROR = 'error'


@dataclass
class ReconciliationReport:
    checked: int = 0
    valid: List[int] = field(default_factory=list)
    invalidated: List[int] = field(default_factory=list)
    recovered: List[int] = field(default_factory=list)
    purged: List[int] = field(default_factory=list)
    still_invalid: List[int] = field(default_factory=list)
    changed: List[int] = field(default_factory=list)
    errors: List[dict] = field(default_factory=list)

    def record(self, result: str, staking_id: int, message: str = '') -> None:
        self.checked += 1
        if result == ERROR:
            self.errors.append({'staking_id': staking_id, 'error': message})
        else:
            getattr(self, result).append(staking_id)
        metric_incr(str(Metrics.RECONCILIATION_OUTCOME), labels=(result,))

    def merge(self, other: 'ReconciliationReport') -> 'ReconciliationReport':
        merged = ReconciliationReport(checked=self.checked + other.checked)
        for name in (VALID, INVALIDATED, RECOVERED, PURGED, STILL_INVALID, CHANGED, 'errors'):
            setattr(merged, name, getattr(self, name) + getattr(other, name))
        return merged

    def as_dict(self) -> dict:
        return {
            'checked': self.checked,
            'valid': len(self.valid),
            'invalidated': len(self.invalidated),
            'recovered': len(self.recovered),
            'purged': len(self.purged),
            'still_invalid': len(self.still_invalid),
            'changed': len(self.changed),
            'errors': self.errors,
        }


def _query(client: SettlementClient, tx_hash: str):
    try:
        return client.query_transaction(tx_hash), None
    except errors.SettlementError as e:
        return None, e.message or e.code


def _pause(delay: float) -> None:
    if delay:
        time.sleep(delay)


@store_errors
def scan_recent(client: Optional[SettlementClient] = None, now: Optional[datetime.datetime] = None,
                delay: Optional[float] = None) -> ReconciliationReport:
    """Check deposits of active stakings created during the previous calendar day."""
    client = client or SettlementClient()
    delay = settings.STAKING_RECONCILIATION_DELAY if delay is None else delay
    day_start, day_end = get_previous_day_bounds(now)
    report = ReconciliationReport()

    candidates = list(
        Staking.objects.filter(
            status=Staking.STATUS.active,
            created_at__gte=day_start,
            created_at__lt=day_end,
            transaction_hash__isnull=False,
        ).exclude(transaction_hash='').order_by('-id').values_list('id', 'transaction_hash')
    )
    for staking_id, tx_hash in candidates:
        result, error = _query(client, tx_hash)
        _pause(delay)
        if error:
            logger.warning('Deposit check of staking #%s failed: %s', staking_id, error)
            report.record(ERROR, staking_id, error)
            continue
        if result.found:
            report.record(VALID, staking_id)
            continue
        try:
            invalidated = Staking.transition(staking_id, Staking.STATUS.active, Staking.STATUS.invalid)
        except DatabaseError as e:
            report.record(ERROR, staking_id, str(e))
            continue
        if invalidated:
            logger.warning('Staking #%s marked invalid, deposit %s was not found', staking_id, tx_hash)
            report.record(INVALIDATED, staking_id)
        else:
            report.record(CHANGED, staking_id)

    logger.info('Recent deposits reconciliation: %s', report.as_dict())
    return report


@store_errors
def scan_stale(client: Optional[SettlementClient] = None, now: Optional[datetime.datetime] = None,
               cooldown: Optional[datetime.timedelta] = None, purge_age: Optional[datetime.timedelta] = None,
               delay: Optional[float] = None) -> ReconciliationReport:
    """Give invalid stakings a second look once their cooldown has passed."""
    client = client or SettlementClient()
    now = now or timezone.now()
    if cooldown is None:
        cooldown = datetime.timedelta(days=settings.STAKING_RECONCILIATION_STALE_COOLDOWN_DAYS)
    if purge_age is None:
        purge_age = datetime.timedelta(days=settings.STAKING_RECONCILIATION_PURGE_AGE_DAYS)
    delay = settings.STAKING_RECONCILIATION_DELAY if delay is None else delay
    report = ReconciliationReport()

    candidates = list(
        Staking.objects.filter(
            status=Staking.STATUS.invalid,
            created_at__lte=now - cooldown,
            transaction_hash__isnull=False,
        ).exclude(transaction_hash='').order_by('id').values_list('id', 'transaction_hash', 'created_at')
    )
    for staking_id, tx_hash, created_at in candidates:
        result, error = _query(client, tx_hash)
        _pause(delay)
        if error:
            logger.warning('Deposit re-check of staking #%s failed: %s', staking_id, error)
            report.record(ERROR, staking_id, error)
            continue
        try:
            if result.found:
                if Staking.transition(staking_id, Staking.STATUS.invalid, Staking.STATUS.active):
                    logger.info('Staking #%s recovered, deposit %s was found', staking_id, tx_hash)
                    report.record(RECOVERED, staking_id)
                else:
                    report.record(CHANGED, staking_id)
            elif now - created_at >= purge_age:
                if Staking.purge_invalid(staking_id):
                    logger.warning('Staking #%s purged, deposit %s never appeared', staking_id, tx_hash)
                    report.record(PURGED, staking_id)
                else:
                    report.record(CHANGED, staking_id)
            else:
                report.record(STILL_INVALID, staking_id)
        except DatabaseError as e:
            report.record(ERROR, staking_id, str(e))

    logger.info('Stale invalid stakings reconciliation: %s', report.as_dict())
    return report


def reconcile(client: Optional[SettlementClient] = None, now: Optional[datetime.datetime] = None) -> ReconciliationReport:
    client = client or SettlementClient()
    return scan_recent(client=client, now=now).merge(scan_stale(client=client, now=now))
