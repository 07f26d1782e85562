import datetime
from typing import Tuple

from django.utils import timezone


def local_now():
    """ Return current time as a timezone aware datetime in the configured timezone

        The server environment may have a different timezone, so calendar day
          computations should always start from this value instead of the
          naive system clock.
    """
    return timezone.localtime(timezone.now())


def to_local(dt: datetime.datetime) -> datetime.datetime:
    if timezone.is_naive(dt):
        dt = timezone.make_aware(dt, datetime.timezone.utc)
    return timezone.localtime(dt)


def get_day_bounds(day: datetime.date) -> Tuple[datetime.datetime, datetime.datetime]:
    """Return the [start, end) aware datetimes of a calendar day in the configured timezone."""
    tz = timezone.get_current_timezone()
    start = timezone.make_aware(datetime.datetime.combine(day, datetime.time.min), tz)
    end = timezone.make_aware(datetime.datetime.combine(day + datetime.timedelta(days=1), datetime.time.min), tz)
    return start, end


def get_previous_day_bounds(now: datetime.datetime = None) -> Tuple[datetime.datetime, datetime.datetime]:
    now = to_local(now) if now else local_now()
    return get_day_bounds(now.date() - datetime.timedelta(days=1))
