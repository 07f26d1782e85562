import logging
import sys
import traceback

import sentry_sdk
from django.conf import settings

logger = logging.getLogger('app')
cron_logger = logging.getLogger('cron_file_logger')


def report_exception(**kwargs):
    if not settings.ENABLE_SENTRY:
        traceback.print_exception(*sys.exc_info())
        return None
    with sentry_sdk.new_scope() as scope:
        for key, value in kwargs.items():
            scope.set_extra(key, value)
        return sentry_sdk.capture_exception()


def report_event(message, *, level='warning', **kwargs):
    """Send a notable event to sentry, or to the app log when sentry is disabled."""
    if settings.METRICS_BACKEND == 'sentry':
        if not settings.ENABLE_SENTRY:
            return
        with sentry_sdk.new_scope() as scope:
            for key, value in kwargs.items():
                scope.set_extra(key, value)
            sentry_sdk.capture_message(message, level=level)
    else:
        logger.log(logging.getLevelName(level.upper()), '[EVENT] %s %s', message, kwargs)
