import time

from django_cron import CronJobBase, Schedule

from termstake.base.logging import cron_logger, report_exception
from termstake.base.metrics import metric_incr


class CronJob(CronJobBase):
    """
    A base class for defining cron jobs in a Django application.

    Attributes:
        schedule (Schedule): The schedule defining the execution frequency.
        code (str): A unique code for the cron job.

    Example:

        >>> class SweepExpiredStakingsCron(CronJob):
        >>>     schedule = Schedule(run_every_mins=10)
        >>>     code = 'sweep_expired_stakings'
    """

    schedule: Schedule
    code = None

    @classmethod
    def module_name(cls):
        """Return module name of running cron class, used for reporting and metrics."""
        module_name = cls.__module__.split('.')
        if len(module_name) < 2:
            return 'other'
        return module_name[1]

    def do(self):
        started = time.monotonic()
        cron_logger.info('Cron %s started', self.code)
        try:
            result = self.run()
        except Exception:
            metric_incr('metric_cron_failures', labels=(self.module_name(), self.code))
            report_exception(cron=self.code)
            raise
        cron_logger.info('Cron %s done in %.2fs', self.code, time.monotonic() - started)
        metric_incr('metric_cron_runs', labels=(self.module_name(), self.code))
        return result

    def run(self):
        raise NotImplementedError
